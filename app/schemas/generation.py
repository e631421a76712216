"""Pydantic models for the generation inputs, the model's JSON outputs and the event protocol.

Wire shapes are camelCase (that is what the model is prompted to emit and what
the browser consumes); Python attributes are snake_case.
"""
from typing import Any, Dict, List, Literal, Optional
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel
from app.core.workflow import EventType, GenerationStage

SiteType = Literal["landing-page", "business", "ecommerce", "saas", "local-service"]
StyleOption = Literal["minimal", "bold", "elegant", "playful", "corporate"]


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# --------------------------------------------------------------------------
# Generation config (user input)
# --------------------------------------------------------------------------

class BusinessInfo(CamelModel):
    name: str
    tagline: Optional[str] = None
    description: str
    industry: str
    target_audience: str


class Branding(CamelModel):
    primary_color: str
    secondary_color: str
    accent_color: str
    surface_color: Optional[str] = None
    font_heading: str
    font_body: str
    logo_url: Optional[str] = None
    style: StyleOption = "minimal"


class SectionConfig(CamelModel):
    id: str
    type: str
    content: Optional[Dict[str, str]] = None
    items: Optional[List[Dict[str, Any]]] = None
    variant: Optional[str] = None
    order: int = 0


class ProductConfig(CamelModel):
    name: str
    description: str
    price: float
    image_url: Optional[str] = None
    category: Optional[str] = None


class EcommerceConfig(CamelModel):
    products: List[ProductConfig] = []
    currency: str = "USD"
    cart_enabled: bool = True
    checkout_type: Literal["simple", "multi-step"] = "simple"


class FeatureConfig(CamelModel):
    title: str
    description: str
    icon: Optional[str] = None


class PricingTier(CamelModel):
    name: str
    price: float
    interval: Literal["month", "year"] = "month"
    features: List[str] = []
    highlighted: bool = False


class SaasConfig(CamelModel):
    features: List[FeatureConfig] = []
    pricing_tiers: List[PricingTier] = []
    has_auth: bool = False
    has_dashboard: bool = False


class SocialLink(CamelModel):
    platform: str
    url: str


class NavigationConfig(CamelModel):
    navbar_style: Optional[str] = None
    navbar_position: Optional[str] = None
    footer_style: Optional[str] = None
    social_links: List[SocialLink] = []


class GenerationConfig(CamelModel):
    site_type: SiteType
    business: BusinessInfo
    branding: Branding
    sections: List[SectionConfig] = []
    ecommerce: Optional[EcommerceConfig] = None
    saas: Optional[SaasConfig] = None
    ai_prompt: Optional[str] = ""
    reference_urls: Optional[List[str]] = None
    navigation: Optional[NavigationConfig] = None


# --------------------------------------------------------------------------
# Stage 2 -- Design system (returned as JSON by the model)
# --------------------------------------------------------------------------

class ColorScales(CamelModel):
    primary: Dict[str, str]
    secondary: Dict[str, str]
    accent: Dict[str, str]
    neutral: Dict[str, str]


class TypeScaleEntry(CamelModel):
    size: str
    line_height: str
    weight: str


class Typography(CamelModel):
    heading_font: str
    body_font: str
    scale: Dict[str, TypeScaleEntry]


class DesignSystem(CamelModel):
    colors: ColorScales
    typography: Typography
    spacing: Dict[str, str]
    border_radius: Dict[str, str]
    shadows: Dict[str, str]


# --------------------------------------------------------------------------
# Stage 3 -- Page blueprint (returned as JSON by the model)
# --------------------------------------------------------------------------

class PageSection(CamelModel):
    component_name: str = Field(min_length=1)
    props: Dict[str, Any] = {}
    order: int = Field(ge=0)


class PageMetadata(CamelModel):
    title: str
    description: str


class BlueprintPage(CamelModel):
    path: str = Field(min_length=1)
    title: str = Field(min_length=1)
    sections: List[PageSection] = Field(min_length=1)
    metadata: PageMetadata


class PageBlueprint(CamelModel):
    pages: List[BlueprintPage] = Field(min_length=1)
    shared_components: List[str]
    data_requirements: Dict[str, Any] = {}

    def expected_component_names(self) -> List[str]:
        """Distinct section and shared component names, in first-seen order."""
        names: List[str] = []
        for page in self.pages:
            for section in page.sections:
                if section.component_name not in names:
                    names.append(section.component_name)
        for shared in self.shared_components:
            if shared not in names:
                names.append(shared)
        return names

    def expected_file_count(self) -> int:
        return len(self.expected_component_names()) + len(self.pages)


# --------------------------------------------------------------------------
# Event protocol
# --------------------------------------------------------------------------

class FileRef(CamelModel):
    path: str
    content: str


class GenerationEvent(CamelModel):
    type: EventType
    stage: Optional[GenerationStage] = None
    component_name: Optional[str] = None
    chunk: Optional[str] = None
    file: Optional[FileRef] = None
    total_files: Optional[int] = None
    completed_files: Optional[int] = None
    error: Optional[str] = None

    def to_wire(self) -> Dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)

    @property
    def is_terminal(self) -> bool:
        return self.type in (EventType.GENERATION_COMPLETE, EventType.ERROR)
