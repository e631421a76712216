"""Prompt builders for each model call the pipeline makes."""
from typing import Dict, List, Optional, Tuple
from app.schemas.generation import DesignSystem, GenerationConfig, PageBlueprint

DESIGN_SYSTEM_PROMPT = """You are a design system expert. Given a business description and branding preferences, generate a comprehensive Tailwind CSS design system as a JSON object.

Return ONLY valid JSON. No markdown, no explanation, no code fences.

The JSON must match this exact structure:
{
  "colors": {
    "primary":   { "50": "#...", "100": "#...", ..., "900": "#...", "950": "#..." },
    "secondary": { "50": "#...", "100": "#...", ..., "900": "#...", "950": "#..." },
    "accent":    { "50": "#...", "100": "#...", ..., "900": "#...", "950": "#..." },
    "neutral":   { "50": "#...", "100": "#...", ..., "900": "#...", "950": "#..." }
  },
  "typography": {
    "headingFont": "Font Name",
    "bodyFont": "Font Name",
    "scale": {
      "xs":   { "size": "0.75rem",  "lineHeight": "1rem",    "weight": "400" },
      "base": { "size": "1rem",     "lineHeight": "1.5rem",  "weight": "400" },
      "xl":   { "size": "1.25rem",  "lineHeight": "1.75rem", "weight": "600" },
      "4xl":  { "size": "2.25rem",  "lineHeight": "2.5rem",  "weight": "700" }
    }
  },
  "spacing": { "xs": "0.25rem", "sm": "0.5rem", "md": "1rem", "lg": "1.5rem", "xl": "2rem" },
  "borderRadius": { "none": "0", "sm": "0.125rem", "md": "0.375rem", "lg": "0.5rem", "full": "9999px" },
  "shadows": { "sm": "...", "md": "...", "lg": "...", "xl": "..." }
}

Generate color scales that harmonize with the provided brand colors. Each scale needs shades from 50 (lightest) through 950 (darkest). The provided hex colors map to the 500 shade."""

BLUEPRINT_PROMPT = """You are a website architecture expert. Given a site configuration and design system, generate a page blueprint as a JSON object.

Return ONLY valid JSON. No markdown, no explanation, no code fences.

The JSON must match this exact structure:
{
  "pages": [
    {
      "path": "/",
      "title": "Home",
      "sections": [
        { "componentName": "Hero", "props": {}, "order": 0 },
        { "componentName": "Features", "props": {}, "order": 1 }
      ],
      "metadata": { "title": "Page Title", "description": "Meta description" }
    }
  ],
  "sharedComponents": ["Navbar", "Footer"],
  "dataRequirements": {}
}

Rules:
- Component names must be PascalCase.
- Each page must have at least one section.
- Include all shared components (Navbar, Footer, etc.) in sharedComponents.
- The props object can include content hints for the component generator.
- For e-commerce sites, include dataRequirements for product data.
- For SaaS sites, include dataRequirements for pricing and features data."""

GENERIC_SYSTEM_PROMPT = "You are an expert React, Next.js 14, TypeScript, and Tailwind CSS developer."

_OUTPUT_FORMAT = """=== OUTPUT FORMAT ===
Return ONLY fenced code blocks. Each block MUST use a language tag followed by a
colon and the file path relative to the project root. Example:

```tsx:src/components/Hero.tsx
export default function Hero() { ... }
```

Do NOT include any commentary or markdown outside the code blocks."""

_CODING_STANDARDS = """=== CODING STANDARDS ===
- Strongly typed TypeScript. Never use `any`.
- Server Components by default; add 'use client' only for hooks, events or browser APIs.
- Mobile-first responsive Tailwind (sm, md, lg, xl). Touch targets at least 44px.
- Semantic HTML with ARIA attributes; target WCAG 2.1 AA.
- Icons come from `lucide-react` as named imports.
- Conditional classes use `clsx` and `tailwind-merge`.
- Images use `next/image` with width, height and alt text, sourced from images.unsplash.com.
- Every component is a default export in its own PascalCase file.
- Internal navigation uses `next/link`; never use `#` or empty hrefs.
- Always generate `src/app/layout.tsx` wrapping every page with the Navbar and Footer."""

_QUALITY_REQUIREMENTS = """=== QUALITY REQUIREMENTS ===
- Realistic copy written for this business; no lorem ipsum.
- Every link points to a page that is generated in this response.
- All pages share the design tokens, Navbar and Footer.
- Sections animate in on scroll and cards have hover transitions."""


def _format_pairs(values: Dict[str, str]) -> str:
    return ", ".join(f"{k}: {v}" for k, v in values.items())


def build_system_prompt(design_system: DesignSystem) -> str:
    """Component generation system prompt carrying the project's design tokens."""
    colors = "\n".join(
        f"  {group}: " + ", ".join(f"{shade}={value}" for shade, value in shades.items())
        for group, shades in design_system.colors.model_dump().items()
    )
    typography = design_system.typography
    scale = ", ".join(
        f"{name} ({entry.size}/{entry.line_height} w{entry.weight})"
        for name, entry in typography.scale.items()
    )
    return f"""{GENERIC_SYSTEM_PROMPT}
You generate production-quality website components for a hosted site builder.

{_OUTPUT_FORMAT}

{_CODING_STANDARDS}

=== DESIGN SYSTEM TOKENS ===
Colors:
{colors}

Typography:
Heading font: "{typography.heading_font}"
Body font: "{typography.body_font}"
Type scale: {scale}

Spacing: {_format_pairs(design_system.spacing)}
Border Radius: {_format_pairs(design_system.border_radius)}
Shadows: {_format_pairs(design_system.shadows)}

Use Tailwind classes that reference these tokens, e.g. `bg-primary-500`,
`text-secondary-700`, `font-heading`, `font-body`."""


def build_design_system_prompt(config: GenerationConfig) -> str:
    branding = config.branding
    return f"""Generate a design system for:
Business: "{config.business.name}" ({config.business.industry})
Style: {branding.style}
Primary color: {branding.primary_color}
Secondary color: {branding.secondary_color}
Accent color: {branding.accent_color}
Heading font: {branding.font_heading}
Body font: {branding.font_body}"""


def build_blueprint_prompt(config: GenerationConfig, design_system: DesignSystem) -> str:
    sections = ", ".join(f"{s.type} (order: {s.order})" for s in config.sections)
    lines = [
        "Generate a page blueprint for:",
        f"Site type: {config.site_type}",
        f'Business: "{config.business.name}" ({config.business.industry})',
        f"Requested sections: {sections}",
        f"Design style: {config.branding.style}",
        f"Heading font: {design_system.typography.heading_font}",
        f"Body font: {design_system.typography.body_font}",
    ]
    if config.ecommerce:
        cart = "enabled" if config.ecommerce.cart_enabled else "disabled"
        lines.append(f"E-commerce: {len(config.ecommerce.products)} products, cart {cart}")
    if config.saas:
        saas = config.saas
        lines.append(
            f"SaaS: {len(saas.features)} features, {len(saas.pricing_tiers)} pricing tiers, "
            f"auth {'yes' if saas.has_auth else 'no'}, dashboard {'yes' if saas.has_dashboard else 'no'}"
        )
    return "\n".join(lines)


# --------------------------------------------------------------------------
# Per-site-type page plans: (headline, [(route, [(file, brief), ...]), ...])
# --------------------------------------------------------------------------

_SHARED_FILES = [
    ("src/components/Navbar.tsx", "Fixed navigation with logo, links to every page and a mobile hamburger menu"),
    ("src/components/Footer.tsx", "Four-column dark footer: brand, quick links, contact info, newsletter"),
    ("src/app/layout.tsx", "Root layout wrapping every page with Navbar and Footer"),
    ("src/app/globals.css", "Tailwind directives and base styles"),
]

SitePlan = Tuple[str, List[Tuple[str, List[Tuple[str, str]]]]]

SITE_PLANS: Dict[str, SitePlan] = {
    "landing-page": (
        "a 4-page marketing website",
        [
            ("/", [
                ("src/components/Hero.tsx", "Headline, sub-headline, two CTAs and trust indicators"),
                ("src/components/Features.tsx", "3-6 feature cards with icons"),
                ("src/components/Testimonials.tsx", "3 testimonial cards with ratings"),
                ("src/components/CallToAction.tsx", "Full-width gradient CTA banner"),
                ("src/app/page.tsx", "Home page composing the sections above"),
            ]),
            ("/about", [
                ("src/components/AboutContent.tsx", "Company story, mission and animated stats"),
                ("src/components/TeamGrid.tsx", "3-4 team member cards"),
                ("src/app/about/page.tsx", "About page"),
            ]),
            ("/pricing", [
                ("src/components/Pricing.tsx", "Pricing tiers with a highlighted plan"),
                ("src/components/FAQ.tsx", "Accordion of common questions"),
                ("src/app/pricing/page.tsx", "Pricing page"),
            ]),
            ("/contact", [
                ("src/components/Contact.tsx", "Contact form with validation and contact details"),
                ("src/app/contact/page.tsx", "Contact page"),
            ]),
        ],
    ),
    "business": (
        "a multi-page business portfolio website",
        [
            ("/", [
                ("src/components/Hero.tsx", "Brand statement with primary CTA"),
                ("src/components/Stats.tsx", "Animated counters for key results"),
                ("src/components/Testimonials.tsx", "Client testimonials"),
                ("src/app/page.tsx", "Home page"),
            ]),
            ("/about", [
                ("src/components/About.tsx", "History, values and approach"),
                ("src/components/Team.tsx", "Team members with roles"),
                ("src/app/about/page.tsx", "About page"),
            ]),
            ("/services", [
                ("src/components/Services.tsx", "Service cards with descriptions"),
                ("src/app/services/page.tsx", "Services page"),
            ]),
            ("/portfolio", [
                ("src/components/Gallery.tsx", "Project gallery with hover overlays"),
                ("src/app/portfolio/page.tsx", "Portfolio page"),
            ]),
            ("/contact", [
                ("src/components/Contact.tsx", "Contact form and office details"),
                ("src/app/contact/page.tsx", "Contact page"),
            ]),
        ],
    ),
    "ecommerce": (
        "a multi-page online store",
        [
            ("/", [
                ("src/components/Hero.tsx", "Featured collection banner"),
                ("src/components/FeaturedProducts.tsx", "Grid of highlighted products"),
                ("src/app/page.tsx", "Home page"),
            ]),
            ("/products", [
                ("src/components/ProductGrid.tsx", "Filterable product grid with add-to-cart"),
                ("src/lib/data/products.ts", "Typed product catalogue"),
                ("src/lib/store/cart.ts", "Zustand cart store"),
                ("src/app/products/page.tsx", "Catalogue page"),
            ]),
            ("/cart", [
                ("src/components/Cart.tsx", "Cart line items, quantities and totals"),
                ("src/app/cart/page.tsx", "Cart page"),
            ]),
            ("/about", [
                ("src/components/About.tsx", "Brand story"),
                ("src/app/about/page.tsx", "About page"),
            ]),
            ("/contact", [
                ("src/components/Contact.tsx", "Support contact form"),
                ("src/app/contact/page.tsx", "Contact page"),
            ]),
        ],
    ),
    "saas": (
        "a multi-page SaaS product website",
        [
            ("/", [
                ("src/components/Hero.tsx", "Product headline with app screenshot"),
                ("src/components/Features.tsx", "Feature grid"),
                ("src/components/Testimonials.tsx", "Customer quotes"),
                ("src/components/CTA.tsx", "Free trial banner"),
                ("src/app/page.tsx", "Home page"),
            ]),
            ("/features", [
                ("src/components/FeatureDetails.tsx", "Alternating feature deep-dives"),
                ("src/app/features/page.tsx", "Features page"),
            ]),
            ("/pricing", [
                ("src/components/Pricing.tsx", "Monthly/yearly pricing toggle and tiers"),
                ("src/components/FAQ.tsx", "Billing questions accordion"),
                ("src/app/pricing/page.tsx", "Pricing page"),
            ]),
            ("/contact", [
                ("src/components/Contact.tsx", "Sales contact form"),
                ("src/app/contact/page.tsx", "Contact page"),
            ]),
        ],
    ),
    "local-service": (
        "a multi-page local service business website",
        [
            ("/", [
                ("src/components/Hero.tsx", "Service area headline with call and booking CTAs"),
                ("src/components/Services.tsx", "Core services overview"),
                ("src/components/Testimonials.tsx", "Local customer reviews"),
                ("src/app/page.tsx", "Home page"),
            ]),
            ("/services", [
                ("src/components/ServiceList.tsx", "Detailed services with pricing guidance"),
                ("src/app/services/page.tsx", "Services page"),
            ]),
            ("/about", [
                ("src/components/About.tsx", "Owner story, licences and service area"),
                ("src/app/about/page.tsx", "About page"),
            ]),
            ("/contact", [
                ("src/components/Contact.tsx", "Booking form, phone, hours and map placeholder"),
                ("src/app/contact/page.tsx", "Contact page"),
            ]),
        ],
    ),
}


def _section_list(config: GenerationConfig) -> str:
    lines = []
    for s in config.sections:
        line = f"- {s.type}"
        if s.variant:
            line += f" (variant: {s.variant})"
        if s.content:
            line += " | hints: " + ", ".join(f'{k}="{v}"' for k, v in s.content.items())
        lines.append(line)
    return "\n".join(lines) or "- (none specified)"


def _site_specific_config(config: GenerationConfig) -> Optional[str]:
    if config.site_type == "ecommerce" and config.ecommerce:
        shop = config.ecommerce
        products = "\n".join(
            f"- {p.name}: {p.description} ({shop.currency} {p.price:.2f})" for p in shop.products
        )
        return (
            "=== E-COMMERCE CONFIG ===\n"
            f"Currency: {shop.currency}\nCart enabled: {shop.cart_enabled}\n"
            f"Checkout: {shop.checkout_type}\nProducts:\n{products}"
        )
    if config.site_type == "saas" and config.saas:
        saas = config.saas
        features = "\n".join(f"- {f.title}: {f.description}" for f in saas.features)
        tiers = "\n".join(
            f"- {t.name}: {t.price}/{t.interval}" + (" (highlighted)" if t.highlighted else "")
            for t in saas.pricing_tiers
        )
        return (
            "=== SAAS CONFIG ===\n"
            f"Auth pages: {saas.has_auth}\nDashboard: {saas.has_dashboard}\n"
            f"Features:\n{features}\nPricing tiers:\n{tiers}"
        )
    return None


def build_site_prompt(config: GenerationConfig) -> str:
    """User prompt for the component stage, specialised per site type."""
    if config.site_type not in SITE_PLANS:
        raise ValueError(f"Unknown site type: {config.site_type}")
    headline, pages = SITE_PLANS[config.site_type]
    business = config.business
    branding = config.branding

    parts = [f"Generate a complete, production-ready {headline}.", ""]
    parts.append("=== BUSINESS CONTEXT ===")
    parts.append(f'Business name: "{business.name}"')
    if business.tagline:
        parts.append(f'Tagline: "{business.tagline}"')
    parts.append(f'Description: "{business.description}"')
    parts.append(f'Industry: "{business.industry}"')
    parts.append(f'Target audience: "{business.target_audience}"')
    parts += [
        "",
        "=== VISUAL STYLE ===",
        f"Style: {branding.style}",
        f"Primary color: {branding.primary_color}",
        f"Secondary color: {branding.secondary_color}",
        f"Accent color: {branding.accent_color}",
        f"Heading font: {branding.font_heading}",
        f"Body font: {branding.font_body}",
        "",
        "=== REQUESTED SECTIONS ===",
        _section_list(config),
        "",
        "=== FILES TO GENERATE ===",
        "Shared:",
    ]
    parts += [f"- `{path}`: {brief}" for path, brief in _SHARED_FILES]
    for route, files in pages:
        parts.append(f"Page {route}:")
        parts += [f"- `{path}`: {brief}" for path, brief in files]

    extra = _site_specific_config(config)
    if extra:
        parts += ["", extra]
    if config.navigation:
        nav = config.navigation
        parts += ["", "=== NAVIGATION CONFIG ==="]
        if nav.navbar_style:
            parts.append(f"Navbar style: {nav.navbar_style}")
        if nav.navbar_position:
            parts.append(f"Navbar position: {nav.navbar_position}")
        if nav.footer_style:
            parts.append(f"Footer style: {nav.footer_style}")
        for link in nav.social_links:
            parts.append(f"Social: {link.platform} {link.url}")
    if config.ai_prompt:
        parts += ["", "=== ADDITIONAL INSTRUCTIONS ===", config.ai_prompt]
    parts += ["", _QUALITY_REQUIREMENTS]
    return "\n".join(parts)


def build_edit_prompt(instructions: str, targets: Dict[str, str]) -> str:
    """Edit request embedding the current content of every target file."""
    files = "\n\n".join(f"--- {path} ---\n{content}" for path, content in targets.items())
    return f"""EDIT REQUEST: {instructions}

CURRENT FILES (modify only what is needed to fulfil the request):
- Return ONLY the files you changed or created, as fenced code blocks in the same
  ```language:path format.
- Return each changed file in full; partial snippets are not merged.
- Keep the existing design tokens, imports and component names unless the request says otherwise.

{files}"""


def blueprint_summary(blueprint: PageBlueprint) -> str:
    """Page and component plan appended to the component prompt."""
    lines = ["=== PAGE BLUEPRINT ==="]
    for page in blueprint.pages:
        names = ", ".join(s.component_name for s in sorted(page.sections, key=lambda s: s.order))
        lines.append(f"- {page.path} ({page.title}): {names}")
    if blueprint.shared_components:
        lines.append("Shared components: " + ", ".join(blueprint.shared_components))
    return "\n".join(lines)
