"""Utility functions for site generation."""
import re
from typing import Optional
from app.generators.site_gen.types import FileType

# Component-name substring -> section classification. Order matters: the
# first match wins.
SECTION_TYPE_MAP = {
    "Hero": "hero",
    "Features": "features",
    "Pricing": "pricing",
    "Testimonials": "testimonials",
    "CallToAction": "cta",
    "CTA": "cta",
    "Contact": "contact",
    "About": "about",
    "Gallery": "gallery",
    "FAQ": "faq",
    "Stats": "stats",
    "Team": "team",
    "Footer": "footer",
    "Navbar": "navbar",
}

SOURCE_EXTENSIONS = (".tsx", ".ts", ".css")

_COMPONENT_NAME_RE = re.compile(r"/([^/]+)\.(tsx?|jsx?|css)$")


def normalize_path(path: str) -> str:
    """Trim whitespace and strip a leading './'."""
    path = path.strip()
    if path.startswith("./"):
        path = path[2:]
    return path


def infer_file_type(file_path: str) -> FileType:
    """Infer the VirtualFile type from its path."""
    if "/app/" in file_path and file_path.endswith("page.tsx"):
        return "page"
    if "/app/" in file_path and file_path.endswith("layout.tsx"):
        return "page"
    if file_path.endswith(".css"):
        return "style"
    if file_path.endswith(".json"):
        return "config"
    if "/data/" in file_path or "/lib/" in file_path:
        return "data"
    return "component"


def infer_section_type(file_path: str) -> Optional[str]:
    """Classify a file into a page section from the component name in its path."""
    for component, section in SECTION_TYPE_MAP.items():
        if f"/{component}." in file_path or f"/{component}/" in file_path:
            return section
    return None


def extract_component_name(file_path: str) -> Optional[str]:
    """'src/components/Hero.tsx' -> 'Hero'."""
    match = _COMPONENT_NAME_RE.search(file_path)
    if not match:
        return None
    return match.group(1)


def display_name(file_path: str) -> str:
    """Component name when the path has one, else the path itself."""
    return extract_component_name(file_path) or file_path


def is_source_file(file_path: str) -> bool:
    return file_path.endswith(SOURCE_EXTENSIONS)


def to_package_name(name: str) -> str:
    """Business name -> npm package name."""
    slug = re.sub(r"[^a-z0-9]+", "-", name.lower()).strip("-")
    return slug or "generated-site"
