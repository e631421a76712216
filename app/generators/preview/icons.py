"""SVG inner markup for lucide-react icons the generated sites commonly import.

Icons missing from this table render as an empty inline-block placeholder.
"""
import re
from typing import Dict, Iterable, List

ICON_PATHS: Dict[str, List[str]] = {
    "ArrowRight": ['<path d="M5 12h14"/>', '<path d="m12 5 7 7-7 7"/>'],
    "ArrowLeft": ['<path d="m12 19-7-7 7-7"/>', '<path d="M19 12H5"/>'],
    "Award": ['<circle cx="12" cy="8" r="6"/>', '<path d="M15.477 12.89 17 22l-5-3-5 3 1.523-9.11"/>'],
    "Calendar": [
        '<rect width="18" height="18" x="3" y="4" rx="2" ry="2"/>',
        '<line x1="16" x2="16" y1="2" y2="6"/>',
        '<line x1="8" x2="8" y1="2" y2="6"/>',
        '<line x1="3" x2="21" y1="10" y2="10"/>',
    ],
    "Check": ['<path d="M20 6 9 17l-5-5"/>'],
    "CheckCircle": ['<path d="M22 11.08V12a10 10 0 1 1-5.93-9.14"/>', '<path d="m9 11 3 3L22 4"/>'],
    "ChevronDown": ['<path d="m6 9 6 6 6-6"/>'],
    "ChevronUp": ['<path d="m18 15-6-6-6 6"/>'],
    "ChevronLeft": ['<path d="m15 18-6-6 6-6"/>'],
    "ChevronRight": ['<path d="m9 18 6-6-6-6"/>'],
    "Clock": ['<circle cx="12" cy="12" r="10"/>', '<polyline points="12 6 12 12 16 14"/>'],
    "ExternalLink": [
        '<path d="M15 3h6v6"/>',
        '<path d="M10 14 21 3"/>',
        '<path d="M18 13v6a2 2 0 0 1-2 2H5a2 2 0 0 1-2-2V8a2 2 0 0 1 2-2h6"/>',
    ],
    "Facebook": ['<path d="M18 2h-3a5 5 0 0 0-5 5v3H7v4h3v8h4v-8h3l1-4h-4V7a1 1 0 0 1 1-1h3z"/>'],
    "Globe": [
        '<circle cx="12" cy="12" r="10"/>',
        '<path d="M12 2a14.5 14.5 0 0 0 0 20 14.5 14.5 0 0 0 0-20"/>',
        '<path d="M2 12h20"/>',
    ],
    "Heart": [
        '<path d="M19 14c1.49-1.46 3-3.21 3-5.5A5.5 5.5 0 0 0 16.5 3c-1.76 0-3 .5-4.5 2-1.5-1.5-2.74-2-4.5-2'
        'A5.5 5.5 0 0 0 2 8.5c0 2.3 1.5 4.05 3 5.5l7 7Z"/>',
    ],
    "Home": [
        '<path d="m3 9 9-7 9 7v11a2 2 0 0 1-2 2H5a2 2 0 0 1-2-2z"/>',
        '<polyline points="9 22 9 12 15 12 15 22"/>',
    ],
    "Instagram": [
        '<rect width="20" height="20" x="2" y="2" rx="5" ry="5"/>',
        '<path d="M16 11.37A4 4 0 1 1 12.63 8 4 4 0 0 1 16 11.37z"/>',
        '<line x1="17.5" x2="17.51" y1="6.5" y2="6.5"/>',
    ],
    "Linkedin": [
        '<path d="M16 8a6 6 0 0 1 6 6v7h-4v-7a2 2 0 0 0-2-2 2 2 0 0 0-2 2v7h-4v-7a6 6 0 0 1 6-6z"/>',
        '<rect width="4" height="12" x="2" y="9"/>',
        '<circle cx="4" cy="4" r="2"/>',
    ],
    "Lock": ['<rect width="18" height="11" x="3" y="11" rx="2" ry="2"/>', '<path d="M7 11V7a5 5 0 0 1 10 0v4"/>'],
    "Mail": [
        '<rect width="20" height="16" x="2" y="4" rx="2"/>',
        '<path d="m22 7-8.97 5.7a1.94 1.94 0 0 1-2.06 0L2 7"/>',
    ],
    "MapPin": ['<path d="M20 10c0 6-8 12-8 12s-8-6-8-12a8 8 0 0 1 16 0Z"/>', '<circle cx="12" cy="10" r="3"/>'],
    "Menu": [
        '<line x1="4" x2="20" y1="12" y2="12"/>',
        '<line x1="4" x2="20" y1="6" y2="6"/>',
        '<line x1="4" x2="20" y1="18" y2="18"/>',
    ],
    "Minus": ['<path d="M5 12h14"/>'],
    "Phone": [
        '<path d="M22 16.92v3a2 2 0 0 1-2.18 2 19.79 19.79 0 0 1-8.63-3.07 19.5 19.5 0 0 1-6-6 19.79 19.79 0 0 1'
        '-3.07-8.67A2 2 0 0 1 4.11 2h3a2 2 0 0 1 2 1.72 12.84 12.84 0 0 0 .7 2.81 2 2 0 0 1-.45 2.11L8.09 9.91'
        'a16 16 0 0 0 6 6l1.27-1.27a2 2 0 0 1 2.11-.45 12.84 12.84 0 0 0 2.81.7A2 2 0 0 1 22 16.92z"/>',
    ],
    "Play": ['<polygon points="5 3 19 12 5 21 5 3"/>'],
    "Plus": ['<path d="M5 12h14"/>', '<path d="M12 5v14"/>'],
    "Search": ['<circle cx="11" cy="11" r="8"/>', '<path d="m21 21-4.3-4.3"/>'],
    "Send": ['<path d="m22 2-7 20-4-9-9-4Z"/>', '<path d="M22 2 11 13"/>'],
    "Shield": [
        '<path d="M20 13c0 5-3.5 7.5-7.66 8.95a1 1 0 0 1-.67-.01C7.5 20.5 4 18 4 13V6a1 1 0 0 1 1-1'
        'c2 0 4.5-1.2 6.24-2.72a1.17 1.17 0 0 1 1.52 0C14.51 3.81 17 5 19 5a1 1 0 0 1 1 1z"/>',
    ],
    "ShoppingCart": [
        '<circle cx="8" cy="21" r="1"/>',
        '<circle cx="19" cy="21" r="1"/>',
        '<path d="M2.05 2.05h2l2.66 12.42a2 2 0 0 0 2 1.58h9.78a2 2 0 0 0 1.95-1.57l1.65-7.43H5.12"/>',
    ],
    "Sparkles": [
        '<path d="m12 3-1.912 5.813a2 2 0 0 1-1.275 1.275L3 12l5.813 1.912a2 2 0 0 1 1.275 1.275L12 21'
        'l1.912-5.813a2 2 0 0 1 1.275-1.275L21 12l-5.813-1.912a2 2 0 0 1-1.275-1.275L12 3Z"/>',
        '<path d="M5 3v4"/>',
        '<path d="M19 17v4"/>',
        '<path d="M3 5h4"/>',
        '<path d="M17 19h4"/>',
    ],
    "Star": [
        '<polygon points="12 2 15.09 8.26 22 9.27 17 14.14 18.18 21.02 12 17.77 5.82 21.02 7 14.14 2 9.27 8.91 8.26 12 2"/>',
    ],
    "TrendingUp": ['<polyline points="22 7 13.5 15.5 8.5 10.5 2 17"/>', '<polyline points="16 7 22 7 22 13"/>'],
    "Twitter": [
        '<path d="M22 4s-.7 2.1-2 3.4c1.6 10-9.4 17.3-18 11.6 2.2.1 4.4-.6 6-2C3 15.5.5 9.6 3 5'
        'c2.2 2.6 5.6 4.1 9 4-.9-4.2 4-6.6 7-3.8 1.1 0 3-1.2 3-1.2z"/>',
    ],
    "User": ['<path d="M19 21v-2a4 4 0 0 0-4-4H9a4 4 0 0 0-4 4v2"/>', '<circle cx="12" cy="7" r="4"/>'],
    "Users": [
        '<path d="M16 21v-2a4 4 0 0 0-4-4H6a4 4 0 0 0-4 4v2"/>',
        '<circle cx="9" cy="7" r="4"/>',
        '<path d="M22 21v-2a4 4 0 0 0-3-3.87"/>',
        '<path d="M16 3.13a4 4 0 0 1 0 7.75"/>',
    ],
    "X": ['<path d="M18 6 6 18"/>', '<path d="m6 6 12 12"/>'],
    "Zap": ['<polygon points="13 2 3 14 12 14 11 22 21 10 12 10 13 2"/>'],
}

_LUCIDE_IMPORT_RE = re.compile(r"""import\s*\{([^}]+)\}\s*from\s*['"]lucide-react['"]""")
_IDENTIFIER_RE = re.compile(r"^[A-Za-z_$][\w$]*$")


def find_icon_imports(sources: Iterable[str]) -> Dict[str, str]:
    """Local binding -> icon name for every lucide-react import in ``sources``."""
    bindings: Dict[str, str] = {}
    for source in sources:
        for match in _LUCIDE_IMPORT_RE.finditer(source):
            for raw in match.group(1).split(","):
                icon, _, alias = raw.strip().partition(" as ")
                icon = icon.strip()
                binding = alias.strip() or icon
                if icon and _IDENTIFIER_RE.match(binding) and binding not in bindings:
                    bindings[binding] = icon
    return bindings


def used_icon_paths(icon_names: Iterable[str]) -> Dict[str, List[str]]:
    return {name: ICON_PATHS[name] for name in icon_names if name in ICON_PATHS}
