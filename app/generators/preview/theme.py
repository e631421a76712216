"""Tailwind CDN configuration for the preview, built from the stored design system."""
import json
import logging
from typing import Any, Dict, Optional

log = logging.getLogger(__name__)

DEFAULT_HEADING_FONT = "Space Grotesk"
DEFAULT_BODY_FONT = "Inter"

KEYFRAMES: Dict[str, Dict[str, Dict[str, str]]] = {
    "fadeIn": {"0%": {"opacity": "0"}, "100%": {"opacity": "1"}},
    "fadeInUp": {
        "0%": {"opacity": "0", "transform": "translateY(20px)"},
        "100%": {"opacity": "1", "transform": "translateY(0)"},
    },
    "fadeInDown": {
        "0%": {"opacity": "0", "transform": "translateY(-20px)"},
        "100%": {"opacity": "1", "transform": "translateY(0)"},
    },
    "slideInLeft": {
        "0%": {"opacity": "0", "transform": "translateX(-30px)"},
        "100%": {"opacity": "1", "transform": "translateX(0)"},
    },
    "slideInRight": {
        "0%": {"opacity": "0", "transform": "translateX(30px)"},
        "100%": {"opacity": "1", "transform": "translateX(0)"},
    },
    "scaleIn": {
        "0%": {"opacity": "0", "transform": "scale(0.9)"},
        "100%": {"opacity": "1", "transform": "scale(1)"},
    },
    "bounceIn": {
        "0%": {"opacity": "0", "transform": "scale(0.3)"},
        "50%": {"opacity": "1", "transform": "scale(1.05)"},
        "70%": {"transform": "scale(0.9)"},
        "100%": {"transform": "scale(1)"},
    },
    "float": {"0%, 100%": {"transform": "translateY(0px)"}, "50%": {"transform": "translateY(-10px)"}},
    "pulse": {"0%, 100%": {"opacity": "1"}, "50%": {"opacity": "0.5"}},
}

ANIMATIONS: Dict[str, str] = {
    "fade-in": "fadeIn 0.6s ease-out forwards",
    "fade-in-up": "fadeInUp 0.6s ease-out forwards",
    "fade-in-down": "fadeInDown 0.6s ease-out forwards",
    "slide-in-left": "slideInLeft 0.6s ease-out forwards",
    "slide-in-right": "slideInRight 0.6s ease-out forwards",
    "scale-in": "scaleIn 0.5s ease-out forwards",
    "bounce-in": "bounceIn 0.6s ease-out forwards",
    "float": "float 3s ease-in-out infinite",
    "pulse-slow": "pulse 3s ease-in-out infinite",
}


def theme_extend(design_system: Dict[str, Any]) -> Dict[str, Any]:
    colors = design_system.get("colors") or {}
    typography = design_system.get("typography") or {}
    heading = typography.get("headingFont") or typography.get("fontHeading") or DEFAULT_HEADING_FONT
    body = typography.get("bodyFont") or typography.get("fontBody") or DEFAULT_BODY_FONT
    return {
        "colors": colors,
        "fontFamily": {"heading": [heading, "sans-serif"], "body": [body, "sans-serif"]},
        "keyframes": KEYFRAMES,
        "animation": ANIMATIONS,
    }


def tailwind_config_script(design_system_json: Optional[str]) -> str:
    """``tailwind.config = {...}`` for the CDN build; empty when the JSON is absent or malformed."""
    if not design_system_json:
        return ""
    try:
        design_system = json.loads(design_system_json)
    except json.JSONDecodeError:
        log.debug("Ignoring malformed design-system.json in preview")
        return ""
    if not isinstance(design_system, dict):
        return ""
    config = {"theme": {"extend": theme_extend(design_system)}}
    return f"tailwind.config = {json.dumps(config, indent=2)};"
