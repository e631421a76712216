"""Parsing of the JSON documents returned by the design-system and blueprint stages."""
import json
import re
from typing import Type, TypeVar
from pydantic import BaseModel, ValidationError
from app.core.errors import StageValidationError
from app.schemas.generation import DesignSystem, PageBlueprint

M = TypeVar("M", bound=BaseModel)

_FENCED_JSON_RE = re.compile(r"```json\s*\n?([\s\S]*?)\n?\s*```")


def extract_json(text: str) -> str:
    """Pull a JSON document out of a model response.

    Tries a fenced ```json block, then the outermost braces, then the raw text.
    """
    match = _FENCED_JSON_RE.search(text)
    if match:
        return match.group(1).strip()
    first = text.find("{")
    last = text.rfind("}")
    if first != -1 and last > first:
        return text[first:last + 1]
    return text.strip()


def parse_model_json(text: str, model: Type[M], label: str) -> M:
    try:
        data = json.loads(extract_json(text))
    except json.JSONDecodeError as e:
        raise StageValidationError(f"Invalid JSON in {label} response: {e}") from e
    try:
        return model.model_validate(data)
    except ValidationError as e:
        raise StageValidationError(f"{label} does not match the expected schema: {e}") from e


def parse_design_system(text: str) -> DesignSystem:
    return parse_model_json(text, DesignSystem, "design system")


def parse_blueprint(text: str) -> PageBlueprint:
    return parse_model_json(text, PageBlueprint, "blueprint")
