"""Target selection and merging for edits of an existing version."""
import json
import logging
from typing import Dict, List, Optional
from pydantic import ValidationError
from app.generators.site_gen.render import DESIGN_SYSTEM_PATH
from app.generators.site_gen.types import VirtualFile, VirtualFileTree
from app.generators.site_gen.utils import infer_file_type, infer_section_type, is_source_file
from app.schemas.generation import DesignSystem

log = logging.getLogger(__name__)

NEW_FILE_PLACEHOLDER = "// New file"


def select_edit_targets(previous: List[VirtualFile], target_paths: Optional[List[str]] = None) -> Dict[str, str]:
    """Map each path the model may rewrite to its current content.

    Explicit paths that do not exist yet get a placeholder body. Without
    explicit paths, every TypeScript and CSS source file is a target.
    """
    by_path = {f.path: f.content for f in previous}
    if target_paths:
        return {path: by_path.get(path, NEW_FILE_PLACEHOLDER) for path in target_paths}
    return {f.path: f.content for f in previous if is_source_file(f.path)}


def merge_file_sets(previous: List[VirtualFile], edited: List[VirtualFile]) -> VirtualFileTree:
    """(previous minus edited paths) plus edited files, untouched files first."""
    edited_paths = {f.path for f in edited}
    tree = VirtualFileTree()
    for f in previous:
        if f.path not in edited_paths:
            tree.add(f)
    for f in edited:
        tree.add(VirtualFile(
            path=f.path,
            content=f.content,
            type=infer_file_type(f.path),
            section_type=infer_section_type(f.path),
        ))
    return tree


def load_design_system(previous: List[VirtualFile]) -> Optional[DesignSystem]:
    """Parse the design tokens stored with a previous version, if usable."""
    for f in previous:
        if f.path != DESIGN_SYSTEM_PATH:
            continue
        try:
            return DesignSystem.model_validate(json.loads(f.content))
        except (json.JSONDecodeError, ValidationError) as e:
            log.warning("Stored design system is unusable: %s", e)
            return None
    return None
