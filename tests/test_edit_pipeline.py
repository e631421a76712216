"""Tests for edit target selection, merging and the edit pipeline."""
import asyncio
import json
import pytest
from app.agents.base import RunContext
from app.agents.impl_config import EditTargetsAgent
from app.core.engine import EditPipeline, EditRequest
from app.core.errors import NoFilesError
from app.core.workflow import EventType, GenerationStage
from app.generators.site_gen.merge import NEW_FILE_PLACEHOLDER, load_design_system, merge_file_sets, select_edit_targets
from app.generators.site_gen.prompts import GENERIC_SYSTEM_PROMPT
from app.generators.site_gen.render import DESIGN_SYSTEM_PATH
from app.generators.site_gen.types import VirtualFile
from fakes import DESIGN_SYSTEM, ScriptedModelClient, collect, fenced, split_every


def _previous_files():
    components = ["Navbar", "Hero", "Features", "Testimonials", "Footer"]
    files = [
        VirtualFile(path=f"src/components/{name}.tsx", content=f"export default function {name}() {{ return null; }}")
        for name in components
    ]
    files += [
        VirtualFile(path="src/app/globals.css", content="body { margin: 0; }", type="style"),
        VirtualFile(path="src/styles/theme.css", content=":root { --brand: #e11d48; }", type="style"),
        VirtualFile(path="package.json", content="{}", type="config"),
        VirtualFile(path=DESIGN_SYSTEM_PATH, content=json.dumps(DESIGN_SYSTEM), type="data"),
    ]
    return files


def test_default_targets_are_typescript_and_css_sources():
    """Five components and two stylesheets give exactly seven targets."""
    targets = select_edit_targets(_previous_files())
    assert len(targets) == 7
    assert "package.json" not in targets
    assert DESIGN_SYSTEM_PATH not in targets
    assert targets["src/app/globals.css"] == "body { margin: 0; }"


def test_explicit_targets_include_new_files():
    """Named targets are used as given; unknown paths get a placeholder body."""
    targets = select_edit_targets(_previous_files(), ["src/components/Hero.tsx", "src/components/Faq.tsx"])
    assert list(targets) == ["src/components/Hero.tsx", "src/components/Faq.tsx"]
    assert targets["src/components/Faq.tsx"] == NEW_FILE_PLACEHOLDER


def test_merge_replaces_edited_paths_and_keeps_the_rest():
    """Result is the untouched previous files plus the edited ones, each path once."""
    previous = _previous_files()
    edited = [
        VirtualFile(path="src/components/Hero.tsx", content="export default function Hero() { return <h1/>; }"),
        VirtualFile(path="src/components/Pricing.tsx", content="export default function Pricing() { return null; }"),
    ]
    merged = merge_file_sets(previous, edited)

    edited_paths = {f.path for f in edited}
    expected = {f.path for f in previous if f.path not in edited_paths} | edited_paths
    assert set(merged.paths()) == expected
    assert len(merged.paths()) == len(expected)
    assert merged.get("src/components/Hero.tsx").content.endswith("<h1/>; }")
    assert merged.get("src/components/Pricing.tsx").section_type == "pricing"
    # Untouched files come first
    assert merged.paths()[-2:] == ["src/components/Hero.tsx", "src/components/Pricing.tsx"]


def test_load_design_system_tolerates_bad_json():
    """A corrupt stored design system means the generic prompt is used."""
    good = load_design_system(_previous_files())
    assert good.typography.heading_font == "Playfair Display"
    broken = [VirtualFile(path=DESIGN_SYSTEM_PATH, content="{not json", type="data")]
    assert load_design_system(broken) is None
    assert load_design_system([]) is None


def test_edit_targets_agent_requires_previous_files():
    """An edit with nothing to edit fails before any model call."""
    ctx = RunContext(edit_instructions="Make it blue")
    with pytest.raises(NoFilesError):
        asyncio.run(EditTargetsAgent().execute(ctx))


def test_edit_pipeline_merges_model_output():
    """Only the returned files change; the rest of the version is carried over."""
    new_hero = "export default function Hero() {\n  return <h1 className=\"text-blue-600\">Hi</h1>;\n}"
    model = ScriptedModelClient(streams=[split_every(fenced("src/components/Hero.tsx", new_hero), 11)])
    previous = _previous_files()
    ctx = RunContext(project_id="project-1")

    events = collect(EditPipeline(model).run(
        EditRequest(previous_files=previous, instructions="  Make the hero blue  "), ctx))

    assert events[-1].type == EventType.GENERATION_COMPLETE
    assert events[-1].total_files == len(previous)
    assert ctx.files.get("src/components/Hero.tsx").content == new_hero
    assert ctx.files.get("src/components/Footer.tsx").content == previous[4].content

    stream_call = model.calls[0]
    assert "Playfair Display" in stream_call[1]
    assert stream_call[2].startswith("EDIT REQUEST: Make the hero blue")
    assert "--- src/app/globals.css ---" in stream_call[2]

    start = [e for e in events if e.type == EventType.STAGE_START and e.stage == GenerationStage.COMPONENTS][0]
    assert start.total_files == 7

    assembly = [e for e in events if e.type == EventType.COMPONENT_COMPLETE and e.stage == GenerationStage.ASSEMBLY]
    assert len(assembly) == len(previous)
    assert "src/components/Hero.tsx (edited)" in [e.component_name for e in assembly]


def test_edit_pipeline_without_design_system_uses_generic_prompt():
    """Files saved without design tokens still edit, with the generic system prompt."""
    previous = [f for f in _previous_files() if f.path != DESIGN_SYSTEM_PATH]
    model = ScriptedModelClient(streams=[[fenced("src/app/globals.css", "body { margin: 0; color: #111; }", "css")]])
    ctx = RunContext()

    events = collect(EditPipeline(model).run(EditRequest(previous_files=previous, instructions="Darker text"), ctx))

    assert events[-1].type == EventType.GENERATION_COMPLETE
    assert model.calls[0][1] == GENERIC_SYSTEM_PROMPT
    assert ctx.files.get("src/app/globals.css").type == "style"
