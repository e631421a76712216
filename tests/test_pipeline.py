"""Tests for the five-stage generation pipeline driven by a scripted model."""
from app.agents.base import RunContext
from app.core.engine import GenerationPipeline
from app.core.errors import ModelFatalError
from app.core.workflow import EventType, GenerationStage, PIPELINE_STAGES
from app.generators.site_gen.render import DESIGN_SYSTEM_PATH
from fakes import COMPONENT_OUTPUT, SAMPLE_CONFIG, ScriptedModelClient, blueprint_json, collect, design_system_json, split_every


def _run(model, config=SAMPLE_CONFIG):
    ctx = RunContext(project_id="project-1")
    events = collect(GenerationPipeline(model).run(config, ctx))
    return events, ctx


def _of_type(events, event_type, stage=None):
    return [e for e in events if e.type == event_type and (stage is None or e.stage == stage)]


def test_full_generation_emits_every_stage_in_order():
    """Happy path: each stage starts and completes, then generation-complete with the file count."""
    model = ScriptedModelClient(
        completions=[design_system_json(), blueprint_json()],
        streams=[split_every(COMPONENT_OUTPUT, 9)],
    )
    events, ctx = _run(model)

    assert [e.stage for e in _of_type(events, EventType.STAGE_START)] == PIPELINE_STAGES
    assert [e.stage for e in _of_type(events, EventType.STAGE_COMPLETE)] == PIPELINE_STAGES

    final = events[-1]
    assert final.type == EventType.GENERATION_COMPLETE
    assert final.stage == GenerationStage.COMPLETE
    assert final.total_files == len(ctx.files) == 8
    assert sum(1 for e in events if e.is_terminal) == 1


def test_components_stage_reports_progress():
    """Files are announced, streamed and completed with running counts."""
    model = ScriptedModelClient(
        completions=[design_system_json(), blueprint_json()],
        streams=[split_every(COMPONENT_OUTPUT, 9)],
    )
    events, ctx = _run(model)

    start = _of_type(events, EventType.STAGE_START, GenerationStage.COMPONENTS)[0]
    # Hero, Features, Navbar, Footer and one page
    assert start.total_files == 5
    assert start.completed_files == 0

    completed = _of_type(events, EventType.COMPONENT_COMPLETE, GenerationStage.COMPONENTS)
    assert [e.component_name for e in completed] == ["Hero", "page"]
    assert [e.completed_files for e in completed] == [1, 2]
    assert completed[0].file.path == "src/components/Hero.tsx"

    started = [e.component_name for e in _of_type(events, EventType.COMPONENT_START)]
    assert started == ["Hero", "page"]
    assert events.index(_of_type(events, EventType.COMPONENT_START)[0]) < events.index(completed[0])

    chunks = _of_type(events, EventType.COMPONENT_CHUNK)
    assert chunks and all(e.component_name in ("Hero", "page") for e in chunks)

    end = _of_type(events, EventType.STAGE_COMPLETE, GenerationStage.COMPONENTS)[0]
    assert end.completed_files == 2


def test_pipeline_normalizes_config_and_assembles_scaffold():
    """Business text is trimmed, sections re-indexed and scaffold files added."""
    model = ScriptedModelClient(
        completions=[design_system_json(), blueprint_json()],
        streams=[[COMPONENT_OUTPUT]],
    )
    events, ctx = _run(model)

    assert ctx.config.business.name == "Bloom & Co"
    assert [(s.id, s.order) for s in ctx.config.sections] == [("hero", 0), ("features", 1)]

    assert ctx.files.paths()[:6] == [
        "package.json", "next.config.js", "tsconfig.json",
        "tailwind.config.js", "postcss.config.js", DESIGN_SYSTEM_PATH,
    ]
    assert ctx.files.get("src/components/Hero.tsx").section_type == "hero"
    assert ctx.files.get("src/app/page.tsx").type == "page"

    assembly = _of_type(events, EventType.COMPONENT_COMPLETE, GenerationStage.ASSEMBLY)
    assert [e.component_name for e in assembly][0] == "package.json"
    assert len(assembly) == 6

    # The component prompt carries the design tokens
    stream_call = [c for c in model.calls if c[0] == "stream"][0]
    assert "Playfair Display" in stream_call[1]
    assert "=== PAGE BLUEPRINT ===" in stream_call[2]


def test_design_system_without_typography_fails_that_stage():
    """Schema failure yields an error event for design-system and no stage-complete for it."""
    model = ScriptedModelClient(completions=[design_system_json(drop="typography")])
    events, ctx = _run(model)

    final = events[-1]
    assert final.type == EventType.ERROR
    assert final.stage == GenerationStage.DESIGN_SYSTEM
    assert final.error.startswith("Design system generation failed")
    assert not _of_type(events, EventType.STAGE_COMPLETE, GenerationStage.DESIGN_SYSTEM)
    assert not _of_type(events, EventType.GENERATION_COMPLETE)
    # Blueprint is never requested
    assert len(model.calls) == 1


def test_invalid_config_fails_config_assembly():
    """Malformed user input is reported as a config-assembly error event."""
    model = ScriptedModelClient()
    broken = {key: value for key, value in SAMPLE_CONFIG.items() if key != "branding"}
    events, _ = _run(model, config=broken)

    assert [e.type for e in events] == [EventType.STAGE_START, EventType.ERROR]
    assert events[-1].stage == GenerationStage.CONFIG_ASSEMBLY
    assert events[-1].error.startswith("Config assembly failed")
    assert model.calls == []


def test_blueprint_without_pages_fails_blueprint_stage():
    """A blueprint with an empty pages list is rejected."""
    model = ScriptedModelClient(completions=[design_system_json(), '{"pages": [], "sharedComponents": []}'])
    events, _ = _run(model)

    assert events[-1].type == EventType.ERROR
    assert events[-1].stage == GenerationStage.BLUEPRINT
    assert events[-1].error.startswith("Blueprint generation failed")


def test_interrupted_component_stream_fails_components_stage():
    """A model failure mid-stream ends the run with a components error."""
    model = ScriptedModelClient(
        completions=[design_system_json(), blueprint_json()],
        streams=[["```tsx:src/components/Hero.tsx\nexport default", ModelFatalError("Stream interrupted: reset")]],
    )
    events, ctx = _run(model)

    assert _of_type(events, EventType.COMPONENT_START)[0].component_name == "Hero"
    assert events[-1].type == EventType.ERROR
    assert events[-1].stage == GenerationStage.COMPONENTS
    assert "Stream interrupted" in events[-1].error
    assert len(ctx.files) == 0
