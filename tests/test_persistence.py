"""Tests for the persistence adapter and the background generation task."""
import asyncio
from unittest.mock import patch
from app.agents.base import RunContext
from app.core.workflow import EventType, GenerationStage, ProjectStatus, TriggerType, VersionStatus
from app.db import crud
from app.db.models import GenerationVersion, Project
from app.db.session import SessionLocal
from app.generators.site_gen.types import VirtualFile
from app.schemas.generation import GenerationEvent
from app.tasks.celery_app import celery_app
from app.tasks.generation import run_generation
from fakes import COMPONENT_OUTPUT, SAMPLE_CONFIG, ScriptedModelClient, blueprint_json, design_system_json


def _new_version():
    with SessionLocal() as db:
        project = crud.create_project(db, owner_id="user-1", name="Bloom & Co", site_type="landing-page")
        version = crud.create_version(db, project, TriggerType.INITIAL)
        return project.id, version.id


def _load(version_id):
    with SessionLocal() as db:
        version = db.get(GenerationVersion, version_id)
        project = db.get(Project, version.project_id)
        return version, project


def test_create_version_numbers_sequentially(database):
    project_id, first = _new_version()
    with SessionLocal() as db:
        project = crud.get_project(db, project_id)
        second = crud.create_version(db, project, TriggerType.FULL_REGENERATE)
    assert second.version_number == 2
    version, project = _load(first)
    assert version.status == VersionStatus.GENERATING
    assert project.status == ProjectStatus.GENERATING


def test_generation_continues_after_client_disconnect(database):
    """A consumer that stops early (client disconnect) does not stop the run; the version still completes."""
    project_id, version_id = _new_version()
    ctx = RunContext(project_id=project_id)
    ctx.files.add(VirtualFile(path="src/components/Hero.tsx", content="export default function Hero() {}"))

    async def events(resume):
        yield GenerationEvent(type=EventType.STAGE_START, stage=GenerationStage.CONFIG_ASSEMBLY)
        await resume.wait()
        yield GenerationEvent(type=EventType.STAGE_COMPLETE, stage=GenerationStage.CONFIG_ASSEMBLY)
        yield GenerationEvent(type=EventType.GENERATION_COMPLETE, stage=GenerationStage.COMPLETE, total_files=1)

    async def disconnect_after_first():
        resume = asyncio.Event()
        stream = crud.persist_run(events(resume), version_id, ctx)
        first = await stream.__anext__()
        await stream.aclose()
        status_at_disconnect = _load(version_id)[0].status
        resume.set()
        await crud.wait_for_active_runs()
        return first, status_at_disconnect

    first, status_at_disconnect = asyncio.run(disconnect_after_first())
    assert first.type == EventType.STAGE_START
    assert status_at_disconnect == VersionStatus.GENERATING

    version, project = _load(version_id)
    assert version.status == VersionStatus.COMPLETE
    assert version.error_message is None
    assert project.status == ProjectStatus.GENERATED
    with SessionLocal() as db:
        assert [f.file_path for f in crud.load_files(db, version_id)] == ["src/components/Hero.tsx"]


def test_failure_after_disconnect_is_still_recorded(database):
    """A run that fails once nobody is listening still ends in error, not generating."""
    project_id, version_id = _new_version()
    ctx = RunContext(project_id=project_id)

    async def events(resume):
        yield GenerationEvent(type=EventType.STAGE_START, stage=GenerationStage.CONFIG_ASSEMBLY)
        await resume.wait()
        raise RuntimeError("model unavailable")

    async def disconnect_after_first():
        resume = asyncio.Event()
        stream = crud.persist_run(events(resume), version_id, ctx)
        await stream.__anext__()
        await stream.aclose()
        resume.set()
        await crud.wait_for_active_runs()

    asyncio.run(disconnect_after_first())
    version, project = _load(version_id)
    assert version.status == VersionStatus.ERROR
    assert version.error_message == "model unavailable"
    assert project.status == ProjectStatus.ERROR


def test_pipeline_exception_is_reraised_to_the_consumer(database):
    """While the consumer is connected an escaping exception still reaches it."""
    project_id, version_id = _new_version()
    ctx = RunContext(project_id=project_id)

    async def events():
        yield GenerationEvent(type=EventType.STAGE_START, stage=GenerationStage.CONFIG_ASSEMBLY)
        raise RuntimeError("boom")

    async def consume():
        seen = []
        try:
            async for event in crud.persist_run(events(), version_id, ctx):
                seen.append(event.type)
        except RuntimeError as e:
            return seen, str(e)

    seen, error = asyncio.run(consume())
    assert seen == [EventType.STAGE_START]
    assert error == "boom"
    assert _load(version_id)[0].status == VersionStatus.ERROR


def test_terminal_event_is_persisted_before_it_is_relayed(database):
    """By the time a consumer sees generation-complete the files are stored."""
    project_id, version_id = _new_version()
    ctx = RunContext(project_id=project_id)
    ctx.files.add(VirtualFile(path="src/components/Hero.tsx", content="export default function Hero() {}"))
    observed = []

    async def events():
        yield GenerationEvent(type=EventType.GENERATION_COMPLETE, stage=GenerationStage.COMPLETE, total_files=1)

    async def consume():
        async for event in crud.persist_run(events(), version_id, ctx):
            with SessionLocal() as db:
                observed.append((event.type, crud.status_payload(db, project_id)))

    asyncio.run(consume())
    [(event_type, status)] = observed
    assert event_type == EventType.GENERATION_COMPLETE
    assert status["latestVersion"]["status"] == "complete"
    assert status["fileCount"] == 1


def test_background_task_runs_the_pipeline(database):
    """The worker runs the full pipeline and stores the result."""
    project_id, version_id = _new_version()
    model = ScriptedModelClient(
        completions=[design_system_json(), blueprint_json()],
        streams=[[COMPONENT_OUTPUT]],
    )
    with patch("app.tasks.generation.ModelClient", return_value=model):
        run_generation(version_id, SAMPLE_CONFIG)

    version, project = _load(version_id)
    assert version.status == VersionStatus.COMPLETE
    assert project.status == ProjectStatus.GENERATED
    with SessionLocal() as db:
        assert len(crud.load_files(db, version_id)) == 8


def test_background_task_records_unexpected_failures(database):
    project_id, version_id = _new_version()
    with patch("app.tasks.generation.drain_generation", side_effect=RuntimeError("worker crashed")):
        run_generation(version_id, SAMPLE_CONFIG)

    version, _ = _load(version_id)
    assert version.status == VersionStatus.ERROR
    assert version.error_message == "worker crashed"


def test_background_task_ignores_unknown_version(database):
    run_generation("missing-version", SAMPLE_CONFIG)
    with SessionLocal() as db:
        assert db.get(GenerationVersion, "missing-version") is None


def test_celery_app_uses_the_service_queue_and_key_prefix():
    """Generation tasks go to this service's own queue and Redis key space."""
    assert celery_app.main == "sitecraft-generator"
    assert celery_app.conf.task_default_queue == "sitecraft-generation"
    assert celery_app.conf.task_routes == {"run_generation": {"queue": "sitecraft-generation"}}
    assert celery_app.conf.broker_transport_options == {"global_keyprefix": "sitecraft-generator:"}
    assert celery_app.conf.result_backend_transport_options == {"global_keyprefix": "sitecraft-generator:"}
    assert run_generation.name == "run_generation"
