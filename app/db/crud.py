"""Persistence of projects, versions and files around a pipeline run."""
from __future__ import annotations
import asyncio
import logging
import time
from datetime import datetime
from typing import Any, AsyncIterator, Callable, Dict, List, Optional, Set
from sqlalchemy import func, select
from sqlalchemy.orm import Session
from app.agents.base import RunContext
from app.core.config import settings
from app.core.errors import InsufficientCreditsError, NoCompletedVersionError, NoFilesError, ProjectNotFoundError
from app.core.workflow import EventType, ProjectStatus, TriggerType, VersionStatus
from app.db import session as db_session
from app.db.models import GeneratedFile, GenerationVersion, Profile, Project
from app.generators.site_gen.types import VirtualFile, VirtualFileTree
from app.schemas.generation import GenerationEvent

log = logging.getLogger(__name__)


def get_or_create_profile(db: Session, owner_id: str) -> Profile:
    profile = db.get(Profile, owner_id)
    if profile is None:
        profile = Profile(id=owner_id, generation_credits=settings.default_generation_credits)
        db.add(profile)
        db.commit()
        db.refresh(profile)
        log.info("Created profile %s with %d credits", owner_id, profile.generation_credits)
    return profile


def create_project(db: Session, owner_id: str, name: str, site_type: str) -> Project:
    get_or_create_profile(db, owner_id)
    project = Project(owner_id=owner_id, name=name, site_type=site_type)
    db.add(project)
    db.commit()
    db.refresh(project)
    return project


def get_project(db: Session, project_id: str) -> Project:
    project = db.get(Project, project_id)
    if project is None:
        raise ProjectNotFoundError(project_id)
    return project


def ensure_credits(db: Session, project: Project) -> None:
    profile = get_or_create_profile(db, project.owner_id)
    if profile.generation_credits <= 0:
        raise InsufficientCreditsError()


def latest_version(db: Session, project_id: str) -> Optional[GenerationVersion]:
    stmt = (
        select(GenerationVersion)
        .where(GenerationVersion.project_id == project_id)
        .order_by(GenerationVersion.version_number.desc())
        .limit(1)
    )
    return db.scalars(stmt).first()


def latest_completed_version(db: Session, project_id: str) -> Optional[GenerationVersion]:
    stmt = (
        select(GenerationVersion)
        .where(GenerationVersion.project_id == project_id, GenerationVersion.status == VersionStatus.COMPLETE)
        .order_by(GenerationVersion.version_number.desc())
        .limit(1)
    )
    return db.scalars(stmt).first()


def load_files(db: Session, version_id: str) -> List[VirtualFile]:
    stmt = select(GeneratedFile).where(GeneratedFile.version_id == version_id).order_by(GeneratedFile.file_path)
    return [
        VirtualFile(path=f.file_path, content=f.content, type=f.file_type, section_type=f.section_type)
        for f in db.scalars(stmt)
    ]


def load_edit_base(db: Session, project_id: str) -> List[VirtualFile]:
    """Files of the latest completed version; the starting point of an edit."""
    version = latest_completed_version(db, project_id)
    if version is None:
        raise NoCompletedVersionError()
    files = load_files(db, version.id)
    if not files:
        raise NoFilesError()
    return files


def create_version(db: Session, project: Project, trigger: TriggerType,
                   generation_config: Optional[Dict[str, Any]] = None) -> GenerationVersion:
    current = db.scalar(
        select(func.max(GenerationVersion.version_number)).where(GenerationVersion.project_id == project.id)
    ) or 0
    version = GenerationVersion(
        project_id=project.id,
        version_number=current + 1,
        status=VersionStatus.GENERATING,
        trigger=trigger,
        model_used=settings.generation_model,
    )
    project.status = ProjectStatus.GENERATING
    project.updated_at = datetime.utcnow()
    if generation_config is not None:
        project.generation_config = generation_config
    db.add(version)
    db.commit()
    db.refresh(version)
    log.info("Created version %d (%s)", version.version_number, trigger.value,
             extra={"project_id": project.id, "stage": "-"})
    return version


def complete_version(db: Session, version: GenerationVersion, files: VirtualFileTree, elapsed_ms: int) -> None:
    for f in files:
        db.add(GeneratedFile(
            version_id=version.id,
            project_id=version.project_id,
            file_path=f.path,
            content=f.content,
            file_type=f.type,
            section_type=f.section_type,
        ))
    now = datetime.utcnow()
    version.status = VersionStatus.COMPLETE
    version.generation_time_ms = elapsed_ms
    version.completed_at = now

    project = db.get(Project, version.project_id)
    project.status = ProjectStatus.GENERATED
    project.last_generated_at = now
    project.updated_at = now
    profile = get_or_create_profile(db, project.owner_id)
    profile.generation_credits = max(0, profile.generation_credits - 1)
    db.commit()
    log.info("Stored %d files for version %d", len(files), version.version_number,
             extra={"project_id": version.project_id, "stage": "complete"})


def fail_version(db: Session, version: GenerationVersion, message: str) -> None:
    version.status = VersionStatus.ERROR
    version.error_message = message
    version.completed_at = datetime.utcnow()
    project = db.get(Project, version.project_id)
    if project is not None:
        project.status = ProjectStatus.ERROR
        project.updated_at = datetime.utcnow()
    db.commit()
    log.error("Version %d failed: %s", version.version_number, message,
              extra={"project_id": version.project_id, "stage": "error"})


def status_payload(db: Session, project_id: str) -> Dict[str, Any]:
    project = get_project(db, project_id)
    version = latest_version(db, project_id)
    file_count = 0
    latest = None
    if version is not None:
        file_count = db.scalar(
            select(func.count(GeneratedFile.id)).where(GeneratedFile.version_id == version.id)
        ) or 0
        latest = {
            "id": version.id,
            "versionNumber": version.version_number,
            "status": version.status.value,
            "generationTimeMs": version.generation_time_ms,
            "completedAt": version.completed_at.isoformat() if version.completed_at else None,
            "createdAt": version.created_at.isoformat(),
        }
    return {
        "projectStatus": project.status.value,
        "lastGeneratedAt": project.last_generated_at.isoformat() if project.last_generated_at else None,
        "latestVersion": latest,
        "fileCount": file_count,
    }


_END = object()

# Strong references to runs still draining; a consumer may already be gone.
_ACTIVE_RUNS: Set[asyncio.Task] = set()


async def _record_run(
    events: AsyncIterator[GenerationEvent],
    version_id: str,
    ctx: RunContext,
    factory: Callable[[], Session],
    queue: asyncio.Queue,
) -> None:
    """Drain ``events`` to the end, storing the outcome before the terminal event is queued."""
    started = time.monotonic()
    finished = False
    try:
        async for event in events:
            if event.type == EventType.GENERATION_COMPLETE:
                with factory() as db:
                    version = db.get(GenerationVersion, version_id)
                    complete_version(db, version, ctx.files, int((time.monotonic() - started) * 1000))
                finished = True
            elif event.type == EventType.ERROR:
                with factory() as db:
                    fail_version(db, db.get(GenerationVersion, version_id), event.error or "Generation failed")
                finished = True
            queue.put_nowait(event)
    except Exception as e:
        if not finished:
            with factory() as db:
                fail_version(db, db.get(GenerationVersion, version_id), str(e))
            finished = True
        queue.put_nowait(e)
    finally:
        # no terminal event: the stream ended early or the task was cancelled
        if not finished:
            with factory() as db:
                fail_version(db, db.get(GenerationVersion, version_id), "Generation interrupted before completion")
        queue.put_nowait(_END)


async def persist_run(
    events: AsyncIterator[GenerationEvent],
    version_id: str,
    ctx: RunContext,
    session_factory: Optional[Callable[[], Session]] = None,
) -> AsyncIterator[GenerationEvent]:
    """Relay every event unchanged and store the run's outcome once it terminates.

    The run is drained by its own task, so a consumer that goes away (a client
    disconnect) does not stop it: the version still ends up complete or error and
    the client can recover the result through the status endpoint.
    """
    queue: asyncio.Queue = asyncio.Queue()
    task = asyncio.get_running_loop().create_task(
        _record_run(events, version_id, ctx, session_factory or db_session.SessionLocal, queue))
    _ACTIVE_RUNS.add(task)
    task.add_done_callback(_ACTIVE_RUNS.discard)
    try:
        while True:
            item = await queue.get()
            if item is _END:
                return
            if isinstance(item, Exception):
                raise item
            yield item
    finally:
        if not task.done():
            log.info("Client disconnected, generation continues in the background",
                     extra={"project_id": ctx.project_id, "stage": "-"})


async def wait_for_active_runs() -> None:
    """Wait until every run in flight, including disconnected ones, has stored its outcome."""
    if _ACTIVE_RUNS:
        await asyncio.gather(*list(_ACTIVE_RUNS))
