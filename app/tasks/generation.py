from __future__ import annotations
import asyncio
import logging
from typing import Any, Dict
from sqlalchemy.orm import Session
from app.tasks.celery_app import celery_app
from app.agents.base import RunContext
from app.core.engine import GenerationPipeline
from app.core.model_client import ModelClient
from app.core.workflow import EventType, VersionStatus
from app.db import crud
from app.db.session import SessionLocal
from app.db.models import GenerationVersion

log = logging.getLogger(__name__)


async def drain_generation(version_id: str, config: Dict[str, Any], ctx: RunContext,
                           model_client: ModelClient | None = None) -> EventType | None:
    """Run the full pipeline with persistence and return the terminal event type."""
    pipeline = GenerationPipeline(model_client or ModelClient())
    last = None
    async for event in crud.persist_run(pipeline.run(config, ctx), version_id, ctx):
        last = event.type
    return last


@celery_app.task(name="run_generation")
def run_generation(version_id: str, config: Dict[str, Any]) -> None:
    db: Session = SessionLocal()
    try:
        version = db.get(GenerationVersion, version_id)
        if not version:
            log.error("Version not found: %s", version_id, extra={"project_id": "-", "stage": "-"})
            return
        project_id = version.project_id
        log.info("Starting background generation (version %d)", version.version_number,
                 extra={"project_id": project_id, "stage": "-"})

        ctx = RunContext(project_id=project_id)
        outcome = asyncio.run(drain_generation(version_id, config, ctx))
        log.info("Background generation finished: %s", outcome.value if outcome else "no events",
                 extra={"project_id": project_id, "stage": "complete"})

    except Exception as e:
        log.exception("Background generation failed", extra={"project_id": "-", "stage": "error"})
        db.expire_all()
        version = db.get(GenerationVersion, version_id)
        if version and version.status == VersionStatus.GENERATING:
            crud.fail_version(db, version, str(e))
    finally:
        db.close()
