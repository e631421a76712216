import logging
from fastapi import APIRouter, Depends, HTTPException, Query
from fastapi.responses import StreamingResponse
from sqlalchemy.orm import Session
from app.agents.base import RunContext
from app.core.engine import EditPipeline, EditRequest, GenerationPipeline
from app.core.errors import DomainError
from app.core.model_client import ModelClient
from app.core.sse import sse_stream
from app.core.workflow import ProjectStatus, TriggerType
from app.db import crud
from app.db.session import get_db
from app.schemas.projects import BackgroundGenerateResponse, EditRequestBody, GenerateRequest
from app.tasks.generation import run_generation

log = logging.getLogger(__name__)

router = APIRouter(prefix="/generate")

SSE_HEADERS = {"Cache-Control": "no-cache", "Connection": "keep-alive", "X-Accel-Buffering": "no"}


def get_model_client() -> ModelClient:
    return ModelClient()


def _http_error(e: DomainError) -> HTTPException:
    return HTTPException(status_code=e.status_code, detail=str(e))


def _trigger_for(status: ProjectStatus) -> TriggerType:
    return TriggerType.INITIAL if status == ProjectStatus.DRAFT else TriggerType.FULL_REGENERATE


@router.post("/stream")
def generate_stream(req: GenerateRequest, db: Session = Depends(get_db),
                    model_client: ModelClient = Depends(get_model_client)):
    if not req.project_id or not req.config:
        raise HTTPException(status_code=400, detail="Missing projectId or config")
    try:
        project = crud.get_project(db, req.project_id)
        crud.ensure_credits(db, project)
    except DomainError as e:
        raise _http_error(e)

    version = crud.create_version(db, project, _trigger_for(project.status), generation_config=req.config)
    ctx = RunContext(project_id=project.id)
    events = GenerationPipeline(model_client).run(req.config, ctx)
    return StreamingResponse(
        sse_stream(crud.persist_run(events, version.id, ctx)),
        media_type="text/event-stream",
        headers=SSE_HEADERS,
    )


@router.post("/edit")
def generate_edit(req: EditRequestBody, db: Session = Depends(get_db),
                  model_client: ModelClient = Depends(get_model_client)):
    if not req.project_id or not req.edit_instructions.strip():
        raise HTTPException(status_code=400, detail="Missing projectId or editInstructions")
    try:
        project = crud.get_project(db, req.project_id)
        previous = crud.load_edit_base(db, project.id)
        crud.ensure_credits(db, project)
    except DomainError as e:
        raise _http_error(e)

    version = crud.create_version(db, project, TriggerType.EDIT)
    ctx = RunContext(project_id=project.id)
    request = EditRequest(previous_files=previous, instructions=req.edit_instructions,
                          target_files=req.target_files)
    events = EditPipeline(model_client).run(request, ctx)
    return StreamingResponse(
        sse_stream(crud.persist_run(events, version.id, ctx)),
        media_type="text/event-stream",
        headers=SSE_HEADERS,
    )


@router.post("/background", response_model=BackgroundGenerateResponse, status_code=202)
def generate_background(req: GenerateRequest, db: Session = Depends(get_db)):
    if not req.project_id or not req.config:
        raise HTTPException(status_code=400, detail="Missing projectId or config")
    try:
        project = crud.get_project(db, req.project_id)
        crud.ensure_credits(db, project)
    except DomainError as e:
        raise _http_error(e)

    version = crud.create_version(db, project, _trigger_for(project.status), generation_config=req.config)
    run_generation.delay(version.id, req.config)
    log.info("Queued background generation", extra={"project_id": project.id, "stage": "-"})
    return BackgroundGenerateResponse(version_id=version.id)


@router.get("/status")
def generation_status(project_id: str = Query("", alias="projectId"), db: Session = Depends(get_db)):
    if not project_id:
        raise HTTPException(status_code=400, detail="Missing projectId")
    try:
        return crud.status_payload(db, project_id)
    except DomainError as e:
        raise _http_error(e)
