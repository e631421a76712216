import logging
from fastapi import APIRouter, Depends, HTTPException, Query
from fastapi.responses import HTMLResponse
from sqlalchemy.orm import Session
from app.db import crud
from app.db.models import Project
from app.db.session import get_db
from app.generators.preview.compiler import build_preview_html, diagnostic_html

log = logging.getLogger(__name__)

router = APIRouter(prefix="/preview")


@router.get("/render", response_class=HTMLResponse)
def render_preview(project_id: str = Query("", alias="projectId"), page: str = Query("/"),
                   db: Session = Depends(get_db)):
    if not project_id:
        raise HTTPException(status_code=400, detail="Missing projectId")
    version = None
    if db.get(Project, project_id) is not None:
        version = crud.latest_completed_version(db, project_id)
    if version is None:
        return HTMLResponse(diagnostic_html("No generated version found"))

    files = crud.load_files(db, version.id)
    if not files:
        return HTMLResponse(diagnostic_html("No files found"))

    log.info("Rendering preview of %s (%d files)", page, len(files),
             extra={"project_id": project_id, "stage": "-"})
    return HTMLResponse(build_preview_html({f.path: f.content for f in files}, page=page))
