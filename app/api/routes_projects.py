from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session
from app.core.errors import DomainError
from app.db import crud
from app.db.models import Project
from app.db.session import get_db
from app.schemas.projects import ProjectCreateRequest, ProjectResponse

router = APIRouter(prefix="/projects")

def _to_response(db: Session, project: Project) -> ProjectResponse:
    profile = crud.get_or_create_profile(db, project.owner_id)
    return ProjectResponse(
        id=project.id,
        owner_id=project.owner_id,
        name=project.name,
        site_type=project.site_type,
        status=project.status,
        last_generated_at=project.last_generated_at,
        generation_credits=profile.generation_credits,
    )

@router.post("", response_model=ProjectResponse, status_code=201)
def create_project(req: ProjectCreateRequest, db: Session = Depends(get_db)):
    project = crud.create_project(db, owner_id=req.owner_id, name=req.name, site_type=req.site_type)
    return _to_response(db, project)

@router.get("/{project_id}", response_model=ProjectResponse)
def get_project(project_id: str, db: Session = Depends(get_db)):
    try:
        project = crud.get_project(db, project_id)
    except DomainError as e:
        raise HTTPException(status_code=e.status_code, detail=str(e))
    return _to_response(db, project)
