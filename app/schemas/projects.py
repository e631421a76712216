from pydantic import Field
from typing import Optional, Dict, Any, List
from datetime import datetime
from app.core.workflow import ProjectStatus
from app.schemas.generation import CamelModel, SiteType

class ProjectCreateRequest(CamelModel):
    name: str = Field(..., min_length=1, examples=["Bloom & Co Florists"])
    owner_id: str = Field(..., min_length=1, examples=["user-123"])
    site_type: SiteType = "landing-page"

class ProjectResponse(CamelModel):
    id: str
    owner_id: str
    name: str
    site_type: str
    status: ProjectStatus
    last_generated_at: Optional[datetime] = None
    generation_credits: int

class GenerateRequest(CamelModel):
    project_id: str = ""
    # Validated by the config-assembly stage so malformed input is reported as an event
    config: Optional[Dict[str, Any]] = None

class EditRequestBody(CamelModel):
    project_id: str = ""
    edit_instructions: str = ""
    target_files: Optional[List[str]] = None

class BackgroundGenerateResponse(CamelModel):
    version_id: str
