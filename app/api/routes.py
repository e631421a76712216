from fastapi import APIRouter
from app.api.routes_health import router as health_router
from app.api.routes_projects import router as projects_router
from app.api.routes_generate import router as generate_router
from app.api.routes_preview import router as preview_router

router = APIRouter()
router.include_router(health_router, tags=["health"])
router.include_router(projects_router, tags=["projects"])
router.include_router(generate_router, tags=["generate"])
router.include_router(preview_router, tags=["preview"])
