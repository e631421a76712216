import logging
import time
from contextlib import asynccontextmanager
from pathlib import Path
import uvicorn
from fastapi import FastAPI
from sqlalchemy import text
from alembic.config import Config
from alembic import command
from app.core.config import settings
from app.core.logging import configure_logging
from app.api.routes import router as api_router
from app.db import crud
from app.db.session import engine

configure_logging()
log = logging.getLogger(__name__)

NO_CONTEXT = {"project_id": "-", "stage": "-"}
ALEMBIC_INI = Path(__file__).resolve().parent.parent / "alembic.ini"


def wait_for_database(max_retries: int = 30, retry_delay: float = 1.0) -> None:
    """Block until the database server accepts connections. SQLite files need no wait."""
    if engine.dialect.name == "sqlite":
        return
    for attempt in range(1, max_retries + 1):
        try:
            with engine.connect() as conn:
                conn.execute(text("SELECT 1"))
            log.info("Database reachable after %d attempt(s)", attempt, extra=NO_CONTEXT)
            return
        except Exception as e:
            if attempt == max_retries:
                log.error("Database unreachable after %d attempts", max_retries, extra=NO_CONTEXT)
                raise
            log.warning("Database not ready (%d/%d), retrying in %ss: %s",
                        attempt, max_retries, retry_delay, e, extra=NO_CONTEXT)
            time.sleep(retry_delay)


def run_migrations() -> None:
    """Upgrade the schema to the latest Alembic revision."""
    cfg = Config(str(ALEMBIC_INI))
    cfg.set_main_option("script_location", str(ALEMBIC_INI.parent / "alembic"))
    log.info("Applying migrations from %s", ALEMBIC_INI.parent / "alembic", extra=NO_CONTEXT)
    try:
        command.upgrade(cfg, "head")
    except Exception as e:
        log.error("Database migration failed: %s", e, exc_info=True, extra=NO_CONTEXT)
        raise


@asynccontextmanager
async def lifespan(app: FastAPI):
    log.info("Starting %s (%s) with model %s", settings.app_name, settings.app_env,
             settings.generation_model, extra=NO_CONTEXT)
    wait_for_database()
    run_migrations()
    if not settings.anthropic_api_key:
        log.warning("ANTHROPIC_API_KEY is not set; generation requests will fail", extra=NO_CONTEXT)
    yield
    log.info("Shutting down %s", settings.app_name, extra=NO_CONTEXT)
    await crud.wait_for_active_runs()


app = FastAPI(
    title=settings.app_name,
    version="0.1.0",
    lifespan=lifespan
)
app.include_router(api_router, prefix="/v1")


def run() -> None:
    uvicorn.run("app.main:app", host=settings.api_host, port=settings.api_port)
