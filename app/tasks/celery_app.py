from celery import Celery
from app.core.config import settings

# Redis keys are prefixed with the app name so the broker can be shared.
_KEY_PREFIX = {"global_keyprefix": f"{settings.app_name}:"}

celery_app = Celery(
    settings.app_name,
    broker=settings.redis_url,
    backend=settings.redis_url,
    include=["app.tasks.generation"],
)
celery_app.conf.update(
    task_default_queue=settings.generation_queue,
    task_routes={"run_generation": {"queue": settings.generation_queue}},
    broker_transport_options=_KEY_PREFIX,
    result_backend_transport_options=_KEY_PREFIX,
    task_track_started=True,
    result_expires=settings.generation_result_ttl,
    broker_connection_retry_on_startup=True,
)
