from celery import Celery

from capacity.core.config import settings

celery_app = Celery("capacity", broker=settings.REDIS_URL, backend=settings.REDIS_URL)
celery_app.conf.update(
    task_serializer="json",
    result_serializer="json",
    accept_content=["json"],
    timezone=settings.TZ,
    task_track_started=True,
)
celery_app.autodiscover_tasks(["capacity.worker"])
