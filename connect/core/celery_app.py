"""
Celery application configuration.

Redis is both the message broker and the result backend. The worker only runs
outbound email delivery for this service.
"""

from celery import Celery
from connect.core.config import settings

celery_app = Celery(
    "connect_worker",
    broker=settings.REDIS_URL,
    backend=settings.REDIS_URL
)

celery_app.conf.update(
    # Serialization
    task_serializer="json",
    accept_content=["json"],
    result_serializer="json",

    # Timezone
    timezone="UTC",
    enable_utc=True,

    # Task behavior
    task_time_limit=60,
    task_soft_time_limit=45,

    # Result backend
    result_expires=3600,

    worker_prefetch_multiplier=1,
)

celery_app.autodiscover_tasks(['connect'])
