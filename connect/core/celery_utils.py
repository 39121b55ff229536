"""
Queueing Celery tasks from request handlers without blocking on the broker.

Publishing happens on a small worker pool and the caller waits at most
EMAIL_QUEUE_TIMEOUT seconds. A broker outage costs one logged error, never
a failed request.
"""

import logging
from concurrent.futures import ThreadPoolExecutor, TimeoutError as FutureTimeoutError
from typing import NamedTuple, Optional
from celery import Task
from kombu import Connection
from connect.core.config import settings

logger = logging.getLogger(__name__)

_publisher = ThreadPoolExecutor(max_workers=2, thread_name_prefix="connect_publish")

# Broker-level publish retries; the task's own retries happen in the worker
PUBLISH_RETRY_POLICY = {
    'max_retries': 2,
    'interval_start': 0,
    'interval_step': 0.25,
    'interval_max': 0.5,
}


class PublishResult(NamedTuple):
    task_id: Optional[str]
    error: Optional[str]


def _publish(task: Task, args: tuple, kwargs: dict) -> PublishResult:
    try:
        with Connection(settings.REDIS_URL, connect_timeout=settings.EMAIL_QUEUE_TIMEOUT) as conn:
            result = task.apply_async(
                args=args,
                kwargs=kwargs,
                connection=conn,
                retry=True,
                retry_policy=PUBLISH_RETRY_POLICY,
            )
            return PublishResult(result.id, None)
    except Exception as e:
        return PublishResult(None, str(e))


def queue_task_safely(task: Task, *args, **kwargs) -> bool:
    """
    Publish a task and report whether the broker accepted it.

    Returns:
        bool: True once the broker has the message, False on error or timeout
    """
    future = _publisher.submit(_publish, task, args, kwargs)
    try:
        published = future.result(timeout=settings.EMAIL_QUEUE_TIMEOUT)
    except FutureTimeoutError:
        logger.error(f"Gave up publishing {task.name} after {settings.EMAIL_QUEUE_TIMEOUT}s")
        return False

    if published.error:
        logger.error(f"Broker rejected {task.name}: {published.error}")
        return False

    logger.info(f"Published {task.name} as {published.task_id}")
    return True
