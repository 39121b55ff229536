"""
Notification sink for confirmation codes.

Delivery is fire-and-forget: the email is queued for the Celery worker and
any queueing failure is logged, never raised to the caller.
"""

import logging
from typing import Callable

from connect.core.celery_utils import queue_task_safely
from connect.tasks.email_tasks import send_verification_code_email_task

logger = logging.getLogger(__name__)

# send(code, email) -> None
Notifier = Callable[[int, str], None]


def send_verification_code(code: int, email: str) -> None:
    if not queue_task_safely(send_verification_code_email_task, code=code, to_email=email):
        logger.error(f"Confirmation code email for {email} was not queued")
