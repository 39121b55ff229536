"""
Celery tasks for email operations.
"""

import logging
from celery import shared_task
from connect.services.email_service import email_service

logger = logging.getLogger(__name__)


class EmailDeliveryError(Exception):
    """SES did not accept the message; raised so Celery retries."""


@shared_task(
    bind=True,
    name="send_verification_code_email_task",
    max_retries=3,
    default_retry_delay=60,
    autoretry_for=(EmailDeliveryError,),
    retry_backoff=True,
    retry_backoff_max=600,
    retry_jitter=True
)
def send_verification_code_email_task(self, code: int, to_email: str):
    """
    Send a signup confirmation code, retrying with exponential backoff.

    Args:
        code: 6-digit confirmation code
        to_email: Recipient email address
    """
    logger.info(f"Sending confirmation code to {to_email} (attempt {self.request.retries + 1})")

    if not email_service.send_verification_code(code, to_email):
        if self.request.retries >= self.max_retries:
            logger.error(f"All retry attempts exhausted for {to_email}")
        raise EmailDeliveryError(f"Failed to send confirmation code to {to_email}")

    return {"status": "success", "email": to_email}
