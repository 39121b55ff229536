"""
Celery tasks package.

- email_tasks: outbound confirmation-code emails
"""

from connect.tasks import email_tasks

__all__ = ["email_tasks"]
