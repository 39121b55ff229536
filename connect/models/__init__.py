"""
Database models package.
"""

from connect.models.user import User
from connect.models.email_verification import EmailVerification

__all__ = ["User", "EmailVerification"]
