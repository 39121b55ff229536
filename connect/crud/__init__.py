"""
CRUD operations (Create, Read, Update, Delete) for database models.

This layer provides a clean separation between services and database operations,
following the Repository pattern.
"""

from connect.crud import user, email_verification

__all__ = ["user", "email_verification"]
