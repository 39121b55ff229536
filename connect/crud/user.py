"""
CRUD operations for the User model (identity store).

Functions add and flush but never commit: the calling service owns the
transaction so that multi-step writes commit or roll back together.
"""

import uuid
from typing import Optional
from sqlalchemy import or_
from sqlalchemy.orm import Session
from connect.models.user import User


def get_by_id(db: Session, user_id: uuid.UUID) -> Optional[User]:
    return db.query(User).filter(User.id == user_id).first()


def get_by_username(db: Session, username: str) -> Optional[User]:
    return db.query(User).filter(User.username == username).first()


def get_by_email(db: Session, email: str) -> Optional[User]:
    return db.query(User).filter(User.email == email).first()


def get_by_username_or_email(db: Session, login: str) -> Optional[User]:
    """
    Find a user whose username or email equals the given login string.

    Args:
        db: Database session
        login: Username or email entered at signin

    Returns:
        First matching User, or None
    """
    return db.query(User).filter(
        or_(User.username == login, User.email == login)
    ).first()


def create(db: Session, username: str, email: str, hashed_password: str) -> User:
    """
    Add a new user to the session and flush to assign its id.

    Raises:
        sqlalchemy.exc.IntegrityError: If username or email is already taken
    """
    db_user = User(
        id=uuid.uuid4(),
        username=username,
        email=email,
        hashed_password=hashed_password,
    )
    db.add(db_user)
    db.flush()
    return db_user
