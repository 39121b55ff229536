"""
User model for authentication.

A User is created only after its email address has been verified, and is the
identity that access and refresh tokens are issued for.
"""

import uuid
from sqlalchemy import Column, String, DateTime, Uuid, func
from connect.core.database import Base


DEFAULT_PROFILE_PHOTO = "defaultProfilePic.png"


class User(Base):
    """
    Verified user account.

    Username and email are unique independently of each other; either one
    can be used to sign in.
    """
    __tablename__ = "users"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4, index=True)

    # Authentication credentials
    username = Column(String(32), unique=True, nullable=False, index=True)
    email = Column(String, unique=True, nullable=False, index=True)
    hashed_password = Column(String, nullable=False)

    # User profile
    fullname = Column(String, nullable=True)
    relationship_status = Column(String, nullable=True)
    profile_photo_url = Column(String, nullable=False, default=DEFAULT_PROFILE_PHOTO)

    # Timestamps
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    def __repr__(self):
        return f"<User(id={self.id}, username='{self.username}', email='{self.email}')>"
