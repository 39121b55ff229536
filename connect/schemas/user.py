"""
Pydantic schemas for signup, signin and token endpoints.
"""

from pydantic import BaseModel, ConfigDict, EmailStr, Field, UUID4
from typing import Optional
from datetime import datetime


class SignupRequest(BaseModel):
    """Request schema for creating an account from a verified email."""
    username: str = Field(..., min_length=2, max_length=32)
    email: EmailStr
    password: str = Field(..., min_length=6, max_length=32)
    id: UUID4 = Field(..., description="Id of the verified email verification record")
    code: int = Field(..., ge=100000, le=999999, description="6-digit confirmation code")


class SigninRequest(BaseModel):
    """Request schema for signin; username may also be an email address."""
    username: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)


class RefreshTokenRequest(BaseModel):
    """Body for refresh and logout. A missing token is rejected by the service."""
    refresh_token: Optional[str] = None


class UserResponse(BaseModel):
    """User summary (no password hash)."""
    model_config = ConfigDict(from_attributes=True)

    id: UUID4
    username: str
    email: str
    fullname: Optional[str] = None
    relationship_status: Optional[str] = None
    profile_photo_url: str
    created_at: Optional[datetime] = None


class AuthResponse(BaseModel):
    """Signup/signin response: the user plus a fresh token pair."""
    user: UserResponse
    access_token: str
    refresh_token: str
    token_type: str = "bearer"


class TokenRefreshResponse(BaseModel):
    """Refresh response: identity id and the rotated token pair."""
    id: str
    access_token: str
    refresh_token: str
    token_type: str = "bearer"


class MessageResponse(BaseModel):
    message: str
