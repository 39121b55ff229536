"""
Pydantic schemas for email verification endpoints.
"""

from pydantic import BaseModel, EmailStr, Field, UUID4


class SendCodeRequest(BaseModel):
    """Request a confirmation code for an email (or resend the existing one)."""
    email: EmailStr


class VerifyCodeRequest(BaseModel):
    """Check a 6-digit confirmation code"""
    email: EmailStr
    code: int = Field(..., ge=100000, le=999999, description="6-digit confirmation code")


class SendCodeResponse(BaseModel):
    message: str = "Email has been sent successfully."


class VerificationData(BaseModel):
    """Snapshot of a verified record; id and code are needed for signup."""
    id: UUID4
    email: str
    code: int
    is_verified: bool


class VerifyCodeResponse(BaseModel):
    data: VerificationData
