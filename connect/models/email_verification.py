"""
Email verification model for 6-digit signup codes.

One row exists per email address while a signup is in flight. The row is
consumed (deleted) when the matching User is created.
"""

import uuid
from sqlalchemy import Column, String, Boolean, DateTime, Integer, Uuid, CheckConstraint, func
from connect.core.database import Base


MAX_VERIFICATION_ATTEMPTS = 3
CODE_MIN = 100000
CODE_MAX = 999999


class EmailVerification(Base):
    """
    Email verification codes for account signup.

    Features:
    - 6-digit numeric code, assigned once and reused on resend
    - Attempt counter (starts at 3, decremented on each wrong code)
    - Verified flag checked again at signup time
    """
    __tablename__ = "email_verifications"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4, index=True)
    email = Column(String, unique=True, nullable=False, index=True)

    # 6-digit verification code (100000-999999)
    code = Column(Integer, nullable=False)

    is_verified = Column(Boolean, nullable=False, default=False)
    attempts = Column(Integer, nullable=False, default=MAX_VERIFICATION_ATTEMPTS)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    __table_args__ = (
        CheckConstraint(
            f'attempts >= 0 AND attempts <= {MAX_VERIFICATION_ATTEMPTS}',
            name='ck_email_verifications_attempts_range'
        ),
    )

    def __repr__(self):
        return f"<EmailVerification(email={self.email}, attempts={self.attempts}, is_verified={self.is_verified})>"
