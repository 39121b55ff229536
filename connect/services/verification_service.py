"""
Email verification for signup.

Handles issuing, resending and checking 6-digit confirmation codes against
the verification ledger.

Life cycle of one record:
- request_code on a new email creates it with 3 attempts and a random code
- request_code on an existing email resets attempts to 3 and resends the
  same code (the code is never regenerated)
- verify_code with a wrong code spends one attempt
- verify_code with the right code marks it verified
- signup consumes (deletes) it
"""

import logging
import secrets
from dataclasses import dataclass
from uuid import UUID

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from connect import crud
from connect.core.errors import (
    AttemptsExhaustedError,
    CodeMismatchError,
    ConflictError,
    InternalError,
    NotFoundError,
)
from connect.models.email_verification import CODE_MIN, CODE_MAX
from connect.services.notifier import Notifier

logger = logging.getLogger(__name__)


def generate_verification_code() -> int:
    """
    Generate a 6-digit code uniformly in [100000, 999999].

    Uses the secrets module for cryptographic randomness.
    """
    return CODE_MIN + secrets.randbelow(CODE_MAX - CODE_MIN + 1)


@dataclass
class VerificationSnapshot:
    id: UUID
    email: str
    code: int
    is_verified: bool


class VerificationService:
    """Issues and checks confirmation codes for one database session."""

    def __init__(self, db: Session, notify: Notifier):
        self.db = db
        self.notify = notify

    def request_code(self, email: str) -> bool:
        """
        Send (or resend) the confirmation code for an email.

        Raises:
            ConflictError: If an account already uses this email
            InternalError: On any database failure

        Returns:
            True once the code has been handed to the notification sink
        """
        try:
            if crud.user.get_by_email(self.db, email):
                raise ConflictError(
                    "This email is already taken. If its yours then, try log in instead.",
                    code="EMAIL_TAKEN",
                )

            verification = crud.email_verification.get_by_email(self.db, email)
            if verification is None:
                code = generate_verification_code()
                try:
                    crud.email_verification.create(self.db, email, code)
                    self.db.commit()
                    logger.info(f"Issued new confirmation code for {email}")
                except IntegrityError:
                    # A concurrent request for the same email inserted first
                    self.db.rollback()
                    verification = crud.email_verification.get_by_email(self.db, email)
                    if verification is None:
                        raise

            if verification is not None:
                code = verification.code
                crud.email_verification.reset_attempts(self.db, verification.id)
                self.db.commit()
                logger.info(f"Resending existing confirmation code for {email}")
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Failed to store confirmation code for {email}: {e}")
            raise InternalError() from e

        try:
            self.notify(code, email)
        except Exception:
            # Delivery is fire-and-forget; the user can ask for a resend
            logger.exception(f"Notification sink failed for {email}")
        return True

    def verify_code(self, email: str, code: int) -> VerificationSnapshot:
        """
        Check a confirmation code.

        The attempts check runs before the code comparison, so the third wrong
        code reports CodeMismatchError (attempts now 0) and only the fourth
        call reports AttemptsExhaustedError.

        Raises:
            NotFoundError: No code was requested for this email
            AttemptsExhaustedError: No attempts left; a new request_code is needed
            CodeMismatchError: Wrong code; one attempt was spent
            InternalError: On any database failure
        """
        try:
            verification = crud.email_verification.get_by_email(self.db, email)
            if verification is None:
                raise NotFoundError(
                    "No confirmation code was requested for this email. Please request a code first.",
                    code="VERIFICATION_NOT_FOUND",
                )

            if verification.attempts <= 0:
                raise AttemptsExhaustedError()

            if verification.code != code:
                spent = crud.email_verification.decrement_attempts(self.db, verification.id)
                self.db.commit()
                if not spent:
                    # Another request used up the last attempt first
                    raise AttemptsExhaustedError()
                self.db.refresh(verification)
                logger.info(f"Wrong confirmation code for {email} ({verification.attempts} attempts left)")
                raise CodeMismatchError(attempts_remaining=verification.attempts)

            if not crud.email_verification.mark_verified(self.db, verification.id):
                self.db.rollback()
                raise AttemptsExhaustedError()
            self.db.commit()
            self.db.refresh(verification)
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Failed to verify confirmation code for {email}: {e}")
            raise InternalError() from e

        logger.info(f"Email verified: {email}")
        return VerificationSnapshot(
            id=verification.id,
            email=verification.email,
            code=verification.code,
            is_verified=verification.is_verified,
        )
