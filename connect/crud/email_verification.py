"""
CRUD operations for the EmailVerification model (verification ledger).

Attempt changes are single-statement conditional UPDATEs so concurrent
verify calls on one email can never push attempts outside [0, 3].
Like the user CRUD, nothing here commits.
"""

import uuid
from typing import Optional
from sqlalchemy.orm import Session
from connect.models.email_verification import EmailVerification, MAX_VERIFICATION_ATTEMPTS


def get_by_email(db: Session, email: str) -> Optional[EmailVerification]:
    return db.query(EmailVerification).filter(EmailVerification.email == email).first()


def get_verified(
    db: Session,
    verification_id: uuid.UUID,
    email: str,
    code: int
) -> Optional[EmailVerification]:
    """
    Find the verified record matching id, email and code exactly.

    Returns:
        EmailVerification if all four conditions hold, None otherwise
    """
    return db.query(EmailVerification).filter(
        EmailVerification.id == verification_id,
        EmailVerification.email == email,
        EmailVerification.code == code,
        EmailVerification.is_verified == True  # noqa: E712
    ).first()


def create(db: Session, email: str, code: int) -> EmailVerification:
    """Add a fresh record with a full set of attempts."""
    verification = EmailVerification(
        id=uuid.uuid4(),
        email=email,
        code=code,
        is_verified=False,
        attempts=MAX_VERIFICATION_ATTEMPTS,
    )
    db.add(verification)
    db.flush()
    return verification


def reset_attempts(db: Session, verification_id: uuid.UUID) -> int:
    """Restore the attempt counter to its maximum (resend path)."""
    return db.query(EmailVerification).filter(
        EmailVerification.id == verification_id
    ).update(
        {EmailVerification.attempts: MAX_VERIFICATION_ATTEMPTS},
        synchronize_session=False
    )


def decrement_attempts(db: Session, verification_id: uuid.UUID) -> bool:
    """
    Consume one attempt if any are left.

    Returns:
        True if a row was updated, False if attempts were already 0
    """
    updated = db.query(EmailVerification).filter(
        EmailVerification.id == verification_id,
        EmailVerification.attempts > 0
    ).update(
        {EmailVerification.attempts: EmailVerification.attempts - 1},
        synchronize_session=False
    )
    return updated == 1


def mark_verified(db: Session, verification_id: uuid.UUID) -> bool:
    """
    Flag the record as verified while it still has attempts left.

    Returns:
        True if a row was updated, False if attempts ran out concurrently
    """
    updated = db.query(EmailVerification).filter(
        EmailVerification.id == verification_id,
        EmailVerification.attempts > 0
    ).update(
        {EmailVerification.is_verified: True},
        synchronize_session=False
    )
    return updated == 1


def delete_by_email(db: Session, email: str) -> int:
    """Delete the record for an email. Returns the number of rows removed."""
    return db.query(EmailVerification).filter(
        EmailVerification.email == email
    ).delete(synchronize_session=False)
