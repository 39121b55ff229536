"""
Signup, signin, refresh and logout use cases.

Composes the identity store, the verification ledger and the token service.
Every step is a hard stop on failure; database errors roll the session back
and surface as InternalError.
"""

import logging
from dataclasses import dataclass
from typing import Optional
from uuid import UUID

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from connect import crud
from connect.core.errors import (
    BadRequestError,
    ConflictError,
    InternalError,
    NotFoundError,
    UnauthenticatedError,
    UnverifiedError,
)
from connect.core.security import get_password_hash, verify_password
from connect.models.user import User
from connect.services.token_service import TokenPair, TokenService

logger = logging.getLogger(__name__)


@dataclass
class AuthResult:
    user: User
    tokens: TokenPair


class AuthService:
    """Authentication use cases for one request."""

    def __init__(self, db: Session, tokens: TokenService):
        self.db = db
        self.tokens = tokens

    def signup(
        self,
        username: str,
        email: str,
        password: str,
        verification_id: UUID,
        code: int,
    ) -> AuthResult:
        """
        Create an account from a verified email and sign it in.

        Steps:
        1. Username must be unused
        2. Email must be unused
        3. A verified record matching (id, email, code) must exist
        4. Hash the password
        5. Create the user and delete the verification record in one commit
        6. Mint a token pair for the new user

        Raises:
            ConflictError: Username or email already taken
            UnverifiedError: No matching verified record
            InternalError: Database, hashing, signing or cache failure
        """
        try:
            if crud.user.get_by_username(self.db, username):
                raise ConflictError(
                    "This username is already taken. Please try another one",
                    code="USERNAME_TAKEN",
                )
            if crud.user.get_by_email(self.db, email):
                raise ConflictError(
                    "This email is already taken. Please try another one",
                    code="EMAIL_TAKEN",
                )
            if crud.email_verification.get_verified(self.db, verification_id, email, code) is None:
                raise UnverifiedError()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Signup lookup failed for {email}: {e}")
            raise InternalError() from e

        try:
            hashed_password = get_password_hash(password)
        except ValueError as e:
            logger.error(f"Password hashing failed during signup for {email}: {e}")
            raise InternalError() from e

        try:
            user = crud.user.create(self.db, username, email, hashed_password)
            crud.email_verification.delete_by_email(self.db, email)
            self.db.commit()
            self.db.refresh(user)
        except IntegrityError as e:
            # Lost a race with a concurrent signup for the same username/email
            self.db.rollback()
            logger.warning(f"Signup conflict for {username} / {email}: {e.orig}")
            raise ConflictError("This username or email is already taken. Please try another one") from e
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Failed to create user {username}: {e}")
            raise InternalError() from e

        logger.info(f"New user signed up: {user.username} (id: {user.id})")

        tokens = self.tokens.mint_pair(str(user.id))
        return AuthResult(user=user, tokens=tokens)

    def signin(self, login: str, password: str) -> AuthResult:
        """
        Sign in with username or email and password.

        A fresh pair replaces whatever session the user had before.

        Raises:
            NotFoundError: No account for this username/email
            UnauthenticatedError: Wrong password
            InternalError: Database, signing or cache failure
        """
        try:
            user = crud.user.get_by_username_or_email(self.db, login)
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Signin lookup failed: {e}")
            raise InternalError() from e

        if user is None:
            raise NotFoundError(
                "The username you entered doesn't belong to an account. Please try again.",
                code="ACCOUNT_NOT_FOUND",
            )

        if not verify_password(password, user.hashed_password):
            raise UnauthenticatedError(
                "Password you entered is wrong. Please try again.",
                code="INVALID_CREDENTIALS",
            )

        logger.info(f"User signed in: {user.username}")
        tokens = self.tokens.mint_pair(str(user.id))
        return AuthResult(user=user, tokens=tokens)

    def refresh(self, refresh_token: Optional[str]) -> tuple[str, TokenPair]:
        """
        Exchange the live refresh token for a new pair.

        The presented token stops working as soon as the new one is cached.

        Returns:
            (identity_id, new TokenPair)
        """
        if not refresh_token:
            raise BadRequestError()

        identity_id = self.tokens.validate_refresh(refresh_token)
        tokens = self.tokens.mint_pair(identity_id)
        logger.info(f"Rotated refresh token for identity {identity_id}")
        return identity_id, tokens

    def logout(self, refresh_token: Optional[str]) -> str:
        """
        Revoke the session a live refresh token belongs to.

        Returns:
            The identity id that was logged out
        """
        if not refresh_token:
            raise BadRequestError()

        identity_id = self.tokens.validate_refresh(refresh_token)
        self.tokens.revoke(identity_id)
        logger.info(f"User logged out: identity {identity_id}")
        return identity_id

    def get_authenticated_user(self, access_token: str) -> User:
        """
        Resolve the user behind a Bearer access token.

        Raises:
            UnauthenticatedError: Invalid/expired token or unknown user
        """
        identity_id = self.tokens.verify_access(access_token)
        try:
            user_id = UUID(identity_id)
        except ValueError:
            raise UnauthenticatedError()

        try:
            user = crud.user.get_by_id(self.db, user_id)
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"User lookup failed for identity {identity_id}: {e}")
            raise InternalError() from e

        if user is None:
            raise UnauthenticatedError()
        return user
