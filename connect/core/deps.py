"""
FastAPI dependencies for services and authentication.

Store handles are injected here: the database session per request, the
session cache from app.state (built in the application lifespan), and the
notification sink. Tests override these to swap in doubles.
"""

from fastapi import Depends, Request
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.orm import Session
from typing import Optional

from connect.core.database import get_db
from connect.core.errors import UnauthenticatedError
from connect.core.session_cache import SessionCache
from connect.models.user import User
from connect.services import notifier
from connect.services.auth_service import AuthService
from connect.services.token_service import TokenService
from connect.services.verification_service import VerificationService

# HTTP Bearer token scheme (Authorization: Bearer <token>)
security = HTTPBearer(auto_error=False)


def get_session_cache(request: Request) -> SessionCache:
    return request.app.state.session_cache


def get_notifier() -> notifier.Notifier:
    return notifier.send_verification_code


def get_token_service(cache: SessionCache = Depends(get_session_cache)) -> TokenService:
    return TokenService.from_settings(cache)


def get_verification_service(
    db: Session = Depends(get_db),
    notify: notifier.Notifier = Depends(get_notifier),
) -> VerificationService:
    return VerificationService(db, notify)


def get_auth_service(
    db: Session = Depends(get_db),
    tokens: TokenService = Depends(get_token_service),
) -> AuthService:
    return AuthService(db, tokens)


def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    auth: AuthService = Depends(get_auth_service),
) -> User:
    """
    Resolve the calling user from the Bearer access token.

    Access tokens are checked by signature, issuer and expiry only; the
    session cache is not consulted.

    Raises:
        UnauthenticatedError: Missing, invalid or expired token, or unknown user
    """
    if credentials is None or not credentials.credentials:
        raise UnauthenticatedError()

    return auth.get_authenticated_user(credentials.credentials)
