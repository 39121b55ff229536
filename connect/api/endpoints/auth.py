"""
Authentication endpoints.

- POST   /users/auth/signup: Create an account from a verified email
- POST   /users/auth/signin: Sign in with username or email
- POST   /users/auth/refresh-token: Rotate the refresh token
- DELETE /users/auth/logout: Revoke the current refresh token
- GET    /users/auth/me: Current user profile
"""

from fastapi import APIRouter, Depends, status

from connect.core.deps import get_auth_service, get_current_user
from connect.models.user import User
from connect.schemas.user import (
    AuthResponse,
    MessageResponse,
    RefreshTokenRequest,
    SigninRequest,
    SignupRequest,
    TokenRefreshResponse,
    UserResponse,
)
from connect.services.auth_service import AuthResult, AuthService

router = APIRouter(prefix="/users/auth", tags=["Authentication"])


def _auth_response(result: AuthResult) -> AuthResponse:
    return AuthResponse(
        user=UserResponse.model_validate(result.user),
        access_token=result.tokens.access_token,
        refresh_token=result.tokens.refresh_token,
    )


@router.post("/signup", status_code=status.HTTP_201_CREATED, response_model=AuthResponse)
def signup(
    request: SignupRequest,
    auth: AuthService = Depends(get_auth_service)
):
    """
    Create a user account.

    Requires the id and code of a verification record that was verified for
    this email. Returns tokens for immediate login.
    """
    result = auth.signup(
        username=request.username,
        email=request.email,
        password=request.password,
        verification_id=request.id,
        code=request.code,
    )
    return _auth_response(result)


@router.post("/signin", response_model=AuthResponse)
def signin(
    request: SigninRequest,
    auth: AuthService = Depends(get_auth_service)
):
    """Sign in and receive a new token pair (previous refresh token stops working)."""
    result = auth.signin(request.username, request.password)
    return _auth_response(result)


@router.post("/refresh-token", status_code=status.HTTP_201_CREATED, response_model=TokenRefreshResponse)
def refresh_token(
    request: RefreshTokenRequest,
    auth: AuthService = Depends(get_auth_service)
):
    """Exchange the live refresh token for a new pair."""
    identity_id, tokens = auth.refresh(request.refresh_token)
    return TokenRefreshResponse(
        id=identity_id,
        access_token=tokens.access_token,
        refresh_token=tokens.refresh_token,
    )


@router.delete("/logout", response_model=MessageResponse)
def logout(
    request: RefreshTokenRequest,
    current_user: User = Depends(get_current_user),
    auth: AuthService = Depends(get_auth_service)
):
    """
    Log the user out by revoking their refresh token.

    Requires a valid Bearer access token and the refresh token in the body.
    """
    auth.logout(request.refresh_token)
    return MessageResponse(message="User logged out successfully.")


@router.get("/me", response_model=UserResponse)
def get_current_user_profile(
    current_user: User = Depends(get_current_user)
):
    """Get the authenticated user's profile."""
    return current_user
