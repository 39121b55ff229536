"""
Security utilities for JWT signing and password hashing.

Access and refresh tokens are HS256 JWTs signed with two independent secrets.
The identity id travels in the audience ("aud") claim; tokens carry no other
payload beyond standard claims. Passwords are hashed using bcrypt.
"""

import uuid
from datetime import datetime, timedelta, timezone
from jose import JWTError, jwt
from passlib.context import CryptContext
from connect.core.config import settings

# Password hashing context (bcrypt, cost factor from settings)
pwd_context = CryptContext(
    schemes=["bcrypt"],
    deprecated="auto",
    bcrypt__rounds=settings.BCRYPT_ROUNDS,
)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify a plain password against a hashed password."""
    # Bcrypt has a 72-byte limit - truncate if necessary
    password_bytes = plain_password.encode('utf-8')[:72]
    return pwd_context.verify(password_bytes, hashed_password)


def get_password_hash(password: str) -> str:
    """
    Hash a password using bcrypt.

    Note: Bcrypt has a 72-byte limit. Passwords longer than 72 bytes
    are automatically truncated to comply with this limitation.
    """
    password_bytes = password.encode('utf-8')[:72]
    return pwd_context.hash(password_bytes)


def sign_token(
    audience: str,
    secret: str,
    expires_delta: timedelta,
    issuer: str,
    algorithm: str = "HS256",
) -> str:
    """
    Sign a JWT for the given audience.

    Args:
        audience: Identity id the token is issued for
        secret: Signing secret (access and refresh use different secrets)
        expires_delta: Lifetime of the token
        issuer: Value of the "iss" claim
        algorithm: JWT signing algorithm

    Returns:
        Encoded JWT as a string

    Raises:
        JWTError: If the secret is empty or signing fails
    """
    if not secret:
        raise JWTError("Signing secret is not configured")

    now = datetime.now(timezone.utc)
    claims = {
        "aud": audience,
        "iss": issuer,
        "iat": now,
        "exp": now + expires_delta,
        # Unique per token so two pairs minted in the same second differ
        "jti": uuid.uuid4().hex,
    }
    return jwt.encode(claims, secret, algorithm=algorithm)


def decode_token(token: str, secret: str, issuer: str, algorithm: str = "HS256") -> dict:
    """
    Decode and validate a JWT token.

    Verifies signature, expiry and issuer. The audience is not known in
    advance (it is the identity id), so it is read back rather than checked.

    Returns:
        Dictionary containing the token payload

    Raises:
        JWTError: If token is invalid or expired (ExpiredSignatureError)
    """
    return jwt.decode(
        token,
        secret,
        algorithms=[algorithm],
        issuer=issuer,
        options={"verify_aud": False},
    )
