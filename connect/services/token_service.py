"""
Token service: minting, validating and revoking access/refresh token pairs.

Access tokens are stateless and verified by signature and expiry alone.
Refresh tokens are additionally bound to the session cache: a refresh token
is accepted only while it is the exact value cached for its identity. Minting
a new pair overwrites the cached value (rotation), revoking deletes it.
"""

import logging
from dataclasses import dataclass
from datetime import timedelta

from jose import JWTError, ExpiredSignatureError

from connect.core.config import settings
from connect.core.errors import InternalError, UnauthenticatedError
from connect.core.security import sign_token, decode_token
from connect.core.session_cache import SessionCache

logger = logging.getLogger(__name__)


@dataclass
class TokenPair:
    access_token: str
    refresh_token: str


class TokenService:
    """
    Issues and checks token pairs for one identity at a time.

    One refresh token per identity is live at any moment.
    """

    def __init__(
        self,
        cache: SessionCache,
        access_secret: str,
        refresh_secret: str,
        access_ttl_seconds: int,
        refresh_ttl_seconds: int,
        issuer: str,
        algorithm: str = "HS256",
    ):
        self.cache = cache
        self.access_secret = access_secret
        self.refresh_secret = refresh_secret
        self.access_ttl_seconds = access_ttl_seconds
        self.refresh_ttl_seconds = refresh_ttl_seconds
        self.issuer = issuer
        self.algorithm = algorithm

    @classmethod
    def from_settings(cls, cache: SessionCache) -> "TokenService":
        return cls(
            cache=cache,
            access_secret=settings.JWT_ACCESS_TOKEN_SECRET,
            refresh_secret=settings.JWT_REFRESH_TOKEN_SECRET,
            access_ttl_seconds=settings.ACCESS_TOKEN_TTL_SECONDS,
            refresh_ttl_seconds=settings.REFRESH_TOKEN_TTL_SECONDS,
            issuer=settings.JWT_ISSUER,
            algorithm=settings.JWT_ALGORITHM,
        )

    def mint_pair(self, identity_id: str) -> TokenPair:
        """
        Sign a new access/refresh pair and make the refresh token the live one.

        The cache write happens before the pair is returned; if it fails the
        new refresh token is never handed out.

        Raises:
            InternalError: If signing or the cache write fails
        """
        identity_id = str(identity_id)
        try:
            access_token = sign_token(
                identity_id,
                self.access_secret,
                timedelta(seconds=self.access_ttl_seconds),
                self.issuer,
                self.algorithm,
            )
            refresh_token = sign_token(
                identity_id,
                self.refresh_secret,
                timedelta(seconds=self.refresh_ttl_seconds),
                self.issuer,
                self.algorithm,
            )
        except JWTError as e:
            logger.error(f"Token signing failed for identity {identity_id}: {e}")
            raise InternalError() from e

        # Overwrites any earlier refresh token for this identity
        self.cache.store(identity_id, refresh_token, self.refresh_ttl_seconds)
        logger.info(f"Issued token pair for identity {identity_id}")

        return TokenPair(access_token=access_token, refresh_token=refresh_token)

    def validate_refresh(self, refresh_token: str) -> str:
        """
        Check a refresh token and return the identity id it belongs to.

        Does not rotate or revoke anything.

        Raises:
            UnauthenticatedError: Bad signature, expired, or not the live token
            InternalError: If the session cache cannot be read
        """
        try:
            payload = decode_token(refresh_token, self.refresh_secret, self.issuer, self.algorithm)
        except JWTError:
            raise UnauthenticatedError()

        identity_id = payload.get("aud")
        if not isinstance(identity_id, str) or not identity_id:
            raise UnauthenticatedError()

        live_token = self.cache.get(identity_id)
        if live_token is None or live_token != refresh_token:
            # Logged out, expired from cache, or superseded by a newer pair
            logger.info(f"Rejected stale refresh token for identity {identity_id}")
            raise UnauthenticatedError()

        return identity_id

    def revoke(self, identity_id: str) -> None:
        """Drop the live refresh token for an identity. Idempotent."""
        self.cache.delete(str(identity_id))
        logger.info(f"Revoked session for identity {identity_id}")

    def verify_access(self, access_token: str) -> str:
        """
        Check an access token by signature, expiry and issuer only.

        Returns:
            The identity id from the audience claim

        Raises:
            UnauthenticatedError: "Token Expired" for expired tokens, the
                generic message for anything else
        """
        try:
            payload = decode_token(access_token, self.access_secret, self.issuer, self.algorithm)
        except ExpiredSignatureError:
            raise UnauthenticatedError("Token Expired", code="TOKEN_EXPIRED")
        except JWTError:
            raise UnauthenticatedError()

        identity_id = payload.get("aud")
        if not isinstance(identity_id, str) or not identity_id:
            raise UnauthenticatedError()
        return identity_id
