"""
Redis-backed store of live refresh tokens.

Holds at most one refresh token per identity under a key derived from the
identity id, with a TTL equal to the refresh-token lifetime. Overwriting the
key rotates the session; deleting it revokes the session. Redis expiry is an
independent eviction path.
"""

import logging
from typing import Optional

import redis

from connect.core.config import settings
from connect.core.errors import InternalError

logger = logging.getLogger(__name__)

KEY_PREFIX = "refresh_token"


class SessionCache:
    """
    Thin wrapper around a redis client for refresh-token sessions.

    Every redis failure (connection error, timeout) is mapped to InternalError
    so callers never see a redis exception.
    """

    def __init__(self, client: redis.Redis):
        self.redis_client = client

    @classmethod
    def from_settings(cls) -> "SessionCache":
        """Build a cache connected to the configured Redis with bounded timeouts."""
        client = redis.Redis(
            host=settings.REDIS_HOST,
            port=settings.REDIS_PORT,
            db=settings.REDIS_DB,
            decode_responses=True,
            socket_timeout=settings.REDIS_SOCKET_TIMEOUT,
            socket_connect_timeout=settings.REDIS_SOCKET_TIMEOUT,
        )
        return cls(client)

    @staticmethod
    def _key(identity_id: str) -> str:
        return f"{KEY_PREFIX}:{identity_id}"

    def get(self, identity_id: str) -> Optional[str]:
        """Return the live refresh token for an identity, or None."""
        try:
            return self.redis_client.get(self._key(identity_id))
        except redis.RedisError as e:
            logger.error(f"Session cache read failed for identity {identity_id}: {e}")
            raise InternalError() from e

    def store(self, identity_id: str, token: str, ttl_seconds: int) -> None:
        """Store (or overwrite) the live refresh token for an identity."""
        try:
            self.redis_client.setex(self._key(identity_id), ttl_seconds, token)
        except redis.RedisError as e:
            logger.error(f"Session cache write failed for identity {identity_id}: {e}")
            raise InternalError() from e

    def delete(self, identity_id: str) -> None:
        """Remove the live refresh token for an identity. Missing keys are fine."""
        try:
            self.redis_client.delete(self._key(identity_id))
        except redis.RedisError as e:
            logger.error(f"Session cache delete failed for identity {identity_id}: {e}")
            raise InternalError() from e

    def ping(self) -> bool:
        """Check connectivity (used by the detailed health check)."""
        try:
            return bool(self.redis_client.ping())
        except redis.RedisError as e:
            logger.error(f"Session cache ping failed: {e}")
            return False

    def close(self) -> None:
        self.redis_client.close()
