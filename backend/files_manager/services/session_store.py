"""Session store: ephemeral tokens mapped to user ids in the cache.

Each successful login mints a new token; a user may hold several at once.
Tokens expire a fixed time after creation and are never extended by use.
Cache failures surface as ``CacheUnavailableError`` so they are never
mistaken for an invalid token.
"""

import logging
import secrets
from typing import Optional

import redis

from ..exceptions import CacheUnavailableError

logger = logging.getLogger(__name__)

KEY_PREFIX = "auth_"

# 32 random bytes, URL-safe encoded (256 bits).
TOKEN_BYTES = 32

# A collision with 256-bit tokens means the random source is broken.
MAX_MINT_ATTEMPTS = 3


def _key(token: str) -> str:
    return f"{KEY_PREFIX}{token}"


class SessionStore:
    """Mint, resolve and revoke session tokens."""

    def __init__(self, cache: redis.Redis, ttl_seconds: int):
        self.cache = cache
        self.ttl_seconds = ttl_seconds

    def create(self, user_id: str) -> str:
        """Store a fresh token for *user_id* and return it."""
        for _ in range(MAX_MINT_ATTEMPTS):
            token = secrets.token_urlsafe(TOKEN_BYTES)
            try:
                stored = self.cache.set(_key(token), user_id, ex=self.ttl_seconds, nx=True)
            except redis.RedisError as e:
                raise CacheUnavailableError(e) from e
            if stored:
                logger.info("Session created", extra={"user_id": user_id})
                return token
            logger.warning("Session token collision, retrying")
        raise RuntimeError("Could not mint a unique session token")

    def resolve(self, token: Optional[str]) -> Optional[str]:
        """Return the user id for *token*, or None if absent or expired."""
        if not token:
            return None
        try:
            return self.cache.get(_key(token))
        except redis.RedisError as e:
            raise CacheUnavailableError(e) from e

    def revoke(self, token: Optional[str]) -> bool:
        """Delete *token*. Returns False when there was nothing to delete."""
        if not token:
            return False
        try:
            removed = self.cache.delete(_key(token))
        except redis.RedisError as e:
            raise CacheUnavailableError(e) from e
        return bool(removed)
