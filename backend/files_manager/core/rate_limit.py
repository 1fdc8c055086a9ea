"""Per-caller request throttling.

Authenticated requests are counted against the session's user, so every
token a user holds shares one allowance. Requests without a session
(``/connect``, ``/disconnect`` and anonymous content reads) are counted
against the client address.

Public interface:
    ``limiter``                 -- process-wide TokenBucketLimiter
    ``limit_by_client``         -- route dependency keyed on the client address
    ``rate_limited_auth``       -- ``require_auth`` plus the user's allowance
    ``rate_limited_optional_auth`` -- ``optional_auth`` plus user or address
"""

import logging
import threading
import time
from typing import Dict, Optional, Tuple

from fastapi import Depends, Request

from .auth import AuthContext, optional_auth, require_auth
from .config import settings
from ..exceptions import RateLimitedError

logger = logging.getLogger(__name__)


class TokenBucketLimiter:
    """Token buckets keyed by caller, refilled continuously.

    Each key starts with ``max_per_minute`` tokens and regains them at
    ``max_per_minute / 60`` per second. Idle keys are swept every
    ``sweep_every`` calls.
    """

    def __init__(self, sweep_every: int = 100, idle_seconds: float = 120.0):
        self.sweep_every = sweep_every
        self.idle_seconds = idle_seconds
        self._buckets: Dict[str, Tuple[float, float]] = {}
        self._lock = threading.Lock()
        self._calls = 0

    def hit(self, key: str, max_per_minute: int, now: Optional[float] = None) -> float:
        """Spend one token for *key*.

        Returns 0.0 when the request may proceed, otherwise the seconds until
        a token is available. A limit of 0 or less never throttles.
        """
        if max_per_minute <= 0:
            return 0.0
        if now is None:
            now = time.monotonic()

        with self._lock:
            self._calls += 1
            if self._calls % self.sweep_every == 0:
                self._sweep(now)

            per_second = max_per_minute / 60.0
            tokens, updated = self._buckets.get(key, (float(max_per_minute), now))
            tokens = min(float(max_per_minute), tokens + (now - updated) * per_second)

            if tokens >= 1.0:
                self._buckets[key] = (tokens - 1.0, now)
                return 0.0
            self._buckets[key] = (tokens, now)
            return (1.0 - tokens) / per_second

    def _sweep(self, now: float) -> None:
        cutoff = now - self.idle_seconds
        for key in [k for k, (_, updated) in self._buckets.items() if updated < cutoff]:
            del self._buckets[key]

    def reset(self) -> None:
        with self._lock:
            self._buckets.clear()
            self._calls = 0

    def __len__(self) -> int:
        return len(self._buckets)


limiter = TokenBucketLimiter()


def client_address(request: Request) -> str:
    """First ``X-Forwarded-For`` hop behind a proxy, else the peer address."""
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        return forwarded.split(",")[0].strip()
    if request.client:
        return request.client.host
    return "unknown"


def _enforce(key: str, request: Request) -> None:
    retry_after = limiter.hit(key, settings.rate_limit_per_minute)
    if retry_after:
        logger.warning(
            "Rate limit exceeded",
            extra={"caller": key, "path": request.url.path, "retry_after": round(retry_after, 1)},
        )
        raise RateLimitedError(retry_after)


def limit_by_client(request: Request) -> None:
    _enforce(f"addr:{client_address(request)}", request)


def rate_limited_auth(
    request: Request,
    auth: AuthContext = Depends(require_auth),
) -> AuthContext:
    _enforce(f"user:{auth.user_id}", request)
    return auth


def rate_limited_optional_auth(
    request: Request,
    auth: Optional[AuthContext] = Depends(optional_auth),
) -> Optional[AuthContext]:
    if auth is None:
        limit_by_client(request)
    else:
        _enforce(f"user:{auth.user_id}", request)
    return auth
