"""Authentication dependencies built on the session store.

Public interface:
    ``get_session_store`` - SessionStore bound to the app's cache client.
    ``require_auth``      - returns AuthContext or raises 401.
    ``optional_auth``     - returns AuthContext or None, never raises 401.

Tokens travel in the ``X-Token`` header.
"""

import logging
from dataclasses import dataclass
from typing import Optional

import redis
from fastapi import Depends, Header

from .cache import get_cache
from .config import settings
from ..exceptions import AuthenticationError
from ..services.session_store import SessionStore

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AuthContext:
    """Identity resolved from a session token."""

    user_id: str
    token: str


def get_session_store(cache: redis.Redis = Depends(get_cache)) -> SessionStore:
    return SessionStore(cache, settings.session_ttl_seconds)


def require_auth(
    x_token: Optional[str] = Header(None),
    sessions: SessionStore = Depends(get_session_store),
) -> AuthContext:
    """Resolve the ``X-Token`` header into an AuthContext.

    Cache outages propagate as 503 rather than 401.
    """
    user_id = sessions.resolve(x_token)
    if user_id is None:
        raise AuthenticationError()
    return AuthContext(user_id=user_id, token=x_token)


def optional_auth(
    x_token: Optional[str] = Header(None),
    sessions: SessionStore = Depends(get_session_store),
) -> Optional[AuthContext]:
    """Like ``require_auth`` but returns None for a missing or unknown token."""
    user_id = sessions.resolve(x_token)
    if user_id is None:
        return None
    return AuthContext(user_id=user_id, token=x_token)
