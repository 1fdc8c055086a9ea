"""Session endpoints.

    GET /connect     - exchange Basic credentials for a session token
    GET /disconnect  - revoke the token in ``X-Token``
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Header, Response
from sqlalchemy.orm import Session

from ..core.auth import get_session_store
from ..core.rate_limit import limit_by_client
from ..database import get_db
from ..exceptions import AuthenticationError
from ..schemas.auth import TokenResponse
from ..services import auth_service
from ..services.session_store import SessionStore

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Authentication"])


@router.get(
    "/connect",
    response_model=TokenResponse,
    summary="Authenticate and receive a session token",
    dependencies=[Depends(limit_by_client)],
)
def connect(
    authorization: Optional[str] = Header(None),
    db: Session = Depends(get_db),
    sessions: SessionStore = Depends(get_session_store),
):
    user = auth_service.verify_credentials(db, authorization)
    return TokenResponse(token=sessions.create(user.user_id))


@router.get(
    "/disconnect",
    status_code=204,
    response_class=Response,
    summary="Revoke the current session token",
    dependencies=[Depends(limit_by_client)],
)
def disconnect(
    x_token: Optional[str] = Header(None),
    sessions: SessionStore = Depends(get_session_store),
):
    if not sessions.revoke(x_token):
        raise AuthenticationError()
    logger.info("Session revoked")
    return Response(status_code=204)
