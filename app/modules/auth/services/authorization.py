"""Request authentication and ownership checks"""
from typing import Optional
import logging

from fastapi import Request

from app.core.config import settings
from app.core.errors import AuthenticationError, AuthorizationError
from app.modules.auth.services.session import SessionStore

logger = logging.getLogger("app")

def authorize_owner(session_user_id: str, resource_owner_id: str) -> None:
    """Raise AuthorizationError unless the session user owns the resource"""
    if session_user_id != resource_owner_id:
        raise AuthorizationError("Forbidden")

def require_auth(request: Request, store: SessionStore) -> str:
    """Resolve the session cookie to a user id or raise AuthenticationError"""
    session_id = request.cookies.get(settings.SESSION_COOKIE_NAME)
    if not session_id:
        raise AuthenticationError("Unauthorized")

    try:
        user_id = store.validate(session_id)
    except AuthenticationError as e:
        logger.info(f"Rejected session on {request.url.path}: {type(e).__name__}")
        raise

    request.state.user_id = user_id
    return user_id

def optional_auth(request: Request, store: SessionStore) -> Optional[str]:
    """Like require_auth, but anonymous callers get None"""
    try:
        return require_auth(request, store)
    except AuthenticationError:
        return None
