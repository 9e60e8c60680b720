from typing import Optional, Tuple

from fastapi import Depends, Query, Request
from sqlalchemy.orm import Session

from app.db.session import get_db
from app.modules.auth.services.authorization import optional_auth, require_auth
from app.modules.auth.services.session import SessionStore

def get_session_store(db: Session = Depends(get_db)) -> SessionStore:
    """
    Dependency for getting the session store bound to this request's DB session
    """
    return SessionStore(db)

def get_current_user_id(
    request: Request,
    store: SessionStore = Depends(get_session_store),
) -> str:
    """
    Dependency for getting the authenticated user id (401 otherwise)
    """
    return require_auth(request, store)

def get_optional_user_id(
    request: Request,
    store: SessionStore = Depends(get_session_store),
) -> Optional[str]:
    """
    Dependency for public reads that personalise output when a session is present
    """
    return optional_auth(request, store)

def _parse_int(value: Optional[str]) -> Optional[int]:
    try:
        return int(value) if value is not None else None
    except ValueError:
        return None

def get_pagination(
    page: Optional[str] = Query(None, description="Page number, starting at 1"),
    limit: Optional[str] = Query(None, description="Posts per page, clamped by the server"),
) -> Tuple[Optional[int], Optional[int]]:
    """
    Dependency for page/limit query parameters; unparseable values count as absent
    """
    return _parse_int(page), _parse_int(limit)
