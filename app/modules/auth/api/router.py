"""Authentication router: registration and cookie sessions"""
from typing import Any

from fastapi import APIRouter, Depends, Request, Response, status
from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.errors import AuthenticationError, NotFoundError
from app.db.session import get_db
from app.deps import get_current_user_id, get_session_store
from app.modules.auth.schemas.auth import LoginRequest, LogoutResponse, RegisterRequest
from app.modules.auth.services.auth import authenticate_user, register_user
from app.modules.auth.services.session import SessionStore
from app.modules.user_management.schemas.user import User as UserSchema
from app.modules.user_management.services.user import get_user

router = APIRouter()

def _set_session_cookie(response: Response, session_id: str) -> None:
    response.set_cookie(
        key=settings.SESSION_COOKIE_NAME,
        value=session_id,
        max_age=settings.SESSION_TTL_HOURS * 60 * 60,
        httponly=True,
        samesite="lax",
        secure=settings.SESSION_COOKIE_SECURE,
        path="/",
    )

@router.post("/register", response_model=UserSchema, status_code=status.HTTP_201_CREATED)
def register(
    *,
    db: Session = Depends(get_db),
    user_in: RegisterRequest,
) -> Any:
    """Create a new account"""
    return register_user(db, user_in)

@router.post("/login", response_model=UserSchema)
def login(
    *,
    db: Session = Depends(get_db),
    store: SessionStore = Depends(get_session_store),
    credentials: LoginRequest,
    response: Response,
) -> Any:
    """Check credentials and issue a session cookie"""
    user = authenticate_user(db, credentials.username, credentials.password)
    if not user:
        raise AuthenticationError("Invalid username or password")

    session_id = store.create(user.id)
    _set_session_cookie(response, session_id)
    return user

@router.post("/logout", response_model=LogoutResponse)
def logout(
    request: Request,
    response: Response,
    store: SessionStore = Depends(get_session_store),
) -> Any:
    """Destroy the current session; succeeds even without one"""
    store.destroy(request.cookies.get(settings.SESSION_COOKIE_NAME))
    response.delete_cookie(settings.SESSION_COOKIE_NAME, path="/")
    return LogoutResponse()

@router.get("/me", response_model=UserSchema)
def read_current_user(
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user_id),
) -> Any:
    """Get the user owning the session cookie"""
    user = get_user(db, user_id=user_id)
    if not user:
        raise NotFoundError("User not found")
    return user
