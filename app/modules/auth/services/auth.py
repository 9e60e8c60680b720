import uuid
import logging
from typing import Optional
from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.errors import ConflictError, translate_storage_errors
from app.core.security import get_password_hash, verify_password
from app.modules.auth.schemas.auth import RegisterRequest
from app.modules.user_management.models.user import User
from app.modules.user_management.services.user import get_user_by_email, get_user_by_username

logger = logging.getLogger("app")

def register_user(db: Session, user_in: RegisterRequest) -> User:
    """Create a user account; duplicate username or email is a conflict"""
    if get_user_by_username(db, user_in.username):
        raise ConflictError("Username already taken")
    if get_user_by_email(db, user_in.email):
        raise ConflictError("Email already registered")

    user = User(
        id=str(uuid.uuid4()),
        username=user_in.username,
        email=user_in.email,
        hashed_password=get_password_hash(user_in.password),
        avatar_url=user_in.avatar_url or settings.DEFAULT_AVATAR_URL,
    )
    # Concurrent registrations race past the checks above; the unique
    # constraints decide.
    with translate_storage_errors(db, "register user", "Username or email already taken"):
        db.add(user)
        db.commit()
    db.refresh(user)

    logger.info(f"Registered user {user.username} ({user.id})")
    return user

def authenticate_user(db: Session, identifier: str, password: str) -> Optional[User]:
    """Return the user for a username-or-email and password pair, else None"""
    identifier = identifier.strip()
    user = get_user_by_username(db, identifier) or get_user_by_email(db, identifier.lower())
    if not user or not verify_password(password, user.hashed_password):
        logger.info("Failed login attempt")
        return None
    return user
