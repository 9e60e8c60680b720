"""
Server-side session store.

A session is an opaque random token bound to a user id. It is valid while
``now - created_at <= ttl``; anything else is treated as absent.
"""
from datetime import datetime, timedelta
from typing import Callable, Optional
import logging

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.errors import (
    NotFoundError, SessionExpiredError, SessionNotFoundError, translate_storage_errors
)
from app.core.security import generate_session_token, utcnow
from app.modules.auth.models.session import UserSession
from app.modules.user_management.models.user import User

logger = logging.getLogger("app")

DEFAULT_TTL = timedelta(hours=settings.SESSION_TTL_HOURS)

class SessionStore:
    def __init__(self, db: Session, ttl: timedelta = DEFAULT_TTL, clock: Callable[[], datetime] = utcnow):
        self.db = db
        self.ttl = ttl
        self.clock = clock

    def create(self, user_id: str) -> str:
        """Issue a new session for ``user_id`` and return its token"""
        if not self.db.query(User.id).filter(User.id == user_id).first():
            raise NotFoundError("User not found")

        session_id = generate_session_token()
        with translate_storage_errors(self.db, "create session"):
            self.db.add(UserSession(id=session_id, user_id=user_id, created_at=self.clock()))
            self.db.commit()

        logger.info(f"Session created for user {user_id}")
        return session_id

    def validate(self, session_id: Optional[str]) -> str:
        """Return the owning user id or raise an AuthenticationError subclass"""
        if not session_id:
            raise SessionNotFoundError("Unauthorized")

        with translate_storage_errors(self.db, "validate session"):
            row = self.db.query(UserSession).filter(UserSession.id == session_id).first()

        if row is None:
            logger.debug("Session lookup failed: no such session")
            raise SessionNotFoundError("Unauthorized")

        if self.clock() - row.created_at > self.ttl:
            logger.debug(f"Session for user {row.user_id} expired")
            raise SessionExpiredError("Unauthorized")

        return row.user_id

    def destroy(self, session_id: Optional[str]) -> None:
        """Delete the session; a missing session is not an error"""
        if not session_id:
            return

        with translate_storage_errors(self.db, "destroy session"):
            deleted = (
                self.db.query(UserSession)
                .filter(UserSession.id == session_id)
                .delete(synchronize_session=False)
            )
            self.db.commit()

        if deleted:
            logger.info("Session destroyed")

    def cleanup(self, max_age: Optional[timedelta] = None) -> int:
        """
        Delete every session created more than ``max_age`` ago.

        Runs outside the request path, so failures are logged and reported
        as zero rows removed instead of raised.
        """
        cutoff = self.clock() - (max_age if max_age is not None else self.ttl)
        try:
            deleted = (
                self.db.query(UserSession)
                .filter(UserSession.created_at < cutoff)
                .delete(synchronize_session=False)
            )
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Session cleanup failed: {e}")
            return 0

        if deleted:
            logger.info(f"Session cleanup removed {deleted} expired sessions")
        return deleted
