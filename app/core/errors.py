"""
Error taxonomy shared by services and routers.

Services raise these; the handlers registered in ``app.main`` turn them into
the ``{"error": <message>}`` envelope with the matching status code.
"""
import logging
from contextlib import contextmanager
from typing import Iterator, Optional

from fastapi import status
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

logger = logging.getLogger("app")


class ForumError(Exception):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message = "Internal server error"

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class AuthenticationError(ForumError):
    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = "Unauthorized"


class SessionNotFoundError(AuthenticationError):
    """No session row matches the presented token"""


class SessionExpiredError(AuthenticationError):
    """Session row exists but is older than the TTL"""


class AuthorizationError(ForumError):
    status_code = status.HTTP_403_FORBIDDEN
    default_message = "Forbidden"


class ValidationError(ForumError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Invalid input"


class ConflictError(ForumError):
    status_code = status.HTTP_409_CONFLICT
    default_message = "Conflict"


class NotFoundError(ForumError):
    status_code = status.HTTP_404_NOT_FOUND
    default_message = "Not found"


class InternalError(ForumError):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message = "Internal server error"


@contextmanager
def translate_storage_errors(db: Session, action: str, conflict_message: Optional[str] = None) -> Iterator[None]:
    """
    Roll back and re-raise storage failures as API errors.

    IntegrityError becomes ConflictError, any other SQLAlchemyError becomes
    InternalError. The raw driver message is only logged.
    """
    try:
        yield
    except IntegrityError as e:
        db.rollback()
        logger.warning(f"Integrity error during {action}: {e.orig}")
        raise ConflictError(conflict_message or f"Failed to {action}: conflicting data")
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Storage error during {action}: {e}")
        raise InternalError(f"Failed to {action}")
