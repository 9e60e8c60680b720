# Implements security-related functionality:
# Opaque session token generation
# Password hashing and verification using bcrypt
# UTC clock used for every persisted timestamp
# Provides core security functions used by the authentication module

from datetime import datetime, timezone
import secrets
import logging

from passlib.context import CryptContext

logger = logging.getLogger("app")

# Password hashing context
pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

# 32 random bytes, 256 bits of entropy
SESSION_TOKEN_BYTES = 32

def utcnow() -> datetime:
    """Naive UTC timestamp, microsecond precision"""
    return datetime.now(timezone.utc).replace(tzinfo=None)

def generate_session_token() -> str:
    return secrets.token_urlsafe(SESSION_TOKEN_BYTES)

def verify_password(plain_password: str, hashed_password: str) -> bool:
    try:
        return pwd_context.verify(plain_password, hashed_password)
    except ValueError as e:
        # Malformed stored hash
        logger.warning(f"Password verification error: {e}")
        return False

def get_password_hash(password: str) -> str:
    return pwd_context.hash(password)
