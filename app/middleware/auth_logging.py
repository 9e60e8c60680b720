from fastapi import Request
import logging
from starlette.middleware.base import BaseHTTPMiddleware

from app.core.config import settings

logger = logging.getLogger("app")

# Paths that always need a session cookie
PROTECTED_SUFFIXES = ("/posts/liked", "/posts/mine", "/auth/me")

class AuthLoggingMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        path = request.url.path
        has_session = settings.SESSION_COOKIE_NAME in request.cookies

        if not has_session and path.endswith(PROTECTED_SUFFIXES):
            logger.warning(f"Protected endpoint {path} accessed without session cookie")

        # Process the request
        response = await call_next(request)

        # Log auth-related status codes
        if response.status_code in (401, 403):
            logger.warning(f"Auth error: {response.status_code} on {request.method} {path}")

        return response
