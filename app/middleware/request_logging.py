from fastapi import Request
import logging
import time
import uuid
from starlette.middleware.base import BaseHTTPMiddleware

logger = logging.getLogger("app")

REQUEST_ID_HEADER = "X-Request-ID"

class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Logs one line per request and per response, tagged with a request id"""

    async def dispatch(self, request: Request, call_next):
        request_id = request.headers.get(REQUEST_ID_HEADER) or uuid.uuid4().hex[:12]
        request.state.request_id = request_id
        started = time.perf_counter()

        target = request.url.path + (f"?{request.url.query}" if request.url.query else "")
        client = request.client.host if request.client else "-"
        logger.info(f"[{request_id}] {request.method} {target} from {client}")

        try:
            response = await call_next(request)
        except Exception:
            elapsed = time.perf_counter() - started
            logger.exception(f"[{request_id}] {request.method} {request.url.path} raised after {elapsed:.4f}s")
            raise

        elapsed = time.perf_counter() - started
        logger.info(f"[{request_id}] {response.status_code} {request.method} {request.url.path} in {elapsed:.4f}s")
        response.headers[REQUEST_ID_HEADER] = request_id
        return response
