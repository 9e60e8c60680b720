from datetime import timedelta
import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.core.config import settings
from app.core.errors import ForumError
from app.db.init_db import create_all_tables
from app.db.session import SessionLocal
from app.middleware.request_logging import RequestLoggingMiddleware
from app.middleware.auth_logging import AuthLoggingMiddleware
from app.modules.auth.api.router import router as auth_router
from app.modules.auth.services.session_sweeper import SessionSweeper
from app.modules.categories.api.router import router as categories_router
from app.modules.user_management.api.router import router as user_router
from app.modules.posts.api.router import router as posts_router
from app.modules.posts.comments.api.router import router as comments_router
from app.modules.posts.reactions.api.router import router as reactions_router
from app.modules.home_feed.api.router import router as home_feed_router

# Configure logging
logging.basicConfig(
    level=logging.DEBUG if settings.DEBUG else logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger("app")

def _error_response(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})

async def forum_error_handler(request: Request, exc: ForumError) -> JSONResponse:
    return _error_response(exc.status_code, exc.message)

async def http_error_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    return _error_response(exc.status_code, str(exc.detail))

async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    messages = []
    for error in exc.errors():
        field = ".".join(str(part) for part in error.get("loc", ()) if part != "body")
        message = error.get("msg", "Invalid value").removeprefix("Value error, ")
        messages.append(f"{field}: {message}" if field else message)
    logger.info(f"Rejected {request.method} {request.url.path}: {messages}")
    return _error_response(status.HTTP_400_BAD_REQUEST, "; ".join(messages) or "Invalid request")

async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception(f"Unhandled error on {request.method} {request.url.path}")
    return _error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, "Internal server error")

# Initialize the FastAPI application
app = FastAPI(
    title=settings.PROJECT_NAME,
    openapi_url=f"{settings.API_V1_STR}/openapi.json",
    exception_handlers={
        ForumError: forum_error_handler,
        StarletteHTTPException: http_error_handler,
        RequestValidationError: validation_error_handler,
        Exception: unhandled_error_handler,
    },
    debug=settings.DEBUG,
    description="Forum core: sessions, posts, comment threads and reactions",
    version=settings.VERSION,
    docs_url="/docs",
    redoc_url="/redoc",
)

session_sweeper = SessionSweeper(
    SessionLocal,
    interval_seconds=settings.SESSION_CLEANUP_INTERVAL_SECONDS,
    max_age=timedelta(hours=settings.SESSION_TTL_HOURS),
)

@app.on_event("startup")
async def startup_event():
    logger.info(f"Starting server in {settings.ENVIRONMENT} mode")
    create_all_tables()
    session_sweeper.start()

@app.on_event("shutdown")
async def shutdown_event():
    await session_sweeper.stop()

# Add middleware
app.add_middleware(RequestLoggingMiddleware)
app.add_middleware(AuthLoggingMiddleware)

# Configure CORS; credentials are needed for the session cookie
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Register API routers
app.include_router(auth_router, prefix=f"{settings.API_V1_STR}/auth", tags=["authentication"])
app.include_router(user_router, prefix=f"{settings.API_V1_STR}/users", tags=["users"])
app.include_router(categories_router, prefix=f"{settings.API_V1_STR}/categories", tags=["categories"])
app.include_router(posts_router, prefix=f"{settings.API_V1_STR}/posts", tags=["posts"])
app.include_router(comments_router, prefix=f"{settings.API_V1_STR}/posts/{{post_id}}/comments", tags=["comments"])
app.include_router(reactions_router, prefix=settings.API_V1_STR, tags=["reactions"])
app.include_router(home_feed_router, prefix=f"{settings.API_V1_STR}/feed", tags=["home feed"])

@app.get("/")
async def root():
    return {
        "message": f"Welcome to {settings.PROJECT_NAME}",
        "version": settings.VERSION,
        "environment": settings.ENVIRONMENT,
        "documentation": "/docs" if settings.DEBUG else None,
    }

if __name__ == "__main__":
    import uvicorn
    uvicorn.run("app.main:app", host="0.0.0.0", port=8000, reload=True)
