import argparse
import logging

import uvicorn

from app.core.config import settings

logger = logging.getLogger("app")

def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Serve the forum API")
    parser.add_argument("--host", default="0.0.0.0", help="Interface to bind (default: 0.0.0.0)")
    parser.add_argument("--port", type=int, default=8000, help="Port to bind (default: 8000)")
    parser.add_argument(
        "--reload",
        action="store_true",
        help="Restart on code changes (always on when DEBUG is set)",
    )
    parser.add_argument(
        "--migrate",
        action="store_true",
        help="Apply Alembic migrations before serving instead of relying on create_all at startup",
    )
    return parser.parse_args(argv)

def main(argv=None) -> None:
    args = parse_args(argv)
    logging.basicConfig(level=logging.DEBUG if settings.DEBUG else logging.INFO)

    if args.migrate:
        from app.db.init_db import init_db
        init_db()

    use_reload = args.reload or settings.DEBUG
    logger.info(
        f"Serving {settings.PROJECT_NAME} {settings.VERSION} on http://{args.host}:{args.port} "
        f"({settings.ENVIRONMENT}, reload {'on' if use_reload else 'off'}, db {settings.DATABASE_URL})"
    )

    # SQLite has a single writer; one worker process keeps lock waits inside busy_timeout
    uvicorn.run("app.main:app", host=args.host, port=args.port, reload=use_reload, workers=1)

if __name__ == "__main__":
    main()
