"""
Database bootstrap script.

    python init_db.py            create missing tables
    python init_db.py --migrate  apply Alembic migrations instead
    python init_db.py --reset    drop everything first (development only)
"""
import argparse
import logging
import sys

from sqlalchemy import inspect
from sqlalchemy.exc import SQLAlchemyError

from app.core.config import settings
from app.db.init_db import create_all_tables, drop_all_tables, init_db
from app.db.session import engine

logging.basicConfig(level=logging.INFO, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s")
logger = logging.getLogger("db-init")

def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="Create or migrate the forum database")
    parser.add_argument("--migrate", action="store_true", help="run alembic upgrade head")
    parser.add_argument("--reset", action="store_true", help="drop all tables before creating them")
    args = parser.parse_args(argv)

    logger.info(f"Database: {settings.DATABASE_URL}")
    if args.reset and settings.ENVIRONMENT == "production":
        logger.error("Refusing to reset a production database")
        return 1

    try:
        if args.reset:
            drop_all_tables(engine)
        if args.migrate:
            init_db()
        else:
            create_all_tables(engine)
    except SQLAlchemyError as e:
        logger.error(f"Database initialization failed: {e}")
        return 1

    logger.info(f"Tables: {sorted(inspect(engine).get_table_names())}")
    return 0

if __name__ == "__main__":
    sys.exit(main())
