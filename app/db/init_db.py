"""
Schema bootstrap.

``create_all_tables`` is what the app runs at startup; it only adds missing
tables. ``init_db`` applies the Alembic history instead and is what
deployments with an existing database should use.
"""
import logging
from typing import Optional, Set

from alembic import command
from alembic.config import Config
from sqlalchemy import inspect
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError

from app.core.config import settings
from app.db import base  # noqa: F401  registers every model on Base.metadata
from app.db.session import Base, engine as default_engine

logger = logging.getLogger("app")

def init_db(database_url: Optional[str] = None, config_path: str = "alembic.ini") -> None:
    """Upgrade the database at ``database_url`` (default: settings) to the latest revision"""
    alembic_cfg = Config(config_path)
    alembic_cfg.set_main_option("sqlalchemy.url", database_url or settings.DATABASE_URL)
    try:
        command.upgrade(alembic_cfg, "head")
    except Exception as e:
        logger.error(f"Applying migrations to {database_url or settings.DATABASE_URL} failed: {e}")
        raise
    logger.info("Database migrations applied")

def create_all_tables(engine: Engine = None) -> Set[str]:
    """Create missing tables and return the names of the ones created"""
    engine = engine or default_engine
    try:
        before = set(inspect(engine).get_table_names())
        Base.metadata.create_all(bind=engine)
        created = set(inspect(engine).get_table_names()) - before
    except SQLAlchemyError as e:
        logger.error(f"Creating tables failed: {e}")
        raise

    if created:
        logger.info(f"Created tables: {sorted(created)}")
    return created

def drop_all_tables(engine: Engine = None) -> None:
    engine = engine or default_engine
    Base.metadata.drop_all(bind=engine)
    logger.warning(f"Dropped all tables on {engine.url}")
