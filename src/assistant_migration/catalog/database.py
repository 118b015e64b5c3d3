"""
Catalog database connection utilities.

This module creates SQLAlchemy engines for the source and target workspace
catalogs and checks that they are reachable.
"""

from sqlalchemy import Engine, create_engine, pool
from sqlalchemy.engine import URL

from assistant_migration.client.exceptions import CatalogError
from assistant_migration.config import DatabaseConfig
from assistant_migration.utils.logging import get_logger

logger = get_logger(__name__)


def create_catalog_engine(database_url: str | URL, echo: bool = False) -> Engine:
    """
    Create a SQLAlchemy engine for a workspace catalog.

    Args:
        database_url: Database URL (db2+ibm_db://, sqlite:///, postgresql://, ...)
        echo: Whether to log SQL statements

    Returns:
        SQLAlchemy Engine instance

    Raises:
        CatalogError: If the URL is empty or the engine cannot be created
    """
    if not database_url:
        raise CatalogError("Database URL cannot be empty")

    url_text = str(database_url)
    is_sqlite = url_text.startswith("sqlite")

    try:
        if is_sqlite:
            # Catalog calls run in worker threads; SQLite must allow that
            engine = create_engine(
                database_url,
                echo=echo,
                poolclass=pool.NullPool,
                connect_args={"check_same_thread": False},
            )
        else:
            engine = create_engine(database_url, echo=echo, pool_pre_ping=True)

    except Exception as e:
        logger.error("catalog_engine_failed", error=str(e))
        raise CatalogError(f"Error occurred connecting to DB: {e}") from e

    logger.info(
        "catalog_engine_created",
        dialect=engine.dialect.name,
        pool="NullPool" if is_sqlite else "QueuePool",
    )
    return engine


def engine_from_config(db_config: DatabaseConfig, echo: bool = False) -> Engine:
    """Create a catalog engine from a DatabaseConfig."""
    return create_catalog_engine(db_config.sqlalchemy_url(), echo=echo)


def validate_catalog_connection(engine: Engine) -> bool:
    """
    Validate that a catalog connection can be established.

    Returns:
        True if connection successful, False otherwise
    """
    try:
        # Opening a connection is the probe
        with engine.connect():
            pass
    except Exception as e:
        logger.error("catalog_connection_failed", dialect=engine.dialect.name, error=str(e))
        return False

    logger.info("catalog_connection_validated", dialect=engine.dialect.name)
    return True
