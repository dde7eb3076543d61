"""
Database Session Management Module
==================================

Responsible for:
- Creating the database engine for the configured dialect
- Managing session lifecycle
- Providing dependency for FastAPI routes
- Connection pooling configuration

PostgreSQL gets a bounded QueuePool with connection validation.
SQLite (local development and tests) gets a single shared
connection so an in-memory database survives across sessions.
"""

from typing import Any, Dict, Generator

from sqlalchemy import create_engine, event, text
from sqlalchemy.engine import make_url
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import sessionmaker, Session
from sqlalchemy.pool import QueuePool, StaticPool

from portal.core.config import settings
from portal.core.logging import get_logger

# Initialize logger
logger = get_logger(__name__)


# ==========================
# Database Engine
# ==========================

def build_engine_kwargs(database_url: str) -> Dict[str, Any]:
    """
    Engine options for the dialect in ``database_url``.

    Args:
        database_url: SQLAlchemy connection URL

    Returns:
        Keyword arguments for ``create_engine``
    """
    if make_url(database_url).get_backend_name() == "sqlite":
        return {
            "poolclass": StaticPool,
            "connect_args": {"check_same_thread": False},
            "echo": settings.DEBUG,
        }

    return {
        "poolclass": QueuePool,
        "pool_size": settings.DB_POOL_SIZE,
        "max_overflow": settings.DB_MAX_OVERFLOW,
        "pool_timeout": settings.DB_POOL_TIMEOUT,
        "pool_recycle": settings.DB_POOL_RECYCLE,
        "pool_pre_ping": True,  # Validate connections before use
        "echo": settings.DEBUG,
        "connect_args": {
            "connect_timeout": 10,
            "application_name": "content-portal",
        },
    }


engine = create_engine(settings.DATABASE_URL, **build_engine_kwargs(settings.DATABASE_URL))


@event.listens_for(engine, "connect")
def receive_connect(dbapi_connection, connection_record):
    """Log new database connections."""
    logger.debug(
        "New database connection established",
        extra={"event": "db_connect"}
    )


# ==========================
# Session Factory
# ==========================

SessionLocal = sessionmaker(
    bind=engine,
    autocommit=False,
    autoflush=False,
    expire_on_commit=False,
)


# ==========================
# Dependency for FastAPI
# ==========================

def get_db() -> Generator[Session, None, None]:
    """
    FastAPI dependency that provides a database session.

    Ensures:
    - Session is opened per request
    - Session is properly closed after request completes
    - Transactions are rolled back on error

    Yields:
        SQLAlchemy Session object
    """
    db = SessionLocal()
    try:
        yield db
    except Exception as e:
        logger.error(
            "Database session error",
            extra={"error": str(e)}
        )
        db.rollback()
        raise
    finally:
        db.close()


# ==========================
# Database Health Check
# ==========================

def check_database_connection() -> bool:
    """
    Check if database connection is healthy.

    Returns:
        True if connection is healthy, False otherwise
    """
    try:
        with engine.connect() as connection:
            connection.execute(text("SELECT 1"))
        return True
    except SQLAlchemyError as e:
        logger.error(
            "Database health check failed",
            extra={"error": str(e)}
        )
        return False
