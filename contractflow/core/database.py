# =====================================================
# FILE: contractflow/core/database.py
# Database Connection and Session Management
# =====================================================

from sqlalchemy import create_engine, event, text
from sqlalchemy.engine import Engine
from sqlalchemy.orm import declarative_base, sessionmaker, Session
from sqlalchemy.pool import NullPool, QueuePool
from contextlib import contextmanager
from typing import Generator, Optional
import logging

from contractflow.core.config import settings

logger = logging.getLogger(__name__)


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
    # SQLite ignores ON DELETE CASCADE unless this is set per connection
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def create_db_engine(database_url: str, **engine_args) -> Engine:
    """
    Create an engine for the given URL, applying SQLite connection tweaks
    """
    if database_url.startswith("sqlite"):
        connect_args = engine_args.pop("connect_args", {})
        connect_args.setdefault("check_same_thread", False)
        engine_args["connect_args"] = connect_args

    db_engine = create_engine(database_url, **engine_args)

    if db_engine.dialect.name == "sqlite":
        event.listen(db_engine, "connect", _enable_sqlite_foreign_keys)

    return db_engine


# Database engine configuration
engine_args = {
    "pool_pre_ping": settings.DB_POOL_PRE_PING,
    "echo": settings.DB_ECHO,
}

# Use appropriate connection pool based on environment
if settings.DEBUG:
    # Use NullPool for development (no connection pooling)
    engine_args["poolclass"] = NullPool
else:
    engine_args["pool_size"] = settings.DB_POOL_SIZE
    engine_args["max_overflow"] = settings.DB_MAX_OVERFLOW
    engine_args["poolclass"] = QueuePool

try:
    engine = create_db_engine(settings.database_url, **engine_args)
    logger.info(f"Database engine created for {engine.url.render_as_string(hide_password=True)}")
except Exception as e:
    logger.error(f"Failed to create database engine: {str(e)}")
    raise

SessionLocal = sessionmaker(
    bind=engine,
    autocommit=False,
    autoflush=False,
    expire_on_commit=False
)

Base = declarative_base()


# Dependency to get DB session
def get_db() -> Generator[Session, None, None]:
    """
    Database session dependency for FastAPI
    """
    db = SessionLocal()
    try:
        yield db
    except Exception as e:
        logger.error(f"Database session error: {str(e)}")
        db.rollback()
        raise
    finally:
        db.close()


@contextmanager
def get_db_session():
    """
    Context manager for database operations outside of FastAPI requests
    """
    session = SessionLocal()
    try:
        yield session
        session.commit()
    except Exception as e:
        logger.error(f"Database operation failed: {str(e)}")
        session.rollback()
        raise
    finally:
        session.close()


def test_connection(bind: Optional[Engine] = None) -> bool:
    """
    Test database connection
    """
    try:
        with (bind or engine).connect() as conn:
            conn.execute(text("SELECT 1"))
            return True
    except Exception as e:
        logger.error(f"Database connection test failed: {str(e)}")
        return False


def init_db(bind: Optional[Engine] = None):
    """
    Create all tables that do not exist yet
    """
    # Register models on Base.metadata
    import contractflow.models  # noqa: F401

    try:
        Base.metadata.create_all(bind=bind or engine, checkfirst=True)
        logger.info("Database tables created successfully")
    except Exception as e:
        logger.error(f"Failed to create database tables: {str(e)}")
        raise


def drop_all_tables(bind: Optional[Engine] = None):
    """
    Drop all tables from the database
    WARNING: This will delete all data!
    """
    try:
        Base.metadata.drop_all(bind=bind or engine)
        logger.info("All database tables dropped successfully")
    except Exception as e:
        logger.error(f"Failed to drop database tables: {str(e)}")
        raise
