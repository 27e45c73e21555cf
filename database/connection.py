"""
ComplyDocs Database Connection
Engine and session factory for SQLite or PostgreSQL
"""

import logging
from contextlib import contextmanager
from typing import Iterator, Optional

from sqlalchemy import create_engine, event, text
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from core.config import DatabaseConfig

logger = logging.getLogger(__name__)


def _configure_sqlite(engine: Engine) -> None:
    """Enable foreign keys and let SQLAlchemy own BEGIN so savepoints work."""

    @event.listens_for(engine, "connect")
    def do_connect(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    @event.listens_for(engine, "begin")
    def do_begin(conn):
        conn.exec_driver_sql("BEGIN")


def create_db_engine(url: Optional[str] = None, echo: Optional[bool] = None) -> Engine:
    """
    Create an engine for the configured database.

    In-memory SQLite ("sqlite://") shares one connection across threads so
    every session sees the same database.
    """
    config = DatabaseConfig()
    url = url or config.url
    echo = config.echo if echo is None else echo

    if url.startswith("sqlite"):
        kwargs = {"connect_args": {"check_same_thread": False}}
        if url in ("sqlite://", "sqlite:///:memory:"):
            kwargs["poolclass"] = StaticPool
        engine = create_engine(url, echo=echo, **kwargs)
        _configure_sqlite(engine)
    else:
        engine = create_engine(url, echo=echo, pool_pre_ping=True)

    logger.debug(f"Database engine created for {engine.url.render_as_string(hide_password=True)}")
    return engine


def create_session_factory(engine: Engine) -> sessionmaker:
    return sessionmaker(
        engine,
        class_=Session,
        expire_on_commit=False,
        autoflush=False,
    )


@contextmanager
def get_db_context(session_factory: sessionmaker) -> Iterator[Session]:
    """
    Session scope: commit on success, roll back on error.
    Usage:
        with get_db_context(SessionLocal) as db:
            DocumentRepository(db).find_by_id(document_id)
    """
    session = session_factory()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()


def init_db(engine: Engine) -> None:
    """Create all tables. Safe to call repeatedly."""
    from database.models import Base

    Base.metadata.create_all(engine)
    logger.info("Database initialized successfully")


def health_check(engine: Engine) -> dict:
    """Check database connectivity."""
    try:
        with engine.connect() as conn:
            conn.execute(text("SELECT 1")).scalar()
        return {"status": "healthy", "database": "connected"}
    except Exception as e:
        logger.error(f"Database health check failed: {e}")
        return {"status": "unhealthy", "database": str(e)}
