"""Database connection management for FreightDesk.

Engines and session factories are constructed explicitly and handed to the
code that needs them; nothing is created at import time. The server opens
the engine in its lifespan and disposes it on shutdown.

Supports SQLite for development and tests, PostgreSQL for production.

Usage:
    from freightdesk.db.connection import (
        create_db_engine, create_session_factory, init_db, close_db,
    )

    engine = create_db_engine(config.database)
    init_db(engine)
    session_factory = create_session_factory(engine)
    ...
    close_db(engine)
"""

import logging
from typing import Any

from sqlalchemy import Engine, create_engine, event
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from freightdesk.config import DatabaseConfig
from freightdesk.db.models import Base
from freightdesk.utils.paths import ensure_dirs_exist, get_default_db_path

logger = logging.getLogger(__name__)


def _is_memory_sqlite(url: str) -> bool:
    return url in ("sqlite://", "sqlite:///:memory:") or "mode=memory" in url


def _install_sqlite_hooks(engine: Engine) -> None:
    """Configure SQLite pragmas and immediate transactions.

    pysqlite's own transaction handling is switched off so that every
    SQLAlchemy transaction starts with BEGIN IMMEDIATE. That takes the
    database write lock up front, which serializes read-then-write
    sequences such as select_quote the way a row lock does on PostgreSQL.
    """

    @event.listens_for(engine, "connect")
    def set_sqlite_pragma(dbapi_connection: Any, connection_record: Any) -> None:
        dbapi_connection.isolation_level = None
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.execute("PRAGMA journal_mode=WAL;")
        cursor.execute("PRAGMA synchronous=NORMAL;")
        cursor.close()

    @event.listens_for(engine, "begin")
    def begin_immediate(conn: Any) -> None:
        conn.exec_driver_sql("BEGIN IMMEDIATE")


def create_db_engine(config: DatabaseConfig, url: str | None = None) -> Engine:
    """Create the SQLAlchemy engine for the configured store.

    Args:
        config: Database settings (pool sizing, timeouts, echo).
        url: Explicit URL; defaults to config.resolved_url().

    Returns:
        A configured Engine. Call close_db() when done.
    """
    database_url = url or config.resolved_url()

    if database_url.startswith("sqlite"):
        if database_url == f"sqlite:///{get_default_db_path()}":
            ensure_dirs_exist()
        kwargs: dict[str, Any] = {
            "connect_args": {"check_same_thread": False, "timeout": config.pool_timeout},
        }
        if _is_memory_sqlite(database_url):
            # One shared connection, otherwise each checkout sees an empty DB
            kwargs["poolclass"] = StaticPool
        engine = create_engine(database_url, echo=config.echo, **kwargs)
        _install_sqlite_hooks(engine)
    else:
        engine = create_engine(
            database_url,
            echo=config.echo,
            pool_size=config.pool_size,
            pool_timeout=config.pool_timeout,
            pool_recycle=config.pool_recycle,
            pool_pre_ping=True,
        )

    logger.info("Database engine created for %s", engine.url.render_as_string(hide_password=True))
    return engine


def create_session_factory(engine: Engine) -> sessionmaker[Session]:
    """Build the session factory used by the persistence gateway.

    expire_on_commit is off so records stay readable after their
    transaction closes.
    """
    return sessionmaker(
        autocommit=False,
        autoflush=False,
        bind=engine,
        expire_on_commit=False,
    )


def init_db(engine: Engine) -> None:
    """Create all database tables.

    Uses the Base.metadata from models.py. Safe to call multiple times -
    will not recreate existing tables.
    """
    Base.metadata.create_all(bind=engine)


def close_db(engine: Engine) -> None:
    """Close the engine and dispose of its connection pool."""
    engine.dispose()
