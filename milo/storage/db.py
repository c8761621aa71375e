"""Engine construction and schema setup for the conversations table."""

from __future__ import annotations

from functools import lru_cache

from loguru import logger
from sqlalchemy.engine import Engine
from sqlalchemy.pool import StaticPool
from sqlmodel import Session, SQLModel, create_engine

from ..config.app_config import get_app_config
from . import models  # noqa: F401  (registers the table on SQLModel.metadata)


def create_db_engine(database_url: str) -> Engine:
    """Build an engine for ``database_url``.

    SQLite connections are shared across threads because conversation
    logging runs in the background thread pool.  In-memory SQLite uses a
    single static connection so every session sees the same database.
    """
    kwargs: dict[str, object] = {"echo": False}
    if database_url.startswith("sqlite"):
        kwargs["connect_args"] = {"check_same_thread": False}
        if database_url in ("sqlite://", "sqlite:///:memory:"):
            kwargs["poolclass"] = StaticPool
    else:
        kwargs["pool_pre_ping"] = True
    return create_engine(database_url, **kwargs)


def init_db(engine: Engine) -> None:
    """Create all tables if they don't exist."""
    SQLModel.metadata.create_all(engine)


@lru_cache()
def get_engine() -> Engine:
    """Return the process-wide engine for the configured database."""
    app_config = get_app_config()
    engine = create_db_engine(app_config.database_url)
    logger.info("Database engine created for dialect {}", engine.dialect.name)
    return engine


def get_session(engine: Engine) -> Session:
    """Provide a new SQLModel session."""
    return Session(engine)
