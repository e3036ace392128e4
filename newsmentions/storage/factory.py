"""
Construction of the store handle passed to every engine.

The handle is built once per process, before any engine runs, and shared by
all of them.
"""

import threading

from pydantic import BaseModel, ConfigDict
from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.pool import StaticPool
from sqlmodel import SQLModel

from newsmentions.storage.interfaces import (
    ArticleStorageInterface,
    MentionStorageInterface,
)
from newsmentions.storage.memory import InMemoryArticleStorage, InMemoryMentionStorage
from newsmentions.storage.models import ArticleRecord, MentionRecord
from newsmentions.storage.sql import SQLArticleStorage, SQLMentionStorage


class Store(BaseModel):
    """The two collections, plus the engine behind them when there is one."""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    articles: ArticleStorageInterface
    mentions: MentionStorageInterface
    engine: Engine | None = None

    def close(self) -> None:
        """Dispose of the database engine, if any."""
        if self.engine is not None:
            self.engine.dispose()


def _unicode_lower(value):
    return value.lower() if isinstance(value, str) else value


def _register_unicode_lower(dbapi_connection, connection_record) -> None:  # pylint: disable=unused-argument
    dbapi_connection.create_function("lower", 1, _unicode_lower, deterministic=True)


def create_engine_for_url(database_url: str) -> Engine:
    """Create an engine and make sure the article and mention tables exist.

    SQLite's built-in lower() only folds ASCII, so SQLite connections get a
    lower() that folds case the way str.lower() does.
    """
    connect_args = {}
    kwargs = {}
    if database_url.startswith("sqlite://"):
        connect_args["check_same_thread"] = False  # sessions run in worker threads
        if database_url in ("sqlite://", "sqlite:///:memory:"):
            kwargs["poolclass"] = StaticPool
    engine = create_engine(database_url, connect_args=connect_args, **kwargs)
    if engine.dialect.name == "sqlite":
        event.listen(engine, "connect", _register_unicode_lower)
    SQLModel.metadata.create_all(engine, tables=[ArticleRecord.__table__, MentionRecord.__table__])  # type: ignore[attr-defined]
    return engine


def create_store(database_url: str) -> Store:
    """Build a SQL-backed store for ``database_url``."""
    if not database_url.startswith(("sqlite://", "postgresql://", "postgresql+")):
        raise ValueError(f"Unsupported database URL scheme: {database_url!r}")
    engine = create_engine_for_url(database_url)
    lock = threading.Lock() if isinstance(engine.pool, StaticPool) else None
    return Store(articles=SQLArticleStorage(engine, lock), mentions=SQLMentionStorage(engine, lock), engine=engine)


def create_memory_store() -> Store:
    """Build a store that keeps everything in process memory."""
    return Store(articles=InMemoryArticleStorage(), mentions=InMemoryMentionStorage())
