"""
SQL implementation of the storage interfaces, built on SQLModel.

Each operation opens its own session and runs in a worker thread, so one
engine can be shared by concurrent callers. Engines on a StaticPool share a
single connection, so their sessions are serialized behind a lock. Upserts
are single ON CONFLICT statements, which leaves per-row atomicity to the
database.
"""

import asyncio
import threading
from contextlib import nullcontext
from datetime import datetime, timezone
from typing import Callable, Sequence, TypeVar

from sqlalchemy import delete, func
from sqlalchemy.pool import StaticPool
from sqlalchemy.dialects.postgresql import insert as postgresql_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session, SQLModel, select

from newsmentions.article import Article
from newsmentions.clock import ensure_utc
from newsmentions.errors import StorageError
from newsmentions.mention import Mention, MentionAggregate, MentionGroup
from newsmentions.storage.interfaces import (
    ArticleStorageInterface,
    MentionStorageInterface,
)
from newsmentions.storage.models import ArticleRecord, MentionRecord

T = TypeVar("T")


def _to_column(value: datetime) -> datetime:
    """Convert an aware datetime to the naive UTC form stored in the database."""
    return value.astimezone(timezone.utc).replace(tzinfo=None)


def _upsert(session: Session, record: SQLModel) -> None:
    """Write ``record`` as a single insert-or-update statement.

    SQLite and PostgreSQL get a native ON CONFLICT upsert, so racing writers
    for one id each leave a complete row. Other dialects fall back to
    ``Session.merge``.
    """
    table = type(record).__table__  # type: ignore[attr-defined]
    values = record.model_dump()
    dialect = session.get_bind().dialect.name
    if dialect == "sqlite":
        statement = sqlite_insert(table).values(**values)
    elif dialect == "postgresql":
        statement = postgresql_insert(table).values(**values)
    else:
        session.merge(record)
        return
    updates = {name: statement.excluded[name] for name in values if name != "id"}
    session.execute(statement.on_conflict_do_update(index_elements=["id"], set_=updates))


class _SQLStorage:
    def __init__(self, engine: Engine, lock: "threading.Lock | None" = None):
        self.engine = engine
        if lock is None and isinstance(engine.pool, StaticPool):
            lock = threading.Lock()
        # A StaticPool hands every thread the same DBAPI connection.
        self._lock = lock if lock is not None else nullcontext()

    async def _run(self, operation: str, fn: Callable[[Session], T]) -> T:
        def work() -> T:
            with self._lock, Session(self.engine) as session:
                return fn(session)

        try:
            return await asyncio.to_thread(work)
        except SQLAlchemyError as exc:
            raise StorageError(f"{type(self).__name__}.{operation} failed: {exc}") from exc


class SQLArticleStorage(_SQLStorage, ArticleStorageInterface):
    """
    SQL implementation of article storage.
    """

    @staticmethod
    def _to_model(record: ArticleRecord) -> Article:
        return Article(id=record.id, title=record.title, date=ensure_utc(record.date), url=record.url)

    async def upsert(self, article: Article) -> str:
        def fn(session: Session) -> str:
            _upsert(session, ArticleRecord(id=article.id, title=article.title, date=_to_column(article.date), url=article.url))
            session.commit()
            return article.id

        return await self._run("upsert", fn)

    async def get(self, article_id: str) -> Article | None:
        def fn(session: Session) -> Article | None:
            record = session.get(ArticleRecord, article_id)
            return self._to_model(record) if record is not None else None

        return await self._run("get", fn)

    async def find_by_ids(self, article_ids: Sequence[str]) -> list[Article]:
        ids = list(set(article_ids))
        if not ids:
            return []

        def fn(session: Session) -> list[Article]:
            statement = select(ArticleRecord).where(ArticleRecord.id.in_(ids)).order_by(ArticleRecord.date.desc())  # type: ignore[attr-defined]
            return [self._to_model(record) for record in session.exec(statement).all()]

        return await self._run("find_by_ids", fn)

    async def min_date(self) -> datetime | None:
        def fn(session: Session) -> datetime | None:
            value = session.exec(select(func.min(ArticleRecord.date))).one()
            return ensure_utc(value) if value is not None else None

        return await self._run("min_date", fn)

    async def max_date(self) -> datetime | None:
        def fn(session: Session) -> datetime | None:
            value = session.exec(select(func.max(ArticleRecord.date))).one()
            return ensure_utc(value) if value is not None else None

        return await self._run("max_date", fn)

    async def delete_older_than(self, cutoff: datetime) -> int:
        def fn(session: Session) -> int:
            result = session.execute(delete(ArticleRecord).where(ArticleRecord.date < _to_column(cutoff)))
            session.commit()
            return result.rowcount

        return await self._run("delete_older_than", fn)

    async def count(self) -> int:
        def fn(session: Session) -> int:
            return session.exec(select(func.count(ArticleRecord.id))).one()  # type: ignore[arg-type] # pylint: disable=not-callable

        return await self._run("count", fn)


class SQLMentionStorage(_SQLStorage, MentionStorageInterface):
    """
    SQL implementation of mention storage. Grouping and ranking run in the database.
    """

    @staticmethod
    def _to_model(record: MentionRecord) -> Mention:
        return Mention(
            id=record.id,
            text=record.text,
            count=record.count,
            sentiment=record.sentiment,
            date=ensure_utc(record.date),
            article_id=record.article_id,
        )

    async def upsert(self, mention: Mention) -> str:
        def fn(session: Session) -> str:
            _upsert(
                session,
                MentionRecord(
                    id=mention.id,
                    text=mention.text,
                    count=mention.count,
                    sentiment=mention.sentiment,
                    date=_to_column(mention.date),
                    article_id=mention.article_id,
                )
            )
            session.commit()
            return mention.id

        return await self._run("upsert", fn)

    async def get(self, mention_id: str) -> Mention | None:
        def fn(session: Session) -> Mention | None:
            record = session.get(MentionRecord, mention_id)
            return self._to_model(record) if record is not None else None

        return await self._run("get", fn)

    async def aggregate_by_text(
        self,
        start: datetime,
        end: datetime,
        limit: int,
    ) -> list[MentionAggregate]:
        key = func.lower(MentionRecord.text).label("entity_key")
        total = func.sum(MentionRecord.count).label("total_count")
        average = func.avg(MentionRecord.sentiment).label("average_sentiment")
        statement = (
            select(key, total, average)
            .where(MentionRecord.date >= _to_column(start), MentionRecord.date < _to_column(end))
            .group_by(key)
            .order_by(total.desc())
            .limit(limit)
        )

        def fn(session: Session) -> list[MentionAggregate]:
            return [
                MentionAggregate(entity_key=row[0], total_count=int(row[1] or 0), average_sentiment=float(row[2] or 0.0))
                for row in session.exec(statement).all()
            ]

        return await self._run("aggregate_by_text", fn)

    async def group_article_ids_by_text(
        self,
        text: str,
        start: datetime,
        end: datetime,
    ) -> list[MentionGroup]:
        statement = (
            select(MentionRecord.text, MentionRecord.article_id)
            .where(func.lower(MentionRecord.text) == func.lower(text))
            .where(MentionRecord.date >= _to_column(start), MentionRecord.date < _to_column(end))
        )

        def fn(session: Session) -> list[MentionGroup]:
            groups: dict[str, list[str]] = {}
            for stored_text, article_id in session.exec(statement).all():
                groups.setdefault(stored_text, []).append(article_id)
            return [MentionGroup(key=key, article_ids=tuple(ids)) for key, ids in groups.items()]

        return await self._run("group_article_ids_by_text", fn)

    async def delete_older_than(self, cutoff: datetime) -> int:
        def fn(session: Session) -> int:
            result = session.execute(delete(MentionRecord).where(MentionRecord.date < _to_column(cutoff)))
            session.commit()
            return result.rowcount

        return await self._run("delete_older_than", fn)

    async def delete_by_text_length(self, length: int) -> int:
        def fn(session: Session) -> int:
            result = session.execute(delete(MentionRecord).where(func.length(MentionRecord.text) == length))
            session.commit()
            return result.rowcount

        return await self._run("delete_by_text_length", fn)

    async def count(self) -> int:
        def fn(session: Session) -> int:
            return session.exec(select(func.count(MentionRecord.id))).one()  # type: ignore[arg-type] # pylint: disable=not-callable

        return await self._run("count", fn)
