"""Test fixtures and helpers shared by the newsmentions tests.

This module provides:
- Pytest fixtures for in-memory article and mention storage
- A fixed clock so retention cutoffs are predictable
- Factory helpers for enrichment documents, articles and mentions
- Storage doubles that fail on demand, for exercising error handling
"""

from datetime import datetime, timedelta, timezone
from typing import Any, Sequence

import pytest

from newsmentions.article import Article
from newsmentions.clock import Clock
from newsmentions.mention import Mention
from newsmentions.storage.memory import InMemoryArticleStorage, InMemoryMentionStorage

# 2024-03-15 14:30 UTC; start of day is 2024-03-15 00:00 UTC.
NOW = datetime(2024, 3, 15, 14, 30, tzinfo=timezone.utc)


def epoch_seconds(value: datetime) -> int:
    return int(value.timestamp())


def epoch_millis(value: datetime) -> int:
    return int(value.timestamp() * 1000)


def make_doc(
    doc_id: str = "doc-1",
    timestamp: int | None = None,
    entities: Sequence[tuple[str, int, float]] = (("IBM", 3, 0.5),),
    title: str = "A headline",
    url: str = "https://news.example.com/a",
) -> dict[str, Any]:
    """Build an enrichment document in the service's JSON layout.

    ``entities`` are ``(text, count, sentiment score)`` tuples.
    """
    return {
        "id": doc_id,
        "timestamp": timestamp if timestamp is not None else epoch_seconds(NOW),
        "source": {
            "enriched": {
                "title": title,
                "url": url,
                "entities": [{"text": text, "count": count, "sentiment": {"score": score}} for text, count, score in entities],
            }
        },
    }


def make_article(article_id: str = "doc-1", date: datetime = NOW, title: str = "A headline") -> Article:
    return Article(id=article_id, title=title, date=date, url=f"https://news.example.com/{article_id}")


def make_mention(
    text: str = "IBM",
    article_id: str = "doc-1",
    date: datetime = NOW,
    count: int = 1,
    sentiment: float = 0.0,
) -> Mention:
    return Mention.for_article(text=text, article_id=article_id, date=date, count=count, sentiment=sentiment)


class FlakyMentionStorage(InMemoryMentionStorage):
    """Mention storage whose writes and deletes fail on request.

    Args:
        fail_ids: Mention ids whose upsert always raises.
        delete_failures: Number of delete calls that raise before deletes
            start succeeding.
    """

    def __init__(self, fail_ids: Sequence[str] = (), delete_failures: int = 0) -> None:
        super().__init__()
        self.fail_ids = set(fail_ids)
        self.delete_failures = delete_failures
        self.delete_calls = 0

    async def upsert(self, mention: Mention) -> str:
        if mention.id in self.fail_ids:
            raise ConnectionError(f"store rejected {mention.id}")
        return await super().upsert(mention)

    def _maybe_fail_delete(self) -> None:
        self.delete_calls += 1
        if self.delete_calls <= self.delete_failures:
            raise ConnectionError("store unreachable")

    async def delete_older_than(self, cutoff: datetime) -> int:
        self._maybe_fail_delete()
        return await super().delete_older_than(cutoff)

    async def delete_by_text_length(self, length: int) -> int:
        self._maybe_fail_delete()
        return await super().delete_by_text_length(length)


class UnreachableArticleStorage(InMemoryArticleStorage):
    """Article storage that fails every operation."""

    async def upsert(self, article: Article) -> str:
        raise ConnectionError("store unreachable")

    async def find_by_ids(self, article_ids: Sequence[str]) -> list[Article]:
        raise ConnectionError("store unreachable")

    async def min_date(self) -> datetime | None:
        raise ConnectionError("store unreachable")

    async def delete_older_than(self, cutoff: datetime) -> int:
        raise ConnectionError("store unreachable")


@pytest.fixture
def article_storage() -> InMemoryArticleStorage:
    """Create an empty in-memory article storage."""
    return InMemoryArticleStorage()


@pytest.fixture
def mention_storage() -> InMemoryMentionStorage:
    """Create an empty in-memory mention storage."""
    return InMemoryMentionStorage()


@pytest.fixture
def clock() -> Clock:
    """A clock frozen at NOW."""
    return Clock(now=NOW)


def days_ago(days: float) -> datetime:
    return NOW - timedelta(days=days)
