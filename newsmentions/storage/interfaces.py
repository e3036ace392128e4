"""Storage interface definitions for articles and entity mentions.

This module defines the abstract interfaces the engines are written against.
Two independent collections are persisted:

- **Articles**, keyed by the source document id
- **Mentions**, keyed by ``make_mention_id(text, article_id)``

``Mention.article_id`` is a plain reference. No interface enforces
referential integrity between the two collections, and no operation spans
both of them.

All interfaces are async-first so backends can use non-blocking drivers or
push blocking work onto worker threads. Backends are expected to provide
per-record atomicity for ``upsert`` and for each row removed by a delete;
the engines add no locking of their own.

Time windows passed to these interfaces are aware UTC datetimes and are
half-open: ``start <= date < end``.
"""

from abc import ABC, abstractmethod
from datetime import datetime
from typing import Sequence

from newsmentions.article import Article
from newsmentions.mention import Mention, MentionAggregate, MentionGroup


class ArticleStorageInterface(ABC):
    """Abstract interface for article storage operations."""

    @abstractmethod
    async def upsert(self, article: Article) -> str:
        """Insert the article, or overwrite every field of an existing one.

        Returns:
            The article id.
        """

    @abstractmethod
    async def get(self, article_id: str) -> Article | None:
        """Retrieve an article by id, or None if not found."""

    @abstractmethod
    async def find_by_ids(self, article_ids: Sequence[str]) -> list[Article]:
        """Return the stored articles among ``article_ids``, newest first.

        Unknown ids are ignored.
        """

    @abstractmethod
    async def min_date(self) -> datetime | None:
        """Earliest publication time in the collection, or None when empty."""

    @abstractmethod
    async def max_date(self) -> datetime | None:
        """Latest publication time in the collection, or None when empty."""

    @abstractmethod
    async def delete_older_than(self, cutoff: datetime) -> int:
        """Delete every article dated strictly before ``cutoff``.

        Returns:
            The number of articles removed.
        """

    @abstractmethod
    async def count(self) -> int:
        """Return total number of stored articles."""


class MentionStorageInterface(ABC):
    """Abstract interface for entity mention storage operations."""

    @abstractmethod
    async def upsert(self, mention: Mention) -> str:
        """Insert the mention, or overwrite every field of an existing one.

        Returns:
            The mention id.
        """

    @abstractmethod
    async def get(self, mention_id: str) -> Mention | None:
        """Retrieve a mention by id, or None if not found."""

    @abstractmethod
    async def aggregate_by_text(
        self,
        start: datetime,
        end: datetime,
        limit: int,
    ) -> list[MentionAggregate]:
        """Group mentions in ``[start, end)`` by lower-cased text.

        Each group reports the sum of ``count`` and the unweighted mean of
        ``sentiment``. Groups are ordered by total count, highest first, and
        at most ``limit`` are returned. Ties keep no particular order.
        """

    @abstractmethod
    async def group_article_ids_by_text(
        self,
        text: str,
        start: datetime,
        end: datetime,
    ) -> list[MentionGroup]:
        """Collect article ids for mentions whose text equals ``text``.

        The comparison is whole-string and case-insensitive, and ``text`` is
        matched literally. One group is returned per stored spelling of the
        text; the list is empty when nothing matches.
        """

    @abstractmethod
    async def delete_older_than(self, cutoff: datetime) -> int:
        """Delete every mention dated strictly before ``cutoff``.

        Returns:
            The number of mentions removed.
        """

    @abstractmethod
    async def delete_by_text_length(self, length: int) -> int:
        """Delete every mention whose text is exactly ``length`` characters.

        Returns:
            The number of mentions removed.
        """

    @abstractmethod
    async def count(self) -> int:
        """Return total number of stored mentions."""
