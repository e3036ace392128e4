"""In-memory storage implementations for testing and development.

This module provides dictionary-based implementations of the storage
interfaces that keep all data in memory. These implementations are suitable
for unit tests, local development and small demos.

**Not recommended for production**: nothing is persisted, and every query is
an O(n) scan over the collection.

Each public method completes without awaiting, so under a single event loop
every upsert and every delete is atomic with respect to other tasks.
"""

from datetime import datetime
from typing import Sequence

from newsmentions.article import Article
from newsmentions.mention import Mention, MentionAggregate, MentionGroup
from newsmentions.storage.interfaces import (
    ArticleStorageInterface,
    MentionStorageInterface,
)


def _in_window(date: datetime, start: datetime, end: datetime) -> bool:
    return start <= date < end


class InMemoryArticleStorage(ArticleStorageInterface):
    """In-memory article storage using a dictionary keyed by article id.

    Example:
        ```python
        storage = InMemoryArticleStorage()
        await storage.upsert(article)
        stored = await storage.get(article.id)
        ```
    """

    def __init__(self) -> None:
        """Initialize an empty article storage."""
        self._articles: dict[str, Article] = {}

    async def upsert(self, article: Article) -> str:
        """Stores an article, replacing any article with the same id.

        Args:
            article: The `Article` to store.

        Returns:
            The id of the stored article.
        """
        self._articles[article.id] = article
        return article.id

    async def get(self, article_id: str) -> Article | None:
        return self._articles.get(article_id)

    async def find_by_ids(self, article_ids: Sequence[str]) -> list[Article]:
        """Returns the stored articles among the given ids, newest first.

        Args:
            article_ids: Ids to resolve. Duplicates and unknown ids are ignored.

        Returns:
            A list of `Article` objects sorted by `date` descending.
        """
        wanted = set(article_ids)
        found = [article for aid, article in self._articles.items() if aid in wanted]
        found.sort(key=lambda article: article.date, reverse=True)
        return found

    async def min_date(self) -> datetime | None:
        if not self._articles:
            return None
        return min(article.date for article in self._articles.values())

    async def max_date(self) -> datetime | None:
        if not self._articles:
            return None
        return max(article.date for article in self._articles.values())

    async def delete_older_than(self, cutoff: datetime) -> int:
        """Deletes articles published strictly before the cutoff.

        Args:
            cutoff: Articles with `date < cutoff` are removed.

        Returns:
            The number of articles removed.
        """
        stale = [aid for aid, article in self._articles.items() if article.date < cutoff]
        for aid in stale:
            del self._articles[aid]
        return len(stale)

    async def count(self) -> int:
        return len(self._articles)


class InMemoryMentionStorage(MentionStorageInterface):
    """In-memory mention storage using a dictionary keyed by mention id.

    Aggregation and lookup scan every stored mention.

    Example:
        ```python
        storage = InMemoryMentionStorage()
        await storage.upsert(mention)
        top = await storage.aggregate_by_text(start, end, limit=10)
        ```
    """

    def __init__(self) -> None:
        """Initialize an empty mention storage."""
        self._mentions: dict[str, Mention] = {}

    async def upsert(self, mention: Mention) -> str:
        """Stores a mention, replacing any mention with the same id.

        Args:
            mention: The `Mention` to store.

        Returns:
            The id of the stored mention.
        """
        self._mentions[mention.id] = mention
        return mention.id

    async def get(self, mention_id: str) -> Mention | None:
        return self._mentions.get(mention_id)

    async def aggregate_by_text(
        self,
        start: datetime,
        end: datetime,
        limit: int,
    ) -> list[MentionAggregate]:
        """Groups mentions in the window by lower-cased text.

        Groups keep the order in which their first mention was stored, and
        the sort by total count is stable, so ties come back in that order.

        Args:
            start: Inclusive lower bound on `date`.
            end: Exclusive upper bound on `date`.
            limit: Maximum number of groups to return.

        Returns:
            A list of `MentionAggregate` objects, highest total count first.
        """
        totals: dict[str, int] = {}
        sentiments: dict[str, list[float]] = {}
        for mention in self._mentions.values():
            if not _in_window(mention.date, start, end):
                continue
            key = mention.text.lower()
            totals[key] = totals.get(key, 0) + mention.count
            sentiments.setdefault(key, []).append(mention.sentiment)

        results = [
            MentionAggregate(
                entity_key=key,
                total_count=total,
                average_sentiment=sum(sentiments[key]) / len(sentiments[key]),
            )
            for key, total in totals.items()
        ]
        results.sort(key=lambda agg: agg.total_count, reverse=True)
        return results[:limit]

    async def group_article_ids_by_text(
        self,
        text: str,
        start: datetime,
        end: datetime,
    ) -> list[MentionGroup]:
        """Collects article ids for mentions matching a text exactly, ignoring case.

        Args:
            text: Entity text to match. No pattern characters are interpreted.
            start: Inclusive lower bound on `date`.
            end: Exclusive upper bound on `date`.

        Returns:
            One `MentionGroup` per stored spelling of the text, or an empty
            list if nothing matches.
        """
        wanted = text.lower()
        groups: dict[str, list[str]] = {}
        for mention in self._mentions.values():
            if mention.text.lower() != wanted or not _in_window(mention.date, start, end):
                continue
            groups.setdefault(mention.text, []).append(mention.article_id)
        return [MentionGroup(key=key, article_ids=tuple(ids)) for key, ids in groups.items()]

    async def delete_older_than(self, cutoff: datetime) -> int:
        stale = [mid for mid, mention in self._mentions.items() if mention.date < cutoff]
        for mid in stale:
            del self._mentions[mid]
        return len(stale)

    async def delete_by_text_length(self, length: int) -> int:
        doomed = [mid for mid, mention in self._mentions.items() if len(mention.text) == length]
        for mid in doomed:
            del self._mentions[mid]
        return len(doomed)

    async def count(self) -> int:
        return len(self._mentions)
