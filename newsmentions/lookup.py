"""Reverse lookup from entity text to the articles that mention it."""

import asyncio

from pydantic import BaseModel, ConfigDict

from newsmentions.article import Article, DateRange
from newsmentions.clock import FAR_FUTURE_MILLIS, TimeBound, resolve_bound, to_epoch_millis
from newsmentions.storage.interfaces import (
    ArticleStorageInterface,
    MentionStorageInterface,
)


class LookupEngine(BaseModel):
    """Resolves entity texts to articles, and reports the stored date range.

    Attributes:
        article_storage: Persistence backend for articles.
        mention_storage: Persistence backend for mentions.
    """

    model_config = ConfigDict(arbitrary_types_allowed=True)

    article_storage: ArticleStorageInterface
    mention_storage: MentionStorageInterface

    async def article_ids_for_entity(
        self,
        entity_text: str,
        start: TimeBound = None,
        end: TimeBound = None,
    ) -> set[str]:
        """Ids of the articles with a mention of ``entity_text`` in ``[start, end)``.

        Matching ignores case but covers the whole text, so "bank" does not
        match "bankrupt". The text is taken literally.

        Returns:
            The distinct article ids; an empty set when nothing matches.
        """
        groups = await self.mention_storage.group_article_ids_by_text(
            entity_text,
            resolve_bound(start, 0),
            resolve_bound(end, FAR_FUTURE_MILLIS),
        )
        article_ids: set[str] = set()
        for group in groups or ():
            article_ids.update(group.article_ids)
        return article_ids

    async def articles_for_entity(
        self,
        entity_text: str,
        start: TimeBound = None,
        end: TimeBound = None,
    ) -> list[Article]:
        """Articles mentioning ``entity_text`` in the window, newest first."""
        article_ids = await self.article_ids_for_entity(entity_text, start, end)
        if not article_ids:
            return []
        return await self.article_storage.find_by_ids(sorted(article_ids))

    async def get_min_and_max_dates(self) -> DateRange:
        """Earliest and latest article dates, as epoch milliseconds."""
        earliest, latest = await asyncio.gather(self.article_storage.min_date(), self.article_storage.max_date())
        return DateRange(
            min=to_epoch_millis(earliest) if earliest is not None else None,
            max=to_epoch_millis(latest) if latest is not None else None,
        )
