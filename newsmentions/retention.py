"""Rolling retention for articles and mentions.

Two sweeps are provided:

- `RetentionEngine.prune_older_than` removes every article and every mention
  dated before the start of the current UTC day minus a number of days.
- `RetentionEngine.prune_degenerate_mentions` removes mentions whose text is a
  single character. Ingestion already drops those; the sweep cleans up rows
  stored before that filter existed.

The article and mention deletes are independent. They run concurrently, are
not atomic with each other, and each one is retried with exponential backoff
before it is given up. Neither sweep raises on a storage failure: the error
is logged and reported in the returned `PruneResult`.

The cutoff is fixed once when a sweep starts. Records ingested while the
sweep runs carry recent dates and are therefore never caught by it.
"""

import asyncio
from datetime import datetime
from typing import Awaitable, Callable

from pydantic import BaseModel, ConfigDict, Field
from tenacity import AsyncRetrying, RetryCallState, stop_after_attempt, wait_exponential

from newsmentions.clock import Clock
from newsmentions.config import DEFAULT_PRUNE_MAX_ATTEMPTS, DEFAULT_RETENTION_DAYS
from newsmentions.logging import setup_logging
from newsmentions.mention import DEGENERATE_TEXT_LENGTH
from newsmentions.storage.interfaces import (
    ArticleStorageInterface,
    MentionStorageInterface,
)

logger = setup_logging(__name__)


class PruneResult(BaseModel):
    """Result of one retention sweep.

    Attributes:
        cutoff: Records dated strictly before this were targeted. None for
            the degenerate-text sweep.
        articles_deleted: Articles removed.
        mentions_deleted: Mentions removed.
        errors: One entry per collection whose delete ultimately failed.
    """

    model_config = {"frozen": True}

    cutoff: datetime | None = None
    articles_deleted: int = 0
    mentions_deleted: int = 0
    errors: tuple[str, ...] = ()

    @property
    def ok(self) -> bool:
        return not self.errors


class RetentionEngine(BaseModel):
    """Deletes records that fall outside the retention window.

    Attributes:
        article_storage: Persistence backend for articles.
        mention_storage: Persistence backend for mentions.
        clock: Returns the current time; swapped out in tests.
        default_days: Window used when ``prune_older_than`` gets no argument.
        max_attempts: Tries per collection delete before giving up.
        base_delay_s: First retry delay; doubles on each further retry.
        max_delay_s: Ceiling for the retry delay.
    """

    model_config = ConfigDict(arbitrary_types_allowed=True)

    article_storage: ArticleStorageInterface
    mention_storage: MentionStorageInterface
    clock: Callable[[], Clock] = Clock.system
    default_days: int = Field(default=DEFAULT_RETENTION_DAYS, ge=0)
    max_attempts: int = Field(default=DEFAULT_PRUNE_MAX_ATTEMPTS, ge=1)
    base_delay_s: float = Field(default=0.2, ge=0.0)
    max_delay_s: float = Field(default=5.0, ge=0.0)

    async def prune_older_than(self, days: int | None = None) -> PruneResult:
        """Remove articles and mentions older than ``days`` whole days.

        The cutoff is midnight UTC today minus ``days``, so a record from
        ``now - 31d`` is removed by a 30 day sweep and one from ``now - 29d``
        is kept.

        Args:
            days: Size of the window. Defaults to ``default_days``.

        Returns:
            A PruneResult describing what was removed and what failed.

        Raises:
            ValueError: If ``days`` is negative.
        """
        if days is None:
            days = self.default_days
        if days < 0:
            raise ValueError(f"days must not be negative, got {days}")
        cutoff = self.clock().days_before_start_of_day(days)

        (articles, article_error), (mentions, mention_error) = await asyncio.gather(
            self._delete_with_retry("articles", lambda: self.article_storage.delete_older_than(cutoff)),
            self._delete_with_retry("mentions", lambda: self.mention_storage.delete_older_than(cutoff)),
        )
        result = PruneResult(
            cutoff=cutoff,
            articles_deleted=articles,
            mentions_deleted=mentions,
            errors=tuple(e for e in (article_error, mention_error) if e is not None),
        )
        logger.info(
            f"pruned records before {cutoff.isoformat()}: {articles} articles, {mentions} mentions",
            pprint=False,
        )
        return result

    async def prune_degenerate_mentions(self) -> PruneResult:
        """Remove every mention whose text is a single character."""
        mentions, error = await self._delete_with_retry(
            "degenerate mentions",
            lambda: self.mention_storage.delete_by_text_length(DEGENERATE_TEXT_LENGTH),
        )
        logger.info(f"pruned {mentions} degenerate mentions", pprint=False)
        return PruneResult(mentions_deleted=mentions, errors=(error,) if error is not None else ())

    async def _delete_with_retry(self, label: str, delete: Callable[[], Awaitable[int]]) -> tuple[int, str | None]:
        def log_retry(state: RetryCallState) -> None:
            logger.warning(
                f"deleting {label} failed (attempt {state.attempt_number}), retrying in "
                f"{state.next_action.sleep:.3f}s: {state.outcome.exception()!r}",  # type: ignore[union-attr]
                pprint=False,
            )

        retrying = AsyncRetrying(
            stop=stop_after_attempt(self.max_attempts),
            wait=wait_exponential(multiplier=self.base_delay_s, max=self.max_delay_s),
            before_sleep=log_retry,
            reraise=True,
        )
        try:
            return await retrying(delete), None
        except Exception as exc:  # pylint: disable=broad-exception-caught
            logger.error(f"deleting {label} failed after {self.max_attempts} attempt(s): {exc!r}", pprint=False)
            return 0, f"{label}: {exc!r}"
