"""Time-windowed ranking of entity mentions."""

from pydantic import BaseModel, ConfigDict, Field

from newsmentions.clock import FAR_FUTURE_MILLIS, TimeBound, resolve_bound
from newsmentions.config import DEFAULT_AGGREGATE_LIMIT
from newsmentions.mention import MentionAggregate
from newsmentions.storage.interfaces import MentionStorageInterface


class AggregationEngine(BaseModel):
    """Ranks entities by how often they were mentioned in a time window.

    Attributes:
        mention_storage: Persistence backend for mentions.
        default_limit: Number of groups returned when the caller gives no limit.
    """

    model_config = ConfigDict(arbitrary_types_allowed=True)

    mention_storage: MentionStorageInterface
    default_limit: int = Field(default=DEFAULT_AGGREGATE_LIMIT, ge=1)

    async def aggregate_mentions(
        self,
        start: TimeBound = None,
        end: TimeBound = None,
        limit: int | None = None,
    ) -> list[MentionAggregate]:
        """Group mentions dated in ``[start, end)`` by lower-cased text.

        "IBM" and "ibm" land in the same group. Each group carries the summed
        ``count`` and the unweighted mean ``sentiment`` of its mentions, and
        groups come back highest total first, truncated to ``limit``.

        Args:
            start: Inclusive lower bound, epoch milliseconds or an aware
                datetime. Defaults to the epoch.
            end: Exclusive upper bound, same forms. Defaults to a far-future
                sentinel.
            limit: Maximum number of groups. ``None`` or 0 means ``default_limit``.

        Returns:
            A list of MentionAggregate, empty when no mention is in the window.

        Raises:
            ValueError: If ``limit`` is negative or a bound is a naive datetime.
            StorageError: If the backend fails.
        """
        if limit is not None and limit < 0:
            raise ValueError(f"limit must not be negative, got {limit}")
        return await self.mention_storage.aggregate_by_text(
            resolve_bound(start, 0),
            resolve_bound(end, FAR_FUTURE_MILLIS),
            limit or self.default_limit,
        )
