"""Single entry point wiring one store handle into every engine.

A process builds one `MentionService` at startup and hands it to its HTTP
handlers, ingestion jobs and schedulers. The engines share the store; they
hold no state of their own and need no coordination beyond what the store
provides.

Example usage:
    ```python
    service = MentionService.from_config(load_config())
    await service.ingest_documents(docs)
    top = await service.aggregate_mentions(limit=20)
    await service.prune_older_than()
    service.close()
    ```
"""

from typing import Any, Iterable, Mapping

from pydantic import BaseModel, ConfigDict

from newsmentions.aggregation import AggregationEngine
from newsmentions.article import Article, DateRange
from newsmentions.clock import TimeBound
from newsmentions.config import NewsMentionsConfig
from newsmentions.document import EnrichmentDocument
from newsmentions.ingest import IngestionEngine, IngestionResult
from newsmentions.lookup import LookupEngine
from newsmentions.mention import MentionAggregate
from newsmentions.retention import PruneResult, RetentionEngine
from newsmentions.storage.factory import Store, create_store


class MentionService(BaseModel):
    """Ingestion, query and retention operations over one store."""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    store: Store
    ingestion: IngestionEngine
    aggregation: AggregationEngine
    lookup: LookupEngine
    retention: RetentionEngine

    @classmethod
    def for_store(cls, store: Store, config: NewsMentionsConfig | None = None, **retention_options: Any) -> "MentionService":
        """Build every engine over ``store`` using the limits in ``config``."""
        config = config or NewsMentionsConfig()
        return cls(
            store=store,
            ingestion=IngestionEngine(article_storage=store.articles, mention_storage=store.mentions),
            aggregation=AggregationEngine(mention_storage=store.mentions, default_limit=config.aggregate_limit),
            lookup=LookupEngine(article_storage=store.articles, mention_storage=store.mentions),
            retention=RetentionEngine(
                article_storage=store.articles,
                mention_storage=store.mentions,
                default_days=config.retention_days,
                max_attempts=config.prune_max_attempts,
                **retention_options,
            ),
        )

    @classmethod
    def from_config(cls, config: NewsMentionsConfig) -> "MentionService":
        """Connect to ``config.database_url`` and build every engine."""
        return cls.for_store(create_store(config.database_url), config)

    async def ingest_documents(
        self,
        docs: Iterable[EnrichmentDocument | Mapping[str, Any] | None],
    ) -> IngestionResult:
        return await self.ingestion.ingest_documents(docs)

    async def aggregate_mentions(
        self,
        start: TimeBound = None,
        end: TimeBound = None,
        limit: int | None = None,
    ) -> list[MentionAggregate]:
        return await self.aggregation.aggregate_mentions(start, end, limit)

    async def article_ids_for_entity(self, entity_text: str, start: TimeBound = None, end: TimeBound = None) -> set[str]:
        return await self.lookup.article_ids_for_entity(entity_text, start, end)

    async def articles_for_entity(self, entity_text: str, start: TimeBound = None, end: TimeBound = None) -> list[Article]:
        return await self.lookup.articles_for_entity(entity_text, start, end)

    async def get_min_and_max_dates(self) -> DateRange:
        return await self.lookup.get_min_and_max_dates()

    async def prune_older_than(self, days: int | None = None) -> PruneResult:
        return await self.retention.prune_older_than(days)

    async def prune_degenerate_mentions(self) -> PruneResult:
        return await self.retention.prune_degenerate_mentions()

    def close(self) -> None:
        self.store.close()
