"""
News entity mentions: ingestion, ranking and retention.

Turns news-article analysis documents from a text-enrichment service into
stored articles and entity mentions, answers time-windowed questions about
those mentions (which entities were talked about most, with what sentiment,
and in which articles), and prunes records that fall out of a rolling
retention window.

Typical use:

    from newsmentions import MentionService, load_config

    service = MentionService.from_config(load_config())
    await service.ingest_documents(docs)
    ranking = await service.aggregate_mentions(start_millis, end_millis, limit=25)
"""

from newsmentions.adapter import AdaptedDocument, adapt_document
from newsmentions.aggregation import AggregationEngine
from newsmentions.article import Article, DateRange
from newsmentions.clock import Clock
from newsmentions.config import NewsMentionsConfig, load_config
from newsmentions.document import EnrichmentDocument
from newsmentions.errors import NewsMentionsError, StorageError
from newsmentions.ingest import IngestionEngine, IngestionResult, UpsertOutcome
from newsmentions.lookup import LookupEngine
from newsmentions.mention import (
    Mention,
    MentionAggregate,
    MentionGroup,
    is_degenerate_text,
    make_mention_id,
)
from newsmentions.retention import PruneResult, RetentionEngine
from newsmentions.service import MentionService

__all__ = [
    "AdaptedDocument",
    "AggregationEngine",
    "Article",
    "Clock",
    "DateRange",
    "EnrichmentDocument",
    "IngestionEngine",
    "IngestionResult",
    "LookupEngine",
    "Mention",
    "MentionAggregate",
    "MentionGroup",
    "MentionService",
    "NewsMentionsConfig",
    "NewsMentionsError",
    "PruneResult",
    "RetentionEngine",
    "StorageError",
    "UpsertOutcome",
    "adapt_document",
    "is_degenerate_text",
    "load_config",
    "make_mention_id",
]

__version__ = "0.1.0"
