"""Ingestion of enrichment documents into article and mention storage.

This module provides the `IngestionEngine`, which applies a batch of raw
enrichment documents to storage:

    1. Skip absent documents and adapt the rest with `adapt_document`
    2. Collapse repeated articles and mentions within the batch (last wins)
    3. Upsert every article and every mention as an independent task

Each upsert either succeeds or fails on its own. A failure is logged with the
record id and recorded in the returned `IngestionResult`; it never stops the
remaining upserts and is never raised to the caller. There is no batch
atomicity, so a batch may be applied partially.

Example usage:
    ```python
    engine = IngestionEngine(
        article_storage=store.articles,
        mention_storage=store.mentions,
    )
    result = await engine.ingest_documents(docs)
    print(f"{result.mentions_written} mentions written, {len(result.failures)} failures")
    ```
"""

import asyncio
from typing import Any, Awaitable, Iterable, Literal, Mapping

from pydantic import BaseModel, ConfigDict, Field

from newsmentions.adapter import adapt_document
from newsmentions.article import Article
from newsmentions.document import EnrichmentDocument
from newsmentions.logging import setup_logging
from newsmentions.mention import Mention
from newsmentions.storage.interfaces import (
    ArticleStorageInterface,
    MentionStorageInterface,
)

logger = setup_logging(__name__)

RecordType = Literal["article", "mention"]


class UpsertOutcome(BaseModel):
    """Outcome of one upsert.

    Attributes:
        record_type: Which collection the record belongs to.
        record_id: Id of the article or mention.
        ok: Whether the store accepted the write.
        error: Description of the failure when ``ok`` is False.
    """

    model_config = {"frozen": True}

    record_type: RecordType
    record_id: str
    ok: bool
    error: str | None = None


class IngestionResult(BaseModel):
    """Result of ingesting one batch of enrichment documents.

    Attributes:
        documents_received: Entries in the batch, including absent ones.
        documents_skipped: Absent documents plus those that adapted to nothing.
        documents_adapted: Documents that produced an article and mentions.
        articles_written: Article upserts that succeeded.
        mentions_written: Mention upserts that succeeded.
        failures: Outcomes of the upserts that failed.
    """

    model_config = {"frozen": True}

    documents_received: int = 0
    documents_skipped: int = 0
    documents_adapted: int = 0
    articles_written: int = 0
    mentions_written: int = 0
    failures: tuple[UpsertOutcome, ...] = ()

    @property
    def ok(self) -> bool:
        return not self.failures


class IngestionEngine(BaseModel):
    """Applies enrichment documents to storage with idempotent upserts.

    Articles are keyed by the source document id and mentions by
    ``make_mention_id(text, article_id)``, so ingesting the same document
    again refreshes the stored records in place.

    Attributes:
        article_storage: Persistence backend for articles.
        mention_storage: Persistence backend for mentions.
        max_concurrency: Upper bound on upserts in flight at once.
    """

    model_config = ConfigDict(arbitrary_types_allowed=True)

    article_storage: ArticleStorageInterface
    mention_storage: MentionStorageInterface
    max_concurrency: int = Field(default=16, ge=1)

    async def ingest_documents(
        self,
        docs: Iterable[EnrichmentDocument | Mapping[str, Any] | None],
    ) -> IngestionResult:
        """Adapt and persist a batch of enrichment documents.

        Args:
            docs: Raw documents in the enrichment service's JSON layout.
                ``None`` entries and documents that adapt to nothing are
                skipped silently.

        Returns:
            An IngestionResult with counts and every failed upsert.
        """
        received = 0
        skipped = 0
        adapted = 0
        articles: dict[str, Article] = {}
        mentions: dict[str, Mention] = {}

        for doc in docs:
            received += 1
            if doc is None:
                skipped += 1
                continue
            result = adapt_document(doc)
            if result is None:
                skipped += 1
                continue
            adapted += 1
            articles[result.article.id] = result.article
            for mention in result.mentions:
                mentions[mention.id] = mention

        semaphore = asyncio.Semaphore(self.max_concurrency)

        async def limited(write: Awaitable[str]) -> str:
            async with semaphore:
                return await write

        pending: list[tuple[RecordType, str]] = []
        writes: list[Awaitable[str]] = []
        for article in articles.values():
            pending.append(("article", article.id))
            writes.append(limited(self.article_storage.upsert(article)))
        for mention in mentions.values():
            pending.append(("mention", mention.id))
            writes.append(limited(self.mention_storage.upsert(mention)))

        results = await asyncio.gather(*writes, return_exceptions=True)
        outcomes = [self._outcome(record_type, record_id, res) for (record_type, record_id), res in zip(pending, results)]
        failures = tuple(outcome for outcome in outcomes if not outcome.ok)

        ingestion = IngestionResult(
            documents_received=received,
            documents_skipped=skipped,
            documents_adapted=adapted,
            articles_written=sum(1 for o in outcomes if o.ok and o.record_type == "article"),
            mentions_written=sum(1 for o in outcomes if o.ok and o.record_type == "mention"),
            failures=failures,
        )
        logger.info(
            f"ingested {ingestion.documents_adapted}/{ingestion.documents_received} documents: "
            f"{ingestion.articles_written} articles, {ingestion.mentions_written} mentions, {len(failures)} failures",
            pprint=False,
        )
        return ingestion

    @staticmethod
    def _outcome(record_type: RecordType, record_id: str, result: str | BaseException) -> UpsertOutcome:
        if isinstance(result, BaseException):
            logger.error(f"{record_type} upsert failed for {record_id!r}: {result!r}", pprint=False)
            return UpsertOutcome(record_type=record_type, record_id=record_id, ok=False, error=repr(result))
        return UpsertOutcome(record_type=record_type, record_id=record_id, ok=True)
