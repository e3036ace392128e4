"""End-to-end tests for MentionService.

Drives ingestion, queries and retention through one service over both the
in-memory store and a SQLite file store.
"""

import pytest

from newsmentions.clock import Clock
from newsmentions.config import NewsMentionsConfig
from newsmentions.service import MentionService
from newsmentions.storage.factory import create_memory_store, create_store

from tests.conftest import NOW, days_ago, epoch_millis, epoch_seconds, make_doc


def _docs() -> list[dict]:
    return [
        make_doc("doc-1", timestamp=epoch_seconds(days_ago(1)), entities=[("IBM", 3, 0.5), ("Watson", 2, 0.2)]),
        make_doc("doc-2", timestamp=epoch_seconds(days_ago(2)), entities=[("ibm", 5, -0.5), ("X", 10, 0.0)]),
        make_doc("doc-3", timestamp=epoch_seconds(days_ago(40)), entities=[("IBM", 7, 0.9)]),
        None,
    ]


@pytest.fixture(params=["memory", "sqlite"])
def service(request, tmp_path):
    """A service over each kind of store, with the clock frozen at NOW."""
    clock = Clock(now=NOW)
    if request.param == "memory":
        service = MentionService.for_store(create_memory_store(), clock=lambda: clock)
    else:
        config = NewsMentionsConfig(database_url=f"sqlite:///{tmp_path / 'service.db'}")
        service = MentionService.for_store(create_store(config.database_url), config, clock=lambda: clock)
    yield service
    service.close()


class TestMentionService:
    """Tests for the full ingest, query and prune cycle."""

    async def test_full_cycle(self, service: MentionService) -> None:
        """Ingested documents are queryable, and pruning removes the stale ones."""
        ingestion = await service.ingest_documents(_docs())
        assert ingestion.documents_adapted == 3
        assert ingestion.ok

        ranking = await service.aggregate_mentions()
        assert [(r.entity_key, r.total_count) for r in ranking] == [("ibm", 15), ("watson", 2)]

        recent = await service.aggregate_mentions(epoch_millis(days_ago(30)), epoch_millis(NOW))
        assert recent[0].total_count == 8
        assert recent[0].average_sentiment == pytest.approx(0.0)

        assert await service.article_ids_for_entity("IBM") == {"doc-1", "doc-2", "doc-3"}
        assert [a.id for a in await service.articles_for_entity("ibm")] == ["doc-1", "doc-2", "doc-3"]

        dates = await service.get_min_and_max_dates()
        assert dates.min == epoch_millis(days_ago(40))
        assert dates.max == epoch_millis(days_ago(1))

        pruned = await service.prune_older_than(30)
        assert pruned.ok
        assert (pruned.articles_deleted, pruned.mentions_deleted) == (1, 1)
        assert [a.id for a in await service.articles_for_entity("IBM")] == ["doc-1", "doc-2"]

    async def test_reingestion_is_idempotent(self, service: MentionService) -> None:
        """Ingesting the same batch twice does not double any totals."""
        await service.ingest_documents(_docs())
        await service.ingest_documents(_docs())

        ranking = await service.aggregate_mentions()

        assert ranking[0].total_count == 15

    async def test_degenerate_sweep_on_clean_store(self, service: MentionService) -> None:
        """Ingestion already filters single characters, so the sweep finds nothing."""
        await service.ingest_documents(_docs())

        result = await service.prune_degenerate_mentions()

        assert result.ok
        assert result.mentions_deleted == 0

    async def test_config_limits_are_applied(self) -> None:
        """Aggregation and retention defaults come from the config."""
        service = MentionService.for_store(create_memory_store(), NewsMentionsConfig(aggregate_limit=1, retention_days=7))

        assert service.aggregation.default_limit == 1
        assert service.retention.default_days == 7

    async def test_from_config_connects(self) -> None:
        """from_config builds a SQL-backed service from the database URL."""
        service = MentionService.from_config(NewsMentionsConfig(database_url="sqlite://"))
        try:
            assert service.store.engine is not None
            assert await service.get_min_and_max_dates() == await service.lookup.get_min_and_max_dates()
        finally:
            service.close()

    async def test_concurrent_ingest_on_in_memory_sqlite(self) -> None:
        """A large concurrent batch on a single shared SQLite connection is fully written."""
        service = MentionService.from_config(NewsMentionsConfig(database_url="sqlite://"))
        docs = [
            make_doc(
                f"doc-{i}",
                timestamp=epoch_seconds(days_ago(1)),
                entities=[("IBM", 1, 0.5), (f"Entity{i}", 2, 0.0), ("Apple", 1, -0.5)],
            )
            for i in range(300)
        ]
        try:
            result = await service.ingest_documents(docs)

            assert result.ok
            assert (result.articles_written, result.mentions_written) == (300, 900)
            assert await service.store.articles.count() == 300
            assert await service.store.mentions.count() == 900
            assert len(await service.article_ids_for_entity("ibm")) == 300
        finally:
            service.close()
