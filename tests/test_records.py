"""Tests for the article and mention record models.

This module verifies:
- Mention ids are built as entity text followed by article id
- The same (text, article) pair always yields the same id
- Degenerate text detection
- Records are immutable and require timezone-aware dates
"""

from datetime import datetime

import pytest
from pydantic import ValidationError

from newsmentions.article import Article
from newsmentions.mention import Mention, is_degenerate_text, make_mention_id

from tests.conftest import NOW, make_mention


class TestMentionIdentity:
    """Tests for content-derived mention ids."""

    def test_text_comes_before_article_id(self) -> None:
        """The key is the entity text directly followed by the article id."""
        assert make_mention_id("IBM", "doc-1") == "IBMdoc-1"

    def test_same_pair_same_id(self) -> None:
        """Two mentions of the same text in the same article share an id."""
        first = make_mention("Watson", "doc-9", count=1, sentiment=0.1)
        second = make_mention("Watson", "doc-9", count=7, sentiment=-0.4)
        assert first.id == second.id

    def test_case_is_part_of_identity(self) -> None:
        """Different spellings are stored as different mentions."""
        assert make_mention_id("IBM", "doc-1") != make_mention_id("ibm", "doc-1")

    def test_for_article_sets_id(self) -> None:
        """Mention.for_article derives the id from its text and article."""
        mention = Mention.for_article(text="Apple", article_id="a1", date=NOW, count=2, sentiment=0.3)
        assert mention.id == "Applea1"
        assert mention.article_id == "a1"


class TestDegenerateText:
    """Tests for single-character noise detection."""

    @pytest.mark.parametrize("text", ["", "X", "&"])
    def test_short_text_is_degenerate(self, text: str) -> None:
        """Texts of length zero or one are degenerate."""
        assert is_degenerate_text(text)

    def test_two_characters_are_kept(self) -> None:
        """Two-letter entities such as "EU" are valid."""
        assert not is_degenerate_text("EU")


class TestRecordValidation:
    """Tests for model constraints."""

    def test_mention_rejects_negative_count(self) -> None:
        """Counts are occurrence counts and cannot be negative."""
        with pytest.raises(ValidationError):
            make_mention(count=-1)

    def test_mention_requires_aware_date(self) -> None:
        """Naive datetimes are rejected."""
        with pytest.raises(ValidationError):
            Mention.for_article(text="IBM", article_id="a1", date=datetime(2024, 1, 1))

    def test_article_requires_aware_date(self) -> None:
        """Naive datetimes are rejected for articles too."""
        with pytest.raises(ValidationError):
            Article(id="a1", title="t", date=datetime(2024, 1, 1), url="u")

    def test_records_are_frozen(self) -> None:
        """Records cannot be modified in place."""
        mention = make_mention()
        with pytest.raises(ValidationError):
            mention.count = 10  # type: ignore[misc]

    def test_model_copy_refreshes_fields(self) -> None:
        """model_copy produces an updated record with the same id."""
        mention = make_mention(count=1)
        updated = mention.model_copy(update={"count": 5})
        assert updated.id == mention.id
        assert updated.count == 5
