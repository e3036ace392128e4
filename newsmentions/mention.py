"""Entity mention records and their identity rules.

A mention is one named entity as it occurs in one article: the surface text,
how many times it occurred there, and the sentiment the enrichment service
attached to it. Mentions reference their article through ``article_id`` but
do not own it; both collections are owned by the store.

Mention identity is content derived. The same entity text in the same article
always maps to the same id, which is what makes repeated ingestion idempotent.
"""

from datetime import datetime

from pydantic import BaseModel, Field, field_validator

# Texts at or below this length are noise (stray initials, punctuation).
DEGENERATE_TEXT_LENGTH = 1


def make_mention_id(text: str, article_id: str) -> str:
    """Build the storage key for a mention.

    The key is the entity text followed directly by the article id, with no
    separator. Stored data already uses this layout, so the order must not
    change. Note that ("ab", "c1") and ("a", "bc1") collide; entity texts are
    short surface forms and article ids come from a single source, so in
    practice ids stay unique per (text, article) pair.

    Args:
        text: Entity surface form, case preserved.
        article_id: Id of the article the entity occurs in.

    Returns:
        The mention id.
    """
    return text + article_id


def is_degenerate_text(text: str) -> bool:
    """Whether an entity text is too short to keep."""
    return len(text) <= DEGENERATE_TEXT_LENGTH


class Mention(BaseModel):
    """One entity occurrence within one article.

    Attributes:
        id: ``make_mention_id(text, article_id)``.
        text: Entity surface form. Stored as received; queries compare it
            case-insensitively.
        count: Occurrences of the entity within the article.
        sentiment: Sentiment score for the entity, typically in [-1, 1].
        date: Publication time copied from the owning article.
        article_id: Id of the article this mention belongs to.
    """

    model_config = {"frozen": True}

    id: str
    text: str
    count: int = Field(default=0, ge=0)
    sentiment: float = 0.0
    date: datetime
    article_id: str

    @field_validator("date")
    @classmethod
    def date_must_be_timezone_aware(cls, value: datetime) -> datetime:
        if value.tzinfo is None or value.utcoffset() is None:
            raise ValueError("Mention.date must be timezone-aware")
        return value

    @classmethod
    def for_article(
        cls,
        text: str,
        article_id: str,
        date: datetime,
        count: int = 0,
        sentiment: float = 0.0,
    ) -> "Mention":
        """Create a mention whose id is derived from ``text`` and ``article_id``."""
        return cls(
            id=make_mention_id(text, article_id),
            text=text,
            count=count,
            sentiment=sentiment,
            date=date,
            article_id=article_id,
        )


class MentionAggregate(BaseModel, frozen=True):
    """Frequency and sentiment for one entity across a time window.

    Attributes:
        entity_key: Lower-cased entity text shared by the grouped mentions.
        total_count: Sum of ``count`` over the grouped mentions.
        average_sentiment: Unweighted mean of ``sentiment`` over the grouped
            mentions (each mention counts once regardless of its ``count``).
    """

    entity_key: str
    total_count: int
    average_sentiment: float


class MentionGroup(BaseModel, frozen=True):
    """Article ids collected for one stored spelling of an entity text."""

    key: str
    article_ids: tuple[str, ...] = ()
