"""Article records.

An article is one news item analysed by the enrichment service. Its ``id`` is
supplied by the source document and is never generated here, so re-ingesting
the same document refreshes the existing record instead of creating another.
"""

from datetime import datetime

from pydantic import BaseModel, Field, field_validator


class Article(BaseModel):
    """A stored news article.

    Articles are frozen (immutable) Pydantic models. They are created or
    refreshed only by ingestion and removed only by retention sweeps.

    Attributes:
        id: Identifier from the enrichment document (primary key).
        title: Headline reported by the enrichment service.
        date: Publication time, timezone-aware UTC.
        url: Canonical article URL.
    """

    model_config = {"frozen": True}

    id: str = Field(description="Source document identifier.")
    title: str = Field(default="", description="Article headline.")
    date: datetime = Field(description="Publication time (UTC).")
    url: str = Field(default="", description="Article URL.")

    @field_validator("date")
    @classmethod
    def date_must_be_timezone_aware(cls, value: datetime) -> datetime:
        if value.tzinfo is None or value.utcoffset() is None:
            raise ValueError("Article.date must be timezone-aware")
        return value


class DateRange(BaseModel, frozen=True):
    """Earliest and latest article publication times, in epoch milliseconds.

    Both bounds are ``None`` when no articles are stored.
    """

    min: int | None = None
    max: int | None = None
