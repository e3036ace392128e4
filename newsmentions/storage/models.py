"""
SQLModel schemas for database persistence.

Datetimes are stored as naive UTC in plain DATETIME columns; the storage layer
converts at the boundary.
"""

from datetime import datetime

from sqlalchemy import DateTime
from sqlmodel import Field, SQLModel


class ArticleRecord(SQLModel, table=True):
    """One stored article."""

    __tablename__ = "article"

    id: str = Field(primary_key=True, description="Source document identifier")
    title: str = Field(default="")
    date: datetime = Field(sa_type=DateTime(timezone=False), index=True, description="Publication time (UTC)")
    url: str = Field(default="")


class MentionRecord(SQLModel, table=True):
    """One stored entity mention. ``id`` is entity text followed by article id."""

    __tablename__ = "mention"

    id: str = Field(primary_key=True)
    text: str = Field(index=True)
    count: int = Field(default=0)
    sentiment: float = Field(default=0.0)
    date: datetime = Field(sa_type=DateTime(timezone=False), index=True, description="Publication time of the owning article (UTC)")
    article_id: str = Field(index=True, description="Referenced article; not enforced as a foreign key")
