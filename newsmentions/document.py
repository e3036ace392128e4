"""Inbound enrichment documents.

The enrichment service returns one document per analysed article::

    {
        "id": "...",
        "timestamp": 1444762800,
        "source": {
            "enriched": {
                "title": "...",
                "url": "...",
                "entities": [
                    {"text": "IBM", "count": 3, "sentiment": {"score": 0.4}},
                ],
            }
        },
    }

Older news-API responses nest the enriched fields one level deeper, under
``source.enriched.url``; both layouts validate to the same model. Unknown
keys are ignored so upstream additions do not break ingestion.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, model_validator


class SentimentScore(BaseModel):
    model_config = ConfigDict(extra="ignore")

    score: float = 0.0


class EnrichedEntity(BaseModel):
    """One entity extracted by the enrichment service."""

    model_config = ConfigDict(extra="ignore")

    text: str
    count: int = Field(default=0, ge=0)
    sentiment: SentimentScore = Field(default_factory=SentimentScore)


class EnrichedContent(BaseModel):
    """The ``enriched`` sub-object: article metadata plus extracted entities."""

    model_config = ConfigDict(extra="ignore")

    title: str = ""
    url: str = ""
    entities: list[EnrichedEntity] = Field(default_factory=list)

    @model_validator(mode="before")
    @classmethod
    def _unwrap_nested_url(cls, data: Any) -> Any:
        if isinstance(data, dict) and isinstance(data.get("url"), dict):
            return data["url"]
        return data


class DocumentSource(BaseModel):
    model_config = ConfigDict(extra="ignore")

    enriched: EnrichedContent | None = None


class EnrichmentDocument(BaseModel):
    """A complete enrichment document as delivered by the ingestion collaborator.

    Attributes:
        id: Identifier of the analysed article; becomes ``Article.id``.
        timestamp: Publication time in epoch seconds.
        source: Wrapper holding the optional enriched sub-object.
    """

    model_config = ConfigDict(extra="ignore")

    id: str
    timestamp: int | float
    source: DocumentSource | None = None

    @property
    def enriched(self) -> EnrichedContent | None:
        return self.source.enriched if self.source is not None else None
