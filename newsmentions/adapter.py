"""Convert enrichment documents into article and mention records.

Adaptation never raises for bad input. A document that is malformed, lacks
the enriched sub-object, or has no usable entities simply produces nothing.
"""

from typing import Any, Mapping

from pydantic import BaseModel, ValidationError

from newsmentions.article import Article
from newsmentions.clock import from_epoch_seconds
from newsmentions.document import EnrichmentDocument
from newsmentions.logging import setup_logging
from newsmentions.mention import Mention, is_degenerate_text

logger = setup_logging(__name__)


class AdaptedDocument(BaseModel):
    """One article and the mentions extracted from it."""

    model_config = {"frozen": True}

    article: Article
    mentions: tuple[Mention, ...]


def parse_document(doc: EnrichmentDocument | Mapping[str, Any]) -> EnrichmentDocument | None:
    """Validate a raw document, returning ``None`` when it is malformed."""
    if isinstance(doc, EnrichmentDocument):
        return doc
    try:
        return EnrichmentDocument.model_validate(doc)
    except ValidationError as exc:
        logger.debug(f"skipping malformed enrichment document: {exc.error_count()} validation error(s)", pprint=False)
        return None


def adapt_document(doc: EnrichmentDocument | Mapping[str, Any]) -> AdaptedDocument | None:
    """Build the article and mentions described by one enrichment document.

    Entities whose text is one character or shorter are dropped. If nothing
    survives that filter the whole document is dropped, so no article is ever
    stored without at least one mention. Every mention inherits the article's
    publication time. When an entity text repeats within a document the last
    occurrence wins, matching what a store upsert of both would leave behind.

    Args:
        doc: A mapping in the enrichment service's JSON layout, or an already
            validated ``EnrichmentDocument``.

    Returns:
        An ``AdaptedDocument``, or ``None`` if the document yields nothing.
    """
    parsed = parse_document(doc)
    if parsed is None:
        return None

    enriched = parsed.enriched
    if enriched is None:
        logger.debug(f"document {parsed.id} has no enriched content", pprint=False)
        return None

    try:
        published = from_epoch_seconds(parsed.timestamp)
    except (OverflowError, OSError, ValueError):
        logger.debug(f"document {parsed.id} has an unusable timestamp: {parsed.timestamp!r}", pprint=False)
        return None

    article = Article(id=parsed.id, title=enriched.title, date=published, url=enriched.url)

    mentions: dict[str, Mention] = {}
    for entity in enriched.entities:
        if is_degenerate_text(entity.text):
            continue
        mention = Mention.for_article(
            text=entity.text,
            article_id=article.id,
            date=published,
            count=entity.count,
            sentiment=entity.sentiment.score,
        )
        mentions[mention.id] = mention

    if not mentions:
        logger.debug(f"document {parsed.id} has no usable entities", pprint=False)
        return None

    return AdaptedDocument(article=article, mentions=tuple(mentions.values()))
