"""
Enrichment orchestrator.

Turns one RawItem into one EnrichedRecord:
1. Text: summary, tags and relevance score (concurrently)
2. Media: featured image and related video, searched with the tags
3. Media justification
4. Context: encyclopedic snippet, sentiment, search trend and geo (concurrently)

Every lookup is a fallback chain that always resolves, so a provider outage only
degrades a field. Anything else that goes wrong aborts the whole record.
"""

import asyncio
import logging
import uuid
from datetime import datetime, timezone

from ..exceptions import ProcessingError
from ..models.schemas import Context, EnrichedRecord, Media, RawItem
from .context import ContextService
from .media import MediaService
from .text_generation import TextGenerator

logger = logging.getLogger(__name__)

MEDIA_DESCRIPTOR = "image and video"

# Checked in order against the lower-cased title and body
PRIORITY_TOPICS = [
    "renewable energy",
    "solar power",
    "wind energy",
    "south africa",
    "africa",
    "energy",
    "power",
    "electricity",
    "sustainability",
    "climate change",
]
TOPIC_STOP_WORDS = {"the", "and", "for", "with", "from", "this", "that"}


def extract_main_topic(title: str, body: str) -> str:
    """Pick the encyclopedic lookup topic for an article."""
    text = f"{title} {body}".lower()
    for topic in PRIORITY_TOPICS:
        if topic in text:
            return topic

    title_words = [
        word for word in title.split(" ")
        if len(word) > 3 and word.lower() not in TOPIC_STOP_WORDS
    ]
    return title_words[0] if title_words else "news"


class NewsEnricher:
    """Fans out to the provider chains and merges their results."""

    def __init__(self, text: TextGenerator, media: MediaService, context: ContextService):
        self.text = text
        self.media = media
        self.context = context

    async def enrich(self, raw: RawItem) -> EnrichedRecord:
        """
        Enrich a raw item.

        Raises:
            ProcessingError: on any failure that escaped the provider chains.
                The original exception is chained and logged with its traceback.
        """
        start_time = datetime.now()
        logger.info(f"📥 Processing news article: {raw.title}")

        try:
            summary, tags, relevance_score = await asyncio.gather(
                self.text.generate_summary(raw.title, raw.body),
                self.text.generate_tags(raw.title, raw.body),
                self.text.calculate_relevance_score(raw.title, raw.body),
            )

            featured_image_url, related_video_url = await asyncio.gather(
                self.media.get_featured_image(raw.title, tags),
                self.media.get_related_video(raw.title, tags),
            )

            media_justification = await self.text.generate_media_justification(
                raw.title, raw.body, MEDIA_DESCRIPTOR
            )

            wikipedia_snippet, social_sentiment, search_trend, geo = await asyncio.gather(
                self.context.get_wikipedia_snippet(extract_main_topic(raw.title, raw.body)),
                self.context.get_social_sentiment(raw.title, tags),
                self.context.get_search_trend(raw.title, tags),
                self.context.get_geo_context(raw.title, raw.body),
            )

            record = EnrichedRecord(
                id=str(uuid.uuid4()),
                title=raw.title,
                body=raw.body,
                summary=summary.strip(),
                tags=tags,
                relevance_score=relevance_score,
                source_url=raw.source_url,
                publisher=raw.publisher,
                published_at=raw.published_at,
                ingested_at=datetime.now(timezone.utc),
                media=Media(
                    featured_image_url=featured_image_url,
                    related_video_url=related_video_url,
                    media_justification=media_justification.strip(),
                ),
                context=Context(
                    wikipedia_snippet=wikipedia_snippet,
                    social_sentiment=social_sentiment,
                    search_trend=search_trend,
                    geo=geo,
                ),
            )
        except Exception as e:
            processing_time = (datetime.now() - start_time).total_seconds()
            logger.error(f"💥 Enrichment failed for {raw.title!r} after {processing_time:.2f}s: {e}", exc_info=True)
            raise ProcessingError() from e

        processing_time = (datetime.now() - start_time).total_seconds()
        logger.info(f"Enrichment completed: {record.id} ({len(record.tags)} tags) in {processing_time:.2f}s")
        return record
