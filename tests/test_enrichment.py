from unittest.mock import AsyncMock

import pytest

from news_pipeline.exceptions import ProcessingError
from news_pipeline.services import offline
from news_pipeline.services.context import build_context_service
from news_pipeline.services.enrichment import NewsEnricher, extract_main_topic
from news_pipeline.services.local_store import LocalNewsStore
from news_pipeline.services.media import build_media_service
from news_pipeline.services.news import NewsService
from news_pipeline.services.storage import PersistenceGateway
from news_pipeline.services.text_generation import build_text_generator


def _enricher(settings, client):
    text = build_text_generator(settings)
    return NewsEnricher(
        text=text,
        media=build_media_service(settings, client),
        context=build_context_service(settings, client, text),
    )


@pytest.mark.parametrize("title,body,expected", [
    ("Solar power for Kenya", "Renewable energy plans", "renewable energy"),
    ("Grid upgrade", "South Africa invests", "south africa"),
    ("The Budget Speech", "Ministers react", "Budget"),
    ("The Big Day", "nothing", "news"),
])
def test_extract_main_topic(title, body, expected):
    assert extract_main_topic(title, body) == expected


@pytest.mark.asyncio
async def test_offline_enrichment_of_south_africa_article(settings, offline_client, sample_raw):
    record = await _enricher(settings, offline_client).enrich(sample_raw)

    assert record.title == sample_raw.title
    assert record.body == sample_raw.body
    assert record.source_url == sample_raw.source_url
    assert record.published_at == sample_raw.published_at
    assert record.ingested_at.tzinfo is not None

    assert record.summary == offline.MOCK_SUMMARIES[offline.ENERGY]
    assert record.tags == offline.MOCK_TAGS[offline.ENERGY]
    assert record.relevance_score == pytest.approx(0.85)

    assert record.media.featured_image_url == offline.MOCK_IMAGES["renewable"]
    assert record.media.related_video_url == offline.CANNED_VIDEO_URL
    assert record.media.media_justification == offline.MOCK_JUSTIFICATIONS[offline.ENERGY]

    assert record.context.wikipedia_snippet == offline.MOCK_SNIPPETS["renewable energy"]
    assert record.context.social_sentiment in offline.SENTIMENT_ROTATIONS[offline.ENERGY]
    assert record.context.search_trend in offline.TREND_ROTATIONS[offline.ENERGY]
    assert record.context.geo.formatted_address == "South Africa"


@pytest.mark.asyncio
async def test_each_enrichment_gets_a_fresh_id(settings, offline_client, sample_raw):
    enricher = _enricher(settings, offline_client)

    first = await enricher.enrich(sample_raw)
    second = await enricher.enrich(sample_raw)

    assert first.id != second.id


@pytest.mark.asyncio
async def test_unexpected_failure_aborts_without_persisting(settings, offline_client, sample_raw, tmp_path):
    enricher = _enricher(settings, offline_client)
    enricher.media.get_featured_image = AsyncMock(side_effect=RuntimeError("bug"))

    local = LocalNewsStore(tmp_path / "news.json")
    local.initialize()
    service = NewsService(enricher, PersistenceGateway(local))

    with pytest.raises(ProcessingError) as exc_info:
        await service.process(sample_raw)

    assert str(exc_info.value) == "Failed to process news article"
    assert isinstance(exc_info.value.__cause__, RuntimeError)
    assert await service.get_all() == []


@pytest.mark.asyncio
async def test_seed_sample_data_returns_none_on_failure(settings, offline_client, tmp_path):
    enricher = _enricher(settings, offline_client)
    enricher.text.generate_summary = AsyncMock(side_effect=RuntimeError("bug"))
    local = LocalNewsStore(tmp_path / "news.json")
    local.initialize()

    assert await NewsService(enricher, PersistenceGateway(local)).seed_sample_data() is None
