"""API routes for the news pipeline."""

import logging

import httpx
from fastapi import APIRouter, Depends, Request

from ..core.config import Settings
from ..exceptions import NewsPipelineError
from ..models.schemas import (EnrichedRecord, IngestResponse, NewsIngestRequest,
                              NewsListResponse, RssIngestRequest,
                              RssIngestResponse, RssItemResult,
                              UrlIngestRequest)
from ..services.ingestion import ingest_from_rss, ingest_from_url
from ..services.news import NewsService

logger = logging.getLogger(__name__)

router = APIRouter()


def get_news_service(request: Request) -> NewsService:
    """Get news service dependency."""
    return request.app.state.news_service


def get_http_client(request: Request) -> httpx.AsyncClient:
    """Get the shared outbound HTTP client."""
    return request.app.state.http_client


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


@router.post("/ingest", response_model=IngestResponse, status_code=201)
async def ingest(
    payload: NewsIngestRequest,
    news_service: NewsService = Depends(get_news_service),
):
    """Enrich and store a submitted article."""
    record = await news_service.process(payload.to_raw_item())
    return IngestResponse(message="News article processed successfully", id=record.id, data=record)


@router.post("/ingest/url", response_model=IngestResponse, status_code=201)
async def ingest_url(
    payload: UrlIngestRequest,
    news_service: NewsService = Depends(get_news_service),
    client: httpx.AsyncClient = Depends(get_http_client),
    settings: Settings = Depends(get_app_settings),
):
    """Scrape an article page, then enrich and store it."""
    raw = await ingest_from_url(client, str(payload.url), settings.user_agent)
    record = await news_service.process(raw)
    return IngestResponse(message="News ingested from URL successfully", id=record.id, data=record)


@router.post("/ingest/rss", response_model=RssIngestResponse, status_code=201)
async def ingest_rss(
    payload: RssIngestRequest,
    news_service: NewsService = Depends(get_news_service),
    client: httpx.AsyncClient = Depends(get_http_client),
    settings: Settings = Depends(get_app_settings),
):
    """Enrich the newest items of a feed; one failed item does not stop the rest."""
    items = await ingest_from_rss(client, str(payload.feed_url), payload.limit, settings.user_agent)

    results = []
    for item in items:
        try:
            record = await news_service.process(item)
            results.append(RssItemResult(ok=True, id=record.id, title=record.title))
        except NewsPipelineError as e:
            logger.warning(f"RSS item failed: {item.title}: {e}")
            results.append(RssItemResult(ok=False, error=str(e), title=item.title))

    return RssIngestResponse(message="RSS ingestion completed", count=len(results), results=results)


@router.post("/seed")
async def seed(news_service: NewsService = Depends(get_news_service)):
    """Seed the demo article."""
    record = await news_service.seed_sample_data()
    return {"message": "Sample data seeded successfully", "data": record}


@router.get("/{news_id}", response_model=EnrichedRecord)
async def get_news(news_id: str, news_service: NewsService = Depends(get_news_service)):
    return await news_service.get_by_id(news_id)


@router.get("", response_model=NewsListResponse)
async def list_news(news_service: NewsService = Depends(get_news_service)):
    articles = await news_service.get_all()
    return NewsListResponse(count=len(articles), articles=articles)
