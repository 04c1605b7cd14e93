"""
News service: enrichment plus persistence behind one facade.

``build_news_service`` is the composition root shared by the API server and
the seed command.
"""

import logging
from datetime import datetime, timezone
from typing import List, Optional

import httpx
import redis.asyncio as redis
from langchain_openai import ChatOpenAI

from ..core.config import Settings
from ..models.schemas import EnrichedRecord, RawItem
from .context import build_context_service
from .document_store import RedisNewsStore
from .enrichment import NewsEnricher
from .local_store import LocalNewsStore
from .media import build_media_service
from .storage import PersistenceGateway
from .text_generation import build_text_generator

logger = logging.getLogger(__name__)

SAMPLE_TITLE = "South Africa Embraces Solar and Battery Storage in Landmark Energy Shift"
SAMPLE_BODY = (
    "The South African government has unveiled a comprehensive renewable energy investment strategy "
    "worth $15 billion over the next five years. The plan focuses on solar and wind power projects "
    "across the country, aiming to reduce carbon emissions by 40% and create over 50,000 jobs in the "
    "green energy sector. Key projects include the construction of solar farms in the Northern Cape "
    "and wind energy facilities along the Western Cape coastline. Energy Minister Gwede Mantashe "
    "announced that the initiative will prioritize local content and community participation, "
    "ensuring that benefits reach rural and underserved areas. The investment is expected to position "
    "South Africa as a leader in renewable energy on the African continent, with potential for "
    "exporting clean energy to neighboring countries. International partners including the World "
    "Bank and European Investment Bank have committed to supporting the initiative through "
    "low-interest loans and technical assistance."
)
SAMPLE_SOURCE_URL = (
    "https://www.satorinews.com/articles/2024-12-27/"
    "south-africa-embraces-solar-and-battery-storage-in-landmark-energy-shift-533811"
)
SAMPLE_PUBLISHER = "African Energy News"


class NewsService:
    """Caller-facing operations over enriched news."""

    def __init__(self, enricher: NewsEnricher, gateway: PersistenceGateway):
        self.enricher = enricher
        self.gateway = gateway

    async def process(self, raw: RawItem) -> EnrichedRecord:
        """Enrich a raw item and persist the result."""
        record = await self.enricher.enrich(raw)
        await self.gateway.upsert(record)
        logger.info(f"✅ News article processed and stored: {record.id}")
        return record

    async def get_by_id(self, news_id: str) -> EnrichedRecord:
        return await self.gateway.get_by_id(news_id)

    async def get_all(self) -> List[EnrichedRecord]:
        return await self.gateway.get_all()

    async def seed_sample_data(self) -> Optional[EnrichedRecord]:
        """Process the demo article. Returns None instead of raising."""
        sample = RawItem(
            title=SAMPLE_TITLE,
            body=SAMPLE_BODY,
            source_url=SAMPLE_SOURCE_URL,
            publisher=SAMPLE_PUBLISHER,
            published_at=datetime.now(timezone.utc),
        )
        try:
            record = await self.process(sample)
        except Exception as e:
            logger.error(f"Failed to seed sample data: {e}")
            return None
        logger.info("Sample data seeded successfully")
        return record


def build_news_service(
    settings: Settings,
    http_client: httpx.AsyncClient,
    redis_client: Optional[redis.Redis] = None,
    llm: Optional[ChatOpenAI] = None,
) -> NewsService:
    """Wire provider chains, enricher and storage from settings."""
    text_generator = build_text_generator(settings, llm)
    enricher = NewsEnricher(
        text=text_generator,
        media=build_media_service(settings, http_client),
        context=build_context_service(settings, http_client, text_generator),
    )

    local = LocalNewsStore(settings.storage_file)
    local.initialize()
    remote = RedisNewsStore(redis_client, settings.redis_key_prefix) if redis_client is not None else None
    gateway = PersistenceGateway(local, remote, settings.storage_backend_policy)

    return NewsService(enricher, gateway)
