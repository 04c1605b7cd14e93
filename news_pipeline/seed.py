"""Seed command: enrich and store the demo article."""
import asyncio
import logging
import sys

import httpx
from dotenv import load_dotenv

from .core.config import get_settings
from .core.logging import setup_logging
from .services.document_store import create_redis_client
from .services.news import build_news_service

logger = logging.getLogger(__name__)


async def seed_data() -> bool:
    settings = get_settings()
    logger.info("🌱 Starting data seeding...")

    async with httpx.AsyncClient(
        headers={"User-Agent": settings.user_agent},
        timeout=settings.provider_timeout_seconds,
    ) as client:
        news_service = build_news_service(settings, client, create_redis_client(settings))
        try:
            record = await news_service.seed_sample_data()
        finally:
            await news_service.gateway.close()

    if record is None:
        logger.error("❌ Failed to seed sample data")
        return False

    logger.info("✅ Sample data seeded successfully!")
    logger.info(f"📰 News ID: {record.id}")
    logger.info(f"🔗 API URL: http://localhost:{settings.port}/api/v1/news/{record.id}")
    logger.info(f"📊 Health Check: http://localhost:{settings.port}/health")
    return True


def main() -> None:
    load_dotenv()
    setup_logging(get_settings().log_level)
    if not asyncio.run(seed_data()):
        sys.exit(1)


if __name__ == "__main__":
    main()
