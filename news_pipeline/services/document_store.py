"""
Redis document store for enriched news records.

Records are stored as JSON under ``<prefix>:<id>``. A sorted set
``<prefix>:index`` scores each id by its first-write time, which gives
newest-first listing and keeps the creation time when a record is replaced.
"""

import logging
import time
from typing import List, Optional

import redis.asyncio as redis
from redis.exceptions import RedisError

from ..core.config import Settings
from ..models.schemas import EnrichedRecord

logger = logging.getLogger(__name__)


def create_redis_client(settings: Settings) -> Optional[redis.Redis]:
    """Build the Redis client, or None when no REDIS_URL is configured."""
    if not settings.redis_url.strip():
        logger.warning("REDIS_URL not set. Using file-based storage only.")
        return None
    return redis.from_url(
        settings.redis_url,
        decode_responses=True,
        socket_timeout=settings.redis_socket_timeout_seconds,
        socket_connect_timeout=settings.redis_socket_timeout_seconds,
    )


class RedisNewsStore:
    """Redis-based document store for complete enriched records."""

    def __init__(self, client: redis.Redis, key_prefix: str = "news"):
        self.client = client
        self.key_prefix = key_prefix

    def _record_key(self, news_id: str) -> str:
        return f"{self.key_prefix}:{news_id}"

    @property
    def index_key(self) -> str:
        return f"{self.key_prefix}:index"

    async def is_alive(self) -> bool:
        """Liveness check run before every storage operation."""
        try:
            return bool(await self.client.ping())
        except (RedisError, OSError) as e:
            logger.debug(f"Redis liveness check failed: {e}")
            return False

    async def upsert(self, record: EnrichedRecord) -> None:
        """Insert or fully replace a record, keyed by its id."""
        async with self.client.pipeline(transaction=True) as pipe:
            pipe.set(self._record_key(record.id), record.model_dump_json())
            pipe.zadd(self.index_key, {record.id: time.time()}, nx=True)
            await pipe.execute()
        logger.info(f"📄 Stored news record in Redis: {self._record_key(record.id)}")

    async def get(self, news_id: str) -> Optional[EnrichedRecord]:
        raw = await self.client.get(self._record_key(news_id))
        if raw is None:
            return None
        return EnrichedRecord.model_validate_json(raw)

    async def all(self) -> List[EnrichedRecord]:
        """All records, most recently created first."""
        ids = await self.client.zrevrange(self.index_key, 0, -1)
        if not ids:
            return []
        payloads = await self.client.mget([self._record_key(news_id) for news_id in ids])
        return [EnrichedRecord.model_validate_json(raw) for raw in payloads if raw is not None]

    async def close(self) -> None:
        await self.client.aclose()
