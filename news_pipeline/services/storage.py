"""
Persistence gateway: one interface over the Redis document store and the
local file fallback.

Backend choice is made by a Redis liveness check at the start of every
operation, so storage recovers mid-session without a restart. With the
``pinned`` policy the first check result is kept for the process lifetime.
"""

import asyncio
import logging
from typing import List, Optional

from pydantic import ValidationError
from redis.exceptions import RedisError

from ..exceptions import NewsNotFoundError, PersistenceError
from ..models.schemas import EnrichedRecord
from .document_store import RedisNewsStore
from .local_store import LocalNewsStore

logger = logging.getLogger(__name__)

PER_CALL = "per_call"
PINNED = "pinned"

REMOTE_ERRORS = (RedisError, OSError, ValidationError)


class PersistenceGateway:
    """upsert / get_by_id / get_all over whichever backend is active."""

    def __init__(
        self,
        local: LocalNewsStore,
        remote: Optional[RedisNewsStore] = None,
        backend_policy: str = PER_CALL,
    ):
        if backend_policy not in (PER_CALL, PINNED):
            raise ValueError(f"Unknown backend policy: {backend_policy}")
        self.local = local
        self.remote = remote
        self.backend_policy = backend_policy
        self._pinned_remote: Optional[bool] = None
        self._last_remote: Optional[bool] = None

    async def _use_remote(self) -> bool:
        if self.remote is None:
            return False
        if self.backend_policy == PINNED and self._pinned_remote is not None:
            return self._pinned_remote

        alive = await self.remote.is_alive()
        if self.backend_policy == PINNED:
            self._pinned_remote = alive
            logger.info(f"Storage backend pinned to {'redis' if alive else 'local file'}")
        elif alive != self._last_remote:
            logger.info(f"Storage backend is now {'redis' if alive else 'local file'}")
        self._last_remote = alive
        return alive

    async def backend_name(self) -> str:
        return "redis" if await self._use_remote() else "local"

    async def upsert(self, record: EnrichedRecord) -> None:
        if await self._use_remote():
            try:
                await self.remote.upsert(record)
                return
            except REMOTE_ERRORS as e:
                # The enriched record is never dropped over a storage failure
                logger.warning(f"⚠️ Redis upsert failed for {record.id}, writing to local file: {e}")
        await asyncio.to_thread(self.local.upsert, record)

    async def get_by_id(self, news_id: str) -> EnrichedRecord:
        if await self._use_remote():
            try:
                record = await self.remote.get(news_id)
            except REMOTE_ERRORS as e:
                logger.error(f"Redis lookup failed for {news_id}: {e}")
                raise PersistenceError("Failed to fetch news article") from e
        else:
            # Another process may have written the file since we last looked
            await asyncio.to_thread(self.local.reload)
            record = self.local.get(news_id)

        if record is None:
            raise NewsNotFoundError(news_id)
        return record

    async def get_all(self) -> List[EnrichedRecord]:
        if await self._use_remote():
            try:
                return await self.remote.all()
            except REMOTE_ERRORS as e:
                logger.error(f"Redis scan failed: {e}")
                raise PersistenceError("Failed to fetch news articles") from e
        await asyncio.to_thread(self.local.reload)
        return self.local.all()

    async def close(self) -> None:
        if self.remote is not None:
            await self.remote.close()
