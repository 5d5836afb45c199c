"""Lead deduplication by calculation hash.

Each client keeps an ordered list of the hashes it already submitted,
capped at ``LEAD_HASH_CACHE_SIZE``; the oldest entry is evicted first.
"""
import logging
from collections import deque
from typing import Deque, Dict, List, Optional, Protocol

from redis.asyncio import Redis

from shipcalc.core.config import settings

logger = logging.getLogger(__name__)


class HashStore(Protocol):
    async def contains(self, key: str, value: str) -> bool: ...

    async def append(self, key: str, value: str, capacity: int) -> None: ...

    async def items(self, key: str) -> List[str]: ...

    async def clear(self, key: str) -> None: ...


class InMemoryHashStore:
    def __init__(self):
        self._lists: Dict[str, Deque[str]] = {}

    async def contains(self, key: str, value: str) -> bool:
        return value in self._lists.get(key, ())

    async def append(self, key: str, value: str, capacity: int) -> None:
        entries = self._lists.setdefault(key, deque())
        if value in entries:
            return
        entries.append(value)
        while len(entries) > capacity:
            entries.popleft()

    async def items(self, key: str) -> List[str]:
        return list(self._lists.get(key, ()))

    async def clear(self, key: str) -> None:
        self._lists.pop(key, None)


class RedisHashStore:
    def __init__(self, redis: Redis, prefix: str = "lead-hashes:"):
        self.redis = redis
        self.prefix = prefix

    def _key(self, key: str) -> str:
        return f"{self.prefix}{key}"

    async def contains(self, key: str, value: str) -> bool:
        return await self.redis.lpos(self._key(key), value) is not None

    async def append(self, key: str, value: str, capacity: int) -> None:
        if await self.contains(key, value):
            return
        async with self.redis.pipeline(transaction=True) as pipe:
            pipe.rpush(self._key(key), value)
            pipe.ltrim(self._key(key), -capacity, -1)
            await pipe.execute()

    async def items(self, key: str) -> List[str]:
        return list(await self.redis.lrange(self._key(key), 0, -1))

    async def clear(self, key: str) -> None:
        await self.redis.delete(self._key(key))


_memory_store = InMemoryHashStore()


def get_hash_store(redis: Optional[Redis]) -> HashStore:
    if redis is None:
        return _memory_store
    return RedisHashStore(redis)


class LeadDeduplicator:
    def __init__(self, store: HashStore, client_id: str, capacity: Optional[int] = None):
        self.store = store
        self.client_id = client_id
        self.capacity = capacity or settings.LEAD_HASH_CACHE_SIZE

    async def should_submit(self, calculation_hash: str) -> bool:
        return not await self.store.contains(self.client_id, calculation_hash)

    async def record_submitted(self, calculation_hash: str) -> None:
        await self.store.append(self.client_id, calculation_hash, self.capacity)
        logger.debug(f"Recorded calculation hash {calculation_hash} for {self.client_id}")

    async def hashes(self) -> List[str]:
        return await self.store.items(self.client_id)

    async def clear(self) -> None:
        await self.store.clear(self.client_id)
        logger.info(f"Cleared calculation hashes for {self.client_id}")
