import logging
from typing import Optional
from redis.asyncio import Redis
from shipcalc.core.config import settings

logger = logging.getLogger(__name__)

redis: Optional[Redis] = None

async def init_redis() -> Redis:
    global redis
    client = Redis.from_url(settings.REDIS_URL, decode_responses=True)
    try:
        await client.ping()
    except Exception as e:
        logger.error(f"Failed to connect to Redis at {settings.REDIS_URL}: {e}")
        await client.aclose()
        raise
    redis = client
    logger.info("Connected to Redis")
    return redis

async def close_redis():
    global redis
    if redis:
        await redis.aclose()
        redis = None

def get_redis() -> Optional[Redis]:
    """Shared client, or None when Redis was never reached.

    Callers fall back to their in-process stores on None.
    """
    return redis
