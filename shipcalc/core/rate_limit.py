"""Fixed-window rate limiting per client and bucket"""
import logging
import math
import time
from typing import Callable, Dict, Optional, Protocol, Tuple

from fastapi import Depends, HTTPException, Request
from pydantic import BaseModel
from redis.asyncio import Redis

from shipcalc.core.config import settings
from shipcalc.core.metrics import rate_limit_exceeded
from shipcalc.core.redis import get_redis

logger = logging.getLogger(__name__)


class RateLimitRule(BaseModel):
    limit: int
    window: int


class RateLimitDecision(BaseModel):
    allowed: bool
    remaining: int
    reset_at: float
    retry_after: int = 0


def bucket_rules() -> Dict[str, RateLimitRule]:
    return {
        "default": RateLimitRule(limit=settings.RATE_LIMIT, window=settings.RATE_LIMIT_WINDOW),
        "calculation": RateLimitRule(
            limit=settings.CALCULATION_RATE_LIMIT, window=settings.CALCULATION_RATE_LIMIT_WINDOW
        ),
        "lead": RateLimitRule(limit=settings.LEAD_RATE_LIMIT, window=settings.LEAD_RATE_LIMIT_WINDOW),
        "tolls": RateLimitRule(limit=settings.TOLLS_RATE_LIMIT, window=settings.TOLLS_RATE_LIMIT_WINDOW),
        "email": RateLimitRule(limit=settings.EMAIL_RATE_LIMIT, window=settings.EMAIL_RATE_LIMIT_WINDOW),
    }


class RateLimiter(Protocol):
    async def check_and_record(self, client_id: str, bucket: str) -> RateLimitDecision: ...


class InMemoryRateLimiter:
    def __init__(
        self,
        rules: Optional[Dict[str, RateLimitRule]] = None,
        clock: Callable[[], float] = time.time,
    ):
        self.rules = rules or bucket_rules()
        self.clock = clock
        # (bucket, client) -> (window start, count)
        self._windows: Dict[Tuple[str, str], Tuple[float, int]] = {}
        self._next_prune = 0.0

    def _rule(self, bucket: str) -> RateLimitRule:
        return self.rules.get(bucket) or self.rules["default"]

    def _prune(self, now: float) -> None:
        """Drop windows that have run out; sweeps at most once per shortest window."""
        if now < self._next_prune:
            return
        expired = [
            key for key, (start, _) in self._windows.items()
            if now - start >= self._rule(key[0]).window
        ]
        for key in expired:
            del self._windows[key]
        self._next_prune = now + min(rule.window for rule in self.rules.values())

    async def check_and_record(self, client_id: str, bucket: str) -> RateLimitDecision:
        rule = self._rule(bucket)
        now = self.clock()
        self._prune(now)
        key = (bucket, client_id)

        start, count = self._windows.get(key, (now, 0))
        if now - start >= rule.window:
            start, count = now, 0

        reset_at = start + rule.window
        if count >= rule.limit:
            return RateLimitDecision(
                allowed=False,
                remaining=0,
                reset_at=reset_at,
                retry_after=max(1, math.ceil(reset_at - now)),
            )

        count += 1
        self._windows[key] = (start, count)
        return RateLimitDecision(allowed=True, remaining=rule.limit - count, reset_at=reset_at)


class RedisRateLimiter:
    def __init__(self, redis: Redis, rules: Optional[Dict[str, RateLimitRule]] = None):
        self.redis = redis
        self.rules = rules or bucket_rules()

    async def check_and_record(self, client_id: str, bucket: str) -> RateLimitDecision:
        rule = self.rules.get(bucket) or self.rules["default"]
        key = f"rl:{bucket}:{client_id}"

        count = await self.redis.incr(key)
        if count == 1:
            await self.redis.expire(key, rule.window)
            ttl = rule.window
        else:
            ttl = await self.redis.ttl(key)
            if ttl < 0:
                # key lost its expiry, start a fresh window
                await self.redis.expire(key, rule.window)
                ttl = rule.window

        reset_at = time.time() + ttl
        return RateLimitDecision(
            allowed=count <= rule.limit,
            remaining=max(0, rule.limit - count),
            reset_at=reset_at,
            retry_after=max(1, ttl),
        )


_memory_limiter = InMemoryRateLimiter()


def get_rate_limiter() -> RateLimiter:
    redis = get_redis()
    if redis is None:
        return _memory_limiter
    return RedisRateLimiter(redis)


def client_id_from_request(request: Request) -> str:
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        first_hop = forwarded.split(",")[0].strip()
        if first_hop:
            return first_hop
    real_ip = request.headers.get("x-real-ip")
    if real_ip:
        return real_ip.strip()
    if request.client is not None:
        return request.client.host
    return "unknown"


async def check_rate_limit(limiter: RateLimiter, client_id: str, bucket: str) -> None:
    try:
        decision = await limiter.check_and_record(client_id, bucket)
    except Exception as e:
        logger.warning(f"Rate limiter unavailable, allowing request: {e}")
        return

    if not decision.allowed:
        rate_limit_exceeded.labels(bucket=bucket).inc()
        logger.info(f"Rate limit exceeded for {client_id} on {bucket}")
        raise HTTPException(
            status_code=429,
            detail="Rate limit exceeded",
            headers={"Retry-After": str(max(1, decision.retry_after))},
        )


def rate_limited(bucket: str):
    """Route dependency enforcing ``bucket``; returns the caller's client id."""

    async def dependency(request: Request, limiter: RateLimiter = Depends(get_rate_limiter)) -> str:
        client_id = client_id_from_request(request)
        await check_rate_limit(limiter, client_id, bucket)
        return client_id

    return dependency
