"""
Tests for per-client fixed-window rate limiting
"""

import pytest
from fastapi import HTTPException
from starlette.requests import Request

from shipcalc.core.config import settings
from shipcalc.core.rate_limit import (
    InMemoryRateLimiter,
    RateLimitRule,
    bucket_rules,
    check_rate_limit,
    client_id_from_request,
)


class FakeClock:
    def __init__(self, now=1000.0):
        self.now = now

    def __call__(self):
        return self.now


def _limiter(clock, limit=2, window=60):
    rules = {
        "default": RateLimitRule(limit=limit, window=window),
        "lead": RateLimitRule(limit=1, window=300),
    }
    return InMemoryRateLimiter(rules=rules, clock=clock)


def _request(headers=None, client=("10.0.0.5", 4321)):
    scope = {
        "type": "http",
        "method": "GET",
        "path": "/",
        "headers": [(k.lower().encode(), v.encode()) for k, v in (headers or {}).items()],
        "client": client,
    }
    return Request(scope)


@pytest.mark.rate_limit
class TestRateLimitConfig:

    def test_default_buckets(self):
        rules = bucket_rules()
        assert (rules["default"].limit, rules["default"].window) == (settings.RATE_LIMIT, settings.RATE_LIMIT_WINDOW)
        assert (rules["calculation"].limit, rules["calculation"].window) == (100, 60)
        assert (rules["lead"].limit, rules["lead"].window) == (20, 300)
        assert (rules["tolls"].limit, rules["tolls"].window) == (150, 60)
        assert (rules["email"].limit, rules["email"].window) == (20, 300)


@pytest.mark.rate_limit
class TestInMemoryRateLimiter:

    @pytest.mark.asyncio
    async def test_limit_within_window(self):
        limiter = _limiter(FakeClock())

        first = await limiter.check_and_record("a", "default")
        second = await limiter.check_and_record("a", "default")
        third = await limiter.check_and_record("a", "default")

        assert (first.allowed, first.remaining) == (True, 1)
        assert (second.allowed, second.remaining) == (True, 0)
        assert third.allowed is False
        assert third.reset_at == 1060.0

    @pytest.mark.asyncio
    async def test_window_resets(self):
        clock = FakeClock()
        limiter = _limiter(clock)
        for _ in range(3):
            await limiter.check_and_record("a", "default")

        clock.now += 60
        assert (await limiter.check_and_record("a", "default")).allowed is True

    @pytest.mark.asyncio
    async def test_buckets_and_clients_are_separate(self):
        limiter = _limiter(FakeClock())

        assert (await limiter.check_and_record("a", "lead")).allowed is True
        assert (await limiter.check_and_record("a", "lead")).allowed is False
        assert (await limiter.check_and_record("b", "lead")).allowed is True
        assert (await limiter.check_and_record("a", "default")).allowed is True

    @pytest.mark.asyncio
    async def test_unknown_bucket_uses_default(self):
        limiter = _limiter(FakeClock(), limit=1)

        assert (await limiter.check_and_record("a", "mystery")).allowed is True
        assert (await limiter.check_and_record("a", "mystery")).allowed is False

    @pytest.mark.asyncio
    async def test_rejection_raises_429_with_retry_after(self):
        clock = FakeClock()
        limiter = _limiter(clock)
        await check_rate_limit(limiter, "a", "lead")

        with pytest.raises(HTTPException) as exc:
            await check_rate_limit(limiter, "a", "lead")

        assert exc.value.status_code == 429
        assert int(exc.value.headers["Retry-After"]) >= 1

    @pytest.mark.asyncio
    async def test_retry_after_follows_limiter_clock(self):
        clock = FakeClock()
        limiter = _limiter(clock)
        await check_rate_limit(limiter, "a", "lead")
        clock.now += 100

        denied = await limiter.check_and_record("a", "lead")
        assert denied.retry_after == 200

        with pytest.raises(HTTPException) as exc:
            await check_rate_limit(limiter, "a", "lead")
        assert exc.value.headers["Retry-After"] == "200"

    @pytest.mark.asyncio
    async def test_expired_windows_are_pruned(self):
        clock = FakeClock()
        limiter = _limiter(clock)
        await limiter.check_and_record("a", "default")
        await limiter.check_and_record("b", "lead")

        clock.now += 60
        await limiter.check_and_record("c", "default")

        assert set(limiter._windows) == {("lead", "b"), ("default", "c")}

    @pytest.mark.asyncio
    async def test_broken_limiter_allows_request(self):
        class Broken:
            async def check_and_record(self, client_id, bucket):
                raise ConnectionError("redis down")

        await check_rate_limit(Broken(), "a", "lead")


@pytest.mark.rate_limit
class TestClientId:

    def test_forwarded_for_first_hop(self):
        req = _request({"X-Forwarded-For": "203.0.113.9, 10.0.0.1"})
        assert client_id_from_request(req) == "203.0.113.9"

    def test_real_ip(self):
        assert client_id_from_request(_request({"X-Real-IP": "198.51.100.4"})) == "198.51.100.4"

    def test_peer_address(self):
        assert client_id_from_request(_request()) == "10.0.0.5"

    def test_no_peer(self):
        assert client_id_from_request(_request(client=None)) == "unknown"
