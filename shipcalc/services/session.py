"""Incremental pricing sessions.

Signals (weather, traffic, fuel, auto shows, tolls) resolve independently
and in any order. Each one replaces the latest value of its own factor and
the whole breakdown is recomputed; restarting a session with new inputs
bumps its token so results still in flight for the old inputs are rejected.
"""
import asyncio
import logging
import time
import uuid
from typing import Callable, Dict, Optional, Protocol, Tuple

from pydantic import BaseModel
from redis.asyncio import Redis

from shipcalc.core.config import settings
from shipcalc.core.enums import SignalKind
from shipcalc.core.exceptions import SessionNotFoundError, StaleCalculationError
from shipcalc.core.metrics import stale_signal_updates
from shipcalc.schemas.pricing_config import PricingConfig
from shipcalc.schemas.quote import PriceBreakdown, QuoteSelections, RouteSignal, SignalUpdate
from shipcalc.schemas.toll import TollEstimate
from shipcalc.services import signals
from shipcalc.services.pricing import FactorSet, compose_price, initial_factors, validate_selections
from shipcalc.services.tolls import estimate_tolls

logger = logging.getLogger(__name__)


class PricingSession(BaseModel):
    session_id: str
    token: int
    selections: QuoteSelections
    config: PricingConfig
    factors: FactorSet
    tolls: TollEstimate

    @classmethod
    def start(
        cls,
        selections: QuoteSelections,
        config: PricingConfig,
        session_id: Optional[str] = None,
        token: int = 1,
    ) -> "PricingSession":
        validate_selections(selections, config)
        return cls(
            session_id=session_id or uuid.uuid4().hex,
            token=token,
            selections=selections,
            config=config,
            factors=initial_factors(selections, config),
            tolls=estimate_tolls(
                selections.distance_miles, config, selections.route_states, selections.route_text
            ),
        )

    def restart(self, selections: QuoteSelections) -> "PricingSession":
        return PricingSession.start(selections, self.config, self.session_id, self.token + 1)

    def apply(self, update: SignalUpdate) -> PriceBreakdown:
        if update.token != self.token:
            stale_signal_updates.inc()
            raise StaleCalculationError(expected=self.token, received=update.token)

        if update.kind == SignalKind.WEATHER:
            self.factors.weather = signals.weather_multiplier(update.weather)
        elif update.kind == SignalKind.TRAFFIC:
            self.factors.traffic = signals.traffic_multiplier(update.traffic, self.config)
        elif update.kind == SignalKind.FUEL:
            self.factors.fuel = signals.fuel_multiplier(update.fuel)
        elif update.kind == SignalKind.AUTO_SHOW:
            self.factors.auto_show = signals.auto_show_multiplier(update.auto_show, self.config)
        elif update.kind == SignalKind.TOLLS:
            # a new estimate replaces the previous one outright
            self.tolls = self._estimate_tolls(update.route)

        return self.breakdown()

    def _estimate_tolls(self, route: Optional[RouteSignal]) -> TollEstimate:
        if route is None:
            return TollEstimate()
        return estimate_tolls(
            self.selections.distance_miles, self.config, route.route_states, route.route_text
        )

    def breakdown(self) -> PriceBreakdown:
        return compose_price(self.selections, self.factors, self.tolls, self.config)


class SessionStore(Protocol):
    async def save(self, session: PricingSession) -> None: ...

    async def load(self, session_id: str) -> PricingSession: ...

    async def apply(self, session_id: str, update: SignalUpdate) -> PricingSession: ...

    async def restart(self, session_id: str, selections: QuoteSelections) -> PricingSession: ...


class InMemorySessionStore:
    """Process-local fallback; entries expire like the Redis keys do."""

    def __init__(self, ttl: Optional[int] = None, clock: Callable[[], float] = time.monotonic):
        self.ttl = ttl or settings.PRICING_SESSION_TTL
        self.clock = clock
        # session id -> (expires at, session)
        self._sessions: Dict[str, Tuple[float, PricingSession]] = {}
        self._lock = asyncio.Lock()

    def _store(self, session: PricingSession) -> None:
        now = self.clock()
        expired = [sid for sid, (expires_at, _) in self._sessions.items() if expires_at <= now]
        for sid in expired:
            del self._sessions[sid]
        self._sessions[session.session_id] = (now + self.ttl, session.model_copy(deep=True))

    async def save(self, session: PricingSession) -> None:
        async with self._lock:
            self._store(session)

    async def load(self, session_id: str) -> PricingSession:
        entry = self._sessions.get(session_id)
        if entry is None or entry[0] <= self.clock():
            self._sessions.pop(session_id, None)
            raise SessionNotFoundError(session_id)
        return entry[1].model_copy(deep=True)

    async def apply(self, session_id: str, update: SignalUpdate) -> PricingSession:
        async with self._lock:
            session = await self.load(session_id)
            session.apply(update)
            self._store(session)
            return session

    async def restart(self, session_id: str, selections: QuoteSelections) -> PricingSession:
        async with self._lock:
            session = (await self.load(session_id)).restart(selections)
            self._store(session)
            return session

    def __len__(self) -> int:
        return len(self._sessions)


class RedisSessionStore:
    """Sessions as JSON values; updates run in WATCH/MULTI transactions."""

    def __init__(self, redis: Redis, prefix: str = "pricing-session:"):
        self.redis = redis
        self.prefix = prefix

    def _key(self, session_id: str) -> str:
        return f"{self.prefix}{session_id}"

    async def save(self, session: PricingSession) -> None:
        await self.redis.set(
            self._key(session.session_id),
            session.model_dump_json(),
            ex=settings.PRICING_SESSION_TTL,
        )

    async def load(self, session_id: str) -> PricingSession:
        raw = await self.redis.get(self._key(session_id))
        if not raw:
            raise SessionNotFoundError(session_id)
        return PricingSession.model_validate_json(raw)

    async def _update(self, session_id: str, mutate) -> PricingSession:
        key = self._key(session_id)

        async def run(pipe):
            raw = await pipe.get(key)
            if not raw:
                raise SessionNotFoundError(session_id)
            session = mutate(PricingSession.model_validate_json(raw))
            pipe.multi()
            pipe.set(key, session.model_dump_json(), ex=settings.PRICING_SESSION_TTL)
            return session

        return await self.redis.transaction(run, key, value_from_callable=True)

    async def apply(self, session_id: str, update: SignalUpdate) -> PricingSession:
        def mutate(session: PricingSession) -> PricingSession:
            session.apply(update)
            return session

        return await self._update(session_id, mutate)

    async def restart(self, session_id: str, selections: QuoteSelections) -> PricingSession:
        return await self._update(session_id, lambda session: session.restart(selections))


_memory_store = InMemorySessionStore()


def get_session_store(redis: Optional[Redis]) -> SessionStore:
    if redis is None:
        return _memory_store
    return RedisSessionStore(redis)
