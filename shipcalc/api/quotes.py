"""Pricing quote endpoints with Redis caching and incremental sessions"""
import logging
from fastapi import APIRouter, Depends, HTTPException

from shipcalc.schemas.pricing_config import PricingConfig
from shipcalc.schemas.quote import QuoteRequest, QuoteResponse, QuoteSelections, SessionResponse, SignalUpdate
from shipcalc.services.config_resolver import get_pricing_config
from shipcalc.services.pricing import calculate_price
from shipcalc.services.session import PricingSession, SessionStore, get_session_store
from shipcalc.core.exceptions import QuoteValidationError, SessionNotFoundError, StaleCalculationError
from shipcalc.core.metrics import cache_hits, cache_misses
from shipcalc.core.rate_limit import rate_limited
from shipcalc.core.redis import get_redis
from shipcalc.core.config import settings
from shipcalc.utils.hashing import payload_hash

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/quotes", tags=["quotes"])


def _generate_cache_key(req: QuoteRequest, config: PricingConfig) -> str:
    params = {"config_version": config.version, "request": req.model_dump(mode="json")}
    return f"price:{payload_hash(params)}"


def get_sessions() -> SessionStore:
    return get_session_store(get_redis())


def _session_response(session: PricingSession) -> SessionResponse:
    return SessionResponse(
        session_id=session.session_id,
        token=session.token,
        price_breakdown=session.breakdown(),
    )


@router.post("/calc", response_model=QuoteResponse)
async def calc_quote(
    req: QuoteRequest,
    config: PricingConfig = Depends(get_pricing_config),
    client_id: str = Depends(rate_limited("calculation")),
):
    cache_key = _generate_cache_key(req, config)
    redis = get_redis()

    if redis is not None:
        try:
            cached = await redis.get(cache_key)
            if cached:
                cache_hits.labels(cache_key="price").inc()
                return QuoteResponse.model_validate_json(cached)
            cache_misses.labels(cache_key="price").inc()
        except Exception as e:
            logger.warning(f"Cache retrieval failed: {e}")

    try:
        result = await calculate_price(req, config)
    except QuoteValidationError as e:
        raise HTTPException(status_code=400, detail=e.message)

    if redis is not None:
        try:
            await redis.set(cache_key, result.model_dump_json(), ex=settings.PRICE_CACHE_TTL)
        except Exception as e:
            logger.warning(f"Cache write failed: {e}")

    return result


@router.post("/sessions", response_model=SessionResponse)
async def start_session(
    selections: QuoteSelections,
    config: PricingConfig = Depends(get_pricing_config),
    store: SessionStore = Depends(get_sessions),
    client_id: str = Depends(rate_limited("calculation")),
):
    try:
        session = PricingSession.start(selections, config)
    except QuoteValidationError as e:
        raise HTTPException(status_code=400, detail=e.message)

    await store.save(session)
    logger.info(f"Pricing session {session.session_id} started (config {config.version})")
    return _session_response(session)


@router.put("/sessions/{session_id}", response_model=SessionResponse)
async def restart_session(
    session_id: str,
    selections: QuoteSelections,
    store: SessionStore = Depends(get_sessions),
    client_id: str = Depends(rate_limited("calculation")),
):
    """New inputs for an existing session; signals for the old token are rejected."""
    try:
        session = await store.restart(session_id, selections)
    except SessionNotFoundError:
        raise HTTPException(status_code=404, detail="Pricing session not found")
    except QuoteValidationError as e:
        raise HTTPException(status_code=400, detail=e.message)
    return _session_response(session)


@router.post("/sessions/{session_id}/signals", response_model=SessionResponse)
async def apply_signal(
    session_id: str,
    update: SignalUpdate,
    store: SessionStore = Depends(get_sessions),
    client_id: str = Depends(rate_limited("default")),
):
    try:
        session = await store.apply(session_id, update)
    except SessionNotFoundError:
        raise HTTPException(status_code=404, detail="Pricing session not found")
    except StaleCalculationError as e:
        logger.info(f"Discarding {update.kind} signal for session {session_id}: {e}")
        raise HTTPException(status_code=409, detail=str(e))
    return _session_response(session)
