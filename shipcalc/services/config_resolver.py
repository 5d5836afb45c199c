"""Pricing config resolution with a compiled-in fallback"""
import copy
import json
import logging
from typing import List, Optional

from pydantic import ValidationError
from redis.asyncio import Redis

from shipcalc.core.config import settings
from shipcalc.core.metrics import pricing_config_loads
from shipcalc.core.redis import get_redis
from shipcalc.schemas.pricing_config import (
    DEFAULT_PRICING_CONFIG,
    DEFAULT_PRICING_CONFIG_DOCUMENT,
    PricingConfig,
    PricingConfigHistoryEntry,
)

logger = logging.getLogger(__name__)


def merge_documents(base: dict, override: dict) -> dict:
    merged = copy.deepcopy(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = merge_documents(merged[key], value)
        else:
            merged[key] = value
    return merged


def parse_config(document: dict) -> PricingConfig:
    """Apply defaults once, then validate the complete snapshot."""
    return PricingConfig.model_validate(merge_documents(DEFAULT_PRICING_CONFIG_DOCUMENT, document))


class PricingConfigResolver:
    def __init__(self, redis: Optional[Redis]):
        self.redis = redis

    async def resolve(self) -> PricingConfig:
        if self.redis is None:
            logger.warning("Config store unavailable, using default pricing config")
            pricing_config_loads.labels(source="default").inc()
            return DEFAULT_PRICING_CONFIG

        try:
            raw = await self.redis.get(settings.PRICING_CONFIG_KEY)
        except Exception as e:
            logger.error(f"Error fetching pricing config: {e}")
            pricing_config_loads.labels(source="default").inc()
            return DEFAULT_PRICING_CONFIG

        if not raw:
            logger.warning("No pricing config found in store, using default")
            pricing_config_loads.labels(source="default").inc()
            return DEFAULT_PRICING_CONFIG

        try:
            document = json.loads(raw)
            if not isinstance(document, dict):
                raise ValueError("pricing config must be a JSON object")
            config = parse_config(document)
        except (ValueError, ValidationError) as e:
            logger.error(f"Invalid pricing config in store, using default: {e}")
            pricing_config_loads.labels(source="default").inc()
            return DEFAULT_PRICING_CONFIG

        pricing_config_loads.labels(source="remote").inc()
        logger.debug(f"Loaded pricing config version {config.version}")
        return config

    async def history(self) -> List[PricingConfigHistoryEntry]:
        """Stored history, newest first."""
        if self.redis is None:
            return []
        try:
            raw = await self.redis.get(settings.PRICING_CONFIG_HISTORY_KEY)
            entries = json.loads(raw) if raw else []
        except Exception as e:
            logger.error(f"Error fetching pricing config history: {e}")
            return []

        history = []
        for entry in entries[:settings.PRICING_CONFIG_HISTORY_LIMIT]:
            try:
                entry = dict(entry)
                entry["config"] = parse_config(entry.get("config") or {})
                history.append(PricingConfigHistoryEntry.model_validate(entry))
            except (TypeError, ValueError, ValidationError) as e:
                logger.warning(f"Skipping invalid pricing config history entry: {e}")
        return history


async def get_pricing_config() -> PricingConfig:
    """Route dependency: the config snapshot for one request."""
    return await PricingConfigResolver(get_redis()).resolve()
