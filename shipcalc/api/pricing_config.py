from typing import List

from fastapi import APIRouter, Depends

from shipcalc.core.redis import get_redis
from shipcalc.schemas.pricing_config import PricingConfig, PricingConfigHistoryEntry
from shipcalc.services.config_resolver import PricingConfigResolver, get_pricing_config

router = APIRouter(prefix="/pricing-config", tags=["pricing-config"])


@router.get("", response_model=PricingConfig, response_model_by_alias=True)
async def current_config(config: PricingConfig = Depends(get_pricing_config)):
    return config


@router.get("/history", response_model=List[PricingConfigHistoryEntry], response_model_by_alias=True)
async def config_history():
    """Stored versions, newest first."""
    return await PricingConfigResolver(get_redis()).history()
