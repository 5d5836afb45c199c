from fastapi import APIRouter, Depends

from shipcalc.core.rate_limit import rate_limited
from shipcalc.schemas.pricing_config import PricingConfig
from shipcalc.schemas.toll import TollEstimate, TollEstimateRequest
from shipcalc.services.config_resolver import get_pricing_config
from shipcalc.services.tolls import estimate_tolls

router = APIRouter(prefix="/tolls", tags=["tolls"])


@router.post("/estimate", response_model=TollEstimate)
async def estimate(
    req: TollEstimateRequest,
    config: PricingConfig = Depends(get_pricing_config),
    client_id: str = Depends(rate_limited("tolls")),
):
    return estimate_tolls(req.distance_miles, config, req.route_states, req.route_text)
