"""Toll cost estimation and regional apportionment"""
import logging
from typing import Iterable, List, Optional

from shipcalc.core.enums import TollRegion
from shipcalc.core.metrics import toll_estimates
from shipcalc.schemas.pricing_config import PricingConfig, TollSettings
from shipcalc.schemas.toll import TollEstimate, TollSegment
from shipcalc.services.regions import classify_route
from shipcalc.utils.money import round_cents

logger = logging.getLogger(__name__)

REGION_SEGMENTS = {
    TollRegion.NORTHEAST: ("Northeast Region Tolls", "(I-95, NJ/NY Turnpikes)"),
    TollRegion.NEW_ENGLAND: ("New England Region Tolls", "(MA Pike, CT Toll Roads)"),
    TollRegion.MID_ATLANTIC: ("Mid-Atlantic Region Tolls", "(MD Tolls, DE System)"),
    TollRegion.GREAT_LAKES_MIDWEST: ("Great Lakes / Midwest Tolls", "(OH Turnpike, I-90, etc.)"),
    TollRegion.SOUTHEAST: ("Southeast Region Tolls", "(SunPass, PeachPass, Palmetto)"),
    TollRegion.TEXAS_SOUTHERN_PLAINS: ("Texas & Southern Plains Tolls", "(TX Toll Roads)"),
    TollRegion.MOUNTAIN_WEST: ("Mountain West Tolls", "(CO/UT/AZ/NM Toll Roads)"),
    TollRegion.GREAT_PLAINS: ("Great Plains Tolls", "(KS/MO Toll Roads)"),
    TollRegion.PACIFIC_COAST: ("Pacific Coast Tolls", "(CA/OR/WA Bridges & Highways)"),
    TollRegion.LOUISIANA: ("Louisiana Region Tolls", "(LA Toll Roads)"),
}

OTHER_REGIONAL_SEGMENT = ("Other Regional Toll Roads", "(Various Local Tolls)")
GENERAL_SEGMENT = ("General Toll Charges", "(Route Tolls)")


def toll_bounds(distance: float, tolls: TollSettings) -> tuple[float, float]:
    lower = max(tolls.min_cost_base, distance * tolls.min_cost_multiplier)
    upper = distance * tolls.max_cost_multiplier
    return lower, upper


def adjusted_toll_rate(regions: Iterable[TollRegion], tolls: TollSettings) -> float:
    rate = tolls.base_toll_rate
    for region in regions:
        rate *= tolls.regional_multipliers.for_region(region)
    return rate


def calculate_toll_cost(distance: float, regions: List[TollRegion], tolls: TollSettings) -> float:
    estimated = distance * adjusted_toll_rate(regions, tolls)

    if distance > 1000:
        estimated *= tolls.distance_discounts.over1000_miles
    if distance > 2000:
        estimated *= tolls.distance_discounts.over2000_miles

    lower, upper = toll_bounds(distance, tolls)
    # upper bound wins on short routes where lower > upper
    return round_cents(min(upper, max(lower, estimated)))


def apportion_segments(total: float, regions: List[TollRegion], tolls: TollSettings) -> List[TollSegment]:
    """Split a total into regional segments.

    Each portion is taken from what is left after the previous regions, in
    TollRegion order, so the order of regions changes the breakdown.
    """
    segments: List[TollSegment] = []
    remaining = total

    for region in TollRegion:
        if region not in regions:
            continue
        cost = round_cents(remaining * tolls.regional_portions.for_region(region))
        name, details = REGION_SEGMENTS[region]
        segments.append(TollSegment(location=name, cost=cost, details=details))
        remaining = round_cents(remaining - cost)

    if remaining > 0:
        name, details = OTHER_REGIONAL_SEGMENT if regions else GENERAL_SEGMENT
        segments.append(TollSegment(location=name, cost=remaining, details=details))

    return segments


def estimate_tolls(
    distance: float,
    config: PricingConfig,
    route_states: Optional[Iterable[str]] = None,
    route_text: Optional[str] = None,
) -> TollEstimate:
    """Best-effort toll estimate for a route.

    Never raises for missing route data: the estimate is then empty.
    """
    regions = classify_route(route_states, route_text)
    if regions is None or distance <= 0:
        logger.info(f"No route data for toll estimate (distance={distance}), using $0")
        toll_estimates.labels(outcome="unavailable").inc()
        return TollEstimate()

    total = calculate_toll_cost(distance, regions, config.tolls)
    segments = apportion_segments(total, regions, config.tolls)

    toll_estimates.labels(outcome="matched" if regions else "unmatched").inc()
    logger.debug(f"Toll estimate {total} over regions {[str(r) for r in regions]}")
    return TollEstimate(total=total, segments=segments, regions=regions)
