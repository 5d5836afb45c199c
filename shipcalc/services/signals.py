"""Map external provider outcomes to pricing multipliers.

Every function returns the neutral multiplier 1.0 when its signal is
missing, so a failed provider never blocks a price.
"""
import logging
import math
from typing import Iterable, Optional

from shipcalc.core.enums import RouteCategory, TrafficStatus
from shipcalc.core.metrics import degraded_signals
from shipcalc.schemas.pricing_config import PricingConfig
from shipcalc.schemas.quote import AutoShowSignal, FuelSignal, TrafficSignal, WeatherSignal

logger = logging.getLogger(__name__)

NEUTRAL = 1.0

# checked in order, first keyword hit wins
WEATHER_KEYWORDS = (
    (("rain", "drizzle"), 1.05),
    (("snow",), 1.2),
    (("storm", "thunder"), 1.15),
    (("blizzard", "hurricane"), 1.2),
)

# (exclusive lower bound on price change, multiplier), highest first
FUEL_INCREASE_STEPS = ((0.15, 1.25), (0.10, 1.15), (0.05, 1.10))
FUEL_DECREASE_STEPS = ((-0.10, 0.90), (-0.05, 0.95))

POPULAR_ROUTES = (
    ("new york", "los angeles"),
    ("miami", "chicago"),
    ("boston", "washington"),
    ("san francisco", "las vegas"),
    ("seattle", "portland"),
)
REMOTE_AREAS = ("alaska", "hawaii", "montana", "wyoming", "idaho", "north dakota", "south dakota")


def weather_condition_multiplier(condition: str) -> float:
    text = condition.lower()
    for keywords, multiplier in WEATHER_KEYWORDS:
        if any(k in text for k in keywords):
            return multiplier
    return NEUTRAL


def weather_multiplier(signal: Optional[WeatherSignal]) -> float:
    """Worst condition along pickup, midpoint and delivery."""
    conditions = [c for c in (signal.conditions if signal else []) if c]
    if not conditions:
        degraded_signals.labels(factor="weather").inc()
        return NEUTRAL
    return max(weather_condition_multiplier(c) for c in conditions)


def fuel_price_change(current_price: float, historical_price: float) -> Optional[float]:
    if historical_price <= 0:
        return None
    return (current_price - historical_price) / historical_price


def average_price(samples: Iterable[Optional[float]]) -> float:
    valid = [float(s) for s in samples if s is not None and not math.isnan(float(s))]
    if not valid:
        return 0.0
    return sum(valid) / len(valid)


def fuel_change_multiplier(price_change: float) -> float:
    for threshold, multiplier in FUEL_INCREASE_STEPS:
        if price_change > threshold:
            return multiplier
    for threshold, multiplier in FUEL_DECREASE_STEPS:
        if price_change < threshold:
            return multiplier
    return NEUTRAL


def fuel_multiplier(signal: Optional[FuelSignal]) -> float:
    if signal is None:
        degraded_signals.labels(factor="fuel").inc()
        return NEUTRAL

    change = signal.price_change
    if change is None:
        change = fuel_price_change(signal.current_price, signal.historical_price)
    if change is None:
        logger.warning("Fuel signal without a usable historical price, using neutral multiplier")
        degraded_signals.labels(factor="fuel").inc()
        return NEUTRAL
    return fuel_change_multiplier(change)


def traffic_status(congestion_ratio: float, config: PricingConfig) -> TrafficStatus:
    thresholds = config.transport.traffic_thresholds
    if congestion_ratio < thresholds.light_threshold:
        return TrafficStatus.LIGHT
    if congestion_ratio < thresholds.heavy_threshold:
        return TrafficStatus.MODERATE
    return TrafficStatus.HEAVY


def traffic_multiplier(signal: Optional[TrafficSignal], config: PricingConfig) -> float:
    multipliers = config.transport.traffic_multipliers
    if signal is None or signal.duration_seconds <= 0:
        degraded_signals.labels(factor="traffic").inc()
        return NEUTRAL

    ratio = signal.duration_in_traffic_seconds / signal.duration_seconds
    status = traffic_status(ratio, config)
    return {
        TrafficStatus.LIGHT: multipliers.light,
        TrafficStatus.MODERATE: multipliers.moderate,
        TrafficStatus.HEAVY: multipliers.heavy,
    }[status]


def auto_show_multiplier(signal: Optional[AutoShowSignal], config: PricingConfig) -> float:
    if signal is None:
        degraded_signals.labels(factor="auto_show").inc()
        return NEUTRAL
    return config.auto_shows.multiplier if signal.nearby_shows > 0 else NEUTRAL


def route_category(pickup: str, delivery: str) -> RouteCategory:
    pickup, delivery = pickup.lower(), delivery.lower()
    for a, b in POPULAR_ROUTES:
        if (a in pickup and b in delivery) or (b in pickup and a in delivery):
            return RouteCategory.POPULAR
    if any(area in pickup or area in delivery for area in REMOTE_AREAS):
        return RouteCategory.REMOTE
    return RouteCategory.REGULAR


def estimated_transit_time(distance: float, config: PricingConfig) -> str:
    days = math.ceil(distance / config.transport.daily_driving_miles)
    if days < 1:
        return "Less than 1 day"
    if days == 1:
        return "1 day"
    return f"{days} days"
