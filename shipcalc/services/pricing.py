"""Price composition.

The final price is the base price plus independent dollar impacts, never a
chained product of multipliers:

    subtotal = base + sum(base * (m - 1)) + base * sum(services) + tolls
    final    = subtotal + card fee (credit card only)
"""
import logging
from pydantic import BaseModel

from shipcalc.core.enums import PaymentMethod
from shipcalc.core.exceptions import QuoteValidationError
from shipcalc.core.metrics import quotes_calculated
from shipcalc.schemas.pricing_config import PricingConfig
from shipcalc.schemas.quote import (
    AdditionalServicesBreakdown,
    BasePriceBreakdown,
    MainMultipliers,
    PriceBreakdown,
    QuoteRequest,
    QuoteResponse,
    QuoteSelections,
    ServiceFlags,
)
from shipcalc.schemas.toll import TollEstimate
from shipcalc.services import signals
from shipcalc.services.tolls import estimate_tolls
from shipcalc.utils.hashing import normalize_address

logger = logging.getLogger(__name__)


class FactorSet(BaseModel):
    """Latest known multiplier per factor; 1.0 until resolved."""
    vehicle: float = 1.0
    weather: float = 1.0
    traffic: float = 1.0
    fuel: float = 1.0
    auto_show: float = 1.0


def validate_selections(selections: QuoteSelections, config: PricingConfig) -> None:
    max_distance = config.validation.max_distance
    if selections.distance_miles <= 0:
        raise QuoteValidationError("Distance must be greater than zero", field="distance_miles")
    if selections.distance_miles > max_distance:
        raise QuoteValidationError(
            f"Distance must not exceed {max_distance:g} miles", field="distance_miles"
        )
    if normalize_address(selections.pickup) == normalize_address(selections.delivery):
        raise QuoteValidationError(
            "Pickup and delivery locations must be different", field="delivery"
        )


def compute_base_price(selections: QuoteSelections, config: PricingConfig) -> BasePriceBreakdown:
    distance = selections.distance_miles
    if distance <= config.validation.short_distance_limit:
        return BasePriceBreakdown(
            rate_per_mile=0.0,
            distance=distance,
            total=config.validation.min_price_threshold,
            fixed_price=True,
        )

    # quotes are made at the top of the configured range
    rate = config.base_rates.for_transport(selections.transport_type).max
    return BasePriceBreakdown(rate_per_mile=rate, distance=distance, total=distance * rate)


def effective_services(selections: QuoteSelections) -> ServiceFlags:
    services = selections.services
    if selections.vehicle_value.forces_premium and not services.premium_enhancements:
        return services.model_copy(update={"premium_enhancements": True})
    return services


def compute_additional_services(
    base_price: float, services: ServiceFlags, config: PricingConfig
) -> AdditionalServicesBreakdown:
    rates = config.additional_services
    breakdown = AdditionalServicesBreakdown(
        premium=rates.premium_enhancements if services.premium_enhancements else 0.0,
        special=rates.special_load if services.special_load else 0.0,
        inoperable=rates.inoperable_zero_mileage if services.inoperable else 0.0,
        # insurance is priced by a manager, never automatically
        supplementary_insurance=0.0,
        has_manager_defined=services.supplementary_insurance,
    )
    total = breakdown.premium + breakdown.special + breakdown.inoperable
    return breakdown.model_copy(update={"total_additional": total, "impact": base_price * total})


def compute_main_multipliers(base_price: float, factors: FactorSet) -> MainMultipliers:
    impacts = {
        name: base_price * (getattr(factors, name) - 1)
        for name in ("vehicle", "weather", "traffic", "fuel", "auto_show")
    }
    return MainMultipliers(
        vehicle_multiplier=factors.vehicle,
        weather_multiplier=factors.weather,
        traffic_multiplier=factors.traffic,
        fuel_multiplier=factors.fuel,
        auto_show_multiplier=factors.auto_show,
        vehicle_impact=impacts["vehicle"],
        weather_impact=impacts["weather"],
        traffic_impact=impacts["traffic"],
        fuel_impact=impacts["fuel"],
        auto_show_impact=impacts["auto_show"],
        total_impact=sum(impacts.values()),
    )


def card_fee(subtotal: float, payment_method: PaymentMethod | None, config: PricingConfig) -> float:
    if payment_method == PaymentMethod.CREDIT_CARD:
        return subtotal * config.payment_fees.credit_card
    return 0.0


def compose_price(
    selections: QuoteSelections,
    factors: FactorSet,
    tolls: TollEstimate,
    config: PricingConfig,
) -> PriceBreakdown:
    """Recompute the whole breakdown from the currently known factors."""
    base = compute_base_price(selections, config)
    base_price = base.total

    main = compute_main_multipliers(base_price, factors)
    services = compute_additional_services(base_price, effective_services(selections), config)

    subtotal = base_price + main.total_impact + services.impact + tolls.total
    fee = card_fee(subtotal, selections.payment_method, config)
    main = main.model_copy(update={"card_fee": fee})

    return PriceBreakdown(
        base_price=base_price,
        base_price_breakdown=base,
        main_multipliers=main,
        additional_services=services,
        toll_costs=tolls,
        subtotal=subtotal,
        final_price=subtotal + fee,
        estimated_transit_time=signals.estimated_transit_time(selections.distance_miles, config),
        route_category=signals.route_category(selections.pickup, selections.delivery),
        config_version=config.version,
    )


def initial_factors(selections: QuoteSelections, config: PricingConfig) -> FactorSet:
    return FactorSet(vehicle=config.vehicle_value_multipliers.for_value(selections.vehicle_value))


async def calculate_price(req: QuoteRequest, config: PricingConfig) -> QuoteResponse:
    validate_selections(req, config)

    factors = initial_factors(req, config).model_copy(update={
        "weather": signals.weather_multiplier(req.weather),
        "traffic": signals.traffic_multiplier(req.traffic, config),
        "fuel": signals.fuel_multiplier(req.fuel),
        "auto_show": signals.auto_show_multiplier(req.auto_show, config),
    })
    tolls = estimate_tolls(req.distance_miles, config, req.route_states, req.route_text)

    breakdown = compose_price(req, factors, tolls, config)
    quotes_calculated.labels(transport_type=str(req.transport_type)).inc()
    logger.info(
        f"Quote {breakdown.final_price:.2f} for {req.distance_miles:g} mi "
        f"({req.transport_type}, config {config.version})"
    )
    return QuoteResponse(final_price=breakdown.final_price, price_breakdown=breakdown)
