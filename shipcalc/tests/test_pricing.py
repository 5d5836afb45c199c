import pytest
from pydantic import ValidationError

from shipcalc.core.enums import PaymentMethod, TransportType, VehicleValue
from shipcalc.core.exceptions import QuoteValidationError
from shipcalc.schemas.quote import QuoteRequest, ServiceFlags, TrafficSignal, WeatherSignal
from shipcalc.schemas.toll import TollEstimate
from shipcalc.services.pricing import (
    FactorSet,
    calculate_price,
    compose_price,
    compute_base_price,
    initial_factors,
)


def _request(selections_data, **overrides):
    data = dict(selections_data)
    data.update(overrides)
    return QuoteRequest(**data)


@pytest.mark.pricing
class TestBasePrice:

    @pytest.mark.parametrize("transport,expected", [
        (TransportType.OPEN, 930.0),
        (TransportType.ENCLOSED, 1190.0),
    ])
    def test_long_distance_uses_max_rate(self, selections_data, pricing_config, transport, expected):
        req = _request(selections_data, transport_type=transport)
        base = compute_base_price(req, pricing_config)

        assert base.total == pytest.approx(expected)
        assert base.rate_per_mile == pricing_config.base_rates.for_transport(transport).max
        assert base.fixed_price is False

    @pytest.mark.parametrize("distance", [1.0, 150.0, 300.0])
    def test_short_distance_is_flat(self, selections_data, pricing_config, distance):
        req = _request(selections_data, distance_miles=distance)
        base = compute_base_price(req, pricing_config)

        assert base.total == 600.0
        assert base.rate_per_mile == 0.0
        assert base.fixed_price is True

    def test_just_over_short_limit_is_per_mile(self, selections_data, pricing_config):
        req = _request(selections_data, distance_miles=301.0)
        base = compute_base_price(req, pricing_config)

        assert base.fixed_price is False
        assert base.total == pytest.approx(301 * 0.93)


@pytest.mark.pricing
class TestComposition:

    @pytest.mark.asyncio
    async def test_plain_quote(self, quote_request, pricing_config):
        res = await calculate_price(quote_request, pricing_config)

        assert res.final_price == pytest.approx(930.0)
        assert res.price_breakdown.subtotal == pytest.approx(930.0)
        assert res.price_breakdown.main_multipliers.total_impact == pytest.approx(0.0)
        assert res.price_breakdown.estimated_transit_time == "2 days"
        assert res.price_breakdown.config_version == pricing_config.version

    @pytest.mark.asyncio
    async def test_impacts_are_additive_not_chained(self, selections_data, pricing_config):
        req = _request(
            selections_data,
            weather=WeatherSignal(conditions=["Light rain"]),
            traffic=TrafficSignal(duration_seconds=100, duration_in_traffic_seconds=200),
        )
        res = await calculate_price(req, pricing_config)
        main = res.price_breakdown.main_multipliers

        assert main.weather_multiplier == 1.05
        assert main.traffic_multiplier == 1.2
        assert main.weather_impact == pytest.approx(46.5)
        assert main.traffic_impact == pytest.approx(186.0)
        # 930 * 1.05 * 1.2 would be 1171.8
        assert res.final_price == pytest.approx(1162.5)

    @pytest.mark.asyncio
    async def test_credit_card_fee_on_subtotal(self, selections_data, pricing_config):
        req = _request(selections_data, payment_method=PaymentMethod.CREDIT_CARD)
        res = await calculate_price(req, pricing_config)

        assert res.price_breakdown.main_multipliers.card_fee == pytest.approx(27.9)
        assert res.final_price == pytest.approx(957.9)

    @pytest.mark.asyncio
    async def test_ach_has_no_fee(self, selections_data, pricing_config):
        req = _request(selections_data, payment_method=PaymentMethod.ACH_CHECK_COD)
        res = await calculate_price(req, pricing_config)

        assert res.price_breakdown.main_multipliers.card_fee == 0.0
        assert res.final_price == pytest.approx(930.0)

    @pytest.mark.asyncio
    async def test_short_distance_with_card(self, selections_data, pricing_config):
        req = _request(selections_data, distance_miles=200.0, payment_method=PaymentMethod.CREDIT_CARD)
        res = await calculate_price(req, pricing_config)

        assert res.final_price == pytest.approx(618.0)
        assert res.price_breakdown.estimated_transit_time == "1 day"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("value", [VehicleValue.UNDER_500K, VehicleValue.OVER_500K])
    async def test_high_value_forces_premium(self, selections_data, pricing_config, value):
        req = _request(selections_data, vehicle_value=value)
        res = await calculate_price(req, pricing_config)
        services = res.price_breakdown.additional_services

        assert services.premium == 0.3
        assert services.impact == pytest.approx(279.0)

    @pytest.mark.asyncio
    async def test_over_500k_quote(self, selections_data, pricing_config):
        req = _request(selections_data, vehicle_value=VehicleValue.OVER_500K)
        res = await calculate_price(req, pricing_config)

        assert res.price_breakdown.main_multipliers.vehicle_impact == pytest.approx(139.5)
        assert res.final_price == pytest.approx(1348.5)

    @pytest.mark.asyncio
    async def test_services_sum_fractions(self, selections_data, pricing_config):
        req = _request(
            selections_data,
            services=ServiceFlags(special_load=True, inoperable=True),
        )
        res = await calculate_price(req, pricing_config)
        services = res.price_breakdown.additional_services

        assert services.total_additional == pytest.approx(0.6)
        assert res.final_price == pytest.approx(1488.0)

    @pytest.mark.asyncio
    async def test_insurance_is_manager_defined(self, selections_data, pricing_config):
        req = _request(selections_data, services=ServiceFlags(supplementary_insurance=True))
        res = await calculate_price(req, pricing_config)
        services = res.price_breakdown.additional_services

        assert services.has_manager_defined is True
        assert services.supplementary_insurance == 0.0
        assert res.final_price == pytest.approx(930.0)

    @pytest.mark.asyncio
    async def test_route_tolls_are_added(self, selections_data, pricing_config):
        req = _request(selections_data, route_states=["IL", "FL"])
        res = await calculate_price(req, pricing_config)

        assert res.price_breakdown.toll_costs.total == 150.0
        assert res.final_price == pytest.approx(1080.0)

    def test_breakdown_reconstructs_final_price(self, selections, pricing_config):
        factors = FactorSet(vehicle=1.05, weather=1.2, traffic=1.1, fuel=0.95, auto_show=1.1)
        tolls = TollEstimate(total=87.25)
        req = selections.model_copy(update={"payment_method": PaymentMethod.CREDIT_CARD})

        b = compose_price(req, factors, tolls, pricing_config)

        subtotal = (
            b.base_price
            + b.main_multipliers.total_impact
            + b.additional_services.impact
            + b.toll_costs.total
        )
        assert b.subtotal == pytest.approx(subtotal)
        assert b.final_price == pytest.approx(subtotal + b.main_multipliers.card_fee)
        assert b.main_multipliers.total_impact == pytest.approx(930 * (0.05 + 0.2 + 0.1 - 0.05 + 0.1))

    def test_initial_factors_use_vehicle_value(self, selections_data, pricing_config):
        req = _request(selections_data, vehicle_value=VehicleValue.UNDER_300K)
        factors = initial_factors(req, pricing_config)

        assert factors.vehicle == 1.05
        assert (factors.weather, factors.traffic, factors.fuel, factors.auto_show) == (1.0, 1.0, 1.0, 1.0)


@pytest.mark.pricing
class TestValidation:

    @pytest.mark.asyncio
    async def test_distance_over_limit(self, selections_data, pricing_config):
        req = _request(selections_data, distance_miles=3600.0)
        with pytest.raises(QuoteValidationError) as exc:
            await calculate_price(req, pricing_config)
        assert exc.value.field == "distance_miles"

    @pytest.mark.asyncio
    async def test_same_pickup_and_delivery(self, selections_data, pricing_config):
        req = _request(selections_data, delivery="  123 MAIN St,  Springfield, IL 62701, USA ")
        with pytest.raises(QuoteValidationError):
            await calculate_price(req, pricing_config)

    def test_non_positive_distance_rejected_by_schema(self, selections_data):
        with pytest.raises(ValidationError):
            _request(selections_data, distance_miles=0)
