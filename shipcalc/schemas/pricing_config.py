"""Versioned pricing configuration.

Stored documents use the camelCase keys of the config store
(``baseRates.openTransport.max``); Python code uses the snake_case fields.
"""
from typing import Optional
from pydantic import BaseModel, ConfigDict, Field, NonNegativeFloat, PositiveFloat
from pydantic.alias_generators import to_camel

from shipcalc.core.enums import TollRegion, TransportType, VehicleValue


class ConfigModel(BaseModel):
    model_config = ConfigDict(
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )


class RateRange(ConfigModel):
    min: NonNegativeFloat
    max: NonNegativeFloat


class BaseRates(ConfigModel):
    open_transport: RateRange
    enclosed_transport: RateRange

    def for_transport(self, transport_type: TransportType) -> RateRange:
        if transport_type == TransportType.ENCLOSED:
            return self.enclosed_transport
        return self.open_transport


class VehicleValueMultipliers(ConfigModel):
    # explicit aliases: the camel generator upper-cases letters after digits
    under100k: NonNegativeFloat = Field(alias="under100k")
    from100k_to300k: NonNegativeFloat = Field(alias="from100kTo300k")
    from300k_to500k: NonNegativeFloat = Field(alias="from300kTo500k")
    over500k: NonNegativeFloat = Field(alias="over500k")

    def for_value(self, value: VehicleValue) -> float:
        return {
            VehicleValue.UNDER_100K: self.under100k,
            VehicleValue.UNDER_300K: self.from100k_to300k,
            VehicleValue.UNDER_500K: self.from300k_to500k,
            VehicleValue.OVER_500K: self.over500k,
        }[value]


class AdditionalServiceRates(ConfigModel):
    premium_enhancements: NonNegativeFloat
    special_load: NonNegativeFloat
    inoperable_zero_mileage: NonNegativeFloat
    supplementary_insurance: NonNegativeFloat


class PaymentFees(ConfigModel):
    credit_card: NonNegativeFloat
    ach_check_cod: NonNegativeFloat


class WeatherMultipliers(ConfigModel):
    clear: NonNegativeFloat
    cloudy: NonNegativeFloat
    rain: NonNegativeFloat
    snow: NonNegativeFloat
    storm: NonNegativeFloat
    extreme: NonNegativeFloat


class RouteFactors(ConfigModel):
    popular: NonNegativeFloat
    regular: NonNegativeFloat
    remote: NonNegativeFloat


class ValidationLimits(ConfigModel):
    max_distance: PositiveFloat
    min_price_threshold: NonNegativeFloat
    short_distance_limit: NonNegativeFloat


class FuelSettings(ConfigModel):
    base_diesel_price: NonNegativeFloat
    price_level_multiplier: NonNegativeFloat
    price_threshold: NonNegativeFloat
    high_price_multiplier: NonNegativeFloat


class TrafficMultipliers(ConfigModel):
    light: NonNegativeFloat
    moderate: NonNegativeFloat
    heavy: NonNegativeFloat


class TrafficThresholds(ConfigModel):
    light_threshold: NonNegativeFloat
    heavy_threshold: NonNegativeFloat


class TransportSettings(ConfigModel):
    daily_driving_miles: PositiveFloat
    traffic_multipliers: TrafficMultipliers
    traffic_thresholds: TrafficThresholds


class RegionTable(ConfigModel):
    northeast: NonNegativeFloat
    new_england: NonNegativeFloat
    mid_atlantic: NonNegativeFloat
    great_lakes_midwest: NonNegativeFloat
    southeast: NonNegativeFloat
    texas_southern_plains: NonNegativeFloat
    mountain_west: NonNegativeFloat
    great_plains: NonNegativeFloat
    pacific_coast: NonNegativeFloat
    louisiana: NonNegativeFloat

    def for_region(self, region: TollRegion) -> float:
        # TollRegion values are the camelCase store keys
        return self.model_dump(by_alias=True)[region.value]


class DistanceDiscounts(ConfigModel):
    over2000_miles: NonNegativeFloat = Field(alias="over2000Miles")
    over1000_miles: NonNegativeFloat = Field(alias="over1000Miles")


class TollSettings(ConfigModel):
    base_toll_rate: NonNegativeFloat
    min_cost_multiplier: NonNegativeFloat
    min_cost_base: NonNegativeFloat
    max_cost_multiplier: NonNegativeFloat
    regional_multipliers: RegionTable
    distance_discounts: DistanceDiscounts
    regional_portions: RegionTable


class AutoShowSettings(ConfigModel):
    search_radius: NonNegativeFloat  # meters
    date_range: int  # +/- days
    multiplier: NonNegativeFloat


class PricingConfig(ConfigModel):
    version: str
    last_updated: Optional[str] = None
    updated_by: Optional[str] = None

    base_rates: BaseRates
    vehicle_value_multipliers: VehicleValueMultipliers
    additional_services: AdditionalServiceRates
    payment_fees: PaymentFees
    weather_multipliers: WeatherMultipliers
    route_factors: RouteFactors
    validation: ValidationLimits
    fuel: FuelSettings
    transport: TransportSettings
    tolls: TollSettings
    auto_shows: AutoShowSettings


class PricingConfigHistoryEntry(ConfigModel):
    id: str
    version: str
    config: PricingConfig
    created_at: str
    updated_by: Optional[str] = None
    change_description: Optional[str] = None


DEFAULT_PRICING_CONFIG_DOCUMENT = {
    "version": "1.0.0",
    "baseRates": {
        "openTransport": {"min": 0.62, "max": 0.93},
        "enclosedTransport": {"min": 0.88, "max": 1.19},
    },
    "vehicleValueMultipliers": {
        "under100k": 1.0,
        "from100kTo300k": 1.05,
        "from300kTo500k": 1.1,
        "over500k": 1.15,
    },
    "additionalServices": {
        "premiumEnhancements": 0.3,
        "specialLoad": 0.3,
        "inoperableZeroMileage": 0.3,
        "supplementaryInsurance": 0,
    },
    "paymentFees": {"creditCard": 0.03, "achCheckCod": 0},
    "weatherMultipliers": {
        "clear": 1.0,
        "cloudy": 1.0,
        "rain": 1.05,
        "snow": 1.2,
        "storm": 1.15,
        "extreme": 1.2,
    },
    "routeFactors": {"popular": 0.9, "regular": 1.0, "remote": 1.2},
    "validation": {
        "maxDistance": 3500,
        "minPriceThreshold": 600,
        "shortDistanceLimit": 300,
    },
    "fuel": {
        "baseDieselPrice": 3.50,
        "priceLevelMultiplier": 0.1,
        "priceThreshold": 1.05,
        "highPriceMultiplier": 1.05,
    },
    "transport": {
        "dailyDrivingMiles": 500,
        "trafficMultipliers": {"light": 1.0, "moderate": 1.1, "heavy": 1.2},
        "trafficThresholds": {"lightThreshold": 1.3, "heavyThreshold": 1.6},
    },
    "tolls": {
        "baseTollRate": 0.12,
        "minCostMultiplier": 0.05,
        "minCostBase": 20,
        "maxCostMultiplier": 0.15,
        "regionalMultipliers": {
            "northeast": 1.3,
            "newEngland": 1.3,
            "midAtlantic": 1.25,
            "greatLakesMidwest": 1.2,
            "southeast": 1.15,
            "texasSouthernPlains": 1.15,
            "mountainWest": 1.1,
            "greatPlains": 1.1,
            "pacificCoast": 1.2,
            "louisiana": 1.2,
        },
        "distanceDiscounts": {"over2000Miles": 0.85, "over1000Miles": 0.9},
        "regionalPortions": {
            "northeast": 0.35,
            "newEngland": 0.3,
            "midAtlantic": 0.25,
            "greatLakesMidwest": 0.4,
            "southeast": 0.2,
            "texasSouthernPlains": 0.6,
            "mountainWest": 0.5,
            "greatPlains": 0.2,
            "pacificCoast": 0.8,
            "louisiana": 0.3,
        },
    },
    "autoShows": {
        "searchRadius": 32186,  # 20 miles
        "dateRange": 3,
        "multiplier": 1.1,
    },
}

DEFAULT_PRICING_CONFIG = PricingConfig.model_validate(DEFAULT_PRICING_CONFIG_DOCUMENT)
