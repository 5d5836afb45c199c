from datetime import date
from pydantic import BaseModel, Field, model_validator
from typing import List, Optional

from shipcalc.core.enums import PaymentMethod, RouteCategory, SignalKind, TransportType, VehicleValue
from shipcalc.schemas.toll import TollEstimate


class ServiceFlags(BaseModel):
    premium_enhancements: bool = False
    special_load: bool = False
    inoperable: bool = False
    supplementary_insurance: bool = False


class QuoteSelections(BaseModel):
    pickup: str = Field(min_length=1)
    delivery: str = Field(min_length=1)
    shipping_date: date
    distance_miles: float = Field(gt=0)
    transport_type: TransportType
    vehicle_type: str = Field(min_length=1)
    vehicle_value: VehicleValue
    services: ServiceFlags = Field(default_factory=ServiceFlags)
    payment_method: Optional[PaymentMethod] = None
    route_states: Optional[List[str]] = None
    route_text: Optional[str] = None


class WeatherSignal(BaseModel):
    """Condition texts for pickup, midpoint and delivery, any may be missing."""
    conditions: List[Optional[str]] = Field(default_factory=list)


class TrafficSignal(BaseModel):
    duration_seconds: float = Field(ge=0)
    duration_in_traffic_seconds: float = Field(ge=0)


class FuelSignal(BaseModel):
    current_price: Optional[float] = Field(default=None, ge=0)
    historical_price: Optional[float] = Field(default=None, ge=0)
    price_change: Optional[float] = None

    @model_validator(mode="after")
    def check_prices(self):
        if self.price_change is None and (self.current_price is None or self.historical_price is None):
            raise ValueError("Either price_change or both current_price and historical_price are required")
        return self


class AutoShowSignal(BaseModel):
    nearby_shows: int = Field(ge=0)


class RouteSignal(BaseModel):
    """Route data resolved by the directions provider; tolls are estimated from it."""
    route_states: Optional[List[str]] = None
    route_text: Optional[str] = None


class QuoteRequest(QuoteSelections):
    """One-shot calculation: every signal the caller already resolved."""
    weather: Optional[WeatherSignal] = None
    traffic: Optional[TrafficSignal] = None
    fuel: Optional[FuelSignal] = None
    auto_show: Optional[AutoShowSignal] = None


class SignalUpdate(BaseModel):
    token: int
    kind: SignalKind
    # None means the provider failed; the factor goes back to neutral
    weather: Optional[WeatherSignal] = None
    traffic: Optional[TrafficSignal] = None
    fuel: Optional[FuelSignal] = None
    auto_show: Optional[AutoShowSignal] = None
    route: Optional[RouteSignal] = None


class BasePriceBreakdown(BaseModel):
    rate_per_mile: float
    distance: float
    total: float
    fixed_price: bool = False


class MainMultipliers(BaseModel):
    vehicle_multiplier: float = 1.0
    weather_multiplier: float = 1.0
    traffic_multiplier: float = 1.0
    fuel_multiplier: float = 1.0
    auto_show_multiplier: float = 1.0
    vehicle_impact: float = 0.0
    weather_impact: float = 0.0
    traffic_impact: float = 0.0
    fuel_impact: float = 0.0
    auto_show_impact: float = 0.0
    total_impact: float = 0.0
    card_fee: float = 0.0


class AdditionalServicesBreakdown(BaseModel):
    premium: float = 0.0
    special: float = 0.0
    inoperable: float = 0.0
    supplementary_insurance: float = 0.0
    has_manager_defined: bool = False
    total_additional: float = 0.0
    impact: float = 0.0


class PriceBreakdown(BaseModel):
    base_price: float
    base_price_breakdown: BasePriceBreakdown
    main_multipliers: MainMultipliers
    additional_services: AdditionalServicesBreakdown
    toll_costs: TollEstimate
    subtotal: float
    final_price: float
    estimated_transit_time: str
    route_category: RouteCategory = RouteCategory.REGULAR
    config_version: str


class QuoteResponse(BaseModel):
    final_price: float
    price_breakdown: PriceBreakdown


class SessionResponse(BaseModel):
    session_id: str
    token: int
    price_breakdown: PriceBreakdown
