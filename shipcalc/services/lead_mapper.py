"""Mapping of a priced calculation onto the CRM lead document"""
import math
import re
import uuid
from datetime import date, timedelta
from typing import NamedTuple, Optional, Tuple

from shipcalc.core.enums import TransportType, VehicleValue
from shipcalc.schemas.lead import (
    CRMCargo,
    CRMClient,
    CRMContact,
    CRMLeadDetails,
    CRMLeadPayload,
    LeadCreate,
)

DEFAULT_TRANSIT_DAYS = 4
MILES_PER_TRANSIT_DAY = 500

VEHICLE_VALUE_LABELS = {
    VehicleValue.UNDER_100K: "Under $100K",
    VehicleValue.UNDER_300K: "$100k - $300k",
    VehicleValue.UNDER_500K: "$300k - $500k",
    VehicleValue.OVER_500K: "Over $500k",
}

VEHICLE_TYPE_LABELS = {
    "SEDAN": "Sedan",
    "COUPE": "Coupe",
    "HATCHBACK": "Hatchback",
    "CONVERTIBLE": "Convertible",
    "WAGON": "Station Wagon",
    "SPORTS_CAR": "Sports Car",
    "LUXURY": "Luxury Vehicle",
    "COMPACT_SUV": "Compact SUV",
    "MIDSIZE_SUV": "Mid-size SUV",
    "FULLSIZE_SUV": "Full-size SUV",
    "MINIVAN": "Minivan",
    "CARGO_VAN": "Cargo Van",
    "EV": "Electric Vehicle",
    "HYBRID": "Hybrid Vehicle",
    "MOTORCYCLE": "Motorcycle",
    "ATV_UTV": "ATV/UTV",
    "CLASSIC": "Classic Vehicle",
    "OVERSIZED": "Oversized Vehicle",
    "SMALL_CARGO": "Small Cargo",
}

_STATE_ZIP = re.compile(r"^([A-Z]{2})\s+(\d{5}(-\d{4})?)$")


class ParsedAddress(NamedTuple):
    street: str = ""
    city: str = ""
    state: str = ""
    zip: str = ""


def split_name(full_name: str) -> Tuple[str, str]:
    parts = full_name.split()
    if not parts:
        return "", ""
    return parts[0], " ".join(parts[1:])


def parse_address(address: str) -> ParsedAddress:
    """Parse "street, city, ST 12345[, country]"; fewer parts give blanks."""
    parts = [part.strip() for part in address.split(",")]
    if len(parts) < 3:
        return ParsedAddress()

    state = zip_code = ""
    match = _STATE_ZIP.match(parts[2])
    if match:
        state, zip_code = match.group(1), match.group(2)
    else:
        words = parts[2].split(" ")
        if len(words) >= 2:
            state, zip_code = words[0], words[1]
    return ParsedAddress(parts[0], parts[1], state, zip_code)


def vehicle_type_label(vehicle_type: str) -> str:
    return VEHICLE_TYPE_LABELS.get(vehicle_type, vehicle_type)


def estimated_delivery_date(shipping_date: date, distance: Optional[float]) -> date:
    transit_days = math.ceil(distance / MILES_PER_TRANSIT_DAY) if distance else DEFAULT_TRANSIT_DAYS
    return shipping_date + timedelta(days=transit_days)


def quote_label(final_price: float) -> str:
    # whole dollars, halves away from zero
    return f"${math.floor(final_price + 0.5)}"


def map_lead(lead: LeadCreate, calculation_hash: str, lead_id: Optional[str] = None) -> CRMLeadPayload:
    first_name, last_name = split_name(lead.name)
    pickup = parse_address(lead.pickup)
    delivery = parse_address(lead.delivery)
    value_label = VEHICLE_VALUE_LABELS[lead.vehicle_value]
    type_label = vehicle_type_label(lead.vehicle_type)
    shipping_date = lead.shipping_date.isoformat()

    return CRMLeadPayload(
        Id=lead_id or str(uuid.uuid4()),
        shipping_date=shipping_date,
        client=CRMClient(
            EMail=lead.email,
            PhoneNumber=lead.phone,
            FirstName=first_name,
            LastName=last_name,
            Address_1=pickup.street,
            City=pickup.city,
            State=pickup.state,
            Zip=pickup.zip,
        ),
        Quote=quote_label(lead.final_price),
        Lead=CRMLeadDetails(
            Inoperable="Yes" if lead.inoperable else "No",
            Special="Yes" if lead.special_load else "No",
            Premium="Premium Service" if lead.premium_enhancements else "No",
            TransportType="Open" if lead.transport_type == TransportType.OPEN else "Enclosed",
            VehicleValue=value_label,
            VehicleType=type_label,
            VIN=calculation_hash,
        ),
        cargo=CRMCargo(
            Cargo_type=type_label,
            Vehicle_value=value_label,
            Pickup=CRMContact(
                FirstName=first_name,
                LastName=last_name,
                EMail=lead.email,
                Phone=lead.phone,
                Address=pickup.street,
                City=pickup.city,
                State=pickup.state,
                Zip=pickup.zip,
                Date=shipping_date,
            ),
            Delivery=CRMContact(
                Address=delivery.street,
                City=delivery.city,
                State=delivery.state,
                Zip=delivery.zip,
                Date=estimated_delivery_date(lead.shipping_date, lead.distance).isoformat(),
            ),
        ),
        Action=str(lead.action),
    )
