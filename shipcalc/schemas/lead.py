from pydantic import BaseModel, Field, field_validator, model_validator
from typing import Optional
from datetime import date

from shipcalc.core.enums import LeadAction, PaymentMethod, TransportType, VehicleValue


class LeadCreate(BaseModel):
    name: str = ""
    email: str
    phone: str = ""
    pickup: str
    delivery: str
    shipping_date: date
    transport_type: TransportType
    vehicle_type: str
    vehicle_value: VehicleValue
    premium_enhancements: bool = False
    special_load: bool = False
    inoperable: bool = False
    supplementary_insurance: bool = False
    payment_method: Optional[PaymentMethod] = None
    final_price: float = Field(..., ge=0)
    distance: Optional[float] = Field(None, gt=0)
    action: LeadAction = LeadAction.CALCULATE_BUTTON

    @field_validator("email")
    @classmethod
    def email_not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("email is required")
        return v.strip()

    @model_validator(mode="after")
    def force_premium_for_high_value(self):
        # high-value vehicles are always priced with premium handling
        if self.vehicle_value.forces_premium:
            self.premium_enhancements = True
        return self

    def hash_fields(self) -> dict:
        return {
            "pickup": self.pickup,
            "delivery": self.delivery,
            "shipping_date": self.shipping_date,
            "transport_type": self.transport_type,
            "vehicle_type": self.vehicle_type,
            "vehicle_value": self.vehicle_value,
            "premium_enhancements": self.premium_enhancements,
            "special_load": self.special_load,
            "inoperable": self.inoperable,
            "supplementary_insurance": self.supplementary_insurance,
            "final_price": self.final_price,
        }


class CRMClient(BaseModel):
    Type: str = "Private person"
    EMail: str
    PhoneNumber: str
    FirstName: str
    LastName: str
    Address_1: str
    City: str
    State: str
    Zip: str


class CRMLeadDetails(BaseModel):
    Inoperable: str
    Special: str
    Premium: str
    TransportType: str
    VehicleValue: str
    VehicleType: str
    VIN: str
    Make: str = ""
    Model: str = ""
    Year: str = ""


class CRMContact(BaseModel):
    FirstName: str = ""
    LastName: str = ""
    EMail: str = ""
    Phone: str = ""
    Address: str
    City: str
    State: str
    Zip: str
    Date: str


class CRMCargo(BaseModel):
    Cargo_type: str
    Vehicle_value: str
    Pickup: CRMContact
    Delivery: CRMContact


class CRMLeadPayload(BaseModel):
    Request: str = "Add New Lead from Website"
    Id: str
    shipping_date: str
    client: CRMClient
    Quote: str
    Lead: CRMLeadDetails
    cargo: CRMCargo
    Action: str


class LeadSubmissionResult(BaseModel):
    success: bool
    message: str
    lead_id: Optional[str] = None
    calculation_hash: Optional[str] = None
    cached: bool = False
    queued: bool = False


class EmailQuoteRequest(BaseModel):
    name: str = ""
    email: str
    phone: str = ""
    pickup: str = ""
    delivery: str = ""
    final_price: float
    transport_type: str = ""
    vehicle_type: str = ""
    vehicle_value: str = ""
    payment_method: Optional[str] = None
    shipping_date: Optional[date] = None
    distance: Optional[float] = None


class EmailQuoteResult(BaseModel):
    success: bool
    message: str
    quote_id: Optional[str] = None
