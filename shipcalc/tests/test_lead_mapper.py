from datetime import date

import pytest

from shipcalc.core.enums import LeadAction
from shipcalc.schemas.lead import LeadCreate
from shipcalc.services.lead_mapper import (
    ParsedAddress,
    estimated_delivery_date,
    map_lead,
    parse_address,
    quote_label,
    split_name,
    vehicle_type_label,
)


@pytest.mark.leads
class TestLeadMapperHelpers:

    @pytest.mark.parametrize("name,expected", [
        ("John Ronald Smith", ("John", "Ronald Smith")),
        ("  Cher  ", ("Cher", "")),
        ("", ("", "")),
    ])
    def test_split_name(self, name, expected):
        assert split_name(name) == expected

    def test_parse_full_address(self):
        assert parse_address("123 Main St, Springfield, IL 62701, USA") == ParsedAddress(
            "123 Main St", "Springfield", "IL", "62701"
        )

    def test_parse_zip_plus_four(self):
        assert parse_address("1 Elm Rd, Austin, TX 73301-1234").zip == "73301-1234"

    def test_parse_loose_state_zip(self):
        parsed = parse_address("9 Pine Ct, Boise, Idaho 83702")
        assert (parsed.state, parsed.zip) == ("Idaho", "83702")

    def test_unparseable_address_is_blank(self):
        assert parse_address("Miami, FL") == ParsedAddress()

    def test_vehicle_type_labels(self):
        assert vehicle_type_label("COMPACT_SUV") == "Compact SUV"
        assert vehicle_type_label("ATV_UTV") == "ATV/UTV"
        assert vehicle_type_label("TRACTOR") == "TRACTOR"

    @pytest.mark.parametrize("price,label", [(1348.5, "$1349"), (1348.49, "$1348"), (600.0, "$600")])
    def test_quote_label(self, price, label):
        assert quote_label(price) == label

    def test_delivery_date(self):
        assert estimated_delivery_date(date(2026, 11, 2), 1000) == date(2026, 11, 4)
        assert estimated_delivery_date(date(2026, 11, 2), 1001) == date(2026, 11, 5)
        assert estimated_delivery_date(date(2026, 11, 2), None) == date(2026, 11, 6)


@pytest.mark.leads
class TestMapLead:

    def test_full_document(self, valid_lead_data):
        lead = LeadCreate(**valid_lead_data, premium_enhancements=True, action=LeadAction.BOOK_NOW)
        payload = map_lead(lead, "a1b2c3d4e5f60718", lead_id="lead-1").model_dump()

        assert payload["Request"] == "Add New Lead from Website"
        assert payload["Id"] == "lead-1"
        assert payload["shipping_date"] == "2026-11-02"
        assert payload["Quote"] == "$1349"
        assert payload["Action"] == "BOOK_NOW"

        assert payload["client"] == {
            "Type": "Private person",
            "EMail": "john@example.com",
            "PhoneNumber": "555-1234",
            "FirstName": "John",
            "LastName": "Ronald Smith",
            "Address_1": "123 Main St",
            "City": "Springfield",
            "State": "IL",
            "Zip": "62701",
        }
        assert payload["Lead"] == {
            "Inoperable": "No",
            "Special": "No",
            "Premium": "Premium Service",
            "TransportType": "Open",
            "VehicleValue": "Under $100K",
            "VehicleType": "Compact SUV",
            "VIN": "a1b2c3d4e5f60718",
            "Make": "",
            "Model": "",
            "Year": "",
        }

        cargo = payload["cargo"]
        assert cargo["Cargo_type"] == "Compact SUV"
        assert cargo["Vehicle_value"] == "Under $100K"
        assert cargo["Pickup"]["FirstName"] == "John"
        assert cargo["Pickup"]["Date"] == "2026-11-02"
        assert cargo["Delivery"]["FirstName"] == ""
        assert cargo["Delivery"]["City"] == "Miami"
        assert cargo["Delivery"]["Date"] == "2026-11-04"

    def test_enclosed_high_value(self, valid_lead_data):
        data = dict(valid_lead_data, transport_type="enclosedTransport", vehicle_value="over500k", inoperable=True)
        payload = map_lead(LeadCreate(**data), "0000000000000001")

        assert payload.Lead.TransportType == "Enclosed"
        assert payload.Lead.VehicleValue == "Over $500k"
        assert payload.Lead.Inoperable == "Yes"
        assert payload.Action == "CALCULATE_BUTTON"
        assert len(payload.Id) == 36

    @pytest.mark.parametrize("value", ["under500k", "over500k"])
    def test_high_value_is_sent_as_premium(self, valid_lead_data, value):
        lead = LeadCreate(**dict(valid_lead_data, vehicle_value=value, premium_enhancements=False))
        payload = map_lead(lead, "0000000000000001")

        assert lead.premium_enhancements is True
        assert payload.Lead.Premium == "Premium Service"

    def test_premium_left_alone_below_threshold(self, valid_lead_data):
        payload = map_lead(LeadCreate(**valid_lead_data), "0000000000000001")

        assert payload.Lead.Premium == "No"
