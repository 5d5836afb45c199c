import pytest
import inspect
from datetime import date

from shipcalc.core.config import settings
from shipcalc.core.enums import TransportType, VehicleValue
from shipcalc.core.rate_limit import InMemoryRateLimiter, get_rate_limiter
from shipcalc.main import app
from shipcalc.schemas.pricing_config import DEFAULT_PRICING_CONFIG
from shipcalc.schemas.quote import QuoteRequest, QuoteSelections


@pytest.fixture
def pricing_config():
    return DEFAULT_PRICING_CONFIG


@pytest.fixture
def selections_data():
    """A 1000 mile open-transport move with nothing extra selected"""
    return {
        "pickup": "123 Main St, Springfield, IL 62701, USA",
        "delivery": "500 Ocean Ave, Miami, FL 33139, USA",
        "shipping_date": "2026-11-02",
        "distance_miles": 1000.0,
        "transport_type": TransportType.OPEN.value,
        "vehicle_type": "SEDAN",
        "vehicle_value": VehicleValue.UNDER_100K.value,
    }


@pytest.fixture
def selections(selections_data):
    return QuoteSelections(**selections_data)


@pytest.fixture
def quote_request(selections_data):
    return QuoteRequest(**selections_data)


@pytest.fixture
def valid_lead_data():
    return {
        "name": "John Ronald Smith",
        "email": "john@example.com",
        "phone": "555-1234",
        "pickup": "123 Main St, Springfield, IL 62701, USA",
        "delivery": "500 Ocean Ave, Miami, FL 33139, USA",
        "shipping_date": date(2026, 11, 2).isoformat(),
        "transport_type": TransportType.OPEN.value,
        "vehicle_type": "COMPACT_SUV",
        "vehicle_value": VehicleValue.UNDER_100K.value,
        "final_price": 1348.5,
        "distance": 1000.0,
    }


@pytest.fixture
def crm_url(monkeypatch):
    url = "https://crm.test/leads"
    monkeypatch.setattr(settings, "CRM_LEAD_URL", url)
    return url


@pytest.fixture
def emailjs_settings(monkeypatch):
    monkeypatch.setattr(settings, "EMAILJS_SERVICE_ID", "service_test")
    monkeypatch.setattr(settings, "EMAILJS_TEMPLATE_ID", "template_test")
    monkeypatch.setattr(settings, "EMAILJS_PUBLIC_KEY", "public_test")


@pytest.fixture
def fresh_rate_limiter():
    """Per-test limiter so API tests never share request counts"""
    limiter = InMemoryRateLimiter()
    app.dependency_overrides[get_rate_limiter] = lambda: limiter
    yield limiter
    app.dependency_overrides.pop(get_rate_limiter, None)


@pytest.fixture
def app_settings():
    """Return application settings"""
    return settings


def pytest_configure(config):
    config.addinivalue_line(
        "markers", "unit: marks tests as unit tests"
    )
    config.addinivalue_line(
        "markers", "api: marks tests that go through the HTTP app"
    )
    config.addinivalue_line(
        "markers", "pricing: marks tests related to pricing"
    )
    config.addinivalue_line(
        "markers", "tolls: marks tests related to toll estimation"
    )
    config.addinivalue_line(
        "markers", "hashing: marks tests related to calculation hashes"
    )
    config.addinivalue_line(
        "markers", "dedup: marks tests related to lead deduplication"
    )
    config.addinivalue_line(
        "markers", "config: marks tests related to pricing config resolution"
    )
    config.addinivalue_line(
        "markers", "leads: marks tests related to lead submission and email"
    )
    config.addinivalue_line(
        "markers", "rate_limit: marks tests related to rate limiting"
    )


def pytest_collection_modifyitems(config, items):
    """
    Modify test collection to handle asyncio tests
    """
    for item in items:
        if inspect.iscoroutinefunction(getattr(item, "function", None)):
            item.add_marker(pytest.mark.asyncio)
