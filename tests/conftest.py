from datetime import datetime, timezone
from decimal import Decimal
from unittest.mock import AsyncMock

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from consult_invoice.billing.rates import resolve_rate
from consult_invoice.config import Settings
from consult_invoice.main import app
from consult_invoice.middleware.rate_limit import limiter
from consult_invoice.models import ConsultationRecord, SourceResult
from consult_invoice.services.ghl_calendar import GHLCalendarSource
from consult_invoice.services.reconciler import ConsultationReconciler
from consult_invoice.services.stripe_charges import StripeChargeSource


@pytest.fixture
def settings():
    return Settings(
        env="test",
        stripe_secret_key="sk_test_123",
        stripe_api_base="https://stripe.test",
        ghl_api_key="ghl-test-key",
        ghl_location_id="loc-001",
        ghl_api_base="https://ghl.test",
    )


@pytest.fixture
def make_record():
    """Factory for consultation records with sensible defaults."""

    def _make(
        record_id: str = "stripe_ch_001",
        source: str = "stripe",
        email: str = "",
        service_type: str = "Consultation",
        day: int = 1,
        status: str = "pending",
        **overrides,
    ) -> ConsultationRecord:
        data = {
            "id": record_id,
            "source": source,
            "patient_name": overrides.pop("patient_name", "Test Patient"),
            "patient_email": email,
            "service_type": service_type,
            "amount": overrides.pop("amount", Decimal("100") if source == "stripe" else Decimal("0")),
            "calculated_amount": overrides.pop("calculated_amount", resolve_rate(service_type)),
            "date": overrides.pop("date", datetime(2025, 3, day, 10, 0, tzinfo=timezone.utc)),
            "status": status,
        }
        data.update(overrides)
        return ConsultationRecord(**data)

    return _make


@pytest.fixture
def sample_charge():
    return {
        "id": "ch_001",
        "object": "charge",
        "amount": 12000,
        "created": 1741255200,  # 2025-03-06T10:00:00Z
        "status": "succeeded",
        "description": "Initial Consultation",
        "customer": {
            "id": "cus_001",
            "object": "customer",
            "name": "Jane Doe",
            "email": "jane@example.com",
        },
        "billing_details": {"name": "J. Doe (card)", "email": "billing@example.com"},
    }


@pytest.fixture
def sample_event():
    return {
        "id": "evt_001",
        "title": "Follow up with Bob",
        "calendarName": "Follow-up Consultation",
        "appointmentStatus": "confirmed",
        "startTime": "2025-03-10T09:30:00+00:00",
        "contact": {
            "firstName": "Bob",
            "lastName": "Wilson",
            "email": "bob@example.com",
        },
    }


@pytest.fixture
def mock_stripe_source():
    source = AsyncMock(spec=StripeChargeSource)
    source.configured = True
    source.fetch_paid.return_value = SourceResult("stripe")
    return source


@pytest.fixture
def mock_ghl_source():
    source = AsyncMock(spec=GHLCalendarSource)
    source.configured = True
    source.fetch_events.return_value = SourceResult("gohighlevel")
    return source


@pytest.fixture
def reconciler(mock_stripe_source, mock_ghl_source):
    return ConsultationReconciler(mock_stripe_source, mock_ghl_source)


@pytest_asyncio.fixture
async def client(reconciler):
    limiter.reset()
    app.state.reconciler = reconciler
    # Unhandled errors are asserted on the 500 envelope, not re-raised
    transport = ASGITransport(app=app, raise_app_exceptions=False)
    async with AsyncClient(transport=transport, base_url="http://test") as c:
        yield c
    app.state.reconciler = None
