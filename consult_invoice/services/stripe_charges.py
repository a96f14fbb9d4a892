import logging
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any

import httpx

from consult_invoice.billing.rates import resolve_rate
from consult_invoice.config import Settings
from consult_invoice.models import ConsultationRecord, SourceResult

logger = logging.getLogger(__name__)

DEFAULT_SERVICE_TYPE = "Consultation"


def is_consultation(description: str | None) -> bool:
    return bool(description) and "consultation" in description.lower()


def _expanded_customer(charge: dict[str, Any]) -> dict[str, Any]:
    # Unexpanded customers arrive as an id string; deleted ones carry no profile
    customer = charge.get("customer")
    if isinstance(customer, dict) and not customer.get("deleted"):
        return customer
    return {}


def charge_to_record(charge: dict[str, Any]) -> ConsultationRecord:
    """Map a Stripe charge object to a consultation record."""
    customer = _expanded_customer(charge)
    billing = charge.get("billing_details") or {}
    service_type = charge.get("description") or DEFAULT_SERVICE_TYPE

    return ConsultationRecord(
        id=f"stripe_{charge['id']}",
        source="stripe",
        patient_name=customer.get("name") or billing.get("name") or "Unknown",
        patient_email=customer.get("email") or billing.get("email") or "",
        service_type=service_type,
        amount=Decimal(charge.get("amount") or 0) / 100,
        calculated_amount=resolve_rate(service_type),
        date=datetime.fromtimestamp(charge["created"], tz=timezone.utc),
        stripe_charge_id=charge["id"],
    )


class StripeChargeSource:
    """Reads successful charges from the Stripe REST API.

    Only the first page is read (``source_page_size`` charges); anything
    beyond it in the window is dropped. Failures never propagate: they are
    logged and reported through ``SourceResult.status``.
    """

    def __init__(self, settings: Settings, client: httpx.AsyncClient | None = None) -> None:
        self._secret_key = settings.stripe_secret_key
        self._configured = settings.stripe_configured
        self._consultation_only = settings.stripe_consultation_only
        self._page_size = settings.source_page_size
        self._client = client or httpx.AsyncClient(
            base_url=settings.stripe_api_base,
            timeout=httpx.Timeout(settings.http_timeout_seconds, connect=2.0),
        )

    @property
    def configured(self) -> bool:
        return self._configured

    def _is_billable(self, charge: dict[str, Any]) -> bool:
        if charge.get("status") != "succeeded":
            return False
        return not self._consultation_only or is_consultation(charge.get("description"))

    async def fetch_paid(self, start: datetime, end: datetime) -> SourceResult:
        """Charges created within ``[start, end]``, both ends inclusive."""
        if not self._configured:
            logger.info("Stripe secret key not configured, skipping charges")
            return SourceResult("stripe", status="not_configured")

        params = [
            ("created[gte]", str(int(start.timestamp()))),
            ("created[lte]", str(int(end.timestamp()))),
            ("limit", str(self._page_size)),
            ("expand[]", "data.customer"),
        ]
        try:
            response = await self._client.get(
                "/v1/charges",
                params=params,
                headers={"Authorization": f"Bearer {self._secret_key}"},
            )
            response.raise_for_status()
            charges = response.json().get("data", [])
            if not isinstance(charges, list):
                raise ValueError(f"unexpected charge list payload: {type(charges).__name__}")
        except Exception as exc:
            logger.exception("Stripe charge listing failed for %s..%s", start.isoformat(), end.isoformat())
            return SourceResult("stripe", status="failed", error=str(exc) or type(exc).__name__)

        records: list[ConsultationRecord] = []
        for charge in charges:
            if not isinstance(charge, dict):
                logger.warning("Skipping non-object Stripe charge entry %r", charge)
                continue
            if not self._is_billable(charge):
                continue
            try:
                records.append(charge_to_record(charge))
            except (AttributeError, KeyError, TypeError, ValueError):
                logger.warning("Skipping malformed Stripe charge %s", charge.get("id"), exc_info=True)

        if len(charges) >= self._page_size:
            logger.warning("Stripe returned a full page of %d charges; later charges are not fetched", len(charges))
        logger.info("Fetched %d Stripe consultations from %d charges", len(records), len(charges))
        return SourceResult("stripe", records=records)

    async def close(self) -> None:
        await self._client.aclose()
