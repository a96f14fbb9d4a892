import logging
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any

import httpx

from consult_invoice.billing.rates import resolve_rate
from consult_invoice.config import Settings
from consult_invoice.models import ConsultationRecord, SourceResult

logger = logging.getLogger(__name__)

# No-shows and cancellations are not billable
ATTENDED_STATUSES = frozenset({"confirmed", "showed"})
DEFAULT_SERVICE_TYPE = "Consultation"


def event_status(event: dict[str, Any]) -> str:
    return str(event.get("appointmentStatus") or event.get("status") or "").lower()


def parse_event_time(value: Any) -> datetime:
    """Accept ISO-8601 strings or epoch milliseconds; naive values are UTC."""
    if isinstance(value, (int, float)):
        return datetime.fromtimestamp(value / 1000, tz=timezone.utc)
    parsed = datetime.fromisoformat(str(value))
    return parsed if parsed.tzinfo is not None else parsed.replace(tzinfo=timezone.utc)


def _contact_name(contact: dict[str, Any]) -> str:
    if contact.get("name"):
        return contact["name"]
    parts = [contact.get("firstName"), contact.get("lastName")]
    return " ".join(p for p in parts if p)


def event_to_record(event: dict[str, Any]) -> ConsultationRecord:
    """Map a calendar event to a consultation record with no captured payment."""
    contact = event.get("contact") or {}
    service_type = event.get("calendarName") or event.get("title") or DEFAULT_SERVICE_TYPE

    return ConsultationRecord(
        id=f"ghl_{event['id']}",
        source="gohighlevel",
        patient_name=_contact_name(contact) or "Unknown",
        patient_email=contact.get("email") or "",
        service_type=service_type,
        amount=Decimal("0"),
        calculated_amount=resolve_rate(service_type),
        date=parse_event_time(event["startTime"]),
        ghl_event_id=event["id"],
    )


class GHLCalendarSource:
    """Reads attended appointments from the Go High Level calendar API."""

    def __init__(self, settings: Settings, client: httpx.AsyncClient | None = None) -> None:
        self._api_key = settings.ghl_api_key
        self._configured = settings.ghl_configured
        self._location_id = settings.ghl_location_id
        self._calendar_id = settings.ghl_calendar_id
        self._api_version = settings.ghl_api_version
        self._client = client or httpx.AsyncClient(
            base_url=settings.ghl_api_base,
            timeout=httpx.Timeout(settings.http_timeout_seconds, connect=2.0),
        )

    @property
    def configured(self) -> bool:
        return self._configured

    async def fetch_events(self, start: datetime, end: datetime) -> SourceResult:
        """Events overlapping ``[start, end]``. Missing credentials are not an error."""
        if not self.configured:
            logger.info("Go High Level credentials not configured, skipping calendar events")
            return SourceResult("gohighlevel", status="not_configured")

        params = {
            "locationId": self._location_id,
            "startTime": str(int(start.timestamp() * 1000)),
            "endTime": str(int(end.timestamp() * 1000)),
        }
        if self._calendar_id:
            params["calendarId"] = self._calendar_id
        headers = {
            "Authorization": f"Bearer {self._api_key}",
            "Version": self._api_version,
            "Accept": "application/json",
        }
        try:
            response = await self._client.get("/calendars/events", params=params, headers=headers)
            response.raise_for_status()
            events = response.json().get("events", [])
            if not isinstance(events, list):
                raise ValueError(f"unexpected event list payload: {type(events).__name__}")
        except Exception as exc:
            logger.exception("Go High Level event listing failed for %s..%s", start.isoformat(), end.isoformat())
            return SourceResult("gohighlevel", status="failed", error=str(exc) or type(exc).__name__)

        records: list[ConsultationRecord] = []
        for event in events:
            if not isinstance(event, dict):
                logger.warning("Skipping non-object Go High Level event entry %r", event)
                continue
            if event_status(event) not in ATTENDED_STATUSES:
                continue
            try:
                records.append(event_to_record(event))
            except (AttributeError, KeyError, TypeError, ValueError):
                logger.warning("Skipping malformed Go High Level event %s", event.get("id"), exc_info=True)

        logger.info("Fetched %d attended Go High Level events from %d", len(records), len(events))
        return SourceResult("gohighlevel", records=records)

    async def close(self) -> None:
        await self._client.aclose()
