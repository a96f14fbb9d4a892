"""Demo dataset shown when the API cannot be reached.

Every record id carries the ``demo_`` prefix and sessions that load it are
flagged ``is_demo`` so the data is never mistaken for a real month.
"""

from datetime import datetime, timezone
from decimal import Decimal

from consult_invoice.billing.rates import resolve_rate
from consult_invoice.models import ConsultationRecord
from consult_invoice.periods import Period

DEMO_ID_PREFIX = "demo_"

_DEMO_ROWS = (
    # day, source, name, email, service type, amount charged
    (5, "stripe", "John Smith", "john@example.com", "Initial Consultation", Decimal("100")),
    (10, "stripe", "Jane Doe", "jane@example.com", "Follow-up Consultation", Decimal("50")),
    (15, "gohighlevel", "Bob Wilson", "bob@example.com", "Pathology Review", Decimal("0")),
    (18, "stripe", "Alice Brown", "alice@example.com", "Consultation", Decimal("100")),
    (22, "gohighlevel", "Charlie Davis", "charlie@example.com", "Repeat Script", Decimal("0")),
)


def demo_consultations(period: Period) -> list[ConsultationRecord]:
    records = []
    for n, (day, source, name, email, service_type, amount) in enumerate(_DEMO_ROWS, start=1):
        records.append(
            ConsultationRecord(
                id=f"{DEMO_ID_PREFIX}{n}",
                source=source,
                patient_name=name,
                patient_email=email,
                service_type=service_type,
                amount=amount,
                calculated_amount=resolve_rate(service_type),
                date=datetime(period.year, period.month, day, tzinfo=timezone.utc),
            )
        )
    records.sort(key=lambda r: r.date, reverse=True)
    return records
