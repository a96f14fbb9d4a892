"""Invoice summary over operator-approved consultations."""

from collections.abc import Iterable
from decimal import Decimal

from consult_invoice.billing.rates import SERVICE_RATES
from consult_invoice.models import ConsultationRecord, ServiceLine, Summary

FALLBACK_SERVICE_TYPE = "Consultation"


def summarize(records: Iterable[ConsultationRecord]) -> Summary:
    """Group approved records by service type and total them.

    Status counts cover every record passed in. Breakdown lines keep the
    order in which each service type was first seen.
    """
    lines: dict[str, ServiceLine] = {}
    counts = {"pending": 0, "approved": 0, "rejected": 0}
    grand_total = Decimal("0")

    for record in records:
        counts[record.status] += 1
        if record.status != "approved":
            continue

        service_type = record.service_type or FALLBACK_SERVICE_TYPE
        line = lines.get(service_type)
        if line is None:
            line = lines[service_type] = ServiceLine(
                service_type=service_type,
                count=0,
                rate=record.calculated_amount,
                subtotal=Decimal("0"),
            )
        line.count += 1
        line.subtotal += record.calculated_amount
        grand_total += record.calculated_amount

    return Summary(
        service_breakdown=list(lines.values()),
        grand_total=grand_total,
        approved_count=counts["approved"],
        rejected_count=counts["rejected"],
        pending_count=counts["pending"],
        rates=dict(SERVICE_RATES),
    )
