"""CSV invoice export for approved consultations."""

import csv
import io
from collections.abc import Iterable
from datetime import datetime
from decimal import Decimal

from consult_invoice.models import ConsultationRecord
from consult_invoice.periods import Period

CSV_HEADER = ("Date", "Patient Name", "Service Type", "Source", "Amount")


def format_short_date(value: datetime) -> str:
    """`Jan 5, 2025` style, independent of the process locale."""
    return f"{value:%b} {value.day}, {value.year}"


def _money(value: Decimal) -> str:
    return f"{value:.2f}"


def export_csv(records: Iterable[ConsultationRecord]) -> str:
    approved = [r for r in records if r.status == "approved"]
    total = sum((r.calculated_amount for r in approved), Decimal("0"))

    buf = io.StringIO()
    writer = csv.writer(buf, quoting=csv.QUOTE_ALL, lineterminator="\n")
    writer.writerow(CSV_HEADER)
    for record in approved:
        writer.writerow(
            (
                format_short_date(record.date),
                record.patient_name,
                record.service_type,
                record.source,
                _money(record.calculated_amount),
            )
        )
    writer.writerow(())
    writer.writerow(("", "", "", "Total:", _money(total)))
    return buf.getvalue()


def export_filename(period: Period) -> str:
    return f"invoice_{period.year}_{period.month:02d}.csv"
