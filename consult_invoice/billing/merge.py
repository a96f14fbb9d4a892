"""Combine paid charges and calendar events into one reviewable list."""

from collections.abc import Iterable

from consult_invoice.models import ConsultationRecord


def _email_key(record: ConsultationRecord) -> str:
    return record.patient_email.lower()


def merge(
    paid: Iterable[ConsultationRecord], events: Iterable[ConsultationRecord]
) -> list[ConsultationRecord]:
    """Merge Stripe records with Go High Level records, newest first.

    Every paid record is kept. An event is dropped when its patient email
    matches (case-insensitively) any paid record's email in the same window,
    even if the payment was for a different appointment. Events with no
    email are always kept. Duplicates within ``paid`` are left alone.
    """
    merged = list(paid)
    paid_emails = {key for key in map(_email_key, merged) if key}

    for event in events:
        key = _email_key(event)
        if not key or key not in paid_emails:
            merged.append(event)

    merged.sort(key=lambda r: r.date, reverse=True)
    return merged
