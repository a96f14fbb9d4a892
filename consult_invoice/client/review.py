"""Review session: the operator-facing view-model.

The session keeps the records as fetched and derives every status from the
approval store, so the view is rebuilt from ``records + store`` after each
change instead of being patched in place.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from decimal import Decimal

import httpx

from consult_invoice.approvals.store import ApprovalStore
from consult_invoice.billing.csv_export import export_csv, export_filename
from consult_invoice.billing.summary import summarize
from consult_invoice.client.api_client import ConsultationsAPIClient
from consult_invoice.client.demo_data import demo_consultations
from consult_invoice.models import STATUSES, ConsultationRecord, ServiceLine, Source, SourceStatus, Status, Summary
from consult_invoice.periods import Period

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ReviewRow:
    record: ConsultationRecord
    actions: tuple[Status, ...]


@dataclass(frozen=True)
class ReviewView:
    period: Period
    is_demo: bool
    total_count: int
    approved_count: int
    pending_count: int
    rejected_count: int
    invoice_total: Decimal
    breakdown: tuple[ServiceLine, ...]
    rows: tuple[ReviewRow, ...]
    source_status: dict[str, SourceStatus] = field(default_factory=dict)


def available_actions(status: Status) -> tuple[Status, ...]:
    """Every other status; "pending" doubles as reset."""
    return tuple(s for s in ("approved", "rejected", "pending") if s != status)


class ReviewSession:
    def __init__(self, api: ConsultationsAPIClient, store: ApprovalStore, period: Period) -> None:
        self._api = api
        self._store = store
        self._demo_store: ApprovalStore | None = None
        self.period = period
        self.is_demo = False
        self.source_status: dict[str, SourceStatus] = {}
        self._base: list[ConsultationRecord] = []

    @property
    def store(self) -> ApprovalStore:
        # Demo decisions never reach the operator's real approval file
        if self.is_demo and self._demo_store is not None:
            return self._demo_store
        return self._store

    @property
    def records(self) -> list[ConsultationRecord]:
        return self.store.apply(self.period, self._base)

    async def load(self, period: Period | None = None) -> ReviewView:
        """Fetch the period from the API.

        If the API cannot be reached, the labelled demo dataset is loaded
        instead. An API that answers with ``success: false`` raises
        ``ConsultationsUnavailable``.
        """
        if period is not None:
            self.period = period
        try:
            response = await self._api.fetch_consultations(self.period)
        except httpx.HTTPError:
            logger.warning("Consultations API unreachable for %s, showing DEMO data", self.period, exc_info=True)
            self._base = demo_consultations(self.period)
            self._demo_store = ApprovalStore(None)
            self.is_demo = True
            self.source_status = {}
        else:
            self._base = list(response.consultations)
            self._demo_store = None
            self.is_demo = False
            self.source_status = response.source_status.model_dump()
        return self.view()

    async def previous_month(self) -> ReviewView:
        return await self.load(self.period.previous())

    async def next_month(self) -> ReviewView:
        return await self.load(self.period.next())

    def _find(self, record_id: str) -> ConsultationRecord:
        for record in self.records:
            if record.id == record_id:
                return record
        raise KeyError(record_id)

    def set_status(self, record_id: str, status: Status) -> ConsultationRecord:
        if status not in STATUSES:
            raise ValueError(f"unknown status {status!r}")
        record = self._find(record_id)
        self.store.set(self.period, record_id, status)
        return record.with_status(status)

    def _resolve_pending(self, status: Status) -> int:
        pending_ids = [r.id for r in self.records if r.status == "pending"]
        if pending_ids:
            self.store.bulk_set(self.period, pending_ids, status)
        return len(pending_ids)

    def approve_all_pending(self) -> int:
        return self._resolve_pending("approved")

    def reject_all_pending(self) -> int:
        return self._resolve_pending("rejected")

    def filtered(self, status: Status | None = None, source: Source | None = None) -> list[ConsultationRecord]:
        return [
            r
            for r in self.records
            if (status is None or r.status == status) and (source is None or r.source == source)
        ]

    def summary(self) -> Summary:
        return summarize(self.records)

    def export_csv(self) -> str:
        return export_csv(self.records)

    @property
    def export_filename(self) -> str:
        return export_filename(self.period)

    def view(self, status: Status | None = None, source: Source | None = None) -> ReviewView:
        summary = self.summary()
        rows = tuple(ReviewRow(r, available_actions(r.status)) for r in self.filtered(status, source))
        return ReviewView(
            period=self.period,
            is_demo=self.is_demo,
            total_count=len(self._base),
            approved_count=summary.approved_count,
            pending_count=summary.pending_count,
            rejected_count=summary.rejected_count,
            invoice_total=summary.grand_total,
            breakdown=tuple(summary.service_breakdown),
            rows=rows,
            source_status=dict(self.source_status),
        )
