from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass

from consult_invoice.billing.merge import merge
from consult_invoice.models import (
    ConsultationRecord,
    ConsultationsResponse,
    PeriodInfo,
    SourceCounts,
    SourceResult,
    SourceStatusInfo,
)
from consult_invoice.periods import Period
from consult_invoice.services.ghl_calendar import GHLCalendarSource
from consult_invoice.services.stripe_charges import StripeChargeSource

logger = logging.getLogger(__name__)


@dataclass
class Reconciliation:
    period: Period
    consultations: list[ConsultationRecord]
    stripe: SourceResult
    gohighlevel: SourceResult

    def to_response(self) -> ConsultationsResponse:
        # Per-source counts are pre-dedup; total is the merged list
        return ConsultationsResponse(
            period=PeriodInfo(
                year=self.period.year,
                month=self.period.month,
                start_date=self.period.start,
                end_date=self.period.end,
            ),
            consultations=self.consultations,
            sources=SourceCounts(
                stripe=len(self.stripe.records),
                gohighlevel=len(self.gohighlevel.records),
                total=len(self.consultations),
            ),
            source_status=SourceStatusInfo(
                stripe=self.stripe.status,
                gohighlevel=self.gohighlevel.status,
            ),
        )


class ConsultationReconciler:
    """Fetches both sources concurrently and merges them for one period."""

    def __init__(self, stripe: StripeChargeSource, ghl: GHLCalendarSource) -> None:
        self._stripe = stripe
        self._ghl = ghl

    async def reconcile(self, period: Period) -> Reconciliation:
        paid, events = await asyncio.gather(
            self._stripe.fetch_paid(period.start, period.end),
            self._ghl.fetch_events(period.start, period.end),
        )
        for result in (paid, events):
            if not result.ok:
                logger.warning("%s %s for %s: %s", result.source, result.status, period, result.error)
        consultations = merge(paid.records, events.records)
        logger.info(
            "Reconciled %s: %d stripe (%s) + %d gohighlevel (%s) -> %d",
            period,
            len(paid.records),
            paid.status,
            len(events.records),
            events.status,
            len(consultations),
        )
        return Reconciliation(period, consultations, paid, events)

    def source_checks(self) -> dict[str, str]:
        return {
            "stripe": "configured" if self._stripe.configured else "not_configured",
            "gohighlevel": "configured" if self._ghl.configured else "not_configured",
        }

    async def close(self) -> None:
        await asyncio.gather(self._stripe.close(), self._ghl.close())
