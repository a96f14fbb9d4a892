"""Operator approval decisions, persisted locally per reviewing client."""

from __future__ import annotations

import json
import logging
import os
import tempfile
from collections.abc import Iterable
from pathlib import Path

from consult_invoice.models import STATUSES, ConsultationRecord, Status
from consult_invoice.periods import Period

logger = logging.getLogger(__name__)


def approval_key(period: Period, record_id: str) -> str:
    return f"{period.key}_{record_id}"


class ApprovalStore:
    """Status per ``(period, record id)``, stored as one JSON document.

    The document maps ``"{year}-{month}_{id}"`` to a status string. A missing
    or corrupt document reads as empty. With ``path=None`` the store lives
    only in memory.
    """

    def __init__(self, path: str | Path | None = None) -> None:
        self._path = Path(path) if path is not None else None
        self._entries: dict[str, Status] = self._load()

    def _load(self) -> dict[str, Status]:
        if self._path is None or not self._path.exists():
            return {}
        try:
            raw = json.loads(self._path.read_text(encoding="utf-8") or "{}")
        except (OSError, ValueError):
            logger.warning("Approval store %s unreadable, starting empty", self._path, exc_info=True)
            return {}
        if not isinstance(raw, dict):
            logger.warning("Approval store %s is not a JSON object, starting empty", self._path)
            return {}
        entries = {k: v for k, v in raw.items() if isinstance(k, str) and v in STATUSES}
        if len(entries) != len(raw):
            logger.warning("Dropped %d invalid approval entries from %s", len(raw) - len(entries), self._path)
        return entries

    def _save(self) -> None:
        if self._path is None:
            return
        self._path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp = tempfile.mkstemp(dir=self._path.parent, prefix=".approvals-", suffix=".json")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(self._entries, f, indent=2, sort_keys=True)
            os.replace(tmp, self._path)
        except BaseException:
            Path(tmp).unlink(missing_ok=True)
            raise

    def get(self, period: Period, record_id: str) -> Status | None:
        return self._entries.get(approval_key(period, record_id))

    def set(self, period: Period, record_id: str, status: Status) -> None:
        self._entries[approval_key(period, record_id)] = status
        self._save()

    def bulk_set(self, period: Period, record_ids: Iterable[str], status: Status) -> None:
        """Set `status` for each id in one write.

        Callers pass only the ids they mean to change; "approve all pending"
        passes the ids of records that are currently pending.
        """
        for record_id in record_ids:
            self._entries[approval_key(period, record_id)] = status
        self._save()

    def apply(self, period: Period, records: Iterable[ConsultationRecord]) -> list[ConsultationRecord]:
        """Return copies of `records` with stored statuses overlaid."""
        overlaid = []
        for record in records:
            stored = self.get(period, record.id)
            overlaid.append(record.with_status(stored) if stored else record)
        return overlaid

    def entries(self, period: Period | None = None) -> dict[str, Status]:
        if period is None:
            return dict(self._entries)
        prefix = f"{period.key}_"
        return {k: v for k, v in self._entries.items() if k.startswith(prefix)}

    def __len__(self) -> int:
        return len(self._entries)
