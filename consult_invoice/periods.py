from __future__ import annotations

import calendar
from dataclasses import dataclass
from datetime import datetime, timezone

MIN_YEAR = 1970
MAX_YEAR = 9999


class InvalidPeriodError(ValueError):
    """Raised when a year/month query parameter cannot be interpreted."""


@dataclass(frozen=True)
class Period:
    """A calendar month, used both as a fetch window and an approval partition."""

    year: int
    month: int

    def __post_init__(self) -> None:
        if not MIN_YEAR <= self.year <= MAX_YEAR:
            raise InvalidPeriodError(f"year must be between {MIN_YEAR} and {MAX_YEAR}")
        if not 1 <= self.month <= 12:
            raise InvalidPeriodError("month must be between 1 and 12")

    @classmethod
    def current(cls, now: datetime | None = None) -> Period:
        now = now or datetime.now(timezone.utc)
        return cls(now.year, now.month)

    @classmethod
    def from_query(
        cls, year: str | None, month: str | None, now: datetime | None = None
    ) -> Period:
        """Build a period from raw query values.

        Either value missing falls back to the current month; a value that
        is present but malformed raises ``InvalidPeriodError``.
        """
        if not year or not month:
            return cls.current(now)
        try:
            return cls(int(year), int(month))
        except ValueError as exc:
            if isinstance(exc, InvalidPeriodError):
                raise
            raise InvalidPeriodError(f"invalid period year={year!r} month={month!r}") from exc

    @property
    def start(self) -> datetime:
        return datetime(self.year, self.month, 1, tzinfo=timezone.utc)

    @property
    def end(self) -> datetime:
        """Last second of the month, inclusive."""
        last_day = calendar.monthrange(self.year, self.month)[1]
        return datetime(self.year, self.month, last_day, 23, 59, 59, tzinfo=timezone.utc)

    @property
    def key(self) -> str:
        return f"{self.year}-{self.month}"

    def previous(self) -> Period:
        if self.month == 1:
            return Period(self.year - 1, 12)
        return Period(self.year, self.month - 1)

    def next(self) -> Period:
        if self.month == 12:
            return Period(self.year + 1, 1)
        return Period(self.year, self.month + 1)

    def __str__(self) -> str:
        return f"{self.year}-{self.month:02d}"
