"""Calendar-month periods and the reference clock.

A :class:`Period` is one calendar month. Periods order by ``(year, month)``,
which is the total order the resolver relies on.

The "current period" is never read from server-local time. Callers inject a
:data:`Clock`; :func:`reference_clock` builds the default one from an IANA
timezone (see :class:`budget_ledger.config.LedgerConfig`).
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from datetime import UTC, datetime
from zoneinfo import ZoneInfo

from .errors import ValidationError


@dataclass(frozen=True, slots=True, order=True)
class Period:
    """A ``(year, month)`` pair; field order defines the sort order."""

    year: int
    month: int

    def __post_init__(self) -> None:
        if not 1 <= self.month <= 12:
            raise ValidationError({"month": "Month must be between 1 and 12"})

    def next(self) -> Period:
        if self.month == 12:
            return Period(self.year + 1, 1)
        return Period(self.year, self.month + 1)

    def previous(self) -> Period:
        if self.month == 1:
            return Period(self.year - 1, 12)
        return Period(self.year, self.month - 1)

    def __str__(self) -> str:
        return f"{self.month:02d}/{self.year}"


type Clock = Callable[[], Period]
"""Zero-argument callable returning the reference current period."""


def reference_clock(tz_name: str) -> Clock:
    """Return a clock reading the wall clock in ``tz_name``."""

    tz = ZoneInfo(tz_name)

    def _now() -> Period:
        now = datetime.now(UTC).astimezone(tz)
        return Period(now.year, now.month)

    return _now


def fixed_clock(period: Period) -> Clock:
    """Return a clock frozen at ``period`` (tests, backfills)."""

    return lambda: period


def ensure_not_future(period: Period, current: Period) -> None:
    """Reject periods after ``current``.

    A past year is accepted for any month; only the current year is checked
    at month granularity.
    """

    if period.year > current.year:
        raise ValidationError({"year": f"Year cannot be later than {current.year}"})
    if period.year < current.year:
        return
    if period.month > current.month:
        raise ValidationError(
            {"month": "Budget entries cannot be set for future months in the current year"}
        )


__all__ = [
    "Period",
    "Clock",
    "reference_clock",
    "fixed_clock",
    "ensure_not_future",
]
