"""Period resolver: backward-nearest lookup over a sparse goal series.

A goal set for March applies to April, May, ... until a later goal is set, so
the effective goal at period ``P`` is the record with the greatest period
``<= P``. When no such record exists the result is ``None``, meaning "no goal
configured" (not an error).

Two entry points share that rule:

- :func:`resolve_goal` asks the database for the single nearest row
  (``ORDER BY year DESC, month DESC LIMIT 1`` over the primary-key index).
- :class:`GoalSeries` holds one loaded history in period order and answers
  many queries by binary search; read paths that sample a range of months
  (dashboards, the budget overview) load once and resolve in memory.
"""

from __future__ import annotations

from bisect import bisect_right
from collections.abc import Iterable, Iterator
from decimal import Decimal

from sqlalchemy import and_, or_, select
from sqlalchemy.orm import Session

from .logging_setup import get_logger
from .models import GoalKey, GoalRecord
from .periods import Period
from .series import row_to_record, series_model, series_where

logger = get_logger("budget_ledger.resolver")

ZERO = Decimal("0.00")


class GoalSeries:
    """An in-memory, period-sorted goal history with O(log n) lookups."""

    __slots__ = ("_periods", "_records")

    def __init__(self, records: Iterable[GoalRecord] = ()) -> None:
        by_period: dict[Period, GoalRecord] = {}
        for rec in records:
            # Last write wins for duplicate periods, mirroring the store's upsert.
            by_period[rec.period] = rec
        self._records: list[GoalRecord] = [by_period[p] for p in sorted(by_period)]
        self._periods: list[Period] = [r.period for r in self._records]

    def __len__(self) -> int:
        return len(self._records)

    def __iter__(self) -> Iterator[GoalRecord]:
        return iter(self._records)

    def records(self) -> list[GoalRecord]:
        return list(self._records)

    def upsert(self, record: GoalRecord) -> None:
        i = bisect_right(self._periods, record.period)
        if i and self._periods[i - 1] == record.period:
            self._records[i - 1] = record
            return
        self._periods.insert(i, record.period)
        self._records.insert(i, record)

    def resolve(self, period: Period) -> GoalRecord | None:
        i = bisect_right(self._periods, period)
        return self._records[i - 1] if i else None

    def goal_at(self, period: Period) -> Decimal:
        rec = self.resolve(period)
        return rec.goal if rec is not None else ZERO


def resolve_goal(session: Session, key: GoalKey, period: Period) -> GoalRecord | None:
    """Return the record with the greatest period ``<= period`` for ``key``."""

    model = series_model(key)
    at_or_before = or_(
        model.year < period.year,
        and_(model.year == period.year, model.month <= period.month),
    )
    row = (
        session.execute(
            select(model)
            .where(*series_where(key), at_or_before)
            .order_by(model.year.desc(), model.month.desc())
            .limit(1)
        )
        .scalars()
        .first()
    )
    if row is None:
        logger.debug("no goal at or before %s for %r", period, key)
        return None
    return row_to_record(row)


__all__ = ["GoalSeries", "resolve_goal", "ZERO"]
