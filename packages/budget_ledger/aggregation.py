"""Aggregation engine: actual-vs-goal progress for a period.

Transaction sums are supplied by the caller (already filtered to the category
or bucket and period). :func:`compute_progress` is pure arithmetic; the other
helpers resolve the goal first and then delegate to it.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from decimal import Decimal
from typing import Any

from .categories import coerce_type
from .ledger import GoalLedger
from .models import BudgetType, CategoryKey
from .periods import Period
from .resolver import ZERO, GoalSeries
from .series import to_cents

INFINITE_PERCENT = Decimal("Infinity")


@dataclass(frozen=True, slots=True)
class Progress:
    """Progress of ``actual`` against ``goal`` for one period.

    ``has_goal`` is False when no goal applied at the period (``goal`` is then
    zero). ``percentage`` is ``Infinity`` when the goal is zero but money moved.
    """

    goal: Decimal
    actual: Decimal
    delta: Decimal
    percentage: Decimal
    has_goal: bool = True


def compute_progress(goal: Decimal | None, actual: Any) -> Progress:
    g = ZERO if goal is None else to_cents(goal)
    a = to_cents(actual)
    if g == 0:
        pct = ZERO if a == 0 else INFINITE_PERCENT
    else:
        pct = a / g * 100
    return Progress(goal=g, actual=a, delta=a - g, percentage=pct, has_goal=goal is not None)


def category_progress(
    ledger: GoalLedger, budget_category_id: str, period: Period, transaction_sum: Any
) -> Progress:
    rec = ledger.resolve(CategoryKey(budget_category_id), period)
    return compute_progress(rec.goal if rec is not None else None, transaction_sum)


def main_budget_progress(
    ledger: GoalLedger,
    type: BudgetType | str,
    period: Period,
    category_sums: Iterable[Any],
) -> Progress:
    """Compare the summed category activity of ``type`` with its main-budget goal."""

    btype = coerce_type(type)
    total = sum((to_cents(s) for s in category_sums), ZERO)
    rec = ledger.resolve(ledger.key_for(None, btype), period)
    return compute_progress(rec.goal if rec is not None else None, total)


def series_progress(
    series: GoalSeries, sums_by_period: Mapping[Period, Any]
) -> dict[Period, Progress]:
    """Progress for many periods of one loaded series (dashboard ranges)."""

    out: dict[Period, Progress] = {}
    for period in sorted(sums_by_period):
        rec = series.resolve(period)
        out[period] = compute_progress(
            rec.goal if rec is not None else None, sums_by_period[period]
        )
    return out


__all__ = [
    "Progress",
    "INFINITE_PERCENT",
    "compute_progress",
    "category_progress",
    "main_budget_progress",
    "series_progress",
]
