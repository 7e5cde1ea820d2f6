"""Mapping from a goal key to its backing table.

Category series live in ``budget_goals``; main-budget series in
``main_budget_goals``. Both share the ``(year, month, goal)`` columns, so the
ledger and the resolver address either one through :func:`series_model` and
:func:`series_where`.
"""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal
from typing import Any

from db.models.budgets import BudgetGoalRow, MainBudgetGoalRow
from sqlalchemy import select
from sqlalchemy.orm import Session

from .models import CategoryKey, GoalKey, GoalRecord, MainBudgetKey
from .periods import Period

type SeriesModel = type[BudgetGoalRow] | type[MainBudgetGoalRow]

CENTS = Decimal("0.01")


def to_cents(value: Any) -> Decimal:
    return Decimal(str(value)).quantize(CENTS, rounding=ROUND_HALF_UP)


def series_model(key: GoalKey) -> SeriesModel:
    if isinstance(key, CategoryKey):
        return BudgetGoalRow
    if isinstance(key, MainBudgetKey):
        return MainBudgetGoalRow
    raise TypeError(f"unsupported goal key: {key!r}")


def series_where(key: GoalKey) -> list[Any]:
    """Return WHERE clauses selecting every row of ``key``'s series."""

    if isinstance(key, CategoryKey):
        return [BudgetGoalRow.budget_category_id == key.budget_category_id]
    if isinstance(key, MainBudgetKey):
        return [
            MainBudgetGoalRow.owner_id == key.owner_id,
            MainBudgetGoalRow.type == key.type.value,
        ]
    raise TypeError(f"unsupported goal key: {key!r}")


def row_to_record(row: BudgetGoalRow | MainBudgetGoalRow) -> GoalRecord:
    return GoalRecord(period=Period(row.year, row.month), goal=to_cents(row.goal))


def load_history(session: Session, key: GoalKey) -> list[GoalRecord]:
    """Return every record of ``key``'s series, ascending by ``(year, month)``."""

    model = series_model(key)
    rows = (
        session.execute(
            select(model).where(*series_where(key)).order_by(model.year, model.month)
        )
        .scalars()
        .all()
    )
    return [row_to_record(r) for r in rows]


__all__ = [
    "CENTS",
    "to_cents",
    "series_model",
    "series_where",
    "row_to_record",
    "load_history",
]
