"""Budget overview read model and main-budget provisioning.

``budget_overview`` assembles what a budget page shows for one period: for
each type, the main-budget history and effective goal, then every category in
display order with its history and effective goal. Category goals for the
owner are loaded in one query and resolved in memory with
:class:`~budget_ledger.resolver.GoalSeries`.
"""

from __future__ import annotations

from collections import defaultdict
from decimal import Decimal
from typing import Any, TypedDict

from db.models.budgets import BudgetCategoryRow, BudgetGoalRow
from sqlalchemy import select

from .ledger import GoalLedger
from .logging_setup import get_logger
from .models import BudgetType, GoalRecord
from .periods import Period
from .resolver import GoalSeries
from .series import load_history, row_to_record

logger = get_logger("budget_ledger.overview")

DEFAULT_MAIN_GOAL = Decimal("2000.00")


class GoalDict(TypedDict):
    goal: Decimal
    month: int
    year: int


class CategoryView(TypedDict):
    budget_category_id: str
    type: str
    name: str
    category_order: int
    goals: list[GoalDict]
    current_goal: GoalDict | None


class BucketView(TypedDict):
    goals: list[GoalDict]
    current_goal: GoalDict | None
    categories: list[CategoryView]


class BudgetOverview(TypedDict):
    period: dict[str, int]
    Income: BucketView
    Expenses: BucketView


def _goal_dict(rec: GoalRecord | None) -> GoalDict | None:
    if rec is None:
        return None
    return {"goal": rec.goal, "month": rec.month, "year": rec.year}


def _history(series: GoalSeries) -> list[GoalDict]:
    return [{"goal": r.goal, "month": r.month, "year": r.year} for r in series]


def _category_series(ledger: GoalLedger) -> dict[str, GoalSeries]:
    rows = ledger.session.execute(
        select(BudgetGoalRow)
        .join(
            BudgetCategoryRow,
            BudgetCategoryRow.budget_category_id == BudgetGoalRow.budget_category_id,
        )
        .where(BudgetCategoryRow.owner_id == ledger.owner_id)
    ).scalars()
    grouped: dict[str, list[GoalRecord]] = defaultdict(list)
    for row in rows:
        grouped[row.budget_category_id].append(row_to_record(row))
    return {cid: GoalSeries(recs) for cid, recs in grouped.items()}


def budget_overview(ledger: GoalLedger, period: Period) -> BudgetOverview:
    """Return both buckets with histories and the goals effective at ``period``."""

    by_category = _category_series(ledger)
    buckets: dict[str, Any] = {}
    for btype in BudgetType:
        main = GoalSeries(load_history(ledger.session, ledger.key_for(None, btype)))
        categories: list[CategoryView] = []
        for cat in ledger.categories.list_categories(btype):
            series = by_category.get(cat.budget_category_id, GoalSeries())
            categories.append(
                {
                    "budget_category_id": cat.budget_category_id,
                    "type": cat.type.value,
                    "name": cat.name,
                    "category_order": cat.category_order,
                    "goals": _history(series),
                    "current_goal": _goal_dict(series.resolve(period)),
                }
            )
        buckets[btype.value] = {
            "goals": _history(main),
            "current_goal": _goal_dict(main.resolve(period)),
            "categories": categories,
        }
    logger.debug("built overview for period %s", period)
    return {
        "period": {"month": period.month, "year": period.year},
        "Income": buckets["Income"],
        "Expenses": buckets["Expenses"],
    }


def provision_main_budgets(ledger: GoalLedger, initial_goal: Any = DEFAULT_MAIN_GOAL) -> list[str]:
    """Seed both main budgets at the current period when they have no history.

    Returns the types that were seeded; calling again seeds nothing.
    """

    current = ledger.clock()
    seeded: list[str] = []
    for btype in BudgetType:
        key = ledger.key_for(None, btype)
        if load_history(ledger.session, key):
            continue
        ledger.set_goal(None, btype, current, initial_goal)
        seeded.append(btype.value)
    if seeded:
        logger.info("provisioned main budgets %s at %s", seeded, current)
    return seeded


__all__ = [
    "GoalDict",
    "CategoryView",
    "BucketView",
    "BudgetOverview",
    "DEFAULT_MAIN_GOAL",
    "budget_overview",
    "provision_main_budgets",
]
