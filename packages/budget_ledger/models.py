"""Domain types for the budget ledger.

The ledger exposes plain frozen dataclasses rather than ORM rows so callers
never hold live session state. Goal series are addressed by a
:data:`GoalKey`: either a single category or the main budget of one
``(owner, type)`` bucket.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from enum import StrEnum

from .periods import Period


class BudgetType(StrEnum):
    INCOME = "Income"
    EXPENSES = "Expenses"


@dataclass(frozen=True, slots=True)
class BudgetCategory:
    budget_category_id: str
    owner_id: str
    type: BudgetType
    name: str
    category_order: int


@dataclass(frozen=True, slots=True)
class CategoryKey:
    """Goal series of one budget category."""

    budget_category_id: str


@dataclass(frozen=True, slots=True)
class MainBudgetKey:
    """Aggregate goal series of a whole Income or Expenses bucket."""

    owner_id: str
    type: BudgetType


type GoalKey = CategoryKey | MainBudgetKey


@dataclass(frozen=True, slots=True)
class GoalRecord:
    """One explicit goal in a sparse series."""

    period: Period
    goal: Decimal

    @property
    def year(self) -> int:
        return self.period.year

    @property
    def month(self) -> int:
        return self.period.month


__all__ = [
    "BudgetType",
    "BudgetCategory",
    "CategoryKey",
    "MainBudgetKey",
    "GoalKey",
    "GoalRecord",
]
