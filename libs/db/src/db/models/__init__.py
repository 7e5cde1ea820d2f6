"""Shared SQLAlchemy models registry for the workspace database.

Currently includes the budget ledger models used by ``budget_ledger``.
"""

from .budgets import Base, BudgetCategoryRow, BudgetGoalRow, MainBudgetGoalRow

__all__ = [
    "Base",
    "BudgetCategoryRow",
    "BudgetGoalRow",
    "MainBudgetGoalRow",
]
