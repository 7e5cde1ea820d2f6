"""db: shared database library (SQLAlchemy/Alembic).

Public exports
--------------
- ``Base`` and ``metadata`` for Alembic autogenerate/targeting
- ORM models in ``db.models.budgets`` (re-exported for convenience)
- Engine/session helpers in ``db.client``
"""

from __future__ import annotations

from .models.budgets import Base, BudgetCategoryRow, BudgetGoalRow, MainBudgetGoalRow

# Re-export SQLAlchemy metadata for Alembic's env.py
metadata = Base.metadata

__all__ = [
    "Base",
    "metadata",
    "BudgetCategoryRow",
    "BudgetGoalRow",
    "MainBudgetGoalRow",
]
