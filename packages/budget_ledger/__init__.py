"""Public interface for the ``budget_ledger`` package.

Re-exports the :class:`BudgetLedger` facade, the component classes, domain
types and error types. There is no runtime logic here, only symbol
re-exports.
"""

from .aggregation import Progress, compute_progress
from .api import BudgetLedger
from .categories import CategoryStore
from .config import LedgerConfig
from .errors import ConflictError, LedgerError, NotFoundError, ValidationError
from .ledger import GoalLedger
from .models import (
    BudgetCategory,
    BudgetType,
    CategoryKey,
    GoalKey,
    GoalRecord,
    MainBudgetKey,
)
from .ordering import OrderingManager
from .periods import Clock, Period, fixed_clock, reference_clock
from .resolver import GoalSeries, resolve_goal

__all__ = [
    # API
    "BudgetLedger",
    "CategoryStore",
    "GoalLedger",
    "OrderingManager",
    "GoalSeries",
    "resolve_goal",
    "compute_progress",
    # Models / types
    "BudgetType",
    "BudgetCategory",
    "CategoryKey",
    "MainBudgetKey",
    "GoalKey",
    "GoalRecord",
    "Period",
    "Clock",
    "Progress",
    "LedgerConfig",
    "fixed_clock",
    "reference_clock",
    # Errors
    "LedgerError",
    "ValidationError",
    "ConflictError",
    "NotFoundError",
]
