"""Public API for the ``budget_ledger`` package.

:class:`BudgetLedger` binds the category store, goal ledger and ordering
manager to one owner and one SQLAlchemy session, and exposes every ledger
operation in one place. The caller owns the session's transaction (see
``db.client.session_scope``); nothing here commits.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence
from typing import Any

from sqlalchemy.orm import Session

from .aggregation import Progress, category_progress, main_budget_progress
from .categories import CategoryStore, coerce_type
from .config import LedgerConfig
from .errors import ValidationError
from .ledger import GoalLedger
from .models import BudgetCategory, BudgetType, GoalKey, GoalRecord
from .ordering import OrderingManager
from .overview import DEFAULT_MAIN_GOAL, BudgetOverview, budget_overview, provision_main_budgets
from .periods import Clock, Period
from .schemas import CategoryPayload, GoalPayload, NewCategoryPayload, parse_payload


class BudgetLedger:
    def __init__(
        self,
        session: Session,
        *,
        owner_id: str,
        config: LedgerConfig | None = None,
        clock: Clock | None = None,
    ) -> None:
        self.config = config or LedgerConfig()
        self.categories = CategoryStore(session, owner_id=owner_id, config=self.config)
        self.goals = GoalLedger(
            session,
            owner_id=owner_id,
            categories=self.categories,
            config=self.config,
            clock=clock,
        )
        self.ordering = OrderingManager(session, owner_id=owner_id)

    # ---- categories -------------------------------------------------------

    def create_category(
        self,
        type: BudgetType | str,
        name: str,
        *,
        goal: Any = None,
        period: Period | None = None,
    ) -> str:
        """Create a category and return its id.

        With ``goal`` the category is created together with its first goal at
        ``period`` (default: the current period); nothing is written when the
        goal or period is rejected.
        """

        if goal is None:
            if period is not None:
                raise ValidationError({"goal": "Goal is required when a period is given"})
            return self.categories.create_category(type, name)
        return self.goals.create_category_with_goal(type, name, goal, period)

    def submit_category(self, payload: Mapping[str, Any]) -> str:
        """Apply a new-category wire payload (category plus its first goal)."""

        data = parse_payload(NewCategoryPayload, payload)
        return self.goals.create_category_with_goal(data.type, data.name, data.goal, data.period)

    def rename_category(self, budget_category_id: str, new_name: str) -> None:
        self.categories.rename_category(budget_category_id, new_name)

    def delete_category(self, budget_category_id: str) -> None:
        self.categories.delete_category(budget_category_id)

    def get_category(self, budget_category_id: str) -> BudgetCategory:
        return self.categories.get_category(budget_category_id)

    def list_categories(self, type: BudgetType | str) -> list[BudgetCategory]:
        return self.categories.list_categories(type)

    def reorder(self, type: BudgetType | str, ordered_ids: Sequence[str]) -> None:
        self.ordering.reorder(type, ordered_ids)

    def update_category(self, payload: Mapping[str, Any]) -> None:
        """Apply a category wire payload (rename only; type is immutable)."""

        data = parse_payload(CategoryPayload, payload)
        cid = str(data.budget_category_id)
        current = self.categories.get_category(cid)
        if data.type is not current.type:
            raise ValidationError({"type": "Budget category type cannot be changed"})
        if data.category_order is not None and data.category_order != current.category_order:
            raise ValidationError(
                {"category_order": "Category order changes must go through reorder"}
            )
        if data.name is None:
            raise ValidationError({"name": "Budget category name cannot be null"})
        self.categories.rename_category(cid, data.name)

    # ---- goals ------------------------------------------------------------

    def key_for(self, budget_category_id: str | None, type: BudgetType | str) -> GoalKey:
        return self.goals.key_for(budget_category_id, type)

    def set_goal(
        self,
        budget_category_id: str | None,
        type: BudgetType | str,
        period: Period,
        amount: Any,
    ) -> None:
        self.goals.set_goal(budget_category_id, type, period, amount)

    def submit_goal(
        self, payload: Mapping[str, Any], *, type: BudgetType | str | None = None
    ) -> None:
        """Apply a goal wire payload.

        ``type`` is required for main-budget payloads (null
        ``budget_category_id``); for category payloads it defaults to the
        category's own type.
        """

        data = parse_payload(GoalPayload, payload)
        if data.budget_category_id is None:
            if type is None:
                raise ValidationError({"type": "Type is required for main budget goals"})
            self.goals.set_goal(None, type, data.period, data.goal)
            return
        cid = str(data.budget_category_id)
        btype = coerce_type(type) if type is not None else self.categories.get_category(cid).type
        self.goals.set_goal(cid, btype, data.period, data.goal)

    def get_goal_history(self, key: GoalKey) -> list[GoalRecord]:
        return self.goals.get_goal_history(key)

    def resolve(self, key: GoalKey, period: Period) -> GoalRecord | None:
        return self.goals.resolve(key, period)

    # ---- read paths -------------------------------------------------------

    def category_progress(
        self, budget_category_id: str, period: Period, transaction_sum: Any
    ) -> Progress:
        return category_progress(self.goals, budget_category_id, period, transaction_sum)

    def main_budget_progress(
        self, type: BudgetType | str, period: Period, category_sums: Iterable[Any]
    ) -> Progress:
        return main_budget_progress(self.goals, type, period, category_sums)

    def overview(self, period: Period | None = None) -> BudgetOverview:
        return budget_overview(self.goals, period or self.goals.clock())

    def provision_main_budgets(self, initial_goal: Any = DEFAULT_MAIN_GOAL) -> list[str]:
        return provision_main_budgets(self.goals, initial_goal)


__all__ = ["BudgetLedger"]
