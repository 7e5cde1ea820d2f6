"""Goal ledger: sparse monthly goal series with upsert-by-period.

Each category, and each owner's Income/Expenses main budget, carries a series
holding at most one goal per period. ``set_goal`` overwrites the record for a
period when one exists and inserts it otherwise, so repeating a call leaves
the history unchanged. History is never pruned: records disappear only when
their category is deleted.

Writes use the dialect's native ``INSERT ... ON CONFLICT DO UPDATE`` where
available (PostgreSQL, SQLite), which makes concurrent writers to the same
``(key, period)`` last-write-wins by commit order.
"""

from __future__ import annotations

from decimal import Decimal, InvalidOperation
from typing import Any

from sqlalchemy import func, select
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.orm import Session

from .categories import CategoryStore, coerce_type
from .config import LedgerConfig
from .errors import NotFoundError, ValidationError
from .logging_setup import get_logger
from .models import BudgetType, CategoryKey, GoalKey, GoalRecord, MainBudgetKey
from .periods import Clock, Period, ensure_not_future, reference_clock
from .resolver import GoalSeries, resolve_goal
from .series import CENTS, load_history, series_model, series_where, to_cents

logger = get_logger("budget_ledger.ledger")


def validate_goal(amount: Any, config: LedgerConfig) -> Decimal:
    """Return ``amount`` as a cent-precision ``Decimal`` or raise ``ValidationError``."""

    if isinstance(amount, bool):
        raise ValidationError({"goal": "Goal must be a valid currency amount"})
    try:
        d = Decimal(str(amount).strip())
    except (InvalidOperation, ValueError):
        raise ValidationError({"goal": "Goal must be a valid currency amount"}) from None
    if not d.is_finite():
        raise ValidationError({"goal": "Goal must be a valid currency amount"})
    if d < 0:
        raise ValidationError({"goal": "Goal must be $0 or greater"})
    if d > config.max_goal:
        raise ValidationError({"goal": "Goal exceeds the maximum allowed value"})
    if d != d.quantize(CENTS):
        raise ValidationError({"goal": "Goal must have at most 2 decimal places"})
    return to_cents(d)


def validate_period(period: Period, *, current: Period, config: LedgerConfig) -> None:
    if period.year < config.min_year:
        raise ValidationError({"year": f"Year must be {config.min_year} or later"})
    ensure_not_future(period, current)


class GoalLedger:
    """Goal series for one owner's categories and main budgets."""

    def __init__(
        self,
        session: Session,
        *,
        owner_id: str,
        categories: CategoryStore | None = None,
        config: LedgerConfig | None = None,
        clock: Clock | None = None,
    ) -> None:
        self.session = session
        self.owner_id = owner_id
        self.config = config or LedgerConfig()
        self.categories = categories or CategoryStore(
            session, owner_id=owner_id, config=self.config
        )
        self.clock = clock or reference_clock(self.config.reference_tz)

    # ---- keys -------------------------------------------------------------

    def key_for(self, budget_category_id: str | None, type: BudgetType | str) -> GoalKey:
        """Return the series key; ``None`` selects the main budget of ``type``."""

        btype = coerce_type(type)
        if budget_category_id is None:
            return MainBudgetKey(owner_id=self.owner_id, type=btype)
        return CategoryKey(budget_category_id=budget_category_id)

    def _ensure_owned(self, key: GoalKey) -> None:
        if isinstance(key, CategoryKey):
            self.categories.get_category(key.budget_category_id)
        elif key.owner_id != self.owner_id:
            raise NotFoundError(
                {"owner_id": "Main budget does not exist or does not belong to the user"}
            )

    # ---- writes -----------------------------------------------------------

    def set_goal(
        self,
        budget_category_id: str | None,
        type: BudgetType | str,
        period: Period,
        amount: Any,
    ) -> None:
        """Upsert the goal of ``period`` in the selected series.

        Raises
        ------
        ValidationError
            Future period, year before ``config.min_year``, out-of-range
            amount, or a category whose type differs from ``type``.
        NotFoundError
            ``budget_category_id`` is not one of the owner's categories.
        """

        btype = coerce_type(type)
        goal = validate_goal(amount, self.config)
        validate_period(period, current=self.clock(), config=self.config)

        key = self.key_for(budget_category_id, btype)
        if isinstance(key, CategoryKey):
            # Row lock: a concurrent delete either finishes first (NotFoundError
            # here) or waits for this write and cascades it away.
            category = self.categories.get_category(key.budget_category_id, lock=True)
            if category.type is not btype:
                raise ValidationError(
                    {"type": f"Budget category is of type {category.type.value}, not {btype.value}"}
                )

        self._upsert(key, period, goal)
        logger.info("set goal key=%r period=%s goal=%s", key, period, goal)

    def create_category_with_goal(
        self,
        type: BudgetType | str,
        name: str,
        amount: Any,
        period: Period | None = None,
    ) -> str:
        """Create a category together with its first goal and return its id.

        The goal and period are validated before the category row is written,
        so a rejected goal leaves nothing behind. ``period`` defaults to the
        current period.
        """

        btype = coerce_type(type)
        goal = validate_goal(amount, self.config)
        current = self.clock()
        target = period or current
        validate_period(target, current=current, config=self.config)

        budget_category_id = self.categories.create_category(btype, name)
        self._upsert(CategoryKey(budget_category_id), target, goal)
        logger.info(
            "set initial goal category=%s period=%s goal=%s", budget_category_id, target, goal
        )
        return budget_category_id

    def _key_values(self, key: GoalKey) -> dict[str, Any]:
        if isinstance(key, CategoryKey):
            return {"budget_category_id": key.budget_category_id}
        return {"owner_id": key.owner_id, "type": key.type.value}

    def _upsert(self, key: GoalKey, period: Period, goal: Decimal) -> None:
        model = series_model(key)
        values = {**self._key_values(key), "year": period.year, "month": period.month, "goal": goal}
        dialect = self.session.get_bind().dialect.name

        if dialect in ("postgresql", "sqlite"):
            insert = pg_insert if dialect == "postgresql" else sqlite_insert
            stmt = insert(model).values(values)
            stmt = stmt.on_conflict_do_update(
                index_elements=list(model.__table__.primary_key.columns),
                set_={"goal": stmt.excluded.goal, "updated_at": func.now()},
            )
            self.session.execute(stmt)
            return

        existing = (
            self.session.execute(
                select(model)
                .where(*series_where(key), model.year == period.year, model.month == period.month)
                .with_for_update()
            )
            .scalars()
            .first()
        )
        if existing is None:
            self.session.add(model(**values))
        else:
            existing.goal = goal
            existing.updated_at = func.now()
        self.session.flush()

    # ---- reads ------------------------------------------------------------

    def get_goal_history(self, key: GoalKey) -> list[GoalRecord]:
        """Return the series ascending by ``(year, month)``; a fresh list each call."""

        self._ensure_owned(key)
        return load_history(self.session, key)

    def series(self, key: GoalKey) -> GoalSeries:
        return GoalSeries(self.get_goal_history(key))

    def resolve(self, key: GoalKey, period: Period) -> GoalRecord | None:
        """Return the effective goal at ``period`` or ``None`` when none applies."""

        self._ensure_owned(key)
        return resolve_goal(self.session, key, period)


__all__ = ["GoalLedger", "validate_goal", "validate_period"]
