"""Category store: budget category records and their naming rules.

This module owns the ``budget_categories`` table for one owner. Validation is
authoritative here; the wire schemas in :mod:`budget_ledger.schemas` repeat
the same rules only to produce early, field-keyed feedback.

Exports
-------
- ``CategoryStore``: create/rename/delete/lookup/list for one owner.
- ``normalize_name(...)``, ``name_key(...)`` and ``validate_name(...)``:
  helpers shared with the wire schemas.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass

from db.models.budgets import BudgetCategoryRow, BudgetGoalRow
from sqlalchemy import delete, func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from .config import LedgerConfig
from .errors import ConflictError, NotFoundError, ValidationError
from .logging_setup import get_logger
from .models import BudgetCategory, BudgetType

logger = get_logger("budget_ledger.categories")

_NOT_FOUND_MESSAGE = (
    "Budget category does not exist based on the provided ID or does not belong to the user"
)

# ---------------------------
# Name normalization/validation
# ---------------------------


def normalize_name(name: str) -> str:
    """Return ``name`` trimmed of surrounding whitespace; case is preserved."""

    return name.strip()


def name_key(name: str) -> str:
    """Return the case-folded key that name uniqueness is enforced on."""

    return normalize_name(name).casefold()


@dataclass(frozen=True, slots=True)
class NameValidation:
    ok: bool
    reason: str | None = None
    reserved: bool = False


def validate_name(name: str, config: LedgerConfig) -> NameValidation:
    """Check length bounds and reserved words on the trimmed name.

    Rules
    -----
    - Reserved words (``income``, ``expenses``, ``null`` by default) are
      rejected case-insensitively.
    - Trimmed length must lie within ``config.name_min_len..name_max_len``.
    """

    n = normalize_name(name)
    if n.casefold() in config.reserved_names:
        return NameValidation(
            False, "Category name cannot be 'Income', 'Expenses', or 'null'", reserved=True
        )
    if len(n) < config.name_min_len:
        return NameValidation(False, f"Name must be at least {config.name_min_len} character")
    if len(n) > config.name_max_len:
        return NameValidation(False, f"Name must be at most {config.name_max_len} characters")
    return NameValidation(True, None)


def coerce_type(value: BudgetType | str) -> BudgetType:
    try:
        return BudgetType(value)
    except ValueError:
        raise ValidationError({"type": "Type must be either 'Income' or 'Expenses'"}) from None


def _row_to_category(row: BudgetCategoryRow) -> BudgetCategory:
    return BudgetCategory(
        budget_category_id=row.budget_category_id,
        owner_id=row.owner_id,
        type=BudgetType(row.type),
        name=row.name,
        category_order=row.category_order,
    )


# ---------------------------
# Store
# ---------------------------


class CategoryStore:
    """Budget categories owned by ``owner_id``.

    The caller owns the transaction: operations flush but never commit.
    """

    def __init__(
        self,
        session: Session,
        *,
        owner_id: str,
        config: LedgerConfig | None = None,
    ) -> None:
        self.session = session
        self.owner_id = owner_id
        self.config = config or LedgerConfig()

    # ---- lookups ----------------------------------------------------------

    def _find_row(self, budget_category_id: str, *, lock: bool = False) -> BudgetCategoryRow:
        stmt = select(BudgetCategoryRow).where(
            BudgetCategoryRow.budget_category_id == budget_category_id,
            BudgetCategoryRow.owner_id == self.owner_id,
        )
        if lock:
            stmt = stmt.with_for_update()
        row = self.session.execute(stmt).scalars().first()
        if row is None:
            raise NotFoundError({"budget_category_id": _NOT_FOUND_MESSAGE})
        return row

    def get_category(self, budget_category_id: str, *, lock: bool = False) -> BudgetCategory:
        """Return the category or raise ``NotFoundError``.

        ``lock=True`` takes a row lock for the rest of the caller's
        transaction (used by goal writes to serialize against deletion).
        """

        return _row_to_category(self._find_row(budget_category_id, lock=lock))

    def list_categories(self, type: BudgetType | str) -> list[BudgetCategory]:
        """Return the owner's categories of ``type`` in display order."""

        btype = coerce_type(type)
        rows = (
            self.session.execute(
                select(BudgetCategoryRow)
                .where(
                    BudgetCategoryRow.owner_id == self.owner_id,
                    BudgetCategoryRow.type == btype.value,
                )
                .order_by(BudgetCategoryRow.category_order, BudgetCategoryRow.budget_category_id)
            )
            .scalars()
            .all()
        )
        return [_row_to_category(r) for r in rows]

    def _count(self, btype: BudgetType) -> int:
        return self.session.execute(
            select(func.count())
            .select_from(BudgetCategoryRow)
            .where(
                BudgetCategoryRow.owner_id == self.owner_id,
                BudgetCategoryRow.type == btype.value,
            )
        ).scalar_one()

    def _check_name(self, btype: BudgetType, name: str, *, exclude_id: str | None = None) -> str:
        verdict = validate_name(name, self.config)
        if verdict.reserved:
            raise ConflictError({"name": verdict.reason or "reserved"})
        if not verdict.ok:
            raise ValidationError({"name": verdict.reason or "invalid_name"})

        n = normalize_name(name)
        stmt = select(BudgetCategoryRow.budget_category_id).where(
            BudgetCategoryRow.owner_id == self.owner_id,
            BudgetCategoryRow.type == btype.value,
            BudgetCategoryRow.name_key == name_key(n),
        )
        if exclude_id is not None:
            stmt = stmt.where(BudgetCategoryRow.budget_category_id != exclude_id)
        if self.session.execute(stmt).first() is not None:
            raise ConflictError({"name": f"Category name '{n}' already exists for {btype.value}"})
        return n

    # ---- mutations --------------------------------------------------------

    def create_category(self, type: BudgetType | str, name: str) -> str:
        """Create a category at the end of its type's ordering and return its id."""

        btype = coerce_type(type)
        n = self._check_name(btype, name)
        order = self._count(btype)

        row = BudgetCategoryRow(
            budget_category_id=str(uuid.uuid4()),
            owner_id=self.owner_id,
            type=btype.value,
            name=n,
            name_key=name_key(n),
            category_order=order,
        )
        try:
            self.session.add(row)
            self.session.flush()
        except IntegrityError:
            # Lost a race against a concurrent insert of the same name; the
            # caller's session scope rolls the transaction back.
            raise ConflictError(
                {"name": f"Category name '{n}' already exists for {btype.value}"}
            ) from None

        logger.info(
            "created category id=%s type=%s order=%d", row.budget_category_id, btype.value, order
        )
        return row.budget_category_id

    def rename_category(self, budget_category_id: str, new_name: str) -> None:
        row = self._find_row(budget_category_id)
        n = self._check_name(BudgetType(row.type), new_name, exclude_id=row.budget_category_id)
        if n == row.name:
            return
        row.name = n
        row.name_key = name_key(n)
        row.updated_at = func.now()
        try:
            self.session.flush()
        except IntegrityError:
            raise ConflictError(
                {"name": f"Category name '{n}' already exists for {row.type}"}
            ) from None
        logger.info("renamed category id=%s", budget_category_id)

    def delete_category(self, budget_category_id: str) -> None:
        """Delete the category and every goal recorded for it.

        Surviving categories keep their ``category_order`` (gaps are allowed).
        """

        row = self._find_row(budget_category_id, lock=True)
        removed = self.session.execute(
            delete(BudgetGoalRow).where(BudgetGoalRow.budget_category_id == budget_category_id)
        ).rowcount
        self.session.delete(row)
        self.session.flush()
        logger.info("deleted category id=%s goals_removed=%s", budget_category_id, removed)


__all__ = [
    "CategoryStore",
    "NameValidation",
    "normalize_name",
    "name_key",
    "validate_name",
    "coerce_type",
]
