"""Ordering manager: display order of categories within one type.

``reorder`` assigns ``category_order = index`` for each listed id, left to
right from 0. Ids left out of a partial list keep their current order, and
deletions leave gaps that are never compacted. Readers sort by
``category_order`` and break ties by id.

Concurrent reorders of the same ``(owner, type)`` are serialized by locking
every category row of that scope before any order is written.
"""

from __future__ import annotations

from collections.abc import Sequence

from db.models.budgets import BudgetCategoryRow
from sqlalchemy import func, select
from sqlalchemy.orm import Session

from .categories import coerce_type
from .errors import ValidationError
from .logging_setup import get_logger
from .models import BudgetType

logger = get_logger("budget_ledger.ordering")


class OrderingManager:
    def __init__(self, session: Session, *, owner_id: str) -> None:
        self.session = session
        self.owner_id = owner_id

    def _lock_scope(self, btype: BudgetType) -> dict[str, BudgetCategoryRow]:
        # Lock in id order so two reorders of the same scope cannot deadlock.
        rows = (
            self.session.execute(
                select(BudgetCategoryRow)
                .where(
                    BudgetCategoryRow.owner_id == self.owner_id,
                    BudgetCategoryRow.type == btype.value,
                )
                .order_by(BudgetCategoryRow.budget_category_id)
                .with_for_update()
            )
            .scalars()
            .all()
        )
        return {r.budget_category_id: r for r in rows}

    def reorder(self, type: BudgetType | str, ordered_ids: Sequence[str]) -> None:
        """Assign ``category_order`` by position in ``ordered_ids``.

        Raises
        ------
        ValidationError
            When the list is empty, repeats an id, or names an id that is not
            a category of ``type`` owned by this owner. Nothing is written in
            that case.
        """

        btype = coerce_type(type)
        ids = [str(i).strip() for i in ordered_ids]
        if not ids:
            raise ValidationError(
                {"categories": "Category ID's array must be a valid array representation"}
            )
        seen: set[str] = set()
        for cid in ids:
            if cid in seen:
                raise ValidationError({"categories": f"Duplicate category ID: '{cid}'"})
            seen.add(cid)

        scope = self._lock_scope(btype)
        for cid in ids:
            if cid not in scope:
                raise ValidationError(
                    {"budget_category_id": f"Invalid category ID for {btype.value}: '{cid}'"}
                )

        changed = 0
        for index, cid in enumerate(ids):
            row = scope[cid]
            if row.category_order != index:
                row.category_order = index
                row.updated_at = func.now()
                changed += 1
        if changed:
            self.session.flush()
        logger.info(
            "reordered type=%s listed=%d changed=%d", btype.value, len(ids), changed
        )


__all__ = ["OrderingManager"]
