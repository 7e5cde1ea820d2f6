"""Wire payload schemas for the service layer.

These pydantic models mirror the JSON shapes the HTTP layer receives. Use
:func:`parse_payload` to validate a raw mapping; failures are re-raised as the
ledger's own :class:`~budget_ledger.errors.ValidationError` with a
field-keyed error map.
"""

from __future__ import annotations

from collections.abc import Mapping
from decimal import Decimal
from typing import Any
from uuid import UUID

import pydantic
from pydantic import BaseModel, ConfigDict, Field, field_validator

from .categories import normalize_name, validate_name
from .config import LedgerConfig
from .errors import ValidationError
from .models import BudgetType
from .periods import Period

_DEFAULTS = LedgerConfig()


class GoalPayload(BaseModel):
    """``{budget_category_id, goal, month, year}``; a null id targets the main budget."""

    model_config = ConfigDict(extra="ignore", str_strip_whitespace=True)

    budget_category_id: UUID | None = None
    goal: Decimal = Field(ge=0, le=_DEFAULTS.max_goal, decimal_places=2)
    month: int = Field(ge=1, le=12)
    year: int = Field(ge=_DEFAULTS.min_year)

    @property
    def period(self) -> Period:
        return Period(self.year, self.month)


def _checked_name(v: str | None) -> str | None:
    if v is None:
        return v
    verdict = validate_name(v, _DEFAULTS)
    if not verdict.ok:
        raise ValueError(verdict.reason)
    return normalize_name(v)


class CategoryPayload(BaseModel):
    model_config = ConfigDict(extra="ignore", str_strip_whitespace=True)

    budget_category_id: UUID
    type: BudgetType
    name: str | None = None
    category_order: int | None = Field(default=None, ge=0, le=_DEFAULTS.max_category_order)

    @field_validator("name")
    @classmethod
    def _check_name(cls, v: str | None) -> str | None:
        return _checked_name(v)


class NewCategoryPayload(BaseModel):
    """``{type, name, goal, month, year}``: a category with its first goal."""

    model_config = ConfigDict(extra="ignore", str_strip_whitespace=True)

    type: BudgetType
    name: str
    goal: Decimal = Field(ge=0, le=_DEFAULTS.max_goal, decimal_places=2)
    month: int = Field(ge=1, le=12)
    year: int = Field(ge=_DEFAULTS.min_year)

    @field_validator("name")
    @classmethod
    def _check_name(cls, v: str | None) -> str | None:
        return _checked_name(v)

    @property
    def period(self) -> Period:
        return Period(self.year, self.month)


def _field_errors(exc: pydantic.ValidationError) -> dict[str, str]:
    errors: dict[str, str] = {}
    for err in exc.errors():
        field = ".".join(str(p) for p in err.get("loc", ())) or "payload"
        msg = str(err.get("msg", "Invalid value")).removeprefix("Value error, ")
        # Keep the first message per field, matching the service layer's map.
        errors.setdefault(field, msg)
    return errors


def parse_payload[M: BaseModel](model: type[M], data: Mapping[str, Any]) -> M:
    try:
        return model.model_validate(dict(data))
    except pydantic.ValidationError as exc:
        raise ValidationError(_field_errors(exc)) from None


__all__ = ["GoalPayload", "CategoryPayload", "NewCategoryPayload", "parse_payload"]
