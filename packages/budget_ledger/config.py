"""Immutable configuration for the ledger components.

Limits and reserved words live here rather than as module globals so stores
can be constructed with alternative settings in tests.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from decimal import Decimal

DEFAULT_REFERENCE_TZ = "Pacific/Kiritimati"


@dataclass(frozen=True, slots=True)
class LedgerConfig:
    """Validation limits and the reference timezone.

    Attributes
    ----------
    reserved_names:
        Lower-cased names no category may take (compared case-insensitively
        after trimming).
    name_min_len / name_max_len:
        Bounds on the trimmed category name.
    max_goal:
        Largest accepted goal amount (inclusive).
    min_year:
        Earliest accepted period year.
    max_category_order:
        Largest accepted ``category_order`` (signed 32-bit column).
    reference_tz:
        IANA timezone used by the default clock to decide the current period.
        UTC+14 is the first zone to enter a new month, so "future" is never
        rejected too early for any user.
    """

    reserved_names: frozenset[str] = frozenset({"income", "expenses", "null"})
    name_min_len: int = 1
    name_max_len: int = 30
    max_goal: Decimal = Decimal("999999999999999.99")
    min_year: int = 1800
    max_category_order: int = 2_147_483_647
    reference_tz: str = DEFAULT_REFERENCE_TZ

    @classmethod
    def from_env(cls) -> LedgerConfig:
        """Build a config honouring ``BUDGET_LEDGER_REFERENCE_TZ`` when set."""

        tz = (os.getenv("BUDGET_LEDGER_REFERENCE_TZ") or "").strip()
        return cls(reference_tz=tz or DEFAULT_REFERENCE_TZ)


__all__ = ["LedgerConfig", "DEFAULT_REFERENCE_TZ"]
