"""Exception types raised by ledger operations.

Every error carries a field-keyed ``errors`` map so the service layer can
surface it unchanged (e.g., ``{"name": "Name must be at most 30 characters"}``).
"""

from __future__ import annotations

from collections.abc import Mapping


class LedgerError(Exception):
    """Base class for all ledger failures."""

    def __init__(self, errors: Mapping[str, str]) -> None:
        self.errors: dict[str, str] = dict(errors)
        super().__init__("; ".join(f"{k}: {v}" for k, v in self.errors.items()))


class ValidationError(LedgerError):
    """Malformed or out-of-range input."""


class ConflictError(ValidationError):
    """A category name collides with an existing name or a reserved word."""


class NotFoundError(LedgerError):
    """The referenced category does not exist in the owner's scope."""


__all__ = [
    "LedgerError",
    "ValidationError",
    "ConflictError",
    "NotFoundError",
]
