"""Shared constants for ledger tests."""

from budget_ledger import Period

# Reference "now" for fixed-clock ledgers.
CURRENT = Period(2024, 10)
OWNER = "owner-1"
