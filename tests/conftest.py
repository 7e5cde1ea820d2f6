"""Pytest configuration for test isolation.

Each test gets its own file-backed SQLite database. ``db.client`` keeps one
process-wide engine and refuses to switch URLs, so the shared engine is
disposed around every test before a new database is bootstrapped.

Ledgers are built with a fixed clock (October 2024) so the future-period rule
never depends on the wall clock.
"""

from __future__ import annotations

from collections.abc import Iterator
from pathlib import Path

import pytest
from budget_ledger import BudgetLedger, fixed_clock
from db.client import dispose_engine, get_session
from sqlalchemy.orm import Session

from tests.helpers.db import bootstrap_sqlite_db
from tests.helpers.ledger import CURRENT, OWNER


@pytest.fixture(autouse=True)
def _fresh_engine() -> Iterator[None]:
    dispose_engine()
    yield
    dispose_engine()


@pytest.fixture
def database_url(tmp_path: Path) -> str:
    return bootstrap_sqlite_db(tmp_path / "ledger.sqlite3")


@pytest.fixture
def session(database_url: str) -> Iterator[Session]:
    s = get_session(database_url=database_url)
    try:
        yield s
    finally:
        s.rollback()
        s.close()


@pytest.fixture
def ledger(session: Session) -> BudgetLedger:
    return BudgetLedger(session, owner_id=OWNER, clock=fixed_clock(CURRENT))


@pytest.fixture
def other_ledger(session: Session) -> BudgetLedger:
    """A second owner sharing the same database."""

    return BudgetLedger(session, owner_id="owner-2", clock=fixed_clock(CURRENT))
