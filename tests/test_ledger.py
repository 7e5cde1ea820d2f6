"""Goal ledger writes: upsert-by-period, validation and main-budget series."""

from decimal import Decimal

import pytest
from budget_ledger import (
    BudgetLedger,
    BudgetType,
    CategoryKey,
    GoalRecord,
    MainBudgetKey,
    NotFoundError,
    Period,
    ValidationError,
    fixed_clock,
)
from db.models.budgets import BudgetGoalRow
from sqlalchemy import func, select

from tests.helpers.ledger import CURRENT, OWNER
from tests.helpers.db import count_goal_rows, count_main_goal_rows


def test_set_goal_twice_keeps_a_single_record(ledger, session):
    cid = ledger.create_category("Expenses", "Groceries")
    ledger.set_goal(cid, "Expenses", Period(2024, 3), 200)
    first = ledger.get_goal_history(CategoryKey(cid))
    ledger.set_goal(cid, "Expenses", Period(2024, 3), 200)

    assert ledger.get_goal_history(CategoryKey(cid)) == first
    assert count_goal_rows(session, cid) == 1


def test_resubmitting_a_period_overwrites_its_goal(ledger):
    cid = ledger.create_category("Expenses", "Groceries")
    ledger.set_goal(cid, "Expenses", Period(2024, 3), 200)
    ledger.set_goal(cid, "Expenses", Period(2024, 3), "215.50")

    assert ledger.get_goal_history(CategoryKey(cid)) == [
        GoalRecord(Period(2024, 3), Decimal("215.50"))
    ]


def test_history_is_ascending_regardless_of_insert_order(ledger):
    cid = ledger.create_category("Expenses", "Groceries")
    for period, goal in [
        (Period(2024, 6), 250),
        (Period(2023, 11), 100),
        (Period(2024, 3), 200),
    ]:
        ledger.set_goal(cid, "Expenses", period, goal)

    history = ledger.get_goal_history(CategoryKey(cid))
    assert [r.period for r in history] == [Period(2023, 11), Period(2024, 3), Period(2024, 6)]
    assert [r.goal for r in history] == [Decimal("100"), Decimal("200"), Decimal("250")]


def test_future_periods_are_rejected(ledger):
    cid = ledger.create_category("Expenses", "Groceries")
    with pytest.raises(ValidationError) as exc:
        ledger.set_goal(cid, "Expenses", Period(2024, 11), 10)
    assert "month" in exc.value.errors
    with pytest.raises(ValidationError) as exc:
        ledger.set_goal(cid, "Expenses", Period(2025, 1), 10)
    assert "year" in exc.value.errors


def test_current_period_and_any_month_of_past_years_are_accepted(ledger):
    cid = ledger.create_category("Expenses", "Groceries")
    ledger.set_goal(cid, "Expenses", Period(2024, 10), 10)
    ledger.set_goal(cid, "Expenses", Period(2023, 12), 10)
    ledger.set_goal(cid, "Expenses", Period(1800, 1), 10)
    assert len(ledger.get_goal_history(CategoryKey(cid))) == 3


def test_years_before_1800_are_rejected(ledger):
    cid = ledger.create_category("Expenses", "Groceries")
    with pytest.raises(ValidationError) as exc:
        ledger.set_goal(cid, "Expenses", Period(1799, 12), 10)
    assert exc.value.errors == {"year": "Year must be 1800 or later"}


@pytest.mark.parametrize(
    "amount, message",
    [
        (-1, "Goal must be $0 or greater"),
        ("1000000000000000.00", "Goal exceeds the maximum allowed value"),
        ("12.345", "Goal must have at most 2 decimal places"),
        ("abc", "Goal must be a valid currency amount"),
        ("NaN", "Goal must be a valid currency amount"),
        (True, "Goal must be a valid currency amount"),
    ],
)
def test_goal_amount_validation(ledger, amount, message):
    cid = ledger.create_category("Expenses", "Groceries")
    with pytest.raises(ValidationError) as exc:
        ledger.set_goal(cid, "Expenses", Period(2024, 1), amount)
    assert exc.value.errors == {"goal": message}


def test_zero_goal_is_a_real_record(ledger):
    cid = ledger.create_category("Expenses", "Groceries")
    ledger.set_goal(cid, "Expenses", Period(2024, 1), 0)
    rec = ledger.resolve(CategoryKey(cid), Period(2024, 2))
    assert rec is not None and rec.goal == 0


def test_unknown_category_is_not_found(ledger, other_ledger):
    foreign = other_ledger.create_category("Expenses", "Travel")
    with pytest.raises(NotFoundError):
        ledger.set_goal("missing", "Expenses", Period(2024, 1), 10)
    with pytest.raises(NotFoundError):
        ledger.set_goal(foreign, "Expenses", Period(2024, 1), 10)


def test_type_must_match_the_category(ledger):
    cid = ledger.create_category("Expenses", "Groceries")
    with pytest.raises(ValidationError) as exc:
        ledger.set_goal(cid, "Income", Period(2024, 1), 10)
    assert "type" in exc.value.errors


def test_set_goal_after_delete_is_not_found(ledger, session):
    cid = ledger.create_category("Expenses", "Groceries")
    ledger.set_goal(cid, "Expenses", Period(2024, 1), 10)
    ledger.delete_category(cid)

    with pytest.raises(NotFoundError):
        ledger.set_goal(cid, "Expenses", Period(2024, 2), 10)
    assert count_goal_rows(session, cid) == 0


def test_main_budget_series_are_per_type_and_owner(ledger, other_ledger, session):
    ledger.set_goal(None, "Income", Period(2024, 1), 3000)
    ledger.set_goal(None, "Expenses", Period(2024, 1), 2500)
    ledger.set_goal(None, "Expenses", Period(2024, 1), 2600)
    other_ledger.set_goal(None, "Expenses", Period(2024, 1), 10)

    income = ledger.get_goal_history(MainBudgetKey(OWNER, BudgetType.INCOME))
    expenses = ledger.get_goal_history(ledger.key_for(None, "Expenses"))

    assert [r.goal for r in income] == [Decimal("3000")]
    assert [r.goal for r in expenses] == [Decimal("2600")]
    assert count_main_goal_rows(session, OWNER) == 2


def test_main_budget_goals_reject_future_periods(ledger):
    with pytest.raises(ValidationError):
        ledger.set_goal(None, "Income", Period(2024, 12), 3000)


def test_history_of_foreign_category_is_not_found(ledger, other_ledger):
    foreign = other_ledger.create_category("Expenses", "Travel")
    with pytest.raises(NotFoundError):
        ledger.get_goal_history(CategoryKey(foreign))


def test_foreign_main_budget_is_not_found(ledger, other_ledger):
    other_ledger.set_goal(None, "Income", Period(2024, 1), 10)
    foreign = MainBudgetKey("owner-2", BudgetType.INCOME)
    with pytest.raises(NotFoundError) as exc:
        ledger.get_goal_history(foreign)
    assert "owner_id" in exc.value.errors
    with pytest.raises(NotFoundError):
        ledger.resolve(foreign, Period(2024, 6))


def test_clock_is_consulted_per_call(session):
    now = {"period": Period(2024, 1)}
    lg = BudgetLedger(session, owner_id=OWNER, clock=lambda: now["period"])
    cid = lg.create_category("Expenses", "Groceries")

    with pytest.raises(ValidationError):
        lg.set_goal(cid, "Expenses", Period(2024, 2), 10)
    now["period"] = Period(2024, 2)
    lg.set_goal(cid, "Expenses", Period(2024, 2), 10)


def test_default_ledger_clock_accepts_the_present(session):
    lg = BudgetLedger(session, owner_id=OWNER)
    cid = lg.create_category("Expenses", "Groceries")
    lg.set_goal(cid, "Expenses", lg.goals.clock(), 10)
    assert len(lg.get_goal_history(CategoryKey(cid))) == 1


def test_fixed_clock_is_exported_for_backfills(session):
    lg = BudgetLedger(session, owner_id=OWNER, clock=fixed_clock(Period(1999, 1)))
    with pytest.raises(ValidationError):
        lg.set_goal(None, "Income", Period(1999, 2), 1)


# ---- category with its first goal ----------------------------------------------


def test_create_category_with_first_goal(ledger, session):
    cid = ledger.create_category("Expenses", "Groceries", goal="200", period=Period(2024, 3))

    assert ledger.get_category(cid).name == "Groceries"
    assert ledger.get_goal_history(CategoryKey(cid)) == [
        GoalRecord(Period(2024, 3), Decimal("200.00"))
    ]


def test_create_category_goal_defaults_to_current_period(ledger):
    cid = ledger.create_category("Income", "Salary", goal=5000)
    [record] = ledger.get_goal_history(CategoryKey(cid))
    assert record.period == CURRENT


@pytest.mark.parametrize(
    "goal, period, field",
    [
        (-1, Period(2024, 1), "goal"),
        ("1.005", Period(2024, 1), "goal"),
        (10, Period(2024, 11), "month"),
        (10, Period(2025, 1), "year"),
        (10, Period(1799, 1), "year"),
    ],
)
def test_rejected_first_goal_creates_no_category(ledger, goal, period, field):
    with pytest.raises(ValidationError) as exc:
        ledger.create_category("Expenses", "Groceries", goal=goal, period=period)
    assert field in exc.value.errors
    assert ledger.list_categories("Expenses") == []


def test_rejected_name_writes_no_goal(ledger, session):
    ledger.create_category("Expenses", "Rent")
    with pytest.raises(ValidationError):
        ledger.create_category("Expenses", "RENT", goal=10, period=Period(2024, 1))
    assert len(ledger.list_categories("Expenses")) == 1
    assert session.execute(select(func.count()).select_from(BudgetGoalRow)).scalar_one() == 0


def test_period_without_goal_is_rejected(ledger):
    with pytest.raises(ValidationError) as exc:
        ledger.create_category("Expenses", "Groceries", period=Period(2024, 1))
    assert "goal" in exc.value.errors
    assert ledger.list_categories("Expenses") == []


def test_submit_category_payload(ledger):
    cid = ledger.submit_category(
        {"type": "Expenses", "name": " Groceries ", "goal": "75.50", "month": 2, "year": 2024}
    )
    assert ledger.get_category(cid).name == "Groceries"
    assert ledger.resolve(CategoryKey(cid), Period(2024, 6)).goal == Decimal("75.50")


def test_submit_category_payload_errors_are_field_keyed(ledger):
    with pytest.raises(ValidationError) as exc:
        ledger.submit_category(
            {"type": "Savings", "name": "x", "goal": 1, "month": 1, "year": 2024}
        )
    assert "type" in exc.value.errors
    assert ledger.list_categories("Expenses") == []
