"""Budget overview read model, main-budget provisioning and wire payloads."""

from decimal import Decimal
from uuid import uuid4

import pytest
from budget_ledger import CategoryKey, ConflictError, NotFoundError, Period, ValidationError

from tests.helpers.db import count_main_goal_rows
from tests.helpers.ledger import CURRENT, OWNER


def test_overview_lists_both_buckets_in_display_order(ledger):
    rent = ledger.create_category("Expenses", "Rent")
    food = ledger.create_category("Expenses", "Food")
    salary = ledger.create_category("Income", "Salary")
    ledger.reorder("Expenses", [food, rent])
    ledger.set_goal(rent, "Expenses", Period(2024, 1), 1500)
    ledger.set_goal(rent, "Expenses", Period(2024, 9), 1600)
    ledger.set_goal(None, "Income", Period(2024, 2), 5000)

    view = ledger.overview(Period(2024, 5))

    assert view["period"] == {"month": 5, "year": 2024}
    expenses = view["Expenses"]
    assert [c["budget_category_id"] for c in expenses["categories"]] == [food, rent]
    assert [c["category_order"] for c in expenses["categories"]] == [0, 1]

    rent_view = expenses["categories"][1]
    assert rent_view["name"] == "Rent"
    assert rent_view["type"] == "Expenses"
    assert [(g["year"], g["month"]) for g in rent_view["goals"]] == [(2024, 1), (2024, 9)]
    assert rent_view["current_goal"] == {"goal": Decimal("1500.00"), "month": 1, "year": 2024}
    assert expenses["categories"][0]["current_goal"] is None
    assert expenses["current_goal"] is None

    income = view["Income"]
    assert [c["budget_category_id"] for c in income["categories"]] == [salary]
    assert income["current_goal"]["goal"] == Decimal("5000.00")


def test_overview_defaults_to_the_current_period(ledger):
    view = ledger.overview()
    assert view["period"] == {"month": CURRENT.month, "year": CURRENT.year}
    assert view["Income"]["categories"] == []


def test_overview_is_scoped_to_owner(ledger, other_ledger):
    cid = other_ledger.create_category("Expenses", "Travel")
    other_ledger.set_goal(cid, "Expenses", Period(2024, 1), 10)

    assert ledger.overview()["Expenses"]["categories"] == []


def test_provision_seeds_both_main_budgets_once(ledger, session):
    assert ledger.provision_main_budgets() == ["Income", "Expenses"]
    assert ledger.provision_main_budgets() == []
    assert count_main_goal_rows(session, OWNER) == 2

    rec = ledger.resolve(ledger.key_for(None, "Expenses"), CURRENT)
    assert rec.period == CURRENT
    assert rec.goal == Decimal("2000.00")


def test_provision_skips_a_type_that_already_has_history(ledger, session):
    ledger.set_goal(None, "Income", Period(2023, 1), 4000)

    assert ledger.provision_main_budgets(initial_goal="150") == ["Expenses"]
    assert ledger.resolve(ledger.key_for(None, "Income"), CURRENT).goal == Decimal("4000.00")


# ---- goal payloads -----------------------------------------------------------


def test_submit_goal_for_category_uses_its_type(ledger):
    cid = ledger.create_category("Expenses", "Groceries")
    ledger.submit_goal({"budget_category_id": cid, "goal": "200.50", "month": 3, "year": 2024})

    assert ledger.resolve(CategoryKey(cid), Period(2024, 4)).goal == Decimal("200.50")


def test_submit_goal_for_main_budget_requires_type(ledger):
    payload = {"budget_category_id": None, "goal": 100, "month": 1, "year": 2024}
    with pytest.raises(ValidationError) as exc:
        ledger.submit_goal(payload)
    assert "type" in exc.value.errors

    ledger.submit_goal(payload, type="Income")
    assert ledger.resolve(ledger.key_for(None, "Income"), CURRENT).goal == Decimal("100.00")


@pytest.mark.parametrize(
    "payload, field",
    [
        ({"goal": -1, "month": 1, "year": 2024}, "goal"),
        ({"goal": "1.234", "month": 1, "year": 2024}, "goal"),
        ({"goal": 1, "month": 13, "year": 2024}, "month"),
        ({"goal": 1, "month": 1, "year": 1799}, "year"),
        ({"goal": 1, "month": 1}, "year"),
        ({"budget_category_id": "not-a-uuid", "goal": 1, "month": 1, "year": 2024},
         "budget_category_id"),
    ],
)
def test_submit_goal_rejects_malformed_payloads(ledger, payload, field):
    with pytest.raises(ValidationError) as exc:
        ledger.submit_goal(payload, type="Expenses")
    assert field in exc.value.errors


def test_submit_goal_rejects_future_period(ledger):
    with pytest.raises(ValidationError) as exc:
        ledger.submit_goal(
            {"goal": 1, "month": CURRENT.month + 1, "year": CURRENT.year}, type="Income"
        )
    assert "month" in exc.value.errors


def test_submit_goal_for_unknown_category(ledger):
    payload = {"budget_category_id": str(uuid4()), "goal": 1, "month": 1, "year": 2024}
    with pytest.raises(NotFoundError):
        ledger.submit_goal(payload)


# ---- category payloads -------------------------------------------------------


def test_update_category_renames(ledger):
    cid = ledger.create_category("Expenses", "Food")
    ledger.update_category({"budget_category_id": cid, "type": "Expenses", "name": "  Groceries "})

    assert ledger.get_category(cid).name == "Groceries"


def test_update_category_rejects_type_change(ledger):
    cid = ledger.create_category("Expenses", "Food")
    with pytest.raises(ValidationError) as exc:
        ledger.update_category({"budget_category_id": cid, "type": "Income", "name": "Food"})
    assert "type" in exc.value.errors


def test_update_category_rejects_order_change(ledger):
    cid = ledger.create_category("Expenses", "Food")
    with pytest.raises(ValidationError) as exc:
        ledger.update_category(
            {"budget_category_id": cid, "type": "Expenses", "name": "Food", "category_order": 4}
        )
    assert "category_order" in exc.value.errors


def test_update_category_rejects_reserved_name_in_payload(ledger):
    cid = ledger.create_category("Expenses", "Food")
    with pytest.raises(ValidationError) as exc:
        ledger.update_category({"budget_category_id": cid, "type": "Expenses", "name": "income"})
    assert exc.value.errors["name"].startswith("Category name cannot be")


def test_update_category_duplicate_is_a_conflict(ledger):
    ledger.create_category("Expenses", "Rent")
    cid = ledger.create_category("Expenses", "Food")
    with pytest.raises(ConflictError):
        ledger.update_category({"budget_category_id": cid, "type": "Expenses", "name": "RENT"})
