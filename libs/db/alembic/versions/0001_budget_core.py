# ruff: noqa: I001
"""Budget ledger core tables: categories, category goals, main-budget goals.

Revision ID: 0001_budget_core
Revises: None
Create Date: 2025-10-02
"""

from __future__ import annotations  # ruff: noqa: I001

from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op


# revision identifiers, used by Alembic.
revision: str = "0001_budget_core"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    # budget_categories
    op.create_table(
        "budget_categories",
        sa.Column("budget_category_id", sa.String(36), primary_key=True),
        sa.Column("owner_id", sa.Text(), nullable=False),
        sa.Column("type", sa.String(8), nullable=False),
        sa.Column("name", sa.String(30), nullable=False),
        sa.Column("name_key", sa.String(90), nullable=False),
        sa.Column("category_order", sa.Integer(), nullable=False),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.text("now()"),
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.text("now()"),
        ),
        sa.CheckConstraint("type in ('Income','Expenses')", name="ck_budget_cat_type"),
        sa.CheckConstraint("category_order >= 0", name="ck_budget_cat_order_nonneg"),
    )

    # Per-(owner, type) uniqueness of the case-folded name
    op.create_index(
        "uniq_budget_cat_owner_type_name_key",
        "budget_categories",
        ["owner_id", "type", "name_key"],
        unique=True,
    )
    op.create_index(
        "ix_budget_cat_owner_type_order",
        "budget_categories",
        ["owner_id", "type", "category_order"],
        unique=False,
    )

    # budget_goals: sparse (category, period) -> goal series
    op.create_table(
        "budget_goals",
        sa.Column(
            "budget_category_id",
            sa.String(36),
            sa.ForeignKey("budget_categories.budget_category_id", ondelete="CASCADE"),
            primary_key=True,
        ),
        sa.Column("year", sa.Integer(), primary_key=True),
        sa.Column("month", sa.Integer(), primary_key=True),
        sa.Column("goal", sa.Numeric(17, 2), nullable=False),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.text("now()"),
        ),
        sa.CheckConstraint("month >= 1 AND month <= 12", name="ck_budget_goal_month"),
        sa.CheckConstraint("year >= 1800", name="ck_budget_goal_year"),
        sa.CheckConstraint("goal >= 0", name="ck_budget_goal_nonneg"),
    )

    # main_budget_goals: sparse (owner, type, period) -> goal series
    op.create_table(
        "main_budget_goals",
        sa.Column("owner_id", sa.Text(), primary_key=True),
        sa.Column("type", sa.String(8), primary_key=True),
        sa.Column("year", sa.Integer(), primary_key=True),
        sa.Column("month", sa.Integer(), primary_key=True),
        sa.Column("goal", sa.Numeric(17, 2), nullable=False),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.text("now()"),
        ),
        sa.CheckConstraint("type in ('Income','Expenses')", name="ck_main_goal_type"),
        sa.CheckConstraint("month >= 1 AND month <= 12", name="ck_main_goal_month"),
        sa.CheckConstraint("year >= 1800", name="ck_main_goal_year"),
        sa.CheckConstraint("goal >= 0", name="ck_main_goal_nonneg"),
    )


def downgrade() -> None:
    op.drop_table("main_budget_goals")
    op.drop_table("budget_goals")
    op.drop_index("ix_budget_cat_owner_type_order", table_name="budget_categories")
    op.drop_index("uniq_budget_cat_owner_type_name_key", table_name="budget_categories")
    op.drop_table("budget_categories")
