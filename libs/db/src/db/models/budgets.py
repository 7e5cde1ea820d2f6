from __future__ import annotations

from datetime import datetime
from decimal import Decimal

from sqlalchemy import (
    CheckConstraint,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    String,
    func,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    pass


# ---------------------------
# Reference: budget_categories
# ---------------------------


class BudgetCategoryRow(Base):
    __tablename__ = "budget_categories"

    budget_category_id: Mapped[str] = mapped_column(String(36), primary_key=True)
    owner_id: Mapped[str] = mapped_column(String, nullable=False)
    type: Mapped[str] = mapped_column(String(8), nullable=False)
    # Stored as entered (trimmed).
    name: Mapped[str] = mapped_column(String(30), nullable=False)
    # Case-folded name, computed in Python; unique within (owner_id, type).
    name_key: Mapped[str] = mapped_column(String(90), nullable=False)
    category_order: Mapped[int] = mapped_column(Integer, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now()
    )

    __table_args__ = (
        CheckConstraint("type in ('Income','Expenses')", name="ck_budget_cat_type"),
        CheckConstraint("category_order >= 0", name="ck_budget_cat_order_nonneg"),
        Index("ix_budget_cat_owner_type_order", "owner_id", "type", "category_order"),
        Index(
            "uniq_budget_cat_owner_type_name_key",
            "owner_id",
            "type",
            "name_key",
            unique=True,
        ),
    )


# ---------------------------
# Core: budget_goals (per category)
# ---------------------------


class BudgetGoalRow(Base):
    __tablename__ = "budget_goals"

    budget_category_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("budget_categories.budget_category_id", ondelete="CASCADE"),
        primary_key=True,
    )
    year: Mapped[int] = mapped_column(Integer, primary_key=True)
    month: Mapped[int] = mapped_column(Integer, primary_key=True)
    goal: Mapped[Decimal] = mapped_column(Numeric(17, 2), nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now()
    )

    __table_args__ = (
        CheckConstraint("month >= 1 AND month <= 12", name="ck_budget_goal_month"),
        CheckConstraint("year >= 1800", name="ck_budget_goal_year"),
        CheckConstraint("goal >= 0", name="ck_budget_goal_nonneg"),
    )


# ---------------------------
# Core: main_budget_goals (per owner and type)
# ---------------------------


class MainBudgetGoalRow(Base):
    __tablename__ = "main_budget_goals"

    owner_id: Mapped[str] = mapped_column(String, primary_key=True)
    type: Mapped[str] = mapped_column(String(8), primary_key=True)
    year: Mapped[int] = mapped_column(Integer, primary_key=True)
    month: Mapped[int] = mapped_column(Integer, primary_key=True)
    goal: Mapped[Decimal] = mapped_column(Numeric(17, 2), nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now()
    )

    __table_args__ = (
        CheckConstraint("type in ('Income','Expenses')", name="ck_main_goal_type"),
        CheckConstraint("month >= 1 AND month <= 12", name="ck_main_goal_month"),
        CheckConstraint("year >= 1800", name="ck_main_goal_year"),
        CheckConstraint("goal >= 0", name="ck_main_goal_nonneg"),
    )


__all__ = [
    "Base",
    "BudgetCategoryRow",
    "BudgetGoalRow",
    "MainBudgetGoalRow",
]
