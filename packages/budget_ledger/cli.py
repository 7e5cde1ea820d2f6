# ruff: noqa: I001
"""CLI for the ``budget_ledger`` package.

This module exposes callable command handlers (``cmd_*``, each returning a
process exit code) and a Typer-based console interface over them. Environment
variables (notably ``DATABASE_URL`` and ``BUDGET_LEDGER_OWNER``) are loaded
from a local ``.env`` using ``python-dotenv`` before any command runs. Ledger
logic lives in :mod:`budget_ledger.api`; every command runs in one
``session_scope`` transaction.
"""

from __future__ import annotations

import json
import os
import re
import sys
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from pathlib import Path
from typing import Annotated, Any

import typer
from dotenv import load_dotenv
from typer.models import OptionInfo

from .config import LedgerConfig
from .errors import LedgerError, NotFoundError
from .logging_setup import configure_logging, get_logger
from .models import BudgetType
from .periods import Period

logger = get_logger("budget_ledger.cli")

_PERIOD_RE = re.compile(r"^\s*(?:(\d{1,2})/(\d{4})|(\d{4})-(\d{1,2}))\s*$")


# ---- Small module-level helpers used by CLI commands -------------------------


def parse_period(text: str) -> Period:
    """Parse ``MM/YYYY`` or ``YYYY-MM`` into a :class:`Period`."""

    m = _PERIOD_RE.match(text or "")
    if m is None:
        raise typer.BadParameter(f"expected MM/YYYY or YYYY-MM, got {text!r}")
    if m.group(1) is not None:
        month, year = int(m.group(1)), int(m.group(2))
    else:
        year, month = int(m.group(3)), int(m.group(4))
    try:
        return Period(year, month)
    except LedgerError as e:
        raise typer.BadParameter(str(e)) from None


def _to_json(payload: Any) -> str:
    return json.dumps(payload, indent=2, default=str, ensure_ascii=False)


def _report(err: LedgerError) -> int:
    kind = "not found" if isinstance(err, NotFoundError) else "invalid input"
    for field, message in err.errors.items():
        print(f"Error ({kind}): {field}: {message}", file=sys.stderr)
    return 1


@contextmanager
def _ledger_scope(database_url: str | None, owner: str) -> Iterator[Any]:
    # Deferred imports keep `--help` fast and avoid touching the DB layer early.
    from db.client import session_scope

    from .api import BudgetLedger

    with session_scope(database_url=database_url) as session:
        yield BudgetLedger(session, owner_id=owner, config=LedgerConfig.from_env())


def _run(database_url: str | None, owner: str, action: Callable[[Any], str | None]) -> int:
    """Run ``action`` in one transaction and print its output once committed."""

    try:
        with _ledger_scope(database_url, owner) as ledger:
            output = action(ledger)
    except LedgerError as e:
        return _report(e)
    if output is not None:
        print(output)
    return 0


# ---- Command handlers ---------------------------------------------------------


def cmd_init_db(*, database_url: str | None) -> int:
    """Create the ledger tables directly from ORM metadata (local/dev databases)."""

    from db import Base
    from db.client import get_engine

    try:
        Base.metadata.create_all(bind=get_engine(database_url=database_url))
    except RuntimeError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    logger.info("created ledger tables")
    return 0


def cmd_add_category(
    budget_type: BudgetType,
    name: str,
    *,
    goal: str | None = None,
    period: Period | None = None,
    database_url: str | None,
    owner: str,
) -> int:
    return _run(
        database_url,
        owner,
        lambda lg: lg.create_category(budget_type, name, goal=goal, period=period),
    )


def cmd_rename_category(
    category_id: str, name: str, *, database_url: str | None, owner: str
) -> int:
    return _run(database_url, owner, lambda lg: lg.rename_category(category_id, name))


def cmd_delete_category(category_id: str, *, database_url: str | None, owner: str) -> int:
    return _run(database_url, owner, lambda lg: lg.delete_category(category_id))


def cmd_list_categories(budget_type: BudgetType, *, database_url: str | None, owner: str) -> int:
    def _action(lg: Any) -> str | None:
        lines = [
            f"{cat.category_order}\t{cat.budget_category_id}\t{cat.name}"
            for cat in lg.list_categories(budget_type)
        ]
        return "\n".join(lines) if lines else None

    return _run(database_url, owner, _action)


def cmd_reorder(
    budget_type: BudgetType, category_ids: list[str], *, database_url: str | None, owner: str
) -> int:
    return _run(database_url, owner, lambda lg: lg.reorder(budget_type, category_ids))


def cmd_set_goal(
    budget_type: BudgetType,
    amount: str,
    period: Period,
    *,
    category_id: str | None,
    database_url: str | None,
    owner: str,
) -> int:
    return _run(
        database_url, owner, lambda lg: lg.set_goal(category_id, budget_type, period, amount)
    )


def cmd_history(
    budget_type: BudgetType, *, category_id: str | None, database_url: str | None, owner: str
) -> int:
    def _action(lg: Any) -> str:
        records = lg.get_goal_history(lg.key_for(category_id, budget_type))
        return _to_json([{"goal": r.goal, "month": r.month, "year": r.year} for r in records])

    return _run(database_url, owner, _action)


def cmd_resolve(
    budget_type: BudgetType,
    period: Period,
    *,
    category_id: str | None,
    database_url: str | None,
    owner: str,
) -> int:
    def _action(lg: Any) -> str:
        rec = lg.resolve(lg.key_for(category_id, budget_type), period)
        return "none" if rec is None else f"{rec.goal}\t{rec.period}"

    return _run(database_url, owner, _action)


def cmd_progress(
    budget_type: BudgetType,
    period: Period,
    actual: str,
    *,
    category_id: str | None,
    database_url: str | None,
    owner: str,
) -> int:
    def _action(lg: Any) -> str:
        if category_id is None:
            progress = lg.main_budget_progress(budget_type, period, [actual])
        else:
            progress = lg.category_progress(category_id, period, actual)
        return _to_json(
            {
                "goal": progress.goal,
                "actual": progress.actual,
                "delta": progress.delta,
                "percentage": progress.percentage,
                "has_goal": progress.has_goal,
            }
        )

    return _run(database_url, owner, _action)


def cmd_overview(period: Period | None, *, database_url: str | None, owner: str) -> int:
    return _run(database_url, owner, lambda lg: _to_json(lg.overview(period)))


def cmd_provision(amount: str, *, database_url: str | None, owner: str) -> int:
    def _action(lg: Any) -> str:
        seeded = lg.provision_main_budgets(amount)
        return ", ".join(seeded) if seeded else "already provisioned"

    return _run(database_url, owner, _action)


# ---- Typer-based console interface -------------------------------------------


app = typer.Typer(
    no_args_is_help=True,
    add_completion=False,
    help=(
        "Manage budget categories and their monthly goals. Loads DATABASE_URL and "
        "BUDGET_LEDGER_OWNER from a local .env before running."
    ),
)

# Module-level option objects to satisfy ruff B008 (no calls in parameter
# defaults).
CATEGORY_OPTION: OptionInfo = typer.Option(
    "--category", help="Category id; omit to target the main budget of TYPE."
)
PERIOD_OPTION: OptionInfo = typer.Option(
    "--period", help="Period as MM/YYYY or YYYY-MM.", parser=parse_period
)


def _settings(ctx: typer.Context) -> tuple[str | None, str]:
    obj = ctx.ensure_object(dict)
    owner = obj.get("owner")
    if not owner:
        print("Error: owner is not set (use --owner or BUDGET_LEDGER_OWNER).", file=sys.stderr)
        raise typer.Exit(1)
    return obj.get("database_url"), owner


@app.command("init-db")
def init_db_cmd(ctx: typer.Context) -> None:
    """Create the ledger tables (use Alembic migrations for shared databases)."""

    raise typer.Exit(cmd_init_db(database_url=ctx.ensure_object(dict).get("database_url")))


@app.command("add-category")
def add_category_cmd(
    ctx: typer.Context,
    budget_type: BudgetType,
    name: str,
    goal: Annotated[str | None, typer.Option("--goal", help="Initial goal.")] = None,
    period: Annotated[
        Period | None,
        typer.Option(
            "--period",
            help="Period of the initial goal (MM/YYYY); defaults to the current period.",
            parser=parse_period,
        ),
    ] = None,
) -> None:
    """Create a category, optionally with its first goal, and print its id."""

    database_url, owner = _settings(ctx)
    raise typer.Exit(
        cmd_add_category(
            budget_type, name, goal=goal, period=period, database_url=database_url, owner=owner
        )
    )


@app.command("rename-category")
def rename_category_cmd(ctx: typer.Context, category_id: str, name: str) -> None:
    database_url, owner = _settings(ctx)
    raise typer.Exit(
        cmd_rename_category(category_id, name, database_url=database_url, owner=owner)
    )


@app.command("delete-category")
def delete_category_cmd(ctx: typer.Context, category_id: str) -> None:
    """Delete a category together with all of its goals."""

    database_url, owner = _settings(ctx)
    raise typer.Exit(cmd_delete_category(category_id, database_url=database_url, owner=owner))


@app.command("list-categories")
def list_categories_cmd(ctx: typer.Context, budget_type: BudgetType) -> None:
    database_url, owner = _settings(ctx)
    raise typer.Exit(cmd_list_categories(budget_type, database_url=database_url, owner=owner))


@app.command("reorder")
def reorder_cmd(ctx: typer.Context, budget_type: BudgetType, category_ids: list[str]) -> None:
    """Set display order from the given id sequence (first id gets order 0)."""

    database_url, owner = _settings(ctx)
    raise typer.Exit(
        cmd_reorder(budget_type, category_ids, database_url=database_url, owner=owner)
    )


@app.command("set-goal")
def set_goal_cmd(
    ctx: typer.Context,
    budget_type: BudgetType,
    amount: str,
    period: Annotated[Period, PERIOD_OPTION],
    category_id: Annotated[str | None, CATEGORY_OPTION] = None,
) -> None:
    """Set (or overwrite) the goal for one period."""

    database_url, owner = _settings(ctx)
    raise typer.Exit(
        cmd_set_goal(
            budget_type,
            amount,
            period,
            category_id=category_id,
            database_url=database_url,
            owner=owner,
        )
    )


@app.command("history")
def history_cmd(
    ctx: typer.Context,
    budget_type: BudgetType,
    category_id: Annotated[str | None, CATEGORY_OPTION] = None,
) -> None:
    """Print the goal history as JSON, oldest period first."""

    database_url, owner = _settings(ctx)
    raise typer.Exit(
        cmd_history(budget_type, category_id=category_id, database_url=database_url, owner=owner)
    )


@app.command("resolve")
def resolve_cmd(
    ctx: typer.Context,
    budget_type: BudgetType,
    period: Annotated[Period, PERIOD_OPTION],
    category_id: Annotated[str | None, CATEGORY_OPTION] = None,
) -> None:
    """Print the goal in effect at a period, or ``none``."""

    database_url, owner = _settings(ctx)
    raise typer.Exit(
        cmd_resolve(
            budget_type, period, category_id=category_id, database_url=database_url, owner=owner
        )
    )


@app.command("progress")
def progress_cmd(
    ctx: typer.Context,
    budget_type: BudgetType,
    actual: str,
    period: Annotated[Period, PERIOD_OPTION],
    category_id: Annotated[str | None, CATEGORY_OPTION] = None,
) -> None:
    """Compare an actual transaction sum with the effective goal."""

    database_url, owner = _settings(ctx)
    raise typer.Exit(
        cmd_progress(
            budget_type,
            period,
            actual,
            category_id=category_id,
            database_url=database_url,
            owner=owner,
        )
    )


@app.command("overview")
def overview_cmd(
    ctx: typer.Context,
    period: Annotated[
        str | None, typer.Option("--period", help="MM/YYYY; defaults to the current period.")
    ] = None,
) -> None:
    database_url, owner = _settings(ctx)
    parsed = parse_period(period) if period else None
    raise typer.Exit(cmd_overview(parsed, database_url=database_url, owner=owner))


@app.command("provision")
def provision_cmd(
    ctx: typer.Context,
    amount: Annotated[str, typer.Option("--goal", help="Initial main-budget goal.")] = "2000",
) -> None:
    """Seed the Income and Expenses main budgets for a new owner."""

    database_url, owner = _settings(ctx)
    raise typer.Exit(cmd_provision(amount, database_url=database_url, owner=owner))


@app.callback()
def _root(
    ctx: typer.Context,
    *,
    database_url: str | None = typer.Option(
        None, help="Override DATABASE_URL (falls back to env var)."
    ),
    owner: str | None = typer.Option(
        None, help="Owner id whose budgets are managed."
    ),
    log_level: str | None = typer.Option(
        None, help="Log level (falls back to BUDGET_LEDGER_LOG_LEVEL, then INFO)."
    ),
) -> None:
    """Root command.

    Loads ``.env`` from the current working directory (without overriding any
    already-set environment variables) and configures logging once.
    """

    load_dotenv(dotenv_path=Path.cwd() / ".env", override=False)
    configure_logging(log_level)
    owner = owner or os.getenv("BUDGET_LEDGER_OWNER")
    ctx.ensure_object(dict).update({"database_url": database_url, "owner": owner})


def main() -> None:
    app()


if __name__ == "__main__":  # pragma: no cover - exercised via console script
    # Running as a module: `python -m budget_ledger.cli`
    main()
