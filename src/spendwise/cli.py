"""Command-line entry point: database setup, summaries and exports."""

from __future__ import annotations

from datetime import date
from pathlib import Path

import click

from .config import BaseConfig
from .context import create_app_context
from .errors import SpendwiseError
from .logging_config import setup_logging


def _context(reset: bool | None = None):
    config = BaseConfig()
    setup_logging(config, console=False)
    try:
        return create_app_context(config, reset=reset)
    except SpendwiseError as exc:
        raise click.ClickException(str(exc)) from exc


@click.group()
@click.version_option(package_name="spendwise")
def cli() -> None:
    """Personal finance tracker tools."""


@cli.command("init-db")
def init_db() -> None:
    """Create missing tables and seed default categories."""

    ctx = _context()
    try:
        count = len(ctx.category_repo.list_all())
        click.echo(f"Database ready at {ctx.engine.url} ({count} categories).")
    finally:
        ctx.close()


@cli.command("reset-db")
@click.option("--yes", is_flag=True, default=False, help="Confirm that all data will be deleted.")
def reset_db(yes: bool) -> None:
    """Drop every table, recreate the schema and reseed defaults."""

    if not yes:
        click.confirm("This deletes all categories, expenses and transactions. Continue?", abort=True)
    ctx = _context(reset=True)
    ctx.close()
    click.echo("Database reset; default categories restored.")


@cli.command("summary")
@click.option("--start", type=click.DateTime(formats=["%Y-%m-%d"]), default=None)
@click.option("--end", type=click.DateTime(formats=["%Y-%m-%d"]), default=None)
def summary(start, end) -> None:
    """Print ledger totals and the expense breakdown."""

    ctx = _context()
    try:
        totals = ctx.reports.ledger_summary()
        click.echo(f"Income:   {totals['income']:>12}")
        click.echo(f"Expenses: {totals['expenses']:>12}")
        click.echo(f"Balance:  {totals['balance']:>12}")

        start_date = start.date() if start else date.min
        end_date = end.date() if end else date.max
        breakdown = ctx.reports.expenses_by_category(start_date, end_date)
        if breakdown:
            click.echo("")
            click.echo("Expenses by category:")
            for name, amount in breakdown.items():
                click.echo(f"  {name:<24}{amount:>12}")
    finally:
        ctx.close()


@cli.command("export")
@click.option(
    "--out",
    "out_dir",
    type=click.Path(file_okay=False, path_type=Path),
    required=True,
    help="Directory to write CSV/PNG files into.",
)
def export(out_dir: Path) -> None:
    """Export expenses, ledger entries and a spending chart."""

    from .services.export_csv import export_expenses_csv, export_transactions_csv
    from .services.reports import export_spending_png

    ctx = _context()
    try:
        expenses_path = export_expenses_csv(
            expenses=ctx.expense_repo.list_all(), output_path=out_dir / "expenses.csv"
        )
        ledger_path = export_transactions_csv(
            transactions=ctx.transaction_repo.list_all(), output_path=out_dir / "transactions.csv"
        )
        chart_path = export_spending_png(
            ctx.reports.expenses_by_category(date.min, date.max),
            output_path=out_dir / "spending.png",
        )
    finally:
        ctx.close()

    for path in (expenses_path, ledger_path, chart_path):
        click.echo(f"Wrote {path}")


def main() -> None:  # pragma: no cover
    cli()


if __name__ == "__main__":  # pragma: no cover
    main()
