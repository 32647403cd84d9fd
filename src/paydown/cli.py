"""Command line interface for Paydown."""

from __future__ import annotations

import functools
from dataclasses import replace
from datetime import date, datetime
from pathlib import Path
from typing import Optional

import click

from .config import BaseConfig
from .context import AppContext, create_app_context
from .errors import NotFoundError, ValidationError
from .logging_config import setup_logging
from .money import to_decimal, to_wire
from .months import month_key, parse_month_key
from .services import banks, cashflow, debts, export_csv, payments, reports, seed
from .services.schedules import EXPENSE, FREQUENCIES, INCOME, RecurrenceSpec, spec_from_parent

_KIND = click.Choice([INCOME, EXPENSE])

today_option = click.option(
    "--today",
    type=click.DateTime(formats=["%Y-%m-%d"]),
    default=None,
    help="Reference date (YYYY-MM-DD) used as 'now'.",
)


def _today(value: Optional[datetime]) -> date:
    return value.date() if value is not None else date.today()


def _month_option(value: Optional[str]) -> Optional[str]:
    if value is not None:
        parse_month_key(value)
    return value


def _handle_errors(func):
    """Turn domain errors into a clean non-zero exit."""

    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except ValidationError as exc:
            suffix = f" ({exc.field})" if exc.field else ""
            raise click.ClickException(f"{exc.message}{suffix}") from exc
        except NotFoundError as exc:
            raise click.ClickException(str(exc)) from exc

    return wrapper


def _app(ctx: click.Context) -> AppContext:
    return ctx.obj


@click.group()
@click.pass_context
def cli(ctx: click.Context) -> None:
    """Track recurring income/expenses and plan debt payoff."""

    if ctx.obj is None:
        config = BaseConfig()
        setup_logging(config)
        ctx.obj = create_app_context(config)


@cli.command("init-db")
@click.pass_context
def init_db(ctx: click.Context) -> None:
    """Create the database schema."""

    click.echo(f"Database ready: {_app(ctx).config.DATABASE_URL}")


@cli.command("seed")
@click.option("--reset", is_flag=True, default=False, help="Delete existing rows first")
@today_option
@click.pass_context
@_handle_errors
def seed_command(ctx: click.Context, reset: bool, today: Optional[datetime]) -> None:
    """Load demo incomes, expenses and banks."""

    app = _app(ctx)
    summary = seed.run_demo_seed(
        bank_repo=app.bank_repo,
        income_repo=app.income_repo,
        expense_repo=app.expense_repo,
        today=_today(today),
        reset=reset,
    )
    click.echo(
        f"Seeded {summary.incomes} income(s), {summary.expenses} expense(s), "
        f"{summary.banks} bank(s)."
    )


@cli.command("add-bank")
@click.argument("name")
@click.argument("total_debt")
@click.option("--debt-type", default="Credit Card", show_default=True)
@click.option("--rate", "interest_rate", default="0", show_default=True, help="Monthly %")
@click.option(
    "--interest-type",
    type=click.Choice(debts.INTEREST_TYPES),
    default="Monthly",
    show_default=True,
)
@click.option("--min-payment", "min_payment_amount", default="0", show_default=True)
@click.option(
    "--min-type",
    "min_payment_type",
    type=click.Choice(debts.MIN_PAYMENT_TYPES),
    default="amount",
    show_default=True,
)
@click.option("--due-day", "payment_due_day", type=int, default=5, show_default=True)
@click.pass_context
@_handle_errors
def add_bank(ctx: click.Context, name: str, total_debt: str, **options) -> None:
    """Register a debt account."""

    bank = banks.create_bank(_app(ctx).bank_repo, name=name, total_debt=total_debt, **options)
    click.echo(f"Created bank {bank.id}: {bank.name}")


@cli.command("banks")
@click.pass_context
def list_banks(ctx: click.Context) -> None:
    """List debt accounts."""

    app = _app(ctx)
    rows = app.bank_repo.list_all()
    if not rows:
        click.echo("No banks.")
        return
    for bank in rows:
        status = "" if bank.is_active else " (inactive)"
        click.echo(
            f"{bank.id:>4}  {bank.name:<24} {bank.debt_type:<16} "
            f"{to_wire(bank.total_debt):>12}  {bank.interest_rate}% {bank.interest_type}  "
            f"min {bank.min_payment_amount} ({bank.min_payment_type}){status}"
        )
    click.echo(f"Total debt: {to_wire(app.bank_repo.get_total_debt())}")


@cli.command("edit-bank")
@click.argument("bank_id", type=int)
@click.option("--name", default=None)
@click.option("--debt-type", default=None)
@click.option("--total-debt", default=None, help="Corrected outstanding balance")
@click.option("--rate", "interest_rate", default=None, help="Monthly %")
@click.option("--interest-type", type=click.Choice(debts.INTEREST_TYPES), default=None)
@click.option("--min-payment", "min_payment_amount", default=None)
@click.option(
    "--min-type", "min_payment_type", type=click.Choice(debts.MIN_PAYMENT_TYPES), default=None
)
@click.option("--due-day", "payment_due_day", type=int, default=None)
@click.pass_context
@_handle_errors
def edit_bank(ctx: click.Context, bank_id: int, **changes) -> None:
    """Change the terms of a debt account."""

    bank = banks.update_bank(_app(ctx).bank_repo, bank_id, **changes)
    click.echo(f"Updated bank {bank.id}: {bank.name}")


@cli.command("set-active")
@click.argument("bank_id", type=int)
@click.option("--active/--inactive", default=True, help="Include the bank in totals")
@click.pass_context
@_handle_errors
def set_bank_active(ctx: click.Context, bank_id: int, active: bool) -> None:
    """Activate or deactivate a debt account."""

    bank = banks.set_active(_app(ctx).bank_repo, bank_id, active)
    state = "active" if bank.is_active else "inactive"
    click.echo(f"{bank.name}: {state}")


@cli.command("remove-bank")
@click.argument("bank_id", type=int)
@click.pass_context
@_handle_errors
def remove_bank(ctx: click.Context, bank_id: int) -> None:
    """Delete a debt account."""

    banks.delete_bank(_app(ctx).bank_repo, bank_id)
    click.echo(f"Deleted bank {bank_id}.")


@cli.command("plan")
@click.argument("bank_id", type=int)
@click.option("--months", type=int, default=None, help="Projection horizon in months")
@click.option("--csv", "csv_path", type=click.Path(dir_okay=False, path_type=Path))
@today_option
@click.pass_context
@_handle_errors
def plan(
    ctx: click.Context,
    bank_id: int,
    months: Optional[int],
    csv_path: Optional[Path],
    today: Optional[datetime],
) -> None:
    """Show the month-by-month payoff plan for a bank."""

    app = _app(ctx)
    account = debts.DebtAccount.from_bank(app.bank_repo.get_by_id(bank_id))
    projection = debts.project(
        account,
        months if months is not None else app.config.PROJECTION_HORIZON_MONTHS,
        today=_today(today),
        cutoff_month=app.config.NON_PAYOFF_CUTOFF_MONTH,
    )

    for row in projection.rows:
        flags = []
        if row.is_custom_payment:
            flags.append("custom")
        if row.is_paid:
            flags.append("paid")
        click.echo(
            f"{row.month_key}  due {row.due_date.isoformat()}  "
            f"start {to_wire(row.starting_debt):>12}  interest {to_wire(row.interest_accrued):>10}  "
            f"payment {to_wire(row.payment_applied):>10}  remaining {to_wire(row.remaining_debt):>12}"
            + (f"  [{', '.join(flags)}]" if flags else "")
        )

    if projection.warning is not None:
        click.secho(f"Warning: {projection.warning}", fg="yellow")

    summary = debts.schedule_summary(projection)
    click.echo(
        f"Months: {summary.months}  Total interest: {to_wire(summary.total_interest)}  "
        f"Total paid: {to_wire(summary.total_paid)}  "
        f"Payoff: {summary.payoff_month or 'not within horizon'}"
    )

    if csv_path is not None:
        written = export_csv.export_projection_csv(projection=projection, output_path=csv_path)
        click.echo(f"CSV written: {written}")


@cli.command("payoffs")
@today_option
@click.pass_context
@_handle_errors
def payoffs(ctx: click.Context, today: Optional[datetime]) -> None:
    """Show the payoff month and interest cost of every active bank."""

    app = _app(ctx)
    active = app.bank_repo.list_active()
    if not active:
        click.echo("No active banks.")
        return
    projections = debts.project_many(
        [debts.DebtAccount.from_bank(bank) for bank in active],
        horizon_months=app.config.PROJECTION_HORIZON_MONTHS,
        today=_today(today),
        cutoff_month=app.config.NON_PAYOFF_CUTOFF_MONTH,
    )
    for bank in active:
        summary = debts.schedule_summary(projections[bank.id])
        click.echo(
            f"{bank.id:>4}  {bank.name:<24} payoff {summary.payoff_month or 'not within horizon'}  "
            f"interest {to_wire(summary.total_interest)}"
        )


@cli.command("pay")
@click.argument("bank_id", type=int)
@click.option("--month", default=None, help="Month key YYYY-MM (default: current month)")
@today_option
@click.pass_context
@_handle_errors
def pay(ctx: click.Context, bank_id: int, month: Optional[str], today: Optional[datetime]) -> None:
    """Record the scheduled payment for one month."""

    bank = payments.record_scheduled_payment(
        _app(ctx).bank_repo, bank_id, _month_option(month), today=_today(today)
    )
    click.echo(f"{bank.name}: balance now {to_wire(bank.total_debt)}")


@cli.command("extra-payment")
@click.argument("bank_id", type=int)
@click.argument("amount")
@click.pass_context
@_handle_errors
def extra_payment(ctx: click.Context, bank_id: int, amount: str) -> None:
    """Subtract an ad-hoc payment from a bank's balance."""

    bank = payments.record_extra_payment(_app(ctx).bank_repo, bank_id, amount)
    click.echo(f"{bank.name}: balance now {to_wire(bank.total_debt)}")


@cli.command("custom-payment")
@click.argument("bank_id", type=int)
@click.argument("month")
@click.argument("amount", required=False)
@click.option("--clear", is_flag=True, default=False, help="Remove the override")
@click.pass_context
@_handle_errors
def custom_payment(
    ctx: click.Context, bank_id: int, month: str, amount: Optional[str], clear: bool
) -> None:
    """Override (or clear) the payment for one month."""

    if clear == (amount is not None):
        raise click.UsageError("Pass either AMOUNT or --clear.")
    payments.update_custom_payment(_app(ctx).bank_repo, bank_id, month, None if clear else amount)
    if clear:
        click.echo(f"Custom payment for {month} cleared.")
    else:
        click.echo(f"Custom payment for {month} set to {to_wire(to_decimal(amount, field='amount'))}.")


@cli.command("summary")
@click.option("--month", default=None, help="Month key YYYY-MM (default: current month)")
@today_option
@click.pass_context
@_handle_errors
def summary(ctx: click.Context, month: Optional[str], today: Optional[datetime]) -> None:
    """Show the dashboard figures for a month."""

    app = _app(ctx)
    key = _month_option(month) or month_key(_today(today))
    result = reports.portfolio_summary(
        accounts=app.bank_repo.list_all(),
        income_entries=app.income_repo.list_entries(month=key, cutoff_day=app.cutoff_day),
        expense_entries=app.expense_repo.list_entries(month=key, cutoff_day=app.cutoff_day),
        month=key,
        cutoff_day=app.cutoff_day,
    )
    click.echo(f"Month: {result.month_key}")
    click.echo(f"Minimum due: {to_wire(result.minimum_due)}")
    click.echo(f"Total debt: {to_wire(result.total_debt)}")
    click.echo(f"Cash balance: {to_wire(result.cash_balance)}")
    for label, overview in (("Income", result.income), ("Expenses", result.expenses)):
        click.echo(
            f"{label}: {to_wire(overview.settled_total)} of {to_wire(overview.expected_total)} "
            f"settled ({overview.settled_count}/{overview.entry_count}, "
            f"{overview.settled_percent}%)"
        )


@cli.command("months")
@today_option
def months(today: Optional[datetime]) -> None:
    """List the month keys offered around today."""

    for key in reports.month_selector(_today(today)):
        click.echo(key)


@cli.command("add")
@click.argument("kind", type=_KIND)
@click.argument("name")
@click.argument("amount")
@click.argument("start_date")
@click.option("--every", "frequency", type=click.Choice(FREQUENCIES), default=None)
@click.option("--until", "end_date", default=None, help="Last date (YYYY-MM-DD)")
@click.pass_context
@_handle_errors
def add_item(
    ctx: click.Context,
    kind: str,
    name: str,
    amount: str,
    start_date: str,
    frequency: Optional[str],
    end_date: Optional[str],
) -> None:
    """Create an income or expense and its schedule."""

    app = _app(ctx)
    parent = cashflow.create_item(
        app.schedule_repo(kind),
        name=name,
        spec=RecurrenceSpec(
            amount=amount,
            start_date=start_date,
            is_recurring=frequency is not None,
            frequency=frequency,
            end_date=end_date,
        ),
        horizon_months=app.config.SCHEDULE_HORIZON_MONTHS,
        income_cap=app.config.INCOME_ENTRY_CAP,
        max_steps=app.config.SCHEDULE_MAX_STEPS,
    )
    click.echo(f"Created {kind} {parent.id} with {len(parent.entries)} entries.")


@cli.command("edit")
@click.argument("kind", type=_KIND)
@click.argument("parent_id", type=int)
@click.option("--name", default=None)
@click.option("--amount", default=None)
@click.option("--start", "start_date", default=None, help="First date (YYYY-MM-DD)")
@click.option("--every", "frequency", type=click.Choice(FREQUENCIES), default=None)
@click.option("--one-off", is_flag=True, default=False, help="Stop recurring")
@click.option("--until", "end_date", default=None, help="Last date (YYYY-MM-DD)")
@click.option(
    "--discard-settled", is_flag=True, default=False, help="Do not carry settled flags over"
)
@click.pass_context
@_handle_errors
def edit_item(
    ctx: click.Context,
    kind: str,
    parent_id: int,
    name: Optional[str],
    amount: Optional[str],
    start_date: Optional[str],
    frequency: Optional[str],
    one_off: bool,
    end_date: Optional[str],
    discard_settled: bool,
) -> None:
    """Change an income or expense and regenerate its schedule."""

    if one_off and frequency is not None:
        raise click.UsageError("Pass either --every or --one-off.")
    app = _app(ctx)
    repo = app.schedule_repo(kind)
    spec = spec_from_parent(repo.get_by_id(parent_id))
    changes = {
        key: value
        for key, value in (("amount", amount), ("start_date", start_date), ("end_date", end_date))
        if value is not None
    }
    if frequency is not None:
        changes.update(is_recurring=True, frequency=frequency)
    elif one_off:
        changes.update(is_recurring=False, frequency=None, end_date=None)
    parent = cashflow.update_item(
        repo,
        parent_id,
        name=name,
        spec=replace(spec, **changes),
        keep_settled=not discard_settled,
        horizon_months=app.config.SCHEDULE_HORIZON_MONTHS,
        income_cap=app.config.INCOME_ENTRY_CAP,
        max_steps=app.config.SCHEDULE_MAX_STEPS,
    )
    kept = sum(1 for entry in parent.entries if entry.settled)
    click.echo(
        f"Updated {kind} {parent.id} with {len(parent.entries)} entries ({kept} settled)."
    )


@cli.command("remove")
@click.argument("kind", type=_KIND)
@click.argument("parent_id", type=int)
@click.pass_context
@_handle_errors
def remove_item(ctx: click.Context, kind: str, parent_id: int) -> None:
    """Delete an income or expense with all of its entries."""

    cashflow.delete_item(_app(ctx).schedule_repo(kind), parent_id)
    click.echo(f"Deleted {kind} {parent_id}.")


@cli.command("entries")
@click.argument("kind", type=_KIND)
@click.option("--month", default=None, help="Month key YYYY-MM (default: current month)")
@click.option("--csv", "csv_path", type=click.Path(dir_okay=False, path_type=Path))
@today_option
@click.pass_context
@_handle_errors
def entries(
    ctx: click.Context,
    kind: str,
    month: Optional[str],
    csv_path: Optional[Path],
    today: Optional[datetime],
) -> None:
    """List income or expense entries for a month."""

    app = _app(ctx)
    key = _month_option(month) or month_key(_today(today))
    rows = app.schedule_repo(kind).list_entries(month=key, cutoff_day=app.cutoff_day)
    if not rows:
        click.echo(f"No {kind} entries for {key}.")
    for entry in rows:
        mark = "x" if entry.settled else " "
        click.echo(
            f"[{mark}] {entry.id:>5}  {entry.entry_date.isoformat()}  "
            f"{entry.parent_name:<24} {to_wire(entry.amount):>12}"
        )
    if csv_path is not None:
        written = export_csv.export_entries_csv(entries=rows, output_path=csv_path)
        click.echo(f"CSV written: {written}")


@cli.command("settle")
@click.argument("kind", type=_KIND)
@click.argument("entry_id", type=int)
@click.option("--undo", is_flag=True, default=False, help="Mark as not settled")
@click.pass_context
@_handle_errors
def settle(ctx: click.Context, kind: str, entry_id: int, undo: bool) -> None:
    """Mark an income received or an expense paid."""

    view = cashflow.settle_entry(_app(ctx).schedule_repo(kind), entry_id, settled=not undo)
    state = "settled" if view.settled else "open"
    click.echo(f"{view.parent_name} {view.entry_date.isoformat()}: {state}")


def main() -> None:
    cli()


if __name__ == "__main__":
    main()
