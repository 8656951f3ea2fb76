#!/usr/bin/env python3
"""
Command-line client for the fund tracker API.

Usage:
    python -m fundctl.cli <resource> <verb> [args] [options]

Examples:
    python -m fundctl.cli investment list
    python -m fundctl.cli investment create "Acme" --amount 100000 --round Seed --equity 10
    python -m fundctl.cli exit record 1 --proceeds 250000
    python -m fundctl.cli portfolio
"""

from contextlib import contextmanager
from datetime import date
from decimal import Decimal, InvalidOperation

import click
from pydantic import ValidationError

from fundctl import config as cfg
from fundctl import output as out
from fundctl.client import APIError, TrackerClient
from fundctl.portfolio import load_portfolio
from fundtracker.models import FundingRound, InvestmentStatus
from fundtracker.schemas import (
    ExitDetailsCreate,
    ExitDetailsUpdate,
    InvestmentCreate,
    InvestmentUpdate,
)
from fundtracker.schemas.exit_details import quantize_multiple


# =============================================================================
# CLI Context
# =============================================================================


class Context:
    """CLI context holding configuration and the API client."""

    def __init__(self):
        self.api_url: str = cfg.DEFAULT_API_URL
        self.output_format: str = "table"
        self._client: TrackerClient | None = None

    @property
    def client(self) -> TrackerClient:
        if self._client is None:
            self._client = TrackerClient(self.api_url)
        return self._client


pass_context = click.make_pass_decorator(Context, ensure=True)


@contextmanager
def api_errors(ctx: Context):
    """Turn API errors (unreachable service included) and validation errors into exit 1."""
    try:
        yield
    except APIError as e:
        out.error(e.detail)
        raise SystemExit(1)
    except ValidationError as e:
        for err in e.errors():
            field = ".".join(str(p) for p in err["loc"]) or "input"
            out.error(f"{field}: {err['msg']}")
        raise SystemExit(1)


class DecimalParam(click.ParamType):
    """Exact decimal amounts (no float rounding)."""

    name = "decimal"

    def convert(self, value, param, ctx):
        if isinstance(value, Decimal):
            return value
        try:
            return Decimal(str(value).replace(",", ""))
        except InvalidOperation:
            self.fail(f"{value!r} is not a valid decimal number", param, ctx)


DECIMAL = DecimalParam()
DATE = click.DateTime(formats=["%Y-%m-%d"])
ROUNDS = click.Choice([r.value for r in FundingRound])
STATUSES = click.Choice([s.value for s in InvestmentStatus])

INVESTMENT_COLUMNS = [
    ("id", "ID", 5),
    ("company_name", "Company", 24),
    ("investment_date", "Date", 10),
    ("funding_round", "Round", 11),
    ("amount_invested", "Invested", 16),
    ("equity_percentage", "Equity %", 8),
    ("current_valuation", "Valuation", 16),
    ("status", "Status", 11),
]


def _dump(model, fmt: str) -> dict:
    """Model as a dict: rich types for tables, JSON-safe values otherwise."""
    return model.model_dump(mode="python" if fmt == "table" else "json")


# =============================================================================
# Main CLI Group
# =============================================================================


@click.group()
@click.option(
    "--api-url", "-u",
    default=None,
    help="Fund tracker API URL (overrides $TRACKER_API_URL and config)",
)
@click.option(
    "--output", "-o",
    type=click.Choice(["table", "json", "yaml"]),
    default="table",
    help="Output format",
)
@pass_context
def cli(ctx: Context, api_url: str | None, output: str):
    """Manage fund investments and exits."""
    ctx.api_url = cfg.resolve_api_url(api_url)
    ctx.output_format = output


# =============================================================================
# Config Commands
# =============================================================================


@cli.command("config")
@click.argument("action", required=False, type=click.Choice(["show", "set"]))
@click.argument("args", nargs=-1)
def config_cmd(action: str | None, args: tuple):
    """Manage CLI configuration.

    Without arguments: interactive setup.

    \b
    Examples:
        fundctl config              # Interactive setup
        fundctl config show         # Show current config
        fundctl config set api_url http://localhost:8000
    """
    if action is None:
        config_path = cfg.find_config()
        if config_path:
            out.info(f"Config file found: {config_path}")
        else:
            out.info("No config file found. Creating new config.")

        current = {**cfg.get_default_config(), **cfg.load_config()}
        new_config = {
            **current,
            "api_url": click.prompt("Fund tracker API URL", default=current["api_url"]),
        }

        save_path = cfg.save_config(new_config)
        out.success(f"Configuration saved to {save_path}")

    elif action == "show":
        config_path = cfg.find_config()
        if config_path is None:
            out.info("No configuration file found.")
            out.info("Run 'fundctl config' to create one.")
            return

        config = cfg.load_config()
        out.info(f"Config file: {config_path}")
        out.info("")
        for key, value in config.items():
            out.info(f"  {key}: {value}")

    elif action == "set":
        if len(args) != 2:
            out.error("Usage: fundctl config set <key> <value>")
            raise SystemExit(1)

        key, value = args
        if key not in cfg.VALID_KEYS:
            out.error(f"Unknown config key: {key}")
            out.info(f"Valid keys: {', '.join(sorted(cfg.VALID_KEYS))}")
            raise SystemExit(1)

        config = cfg.load_config()
        config[key] = value
        save_path = cfg.save_config(config)
        out.success(f"Set {key} = {value}")
        out.info(f"Saved to {save_path}")


# =============================================================================
# Investment Commands
# =============================================================================


@cli.group()
def investment():
    """Manage investments."""
    pass


@investment.command("list")
@click.option("--status", type=STATUSES, default=None, help="Only show this status")
@pass_context
def investment_list(ctx: Context, status: str | None):
    """List all investments, newest first."""
    with api_errors(ctx):
        investments = ctx.client.list_investments()
        if status:
            investments = [i for i in investments if i.status.value == status]
        rows = [_dump(i, ctx.output_format) for i in investments]
        out.output(rows, ctx.output_format, INVESTMENT_COLUMNS)


@investment.command("show")
@click.argument("investment_id", type=int)
@pass_context
def investment_show(ctx: Context, investment_id: int):
    """Show an investment and its exit."""
    with api_errors(ctx):
        inv = ctx.client.get_investment(investment_id)
        if inv is None:
            out.error(f"Investment {investment_id} not found")
            raise SystemExit(1)
        exit_details = ctx.client.get_exit_details(investment_id)

        if ctx.output_format == "table":
            out.output(_dump(inv, "table"), "table")
            out.info("\nExit:")
            if exit_details:
                out.output(_dump(exit_details, "table"), "table")
            else:
                out.info("  (no exit recorded)")
        else:
            data = {
                "investment": _dump(inv, ctx.output_format),
                "exit": _dump(exit_details, ctx.output_format) if exit_details else None,
            }
            out.output(data, ctx.output_format)


@investment.command("create")
@click.argument("company_name")
@click.option("--amount", type=DECIMAL, required=True, help="Amount invested")
@click.option("--round", "funding_round", type=ROUNDS, required=True, help="Funding round")
@click.option("--equity", type=DECIMAL, required=True, help="Equity percentage (0-100)")
@click.option("--date", "investment_date", type=DATE, default=None, help="Investment date (default: today)")
@click.option("--valuation", type=DECIMAL, default=None, help="Current valuation of the stake")
@click.option("--status", type=STATUSES, default=InvestmentStatus.ACTIVE.value, help="Status")
@click.option("--notes", default=None, help="Free-text notes")
@pass_context
def investment_create(
    ctx: Context,
    company_name: str,
    amount: Decimal,
    funding_round: str,
    equity: Decimal,
    investment_date,
    valuation: Decimal | None,
    status: str,
    notes: str | None,
):
    """Record a new investment."""
    with api_errors(ctx):
        data = InvestmentCreate(
            company_name=company_name,
            investment_date=investment_date.date() if investment_date else date.today(),
            amount_invested=amount,
            funding_round=funding_round,
            equity_percentage=equity,
            current_valuation=valuation,
            status=status,
            notes=notes,
        )
        result = ctx.client.create_investment(data)
        out.success(f"Created investment {result.id} ({result.company_name})")
        out.output(_dump(result, ctx.output_format), ctx.output_format)


@investment.command("update")
@click.argument("investment_id", type=int)
@click.option("--name", "company_name", default=None, help="Company name")
@click.option("--amount", type=DECIMAL, default=None, help="Amount invested")
@click.option("--round", "funding_round", type=ROUNDS, default=None, help="Funding round")
@click.option("--equity", type=DECIMAL, default=None, help="Equity percentage (0-100)")
@click.option("--date", "investment_date", type=DATE, default=None, help="Investment date")
@click.option("--valuation", type=DECIMAL, default=None, help="Current valuation of the stake")
@click.option("--clear-valuation", is_flag=True, help="Forget the current valuation")
@click.option("--status", type=STATUSES, default=None, help="Status")
@click.option("--notes", default=None, help="Free-text notes")
@click.option("--clear-notes", is_flag=True, help="Remove the notes")
@pass_context
def investment_update(
    ctx: Context,
    investment_id: int,
    company_name: str | None,
    amount: Decimal | None,
    funding_round: str | None,
    equity: Decimal | None,
    investment_date,
    valuation: Decimal | None,
    clear_valuation: bool,
    status: str | None,
    notes: str | None,
    clear_notes: bool,
):
    """Change some fields of an investment."""
    changes = {
        "company_name": company_name,
        "amount_invested": amount,
        "funding_round": funding_round,
        "equity_percentage": equity,
        "investment_date": investment_date.date() if investment_date else None,
        "current_valuation": valuation,
        "status": status,
        "notes": notes,
    }
    changes = {k: v for k, v in changes.items() if v is not None}
    if clear_valuation:
        changes["current_valuation"] = None
    if clear_notes:
        changes["notes"] = None

    if not changes:
        out.error("Nothing to update")
        raise SystemExit(1)

    with api_errors(ctx):
        result = ctx.client.update_investment(investment_id, InvestmentUpdate(**changes))
        out.success(f"Updated investment {investment_id}")
        out.output(_dump(result, ctx.output_format), ctx.output_format)


@investment.command("delete")
@click.argument("investment_id", type=int)
@click.confirmation_option(prompt="Delete this investment and its exit record?")
@pass_context
def investment_delete(ctx: Context, investment_id: int):
    """Delete an investment (and its exit record)."""
    with api_errors(ctx):
        if ctx.client.delete_investment(investment_id):
            out.success(f"Deleted investment {investment_id}")
        else:
            out.info(f"Investment {investment_id} does not exist")


# =============================================================================
# Exit Commands
# =============================================================================


@cli.group("exit")
def exit_group():
    """Manage exits."""
    pass


@exit_group.command("show")
@click.argument("investment_id", type=int)
@pass_context
def exit_show(ctx: Context, investment_id: int):
    """Show the exit of an investment."""
    with api_errors(ctx):
        exit_details = ctx.client.get_exit_details(investment_id)
        if exit_details is None:
            out.info(f"No exit recorded for investment {investment_id}")
            return
        out.output(_dump(exit_details, ctx.output_format), ctx.output_format)


@exit_group.command("record")
@click.argument("investment_id", type=int)
@click.option("--proceeds", type=DECIMAL, required=True, help="Proceeds received")
@click.option("--date", "exit_date", type=DATE, default=None, help="Exit date (default: today)")
@click.option("--multiple", type=DECIMAL, default=None, help="Exit multiple (default: proceeds / amount invested)")
@click.option("--notes", default=None, help="Free-text notes")
@pass_context
def exit_record(
    ctx: Context,
    investment_id: int,
    proceeds: Decimal,
    exit_date,
    multiple: Decimal | None,
    notes: str | None,
):
    """Record the exit of an investment (marks it Exited)."""
    with api_errors(ctx):
        if multiple is None:
            inv = ctx.client.get_investment(investment_id)
            if inv is None:
                out.error(f"Investment {investment_id} not found")
                raise SystemExit(1)
            multiple = quantize_multiple(proceeds / inv.amount_invested)

        data = ExitDetailsCreate(
            investment_id=investment_id,
            exit_date=exit_date.date() if exit_date else date.today(),
            proceeds_received=proceeds,
            exit_multiple=multiple,
            notes=notes,
        )
        result = ctx.client.create_exit_details(data)
        out.success(f"Recorded exit {result.id} for investment {investment_id} ({result.exit_multiple}x)")
        out.output(_dump(result, ctx.output_format), ctx.output_format)


@exit_group.command("update")
@click.argument("exit_id", type=int)
@click.option("--proceeds", type=DECIMAL, default=None, help="Proceeds received")
@click.option("--date", "exit_date", type=DATE, default=None, help="Exit date")
@click.option("--multiple", type=DECIMAL, default=None, help="Exit multiple")
@click.option("--notes", default=None, help="Free-text notes")
@pass_context
def exit_update(
    ctx: Context,
    exit_id: int,
    proceeds: Decimal | None,
    exit_date,
    multiple: Decimal | None,
    notes: str | None,
):
    """Change some fields of an exit record."""
    changes = {
        "proceeds_received": proceeds,
        "exit_date": exit_date.date() if exit_date else None,
        "exit_multiple": multiple,
        "notes": notes,
    }
    changes = {k: v for k, v in changes.items() if v is not None}
    if not changes:
        out.error("Nothing to update")
        raise SystemExit(1)

    with api_errors(ctx):
        result = ctx.client.update_exit_details(exit_id, ExitDetailsUpdate(**changes))
        out.success(f"Updated exit {exit_id}")
        out.output(_dump(result, ctx.output_format), ctx.output_format)


@exit_group.command("delete")
@click.argument("exit_id", type=int)
@pass_context
def exit_delete(ctx: Context, exit_id: int):
    """Delete an exit record (the investment becomes Active again)."""
    with api_errors(ctx):
        ctx.client.delete_exit_details(exit_id)
        out.success(f"Deleted exit {exit_id}")


# =============================================================================
# Portfolio Command
# =============================================================================


@cli.command("portfolio")
@pass_context
def portfolio_cmd(ctx: Context):
    """Show portfolio totals computed from all investments and exits."""
    with api_errors(ctx):
        portfolio = load_portfolio(ctx.client)

    m = portfolio.metrics
    summary = {
        "investments": m.investment_count,
        "total_invested": m.total_invested,
        "portfolio_value": m.portfolio_value,
        "return_percent": m.return_percent,
        "total_realized": m.total_realized,
        "active": m.active.count,
        "active_invested": m.active.invested,
        "exited": m.exited.count,
        "exited_invested": m.exited.invested,
        "written_off": m.written_off.count,
        "written_off_invested": m.written_off.invested,
    }
    out.output(summary, ctx.output_format)


if __name__ == "__main__":
    cli()
