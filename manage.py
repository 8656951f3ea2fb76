#!/usr/bin/env python3
"""
Management script for the fund tracker database.

Talks to the database directly (the API does not need to be running):
    python manage.py db init
    python manage.py db status
    python manage.py db clear
    python manage.py db seed [-f data/investments.json]
"""

import asyncio
import json
from decimal import Decimal
from pathlib import Path

import click
from pydantic import ValidationError
from sqlalchemy import func, select

from fundtracker.database import AsyncSessionLocal, Base, engine, init_db
from fundtracker.models import ExitDetails, Investment
from fundtracker.schemas import ExitDetailsCreate, InvestmentCreate
from fundtracker.schemas.exit_details import quantize_multiple
from fundtracker.services import exits as exit_service
from fundtracker.services import investments as investment_service


# ============================================================================
# Direct database operations (internal)
# ============================================================================


async def _clear_db():
    """Drop and recreate all tables."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
        await conn.run_sync(Base.metadata.create_all)


async def _count_records():
    """Count records in each table."""
    async with AsyncSessionLocal() as session:
        counts = {}
        for model, name in [(Investment, "investments"), (ExitDetails, "exit_details")]:
            result = await session.execute(select(func.count()).select_from(model))
            counts[name] = result.scalar_one()
        return counts


async def _seed(filepath: Path):
    """Load investments (and their optional exit) from a JSON file.

    Each entry holds the investment fields plus an optional "exit" object
    with exit_date, proceeds_received and notes. The exit multiple is
    derived from the proceeds.
    """
    with open(filepath) as f:
        entries = json.load(f)

    async with AsyncSessionLocal() as session:
        existing = set(
            (await session.execute(select(Investment.company_name))).scalars().all()
        )

        loaded = 0
        skipped = 0
        exits = 0

        for entry in entries:
            exit_data = entry.pop("exit", None)
            name = entry.get("company_name", "?")

            if name in existing:
                skipped += 1
                click.echo(f"  Skipped {name} (already exists)")
                continue

            try:
                data = InvestmentCreate(**entry)
            except ValidationError as e:
                skipped += 1
                click.echo(f"  Invalid entry {name}: {e.errors()[0]['msg']}", err=True)
                continue

            investment = await investment_service.create_investment(session, data)
            existing.add(name)
            loaded += 1
            click.echo(f"  Loaded {investment.company_name} ({investment.funding_round.value})")

            if exit_data:
                proceeds = Decimal(str(exit_data["proceeds_received"]))
                await exit_service.create_exit_details(
                    session,
                    ExitDetailsCreate(
                        investment_id=investment.id,
                        exit_date=exit_data["exit_date"],
                        proceeds_received=proceeds,
                        exit_multiple=quantize_multiple(proceeds / investment.amount_invested),
                        notes=exit_data.get("notes"),
                    ),
                )
                exits += 1
                click.echo(f"    Recorded exit: {proceeds}")

    return loaded, skipped, exits


# ============================================================================
# CLI: Main group
# ============================================================================


@click.group()
def cli():
    """Fund tracker management commands."""
    pass


# ============================================================================
# CLI: db (direct database access)
# ============================================================================


@cli.group()
def db():
    """Direct database management (bypasses API)."""
    pass


@db.command("init")
def db_init():
    """Create the tables if they don't exist."""
    asyncio.run(init_db())
    click.echo("Database initialized.")


@db.command("clear")
@click.confirmation_option(prompt="Are you sure you want to clear all data?")
def db_clear():
    """Clear all data from the database (destructive!)."""
    click.echo("Clearing database...")
    asyncio.run(_clear_db())
    click.echo("Database cleared and tables recreated.")


@db.command("status")
def db_status():
    """Show database status and record counts."""

    async def run():
        await init_db()
        return await _count_records()

    counts = asyncio.run(run())

    click.echo("\nDatabase Status:")
    click.echo("-" * 30)
    for table, count in counts.items():
        click.echo(f"  {table:<15} {count:>10,}")
    click.echo("-" * 30)
    click.echo(f"  {'Total':<15} {sum(counts.values()):>10,}")


@db.command("seed")
@click.option(
    "--file", "-f",
    default="data/investments.json",
    type=click.Path(exists=True),
    help="JSON file with investment data",
)
def db_seed(file):
    """Load sample investments from a JSON file directly to database."""
    click.echo(f"Loading investments from {file} (direct DB)...")

    async def run():
        await init_db()
        return await _seed(Path(file))

    loaded, skipped, exits = asyncio.run(run())
    click.echo(f"\nDone: {loaded} loaded, {skipped} skipped, {exits} exits recorded")


if __name__ == "__main__":
    cli()
