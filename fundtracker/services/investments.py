"""Investment service - record access for the investments table."""

import logging

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from fundtracker import telemetry
from fundtracker.database import transaction, utcnow
from fundtracker.exceptions import NotFoundError
from fundtracker.models import Investment
from fundtracker.schemas.investment import InvestmentCreate, InvestmentUpdate

logger = logging.getLogger(__name__)


async def create_investment(session: AsyncSession, data: InvestmentCreate) -> Investment:
    """Record a new investment.

    Args:
        session: Database session
        data: Validated investment fields

    Returns:
        The stored investment, reloaded from the database
    """
    investment = Investment(**data.model_dump())
    async with transaction(session, f"Creating investment in {data.company_name}"):
        session.add(investment)
    await session.refresh(investment)

    logger.info(
        f"Created investment {investment.id}: {investment.company_name} "
        f"({investment.funding_round.value}, {investment.amount_invested})"
    )
    telemetry.record_investment_created(
        investment.funding_round.value, investment.amount_invested
    )
    return investment


async def list_investments(session: AsyncSession) -> list[Investment]:
    """Get all investments, newest first."""
    try:
        result = await session.execute(
            select(Investment).order_by(Investment.created_at.desc(), Investment.id.desc())
        )
    except SQLAlchemyError:
        logger.exception("Failed to fetch investments")
        raise
    return list(result.scalars().all())


async def get_investment(session: AsyncSession, investment_id: int) -> Investment | None:
    """Get one investment.

    Returns:
        The investment, or None if no row has this id
    """
    try:
        result = await session.execute(
            select(Investment).where(Investment.id == investment_id)
        )
    except SQLAlchemyError:
        logger.exception(f"Failed to fetch investment {investment_id}")
        raise
    return result.scalar_one_or_none()


async def update_investment(
    session: AsyncSession, investment_id: int, data: InvestmentUpdate
) -> Investment:
    """Apply a partial update to an investment.

    Only the fields set on ``data`` are written; updated_at is always refreshed.

    Raises:
        NotFoundError: If no investment has this id
    """
    changes = data.model_dump(exclude_unset=True)

    async with transaction(session, f"Updating investment {investment_id}"):
        investment = await session.get(Investment, investment_id)
        if investment is None:
            raise NotFoundError("Investment", investment_id)

        for field, value in changes.items():
            setattr(investment, field, value)
        investment.updated_at = utcnow()
    await session.refresh(investment)

    logger.info(f"Updated investment {investment_id}: {sorted(changes) or 'no fields'}")
    return investment


async def delete_investment(session: AsyncSession, investment_id: int) -> bool:
    """Delete an investment and, through the cascade, its exit record.

    Returns:
        True if a row was removed, False if no investment has this id
    """
    async with transaction(session, f"Deleting investment {investment_id}"):
        investment = await session.get(Investment, investment_id)
        if investment is None:
            return False
        await session.delete(investment)

    logger.info(f"Deleted investment {investment_id}")
    telemetry.record_investment_deleted()
    return True
