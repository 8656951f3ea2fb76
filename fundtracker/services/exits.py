"""Exit service - exit records and the investment status they drive.

Status-sync rules:
- Recording an exit sets the investment to EXITED, but only if it is not
  EXITED already (an already-exited investment keeps its updated_at).
- Deleting an exit always sets the investment back to ACTIVE and refreshes
  its updated_at, whatever the previous status was.

Each rule runs in the same transaction as the exit insert/delete, so the
exit row and the investment status are never left out of step.
"""

import logging

from sqlalchemy import select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from fundtracker import telemetry
from fundtracker.database import transaction, utcnow
from fundtracker.exceptions import NotFoundError
from fundtracker.models import ExitDetails, Investment, InvestmentStatus
from fundtracker.schemas.exit_details import ExitDetailsCreate, ExitDetailsUpdate

logger = logging.getLogger(__name__)


async def create_exit_details(session: AsyncSession, data: ExitDetailsCreate) -> ExitDetails:
    """Record the exit of an investment and mark the investment as exited.

    Args:
        session: Database session
        data: Validated exit fields

    Returns:
        The stored exit record

    Raises:
        NotFoundError: If the investment does not exist
        IntegrityError: If the investment already has an exit record
    """
    async with transaction(session, f"Recording exit for investment {data.investment_id}"):
        investment = await session.get(Investment, data.investment_id)
        if investment is None:
            raise NotFoundError("Investment", data.investment_id)

        exit_details = ExitDetails(**data.model_dump())
        session.add(exit_details)
        await session.flush()

        # Guarded update: leaves already-exited investments untouched
        await session.execute(
            update(Investment)
            .where(
                Investment.id == data.investment_id,
                Investment.status != InvestmentStatus.EXITED,
            )
            .values(status=InvestmentStatus.EXITED, updated_at=utcnow())
        )
    await session.refresh(exit_details)

    logger.info(
        f"Recorded exit {exit_details.id} for investment {data.investment_id} "
        f"(proceeds {exit_details.proceeds_received}, {exit_details.exit_multiple}x)"
    )
    telemetry.record_exit_recorded(exit_details.proceeds_received)
    return exit_details


async def get_exit_details(session: AsyncSession, exit_id: int) -> ExitDetails | None:
    """Get an exit record by its own id, or None."""
    try:
        result = await session.execute(select(ExitDetails).where(ExitDetails.id == exit_id))
    except SQLAlchemyError:
        logger.exception(f"Failed to fetch exit {exit_id}")
        raise
    return result.scalar_one_or_none()


async def get_exit_details_by_investment(
    session: AsyncSession, investment_id: int
) -> ExitDetails | None:
    """Get the exit record of an investment.

    Returns:
        The exit record, or None if the investment has none (or does not exist)
    """
    try:
        result = await session.execute(
            select(ExitDetails).where(ExitDetails.investment_id == investment_id)
        )
    except SQLAlchemyError:
        logger.exception(f"Failed to fetch exit for investment {investment_id}")
        raise
    return result.scalar_one_or_none()


async def update_exit_details(
    session: AsyncSession, exit_id: int, data: ExitDetailsUpdate
) -> ExitDetails:
    """Apply a partial update to an exit record.

    The parent investment's status is not touched.

    Raises:
        NotFoundError: If no exit record has this id
    """
    changes = data.model_dump(exclude_unset=True)

    async with transaction(session, f"Updating exit {exit_id}"):
        exit_details = await session.get(ExitDetails, exit_id)
        if exit_details is None:
            raise NotFoundError("Exit details", exit_id)

        for field, value in changes.items():
            setattr(exit_details, field, value)
    await session.refresh(exit_details)

    logger.info(f"Updated exit {exit_id}: {sorted(changes) or 'no fields'}")
    return exit_details


async def delete_exit_details(session: AsyncSession, exit_id: int) -> bool:
    """Delete an exit record and reset its investment to ACTIVE.

    Raises:
        NotFoundError: If no exit record has this id
    """
    async with transaction(session, f"Deleting exit {exit_id}"):
        exit_details = await session.get(ExitDetails, exit_id)
        if exit_details is None:
            raise NotFoundError("Exit details", exit_id)

        investment_id = exit_details.investment_id
        await session.delete(exit_details)
        await session.flush()

        # Unconditional: refreshes updated_at even if already ACTIVE
        await session.execute(
            update(Investment)
            .where(Investment.id == investment_id)
            .values(status=InvestmentStatus.ACTIVE, updated_at=utcnow())
        )

    logger.info(f"Deleted exit {exit_id}, investment {investment_id} is active again")
    telemetry.record_exit_deleted()
    return True
