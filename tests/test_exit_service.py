"""Tests for the exit service and the status rules it enforces."""

import asyncio
from datetime import date
from decimal import Decimal

import pytest
from sqlalchemy import Update
from sqlalchemy.exc import IntegrityError, OperationalError
from sqlalchemy.ext.asyncio import AsyncSession

from fundtracker.exceptions import NotFoundError
from fundtracker.models import InvestmentStatus
from fundtracker.schemas import ExitDetailsCreate, ExitDetailsUpdate
from fundtracker.services import exits as exit_service
from fundtracker.services import investments as investment_service


def make_exit(investment_id: int, **overrides) -> ExitDetailsCreate:
    fields = {
        "investment_id": investment_id,
        "exit_date": date(2024, 6, 1),
        "proceeds_received": Decimal("300000.00"),
        "exit_multiple": Decimal("3"),
    }
    fields.update(overrides)
    return ExitDetailsCreate(**fields)


@pytest.fixture
def failing_status_update(monkeypatch):
    """Make every UPDATE statement fail; inserts, deletes and selects still run."""
    execute = AsyncSession.execute

    async def fail_on_update(self, statement, *args, **kwargs):
        if isinstance(statement, Update):
            raise OperationalError(str(statement), {}, Exception("disk I/O error"))
        return await execute(self, statement, *args, **kwargs)

    monkeypatch.setattr(AsyncSession, "execute", fail_on_update)


# ============================================================================
# Recording an exit
# ============================================================================


@pytest.mark.asyncio
async def test_create_exit_sets_status_exited(test_session, sample_investment):
    """Test that recording an exit marks the investment Exited."""
    before = sample_investment.updated_at
    await asyncio.sleep(0.01)

    exit_details = await exit_service.create_exit_details(
        test_session, make_exit(sample_investment.id)
    )

    assert exit_details.id is not None
    assert exit_details.exit_multiple == Decimal("3.0000")

    await test_session.refresh(sample_investment)
    assert sample_investment.status == InvestmentStatus.EXITED
    assert sample_investment.updated_at > before


@pytest.mark.asyncio
async def test_create_exit_keeps_already_exited(test_session, sample_investment):
    """Test that an investment already marked Exited is left untouched."""
    sample_investment.status = InvestmentStatus.EXITED
    await test_session.commit()
    await test_session.refresh(sample_investment)
    before = sample_investment.updated_at
    await asyncio.sleep(0.01)

    await exit_service.create_exit_details(test_session, make_exit(sample_investment.id))

    await test_session.refresh(sample_investment)
    assert sample_investment.status == InvestmentStatus.EXITED
    assert sample_investment.updated_at == before


@pytest.mark.asyncio
async def test_create_exit_for_written_off(test_session, sample_investment):
    """Test that a written-off investment can still be exited."""
    sample_investment.status = InvestmentStatus.WRITTEN_OFF
    await test_session.commit()

    await exit_service.create_exit_details(
        test_session,
        make_exit(sample_investment.id, proceeds_received=Decimal("1000.00"), exit_multiple=Decimal("0.01")),
    )

    await test_session.refresh(sample_investment)
    assert sample_investment.status == InvestmentStatus.EXITED


@pytest.mark.asyncio
async def test_create_exit_unknown_investment(test_session):
    """Test that the investment must exist."""
    with pytest.raises(NotFoundError):
        await exit_service.create_exit_details(test_session, make_exit(999))


@pytest.mark.asyncio
async def test_create_second_exit_fails_and_rolls_back(test_session, sample_exit):
    """Test that a second exit is rejected and nothing changes."""
    exit_id, investment_id = sample_exit.id, sample_exit.investment_id

    with pytest.raises(IntegrityError):
        await exit_service.create_exit_details(
            test_session, make_exit(investment_id, proceeds_received=Decimal("1.00"))
        )

    stored = await exit_service.get_exit_details_by_investment(test_session, investment_id)
    assert stored.id == exit_id
    assert stored.proceeds_received == Decimal("300000.00")


@pytest.mark.asyncio
async def test_create_exit_status_failure_discards_exit(
    test_session, sample_investment, failing_status_update
):
    """Test that a failed status update also undoes the exit insert."""
    investment_id = sample_investment.id
    await test_session.refresh(sample_investment)
    updated_at = sample_investment.updated_at

    with pytest.raises(OperationalError):
        await exit_service.create_exit_details(test_session, make_exit(investment_id))

    assert await exit_service.get_exit_details_by_investment(test_session, investment_id) is None
    investment = await investment_service.get_investment(test_session, investment_id)
    assert investment.status == InvestmentStatus.ACTIVE
    assert investment.updated_at == updated_at


def test_exit_multiple_rounded_to_four_places():
    """Test that the multiple is stored with four decimal places."""
    data = make_exit(1, exit_multiple=Decimal("2.123456"))
    assert data.exit_multiple == Decimal("2.1235")


def test_exit_multiple_rounding_to_zero_rejected():
    """Test that a multiple that rounds to zero is refused."""
    with pytest.raises(ValueError):
        make_exit(1, exit_multiple=Decimal("0.00001"))


# ============================================================================
# Reading, updating
# ============================================================================


@pytest.mark.asyncio
async def test_get_exit_details(test_session, sample_exit):
    """Test both lookups: by exit id and by investment id."""
    by_id = await exit_service.get_exit_details(test_session, sample_exit.id)
    by_investment = await exit_service.get_exit_details_by_investment(
        test_session, sample_exit.investment_id
    )

    assert by_id.id == sample_exit.id
    assert by_investment.id == sample_exit.id
    assert await exit_service.get_exit_details(test_session, 999) is None
    assert await exit_service.get_exit_details_by_investment(test_session, 999) is None


@pytest.mark.asyncio
async def test_update_exit_leaves_status(test_session, sample_exit, sample_investment):
    """Test that editing an exit does not touch the investment status."""
    updated = await exit_service.update_exit_details(
        test_session, sample_exit.id, ExitDetailsUpdate(notes="Earn-out settled")
    )

    assert updated.notes == "Earn-out settled"
    assert updated.proceeds_received == Decimal("300000.00")

    await test_session.refresh(sample_investment)
    assert sample_investment.status == InvestmentStatus.EXITED


@pytest.mark.asyncio
async def test_update_exit_unknown(test_session):
    """Test that updating an unknown exit raises NotFoundError."""
    with pytest.raises(NotFoundError):
        await exit_service.update_exit_details(test_session, 999, ExitDetailsUpdate(notes="x"))


# ============================================================================
# Deleting an exit
# ============================================================================


@pytest.mark.asyncio
async def test_delete_exit_sets_status_active(test_session, sample_exit, sample_investment):
    """Test that removing the exit moves the investment back to Active."""
    await test_session.refresh(sample_investment)
    before = sample_investment.updated_at
    await asyncio.sleep(0.01)

    assert await exit_service.delete_exit_details(test_session, sample_exit.id) is True

    await test_session.refresh(sample_investment)
    assert sample_investment.status == InvestmentStatus.ACTIVE
    assert sample_investment.updated_at > before
    assert await exit_service.get_exit_details(test_session, sample_exit.id) is None


@pytest.mark.asyncio
async def test_delete_exit_from_written_off_becomes_active(
    test_session, sample_exit, sample_investment
):
    """Test that deleting an exit always resets to Active, whatever the status."""
    sample_investment.status = InvestmentStatus.WRITTEN_OFF
    await test_session.commit()

    await exit_service.delete_exit_details(test_session, sample_exit.id)

    await test_session.refresh(sample_investment)
    assert sample_investment.status == InvestmentStatus.ACTIVE


@pytest.mark.asyncio
async def test_delete_exit_status_failure_keeps_exit(
    test_session, sample_exit, sample_investment, failing_status_update
):
    """Test that a failed status reset also undoes the exit delete."""
    exit_id, investment_id = sample_exit.id, sample_investment.id
    await test_session.refresh(sample_investment)
    updated_at = sample_investment.updated_at

    with pytest.raises(OperationalError):
        await exit_service.delete_exit_details(test_session, exit_id)

    stored = await exit_service.get_exit_details(test_session, exit_id)
    assert stored is not None
    assert stored.investment_id == investment_id
    investment = await investment_service.get_investment(test_session, investment_id)
    assert investment.status == InvestmentStatus.EXITED
    assert investment.updated_at == updated_at


@pytest.mark.asyncio
async def test_delete_exit_unknown(test_session):
    """Test that deleting an unknown exit raises NotFoundError."""
    with pytest.raises(NotFoundError):
        await exit_service.delete_exit_details(test_session, 999)


@pytest.mark.asyncio
async def test_delete_investment_cascades_to_exit(test_session, sample_exit):
    """Test that deleting an investment removes its exit record."""
    investment_id = sample_exit.investment_id

    assert await investment_service.delete_investment(test_session, investment_id) is True

    assert await exit_service.get_exit_details(test_session, sample_exit.id) is None
    assert await exit_service.get_exit_details_by_investment(test_session, investment_id) is None
