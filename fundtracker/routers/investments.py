"""Investment API endpoints."""

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from fundtracker.database import get_session
from fundtracker.exceptions import NotFoundError
from fundtracker.schemas.investment import (
    DeleteResponse,
    InvestmentCreate,
    InvestmentResponse,
    InvestmentUpdate,
)
from fundtracker.services import investments as investment_service

router = APIRouter()


@router.post(
    "/investments",
    response_model=InvestmentResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Record a new investment",
)
async def create_investment(
    data: InvestmentCreate,
    session: AsyncSession = Depends(get_session),
) -> InvestmentResponse:
    """Record a new investment.

    - **company_name**: Portfolio company name
    - **investment_date**: Closing date (YYYY-MM-DD)
    - **amount_invested**: Positive amount, 2 decimal places
    - **funding_round**: Pre-Seed, Seed, Series A-D, Later Stage or Bridge
    - **equity_percentage**: Between 0 and 100
    - **current_valuation**: Positive amount, or null if unknown
    - **status**: Active (default), Exited or Written Off
    """
    investment = await investment_service.create_investment(session, data)
    return InvestmentResponse.model_validate(investment)


@router.get(
    "/investments",
    response_model=list[InvestmentResponse],
    summary="List all investments",
)
async def list_investments(
    session: AsyncSession = Depends(get_session),
) -> list[InvestmentResponse]:
    """Get all investments, newest first."""
    investments = await investment_service.list_investments(session)
    return [InvestmentResponse.model_validate(i) for i in investments]


@router.get(
    "/investments/{investment_id}",
    response_model=InvestmentResponse | None,
    summary="Get an investment",
)
async def get_investment(
    investment_id: int,
    session: AsyncSession = Depends(get_session),
) -> InvestmentResponse | None:
    """Get a single investment.

    Returns null (not 404) when no investment has this id.
    """
    investment = await investment_service.get_investment(session, investment_id)
    if investment is None:
        return None
    return InvestmentResponse.model_validate(investment)


@router.patch(
    "/investments/{investment_id}",
    response_model=InvestmentResponse,
    summary="Update an investment",
)
async def update_investment(
    investment_id: int,
    data: InvestmentUpdate,
    session: AsyncSession = Depends(get_session),
) -> InvestmentResponse:
    """Change some fields of an investment.

    Fields left out of the request body keep their stored value.
    """
    try:
        investment = await investment_service.update_investment(session, investment_id, data)
    except NotFoundError as e:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=str(e),
        )
    return InvestmentResponse.model_validate(investment)


@router.delete(
    "/investments/{investment_id}",
    response_model=DeleteResponse,
    summary="Delete an investment",
)
async def delete_investment(
    investment_id: int,
    session: AsyncSession = Depends(get_session),
) -> DeleteResponse:
    """Delete an investment together with its exit record.

    Returns success=false when no investment has this id.
    """
    deleted = await investment_service.delete_investment(session, investment_id)
    return DeleteResponse(success=deleted)
