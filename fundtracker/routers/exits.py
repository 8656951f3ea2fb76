"""Exit API endpoints."""

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from fundtracker.database import get_session
from fundtracker.exceptions import NotFoundError
from fundtracker.schemas.exit_details import (
    ExitDetailsCreate,
    ExitDetailsResponse,
    ExitDetailsUpdate,
)
from fundtracker.schemas.investment import DeleteResponse
from fundtracker.services import exits as exit_service

router = APIRouter()


@router.post(
    "/exits",
    response_model=ExitDetailsResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Record an exit",
)
async def create_exit_details(
    data: ExitDetailsCreate,
    session: AsyncSession = Depends(get_session),
) -> ExitDetailsResponse:
    """Record the exit of an investment.

    The investment is marked Exited unless it already is.

    - **investment_id**: Investment being exited
    - **exit_date**: Date of the exit (YYYY-MM-DD)
    - **proceeds_received**: Cash returned, 0 or more
    - **exit_multiple**: Proceeds divided by amount invested
    """
    try:
        exit_details = await exit_service.create_exit_details(session, data)
    except NotFoundError as e:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=str(e),
        )
    except IntegrityError:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=f"Investment {data.investment_id} already has an exit recorded",
        )
    return ExitDetailsResponse.model_validate(exit_details)


@router.get(
    "/investments/{investment_id}/exit",
    response_model=ExitDetailsResponse | None,
    summary="Get the exit of an investment",
)
async def get_exit_details_by_investment(
    investment_id: int,
    session: AsyncSession = Depends(get_session),
) -> ExitDetailsResponse | None:
    """Get the exit record of an investment.

    Returns null when the investment has no exit, or does not exist.
    """
    exit_details = await exit_service.get_exit_details_by_investment(session, investment_id)
    if exit_details is None:
        return None
    return ExitDetailsResponse.model_validate(exit_details)


@router.get(
    "/exits/{exit_id}",
    response_model=ExitDetailsResponse,
    summary="Get an exit",
)
async def get_exit_details(
    exit_id: int,
    session: AsyncSession = Depends(get_session),
) -> ExitDetailsResponse:
    """Get an exit record by its id."""
    exit_details = await exit_service.get_exit_details(session, exit_id)
    if exit_details is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Exit details with id {exit_id} not found",
        )
    return ExitDetailsResponse.model_validate(exit_details)


@router.patch(
    "/exits/{exit_id}",
    response_model=ExitDetailsResponse,
    summary="Update an exit",
)
async def update_exit_details(
    exit_id: int,
    data: ExitDetailsUpdate,
    session: AsyncSession = Depends(get_session),
) -> ExitDetailsResponse:
    """Change some fields of an exit record.

    The investment's status is left as it is.
    """
    try:
        exit_details = await exit_service.update_exit_details(session, exit_id, data)
    except NotFoundError as e:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=str(e),
        )
    return ExitDetailsResponse.model_validate(exit_details)


@router.delete(
    "/exits/{exit_id}",
    response_model=DeleteResponse,
    summary="Delete an exit",
)
async def delete_exit_details(
    exit_id: int,
    session: AsyncSession = Depends(get_session),
) -> DeleteResponse:
    """Delete an exit record and set the investment back to Active."""
    try:
        deleted = await exit_service.delete_exit_details(session, exit_id)
    except NotFoundError as e:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=str(e),
        )
    return DeleteResponse(success=deleted)
