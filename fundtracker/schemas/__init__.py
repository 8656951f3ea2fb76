"""Pydantic schemas for request/response validation."""

from fundtracker.schemas.exit_details import (
    ExitDetailsCreate,
    ExitDetailsResponse,
    ExitDetailsUpdate,
)
from fundtracker.schemas.investment import (
    DeleteResponse,
    InvestmentCreate,
    InvestmentResponse,
    InvestmentUpdate,
)

__all__ = [
    # Investment schemas
    "InvestmentCreate",
    "InvestmentUpdate",
    "InvestmentResponse",
    "DeleteResponse",
    # Exit schemas
    "ExitDetailsCreate",
    "ExitDetailsUpdate",
    "ExitDetailsResponse",
]
