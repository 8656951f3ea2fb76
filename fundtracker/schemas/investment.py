"""Pydantic schemas for investment endpoints."""

from datetime import date, datetime
from decimal import Decimal

from pydantic import BaseModel, Field, model_validator

from fundtracker.models import FundingRound, InvestmentStatus

# Columns that may be cleared with an explicit null on update
NULLABLE_FIELDS = {"current_valuation", "notes"}


class InvestmentCreate(BaseModel):
    """Request schema for recording a new investment."""

    company_name: str = Field(..., min_length=1, max_length=255, description="Portfolio company name")
    investment_date: date = Field(..., description="Date the investment closed")
    amount_invested: Decimal = Field(
        ..., gt=0, max_digits=15, decimal_places=2, description="Amount invested"
    )
    funding_round: FundingRound = Field(..., description="Funding round")
    equity_percentage: Decimal = Field(
        ..., ge=0, le=100, max_digits=7, decimal_places=4, description="Equity owned, 0-100"
    )
    current_valuation: Decimal | None = Field(
        default=None, gt=0, max_digits=15, decimal_places=2, description="Latest valuation of the stake"
    )
    status: InvestmentStatus = Field(default=InvestmentStatus.ACTIVE, description="Investment status")
    notes: str | None = Field(default=None, description="Free-text notes")


class InvestmentUpdate(BaseModel):
    """Request schema for a partial investment update.

    Only the fields present in the request are changed. current_valuation
    and notes can be cleared by sending null explicitly.
    """

    company_name: str | None = Field(default=None, min_length=1, max_length=255)
    investment_date: date | None = None
    amount_invested: Decimal | None = Field(default=None, gt=0, max_digits=15, decimal_places=2)
    funding_round: FundingRound | None = None
    equity_percentage: Decimal | None = Field(
        default=None, ge=0, le=100, max_digits=7, decimal_places=4
    )
    current_valuation: Decimal | None = Field(default=None, gt=0, max_digits=15, decimal_places=2)
    status: InvestmentStatus | None = None
    notes: str | None = None

    @model_validator(mode="after")
    def reject_null_for_required_fields(self) -> "InvestmentUpdate":
        """Required columns can be changed but never cleared."""
        for name in self.model_fields_set - NULLABLE_FIELDS:
            if getattr(self, name) is None:
                raise ValueError(f"{name} cannot be null")
        return self


class InvestmentResponse(BaseModel):
    """Response schema for investment data."""

    id: int
    company_name: str
    investment_date: date
    amount_invested: Decimal
    funding_round: FundingRound
    equity_percentage: Decimal
    current_valuation: Decimal | None
    status: InvestmentStatus
    notes: str | None
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class DeleteResponse(BaseModel):
    """Response schema for delete operations."""

    success: bool
