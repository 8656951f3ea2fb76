"""Pydantic schemas for exit endpoints."""

from datetime import date, datetime
from decimal import ROUND_HALF_UP, Decimal

from pydantic import BaseModel, Field, field_validator, model_validator

MULTIPLE_PLACES = Decimal("0.0001")


def quantize_multiple(value: Decimal) -> Decimal:
    """Round an exit multiple to the precision the exit_details table keeps."""
    return value.quantize(MULTIPLE_PLACES, rounding=ROUND_HALF_UP)


class ExitDetailsCreate(BaseModel):
    """Request schema for recording an exit."""

    investment_id: int = Field(..., description="Investment being exited")
    exit_date: date = Field(..., description="Date of the exit")
    proceeds_received: Decimal = Field(
        ..., ge=0, max_digits=15, decimal_places=2, description="Cash returned to the fund"
    )
    exit_multiple: Decimal = Field(..., gt=0, description="Proceeds divided by amount invested")
    notes: str | None = Field(default=None, description="Free-text notes")

    @field_validator("exit_multiple")
    @classmethod
    def round_multiple(cls, v: Decimal) -> Decimal:
        rounded = quantize_multiple(v)
        if rounded <= 0:
            raise ValueError("exit_multiple is too small to store")
        return rounded


class ExitDetailsUpdate(BaseModel):
    """Request schema for a partial exit update.

    Only the fields present in the request are changed. notes can be
    cleared by sending null explicitly.
    """

    exit_date: date | None = None
    proceeds_received: Decimal | None = Field(default=None, ge=0, max_digits=15, decimal_places=2)
    exit_multiple: Decimal | None = Field(default=None, gt=0)
    notes: str | None = None

    @field_validator("exit_multiple")
    @classmethod
    def round_multiple(cls, v: Decimal | None) -> Decimal | None:
        if v is None:
            return v
        rounded = quantize_multiple(v)
        if rounded <= 0:
            raise ValueError("exit_multiple is too small to store")
        return rounded

    @model_validator(mode="after")
    def reject_null_for_required_fields(self) -> "ExitDetailsUpdate":
        """Required columns can be changed but never cleared."""
        for name in self.model_fields_set - {"notes"}:
            if getattr(self, name) is None:
                raise ValueError(f"{name} cannot be null")
        return self


class ExitDetailsResponse(BaseModel):
    """Response schema for exit data."""

    id: int
    investment_id: int
    exit_date: date
    proceeds_received: Decimal
    exit_multiple: Decimal
    notes: str | None
    created_at: datetime

    model_config = {"from_attributes": True}
