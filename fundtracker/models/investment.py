"""
Investment model - a position the fund holds in a portfolio company.

Status is stored alongside the row and kept in sync with the presence of an
exit record by the exit workflows:
- Recording an exit moves an investment to EXITED
- Removing the exit moves it back to ACTIVE
- WRITTEN_OFF is only ever set explicitly
"""

import enum
from datetime import date, datetime
from decimal import Decimal
from typing import Optional

from sqlalchemy import CheckConstraint, Date, DateTime, Enum, Numeric, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from fundtracker.database import Base, utcnow


class InvestmentStatus(enum.Enum):
    """Lifecycle status of an investment."""

    ACTIVE = "Active"
    EXITED = "Exited"
    WRITTEN_OFF = "Written Off"


class FundingRound(enum.Enum):
    """Round in which the fund entered the company."""

    PRE_SEED = "Pre-Seed"
    SEED = "Seed"
    SERIES_A = "Series A"
    SERIES_B = "Series B"
    SERIES_C = "Series C"
    SERIES_D = "Series D"
    LATER_STAGE = "Later Stage"
    BRIDGE = "Bridge"


def _enum_values(enum_cls: type[enum.Enum]) -> list[str]:
    # Persist the display values ("Series A"), not the member names
    return [member.value for member in enum_cls]


class Investment(Base):
    """A single investment made by the fund."""

    __tablename__ = "investments"

    # Primary key: assigned by the database
    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)

    company_name: Mapped[str] = mapped_column(String(255), nullable=False)
    investment_date: Mapped[date] = mapped_column(Date, nullable=False)

    # Numeric(15,2) allows up to 9,999,999,999,999.99
    amount_invested: Mapped[Decimal] = mapped_column(Numeric(15, 2), nullable=False)

    funding_round: Mapped[FundingRound] = mapped_column(
        Enum(FundingRound, name="funding_round", values_callable=_enum_values),
        nullable=False,
    )

    # Percentage of the company owned, 0-100
    equity_percentage: Mapped[Decimal] = mapped_column(Numeric(7, 4), nullable=False)

    # Latest known valuation of the stake; NULL when unknown
    current_valuation: Mapped[Decimal | None] = mapped_column(Numeric(15, 2), nullable=True)

    status: Mapped[InvestmentStatus] = mapped_column(
        Enum(InvestmentStatus, name="investment_status", values_callable=_enum_values),
        nullable=False,
        default=InvestmentStatus.ACTIVE,
    )

    notes: Mapped[str | None] = mapped_column(Text, nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, default=utcnow, onupdate=utcnow
    )

    # One-to-one: at most one exit per investment, removed with the investment
    exit_details: Mapped[Optional["ExitDetails"]] = relationship(
        back_populates="investment",
        uselist=False,
        cascade="all",
    )

    # Database constraints
    __table_args__ = (
        CheckConstraint("amount_invested > 0", name="check_amount_invested_positive"),
        CheckConstraint(
            "equity_percentage >= 0 AND equity_percentage <= 100",
            name="check_equity_percentage_range",
        ),
        CheckConstraint(
            "current_valuation IS NULL OR current_valuation > 0",
            name="check_current_valuation_positive",
        ),
    )

    def __repr__(self) -> str:
        return (
            f"Investment(id={self.id}, company_name={self.company_name!r}, "
            f"amount_invested={self.amount_invested}, status={self.status.value!r})"
        )


# Import at end to avoid circular imports
from fundtracker.models.exit_details import ExitDetails
