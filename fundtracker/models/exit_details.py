"""
ExitDetails model - how and when the fund left an investment.

One row per exited investment. The unique constraint on investment_id
makes the one-to-one relationship hold in storage, not only in the ORM.
"""

from datetime import date, datetime
from decimal import Decimal

from sqlalchemy import CheckConstraint, Date, DateTime, ForeignKey, Numeric, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from fundtracker.database import Base, utcnow


class ExitDetails(Base):
    """The exit record of an investment."""

    __tablename__ = "exit_details"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)

    investment_id: Mapped[int] = mapped_column(
        ForeignKey("investments.id", ondelete="CASCADE"),
        nullable=False,
        unique=True,
    )

    exit_date: Mapped[date] = mapped_column(Date, nullable=False)

    # Cash returned to the fund
    proceeds_received: Mapped[Decimal] = mapped_column(Numeric(15, 2), nullable=False)

    # proceeds / amount invested, as supplied by the client
    exit_multiple: Mapped[Decimal] = mapped_column(Numeric(10, 4), nullable=False)

    notes: Mapped[str | None] = mapped_column(Text, nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=utcnow)

    investment: Mapped["Investment"] = relationship(back_populates="exit_details")

    __table_args__ = (
        CheckConstraint("proceeds_received >= 0", name="check_proceeds_non_negative"),
        CheckConstraint("exit_multiple > 0", name="check_exit_multiple_positive"),
    )

    def __repr__(self) -> str:
        return (
            f"ExitDetails(id={self.id}, investment_id={self.investment_id}, "
            f"proceeds_received={self.proceeds_received}, exit_multiple={self.exit_multiple})"
        )


# Import at end to avoid circular imports
from fundtracker.models.investment import Investment
