"""Portfolio metrics derived client-side from investments and their exits.

Nothing here is stored or computed by the API: the dashboard and the CLI
fetch the raw records and derive every figure from them.
"""

import logging
from dataclasses import dataclass, field
from decimal import Decimal

from fundtracker.models import InvestmentStatus
from fundtracker.schemas import ExitDetailsResponse, InvestmentResponse

logger = logging.getLogger(__name__)

ZERO = Decimal("0.00")


@dataclass
class Position:
    """An investment together with its exit (if any) and its current value."""

    investment: InvestmentResponse
    exit_details: ExitDetailsResponse | None

    @property
    def current_value(self) -> Decimal:
        """Exit proceeds if exited, else the latest valuation, else the cost."""
        return current_value(self.investment, self.exit_details)

    @property
    def multiple(self) -> Decimal:
        """Current value divided by the amount invested."""
        return self.current_value / self.investment.amount_invested

    @property
    def can_record_exit(self) -> bool:
        return self.investment.status == InvestmentStatus.ACTIVE and self.exit_details is None


@dataclass
class StatusBucket:
    """Count and invested subtotal for one status."""

    count: int = 0
    invested: Decimal = ZERO


@dataclass
class PortfolioMetrics:
    """Aggregate figures shown on the dashboard."""

    total_invested: Decimal
    portfolio_value: Decimal
    total_realized: Decimal
    investment_count: int
    buckets: dict[InvestmentStatus, StatusBucket] = field(default_factory=dict)

    @property
    def return_percent(self) -> Decimal | None:
        """Unrealized + realized return over cost, or None if nothing is invested."""
        if self.total_invested == 0:
            return None
        return (self.portfolio_value - self.total_invested) / self.total_invested * 100

    @property
    def active(self) -> StatusBucket:
        return self.buckets[InvestmentStatus.ACTIVE]

    @property
    def exited(self) -> StatusBucket:
        return self.buckets[InvestmentStatus.EXITED]

    @property
    def written_off(self) -> StatusBucket:
        return self.buckets[InvestmentStatus.WRITTEN_OFF]


@dataclass
class Portfolio:
    """Everything the dashboard needs for one render."""

    positions: list[Position]
    metrics: PortfolioMetrics

    def with_status(self, status: InvestmentStatus) -> list[Position]:
        return [p for p in self.positions if p.investment.status == status]


def current_value(
    investment: InvestmentResponse, exit_details: ExitDetailsResponse | None
) -> Decimal:
    """Value of one investment for portfolio totals."""
    if exit_details is not None:
        return exit_details.proceeds_received
    if investment.current_valuation is not None:
        return investment.current_valuation
    return investment.amount_invested


def compute_metrics(
    investments: list[InvestmentResponse],
    exits: dict[int, ExitDetailsResponse],
) -> PortfolioMetrics:
    """Derive portfolio totals.

    Args:
        investments: All investments
        exits: Exit records keyed by investment id; investments without an
            exit are simply absent

    Returns:
        Totals, realized proceeds and per-status buckets
    """
    buckets = {status: StatusBucket() for status in InvestmentStatus}
    total_invested = ZERO
    portfolio_value = ZERO

    for investment in investments:
        total_invested += investment.amount_invested
        portfolio_value += current_value(investment, exits.get(investment.id))

        bucket = buckets[investment.status]
        bucket.count += 1
        bucket.invested += investment.amount_invested

    total_realized = sum((e.proceeds_received for e in exits.values()), ZERO)

    return PortfolioMetrics(
        total_invested=total_invested,
        portfolio_value=portfolio_value,
        total_realized=total_realized,
        investment_count=len(investments),
        buckets=buckets,
    )


def load_portfolio(client) -> Portfolio:
    """Fetch all investments and their exits, and derive the metrics.

    Args:
        client: A TrackerClient (or anything with the same read methods)

    Raises:
        APIError: If any fetch fails; no partial portfolio is returned
    """
    investments = client.list_investments()

    exits: dict[int, ExitDetailsResponse] = {}
    for investment in investments:
        exit_details = client.get_exit_details(investment.id)
        if exit_details is not None:
            exits[investment.id] = exit_details

    logger.debug(f"Loaded {len(investments)} investments, {len(exits)} exits")

    positions = [Position(i, exits.get(i.id)) for i in investments]
    return Portfolio(positions=positions, metrics=compute_metrics(investments, exits))
