"""
SQLAlchemy models for the fund tracker.

This module exports all models and the Base class for easy imports:
    from fundtracker.models import Base, Investment, ExitDetails
"""

from fundtracker.database import Base
from fundtracker.models.investment import FundingRound, Investment, InvestmentStatus
from fundtracker.models.exit_details import ExitDetails

__all__ = [
    "Base",
    "Investment",
    "InvestmentStatus",
    "FundingRound",
    "ExitDetails",
]
