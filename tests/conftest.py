"""
Shared pytest fixtures for testing the fund tracker.

Uses an in-memory SQLite database for fast, isolated tests.
"""

from datetime import date
from decimal import Decimal

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from fundtracker.database import Base, enable_sqlite_foreign_keys, get_session
from fundtracker.main import app
from fundtracker.models import ExitDetails, FundingRound, Investment, InvestmentStatus


# Use in-memory SQLite for tests (fast, isolated)
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"


@pytest.fixture(scope="session")
def anyio_backend():
    """Use asyncio backend for pytest-asyncio."""
    return "asyncio"


@pytest_asyncio.fixture
async def test_engine():
    """Create a test database engine.

    Creates tables at the start, drops them at the end.
    Each test gets a fresh database with foreign keys enforced.
    """
    engine = create_async_engine(TEST_DATABASE_URL, echo=False)
    enable_sqlite_foreign_keys(engine)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

    await engine.dispose()


@pytest_asyncio.fixture
async def test_session(test_engine):
    """Provide a database session for a test.

    Rolls back the session after each test for isolation.
    """
    async_session = async_sessionmaker(
        bind=test_engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )

    async with async_session() as session:
        yield session
        await session.rollback()


@pytest_asyncio.fixture
async def test_client(test_engine):
    """Provide a FastAPI test client with test database.

    Overrides the get_session dependency to use our test database.
    """
    async_session = async_sessionmaker(
        bind=test_engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )

    async def override_get_session():
        async with async_session() as session:
            yield session

    app.dependency_overrides[get_session] = override_get_session

    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test"
    ) as client:
        yield client

    app.dependency_overrides.clear()


# --- Helper fixtures for creating test data ---

@pytest_asyncio.fixture
async def sample_investment(test_session):
    """Create an active Series A investment."""
    investment = Investment(
        company_name="Acme Robotics",
        investment_date=date(2023, 1, 15),
        amount_invested=Decimal("100000.00"),
        funding_round=FundingRound.SERIES_A,
        equity_percentage=Decimal("5.5"),
        current_valuation=Decimal("150000.00"),
        status=InvestmentStatus.ACTIVE,
    )
    test_session.add(investment)
    await test_session.commit()
    await test_session.refresh(investment)
    return investment


@pytest_asyncio.fixture
async def sample_exit(test_session, sample_investment):
    """Record an exit for the sample investment (marked Exited)."""
    exit_details = ExitDetails(
        investment_id=sample_investment.id,
        exit_date=date(2024, 6, 1),
        proceeds_received=Decimal("300000.00"),
        exit_multiple=Decimal("3.0000"),
    )
    sample_investment.status = InvestmentStatus.EXITED
    test_session.add(exit_details)
    await test_session.commit()
    await test_session.refresh(exit_details)
    return exit_details


@pytest.fixture
def investment_payload():
    """JSON body for creating an investment through the API."""
    return {
        "company_name": "Acme Robotics",
        "investment_date": "2023-01-15",
        "amount_invested": "100000.00",
        "funding_round": "Series A",
        "equity_percentage": "5.5",
        "current_valuation": "150000.00",
    }
