"""End-to-end lifecycle of an investment through the API."""

from decimal import Decimal

import pytest


@pytest.mark.asyncio
async def test_investment_exit_lifecycle(test_client):
    """Create, exit, undo the exit, then delete."""
    response = await test_client.post(
        "/api/v1/investments",
        json={
            "company_name": "Acme",
            "investment_date": "2023-04-01",
            "amount_invested": "100000",
            "funding_round": "Seed",
            "equity_percentage": "10",
            "status": "Active",
        },
    )
    assert response.status_code == 201
    investment_id = response.json()["id"]

    response = await test_client.get("/api/v1/investments")
    listed = response.json()
    assert len(listed) == 1
    assert Decimal(listed[0]["amount_invested"]) == Decimal("100000")
    assert listed[0]["status"] == "Active"

    response = await test_client.post(
        "/api/v1/exits",
        json={
            "investment_id": investment_id,
            "exit_date": "2024-09-30",
            "proceeds_received": "250000",
            "exit_multiple": "2.5",
        },
    )
    assert response.status_code == 201
    exit_id = response.json()["id"]

    response = await test_client.get(f"/api/v1/investments/{investment_id}")
    assert response.json()["status"] == "Exited"

    response = await test_client.delete(f"/api/v1/exits/{exit_id}")
    assert response.json() == {"success": True}

    response = await test_client.get(f"/api/v1/investments/{investment_id}")
    assert response.json()["status"] == "Active"

    response = await test_client.delete(f"/api/v1/investments/{investment_id}")
    assert response.json() == {"success": True}
    response = await test_client.get("/api/v1/investments")
    assert response.json() == []


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "amount,valuation",
    [
        ("0.01", "0.01"),
        ("1234567.89", "9999999.99"),
        ("9999999999999.99", "100.10"),
    ],
)
async def test_money_is_exact(test_client, investment_payload, amount, valuation):
    """Test that stored amounts come back without precision loss."""
    investment_payload.update(amount_invested=amount, current_valuation=valuation)

    response = await test_client.post("/api/v1/investments", json=investment_payload)

    assert response.status_code == 201
    data = response.json()
    assert Decimal(data["amount_invested"]) == Decimal(amount)
    assert Decimal(data["current_valuation"]) == Decimal(valuation)
