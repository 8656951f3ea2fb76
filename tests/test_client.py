"""Tests for the HTTP client used by fundctl and the dashboard."""

import json
from datetime import date
from decimal import Decimal

import httpx
import pytest

from fundctl.client import APIError, TrackerClient
from fundtracker.models import FundingRound, InvestmentStatus
from fundtracker.schemas import ExitDetailsCreate, InvestmentUpdate

INVESTMENT_JSON = {
    "id": 7,
    "company_name": "Acme Robotics",
    "investment_date": "2023-01-15",
    "amount_invested": "100000.00",
    "funding_round": "Series A",
    "equity_percentage": "5.5000",
    "current_valuation": None,
    "status": "Active",
    "notes": None,
    "created_at": "2024-01-01T10:00:00.000001",
    "updated_at": "2024-01-01T10:00:00.000001",
}


def make_client(handler) -> TrackerClient:
    return TrackerClient(base_url="http://tracker.test", transport=httpx.MockTransport(handler))


def test_list_investments_parses_decimals():
    """Test that amounts come back as Decimal and enums as enums."""

    def handler(request: httpx.Request) -> httpx.Response:
        assert request.url.path == "/api/v1/investments"
        return httpx.Response(200, json=[INVESTMENT_JSON])

    investments = make_client(handler).list_investments()

    assert len(investments) == 1
    assert investments[0].amount_invested == Decimal("100000.00")
    assert investments[0].funding_round == FundingRound.SERIES_A
    assert investments[0].status == InvestmentStatus.ACTIVE


def json_null(request: httpx.Request) -> httpx.Response:
    """The body FastAPI sends for a route returning None."""
    return httpx.Response(200, content=b"null", headers={"content-type": "application/json"})


def test_get_investment_null_is_none():
    """Test that a null body maps to None."""
    client = make_client(json_null)

    assert client.get_investment(42) is None


def test_get_exit_details_null_is_none():
    """Test that an investment without an exit gives None."""
    assert make_client(json_null).get_exit_details(42) is None


def test_unreachable_service_is_api_error():
    """Test that a refused connection becomes a 503 APIError."""

    def refuse(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("Connection refused", request=request)

    with pytest.raises(APIError) as exc_info:
        make_client(refuse).list_investments()

    assert exc_info.value.status_code == 503
    assert exc_info.value.detail == "Cannot reach fund tracker at http://tracker.test"
    assert isinstance(exc_info.value.__cause__, httpx.ConnectError)


def test_timeout_is_api_error():
    """Test that a read timeout is reported the same way."""

    def stall(request: httpx.Request) -> httpx.Response:
        raise httpx.ReadTimeout("timed out", request=request)

    with pytest.raises(APIError) as exc_info:
        make_client(stall).health()

    assert exc_info.value.status_code == 503


def test_update_sends_only_set_fields():
    """Test that partial updates carry only the fields the caller set."""
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["method"] = request.method
        seen["body"] = json.loads(request.content)
        return httpx.Response(200, json={**INVESTMENT_JSON, "notes": "Board seat"})

    updated = make_client(handler).update_investment(
        7, InvestmentUpdate(notes="Board seat", current_valuation=None)
    )

    assert seen["method"] == "PATCH"
    assert seen["body"] == {"notes": "Board seat", "current_valuation": None}
    assert updated.notes == "Board seat"


def test_create_exit_serializes_decimals_as_strings():
    """Test that money leaves the client without float rounding."""
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["body"] = json.loads(request.content)
        return httpx.Response(
            201,
            json={
                "id": 1,
                "investment_id": 7,
                "exit_date": "2024-06-01",
                "proceeds_received": "300000.10",
                "exit_multiple": "3.0001",
                "notes": None,
                "created_at": "2024-06-01T00:00:00",
            },
        )

    exit_details = make_client(handler).create_exit_details(
        ExitDetailsCreate(
            investment_id=7,
            exit_date=date(2024, 6, 1),
            proceeds_received=Decimal("300000.10"),
            exit_multiple=Decimal("3.0001"),
        )
    )

    assert seen["body"]["proceeds_received"] == "300000.10"
    assert seen["body"]["exit_date"] == "2024-06-01"
    assert exit_details.proceeds_received == Decimal("300000.10")


def test_delete_investment_reports_success_flag():
    """Test that the success flag is passed through."""
    client = make_client(lambda request: httpx.Response(200, json={"success": False}))

    assert client.delete_investment(999) is False


def test_error_detail_string():
    """Test that a 404 detail surfaces on APIError."""
    client = make_client(
        lambda request: httpx.Response(404, json={"detail": "Exit details with id 3 not found"})
    )

    with pytest.raises(APIError) as exc_info:
        client.delete_exit_details(3)

    assert exc_info.value.status_code == 404
    assert exc_info.value.detail == "Exit details with id 3 not found"


def test_error_detail_validation_list():
    """Test that FastAPI validation errors are flattened to one line."""
    detail = [
        {"loc": ["body", "amount_invested"], "msg": "Input should be greater than 0"},
        {"loc": ["body", "funding_round"], "msg": "Input should be 'Seed'"},
    ]
    client = make_client(lambda request: httpx.Response(422, json={"detail": detail}))

    with pytest.raises(APIError) as exc_info:
        client.list_investments()

    assert exc_info.value.detail == (
        "amount_invested: Input should be greater than 0; funding_round: Input should be 'Seed'"
    )


def test_error_non_json_body():
    """Test that a plain-text error body is kept as the detail."""
    client = make_client(lambda request: httpx.Response(502, text="Bad Gateway"))

    with pytest.raises(APIError) as exc_info:
        client.health()

    assert exc_info.value.status_code == 502
    assert exc_info.value.detail == "Bad Gateway"
