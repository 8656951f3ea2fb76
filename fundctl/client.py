"""HTTP client for the fund tracker API.

Responses are parsed back into the service's pydantic schemas, so callers
get Decimal amounts and date objects rather than raw JSON strings.
"""

from typing import Any

import httpx

from fundtracker.schemas import (
    DeleteResponse,
    ExitDetailsCreate,
    ExitDetailsResponse,
    ExitDetailsUpdate,
    InvestmentCreate,
    InvestmentResponse,
    InvestmentUpdate,
)


class APIError(Exception):
    """API request error."""

    def __init__(self, status_code: int, detail: Any):
        self.status_code = status_code
        # FastAPI validation errors carry a list of problems
        if isinstance(detail, list):
            detail = "; ".join(
                f"{'.'.join(str(p) for p in err.get('loc', [])[1:])}: {err.get('msg')}"
                if isinstance(err, dict)
                else str(err)
                for err in detail
            )
        self.detail = str(detail)
        super().__init__(f"HTTP {status_code}: {self.detail}")


class TrackerClient:
    """Client for the fund tracker API."""

    def __init__(
        self,
        base_url: str = "http://localhost:8000",
        timeout: float = 30.0,
        transport: httpx.BaseTransport | None = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.transport = transport

    def _request(self, method: str, path: str, **kwargs) -> Any:
        """Make an HTTP request.

        Transport failures (refused connection, timeout) surface as a 503
        APIError so callers only handle one error type.
        """
        with httpx.Client(
            base_url=self.base_url, timeout=self.timeout, transport=self.transport
        ) as client:
            try:
                response = client.request(method, path, **kwargs)
            except httpx.RequestError as e:
                raise APIError(503, f"Cannot reach fund tracker at {self.base_url}") from e

        if response.status_code >= 400:
            try:
                detail = response.json().get("detail", response.text)
            except Exception:
                detail = response.text
            raise APIError(response.status_code, detail)

        if response.status_code == 204:
            return None
        return response.json()

    def health(self) -> dict:
        """Check health status."""
        return self._request("GET", "/health")

    def version(self) -> dict:
        """Get API version information."""
        return self._request("GET", "/api/version")

    # Investment endpoints
    def list_investments(self) -> list[InvestmentResponse]:
        """List all investments, newest first."""
        response = self._request("GET", "/api/v1/investments")
        return [InvestmentResponse.model_validate(item) for item in response]

    def get_investment(self, investment_id: int) -> InvestmentResponse | None:
        """Get one investment, or None if it does not exist."""
        response = self._request("GET", f"/api/v1/investments/{investment_id}")
        if response is None:
            return None
        return InvestmentResponse.model_validate(response)

    def create_investment(self, data: InvestmentCreate) -> InvestmentResponse:
        """Record a new investment."""
        response = self._request(
            "POST", "/api/v1/investments", json=data.model_dump(mode="json")
        )
        return InvestmentResponse.model_validate(response)

    def update_investment(self, investment_id: int, data: InvestmentUpdate) -> InvestmentResponse:
        """Update the fields set on ``data``; others keep their stored value."""
        response = self._request(
            "PATCH",
            f"/api/v1/investments/{investment_id}",
            json=data.model_dump(mode="json", exclude_unset=True),
        )
        return InvestmentResponse.model_validate(response)

    def delete_investment(self, investment_id: int) -> bool:
        """Delete an investment. Returns False if it did not exist."""
        response = self._request("DELETE", f"/api/v1/investments/{investment_id}")
        return DeleteResponse.model_validate(response).success

    # Exit endpoints
    def get_exit_details(self, investment_id: int) -> ExitDetailsResponse | None:
        """Get the exit record of an investment, or None."""
        response = self._request("GET", f"/api/v1/investments/{investment_id}/exit")
        if response is None:
            return None
        return ExitDetailsResponse.model_validate(response)

    def get_exit(self, exit_id: int) -> ExitDetailsResponse:
        """Get an exit record by its own id."""
        response = self._request("GET", f"/api/v1/exits/{exit_id}")
        return ExitDetailsResponse.model_validate(response)

    def create_exit_details(self, data: ExitDetailsCreate) -> ExitDetailsResponse:
        """Record an exit; the investment becomes Exited."""
        response = self._request("POST", "/api/v1/exits", json=data.model_dump(mode="json"))
        return ExitDetailsResponse.model_validate(response)

    def update_exit_details(self, exit_id: int, data: ExitDetailsUpdate) -> ExitDetailsResponse:
        """Update the fields set on ``data``."""
        response = self._request(
            "PATCH",
            f"/api/v1/exits/{exit_id}",
            json=data.model_dump(mode="json", exclude_unset=True),
        )
        return ExitDetailsResponse.model_validate(response)

    def delete_exit_details(self, exit_id: int) -> bool:
        """Delete an exit; the investment becomes Active again."""
        response = self._request("DELETE", f"/api/v1/exits/{exit_id}")
        return DeleteResponse.model_validate(response).success
