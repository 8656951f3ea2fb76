"""Fund Tracker Dashboard.

FastAPI application with Jinja2 templates showing portfolio metrics and the
forms for recording investments and exits.
"""

import logging
from datetime import date
from decimal import Decimal, InvalidOperation
from pathlib import Path
from typing import Annotated
from urllib.parse import urlencode

from fastapi import FastAPI, Form, Request
from fastapi.responses import HTMLResponse, RedirectResponse
from fastapi.templating import Jinja2Templates
from pydantic import ValidationError

from dashboard.client import APIError, get_client
from fundctl.portfolio import load_portfolio
from fundtracker.models import FundingRound, InvestmentStatus
from fundtracker.schemas import (
    ExitDetailsCreate,
    InvestmentCreate,
    InvestmentResponse,
    InvestmentUpdate,
)
from fundtracker.schemas.exit_details import quantize_multiple

logger = logging.getLogger(__name__)

# FastAPI app
app = FastAPI(title="Fund Tracker Dashboard", docs_url=None, redoc_url=None)

# Templates
templates_dir = Path(__file__).parent / "templates"
templates = Jinja2Templates(directory=str(templates_dir))

TABS = ("overview", "active", "exited")


# --- Template filters ---


def format_money(value: Decimal | None) -> str:
    if value is None:
        return "-"
    return f"${value:,.2f}"


def format_multiple(value: Decimal | None) -> str:
    if value is None:
        return "-"
    return f"{value:.2f}x"


def format_percent(value: Decimal | None) -> str:
    if value is None:
        return "-"
    sign = "+" if value > 0 else ""
    return f"{sign}{value:.1f}%"


templates.env.filters["money"] = format_money
templates.env.filters["multiple"] = format_multiple
templates.env.filters["percent"] = format_percent
templates.env.globals["funding_rounds"] = [r.value for r in FundingRound]
templates.env.globals["statuses"] = [s.value for s in InvestmentStatus]


# --- Form helpers ---


def validation_message(e: ValidationError) -> str:
    """One line per invalid field, as shown above the form."""
    return "; ".join(
        f"{'.'.join(str(p) for p in err['loc']) or 'form'}: {err['msg']}" for err in e.errors()
    )


def blank_to_none(value: str) -> str | None:
    value = value.strip()
    return value or None


def investment_form_values(investment: InvestmentResponse) -> dict:
    """Prefill values for the edit form."""
    return {
        "company_name": investment.company_name,
        "investment_date": investment.investment_date.isoformat(),
        "amount_invested": str(investment.amount_invested),
        "funding_round": investment.funding_round.value,
        "equity_percentage": str(investment.equity_percentage.normalize()),
        "current_valuation": str(investment.current_valuation or ""),
        "status": investment.status.value,
        "notes": investment.notes or "",
    }


def render(request: Request, name: str, ctx: dict, status_code: int = 200) -> HTMLResponse:
    return templates.TemplateResponse(request, name, ctx, status_code=status_code)


def redirect_home(tab: str | None = None, error: str | None = None) -> RedirectResponse:
    """303 back to the overview, carrying the tab and an error to show there."""
    params = {k: v for k, v in (("tab", tab), ("error", error)) if v}
    url = f"/?{urlencode(params)}" if params else "/"
    return RedirectResponse(url=url, status_code=303)


# --- Dashboard ---


@app.get("/", response_class=HTMLResponse)
async def index(request: Request, tab: str = "overview", error: str | None = None):
    """Show portfolio metrics and the investment list.

    ``error`` carries the failure of a redirect-only action (a delete).
    """
    ctx = {"tab": tab if tab in TABS else "overview", "portfolio": None, "error": error}

    try:
        portfolio = load_portfolio(get_client())
        ctx["portfolio"] = portfolio
        ctx["positions"] = {
            "overview": portfolio.positions,
            "active": portfolio.with_status(InvestmentStatus.ACTIVE),
            "exited": portfolio.with_status(InvestmentStatus.EXITED),
        }
    except APIError as e:
        ctx["error"] = f"Could not load portfolio: {e.detail}"

    return render(request, "index.html", ctx)


# --- Investment Routes ---


@app.get("/investments/new", response_class=HTMLResponse)
async def new_investment_form(request: Request):
    """Show the form for a new investment."""
    ctx = {
        "mode": "create",
        "form": {
            "investment_date": date.today().isoformat(),
            "funding_round": FundingRound.SEED.value,
            "status": InvestmentStatus.ACTIVE.value,
        },
    }
    return render(request, "investment_form.html", ctx)


@app.post("/investments", response_class=HTMLResponse)
async def create_investment(
    request: Request,
    company_name: Annotated[str, Form()],
    investment_date: Annotated[str, Form()],
    amount_invested: Annotated[str, Form()],
    funding_round: Annotated[str, Form()],
    equity_percentage: Annotated[str, Form()],
    current_valuation: Annotated[str, Form()] = "",
    status: Annotated[str, Form()] = InvestmentStatus.ACTIVE.value,
    notes: Annotated[str, Form()] = "",
):
    """Record a new investment."""
    form = {
        "company_name": company_name,
        "investment_date": investment_date,
        "amount_invested": amount_invested,
        "funding_round": funding_round,
        "equity_percentage": equity_percentage,
        "current_valuation": current_valuation,
        "status": status,
        "notes": notes,
    }
    ctx = {"mode": "create", "form": form}

    try:
        data = InvestmentCreate(
            company_name=company_name.strip(),
            investment_date=investment_date,
            amount_invested=amount_invested,
            funding_round=funding_round,
            equity_percentage=equity_percentage,
            current_valuation=blank_to_none(current_valuation),
            status=status,
            notes=blank_to_none(notes),
        )
        get_client().create_investment(data)
    except ValidationError as e:
        ctx["error"] = validation_message(e)
        return render(request, "investment_form.html", ctx, status_code=400)
    except APIError as e:
        ctx["error"] = f"Action failed: {e.detail}"
        return render(request, "investment_form.html", ctx, status_code=400)

    return redirect_home()


@app.get("/investments/{investment_id}/edit", response_class=HTMLResponse)
async def edit_investment_form(request: Request, investment_id: int):
    """Show the edit form for an investment."""
    ctx = {"mode": "edit", "investment_id": investment_id, "form": {}}

    try:
        investment = get_client().get_investment(investment_id)
    except APIError as e:
        ctx["error"] = f"Could not load investment: {e.detail}"
        return render(request, "investment_form.html", ctx)

    if investment is None:
        ctx["error"] = f"Investment {investment_id} not found"
        return render(request, "investment_form.html", ctx, status_code=404)

    ctx["form"] = investment_form_values(investment)
    return render(request, "investment_form.html", ctx)


@app.post("/investments/{investment_id}/edit", response_class=HTMLResponse)
async def update_investment(
    request: Request,
    investment_id: int,
    company_name: Annotated[str, Form()],
    investment_date: Annotated[str, Form()],
    amount_invested: Annotated[str, Form()],
    funding_round: Annotated[str, Form()],
    equity_percentage: Annotated[str, Form()],
    current_valuation: Annotated[str, Form()] = "",
    status: Annotated[str, Form()] = InvestmentStatus.ACTIVE.value,
    notes: Annotated[str, Form()] = "",
):
    """Save the edit form."""
    form = {
        "company_name": company_name,
        "investment_date": investment_date,
        "amount_invested": amount_invested,
        "funding_round": funding_round,
        "equity_percentage": equity_percentage,
        "current_valuation": current_valuation,
        "status": status,
        "notes": notes,
    }
    ctx = {"mode": "edit", "investment_id": investment_id, "form": form}

    try:
        data = InvestmentUpdate(
            company_name=company_name.strip(),
            investment_date=investment_date,
            amount_invested=amount_invested,
            funding_round=funding_round,
            equity_percentage=equity_percentage,
            current_valuation=blank_to_none(current_valuation),
            status=status,
            notes=blank_to_none(notes),
        )
        get_client().update_investment(investment_id, data)
    except ValidationError as e:
        ctx["error"] = validation_message(e)
        return render(request, "investment_form.html", ctx, status_code=400)
    except APIError as e:
        ctx["error"] = f"Action failed: {e.detail}"
        return render(request, "investment_form.html", ctx, status_code=400)

    return redirect_home()


@app.post("/investments/{investment_id}/delete", response_class=RedirectResponse)
async def delete_investment(request: Request, investment_id: int):
    """Delete an investment and its exit."""
    try:
        deleted = get_client().delete_investment(investment_id)
    except APIError as e:
        logger.warning(f"Deleting investment {investment_id} failed: {e.detail}")
        return redirect_home(error=f"Action failed: {e.detail}")

    if not deleted:
        return redirect_home(error=f"Action failed: investment {investment_id} does not exist")
    return redirect_home()


# --- Exit Routes ---


@app.get("/investments/{investment_id}/exit", response_class=HTMLResponse)
async def exit_form(request: Request, investment_id: int):
    """Show the form for recording an exit."""
    ctx = {
        "investment": None,
        "form": {"exit_date": date.today().isoformat(), "proceeds_received": "", "notes": ""},
    }

    try:
        investment = get_client().get_investment(investment_id)
    except APIError as e:
        ctx["error"] = f"Could not load investment: {e.detail}"
        return render(request, "exit_form.html", ctx)

    if investment is None:
        ctx["error"] = f"Investment {investment_id} not found"
        return render(request, "exit_form.html", ctx, status_code=404)

    ctx["investment"] = investment
    return render(request, "exit_form.html", ctx)


@app.post("/investments/{investment_id}/exit", response_class=HTMLResponse)
async def record_exit(
    request: Request,
    investment_id: int,
    exit_date: Annotated[str, Form()],
    proceeds_received: Annotated[str, Form()],
    notes: Annotated[str, Form()] = "",
):
    """Record an exit; the multiple is proceeds over amount invested."""
    form = {"exit_date": exit_date, "proceeds_received": proceeds_received, "notes": notes}
    ctx = {"investment": None, "form": form}
    client = get_client()

    try:
        investment = client.get_investment(investment_id)
        if investment is None:
            ctx["error"] = f"Investment {investment_id} not found"
            return render(request, "exit_form.html", ctx, status_code=404)
        ctx["investment"] = investment

        try:
            proceeds = Decimal(proceeds_received.strip() or "0")
        except InvalidOperation:
            ctx["error"] = "proceeds_received: must be a number"
            return render(request, "exit_form.html", ctx, status_code=400)

        data = ExitDetailsCreate(
            investment_id=investment_id,
            exit_date=exit_date,
            proceeds_received=proceeds,
            exit_multiple=quantize_multiple(proceeds / investment.amount_invested),
            notes=blank_to_none(notes),
        )
        client.create_exit_details(data)
    except ValidationError as e:
        ctx["error"] = validation_message(e)
        return render(request, "exit_form.html", ctx, status_code=400)
    except APIError as e:
        ctx["error"] = f"Action failed: {e.detail}"
        return render(request, "exit_form.html", ctx, status_code=400)

    return redirect_home(tab="exited")


@app.post("/exits/{exit_id}/delete", response_class=RedirectResponse)
async def delete_exit(request: Request, exit_id: int):
    """Undo an exit; the investment becomes Active again."""
    try:
        undone = get_client().delete_exit_details(exit_id)
    except APIError as e:
        logger.warning(f"Undoing exit {exit_id} failed: {e.detail}")
        return redirect_home(tab="exited", error=f"Action failed: {e.detail}")

    if not undone:
        return redirect_home(tab="exited", error=f"Action failed: exit {exit_id} was not removed")
    return redirect_home(tab="active")


# --- Health Check ---


@app.get("/health")
async def health():
    """Health check endpoint."""
    return {"status": "healthy"}
