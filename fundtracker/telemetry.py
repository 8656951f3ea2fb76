"""OpenTelemetry metrics and logs for the fund tracker."""

import logging
import os
from decimal import Decimal

from opentelemetry import metrics
from opentelemetry._logs import set_logger_provider
from opentelemetry.exporter.otlp.proto.http.metric_exporter import OTLPMetricExporter
from opentelemetry.exporter.otlp.proto.http._log_exporter import OTLPLogExporter
from opentelemetry.sdk._logs import LoggerProvider, LoggingHandler
from opentelemetry.sdk._logs.export import BatchLogRecordProcessor
from opentelemetry.sdk.metrics import MeterProvider
from opentelemetry.sdk.metrics.export import PeriodicExportingMetricReader
from opentelemetry.sdk.resources import Resource

from fundtracker._version import VERSION


# Module-level state
_initialized = False
_meter = None
_log_handler = None

# Counters (cumulative)
_investments_created_total = None
_capital_invested_total = None
_investments_deleted_total = None
_exits_recorded_total = None
_exit_proceeds_total = None
_exits_deleted_total = None


def setup_telemetry() -> bool:
    """Initialize OpenTelemetry metrics and log export.

    Returns True if telemetry was initialized, False if disabled.
    """
    global _initialized, _meter, _log_handler
    global _investments_created_total, _capital_invested_total, _investments_deleted_total
    global _exits_recorded_total, _exit_proceeds_total, _exits_deleted_total

    if _initialized:
        return True

    # Check if telemetry is enabled
    if os.getenv("OTLP_ENABLED", "true").lower() == "false":
        return False

    # Get configuration from environment
    otlp_endpoint = os.getenv("OTLP_ENDPOINT", "http://localhost:4318/v1/metrics")
    export_interval = int(os.getenv("OTLP_EXPORT_INTERVAL", "5000"))

    resource = Resource.create({
        "service.name": "fund-tracker",
        "service.version": VERSION,
    })

    exporter = OTLPMetricExporter(endpoint=otlp_endpoint)
    reader = PeriodicExportingMetricReader(
        exporter,
        export_interval_millis=export_interval,
    )
    provider = MeterProvider(resource=resource, metric_readers=[reader])
    metrics.set_meter_provider(provider)

    _meter = metrics.get_meter("fund_tracker", VERSION)

    _investments_created_total = _meter.create_counter(
        "fund_investments_created_total",
        description="Total number of investments recorded",
        unit="1",
    )

    _capital_invested_total = _meter.create_counter(
        "fund_capital_invested_total",
        description="Total amount invested across recorded investments",
        unit="currency",
    )

    _investments_deleted_total = _meter.create_counter(
        "fund_investments_deleted_total",
        description="Total number of investments deleted",
        unit="1",
    )

    _exits_recorded_total = _meter.create_counter(
        "fund_exits_recorded_total",
        description="Total number of exits recorded",
        unit="1",
    )

    _exit_proceeds_total = _meter.create_counter(
        "fund_exit_proceeds_total",
        description="Total proceeds received from recorded exits",
        unit="currency",
    )

    _exits_deleted_total = _meter.create_counter(
        "fund_exits_deleted_total",
        description="Total number of exits removed",
        unit="1",
    )

    # === LOGS ===
    logs_endpoint = otlp_endpoint.replace("/v1/metrics", "/v1/logs")
    log_exporter = OTLPLogExporter(endpoint=logs_endpoint)
    logger_provider = LoggerProvider(resource=resource)
    logger_provider.add_log_record_processor(BatchLogRecordProcessor(log_exporter))
    set_logger_provider(logger_provider)

    _log_handler = LoggingHandler(
        level=logging.INFO,
        logger_provider=logger_provider,
    )

    _initialized = True
    return True


def get_log_handler() -> LoggingHandler | None:
    """Get the OTLP logging handler to attach to Python loggers."""
    return _log_handler


def is_enabled() -> bool:
    """Check if telemetry is initialized and enabled."""
    return _initialized


# --- Counter update functions ---

def record_investment_created(funding_round: str, amount: Decimal) -> None:
    """Record a new investment."""
    if not _initialized:
        return

    attributes = {"funding_round": funding_round}
    _investments_created_total.add(1, attributes)
    _capital_invested_total.add(float(amount), attributes)


def record_investment_deleted() -> None:
    """Record an investment deletion."""
    if not _initialized:
        return
    _investments_deleted_total.add(1)


def record_exit_recorded(proceeds: Decimal) -> None:
    """Record a new exit."""
    if not _initialized:
        return
    _exits_recorded_total.add(1)
    _exit_proceeds_total.add(float(proceeds))


def record_exit_deleted() -> None:
    """Record an exit removal."""
    if not _initialized:
        return
    _exits_deleted_total.add(1)
