"""
Observability Infrastructure

Structured logging with correlation tracking plus the Prometheus counters
recorded by terminal transitions, efficiency logging and notifications.
"""

import contextvars
import logging
import sys
import uuid
from typing import Any

import structlog
from prometheus_client import Counter, Histogram, start_http_server

from .config import settings

# Context variables for correlation tracking
correlation_id_var: contextvars.ContextVar[str] = contextvars.ContextVar(
    "correlation_id", default=""
)
terminal_id_var: contextvars.ContextVar[str] = contextvars.ContextVar(
    "terminal_id", default=""
)

# Prometheus metrics
REQUEST_COUNT = Counter(
    "shopfloor_http_requests_total",
    "Total HTTP requests",
    ["method", "endpoint", "status"],
)

REQUEST_DURATION = Histogram(
    "shopfloor_http_request_duration_seconds",
    "HTTP request duration",
    ["method", "endpoint"],
)

TERMINAL_TRANSITIONS = Counter(
    "shopfloor_terminal_transitions_total",
    "Terminal state machine actions",
    ["action", "outcome"],
)

EFFICIENCY_RECORDS = Counter(
    "shopfloor_efficiency_records_total",
    "Efficiency metrics computed and persisted",
    ["metric_type", "outcome"],
)

NOTIFICATIONS = Counter(
    "shopfloor_notifications_total",
    "Email notification attempts",
    ["kind", "outcome"],
)


class CorrelationIdProcessor:
    """Structlog processor to add correlation and terminal IDs to log entries."""

    def __call__(
        self, logger: Any, name: str, event_dict: dict[str, Any]
    ) -> dict[str, Any]:
        correlation_id = correlation_id_var.get("")
        terminal_id = terminal_id_var.get("")

        if correlation_id:
            event_dict["correlation_id"] = correlation_id
        if terminal_id:
            event_dict["terminal_id"] = terminal_id

        return event_dict


def setup_structured_logging() -> None:
    """Configure structured logging with JSON output and correlation tracking."""
    log_level = getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO)

    processors = [
        structlog.contextvars.merge_contextvars,
        CorrelationIdProcessor(),
        structlog.processors.TimeStamper(fmt="ISO"),
        structlog.processors.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.format_exc_info,
    ]

    if settings.LOG_FORMAT == "json":
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(
            structlog.dev.ConsoleRenderer(colors=settings.ENVIRONMENT == "local")
        )

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=log_level,
    )

    if settings.LOG_SQL:
        logging.getLogger("sqlalchemy.engine").setLevel(logging.INFO)
    else:
        logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)


def setup_metrics() -> None:
    """Expose Prometheus metrics on METRICS_PORT."""
    if not settings.ENABLE_METRICS:
        return

    start_http_server(settings.METRICS_PORT)


def get_logger(name: str) -> structlog.BoundLogger:
    """Get a structured logger instance."""
    return structlog.get_logger(name)


def set_correlation_id(correlation_id: str | None = None) -> str:
    """Set correlation ID for request tracking."""
    if correlation_id is None:
        correlation_id = str(uuid.uuid4())

    correlation_id_var.set(correlation_id)
    return correlation_id


def set_terminal_id(terminal_id: str) -> None:
    """Set terminal ID for request tracking."""
    terminal_id_var.set(terminal_id)


def record_transition(action: str, outcome: str) -> None:
    TERMINAL_TRANSITIONS.labels(action=action, outcome=outcome).inc()


def record_efficiency(metric_type: str, outcome: str) -> None:
    EFFICIENCY_RECORDS.labels(metric_type=metric_type, outcome=outcome).inc()


def record_notification(kind: str, outcome: str) -> None:
    NOTIFICATIONS.labels(kind=kind, outcome=outcome).inc()
