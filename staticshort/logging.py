"""
Structured logging configuration using structlog.

Standardized log format:
{
    "ts": "2026-10-18T09:30:00.123456Z",
    "level": "info",
    "service": "staticshort",
    "correlation_id": "uuid-v4",
    "event": "rule.loaded",
    "module": "staticshort.rules.loader",
    "func_name": "load_rules",
    "lineno": 42,
    ...additional context...
}
"""
import structlog
import logging
from typing import Any


def service_name_adder(service_name: str):
    """Build a processor that stamps the service name on every entry."""

    def add_service_name(logger: Any, method_name: str, event_dict: dict) -> dict:
        event_dict["service"] = service_name
        return event_dict

    return add_service_name


def setup_logging(json_output: bool = True, level: str = "INFO", service_name: str = "staticshort"):
    """
    Configure structured logging with standardized fields.

    Args:
        json_output: If True, output JSON logs. If False, use console format.
        level: Minimum level name, e.g. "INFO".
        service_name: Name of the service (for multi-service deployments).
    """
    shared_processors = [
        # Includes correlation_id bound by the middleware
        structlog.contextvars.merge_contextvars,
        service_name_adder(service_name),
        structlog.processors.TimeStamper(fmt="iso", key="ts"),
        structlog.processors.add_log_level,
        structlog.processors.CallsiteParameterAdder(
            {
                structlog.processors.CallsiteParameter.MODULE,
                structlog.processors.CallsiteParameter.FUNC_NAME,
                structlog.processors.CallsiteParameter.LINENO,
            }
        ),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]

    if json_output:
        processors = shared_processors + [structlog.processors.JSONRenderer()]
    else:
        processors = shared_processors + [structlog.dev.ConsoleRenderer()]

    log_level = logging.getLevelName(level.upper())

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(
        format="%(message)s",
        level=log_level,
    )

    # Silence uvicorn's default logging to avoid duplicate logs
    logging.getLogger("uvicorn.error").handlers = []
    logging.getLogger("uvicorn.access").handlers = []


def get_logger():
    """Get a configured structlog logger."""
    return structlog.get_logger()
