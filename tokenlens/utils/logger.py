"""
TokenLens - Structured Logging Utility
structlog setup for the API and CLI. Logs go to stderr so the CLI's JSON
output on stdout stays clean; every line carries the service name and
version, plus the token and mode of the analysis in progress.
"""
import structlog
import logging
import sys
from typing import Any, Dict
from tokenlens.config.settings import get_settings


def _service_stamper(service: str, version: str):
    def stamp(logger: Any, method_name: str, event_dict: Dict[str, Any]) -> Dict[str, Any]:
        event_dict.setdefault("service", service)
        event_dict.setdefault("version", version)
        return event_dict
    return stamp


def setup_logging() -> None:
    """Configure structured logging for the API server and CLI."""
    settings = get_settings()
    log_level = getattr(logging, settings.log_level.upper(), logging.INFO)

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            _service_stamper(settings.app_name.lower(), settings.version),
            structlog.processors.add_log_level,
            structlog.dev.set_exc_info,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.dev.ConsoleRenderer() if settings.debug else structlog.processors.JSONRenderer(),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=True,
    )

    # uvicorn and aiohttp log through the standard library
    logging.basicConfig(
        format="%(message)s",
        stream=sys.stderr,
        level=log_level,
    )


def bind_analysis_context(token: str, mode: str) -> None:
    """Tag every log line of the current analysis run with its token and mode."""
    structlog.contextvars.clear_contextvars()
    structlog.contextvars.bind_contextvars(token=token, mode=mode)


def get_logger(name: str = None) -> structlog.BoundLogger:
    """Get a named structured logger."""
    return structlog.get_logger(name or "tokenlens")
