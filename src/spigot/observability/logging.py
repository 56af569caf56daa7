"""Structured logging for SPIGOT faucet.

Features:
- JSON or text format output
- stdlib ``logging`` records rendered through the same structlog chain,
  with ``extra={...}`` fields kept as structured keys
- Request ID propagation
- Sensitive data redaction
"""

import logging
import sys
import uuid
from contextlib import contextmanager
from contextvars import ContextVar
from typing import Any

import structlog

# Context variable for request ID
request_id_var: ContextVar[str | None] = ContextVar("request_id", default=None)

# Fields that should never reach the log output
REDACTED_FIELDS = frozenset(
    {
        "private_key",
        "wallet_private_key",
        "private_key_file",
        "secret",
        "password",
        "api_key",
        "auth_token",
        "bearer_token",
        "access_token",
        "mnemonic",
    }
)


def _add_request_id(
    _logger: logging.Logger,
    _method_name: str,
    event_dict: dict[str, Any],
) -> dict[str, Any]:
    """Add request ID to log event if available."""
    request_id = request_id_var.get()
    if request_id:
        event_dict["request_id"] = request_id
    return event_dict


def _redact_sensitive(
    _logger: logging.Logger,
    _method_name: str,
    event_dict: dict[str, Any],
) -> dict[str, Any]:
    """Redact sensitive fields from log events."""
    for key in event_dict:
        if key.lower() in REDACTED_FIELDS:
            event_dict[key] = "[REDACTED]"
    return event_dict


def _shared_processors() -> list[structlog.typing.Processor]:
    return [
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
        _add_request_id,
        _redact_sensitive,
    ]


def configure_logging(
    level: str = "INFO",
    log_format: str = "json",
) -> None:
    """Configure structured logging for the application.

    Parameters
    ----------
    level : str
        Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL).
    log_format : str
        Output format (json or text).

    Raises
    ------
    ValueError
        If level is not a known log level.
    """
    log_level = logging.getLevelName(level.upper())
    if not isinstance(log_level, int):
        raise ValueError(
            f"Invalid log level: {level!r}. "
            "Valid levels are: DEBUG, INFO, WARNING, ERROR, CRITICAL."
        )

    if log_format.lower() == "json":
        renderer: structlog.typing.Processor = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=sys.stdout.isatty())

    # stdlib records pick up their extra={...} fields before the shared chain
    formatter = structlog.stdlib.ProcessorFormatter(
        foreign_pre_chain=[structlog.stdlib.ExtraAdder(), *_shared_processors()],
        processors=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            structlog.processors.format_exc_info,
            renderer,
        ],
    )

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(formatter)

    root = logging.getLogger()
    root.handlers = [handler]
    root.setLevel(log_level)

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            *_shared_processors(),
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    """Get a structured logger instance."""
    return structlog.get_logger(name)


def set_request_id(request_id: str) -> None:
    """Set the request ID for the current context."""
    request_id_var.set(request_id)


def clear_request_id() -> None:
    """Clear the request ID for the current context."""
    request_id_var.set(None)


@contextmanager
def request_context(request_id: str | None = None):
    """Bind a request ID for the duration of a block.

    Parameters
    ----------
    request_id : str | None
        Request ID to bind; a random one is generated if None.

    Yields
    ------
    str
        The bound request ID.
    """
    request_id = request_id or uuid.uuid4().hex[:16]
    token = request_id_var.set(request_id)
    try:
        yield request_id
    finally:
        request_id_var.reset(token)
