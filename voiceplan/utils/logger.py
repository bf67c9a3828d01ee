"""Logging configuration using structlog."""

import logging
import sys
from typing import Any, Optional

import structlog
from structlog.types import EventDict, Processor

# Event keys whose values may hold a whole recording
AUDIO_KEYS = ("audio", "audio_data_uri", "audioDataUri", "data_uri")
MAX_AUDIO_PREVIEW = 32


def add_log_level(logger: Any, method_name: str, event_dict: EventDict) -> EventDict:
    """Add log level to event dict."""
    if method_name == "warn":
        method_name = "warning"
    event_dict["level"] = method_name.upper()
    return event_dict


def redact_audio(logger: Any, method_name: str, event_dict: EventDict) -> EventDict:
    """Replace base64 audio in an event with a short preview and its length."""
    for key in AUDIO_KEYS:
        value = event_dict.get(key)
        if isinstance(value, str) and len(value) > MAX_AUDIO_PREVIEW:
            event_dict[key] = f"{value[:MAX_AUDIO_PREVIEW]}... ({len(value)} chars)"
    return event_dict


def configure_logging(log_level: str = "INFO", json_logs: Optional[bool] = None) -> None:
    """
    Configure structlog on top of the standard library logger.

    Agents log through ``logging.getLogger`` and the rest of the service
    through :func:`get_logger`; both end up on stdout.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        json_logs: Render JSON lines; defaults to everything but DEBUG
    """
    level = getattr(logging, log_level.upper(), logging.INFO)
    logging.basicConfig(format="%(message)s", stream=sys.stdout, level=level)

    if json_logs is None:
        json_logs = level > logging.DEBUG

    processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_logger_name,
        add_log_level,
        redact_audio,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        structlog.processors.JSONRenderer(ensure_ascii=False) if json_logs else structlog.dev.ConsoleRenderer(),
    ]

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str = __name__) -> structlog.stdlib.BoundLogger:
    """Get a structlog logger bound to ``name`` (typically __name__)."""
    return structlog.get_logger(name)


# Initialize logging on module import
from .config import settings

configure_logging(settings.log_level)
