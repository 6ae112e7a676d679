"""
DKG Testbed - Structured Logging

Logging configuration using structlog.

Features:
- JSON output for production
- Pretty console output for development
- Redaction of signing keys and other secrets
- Operation duration logging
"""

from __future__ import annotations

import logging
import re
import sys
import time
from collections.abc import Iterator
from contextlib import contextmanager
from datetime import UTC, datetime
from typing import Any

import structlog
from structlog.typing import EventDict, WrappedLogger

SERVICE_NAME = "dkg-testbed"

# Any event key containing one of these fragments is redacted.
SENSITIVE_KEY_FRAGMENTS = frozenset({
    "private_key",
    "privatekey",
    "secret",
    "signing_key",
    "password",
    "token",
    "api_key",
    "authorization",
    "mnemonic",
    "seed",
})

# 64 hex characters with an optional 0x prefix looks like a raw signing key.
_RAW_KEY_PATTERN = re.compile(r"(?<![0-9a-fA-Fx])(0x)?[0-9a-fA-F]{64}(?![0-9a-fA-F])")

REDACTED = "[REDACTED]"


# =============================================================================
# Custom Processors
# =============================================================================

def add_timestamp(
    logger: WrappedLogger,
    method_name: str,
    event_dict: EventDict,
) -> EventDict:
    """Add ISO8601 timestamp to log entry."""
    event_dict["timestamp"] = datetime.now(UTC).isoformat()
    return event_dict


def add_service_info(
    logger: WrappedLogger,
    method_name: str,
    event_dict: EventDict,
) -> EventDict:
    """Add service identification info."""
    event_dict["service"] = SERVICE_NAME
    return event_dict


def sanitize_sensitive_data(
    logger: WrappedLogger,
    method_name: str,
    event_dict: EventDict,
) -> EventDict:
    """Remove or mask secrets from logs, including raw keys embedded in strings."""

    def _sanitize(obj: Any, depth: int = 0) -> Any:
        if depth > 10:
            return obj

        if isinstance(obj, dict):
            return {
                k: REDACTED
                if isinstance(k, str) and any(s in k.lower() for s in SENSITIVE_KEY_FRAGMENTS)
                else _sanitize(v, depth + 1)
                for k, v in obj.items()
            }
        elif isinstance(obj, (list, tuple)):
            return [_sanitize(item, depth + 1) for item in obj]
        elif isinstance(obj, str):
            return _RAW_KEY_PATTERN.sub(REDACTED, obj)
        return obj

    result: EventDict = _sanitize(event_dict)
    return result


# =============================================================================
# Logging Configuration
# =============================================================================

def configure_logging(
    level: str = "INFO",
    json_output: bool = False,
    include_timestamps: bool = True,
    include_service_info: bool = True,
) -> None:
    """
    Configure structured logging for the application.

    Sanitization is always on: signing keys must never reach a log sink.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        json_output: Use JSON format (for production)
        include_timestamps: Add timestamps to logs
        include_service_info: Add service name
    """
    processors: list[Any] = [
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.contextvars.merge_contextvars,
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
    ]

    if include_timestamps:
        processors.insert(0, add_timestamp)

    if include_service_info:
        processors.insert(0, add_service_info)

    processors.append(sanitize_sensitive_data)

    if json_output:
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=True))

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=getattr(logging, level.upper()),
    )

    # Reduce noise from third-party loggers
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("dkg").setLevel(logging.WARNING)


# =============================================================================
# Performance Logging
# =============================================================================

@contextmanager
def log_duration(
    logger: Any,
    operation: str,
    level: str = "info",
    **extra_context: Any,
) -> Iterator[None]:
    """
    Context manager to log operation duration.

    Usage:
        with log_duration(logger, "asset_publish", chain="otp:20430"):
            result = await handle.publish(...)
    """
    start_time = time.monotonic()
    log_method = getattr(logger, level)

    try:
        yield
        duration_ms = (time.monotonic() - start_time) * 1000
        log_method(
            f"{operation}_completed",
            duration_ms=round(duration_ms, 2),
            **extra_context,
        )
    except Exception as e:
        duration_ms = (time.monotonic() - start_time) * 1000
        logger.warning(
            f"{operation}_failed",
            duration_ms=round(duration_ms, 2),
            error=str(e),
            error_type=type(e).__name__,
            **extra_context,
        )
        raise


__all__ = [
    "configure_logging",
    "log_duration",
    "sanitize_sensitive_data",
    "REDACTED",
]
