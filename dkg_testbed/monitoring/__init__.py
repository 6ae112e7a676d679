"""
DKG Testbed Monitoring

Structured logging for the testbed.
"""

from .logging import (
    configure_logging,
    log_duration,
    sanitize_sensitive_data,
)

__all__ = [
    "configure_logging",
    "log_duration",
    "sanitize_sensitive_data",
]
