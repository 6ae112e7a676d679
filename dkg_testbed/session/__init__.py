"""
Session Package

Stateless asset operations plus the per-session coordinator that wraps them
with single-flight discipline and result bookkeeping.
"""

from .coordinator import SessionCoordinator
from .operations import (
    PUBLISH_OPTIONS,
    RETRIEVE_OPTIONS,
    parse_content,
    parse_locator,
    publish,
    publish_asset,
    retrieve,
    retrieve_asset,
)

__all__ = [
    "SessionCoordinator",
    "publish",
    "retrieve",
    "publish_asset",
    "retrieve_asset",
    "parse_content",
    "parse_locator",
    "PUBLISH_OPTIONS",
    "RETRIEVE_OPTIONS",
]
