"""
Knowledge Asset Operations

Stateless publish/retrieve over a ClientHandle. Every failure leaves here as
one of the testbed errors; nothing is retried.
"""

from __future__ import annotations

import json
from collections.abc import Mapping
from typing import Any

import structlog

from ..client.factory import ClientHandle
from ..errors import (
    DKGError,
    EmptyResultError,
    InvalidInputError,
    NotInitializedError,
    RemoteOperationError,
)
from ..models import (
    KnowledgeAssetContent,
    PublishOptions,
    PublishResult,
    RetrieveOptions,
    RetrieveResult,
)
from ..monitoring.logging import log_duration

logger = structlog.get_logger(__name__)

# Fixed remote parameters; not user-editable.
PUBLISH_OPTIONS = PublishOptions()
RETRIEVE_OPTIONS = RetrieveOptions()


def parse_content(content: Any) -> KnowledgeAssetContent:
    """
    Accept a JSON object given as text or as an already-decoded mapping.

    Raises:
        InvalidInputError: If the text is not JSON, or not a JSON object
    """
    if isinstance(content, (str, bytes, bytearray)):
        try:
            content = json.loads(content)
        except (ValueError, UnicodeDecodeError) as e:
            raise InvalidInputError(f"Invalid JSON format for asset content: {e}") from e
        if not isinstance(content, dict):
            raise InvalidInputError(
                f"Asset content must be a JSON object, got {type(content).__name__}."
            )
        return content
    if isinstance(content, Mapping):
        return dict(content)
    raise InvalidInputError("Asset content must be a JSON object.")


def parse_locator(locator: Any) -> str:
    if not isinstance(locator, str) or not locator.strip():
        raise InvalidInputError("Please enter a UAL to retrieve.")
    return locator.strip()


def _field(result: Any, name: str) -> Any:
    if isinstance(result, Mapping):
        return result.get(name)
    return None


async def publish_asset(handle: ClientHandle | None, content: Any) -> PublishResult:
    """
    Publish ``content`` as a new knowledge asset.

    Raises:
        NotInitializedError: No handle
        InvalidInputError: Content is not a JSON object
        EmptyResultError: The SDK returned no UAL
        RemoteOperationError: The SDK call failed
    """
    if handle is None:
        raise NotInitializedError()
    parsed = parse_content(content)

    try:
        with log_duration(logger, "asset_publish", handle_id=handle.handle_id, chain=handle.chain):
            result = await handle.publish(parsed, PUBLISH_OPTIONS)
    except DKGError:
        raise
    except Exception as e:
        raise RemoteOperationError("create asset", e) from e

    ual = _field(result, "UAL")
    if not isinstance(ual, str) or not ual.strip():
        raise EmptyResultError("Asset creation did not return a UAL.")

    logger.info("asset_published", ual=ual, handle_id=handle.handle_id)
    return PublishResult(ual=ual)


async def retrieve_asset(handle: ClientHandle | None, locator: Any) -> RetrieveResult:
    """
    Retrieve the latest finalized assertion of the asset at ``locator``.

    Raises:
        NotInitializedError: No handle
        InvalidInputError: Empty locator
        EmptyResultError: The SDK returned no assertion
        RemoteOperationError: The SDK call failed
    """
    if handle is None:
        raise NotInitializedError()
    ual = parse_locator(locator)

    try:
        with log_duration(logger, "asset_retrieve", handle_id=handle.handle_id, ual=ual):
            result = await handle.retrieve(ual, RETRIEVE_OPTIONS)
    except DKGError:
        raise
    except Exception as e:
        raise RemoteOperationError("get asset", e) from e

    assertion = _field(result, "assertion")
    if assertion is None:
        raise EmptyResultError("Asset retrieval did not return any data (assertion).")

    return RetrieveResult(ual=ual, assertion=assertion)


async def publish(handle: ClientHandle | None, content: Any) -> str:
    """Publish and return the new asset's UAL."""
    return (await publish_asset(handle, content)).ual


async def retrieve(handle: ClientHandle | None, locator: Any) -> Any:
    """Retrieve and return the asset's assertion."""
    return (await retrieve_asset(handle, locator)).assertion
