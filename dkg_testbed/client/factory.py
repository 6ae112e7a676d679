"""
DKG Client Factory

Turns a signing key plus the fixed network definition into a ClientHandle.
Creating a handle performs no network call; connecting lazily is the SDK's
business.
"""

from __future__ import annotations

import copy
import inspect
from datetime import UTC, datetime
from typing import Any
from uuid import uuid4

import structlog
from eth_account import Account

from ..config import NEUROWEB_TESTNET, NetworkConfig
from ..credentials.validator import KEY_FORMAT_HINT, validate
from ..errors import ConfigurationError
from ..models import KnowledgeAssetContent, PublishOptions, RetrieveOptions
from .sdk import SdkProvider, default_sdk_provider

logger = structlog.get_logger(__name__)


def merge_config(config: NetworkConfig, secret: str) -> dict[str, Any]:
    """
    Layer the signing key into the blockchain section of the client config.

    Returns a new mapping; ``config`` and any previously rendered mapping are
    left untouched.
    """
    merged = copy.deepcopy(config.to_client_config())
    merged["blockchain"] = {**merged["blockchain"], "privateKey": secret}
    return merged


async def _maybe_await(value: Any) -> Any:
    if inspect.isawaitable(value):
        return await value
    return value


class ClientHandle:
    """
    Capability object bound to one signing key and one network.

    Wraps the SDK client and exposes the two remote operations. A handle is
    never re-pointed at another key: a new credential means a new handle.
    """

    def __init__(
        self,
        sdk_client: Any,
        network: NetworkConfig,
        address: str,
    ) -> None:
        self._sdk_client = sdk_client
        self.network = network
        self.address = address
        self.handle_id = str(uuid4())
        self.created_at = datetime.now(UTC)

    @property
    def chain(self) -> str:
        return self.network.blockchain.name

    @property
    def sdk_client(self) -> Any:
        return self._sdk_client

    async def publish(
        self,
        content: KnowledgeAssetContent,
        options: PublishOptions | None = None,
    ) -> Any:
        """Create a knowledge asset. Returns the raw SDK result."""
        options = options or PublishOptions()
        return await _maybe_await(
            self._sdk_client.asset.create(content, options.to_sdk())
        )

    async def retrieve(
        self,
        locator: str,
        options: RetrieveOptions | None = None,
    ) -> Any:
        """Fetch a knowledge asset by UAL. Returns the raw SDK result."""
        options = options or RetrieveOptions()
        return await _maybe_await(self._sdk_client.asset.get(locator, options.to_sdk()))

    def describe(self) -> dict[str, Any]:
        return {
            "handle_id": self.handle_id,
            "address": self.address,
            "chain": self.chain,
            "endpoint": self.network.endpoint,
            "created_at": self.created_at.isoformat(),
        }

    def __repr__(self) -> str:
        return f"ClientHandle(id={self.handle_id!r}, address={self.address!r}, chain={self.chain!r})"


class ClientFactory:
    """Builds ClientHandles for a fixed network through an SDK provider."""

    def __init__(
        self,
        sdk_provider: SdkProvider | None = None,
        config: NetworkConfig = NEUROWEB_TESTNET,
    ) -> None:
        self.sdk_provider = sdk_provider or default_sdk_provider()
        self.config = config

    def create(self, secret: str) -> ClientHandle:
        """
        Create a new client handle for ``secret``.

        Raises:
            ConfigurationError: If the key is missing or malformed, the SDK is
                unavailable, or the SDK rejects the configuration
        """
        if not secret or not secret.strip():
            raise ConfigurationError("Private key is required to initialize DKG.")
        if not validate(secret):
            raise ConfigurationError(f"Invalid private key format. {KEY_FORMAT_HINT}")
        secret = secret.strip()

        constructor = self.sdk_provider.resolve()

        try:
            address = Account.from_key(secret).address
        except Exception as e:
            # The message of the cause may echo the key; keep only its type
            raise ConfigurationError(
                f"Failed to initialize DKG: private key rejected ({type(e).__name__})."
            ) from e

        try:
            sdk_client = constructor(merge_config(self.config, secret))
        except Exception as e:
            raise ConfigurationError(f"Failed to initialize DKG: {e}") from e

        handle = ClientHandle(sdk_client, self.config, address)
        logger.info(
            "client_handle_created",
            handle_id=handle.handle_id,
            address=address,
            chain=handle.chain,
            endpoint=self.config.endpoint,
        )
        return handle


def initialize(
    secret: str,
    sdk_provider: SdkProvider | None = None,
    config: NetworkConfig = NEUROWEB_TESTNET,
) -> ClientHandle:
    """Create a client handle; see ClientFactory.create."""
    return ClientFactory(sdk_provider, config).create(secret)
