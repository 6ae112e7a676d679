"""
Adapter over the OriginTrail ``dkg`` Python client

Exposes the constructor-from-config call shape the client factory expects:
``DkgPyClient(config)`` with ``asset.create`` / ``asset.get`` coroutines.
The ``dkg`` package is an optional dependency (install the ``dkg`` extra);
importing this module without it fails, which the module SDK provider reports
as an unavailable library.

Constructing a DkgPyClient only checks and stores the configuration. The dkg
providers talk to the chain as soon as they are built, so they are created on
the first asset call, inside the worker thread that runs it.
"""

from __future__ import annotations

import asyncio
import threading
from typing import Any

import structlog
from dkg import DKG
from dkg.providers import BlockchainProvider, NodeHTTPProvider

logger = structlog.get_logger(__name__)

NODE_API_VERSION = "v1"


class _AssetOperations:
    """The ``asset`` namespace of DkgPyClient."""

    def __init__(self, client: DkgPyClient) -> None:
        self._client = client

    async def create(self, content: dict[str, Any], options: dict[str, Any]) -> dict[str, Any]:
        sdk_options = {
            "epochs_num": options.get("epochs"),
            "token_amount": options.get("tokenAmount"),
        }
        sdk_options = {k: v for k, v in sdk_options.items() if v is not None}
        return await asyncio.to_thread(self._client.call, "create", content, sdk_options)

    async def get(self, ual: str, options: dict[str, Any]) -> dict[str, Any]:
        sdk_options = {
            "state": options.get("state"),
            "validate": options.get("validate", True),
        }
        return await asyncio.to_thread(self._client.call, "get", ual, sdk_options)


class DkgPyClient:
    """
    Network client built from the merged testbed configuration.

    Expected config keys: ``endpoint``, ``port``, ``useSSL`` and a
    ``blockchain`` mapping with ``name``, ``rpc`` and ``privateKey``.
    The hub contract is resolved by dkg from its own chain constants.
    """

    def __init__(self, config: dict[str, Any]) -> None:
        blockchain = config.get("blockchain") or {}
        if not blockchain.get("privateKey"):
            raise ValueError("blockchain.privateKey is required")
        if not blockchain.get("name"):
            raise ValueError("blockchain.name is required")
        if not config.get("endpoint"):
            raise ValueError("endpoint is required")

        scheme = "https" if config.get("useSSL", True) else "http"
        self.endpoint_uri = f"{scheme}://{config['endpoint']}:{config.get('port', 443)}"
        self.chain = blockchain["name"]
        self.rpc_uri = blockchain.get("rpc")
        self._private_key = blockchain["privateKey"]

        self._dkg: Any = None
        self._lock = threading.Lock()
        self.asset = _AssetOperations(self)

    def _connect(self) -> Any:
        with self._lock:
            if self._dkg is None:
                node_provider = NodeHTTPProvider(
                    endpoint_uri=self.endpoint_uri,
                    api_version=NODE_API_VERSION,
                )
                blockchain_provider = BlockchainProvider(self.chain, rpc_uri=self.rpc_uri)
                blockchain_provider.set_account(self._private_key)
                self._dkg = DKG(node_provider, blockchain_provider)
                logger.debug(
                    "dkgpy_client_connected",
                    endpoint=self.endpoint_uri,
                    chain=self.chain,
                    rpc=self.rpc_uri,
                )
            return self._dkg

    def call(self, method: str, *args: Any) -> Any:
        """Run ``dkg.asset.<method>``, connecting first if needed. Blocking."""
        dkg = self._connect()
        return getattr(dkg.asset, method)(*args)

    def __repr__(self) -> str:
        return f"DkgPyClient(endpoint={self.endpoint_uri!r}, chain={self.chain!r})"
