"""
DKG Testbed - Test Fixtures

Shared pytest fixtures for all test modules. Remote calls go to an in-memory
echo double of the network client SDK: ``create`` stores the content under a
fresh UAL and ``get`` hands it back.
"""

from __future__ import annotations

import asyncio
import itertools
from typing import Any

import pytest

from dkg_testbed.client import ClientFactory, StaticSdkProvider
from dkg_testbed.config import NEUROWEB_TESTNET, Settings, configure_settings
from dkg_testbed.session import SessionCoordinator

# TEST-ONLY keys. Never fund these.
VALID_KEY = "a" * 64
VALID_PREFIXED_KEY = "0x" + "b" * 64
# Well-formed but larger than the secp256k1 group order.
OUT_OF_RANGE_KEY = "f" * 64

SAMPLE_ASSET = {
    "@context": "https://schema.org",
    "@type": "Person",
    "name": "John Doe",
    "description": "A test asset created with the DKG Testbed.",
}


# =============================================================================
# Network client SDK doubles
# =============================================================================


class EchoAssetApi:
    """In-memory ``asset`` namespace with echo semantics."""

    _counter = itertools.count(1)

    def __init__(self, chain: str) -> None:
        self.chain = chain
        self.store: dict[str, Any] = {}
        self.create_calls: list[tuple[dict[str, Any], dict[str, Any]]] = []
        self.get_calls: list[tuple[str, dict[str, Any]]] = []

    async def create(self, content: dict[str, Any], options: dict[str, Any]) -> dict[str, Any]:
        self.create_calls.append((content, options))
        ual = f"did:dkg:{self.chain}/0x7ee6665a29a3a8a3551486586255c2c400b46d03/{next(self._counter)}"
        self.store[ual] = content
        return {"UAL": ual}

    async def get(self, ual: str, options: dict[str, Any]) -> dict[str, Any]:
        self.get_calls.append((ual, options))
        if ual not in self.store:
            return {}
        return {"assertion": self.store[ual]}


class EchoDkgClient:
    """Constructor-from-config double of the network client."""

    def __init__(self, config: dict[str, Any]) -> None:
        self.config = config
        self.asset = EchoAssetApi(config["blockchain"]["name"])


class BlockingAssetApi:
    """``asset`` namespace whose calls wait until ``release`` is set."""

    def __init__(self) -> None:
        self.started = asyncio.Event()
        self.release = asyncio.Event()
        self.in_flight = 0
        self.max_in_flight = 0

    async def _hold(self) -> None:
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        self.started.set()
        try:
            await self.release.wait()
        finally:
            self.in_flight -= 1

    async def create(self, content: dict[str, Any], options: dict[str, Any]) -> dict[str, Any]:
        await self._hold()
        return {"UAL": "did:dkg:otp:20430/0xabc/1"}

    async def get(self, ual: str, options: dict[str, Any]) -> dict[str, Any]:
        await self._hold()
        return {"assertion": {"@id": ual}}


# =============================================================================
# Fixtures
# =============================================================================


@pytest.fixture(autouse=True)
def testing_settings():
    """Isolate tests from the developer's environment and .env file."""
    settings = Settings(environment="testing", private_key=None, _env_file=None)
    configure_settings(settings)
    yield settings
    configure_settings(None)


@pytest.fixture
def sdk_provider():
    """SDK provider serving the echo double."""
    return StaticSdkProvider(EchoDkgClient)


@pytest.fixture
def client_factory(sdk_provider):
    return ClientFactory(sdk_provider, NEUROWEB_TESTNET)


@pytest.fixture
def coordinator(client_factory):
    return SessionCoordinator(client_factory)


@pytest.fixture
def initialized_coordinator(coordinator):
    coordinator.initialize(VALID_KEY)
    return coordinator
