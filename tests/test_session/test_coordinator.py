"""
Tests for the Session Coordinator

Covers initialization and re-initialization, the single-flight discipline
across publish and retrieve, busy release on every exit path, and the
last-result/last-error bookkeeping.
"""

from __future__ import annotations

import asyncio
from unittest.mock import AsyncMock

import pytest

from dkg_testbed.client import ClientFactory, StaticSdkProvider
from dkg_testbed.config import NEUROWEB_TESTNET, Settings
from dkg_testbed.credentials import (
    EnvironmentCredentialSource,
    HybridCredentialSource,
    ManualCredentialSource,
)
from dkg_testbed.errors import (
    ConfigurationError,
    EmptyResultError,
    InvalidInputError,
    NotInitializedError,
    OperationInProgressError,
    RemoteOperationError,
)
from dkg_testbed.session import SessionCoordinator
from tests.conftest import (
    SAMPLE_ASSET,
    VALID_KEY,
    VALID_PREFIXED_KEY,
    BlockingAssetApi,
)


@pytest.fixture
def blocking_api():
    return BlockingAssetApi()


@pytest.fixture
def blocking_coordinator(blocking_api):
    class BlockingClient:
        def __init__(self, config):
            self.asset = blocking_api

    coordinator = SessionCoordinator(
        ClientFactory(StaticSdkProvider(BlockingClient), NEUROWEB_TESTNET)
    )
    coordinator.initialize(VALID_KEY)
    return coordinator


# =============================================================================
# Initial state and initialization
# =============================================================================


class TestInitialization:
    """Tests for initialize(), initialize_from() and reset()."""

    def test_initial_state(self, coordinator):
        state = coordinator.state
        assert state.handle is None
        assert state.busy is False
        assert state.last_error is None
        assert state.last_ual is None
        assert coordinator.initialized is False

    def test_initialize_sets_handle(self, coordinator):
        handle = coordinator.initialize(VALID_KEY)
        assert coordinator.handle is handle
        assert coordinator.initialized is True
        assert coordinator.state.last_error is None

    @pytest.mark.asyncio
    async def test_reinitialize_replaces_handle_and_clears_results(self, initialized_coordinator):
        old = initialized_coordinator.handle
        await initialized_coordinator.publish(SAMPLE_ASSET)
        assert initialized_coordinator.state.last_ual is not None

        new = initialized_coordinator.initialize(VALID_PREFIXED_KEY)

        assert new is not old
        assert initialized_coordinator.handle is new
        assert initialized_coordinator.state.last_ual is None

    def test_failed_initialize_clears_handle(self, initialized_coordinator):
        with pytest.raises(ConfigurationError):
            initialized_coordinator.initialize("0x1234")

        assert initialized_coordinator.handle is None
        assert initialized_coordinator.state.last_error.kind == "configuration"

    def test_factory_failure_never_leaves_partial_handle(self):
        def broken_client(config):
            raise RuntimeError("hub contract unreachable")

        coordinator = SessionCoordinator(
            ClientFactory(StaticSdkProvider(broken_client), NEUROWEB_TESTNET)
        )
        with pytest.raises(ConfigurationError, match="hub contract unreachable"):
            coordinator.initialize(VALID_KEY)
        assert coordinator.handle is None

    def test_initialize_from_manual_source(self, coordinator):
        coordinator.initialize_from(ManualCredentialSource(VALID_KEY))
        assert coordinator.initialized is True

    def test_initialize_from_environment(self, coordinator):
        settings = Settings(private_key=VALID_PREFIXED_KEY, _env_file=None)
        coordinator.initialize_from(EnvironmentCredentialSource(settings))
        assert coordinator.handle.sdk_client.config["blockchain"]["privateKey"] == VALID_PREFIXED_KEY

    def test_initialize_from_hybrid_falls_back(self, coordinator):
        env = EnvironmentCredentialSource(Settings(private_key=None, _env_file=None))
        coordinator.initialize_from(HybridCredentialSource(env, ManualCredentialSource(VALID_KEY)))
        assert coordinator.initialized is True

    def test_initialize_from_empty_source(self, initialized_coordinator):
        with pytest.raises(ConfigurationError, match="environment credential source"):
            initialized_coordinator.initialize_from(EnvironmentCredentialSource())
        assert initialized_coordinator.handle is None

    def test_reset(self, initialized_coordinator):
        initialized_coordinator.reset()
        assert initialized_coordinator.handle is None
        assert initialized_coordinator.state.last_error is None


# =============================================================================
# Publish / Retrieve
# =============================================================================


class TestOperations:
    """Tests for publish() and retrieve() bookkeeping."""

    @pytest.mark.asyncio
    async def test_publish_records_ual(self, initialized_coordinator):
        ual = await initialized_coordinator.publish(SAMPLE_ASSET)

        assert initialized_coordinator.state.last_ual == ual
        assert initialized_coordinator.busy is False

    @pytest.mark.asyncio
    async def test_round_trip(self, initialized_coordinator):
        ual = await initialized_coordinator.publish('{"@type": "Thing", "name": "x"}')
        assertion = await initialized_coordinator.retrieve(ual)

        assert assertion == {"@type": "Thing", "name": "x"}
        assert initialized_coordinator.state.last_assertion == assertion

    @pytest.mark.asyncio
    async def test_publish_does_not_chain_into_retrieve(self, initialized_coordinator):
        await initialized_coordinator.publish(SAMPLE_ASSET)
        with pytest.raises(InvalidInputError):
            await initialized_coordinator.retrieve("")

    @pytest.mark.asyncio
    async def test_not_initialized(self, coordinator):
        with pytest.raises(NotInitializedError):
            await coordinator.publish(SAMPLE_ASSET)
        assert coordinator.state.last_error.kind == "not_initialized"
        assert coordinator.busy is False

        with pytest.raises(NotInitializedError):
            await coordinator.retrieve("did:dkg:otp:20430/0xabc/1")

    @pytest.mark.asyncio
    async def test_invalid_json_recorded(self, initialized_coordinator):
        with pytest.raises(InvalidInputError):
            await initialized_coordinator.publish("{bad")

        assert initialized_coordinator.state.last_error.kind == "invalid_input"
        assert initialized_coordinator.busy is False

    @pytest.mark.asyncio
    async def test_empty_result_recorded(self, initialized_coordinator):
        initialized_coordinator.handle.sdk_client.asset.create = AsyncMock(return_value={})

        with pytest.raises(EmptyResultError):
            await initialized_coordinator.publish(SAMPLE_ASSET)

        assert initialized_coordinator.state.last_ual is None
        assert initialized_coordinator.state.last_error.kind == "empty_result"
        assert initialized_coordinator.busy is False

    @pytest.mark.asyncio
    async def test_remote_failure_recorded(self, initialized_coordinator):
        initialized_coordinator.handle.sdk_client.asset.get = AsyncMock(
            side_effect=Exception("timeout")
        )

        with pytest.raises(RemoteOperationError, match="timeout"):
            await initialized_coordinator.retrieve("did:dkg:otp:20430/0xabc/1")

        assert "timeout" in initialized_coordinator.state.last_error.message
        assert initialized_coordinator.busy is False

    @pytest.mark.asyncio
    async def test_success_clears_previous_error(self, initialized_coordinator):
        with pytest.raises(InvalidInputError):
            await initialized_coordinator.publish("[]")
        assert initialized_coordinator.state.last_error is not None

        await initialized_coordinator.publish(SAMPLE_ASSET)
        assert initialized_coordinator.state.last_error is None

    @pytest.mark.asyncio
    async def test_busy_released_after_every_outcome(self, initialized_coordinator):
        api = initialized_coordinator.handle.sdk_client.asset
        calls = [
            initialized_coordinator.publish(SAMPLE_ASSET),
            initialized_coordinator.publish("not json"),
            initialized_coordinator.retrieve(""),
            initialized_coordinator.retrieve("did:dkg:otp:20430/0xabc/missing"),
        ]
        for call in calls:
            try:
                await call
            except Exception:
                pass
            assert initialized_coordinator.busy is False

        api.create = AsyncMock(side_effect=ConnectionError("node unreachable"))
        with pytest.raises(RemoteOperationError):
            await initialized_coordinator.publish(SAMPLE_ASSET)
        assert initialized_coordinator.busy is False


# =============================================================================
# Single-flight
# =============================================================================


class TestSingleFlight:
    """Tests for the at-most-one-in-flight discipline."""

    @pytest.mark.asyncio
    async def test_concurrent_publish_and_retrieve(self, blocking_coordinator, blocking_api):
        first = asyncio.create_task(blocking_coordinator.publish(SAMPLE_ASSET))
        await blocking_api.started.wait()
        assert blocking_coordinator.busy is True

        with pytest.raises(OperationInProgressError):
            await blocking_coordinator.retrieve("did:dkg:otp:20430/0xabc/1")

        blocking_api.release.set()
        ual = await first

        assert ual == "did:dkg:otp:20430/0xabc/1"
        assert blocking_api.max_in_flight == 1
        assert blocking_coordinator.busy is False

    @pytest.mark.asyncio
    async def test_concurrent_publishes(self, blocking_coordinator, blocking_api):
        first = asyncio.create_task(blocking_coordinator.publish(SAMPLE_ASSET))
        second = asyncio.create_task(blocking_coordinator.publish(SAMPLE_ASSET))

        await blocking_api.started.wait()
        blocking_api.release.set()
        results = await asyncio.gather(first, second, return_exceptions=True)

        assert isinstance(results[0], str)
        assert isinstance(results[1], OperationInProgressError)
        assert blocking_api.max_in_flight == 1

    @pytest.mark.asyncio
    async def test_rejection_keeps_in_flight_state(self, blocking_coordinator, blocking_api):
        first = asyncio.create_task(blocking_coordinator.publish(SAMPLE_ASSET))
        await blocking_api.started.wait()

        with pytest.raises(OperationInProgressError):
            await blocking_coordinator.publish(SAMPLE_ASSET)

        assert blocking_coordinator.state.last_error is None
        blocking_api.release.set()
        await first
        assert blocking_coordinator.state.last_ual == "did:dkg:otp:20430/0xabc/1"

    @pytest.mark.asyncio
    async def test_in_flight_operation_keeps_captured_handle(
        self, blocking_coordinator, blocking_api
    ):
        original = blocking_coordinator.handle
        task = asyncio.create_task(blocking_coordinator.retrieve("did:dkg:otp:20430/0xabc/1"))
        await blocking_api.started.wait()

        replacement = blocking_coordinator.initialize(VALID_PREFIXED_KEY)
        blocking_api.release.set()
        assertion = await task

        assert assertion == {"@id": "did:dkg:otp:20430/0xabc/1"}
        assert blocking_coordinator.handle is replacement
        assert replacement is not original


# =============================================================================
# Snapshot
# =============================================================================


class TestSnapshot:
    """Tests for snapshot()."""

    def test_uninitialized(self, coordinator):
        snapshot = coordinator.snapshot()
        assert snapshot["initialized"] is False
        assert snapshot["handle"] is None

    @pytest.mark.asyncio
    async def test_never_contains_key(self, initialized_coordinator):
        await initialized_coordinator.publish(SAMPLE_ASSET)
        snapshot = initialized_coordinator.snapshot()

        assert VALID_KEY not in str(snapshot)
        assert snapshot["handle"]["chain"] == "otp:20430"
        assert snapshot["last_ual"] is not None

    def test_error_is_json_safe(self, initialized_coordinator):
        with pytest.raises(ConfigurationError):
            initialized_coordinator.initialize("bad")
        error = initialized_coordinator.snapshot()["last_error"]
        assert error["kind"] == "configuration"
        assert isinstance(error["occurred_at"], str)
