"""
Session Coordinator

Owns one user's SessionState and runs publish/retrieve against the session's
client handle with a single-flight discipline: at most one remote operation
is in flight per session, across both operations, because both share the one
handle.

Concurrency model: asyncio, single-threaded. The busy check and the busy set
happen with no await in between, so the check-and-set is atomic with respect
to other tasks on the loop. A second operation started while busy is rejected
with OperationInProgressError; it is never queued and never run in parallel.

Re-initialization swaps the handle only after the new one is fully built.
An operation already in flight keeps the handle it captured when it started.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from typing import Any, TypeVar

import structlog

from ..client.factory import ClientFactory, ClientHandle
from ..credentials.sources import CredentialSource
from ..errors import (
    ConfigurationError,
    DKGError,
    InvalidInputError,
    NotInitializedError,
    OperationInProgressError,
)
from ..models import PublishResult, RetrieveResult, SessionState
from .operations import parse_content, parse_locator, publish_asset, retrieve_asset

logger = structlog.get_logger(__name__)

T = TypeVar("T")


class SessionCoordinator:
    """Coordinates one session's client handle, busy flag and last results."""

    def __init__(self, factory: ClientFactory | None = None) -> None:
        self.factory = factory or ClientFactory()
        self.state = SessionState()

    # ==================== Initialization ====================

    @property
    def handle(self) -> ClientHandle | None:
        return self.state.handle

    @property
    def initialized(self) -> bool:
        return self.state.initialized

    @property
    def busy(self) -> bool:
        return self.state.busy

    def initialize(self, secret: str) -> ClientHandle:
        """
        Build a handle for ``secret`` and make it the session's handle.

        On failure the previous handle is cleared, the error is recorded and
        re-raised.

        Raises:
            ConfigurationError: If the handle cannot be built
        """
        self.state.last_error = None
        self.state.last_ual = None
        self.state.last_assertion = None

        try:
            handle = self.factory.create(secret)
        except ConfigurationError as e:
            self.state.handle = None
            self.state.last_error = e.to_info()
            logger.warning("session_initialize_failed", error=e.message)
            raise

        previous = self.state.handle
        self.state.handle = handle
        logger.info(
            "session_initialized",
            handle_id=handle.handle_id,
            replaced=previous.handle_id if previous is not None else None,
        )
        return handle

    def initialize_from(self, source: CredentialSource) -> ClientHandle:
        """Initialize with the secret supplied by ``source``."""
        secret = source.get_secret()
        if not secret:
            error = ConfigurationError(
                f"No private key available from the {source.name} credential source."
            )
            self.state.handle = None
            self.state.last_error = error.to_info()
            raise error
        return self.initialize(secret)

    def reset(self) -> None:
        """Drop the handle and clear the last-operation fields."""
        self.state.handle = None
        self.state.last_error = None
        self.state.last_ual = None
        self.state.last_assertion = None
        logger.info("session_reset")

    # ==================== Operations ====================

    def _fail(self, operation: str, error: DKGError) -> DKGError:
        self.state.last_error = error.to_info()
        logger.warning(
            "session_operation_failed",
            operation=operation,
            error_kind=error.kind,
            error=error.message,
        )
        return error

    def _precheck(
        self,
        operation: str,
        parse: Callable[[Any], T],
        value: Any,
    ) -> tuple[ClientHandle, T]:
        """Handle present, input well-formed, nothing in flight; in that order."""
        handle = self.state.handle
        if handle is None:
            raise self._fail(operation, NotInitializedError())
        try:
            parsed = parse(value)
        except InvalidInputError as e:
            self._fail(operation, e)
            raise
        if self.state.busy:
            logger.info("session_operation_rejected", operation=operation)
            raise OperationInProgressError()
        return handle, parsed

    async def _run_exclusive(
        self,
        operation: str,
        call: Callable[[], Awaitable[T]],
    ) -> T:
        # Caller has checked busy; nothing awaits between that check and here.
        self.state.busy = True
        self.state.last_error = None
        try:
            return await call()
        except DKGError as e:
            self._fail(operation, e)
            raise
        finally:
            self.state.busy = False

    async def publish(self, content: Any) -> str:
        """
        Publish ``content`` (JSON text or mapping) and return its UAL.

        Raises:
            NotInitializedError, InvalidInputError, OperationInProgressError,
            EmptyResultError, RemoteOperationError
        """
        result = await self.publish_result(content)
        return result.ual

    async def publish_result(self, content: Any) -> PublishResult:
        handle, parsed = self._precheck("publish", parse_content, content)
        self.state.last_ual = None
        result = await self._run_exclusive("publish", lambda: publish_asset(handle, parsed))
        self.state.last_ual = result.ual
        return result

    async def retrieve(self, locator: Any) -> Any:
        """
        Retrieve the latest finalized assertion for ``locator``.

        Raises:
            NotInitializedError, InvalidInputError, OperationInProgressError,
            EmptyResultError, RemoteOperationError
        """
        result = await self.retrieve_result(locator)
        return result.assertion

    async def retrieve_result(self, locator: Any) -> RetrieveResult:
        handle, ual = self._precheck("retrieve", parse_locator, locator)
        self.state.last_assertion = None
        result = await self._run_exclusive("retrieve", lambda: retrieve_asset(handle, ual))
        self.state.last_assertion = result.assertion
        return result

    # ==================== Introspection ====================

    def snapshot(self) -> dict[str, Any]:
        """JSON-safe view of the session state. Never contains the key."""
        handle = self.state.handle
        return {
            "initialized": handle is not None,
            "busy": self.state.busy,
            "handle": handle.describe() if handle is not None else None,
            "last_error": (
                self.state.last_error.model_dump(mode="json")
                if self.state.last_error is not None
                else None
            ),
            "last_ual": self.state.last_ual,
            "last_assertion": self.state.last_assertion,
        }
