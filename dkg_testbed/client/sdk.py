"""
Network Client SDK Providers

The network client SDK is an external collaborator. Instead of looking it up
through hidden global state, the client factory receives an SdkProvider that
resolves the client constructor on demand. Providers cover the ways the
capability can be supplied:

- ModuleSdkProvider: in-process module linkage (lazy import)
- StaticSdkProvider: an explicitly registered runtime handle
- ChainedSdkProvider: try several providers in order

A capability may be exposed directly or nested under a ``default`` attribute
(as happens with some packaging wrappers); both are accepted.

The resolved constructor is called with the merged client configuration and
must return an object exposing ``asset.create(content, options)`` and
``asset.get(locator, options)``.
"""

from __future__ import annotations

import asyncio
import importlib
import time
from abc import ABC, abstractmethod
from collections.abc import Callable
from typing import Any

import structlog

from ..config import Settings, get_settings
from ..errors import ConfigurationError

logger = structlog.get_logger(__name__)

SdkConstructor = Callable[[dict[str, Any]], Any]


def unwrap_capability(capability: Any) -> Any:
    """Return ``capability.default`` when present, else the capability itself."""
    nested = getattr(capability, "default", None)
    if nested is not None:
        return nested
    return capability


def _ensure_constructor(capability: Any, origin: str) -> SdkConstructor:
    if capability is None:
        raise ConfigurationError(f"DKG library not loaded. {origin} is not available.")
    constructor = unwrap_capability(capability)
    if not callable(constructor):
        raise ConfigurationError(
            f"DKG library failed to load or {origin} is not a constructor."
        )
    return constructor


class SdkProvider(ABC):
    """Resolves the network client constructor."""

    @abstractmethod
    def resolve(self) -> SdkConstructor:
        """
        Return the client constructor.

        Raises:
            ConfigurationError: If the capability is unavailable
        """
        pass

    def is_available(self) -> bool:
        try:
            self.resolve()
        except ConfigurationError:
            return False
        return True


class StaticSdkProvider(SdkProvider):
    """Provider for a capability handed over explicitly at startup."""

    def __init__(self, capability: Any = None) -> None:
        self._capability = capability

    def register(self, capability: Any) -> None:
        """Install (or replace) the runtime handle."""
        self._capability = capability

    def resolve(self) -> SdkConstructor:
        return _ensure_constructor(self._capability, "the registered DKG client")

    def __repr__(self) -> str:
        return f"StaticSdkProvider(registered={self._capability is not None})"


class ModuleSdkProvider(SdkProvider):
    """Provider that imports ``module`` and reads ``attribute`` from it."""

    def __init__(self, module: str, attribute: str = "DKG") -> None:
        self.module = module
        self.attribute = attribute

    @property
    def origin(self) -> str:
        return f"{self.module}:{self.attribute}"

    def resolve(self) -> SdkConstructor:
        try:
            module = importlib.import_module(self.module)
        except Exception as e:
            raise ConfigurationError(
                f"DKG library not loaded. Module '{self.module}' could not be imported: {e}"
            ) from e
        capability = getattr(module, self.attribute, None)
        if capability is None:
            # The module itself may be the capability (e.g. exposes ``default``)
            capability = getattr(module, "default", None)
        return _ensure_constructor(capability, f"'{self.origin}'")

    def __repr__(self) -> str:
        return f"ModuleSdkProvider({self.origin!r})"


class ChainedSdkProvider(SdkProvider):
    """First provider that resolves wins."""

    def __init__(self, *providers: SdkProvider) -> None:
        if not providers:
            raise ValueError("ChainedSdkProvider needs at least one provider")
        self.providers = providers

    def resolve(self) -> SdkConstructor:
        failures: list[str] = []
        for provider in self.providers:
            try:
                return provider.resolve()
            except ConfigurationError as e:
                failures.append(f"{provider!r}: {e.message}")
        raise ConfigurationError(
            "DKG library not available from any provider. " + "; ".join(failures)
        )


def default_sdk_provider(settings: Settings | None = None) -> SdkProvider:
    """Provider for the SDK module configured in settings."""
    settings = settings or get_settings()
    return ModuleSdkProvider(settings.sdk_module, settings.sdk_attribute)


async def wait_for_sdk(
    provider: SdkProvider,
    timeout: float = 10.0,
    poll_interval: float = 0.5,
) -> SdkConstructor:
    """
    Wait until the SDK capability becomes available.

    Deferred "library ready" check for setups where the client library is
    loaded asynchronously after the session starts.

    Raises:
        ConfigurationError: If the capability is still unavailable after ``timeout``
    """
    deadline = time.monotonic() + timeout
    attempts = 0
    while True:
        attempts += 1
        if provider.is_available():
            logger.info("dkg_sdk_ready", provider=repr(provider), attempts=attempts)
            return provider.resolve()
        if time.monotonic() >= deadline:
            break
        await asyncio.sleep(poll_interval)

    logger.warning("dkg_sdk_wait_timeout", provider=repr(provider), timeout_seconds=timeout)
    raise ConfigurationError(
        f"DKG library did not become available within {timeout:g} seconds."
    )
