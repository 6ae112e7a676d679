"""
DKG Testbed

Publish and retrieve OriginTrail knowledge assets with a user-supplied
wallet key. The public boundary used by presentation layers:

    from dkg_testbed import validate, initialize, publish, retrieve

    if validate(key):
        handle = initialize(key, sdk_provider)
        ual = await publish(handle, '{"@type": "Person", "name": "Ada"}')
        assertion = await retrieve(handle, ual)

For stateful use (busy flag, last result and error) see SessionCoordinator.
"""

from .client import ClientFactory, ClientHandle, initialize
from .config import NEUROWEB_TESTNET, NetworkConfig, Settings, get_settings
from .credentials import validate
from .errors import (
    ConfigurationError,
    DKGError,
    EmptyResultError,
    InvalidInputError,
    NotInitializedError,
    OperationInProgressError,
    RemoteOperationError,
)
from .session import SessionCoordinator, publish, retrieve

__version__ = "0.1.0"

__all__ = [
    "validate",
    "initialize",
    "publish",
    "retrieve",
    "ClientFactory",
    "ClientHandle",
    "SessionCoordinator",
    "NetworkConfig",
    "NEUROWEB_TESTNET",
    "Settings",
    "get_settings",
    "DKGError",
    "InvalidInputError",
    "NotInitializedError",
    "ConfigurationError",
    "EmptyResultError",
    "RemoteOperationError",
    "OperationInProgressError",
]
