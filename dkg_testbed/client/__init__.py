"""
DKG Client Package

Builds network client handles from a signing key:

    from dkg_testbed.client import ClientFactory, StaticSdkProvider

    factory = ClientFactory(StaticSdkProvider(MyDkgClient))
    handle = factory.create("0x...")
    result = await handle.publish({"@context": "https://schema.org"})

Note: the bundled dkg.py adapter (dkg_testbed.client.dkgpy) needs the optional
``dkg`` dependency and is only imported when resolved by a ModuleSdkProvider.
"""

from .factory import ClientFactory, ClientHandle, initialize, merge_config
from .sdk import (
    ChainedSdkProvider,
    ModuleSdkProvider,
    SdkProvider,
    StaticSdkProvider,
    default_sdk_provider,
    unwrap_capability,
    wait_for_sdk,
)

__all__ = [
    "ClientFactory",
    "ClientHandle",
    "initialize",
    "merge_config",
    "SdkProvider",
    "StaticSdkProvider",
    "ModuleSdkProvider",
    "ChainedSdkProvider",
    "default_sdk_provider",
    "unwrap_capability",
    "wait_for_sdk",
]
