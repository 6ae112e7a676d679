"""
Credential handling: syntactic key validation and pluggable key sources.
"""

from .sources import (
    CredentialSource,
    EnvironmentCredentialSource,
    HybridCredentialSource,
    ManualCredentialSource,
)
from .validator import KEY_FORMAT_HINT, describe_format, normalize, validate

__all__ = [
    "validate",
    "normalize",
    "describe_format",
    "KEY_FORMAT_HINT",
    "CredentialSource",
    "ManualCredentialSource",
    "EnvironmentCredentialSource",
    "HybridCredentialSource",
]
