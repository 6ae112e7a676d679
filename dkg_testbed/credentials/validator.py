"""
Signing Key Validator

Purely syntactic: decides whether a string looks like an EVM private key.
Whether the value is a usable secp256k1 scalar is left to the client
factory, where a bad scalar surfaces as a configuration failure.
"""

import re
from typing import Any

from ..errors import InvalidInputError

_BARE_KEY = re.compile(r"[0-9a-fA-F]{64}")
_PREFIXED_KEY = re.compile(r"0x[0-9a-fA-F]{64}")

KEY_FORMAT_HINT = "It should be 64 hex characters, optionally prefixed with '0x'."


def validate(secret: Any) -> bool:
    """Return True if ``secret`` (after trimming) is a well-formed private key."""
    if not isinstance(secret, str):
        return False
    candidate = secret.strip()
    return bool(_BARE_KEY.fullmatch(candidate) or _PREFIXED_KEY.fullmatch(candidate))


def normalize(secret: Any) -> str:
    """
    Return the trimmed key.

    Raises:
        InvalidInputError: If the key is malformed
    """
    if not validate(secret):
        raise InvalidInputError(f"Invalid private key format. {KEY_FORMAT_HINT}")
    return secret.strip()


def describe_format() -> str:
    return KEY_FORMAT_HINT
