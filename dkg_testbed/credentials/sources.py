"""
Credential Sources

Where the signing key comes from is a presentation concern: typed in by the
user, read from settings, or environment first with a manual fallback.
Sources only supply the raw text; the client factory validates it.
"""

from abc import ABC, abstractmethod

from ..config import Settings, get_settings


class CredentialSource(ABC):
    """Supplier of a raw signing key."""

    name: str = "credential"

    @abstractmethod
    def get_secret(self) -> str | None:
        """Return the raw secret, or None if this source has nothing to offer."""
        pass

    def __repr__(self) -> str:
        # Never include the secret
        return f"{type(self).__name__}()"


class ManualCredentialSource(CredentialSource):
    """Key typed in by the user."""

    name = "manual"

    def __init__(self, secret: str | None) -> None:
        self._secret = secret

    def get_secret(self) -> str | None:
        return self._secret or None


class EnvironmentCredentialSource(CredentialSource):
    """Key configured through DKG_TESTBED_PRIVATE_KEY (or the .env file)."""

    name = "environment"

    def __init__(self, settings: Settings | None = None) -> None:
        self._settings = settings

    def get_secret(self) -> str | None:
        settings = self._settings or get_settings()
        return settings.private_key or None


class HybridCredentialSource(CredentialSource):
    """First source that yields a non-empty key wins."""

    name = "hybrid"

    def __init__(self, primary: CredentialSource, fallback: CredentialSource) -> None:
        self.primary = primary
        self.fallback = fallback

    def get_secret(self) -> str | None:
        secret = self.primary.get_secret()
        if secret and secret.strip():
            return secret
        return self.fallback.get_secret()

    def __repr__(self) -> str:
        return f"HybridCredentialSource({self.primary!r}, {self.fallback!r})"
