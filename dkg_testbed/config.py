"""
DKG Testbed Configuration

Settings are loaded from environment variables (prefixed with DKG_TESTBED_)
with defaults suitable for local development against the NeuroWeb testnet.

The network definition itself is a fixed, immutable constant: it is not
user-editable and is never mutated when a signing key is layered on top.

SECURITY NOTE: The private key setting exists for the environment credential
source only. Never point it at a wallet holding real funds.
"""

import logging
import warnings
from functools import lru_cache
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, ValidationInfo, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)


class SecurityWarning(UserWarning):
    """Warning for security-related issues (insecure configurations, etc.)."""

    pass


class BlockchainConfig(BaseModel):
    """Blockchain section of the network definition."""

    model_config = ConfigDict(frozen=True)

    name: str = Field(description="Chain identifier, e.g. otp:20430")
    rpc: str = Field(description="JSON-RPC endpoint of the chain")
    hub_contract: str = Field(description="Hub contract address")


class NetworkConfig(BaseModel):
    """
    Immutable description of the target DKG network.

    to_client_config() renders the mapping shape the network client SDK
    expects. A fresh dict is built on every call so callers can layer the
    signing key into it without touching this object.
    """

    model_config = ConfigDict(frozen=True)

    endpoint: str = Field(description="DKG node host")
    port: int = Field(default=443, ge=1, le=65535)
    use_ssl: bool = Field(default=True, description="Use TLS towards the node")
    blockchain: BlockchainConfig

    @property
    def node_url(self) -> str:
        scheme = "https" if self.use_ssl else "http"
        return f"{scheme}://{self.endpoint}:{self.port}"

    def to_client_config(self) -> dict[str, Any]:
        return {
            "endpoint": self.endpoint,
            "port": self.port,
            "useSSL": self.use_ssl,
            "blockchain": {
                "name": self.blockchain.name,
                "rpc": self.blockchain.rpc,
                "hubContract": self.blockchain.hub_contract,
            },
        }


# NeuroWeb testnet
NEUROWEB_TESTNET = NetworkConfig(
    endpoint="dkg-testnet.origin-trail.network",
    port=443,
    use_ssl=True,
    blockchain=BlockchainConfig(
        name="otp:20430",
        rpc="https://neuroweb-testnet.origin-trail.network",
        hub_contract="0x7ee6665a29a3a8a3551486586255C2C400b46d03",
    ),
)


class Settings(BaseSettings):
    """
    Runtime settings for the testbed.

    All settings can be overridden via environment variables prefixed with
    DKG_TESTBED_. For example, DKG_TESTBED_LOG_LEVEL sets log_level.
    """

    model_config = SettingsConfigDict(
        env_prefix="DKG_TESTBED_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    environment: Literal["development", "testing", "production"] = Field(
        default="development", description="Deployment environment"
    )
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO", description="Logging level"
    )
    log_json: bool = Field(default=False, description="Render logs as JSON")

    # Credential source
    private_key: str | None = Field(
        default=None,
        description="EVM private key used by the environment credential source. "
        "SECURITY: test wallets only!",
    )

    # Network client SDK discovery
    sdk_module: str = Field(
        default="dkg_testbed.client.dkgpy",
        description="Module exposing the network client constructor",
    )
    sdk_attribute: str = Field(
        default="DkgPyClient", description="Attribute name of the constructor"
    )
    sdk_wait_timeout_seconds: float = Field(
        default=10.0, ge=0, description="How long to wait for the SDK to become available"
    )
    sdk_poll_interval_seconds: float = Field(
        default=0.5, gt=0, description="Polling interval while waiting for the SDK"
    )

    # HTTP presentation layer
    api_host: str = Field(default="127.0.0.1", description="API host")
    api_port: int = Field(default=8000, ge=1, le=65535, description="API port")

    @field_validator("private_key")
    @classmethod
    def validate_private_key_security(cls, v: str | None, info: ValidationInfo) -> str | None:
        """Warn when a private key is loaded from the environment outside development."""
        if v:
            environment = info.data.get("environment", "development")
            if environment == "production":
                logger.critical(
                    f"SECURITY CRITICAL: {info.field_name} loaded from environment "
                    "variable in production! Use a disposable test wallet."
                )
                warnings.warn(
                    f"Private key '{info.field_name}' loaded from environment variable "
                    "in production. This is insecure!",
                    SecurityWarning,
                    stacklevel=2,
                )
            elif environment != "development":
                logger.warning(
                    f"Private key '{info.field_name}' loaded from environment variable."
                )
        return v


_settings: Settings | None = None


@lru_cache
def _load_settings() -> Settings:
    return Settings()


def get_settings() -> Settings:
    """Get the active settings instance (loaded once from the environment)."""
    if _settings is not None:
        return _settings
    return _load_settings()


def configure_settings(settings: Settings | None) -> None:
    """
    Override the active settings instance.

    Useful for testing. Passing None restores environment-loaded settings.
    """
    global _settings
    _settings = settings
    _load_settings.cache_clear()
