"""
Data Models for the DKG Testbed

Options sent to the network client, the tagged results of publish and
retrieve, and the per-session state.
"""

from datetime import UTC, datetime
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field

# Any JSON-LD shaped document; no schema is enforced beyond "JSON object".
KnowledgeAssetContent = dict[str, Any]


class PublishOptions(BaseModel):
    """Fixed remote parameters for asset creation."""

    model_config = ConfigDict(frozen=True)

    epochs: int = Field(default=5, description="Retention period in epochs")
    frequency: int = Field(default=1, description="Reward check frequency in epochs")
    token_amount: int = Field(default=1, description="Amount of TRAC to stake")

    def to_sdk(self) -> dict[str, Any]:
        return {
            "epochs": self.epochs,
            "frequency": self.frequency,
            "tokenAmount": self.token_amount,
        }


class RetrieveOptions(BaseModel):
    """Fixed remote parameters for asset retrieval."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    state: Literal["LATEST_FINALIZED"] = "LATEST_FINALIZED"
    validate_assertion: bool = Field(default=True, alias="validate")

    def to_sdk(self) -> dict[str, Any]:
        return {"state": self.state, "validate": self.validate_assertion}


class PublishResult(BaseModel):
    """Outcome of a successful publish."""

    kind: Literal["publish"] = "publish"
    ual: str = Field(min_length=1, description="Uniform Asset Locator of the new asset")


class RetrieveResult(BaseModel):
    """Outcome of a successful retrieve."""

    kind: Literal["retrieve"] = "retrieve"
    ual: str
    assertion: Any = Field(description="Asset content at the requested state")


class ErrorInfo(BaseModel):
    """Structured failure record kept in the session state."""

    kind: str
    message: str
    occurred_at: datetime = Field(default_factory=lambda: datetime.now(UTC))


class SessionState(BaseModel):
    """
    Mutable per-session state owned by one SessionCoordinator.

    ``handle`` is set only by (re-)initialization; ``busy`` and the last-result
    fields only by the publish and retrieve operations.
    """

    model_config = ConfigDict(arbitrary_types_allowed=True)

    handle: Any | None = None
    busy: bool = False
    last_error: ErrorInfo | None = None
    last_ual: str | None = None
    last_assertion: Any | None = None

    @property
    def initialized(self) -> bool:
        return self.handle is not None
