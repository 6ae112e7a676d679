"""
FastAPI Routes for the DKG Testbed

Thin presentation layer over one SessionCoordinator. Routes never format
anything beyond JSON: testbed errors come back in the standard envelope with
their ``kind`` so a frontend can render them.

Routes:
- /session: initialize with a key, inspect, reset
- /assets: publish and retrieve knowledge assets
"""

from datetime import UTC, datetime
from typing import Any

import structlog
from fastapi import APIRouter, Depends, Query, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from ..credentials import KEY_FORMAT_HINT, EnvironmentCredentialSource, validate
from ..errors import (
    ConfigurationError,
    DKGError,
    EmptyResultError,
    InvalidInputError,
    NotInitializedError,
    OperationInProgressError,
    RemoteOperationError,
)
from ..session import SessionCoordinator

logger = structlog.get_logger(__name__)


# ==================== Request / Response Models ====================

class APIResponse(BaseModel):
    """Standard API response wrapper."""
    success: bool = True
    data: Any | None = None
    error: dict[str, Any] | None = None
    timestamp: datetime = Field(default_factory=lambda: datetime.now(UTC))


class CredentialRequest(BaseModel):
    private_key: str = Field(description="EVM private key (64 hex chars, optional 0x)")

    def __repr__(self) -> str:
        return "CredentialRequest(private_key=[REDACTED])"


class PublishRequest(BaseModel):
    content: dict[str, Any] | str = Field(
        description="Knowledge asset content: a JSON object or its JSON text"
    )


ERROR_STATUS: dict[type[DKGError], int] = {
    InvalidInputError: 400,
    NotInitializedError: 409,
    OperationInProgressError: 409,
    ConfigurationError: 503,
    EmptyResultError: 424,
    RemoteOperationError: 502,
}


def error_response(error: DKGError) -> JSONResponse:
    status_code = next(
        (code for cls, code in ERROR_STATUS.items() if isinstance(error, cls)),
        500,
    )
    body = APIResponse(success=False, error=error.to_info().model_dump(mode="json"))
    return JSONResponse(status_code=status_code, content=body.model_dump(mode="json"))


def get_coordinator(request: Request) -> SessionCoordinator:
    coordinator: SessionCoordinator = request.app.state.coordinator
    return coordinator


# ==================== Session Routes ====================

session_router = APIRouter(prefix="/session", tags=["Session"])


@session_router.get("", response_model=APIResponse)
async def get_session(coordinator: SessionCoordinator = Depends(get_coordinator)):
    """Current session state."""
    return APIResponse(data=coordinator.snapshot())


@session_router.post("/credential", response_model=APIResponse)
async def submit_credential(
    body: CredentialRequest,
    coordinator: SessionCoordinator = Depends(get_coordinator),
):
    """
    Configure the session wallet.

    A key with the wrong shape disables the session (the handle is dropped)
    and is reported as invalid input without reaching the client factory.
    """
    if not validate(body.private_key):
        coordinator.reset()
        return error_response(
            InvalidInputError(f"Invalid private key format. {KEY_FORMAT_HINT}")
        )
    try:
        coordinator.initialize(body.private_key)
    except ConfigurationError as e:
        return error_response(e)
    return APIResponse(data=coordinator.snapshot())


@session_router.post("/credential/environment", response_model=APIResponse)
async def submit_environment_credential(
    coordinator: SessionCoordinator = Depends(get_coordinator),
):
    """Configure the session wallet from DKG_TESTBED_PRIVATE_KEY."""
    try:
        coordinator.initialize_from(EnvironmentCredentialSource())
    except ConfigurationError as e:
        return error_response(e)
    return APIResponse(data=coordinator.snapshot())


@session_router.delete("", response_model=APIResponse)
async def reset_session(coordinator: SessionCoordinator = Depends(get_coordinator)):
    """Forget the wallet and the last results."""
    coordinator.reset()
    return APIResponse(data=coordinator.snapshot())


# ==================== Asset Routes ====================

asset_router = APIRouter(prefix="/assets", tags=["Assets"])


@asset_router.post("", response_model=APIResponse)
async def publish_asset(
    body: PublishRequest,
    coordinator: SessionCoordinator = Depends(get_coordinator),
):
    """Publish a knowledge asset and return its UAL."""
    try:
        result = await coordinator.publish_result(body.content)
    except DKGError as e:
        return error_response(e)
    return APIResponse(data=result.model_dump(mode="json"))


@asset_router.get("", response_model=APIResponse)
async def retrieve_asset(
    ual: str = Query(default="", description="Uniform Asset Locator"),
    coordinator: SessionCoordinator = Depends(get_coordinator),
):
    """Retrieve the latest finalized assertion of an asset."""
    try:
        result = await coordinator.retrieve_result(ual)
    except DKGError as e:
        return error_response(e)
    return APIResponse(data=result.model_dump(mode="json"))


def create_testbed_router() -> APIRouter:
    router = APIRouter()
    router.include_router(session_router)
    router.include_router(asset_router)
    return router
