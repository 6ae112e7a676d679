"""
DKG Testbed Error Taxonomy

Every failure that leaves an operation boundary is one of these. Each carries
a stable ``kind`` string and converts to an ErrorInfo record for the session
state.
"""

from __future__ import annotations

from .models import ErrorInfo


class DKGError(Exception):
    """Base exception for testbed errors."""

    kind = "error"

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def to_info(self) -> ErrorInfo:
        return ErrorInfo(kind=self.kind, message=self.message)


class InvalidInputError(DKGError):
    """Raised for malformed credentials, locators or asset content."""

    kind = "invalid_input"


class NotInitializedError(DKGError):
    """Raised when an operation is attempted before a client handle exists."""

    kind = "not_initialized"

    def __init__(
        self,
        message: str = "DKG is not initialized. Please provide a valid private key.",
    ) -> None:
        super().__init__(message)


class ConfigurationError(DKGError):
    """Raised when a client handle cannot be constructed."""

    kind = "configuration"


class EmptyResultError(DKGError):
    """Raised when a remote call succeeds but returns no usable payload."""

    kind = "empty_result"


class RemoteOperationError(DKGError):
    """Raised when the network client call itself fails. Never retried."""

    kind = "remote_operation"

    def __init__(self, operation: str, cause: BaseException) -> None:
        detail = str(cause) or cause.__class__.__name__ or "An unknown error occurred"
        super().__init__(f"Failed to {operation}: {detail}")
        self.operation = operation
        self.cause = cause


class OperationInProgressError(DKGError):
    """Raised when a second remote operation is started while one is in flight."""

    kind = "operation_in_progress"

    def __init__(
        self,
        message: str = "Another DKG operation is already in progress.",
    ) -> None:
        super().__init__(message)


__all__ = [
    "DKGError",
    "InvalidInputError",
    "NotInitializedError",
    "ConfigurationError",
    "EmptyResultError",
    "RemoteOperationError",
    "OperationInProgressError",
]
