"""
Failure classification and response envelope.

Every user-visible failure is classified with a machine-readable kind,
a message, and the request path/timestamp it happened on.

Outcomes:
- known_failure: the store knows why it refused (not found, bad argument, conflict)
- unknown_failure: anything else; details stay in the logs

Store operations raise KnownError subclasses; the HTTP layer turns them into
ApiResponse envelopes (see cardcatalog.api.errors).
"""

from datetime import UTC, datetime
from enum import Enum

from pydantic import BaseModel, Field


class FailureKind(str, Enum):
    """Classification of failure types."""

    # Request body / query parameters rejected before reaching a store
    INVALID_INPUT = "invalid_input"

    # Raised by the stores
    NOT_FOUND = "not_found"
    INVALID_ARGUMENT = "invalid_argument"
    CONFLICT = "conflict"

    UNKNOWN = "unknown"


class OutcomeType(str, Enum):
    """Whether the failure was anticipated."""

    KNOWN_FAILURE = "known_failure"
    UNKNOWN_FAILURE = "unknown_failure"


UNKNOWN_FAILURE_MESSAGE = "An unexpected error occurred. Please try again."


class FailureDetail(BaseModel):
    """Detailed information about a failure."""

    kind: FailureKind = Field(
        ...,
        description="Classification of the failure",
    )
    message: str = Field(
        ...,
        description="User-appropriate explanation of what went wrong",
    )
    detail: str | None = Field(
        default=None,
        description="Additional technical detail (optional)",
    )
    path: str | None = Field(
        default=None,
        description="Request path that produced the failure",
    )
    timestamp: str = Field(
        default_factory=lambda: datetime.now(UTC).isoformat(),
        description="ISO-8601 time the failure was reported",
    )


class ApiResponse(BaseModel):
    """Body returned by the HTTP layer for every failed request."""

    outcome: OutcomeType
    failure: FailureDetail

    @classmethod
    def known_failure(
        cls,
        kind: FailureKind,
        message: str,
        detail: str | None = None,
        path: str | None = None,
    ) -> "ApiResponse":
        """
        Create a known failure response.

        Use when the system knows exactly why the operation failed.
        Example: Resource not found, duplicate name.
        """
        return cls(
            outcome=OutcomeType.KNOWN_FAILURE,
            failure=FailureDetail(kind=kind, message=message, detail=detail, path=path),
        )

    @classmethod
    def unknown_failure(
        cls,
        detail: str | None = None,
        path: str | None = None,
    ) -> "ApiResponse":
        """
        Create an unknown failure response.

        The message is fixed; internal details never reach the caller.
        """
        return cls(
            outcome=OutcomeType.UNKNOWN_FAILURE,
            failure=FailureDetail(
                kind=FailureKind.UNKNOWN,
                message=UNKNOWN_FAILURE_MESSAGE,
                detail=detail,
                path=path,
            ),
        )


class KnownError(Exception):
    """
    Base class for exceptions that represent known, explainable failures.

    Subclass this for errors where the system knows exactly what went wrong.
    """

    def __init__(
        self,
        kind: FailureKind,
        message: str,
        detail: str | None = None,
        status_code: int = 400,
    ):
        self.kind = kind
        self.message = message
        self.detail = detail
        self.status_code = status_code
        super().__init__(message)

    def to_response(self, path: str | None = None) -> ApiResponse:
        """Convert to an ApiResponse."""
        return ApiResponse.known_failure(
            kind=self.kind,
            message=self.message,
            detail=self.detail,
            path=path,
        )


class NotFoundError(KnownError):
    """A referenced or targeted record does not exist (or is soft deleted)."""

    def __init__(self, message: str, detail: str | None = None):
        super().__init__(
            kind=FailureKind.NOT_FOUND,
            message=message,
            detail=detail,
            status_code=404,
        )


class InvalidArgumentError(KnownError):
    """
    The request is well-formed but cannot be honored as asked.

    Raised for a lookup with no usable filter, or a statistics patch on a
    card that has no statistics record.
    """

    def __init__(self, message: str, detail: str | None = None):
        super().__init__(
            kind=FailureKind.INVALID_ARGUMENT,
            message=message,
            detail=detail,
            status_code=400,
        )


class ConflictError(KnownError):
    """A uniqueness constraint was violated at the storage layer."""

    def __init__(self, message: str, detail: str | None = None):
        super().__init__(
            kind=FailureKind.CONFLICT,
            message=message,
            detail=detail,
            status_code=409,
        )
