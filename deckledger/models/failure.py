"""
Failure classification for contract violations.

Per-line parse problems are never exceptions: they travel as data on
ErrorLine / CardLine. The exceptions here are reserved for callers that
hand the public entry points something that is not a decklist at all.
"""

from enum import Enum

from pydantic import BaseModel, Field


class FailureKind(str, Enum):
    """Classification of failure types."""

    INVALID_INPUT = "invalid_input"
    MISSING_REQUIRED = "missing_required"

    EXTERNAL_API_ERROR = "external_api_error"

    UNKNOWN = "unknown"


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

    def to_detail(self) -> FailureDetail:
        """Convert to a serializable FailureDetail."""
        return FailureDetail(kind=self.kind, message=self.message, detail=self.detail)


class ContractViolationError(KnownError):
    """
    Raised when a public entry point receives an argument it cannot accept.

    Examples: None instead of the raw lines, a string where a list of
    lines was expected, an unsupported currency.
    """

    def __init__(self, argument: str, problem: str, missing: bool = False):
        self.argument = argument
        super().__init__(
            kind=FailureKind.MISSING_REQUIRED if missing else FailureKind.INVALID_INPUT,
            message=f"Invalid argument '{argument}': {problem}",
        )


def require(value: object, argument: str) -> None:
    """Fail fast if a required argument is None."""
    if value is None:
        raise ContractViolationError(argument, "a value is required", missing=True)
