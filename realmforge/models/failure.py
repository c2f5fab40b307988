"""
Failure classification.

Known, explainable failures are raised as `KnownError` subclasses and reach
API callers through the `ApiResponse` envelope. Rule violations in a built
deck are not failures: they are reported by the validator and the deck is
still returned.

Taxonomy:
- DataAbsence: no cards or no avatars loaded (fatal, never retried)
- CardData: a card file exists but cannot be parsed
- InvalidInput: a request names an unknown element, set or weighting
"""

from enum import Enum
from typing import Any, Generic, TypeVar

from pydantic import BaseModel, Field


class FailureKind(str, Enum):
    """Classification of failure types."""

    DATA_ABSENCE = "data_absence"
    CARD_DATA = "card_data"
    INVALID_INPUT = "invalid_input"
    EXTERNAL_API_ERROR = "external_api_error"


class OutcomeType(str, Enum):
    """High-level outcome classification."""

    SUCCESS = "success"
    KNOWN_FAILURE = "known_failure"


T = TypeVar("T")


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


class ApiResponse(BaseModel, Generic[T]):
    """Response envelope for API endpoints."""

    outcome: OutcomeType
    data: T | None = None
    failure: FailureDetail | None = None

    @classmethod
    def success(cls, data: T) -> "ApiResponse[T]":
        return cls(outcome=OutcomeType.SUCCESS, data=data)

    @classmethod
    def known_failure(
        cls,
        kind: FailureKind,
        message: str,
        detail: str | None = None,
    ) -> "ApiResponse[Any]":
        return cls(
            outcome=OutcomeType.KNOWN_FAILURE,
            failure=FailureDetail(kind=kind, message=message, detail=detail),
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

    def to_response(self) -> ApiResponse[Any]:
        """Convert to an ApiResponse."""
        return ApiResponse.known_failure(
            kind=self.kind,
            message=self.message,
            detail=self.detail,
        )


class DataAbsenceError(KnownError):
    """No usable card data: an empty pool, or a pool without avatars."""

    def __init__(self, message: str, detail: str | None = None):
        super().__init__(FailureKind.DATA_ABSENCE, message, detail, status_code=404)


class CardDataError(KnownError):
    """A card file could not be parsed."""

    def __init__(self, path: str, reason: str):
        self.path = path
        super().__init__(
            FailureKind.CARD_DATA,
            f"Card data file {path} is malformed: {reason}",
            detail=reason,
            status_code=500,
        )
