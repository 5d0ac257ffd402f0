"""
Schemas & Canonicalization
File: errors.py

Purpose: Standard error taxonomy for the commitment engine and the
campaign lifecycle. Defines both Pydantic models for structured error
communication and Python exceptions for control flow.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


# =============================================================================
# Error Codes (Machine-Readable Constants)
# =============================================================================

class ErrorCodes:
    """Stable machine-readable error codes."""

    # Commitment Engine Errors
    EMPTY_SET = "EMPTY_SET"
    NOT_FOUND = "NOT_FOUND"
    INVALID_PROOF = "INVALID_PROOF"
    ROOT_MISMATCH = "ROOT_MISMATCH"

    # Lifecycle Errors
    WRONG_STATUS = "WRONG_STATUS"
    UNAUTHORIZED = "UNAUTHORIZED"
    INSUFFICIENT_POOL = "INSUFFICIENT_POOL"
    DOUBLE_CLAIM = "DOUBLE_CLAIM"
    INSUFFICIENT_CREDIT = "INSUFFICIENT_CREDIT"
    ROOT_ALREADY_SET = "ROOT_ALREADY_SET"
    CANCEL_NOT_ALLOWED = "CANCEL_NOT_ALLOWED"
    INVALID_ARGUMENT = "INVALID_ARGUMENT"

    # Serialization Errors
    CANONICALIZATION_ERROR = "CANONICALIZATION_ERROR"


# =============================================================================
# Pydantic Error Models (Structured Communication)
# =============================================================================

class CampaignError(BaseModel):
    """
    Base error model for structured error communication.

    Lifecycle rejections are reported with this model instead of raising,
    so a rejected operation can be returned next to the unchanged state.
    """

    model_config = ConfigDict(
        extra="forbid",
        frozen=True,
    )

    code: str = Field(
        ...,
        description="Stable machine-readable error code",
        examples=[ErrorCodes.WRONG_STATUS],
    )
    message: str = Field(
        ...,
        description="Human-readable error message",
    )
    details: dict[str, Any] = Field(
        default_factory=dict,
        description="Additional structured details about the error",
    )

    def to_exception(self) -> "Task2EarnException":
        """Convert this error model to the matching exception."""
        exc_cls = _EXCEPTIONS_BY_CODE.get(self.code)
        if exc_cls is None:
            return Task2EarnException(
                message=self.message,
                code=self.code,
                details=dict(self.details),
            )
        return exc_cls(message=self.message, details=dict(self.details))


# =============================================================================
# Python Exceptions (Control Flow)
# =============================================================================

class Task2EarnException(Exception):
    """
    Base exception for all commitment and lifecycle errors.

    Carries structured error information and can be converted to/from
    CampaignError models.
    """

    code: str = "TASK2EARN_ERROR"

    def __init__(
        self,
        message: str,
        code: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message)
        self.code = code or type(self).code
        self.message = message
        self.details = details or {}

    def to_error_model(self) -> CampaignError:
        """Convert this exception to a CampaignError model."""
        return CampaignError(
            code=self.code,
            message=self.message,
            details=self.details,
        )

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(code={self.code!r}, message={self.message!r})"


class EmptySetException(Task2EarnException, ValueError):
    """Raised when a tree is built from no payout entries."""

    code = ErrorCodes.EMPTY_SET


class NotFoundException(Task2EarnException, KeyError):
    """Raised when an address is not a leaf of the tree."""

    code = ErrorCodes.NOT_FOUND

    def __init__(
        self,
        message: str,
        address: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        full_details = details or {}
        if address is not None:
            full_details["address"] = address
        super().__init__(message=message, details=full_details)

    def __str__(self) -> str:
        return self.message


class InvalidProofException(Task2EarnException):
    """Raised when an inclusion proof does not reconstruct the root."""

    code = ErrorCodes.INVALID_PROOF


class MerkleVerificationException(Task2EarnException):
    """Raised when exported tree data disagrees with its recomputation."""

    code = ErrorCodes.ROOT_MISMATCH

    def __init__(
        self,
        message: str,
        leaf_index: int | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        full_details = details or {}
        if leaf_index is not None:
            full_details["leaf_index"] = leaf_index
        super().__init__(message=message, details=full_details)


class WrongStatusException(Task2EarnException):
    """Raised when an operation is not valid in the campaign's status."""

    code = ErrorCodes.WRONG_STATUS


class UnauthorizedException(Task2EarnException):
    """Raised when the caller is not the campaign owner."""

    code = ErrorCodes.UNAUTHORIZED


class InsufficientPoolException(Task2EarnException):
    """Raised when the pool cannot cover the requested amount."""

    code = ErrorCodes.INSUFFICIENT_POOL


class DoubleClaimException(Task2EarnException):
    """Raised when an address has already claimed."""

    code = ErrorCodes.DOUBLE_CLAIM


class InsufficientCreditException(Task2EarnException):
    """Raised when remaining credit cannot cover a task verification."""

    code = ErrorCodes.INSUFFICIENT_CREDIT


class RootAlreadySetException(Task2EarnException):
    """Raised on a second attempt to commit a root."""

    code = ErrorCodes.ROOT_ALREADY_SET


class CancelNotAllowedException(Task2EarnException):
    """Raised when the cancel policy forbids cancellation."""

    code = ErrorCodes.CANCEL_NOT_ALLOWED


class InvalidArgumentException(Task2EarnException):
    """Raised when an operation payload is malformed."""

    code = ErrorCodes.INVALID_ARGUMENT


class CanonicalizationException(Task2EarnException):
    """Raised when canonical serialization fails."""

    code = ErrorCodes.CANONICALIZATION_ERROR


_EXCEPTIONS_BY_CODE: dict[str, type[Task2EarnException]] = {
    cls.code: cls
    for cls in (
        EmptySetException,
        NotFoundException,
        InvalidProofException,
        MerkleVerificationException,
        WrongStatusException,
        UnauthorizedException,
        InsufficientPoolException,
        DoubleClaimException,
        InsufficientCreditException,
        RootAlreadySetException,
        CancelNotAllowedException,
        InvalidArgumentException,
        CanonicalizationException,
    )
}
