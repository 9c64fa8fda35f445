"""
Base exception classes for application-wide error handling.

Exception Hierarchy:
    BaseApplicationError (base)
    ├── AuthenticationError - Caller identity could not be established
    ├── ValidationError - Invalid input below the service layer (upload tokens)
    ├── NotFoundError - Referenced resource is missing (blobs)
    └── ExternalServiceError - Third-party service failures (object storage)

Expected, user-facing failures travel as core.services.ServiceResult instead.
These exceptions cover the cases where a collaborator fails underneath a
service and the service decides whether to surface or swallow it.

Usage:
    from core.exceptions import ExternalServiceError

    try:
        storage.delete(reference)
    except ExternalServiceError as e:
        logger.warning(f"Blob delete failed: {e.error_code}")
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from typing import Any


class BaseApplicationError(Exception):
    """
    Base exception for all application-specific errors.

    Attributes:
        message: Human-readable error description
        error_code: Machine-readable code for client-side handling
        details: Additional error context (references, metadata, etc.)
    """

    default_error_code: str = "APPLICATION_ERROR"

    def __init__(
        self,
        message: str,
        error_code: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        self.message = message
        self.error_code = error_code or self.default_error_code
        self.details = details or {}
        super().__init__(message)

    def to_dict(self) -> dict[str, Any]:
        """
        Convert exception to dictionary for API response.

        Example:
            {
                "error": "Object storage unavailable",
                "error_code": "DEPENDENCY_FAILURE",
                "details": {"reference": "chat-uploads/ab12"}
            }
        """
        result: dict[str, Any] = {
            "error": self.message,
            "error_code": self.error_code,
        }
        if self.details:
            result["details"] = self.details
        return result

    def __str__(self) -> str:
        """Return string representation with error code."""
        return f"[{self.error_code}] {self.message}"

    def __repr__(self) -> str:
        """Return detailed representation for debugging."""
        return (
            f"{self.__class__.__name__}("
            f"message={self.message!r}, "
            f"error_code={self.error_code!r}, "
            f"details={self.details!r})"
        )


class AuthenticationError(BaseApplicationError):
    """
    Raised when a presented identity token cannot be verified.

    The DRF authentication class and the websocket middleware translate
    this into a 401 response or an anonymous scope respectively.
    """

    default_error_code: str = "INVALID_TOKEN"


class ValidationError(BaseApplicationError):
    """
    Raised when input validation fails outside a ServiceResult flow.

    Use for:
    - Tampered, expired or reused upload tokens
    - Malformed blob references

    Note:
        For DRF serializer validation, use DRF's built-in validation.
        Services report expected validation failures as
        ServiceResult.failure(..., ErrorCode.VALIDATION_ERROR).
    """

    default_error_code: str = "VALIDATION_ERROR"


class NotFoundError(BaseApplicationError):
    """
    Raised when a referenced resource is not found.

    Example:
        if not storage.exists(reference):
            raise NotFoundError(
                "Blob not found",
                details={"reference": reference},
            )
    """

    default_error_code: str = "NOT_FOUND"


class ExternalServiceError(BaseApplicationError):
    """
    Raised when an external service call fails.

    Use for:
    - Object storage failures (S3 errors, missing objects on delete)
    - Network timeouts against the storage provider

    Example:
        try:
            client.delete_object(Bucket=bucket, Key=key)
        except ClientError as e:
            raise ExternalServiceError(
                "Blob deletion failed",
                details={"reference": key, "original_error": str(e)},
            ) from e
    """

    default_error_code: str = "DEPENDENCY_FAILURE"
