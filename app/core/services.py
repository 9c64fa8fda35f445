"""
Service layer primitives shared by the users, chat and media apps.

- ServiceResult: Success payload or coded failure, returned by every service
- ErrorCode: Machine-readable failure codes shared by all services
- BaseService: Base class with logging and transaction helpers

Pattern Comparison:
    - ServiceResult: Use for expected failures (validation, missing records,
      unauthenticated callers)
    - Exceptions: Use for unexpected failures (database errors, storage outages)

Usage:
    from core.services import BaseService, ErrorCode, ServiceResult

    class UserService(BaseService):
        @classmethod
        def set_presence(cls, token_identifier: str, online: bool) -> ServiceResult[User]:
            user = User.objects.filter(token_identifier=token_identifier).first()
            if user is None:
                return ServiceResult.failure("User not found", ErrorCode.NOT_FOUND)
            ...
            return ServiceResult.success(user)

    # In a view
    result = UserService.set_presence(token, True)
    if not result.success:
        return failure_response(result)
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Generic, TypeVar

from django.db import transaction

if TYPE_CHECKING:
    from collections.abc import Generator
    from typing import Any

T = TypeVar("T")


class ErrorCode:
    """
    Failure codes returned by services.

    The presentation layer maps each code to a distinct HTTP status
    (see core.views.ERROR_STATUS_CODES).
    """

    UNAUTHENTICATED = "UNAUTHENTICATED"
    NOT_FOUND = "NOT_FOUND"
    NOT_PARTICIPANT = "NOT_PARTICIPANT"
    VALIDATION_ERROR = "VALIDATION_ERROR"
    DEPENDENCY_FAILURE = "DEPENDENCY_FAILURE"


@dataclass
class ServiceResult(Generic[T]):
    """
    Outcome of a service call: either data, or an error with a code.

    Attributes:
        success: True when the call did what was asked
        data: Payload on success
        error: Message for humans on failure
        error_code: One of ErrorCode on failure
        errors: Per-field messages for VALIDATION_ERROR

    Usage:
        result = ConversationService.kick_participant(identity, conv_id, user_id)
        if not result:
            return failure_response(result)
        conversation = result.data
    """

    success: bool
    data: T | None = None
    error: str | None = None
    error_code: str | None = None
    errors: dict[str, list[str]] | None = field(default=None)

    @classmethod
    def success(cls, data: T) -> ServiceResult[T]:
        return cls(success=True, data=data)

    @classmethod
    def failure(
        cls,
        error: str,
        error_code: str | None = None,
        errors: dict[str, list[str]] | None = None,
    ) -> ServiceResult[T]:
        """
        Build a failed result.

        Example:
            return ServiceResult.failure(
                "Participants must be distinct",
                error_code=ErrorCode.VALIDATION_ERROR,
                errors={"participants": ["Duplicate entries are not allowed."]},
            )
        """
        return cls(success=False, error=error, error_code=error_code, errors=errors)

    @classmethod
    def unauthenticated(cls) -> ServiceResult[T]:
        """Failure for operations invoked without a caller identity."""
        return cls.failure("Authentication required", ErrorCode.UNAUTHENTICATED)

    @classmethod
    def from_exception(cls, exc: Exception, error_code: str | None = None) -> ServiceResult[T]:
        """Failed result carrying an exception's message; the code defaults to its class name."""
        return cls(
            success=False,
            error=str(exc),
            error_code=error_code or exc.__class__.__name__.upper(),
        )

    def to_response(self) -> dict[str, Any]:
        """Response body: {"success", "data"} or {"error", "error_code", "errors"}."""
        if self.success:
            return {"success": True, "data": self.data}

        body: dict[str, Any] = {"error": self.error}
        if self.error_code:
            body["error_code"] = self.error_code
        if self.errors:
            body["errors"] = self.errors
        return body

    def __bool__(self) -> bool:
        return self.success


class BaseService:
    """
    Base class for the domain services.

    Services are stateless: use @classmethod and pass every input explicitly,
    including the caller identity.
    """

    @classmethod
    def get_logger(cls) -> logging.Logger:
        """Logger named "<module>.<ServiceClass>"."""
        return logging.getLogger(f"{cls.__module__}.{cls.__name__}")

    @classmethod
    @contextmanager
    def atomic(cls) -> Generator[None, None, None]:
        """Run the block in a database transaction."""
        with transaction.atomic():
            yield
