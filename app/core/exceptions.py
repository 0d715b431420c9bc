"""
Base exception classes for application-wide error handling.

Exception Hierarchy:
    BaseApplicationError (base)
    └── ExternalServiceError - Collaborator or third-party failures

Usage:
    from core.exceptions import ExternalServiceError

    try:
        participants = source.list_participants(project_id)
    except DatabaseError as e:
        raise ExternalServiceError(
            "Participant lookup failed",
            error_code="DIRECTORY_UNAVAILABLE",
            details={"project_id": project_id, "original_error": str(e)},
        ) from e

Note:
    These exceptions are for domain/business logic errors. Expected failures
    of service calls (not owner, missing record) are reported through
    core.services.ServiceResult instead of being raised.
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
        details: Additional error context (ids, original error, etc.)
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

    def __str__(self) -> str:
        return f"[{self.error_code}] {self.message}"

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}("
            f"message={self.message!r}, "
            f"error_code={self.error_code!r}, "
            f"details={self.details!r})"
        )


class ExternalServiceError(BaseApplicationError):
    """
    Raised when an external collaborator call fails.

    Use for:
    - Directory or store unavailability (database, remote service)
    - Push provider failures
    - Network timeouts

    Note:
        Callers must be able to tell this apart from a deliberate decision
        (a permission deny, an empty recipient list). Never convert it into
        a falsy result.
    """

    default_error_code: str = "EXTERNAL_SERVICE_ERROR"
