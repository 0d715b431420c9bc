"""
Core Application - Infrastructure & Base Classes

Generic, reusable building blocks with no notification-specific logic.

Models (import from core.models):
    - BaseModel: Abstract model with timestamps (created_at, updated_at)

Services (import from core.services):
    - BaseService: Base class for service layer
    - ServiceResult: Standard result wrapper for success/failure handling

Exceptions (import from core.exceptions):
    - BaseApplicationError: Base exception with error codes
    - ExternalServiceError: Collaborator and third-party failures

Protocols (import from core.protocols):
    - CacheBackend: Generic expiring key/value interface

Resilience (import from core.circuit_breaker):
    - CircuitBreaker, CircuitOpenError

Note:
    Models are NOT imported here to avoid AppRegistryNotReady errors.
    Import them directly from their modules.
"""

from .services import BaseService, ServiceResult

from .exceptions import (
    BaseApplicationError,
    ExternalServiceError,
)

from .protocols import CacheBackend

__all__ = [
    "BaseService",
    "ServiceResult",
    "BaseApplicationError",
    "ExternalServiceError",
    "CacheBackend",
]
