"""
Protocol definitions for generic infrastructure services.

Available Protocols:
    CacheBackend: Cache operations interface (compatible with django.core.cache)

Usage:
    from core.protocols import CacheBackend

    class CooldownStore:
        def __init__(self, backend: CacheBackend | None = None):
            self.backend = backend or django_cache

Note:
    - Protocols are primarily for type checking
    - @runtime_checkable allows isinstance() checks
    - Notification collaborator protocols (directory, push sender) live in
      notifications.directory and notifications.push
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from typing import Any


@runtime_checkable
class CacheBackend(Protocol):
    """
    Protocol for cache backends with expiring keys.

    Django's cache objects satisfy this protocol, as does any test double
    exposing the same five methods.
    """

    def get(self, key: str, default: Any = None) -> Any:
        """Return the cached value or default."""
        ...

    def set(self, key: str, value: Any, timeout: int | None = None) -> None:
        """Store value; timeout in seconds (None for no expiry)."""
        ...

    def add(self, key: str, value: Any, timeout: int | None = None) -> bool:
        """Store value only if key is absent; True if stored."""
        ...

    def delete(self, key: str) -> bool:
        """Delete key; True if it existed."""
        ...

    def clear(self) -> None:
        """Clear all cached values."""
        ...
