"""
Cooldown store for throttling repeated notifications.

Keys expire on their own, so there is nothing to clean up. The store sits on
top of Django's cache; with django-redis the cooldown is shared by every web
process and worker.

Usage:
    from notifications.cooldown import CooldownStore

    store = CooldownStore()
    if store.acquire(f"invite:{project_id}:{email}"):
        notify(...)
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from django.conf import settings
from django.core.cache import cache as django_cache

if TYPE_CHECKING:
    from core.protocols import CacheBackend

KEY_PREFIX = "notifications:cooldown:"


class CooldownStore:
    def __init__(self, backend: CacheBackend | None = None, seconds: int | None = None):
        self.backend = backend or django_cache
        self.seconds = seconds if seconds is not None else settings.NOTIFICATIONS_COOLDOWN_SECONDS

    def _key(self, key: str) -> str:
        return f"{KEY_PREFIX}{key}"

    def is_cooling_down(self, key: str) -> bool:
        return self.backend.get(self._key(key)) is not None

    def start(self, key: str, seconds: int | None = None) -> None:
        """Start (or restart) the cooldown for key."""
        self.backend.set(self._key(key), 1, timeout=seconds or self.seconds)

    def acquire(self, key: str, seconds: int | None = None) -> bool:
        """
        Start the cooldown unless one is running.

        Returns True if the caller may proceed. Atomic on backends whose
        add() is atomic (Redis, memcached).
        """
        return bool(self.backend.add(self._key(key), 1, timeout=seconds or self.seconds))

    def expire(self, key: str) -> None:
        """End the cooldown early."""
        self.backend.delete(self._key(key))
