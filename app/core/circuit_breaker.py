"""
Circuit breaker for calls to external providers.

State lives in Django's cache so every web process and Celery worker sees the
same circuit. The push sender wraps each FCM request in a breaker so that a
provider outage turns into fast, logged per-device failures instead of a pile
of requests waiting on their timeouts.

States:
    - CLOSED: Normal operation, all requests pass through
    - OPEN: Provider is failing, requests fail fast without calling it
    - HALF_OPEN: Recovery trial, a limited number of requests pass through

Usage:
    from core.circuit_breaker import CircuitBreaker, CircuitOpenError

    fcm_circuit = CircuitBreaker("fcm", failure_threshold=5, recovery_timeout=60)

    with fcm_circuit.call():
        response = session.post(url, json=payload, timeout=10)
        response.raise_for_status()

Design Notes:
    - A cache failure never blocks calls (the breaker fails open)
    - CircuitOpenError is not counted as a provider failure
"""

from __future__ import annotations

import logging
import time
from contextlib import contextmanager
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING

from django.core.cache import cache

if TYPE_CHECKING:
    from collections.abc import Generator

logger = logging.getLogger(__name__)


class CircuitState(str, Enum):
    """Circuit breaker states."""

    CLOSED = "closed"
    OPEN = "open"
    HALF_OPEN = "half_open"


@dataclass
class CircuitBreakerConfig:
    """Thresholds for a circuit breaker instance."""

    failure_threshold: int = 5
    recovery_timeout: int = 60
    half_open_max_calls: int = 1
    cache_ttl: int = 3600


class CircuitOpenError(Exception):
    """Raised when a call is attempted through an open circuit."""


class CircuitBreaker:
    """
    Cache-backed circuit breaker shared by all application instances.

    Attributes:
        name: Unique identifier, used as the cache key prefix
        config: Threshold configuration
    """

    def __init__(
        self,
        name: str,
        failure_threshold: int = 5,
        recovery_timeout: int = 60,
        half_open_max_calls: int = 1,
    ):
        self.name = name
        self.config = CircuitBreakerConfig(
            failure_threshold=failure_threshold,
            recovery_timeout=recovery_timeout,
            half_open_max_calls=half_open_max_calls,
        )
        prefix = f"circuit:{name}"
        self._state_key = f"{prefix}:state"
        self._failures_key = f"{prefix}:failures"
        self._opened_at_key = f"{prefix}:opened_at"
        self._trials_key = f"{prefix}:half_open_calls"

    def is_available(self) -> bool:
        """
        Check whether a call may go through right now.

        An open circuit whose recovery timeout has elapsed moves to half-open
        and lets the current call through as a trial.
        """
        try:
            state = self._get_state()

            if state == CircuitState.OPEN:
                opened_at = cache.get(self._opened_at_key)
                if opened_at is None or time.time() - opened_at < self.config.recovery_timeout:
                    return False
                self._set_state(CircuitState.HALF_OPEN)
                cache.set(self._trials_key, 1, timeout=self.config.cache_ttl)
                logger.info(
                    "Circuit breaker transitioning to half-open",
                    extra={"circuit": self.name},
                )
                return True

            if state == CircuitState.HALF_OPEN:
                trials = cache.get(self._trials_key, 0)
                if trials >= self.config.half_open_max_calls:
                    return False
                self._incr(self._trials_key)
                return True

            return True

        except Exception as e:
            logger.warning(
                f"Circuit breaker cache error, failing open: {e}",
                extra={"circuit": self.name},
            )
            return True

    def record_success(self) -> None:
        """Record a successful call; closes a half-open circuit."""
        try:
            if self._get_state() == CircuitState.HALF_OPEN:
                self._set_state(CircuitState.CLOSED)
                logger.info(
                    "Circuit breaker closed after successful recovery",
                    extra={"circuit": self.name},
                )
            cache.set(self._failures_key, 0, timeout=self.config.cache_ttl)
        except Exception as e:
            logger.warning(
                f"Circuit breaker failed to record success: {e}",
                extra={"circuit": self.name},
            )

    def record_failure(self) -> None:
        """Record a failed call; opens the circuit at the threshold."""
        try:
            if self._get_state() == CircuitState.HALF_OPEN:
                self._open()
                logger.warning(
                    "Circuit breaker reopened after failed recovery attempt",
                    extra={"circuit": self.name},
                )
                return

            failures = self._incr(self._failures_key)
            if failures >= self.config.failure_threshold:
                self._open()
                logger.warning(
                    f"Circuit breaker opened after {failures} failures",
                    extra={
                        "circuit": self.name,
                        "failure_count": failures,
                        "threshold": self.config.failure_threshold,
                    },
                )
        except Exception as e:
            logger.warning(
                f"Circuit breaker failed to record failure: {e}",
                extra={"circuit": self.name},
            )

    @contextmanager
    def call(self) -> Generator[None, None, None]:
        """
        Guard a block of code with the breaker.

        Raises:
            CircuitOpenError: If the circuit does not allow the call
        """
        if not self.is_available():
            raise CircuitOpenError(f"Circuit '{self.name}' is open")

        try:
            yield
        except CircuitOpenError:
            raise
        except Exception:
            self.record_failure()
            raise
        self.record_success()

    def reset(self) -> None:
        """Force the circuit back to closed (admin and tests)."""
        cache.delete_many([self._state_key, self._failures_key, self._opened_at_key, self._trials_key])

    def get_status(self) -> dict:
        """Current state snapshot for monitoring."""
        try:
            status = {
                "name": self.name,
                "state": self._get_state().value,
                "failure_count": cache.get(self._failures_key, 0),
                "failure_threshold": self.config.failure_threshold,
            }
            opened_at = cache.get(self._opened_at_key)
            if opened_at:
                elapsed = time.time() - opened_at
                status["opened_seconds_ago"] = int(elapsed)
                status["recovery_in_seconds"] = max(
                    0, int(self.config.recovery_timeout - elapsed)
                )
            return status
        except Exception as e:
            return {"name": self.name, "state": "unknown", "error": str(e)}

    # =========================================================================
    # Cache helpers
    # =========================================================================

    def _get_state(self) -> CircuitState:
        raw = cache.get(self._state_key, CircuitState.CLOSED.value)
        try:
            return CircuitState(raw)
        except ValueError:
            return CircuitState.CLOSED

    def _set_state(self, state: CircuitState) -> None:
        cache.set(self._state_key, state.value, timeout=self.config.cache_ttl)

    def _open(self) -> None:
        self._set_state(CircuitState.OPEN)
        cache.set(self._opened_at_key, time.time(), timeout=self.config.cache_ttl)

    def _incr(self, key: str) -> int:
        try:
            return cache.incr(key)
        except ValueError:
            # Key doesn't exist yet
            cache.set(key, 1, timeout=self.config.cache_ttl)
            return 1

    def __repr__(self) -> str:
        return f"CircuitBreaker(name={self.name!r}, state={self._get_state().value})"
