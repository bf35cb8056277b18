"""Three-state circuit breakers and a registry of named breakers."""

from __future__ import annotations

import threading
import time
from dataclasses import dataclass
from enum import Enum


@dataclass(frozen=True)
class CircuitBreakerConfig:
    """Thresholds and timeout of a circuit breaker."""

    failure_threshold: int = 5
    """Consecutive failures while closed before the circuit opens."""
    success_threshold: int = 2
    """Consecutive successes while half-open before the circuit closes."""
    timeout_ms: int = 30_000
    """Time spent open before a probe is allowed through."""


class CbState(str, Enum):
    """Public view of a breaker's state."""

    CLOSED = "closed"
    OPEN = "open"
    HALF_OPEN = "half_open"

    def __str__(self) -> str:
        return self.value


class CircuitBreaker:
    """A thread-safe breaker moving Closed -> Open -> HalfOpen -> Closed.

    Closed opens once `failure_threshold` consecutive failures are seen.
    Open becomes HalfOpen on the first request after `timeout_ms`.
    HalfOpen closes after `success_threshold` consecutive successes and
    reopens on any failure.
    """

    def __init__(self, name: str, config: CircuitBreakerConfig | None = None) -> None:
        self.name = name
        self.config = config if config is not None else CircuitBreakerConfig()
        self._lock = threading.Lock()
        self._state = CbState.CLOSED
        self._failures = 0
        self._successes = 0
        self._opened_at = 0.0

    def __repr__(self) -> str:
        return f"CircuitBreaker(name={self.name!r}, state={self.state_name()!r})"

    def _open(self) -> None:
        self._state = CbState.OPEN
        self._opened_at = time.monotonic()

    def _close(self) -> None:
        self._state = CbState.CLOSED
        self._failures = 0

    def allow_request(self) -> bool:
        """Return True if the guarded operation may proceed.

        An open circuit rejects until its timeout elapses, then moves to
        half-open and lets the probe through.
        """
        with self._lock:
            if self._state is not CbState.OPEN:
                return True
            elapsed_ms = (time.monotonic() - self._opened_at) * 1000.0
            if elapsed_ms >= self.config.timeout_ms:
                self._state = CbState.HALF_OPEN
                self._successes = 0
                return True
            return False

    def record_success(self) -> bool:
        """Record a success; return True when the circuit closes from half-open."""
        with self._lock:
            if self._state is CbState.CLOSED:
                self._failures = 0
                return False
            if self._state is CbState.HALF_OPEN:
                self._successes += 1
                if self._successes >= self.config.success_threshold:
                    self._close()
                    return True
                return False
            return False

    def record_failure(self) -> bool:
        """Record a failure; return True when the circuit transitions to open."""
        with self._lock:
            if self._state is CbState.CLOSED:
                self._failures += 1
                if self._failures >= self.config.failure_threshold:
                    self._open()
                    return True
                return False
            if self._state is CbState.HALF_OPEN:
                self._open()
                return True
            return False

    def state_name(self) -> str:
        """Current state as a string for logs and metrics."""
        return self.state().value

    def state(self) -> CbState:
        """Current state."""
        with self._lock:
            return self._state


class CircuitBreakerRegistry:
    """Thread-safe map of named breakers, created on first access."""

    def __init__(self, default_config: CircuitBreakerConfig | None = None) -> None:
        self.default_config = (
            default_config if default_config is not None else CircuitBreakerConfig()
        )
        self._lock = threading.Lock()
        self._breakers: dict[str, CircuitBreaker] = {}

    def get_or_create(self, name: str) -> CircuitBreaker:
        """Return the breaker for `name`, creating it with the default config."""
        with self._lock:
            breaker = self._breakers.get(name)
            if breaker is None:
                breaker = CircuitBreaker(name, self.default_config)
                self._breakers[name] = breaker
            return breaker

    def get(self, name: str) -> CircuitBreaker | None:
        """Return the breaker for `name` if it exists."""
        with self._lock:
            return self._breakers.get(name)

    def names(self) -> list[str]:
        """Names of all registered breakers."""
        with self._lock:
            return list(self._breakers)

    def __len__(self) -> int:
        with self._lock:
            return len(self._breakers)

    def __contains__(self, name: object) -> bool:
        with self._lock:
            return name in self._breakers