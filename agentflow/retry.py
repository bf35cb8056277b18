"""Retry policies for steps."""

from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import timedelta
from typing import Any, ClassVar, Mapping


def _require_int(data: Mapping[str, Any], key: str) -> int:
    if key not in data:
        raise ValueError(f"missing field `{key}`")
    value = data[key]
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        raise ValueError(f"field `{key}` must be a non-negative integer, got {value!r}")
    return value


def _require_float(data: Mapping[str, Any], key: str) -> float:
    if key not in data:
        raise ValueError(f"missing field `{key}`")
    value = data[key]
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValueError(f"field `{key}` must be a number, got {value!r}")
    return float(value)


class RetryPolicy:
    """Base of the retry policies; `NoRetry` is the default."""

    kind: ClassVar[str] = ""
    max_retries: int

    def backoff(self, attempt: int) -> timedelta:
        """Wait before retry number `attempt` (0-indexed)."""
        raise NotImplementedError

    def to_dict(self) -> dict[str, Any]:
        """Serialise the policy as a mapping tagged with `kind`."""
        raise NotImplementedError

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> RetryPolicy:
        """Build a policy from a mapping tagged with `kind`."""
        if not isinstance(data, Mapping):
            raise ValueError(f"retry policy must be a mapping, got {data!r}")
        if "kind" not in data:
            raise ValueError("missing field `kind`")
        kind = data["kind"]
        if kind == NoRetry.kind:
            return NoRetry()
        if kind == FixedRetry.kind:
            return FixedRetry(
                max_retries=_require_int(data, "max_retries"),
                interval_ms=_require_int(data, "interval_ms"),
            )
        if kind == ExponentialRetry.kind:
            return ExponentialRetry(
                max_retries=_require_int(data, "max_retries"),
                initial_interval_ms=_require_int(data, "initial_interval_ms"),
                multiplier=_require_float(data, "multiplier"),
                max_interval_ms=_require_int(data, "max_interval_ms"),
            )
        raise ValueError(
            f"unknown variant `{kind}`, expected one of `none`, `fixed`, `exponential`"
        )


@dataclass(frozen=True)
class NoRetry(RetryPolicy):
    """Do not retry on failure."""

    kind: ClassVar[str] = "none"
    max_retries: ClassVar[int] = 0

    def backoff(self, attempt: int) -> timedelta:
        return timedelta(0)

    def to_dict(self) -> dict[str, Any]:
        return {"kind": self.kind}


@dataclass(frozen=True)
class FixedRetry(RetryPolicy):
    """Retry a fixed number of times with a constant interval."""

    kind: ClassVar[str] = "fixed"
    max_retries: int
    interval_ms: int

    def backoff(self, attempt: int) -> timedelta:
        return timedelta(milliseconds=self.interval_ms)

    def to_dict(self) -> dict[str, Any]:
        return {
            "kind": self.kind,
            "max_retries": self.max_retries,
            "interval_ms": self.interval_ms,
        }


@dataclass(frozen=True)
class ExponentialRetry(RetryPolicy):
    """Retry with exponentially growing waits, capped at `max_interval_ms`."""

    kind: ClassVar[str] = "exponential"
    max_retries: int
    initial_interval_ms: int
    multiplier: float
    max_interval_ms: int

    def backoff(self, attempt: int) -> timedelta:
        try:
            ms = self.initial_interval_ms * self.multiplier**attempt
        except OverflowError:
            ms = math.inf
        if math.isnan(ms) or ms <= 0:
            ms = 0.0
        ms = min(ms, float(self.max_interval_ms))
        return timedelta(milliseconds=int(ms))

    def to_dict(self) -> dict[str, Any]:
        return {
            "kind": self.kind,
            "max_retries": self.max_retries,
            "initial_interval_ms": self.initial_interval_ms,
            "multiplier": self.multiplier,
            "max_interval_ms": self.max_interval_ms,
        }