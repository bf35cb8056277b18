"""Identifier types and the JSON value wrapper shared across the package."""

from __future__ import annotations

import json
import uuid
from dataclasses import dataclass
from typing import Any


@dataclass
class Value:
    """A JSON-compatible value: None, bool, int, float, str, list or dict."""

    inner: Any = None

    @classmethod
    def null(cls) -> Value:
        """Return a value holding JSON null."""
        return cls(None)

    def __getitem__(self, key: Any) -> Any:
        return self.inner[key]

    def __setitem__(self, key: Any, item: Any) -> None:
        self.inner[key] = item

    def __str__(self) -> str:
        return json.dumps(self.inner, separators=(",", ":"), ensure_ascii=False)

    def to_json(self) -> str:
        """Serialise the wrapped value as compact JSON text."""
        return str(self)

    @classmethod
    def from_json(cls, text: str) -> Value:
        """Parse JSON text into a value."""
        return cls(json.loads(text))


class AgentId(str):
    """Identifier of an agent."""

    __slots__ = ()

    @classmethod
    def generate(cls) -> AgentId:
        """Return a fresh random identifier."""
        return cls(uuid.uuid4())

    def __repr__(self) -> str:
        return f"AgentId({str.__repr__(self)})"


class StepId(str):
    """Identifier of a step within an agent."""

    __slots__ = ()

    @classmethod
    def generate(cls) -> StepId:
        """Return a fresh random identifier."""
        return cls(uuid.uuid4())

    def __repr__(self) -> str:
        return f"StepId({str.__repr__(self)})"