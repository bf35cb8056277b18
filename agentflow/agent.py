"""Agents: named collections of steps forming a DAG workflow."""

from __future__ import annotations

import re
from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from typing import Any, Mapping

from agentflow.step import Step
from agentflow.types import AgentId

_TIMESTAMP = re.compile(
    r"(\d{4}-\d{2}-\d{2}[Tt ]\d{2}:\d{2}:\d{2})(?:\.(\d+))?(Z|z|[+-]\d{2}:\d{2})"
)


def _now() -> datetime:
    return datetime.now(timezone.utc)


def _format_timestamp(moment: datetime) -> str:
    return moment.astimezone(timezone.utc).isoformat().replace("+00:00", "Z")


def _parse_timestamp(text: Any) -> datetime:
    if not isinstance(text, str):
        raise ValueError(f"timestamp must be a string, got {text!r}")
    match = _TIMESTAMP.fullmatch(text)
    if match is None:
        raise ValueError(f"invalid timestamp {text!r}")
    base, fraction, zone = match.groups()
    if zone in ("Z", "z"):
        zone = "+00:00"
    micros = (fraction or "")[:6].ljust(6, "0")
    return datetime.fromisoformat(f"{base.replace(' ', 'T')}.{micros}{zone}")


def _optional_str(data: Mapping[str, Any], key: str) -> str | None:
    value = data.get(key)
    if value is not None and not isinstance(value, str):
        raise ValueError(f"field `{key}` must be a string, got {value!r}")
    return value


@dataclass
class Agent:
    """A named workflow of steps; dependencies are declared on each step."""

    name: str
    steps: list[Step] = field(default_factory=list)
    id: AgentId = field(default_factory=AgentId.generate)
    description: str | None = None
    created_at: datetime = field(default_factory=_now)
    yaml: str | None = None

    def __post_init__(self) -> None:
        self.id = AgentId(self.id)

    @classmethod
    def with_id(cls, id: str, name: str, steps: list[Step]) -> Agent:
        """Create an agent with an explicit identifier."""
        return cls(name=name, steps=list(steps), id=AgentId(id))

    def with_description(self, description: str) -> Agent:
        """Return a copy carrying a description."""
        return replace(self, description=description)

    def with_yaml(self, yaml: str) -> Agent:
        """Return a copy carrying its original YAML definition."""
        return replace(self, yaml=yaml)

    def get_step(self, step_id: str) -> Step | None:
        """Return the step with the given ID, or None."""
        return next((step for step in self.steps if step.id == step_id), None)

    def to_dict(self) -> dict[str, Any]:
        """Serialise the agent as a JSON-compatible mapping."""
        return {
            "id": str(self.id),
            "name": self.name,
            "description": self.description,
            "steps": [step.to_dict() for step in self.steps],
            "created_at": _format_timestamp(self.created_at),
            "yaml": self.yaml,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Agent:
        """Build an agent from a mapping produced by `to_dict`."""
        if not isinstance(data, Mapping):
            raise ValueError(f"agent must be a mapping, got {data!r}")
        for key in ("id", "name", "steps", "created_at"):
            if key not in data:
                raise ValueError(f"missing field `{key}`")
        if not isinstance(data["id"], str):
            raise ValueError(f"field `id` must be a string, got {data['id']!r}")
        if not isinstance(data["name"], str):
            raise ValueError(f"field `name` must be a string, got {data['name']!r}")
        if not isinstance(data["steps"], list):
            raise ValueError(f"field `steps` must be a list, got {data['steps']!r}")
        return cls(
            name=data["name"],
            steps=[Step.from_dict(step) for step in data["steps"]],
            id=AgentId(data["id"]),
            description=_optional_str(data, "description"),
            created_at=_parse_timestamp(data["created_at"]),
            yaml=_optional_str(data, "yaml"),
        )