"""Execution context shared by the steps of a running agent."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Mapping

from agentflow.types import AgentId, Value


def _value_map(data: Mapping[str, Any], key: str) -> dict[str, Value]:
    if key not in data:
        raise ValueError(f"missing field `{key}`")
    mapping = data[key]
    if not isinstance(mapping, Mapping):
        raise ValueError(f"field `{key}` must be a mapping, got {mapping!r}")
    return {str(k): Value(v) for k, v in mapping.items()}


@dataclass
class Context:
    """Per-step outputs and shared variables of one agent run."""

    agent_id: AgentId | None = None
    step_outputs: dict[str, Value] = field(default_factory=dict)
    vars: dict[str, Value] = field(default_factory=dict)

    @classmethod
    def for_agent(cls, agent_id: str) -> Context:
        """Create an empty context belonging to an agent."""
        return cls(agent_id=AgentId(agent_id))

    def set_step_output(self, step_id: str, value: Value) -> None:
        """Record the output of a completed step."""
        self.step_outputs[str(step_id)] = value

    def get_step_output(self, step_id: str) -> Value | None:
        """Return the output of a step, or None if it has none."""
        return self.step_outputs.get(str(step_id))

    def set_var(self, key: str, value: Value) -> None:
        """Set a shared variable."""
        self.vars[key] = value

    def get_var(self, key: str) -> Value | None:
        """Return a shared variable, or None if unset."""
        return self.vars.get(key)

    def to_dict(self) -> dict[str, Any]:
        """Serialise the context as a JSON-compatible mapping."""
        return {
            "agent_id": None if self.agent_id is None else str(self.agent_id),
            "step_outputs": {k: v.inner for k, v in self.step_outputs.items()},
            "vars": {k: v.inner for k, v in self.vars.items()},
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Context:
        """Build a context from a mapping produced by `to_dict`."""
        if not isinstance(data, Mapping):
            raise ValueError(f"context must be a mapping, got {data!r}")
        agent_id = data.get("agent_id")
        if agent_id is not None and not isinstance(agent_id, str):
            raise ValueError(f"field `agent_id` must be a string, got {agent_id!r}")
        return cls(
            agent_id=None if agent_id is None else AgentId(agent_id),
            step_outputs=_value_map(data, "step_outputs"),
            vars=_value_map(data, "vars"),
        )