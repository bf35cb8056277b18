"""Steps: the units of work inside an agent, and their lifecycle states."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, Iterable, Mapping, Union

from agentflow.retry import NoRetry, RetryPolicy
from agentflow.types import StepId


class StepState(str, Enum):
    """Lifecycle state of a step during execution."""

    PENDING = "pending"
    RUNNING = "running"
    SUCCESS = "success"
    FAILED = "failed"
    RETRYING = "retrying"

    def __str__(self) -> str:
        return self.value


def _require(data: Mapping[str, Any], key: str) -> Any:
    if key not in data:
        raise ValueError(f"missing field `{key}`")
    return data[key]


def _require_str(data: Mapping[str, Any], key: str) -> str:
    value = _require(data, key)
    if not isinstance(value, str):
        raise ValueError(f"field `{key}` must be a string, got {value!r}")
    return value


def _optional_int(data: Mapping[str, Any], key: str) -> int | None:
    value = data.get(key)
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        raise ValueError(f"field `{key}` must be a non-negative integer, got {value!r}")
    return value


def _optional_float(data: Mapping[str, Any], key: str) -> float | None:
    value = data.get(key)
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValueError(f"field `{key}` must be a number, got {value!r}")
    return float(value)


@dataclass
class LlmConfig:
    """Configuration of an LLM-backed step."""

    provider: str
    model: str
    prompt: str
    temperature: float | None = None
    max_tokens: int | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "provider": self.provider,
            "model": self.model,
            "prompt": self.prompt,
            "temperature": self.temperature,
            "max_tokens": self.max_tokens,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> LlmConfig:
        return cls(
            provider=_require_str(data, "provider"),
            model=_require_str(data, "model"),
            prompt=_require_str(data, "prompt"),
            temperature=_optional_float(data, "temperature"),
            max_tokens=_optional_int(data, "max_tokens"),
        )


@dataclass
class ToolConfig:
    """Configuration of a tool-backed step."""

    tool: str
    input: Any = None

    def to_dict(self) -> dict[str, Any]:
        return {"tool": self.tool, "input": self.input}

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> ToolConfig:
        return cls(tool=_require_str(data, "tool"), input=_require(data, "input"))


StepKind = Union[LlmConfig, ToolConfig]


def _kind_to_dict(kind: StepKind) -> dict[str, Any]:
    if isinstance(kind, LlmConfig):
        return {"llm": kind.to_dict()}
    return {"tool": kind.to_dict()}


def _kind_from_dict(data: Any) -> StepKind:
    if not isinstance(data, Mapping) or len(data) != 1:
        raise ValueError(f"step kind must be a mapping with one of `llm`, `tool`, got {data!r}")
    (tag, body), = data.items()
    if not isinstance(body, Mapping):
        raise ValueError(f"step kind `{tag}` must be a mapping, got {body!r}")
    if tag == "llm":
        return LlmConfig.from_dict(body)
    if tag == "tool":
        return ToolConfig.from_dict(body)
    raise ValueError(f"unknown variant `{tag}`, expected one of `llm`, `tool`")


@dataclass
class Step:
    """A single unit of work within an agent."""

    id: StepId
    name: str
    kind: StepKind
    depends_on: list[StepId] = field(default_factory=list)
    retry_policy: RetryPolicy = field(default_factory=NoRetry)
    timeout_ms: int | None = None

    def __post_init__(self) -> None:
        self.id = StepId(self.id)
        self.depends_on = [StepId(dep) for dep in self.depends_on]

    @classmethod
    def new_tool(cls, id: str, name: str, tool: str, input: Any) -> Step:
        """Create a step that runs the named tool with `input`."""
        return cls(id=StepId(id), name=name, kind=ToolConfig(tool=tool, input=input))

    @classmethod
    def new_llm(cls, id: str, name: str, provider: str, model: str, prompt: str) -> Step:
        """Create a step that sends `prompt` to an LLM."""
        return cls(
            id=StepId(id),
            name=name,
            kind=LlmConfig(provider=provider, model=model, prompt=prompt),
        )

    def with_depends_on(self, deps: Iterable[str]) -> Step:
        """Return a copy depending on the given step IDs."""
        return replace(self, depends_on=[StepId(dep) for dep in deps])

    def with_retry(self, policy: RetryPolicy) -> Step:
        """Return a copy with the given retry policy."""
        return replace(self, retry_policy=policy)

    def with_timeout_ms(self, ms: int) -> Step:
        """Return a copy with a timeout in milliseconds."""
        return replace(self, timeout_ms=ms)

    def to_dict(self) -> dict[str, Any]:
        """Serialise the step as a JSON-compatible mapping."""
        return {
            "id": str(self.id),
            "name": self.name,
            "kind": _kind_to_dict(self.kind),
            "depends_on": [str(dep) for dep in self.depends_on],
            "retry_policy": self.retry_policy.to_dict(),
            "timeout_ms": self.timeout_ms,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Step:
        """Build a step from a mapping produced by `to_dict`."""
        if not isinstance(data, Mapping):
            raise ValueError(f"step must be a mapping, got {data!r}")
        depends_on = _require(data, "depends_on")
        if not isinstance(depends_on, list) or not all(isinstance(d, str) for d in depends_on):
            raise ValueError(f"field `depends_on` must be a list of strings, got {depends_on!r}")
        return cls(
            id=StepId(_require_str(data, "id")),
            name=_require_str(data, "name"),
            kind=_kind_from_dict(_require(data, "kind")),
            depends_on=[StepId(dep) for dep in depends_on],
            retry_policy=RetryPolicy.from_dict(_require(data, "retry_policy")),
            timeout_ms=_optional_int(data, "timeout_ms"),
        )