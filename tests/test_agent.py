import json
from datetime import datetime, timezone

import pytest

from agentflow.agent import Agent
from agentflow.step import Step
from agentflow.types import StepId


def sample_steps():
    return [
        Step.new_tool("s1", "Step 1", "http", {}),
        Step.new_llm("s2", "Step 2", "openai", "gpt-4", "hello"),
    ]


def test_agent_new():
    agent = Agent("test-agent", sample_steps())
    assert agent.name == "test-agent"
    assert len(agent.steps) == 2
    assert agent.description is None
    assert len(agent.id) > 0


def test_agent_with_id():
    agent = Agent.with_id("custom-id", "agent", [])
    assert agent.id == "custom-id"
    assert agent.name == "agent"


def test_agent_with_description():
    agent = Agent("a", []).with_description("does things")
    assert agent.description == "does things"


def test_agent_with_yaml():
    agent = Agent("a", []).with_yaml("name: a\n")
    assert agent.yaml == "name: a\n"


def test_agent_get_step_found():
    agent = Agent("a", sample_steps())
    step = agent.get_step(StepId("s1"))
    assert step is not None
    assert step.name == "Step 1"


def test_agent_get_step_not_found():
    agent = Agent("a", sample_steps())
    assert agent.get_step(StepId("missing")) is None


def test_agent_new_generates_unique_ids():
    agents = [Agent("a", []) for _ in range(5)]
    ids = {agent.id for agent in agents}
    assert len(ids) == 5
    assert all(agent.name == "a" for agent in agents)


def test_agent_serde_roundtrip():
    agent = Agent.with_id("id-1", "agent-1", sample_steps()).with_description("test")
    restored = Agent.from_dict(json.loads(json.dumps(agent.to_dict())))
    assert restored.id == agent.id
    assert restored.name == agent.name
    assert restored.description == agent.description
    assert len(restored.steps) == 2
    assert restored.created_at == agent.created_at


def test_created_at_serialised_in_utc():
    agent = Agent("a", [])
    agent.created_at = datetime(2024, 1, 2, 3, 4, 5, 123456, tzinfo=timezone.utc)
    assert agent.to_dict()["created_at"] == "2024-01-02T03:04:05.123456Z"


def test_from_dict_accepts_nanosecond_timestamps():
    data = Agent.with_id("x", "x", []).to_dict()
    data["created_at"] = "2024-05-06T07:08:09.123456789Z"
    restored = Agent.from_dict(data)
    assert restored.created_at == datetime(2024, 5, 6, 7, 8, 9, 123456, tzinfo=timezone.utc)


def test_from_dict_rejects_missing_steps():
    data = Agent.with_id("x", "x", []).to_dict()
    del data["steps"]
    with pytest.raises(ValueError):
        Agent.from_dict(data)