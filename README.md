# agentflow

Building blocks for AI agent workflows. An agent is a named set of steps
that form a dependency graph. Each step either calls an LLM or runs a tool.

The package has no runtime dependencies beyond the standard library.

## Modules

- `agentflow.types`: `Value`, a wrapper around a JSON-compatible value
  (`Value.null()`, `to_json()`, `from_json()`, item access), and the string
  identifiers `AgentId` and `StepId`, each with `generate()` for a random UUID.
- `agentflow.retry`: `RetryPolicy` and its three policies `NoRetry`,
  `FixedRetry` and `ExponentialRetry`. Each has `max_retries`,
  `backoff(attempt)` returning a `timedelta`, and `to_dict()`.
  `RetryPolicy.from_dict()` reads a mapping tagged with `kind`
  (`none`, `fixed` or `exponential`).
- `agentflow.step`: `Step`, `StepState` (`pending`, `running`, `success`,
  `failed`, `retrying`), `LlmConfig` and `ToolConfig`. Use `Step.new_tool()`
  and `Step.new_llm()` to build steps. `with_depends_on()`, `with_retry()`
  and `with_timeout_ms()` each return a modified copy.
- `agentflow.context`: `Context` holds the output of each step and the
  variables shared between steps.
- `agentflow.agent`: `Agent` is a named list of steps with an identifier,
  an optional description, a creation time and the optional YAML text it
  came from.
- `agentflow.circuit_breaker`: `CircuitBreaker` is a thread-safe breaker that
  moves from Closed to Open to HalfOpen and back to Closed.
  `CircuitBreakerRegistry` keeps one breaker for each name.
- `agentflow.doctor`: checks of the local environment.
- `agentflow.cli`: the `agentflow` command.

`Step`, `Context` and `Agent` each have `to_dict()` and `from_dict()`, and
these round-trip through JSON-compatible mappings.

## Installation

```
pip install agentflow
```

## Example

```python
from agentflow.agent import Agent
from agentflow.context import Context
from agentflow.retry import ExponentialRetry
from agentflow.step import Step
from agentflow.types import Value

fetch = Step.new_tool("fetch", "Fetch Data", "http", {"url": "https://example.com/data"})
summarise = (
    Step.new_llm("summarise", "Summarise", "openai", "gpt-4", "Summarise this")
    .with_depends_on(["fetch"])
    .with_retry(ExponentialRetry(max_retries=5, initial_interval_ms=100,
                                 multiplier=2.0, max_interval_ms=10000))
    .with_timeout_ms(60000)
)
agent = Agent("my-agent", [fetch, summarise]).with_description("Fetches and summarises data")

agent.get_step("summarise").retry_policy.backoff(3)   # timedelta of 800 ms

ctx = Context.for_agent(agent.id)
ctx.set_step_output("fetch", Value({"status": 200}))
ctx.get_step_output("fetch")["status"]                # 200
```

## Circuit breaking

```python
from agentflow.circuit_breaker import CircuitBreakerConfig, CircuitBreakerRegistry

breakers = CircuitBreakerRegistry(CircuitBreakerConfig(failure_threshold=3))
cb = breakers.get_or_create("openai")
if cb.allow_request():
    try:
        ...  # call the provider
    except Exception:
        cb.record_failure()
    else:
        cb.record_success()
cb.state_name()   # "closed", "open" or "half_open"
```

A breaker opens after `failure_threshold` consecutive failures. It stays
open for `timeout_ms`, after which it lets a probe through in the half-open
state. It closes again after `success_threshold` consecutive successes. Any
failure while half-open opens it again.

## Command line

Check the local setup:

```
agentflow doctor
agentflow doctor --full
```

The basic checks cover the Python interpreter, `pip`, whether an
`agentflow` command is on `PATH`, and whether there is a `.env` file in the
current directory. With `--full`, the doctor also checks the
`OPENAI_API_KEY` and `ANTHROPIC_API_KEY` environment variables, an Ollama
instance on `localhost:11434`, and a server health endpoint on
`localhost:18790`.

Before it parses its arguments, the command reads `KEY=VALUE` lines from a
`.env` file in the current directory. These never replace variables that
are already set. The global option `-v`/`--verbose` turns on debug logging.
`--version` prints the version. If a command fails, its error is printed
and the exit status is 1.

## What this package does not do

It does not load workflow definitions from YAML files. It does not
schedule or execute steps, call LLM providers or run tools. It has no HTTP
server of its own. The doctor's server check only looks for a server
already running on port 18790. The only command is `agentflow doctor`.