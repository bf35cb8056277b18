"""Environment checks: toolchain, configuration files, API keys and services."""

from __future__ import annotations

import json
import os
import subprocess
import sys
import urllib.error
import urllib.request
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import TextIO

OLLAMA_VERSION_URL = "http://localhost:11434/api/version"
SERVER_HEALTH_URL = "http://localhost:18790/health"
_LABEL_WIDTH = 28

_BOLD = "1"
_RED = "31"
_GREEN = "32"
_YELLOW = "33"
_DARK_GREY = "90"


def _paint(text: str, *codes: str) -> str:
    return f"\x1b[{';'.join(codes)}m{text}\x1b[0m"


class Status(str, Enum):
    """Outcome of a single check."""

    OK = "ok"
    WARN = "warn"
    FAIL = "fail"


@dataclass(frozen=True)
class Check:
    """Result of one environment check, with an optional remedy."""

    label: str
    status: Status
    detail: str
    hint: str | None = None

    @classmethod
    def ok(cls, label: str, detail: str) -> Check:
        return cls(label, Status.OK, detail)

    @classmethod
    def warn(cls, label: str, detail: str, hint: str) -> Check:
        return cls(label, Status.WARN, detail, hint)

    @classmethod
    def fail(cls, label: str, detail: str, hint: str) -> Check:
        return cls(label, Status.FAIL, detail, hint)


def command_version(cmd: str, args: list[str]) -> str | None:
    """Run a command and return the first line of its output, or None on failure."""
    try:
        completed = subprocess.run(
            [cmd, *args],
            stdin=subprocess.DEVNULL,
            capture_output=True,
            check=False,
        )
    except OSError:
        return None
    if completed.returncode != 0:
        return None
    try:
        text = completed.stdout.decode("utf-8")
    except UnicodeDecodeError:
        return None
    lines = text.splitlines()
    return lines[0].strip() if lines else ""


def check_command(label: str, cmd: str, hint: str, missing_status: Status = Status.FAIL) -> Check:
    """Check that `cmd --version` runs; report `missing_status` when it does not."""
    version = command_version(cmd, ["--version"])
    if version is not None:
        return Check.ok(label, version)
    return Check(label, missing_status, "not found", hint)


def check_env_key(name: str, provider: str, url: str) -> Check:
    """Check that an API key variable is set, showing only a masked prefix."""
    label = f"{name} env var"
    value = os.environ.get(name, "")
    if value:
        return Check.ok(label, f"{value[:6]}…{'*' * 8}")
    return Check.warn(label, "not set", f"Required for {provider} — get a key at {url}")


def _http_get(url: str, timeout: float) -> str:
    try:
        with urllib.request.urlopen(url, timeout=timeout) as response:
            body = response.read()
    except urllib.error.HTTPError as exc:
        body = exc.read()
    return body.decode("utf-8", errors="replace")


def _version_from(body: str, fallback: str) -> str:
    try:
        data = json.loads(body)
    except ValueError:
        return fallback
    version = data.get("version") if isinstance(data, dict) else None
    return version if isinstance(version, str) else fallback


def check_ollama(timeout: float = 2.0) -> Check:
    """Check that a local Ollama server answers on its default port."""
    try:
        body = _http_get(OLLAMA_VERSION_URL, timeout)
    except (OSError, ValueError):
        return Check.warn(
            "Ollama",
            "not reachable on localhost:11434",
            "Install Ollama — needed for local models",
        )
    return Check.ok("Ollama", f"v{_version_from(body, 'running')} at localhost:11434")


def check_server(timeout: float = 1.0) -> Check:
    """Check that the AgentFlow HTTP server answers its health endpoint."""
    try:
        body = _http_get(SERVER_HEALTH_URL, timeout)
    except (OSError, ValueError):
        return Check.warn(
            "AgentFlow server",
            "not running",
            "Start the AgentFlow server on localhost:18790",
        )
    return Check.ok(
        "AgentFlow server", f"running v{_version_from(body, 'ok')} at localhost:18790"
    )


def check_dotenv(directory: str | os.PathLike[str] = ".") -> Check:
    """Check for a .env file in `directory`."""
    if (Path(directory) / ".env").exists():
        return Check.ok(".env file", "found in current directory")
    return Check.warn(
        ".env file",
        "not found in current directory",
        "Copy .env.example to .env and fill in your API keys",
    )


def format_check(check: Check) -> str:
    """Render a check as one line, plus an indented hint line when present."""
    colour, icon = {
        Status.OK: (_GREEN, "✓"),
        Status.WARN: (_YELLOW, "!"),
        Status.FAIL: (_RED, "✗"),
    }[check.status]
    label = _paint(check.label.ljust(_LABEL_WIDTH), colour)
    line = f"  [{_paint(icon, colour, _BOLD)}] {label}  {_paint(check.detail, _DARK_GREY)}"
    if check.hint is not None:
        line += f"\n       {_paint(' ' * _LABEL_WIDTH, _DARK_GREY)}  {check.hint}"
    return line


def collect_checks(full: bool = False) -> list[Check]:
    """Run the basic checks, and the provider and network checks when `full`."""
    checks = [
        check_command("Python interpreter", sys.executable, "Install Python 3.10 or newer"),
        check_command("pip", "pip", "Install pip for your Python interpreter"),
        check_command(
            "agentflow command",
            "agentflow",
            "Install the agentflow package so its command is on PATH",
            Status.WARN,
        ),
        check_dotenv(),
    ]
    if full:
        checks.append(
            check_env_key("OPENAI_API_KEY", "OpenAI", "the OpenAI platform API keys page")
        )
        checks.append(
            check_env_key("ANTHROPIC_API_KEY", "Anthropic", "the Anthropic console")
        )
        checks.append(check_ollama())
        checks.append(check_server())
    return checks


def run_doctor(full: bool = False, out: TextIO | None = None) -> list[Check]:
    """Run the checks, print a report to `out` and return the results."""
    out = out if out is not None else sys.stdout

    def emit(text: str = "") -> None:
        print(text, file=out)

    emit()
    emit(f"  {_paint('⚕', _BOLD)}  AgentFlow Doctor")
    emit()
    if full:
        emit(f"  {_paint('·', _DARK_GREY)}  Running full checks...\n")

    checks = collect_checks(full)
    fails = sum(1 for check in checks if check.status is Status.FAIL)
    warns = sum(1 for check in checks if check.status is Status.WARN)

    for check in checks:
        emit(format_check(check))
    emit()

    if fails == 0 and warns == 0:
        emit(f"  {_paint('✓', _GREEN, _BOLD)}  All checks passed.")
    else:
        if fails:
            emit(f"  {_paint('✗', _RED, _BOLD)}  {fails} check(s) failed.")
        if warns:
            emit(f"  {_paint('!', _YELLOW, _BOLD)}  {warns} check(s) need attention.")
        if not full:
            emit()
            emit(
                f"  {_paint('·', _DARK_GREY)}  Run `agentflow doctor --full` "
                "for provider and server checks."
            )
    emit()
    return checks