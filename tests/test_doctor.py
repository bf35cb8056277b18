import io
import re
import subprocess
import sys
import urllib.error
from unittest import mock

import pytest

from agentflow.doctor import (
    Check,
    Status,
    check_command,
    check_dotenv,
    check_env_key,
    check_ollama,
    check_server,
    collect_checks,
    command_version,
    format_check,
    run_doctor,
)

_ANSI = re.compile(r"\x1b\[[0-9;]*m")


def _plain(text):
    return _ANSI.sub("", text)


def _completed(returncode=0, stdout=b"tool 1.2.3\nsecond line\n"):
    return subprocess.CompletedProcess(args=[], returncode=returncode, stdout=stdout, stderr=b"")


def _response(body):
    handle = mock.MagicMock()
    handle.__enter__.return_value.read.return_value = body
    return handle


def test_check_constructors():
    assert Check.ok("a", "b") == Check("a", Status.OK, "b", None)
    assert Check.warn("a", "b", "c").hint == "c"
    assert Check.fail("a", "b", "c").status is Status.FAIL


def test_command_version_real_interpreter():
    version = command_version(sys.executable, ["--version"])
    assert version.startswith("Python")


def test_command_version_first_line():
    with mock.patch("agentflow.doctor.subprocess.run", return_value=_completed()):
        assert command_version("tool", ["--version"]) == "tool 1.2.3"


def test_command_version_nonzero_exit():
    with mock.patch("agentflow.doctor.subprocess.run", return_value=_completed(returncode=1)):
        assert command_version("tool", ["--version"]) is None


def test_command_version_empty_output():
    with mock.patch("agentflow.doctor.subprocess.run", return_value=_completed(stdout=b"")):
        assert command_version("tool", ["--version"]) == ""


def test_command_version_invalid_utf8():
    with mock.patch("agentflow.doctor.subprocess.run", return_value=_completed(stdout=b"\xff\xfe")):
        assert command_version("tool", ["--version"]) is None


def test_command_version_missing_program():
    with mock.patch("agentflow.doctor.subprocess.run", side_effect=FileNotFoundError):
        assert command_version("tool", ["--version"]) is None


def test_check_command_found():
    with mock.patch("agentflow.doctor.subprocess.run", return_value=_completed()):
        check = check_command("Tool", "tool", "install it")
    assert check == Check.ok("Tool", "tool 1.2.3")


@pytest.mark.parametrize("status", [Status.FAIL, Status.WARN])
def test_check_command_missing(status):
    with mock.patch("agentflow.doctor.subprocess.run", side_effect=FileNotFoundError):
        check = check_command("Tool", "tool", "install it", status)
    assert check.status is status
    assert check.detail == "not found"
    assert check.hint == "install it"


def test_check_env_key_masks_value(monkeypatch):
    key_value = "placeholder"
    monkeypatch.setenv("AGENTFLOW_TEST_KEY", key_value)
    check = check_env_key("AGENTFLOW_TEST_KEY", "Provider", "the console")
    assert check.status is Status.OK
    assert check.label == "AGENTFLOW_TEST_KEY env var"
    assert check.detail == key_value[:6] + "…" + "*" * 8
    assert key_value not in check.detail


def test_check_env_key_short_value(monkeypatch):
    monkeypatch.setenv("AGENTFLOW_TEST_KEY", "abc")
    check = check_env_key("AGENTFLOW_TEST_KEY", "Provider", "the console")
    assert check.detail == "abc…" + "*" * 8


@pytest.mark.parametrize("value", [None, ""])
def test_check_env_key_unset(monkeypatch, value):
    if value is None:
        monkeypatch.delenv("AGENTFLOW_TEST_KEY", raising=False)
    else:
        monkeypatch.setenv("AGENTFLOW_TEST_KEY", value)
    check = check_env_key("AGENTFLOW_TEST_KEY", "Provider", "the console")
    assert check.status is Status.WARN
    assert check.detail == "not set"
    assert check.hint == "Required for Provider — get a key at the console"


def test_check_ollama_reports_version():
    with mock.patch("agentflow.doctor.urllib.request.urlopen", return_value=_response(b'{"version": "0.5.1"}')):
        check = check_ollama()
    assert check.status is Status.OK
    assert check.detail == "v0.5.1 at localhost:11434"


def test_check_ollama_non_json_body():
    with mock.patch("agentflow.doctor.urllib.request.urlopen", return_value=_response(b"hello")):
        check = check_ollama()
    assert check.detail == "vrunning at localhost:11434"


def test_check_ollama_unreachable():
    with mock.patch("agentflow.doctor.urllib.request.urlopen", side_effect=urllib.error.URLError("refused")):
        check = check_ollama()
    assert check.status is Status.WARN
    assert check.detail == "not reachable on localhost:11434"


def test_check_server_reports_version():
    with mock.patch("agentflow.doctor.urllib.request.urlopen", return_value=_response(b'{"version": "0.1.0"}')):
        check = check_server()
    assert check.detail == "running v0.1.0 at localhost:18790"


def test_check_server_without_version():
    with mock.patch("agentflow.doctor.urllib.request.urlopen", return_value=_response(b'{"status": 1}')):
        check = check_server()
    assert check.detail == "running vok at localhost:18790"


def test_check_server_not_running():
    with mock.patch("agentflow.doctor.urllib.request.urlopen", side_effect=ConnectionRefusedError()):
        check = check_server()
    assert check.status is Status.WARN
    assert check.detail == "not running"


def test_check_dotenv(tmp_path):
    missing = check_dotenv(tmp_path)
    assert missing.status is Status.WARN
    assert missing.detail == "not found in current directory"
    (tmp_path / ".env").write_text("A=1\n")
    found = check_dotenv(tmp_path)
    assert found == Check.ok(".env file", "found in current directory")


def test_format_check_without_hint():
    text = _plain(format_check(Check.ok("Label", "detail text")))
    assert "\n" not in text
    assert text.startswith("  [✓] Label")
    assert text.endswith("  detail text")


def test_format_check_with_hint():
    lines = _plain(format_check(Check.fail("Label", "broken", "fix it"))).split("\n")
    assert len(lines) == 2
    assert lines[0].startswith("  [✗] Label")
    assert lines[1].strip() == "fix it"


def test_collect_checks_basic(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    with mock.patch("agentflow.doctor.subprocess.run", return_value=_completed()):
        checks = collect_checks(False)
    assert len(checks) == 4
    assert [c.status for c in checks[:3]] == [Status.OK] * 3
    assert checks[3].label == ".env file"


def test_collect_checks_full(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    with mock.patch("agentflow.doctor.subprocess.run", return_value=_completed()), mock.patch(
        "agentflow.doctor.urllib.request.urlopen", side_effect=urllib.error.URLError("down")
    ):
        checks = collect_checks(True)
    assert len(checks) == 8
    assert checks[-2].label == "Ollama"
    assert checks[-1].status is Status.WARN


def test_run_doctor_all_pass(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    (tmp_path / ".env").write_text("")
    out = io.StringIO()
    with mock.patch("agentflow.doctor.subprocess.run", return_value=_completed()):
        checks = run_doctor(False, out)
    assert all(c.status is Status.OK for c in checks)
    assert "All checks passed." in _plain(out.getvalue())


def test_run_doctor_reports_failures(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    out = io.StringIO()
    with mock.patch("agentflow.doctor.subprocess.run", side_effect=FileNotFoundError):
        checks = run_doctor(False, out)
    text = _plain(out.getvalue())
    fails = sum(c.status is Status.FAIL for c in checks)
    warns = sum(c.status is Status.WARN for c in checks)
    assert f"{fails} check(s) failed." in text
    assert f"{warns} check(s) need attention." in text
    assert "doctor --full" in text
    assert "All checks passed." not in text