"""Test bounded command execution against real child processes."""

import sys

import pytest

from migraguard.runner import ExecStatus, run_command

pytestmark = pytest.mark.skipif(sys.platform == "win32", reason="POSIX process groups")


def _py(code: str) -> list[str]:
    return [sys.executable, "-c", code]


def test_success_captures_output():
    outcome = run_command(
        _py("import sys; print('hello'); print('oops', file=sys.stderr)"),
        timeout_ms=10_000, max_buffer=1024,
    )
    assert outcome.ok
    assert outcome.status == ExecStatus.SUCCESS
    assert outcome.returncode == 0
    assert outcome.stdout.strip() == "hello"
    assert outcome.stderr.strip() == "oops"
    assert outcome.duration_ms > 0
    assert outcome.argv[0] == sys.executable


def test_non_zero_exit():
    outcome = run_command(_py("import sys; sys.exit(3)"), timeout_ms=10_000, max_buffer=1024)
    assert outcome.status == ExecStatus.NON_ZERO_EXIT
    assert outcome.returncode == 3
    assert not outcome.ok
    assert "status 3" in outcome.error


def test_timeout_kills_process():
    outcome = run_command(_py("import time; time.sleep(30)"), timeout_ms=300, max_buffer=1024)
    assert outcome.status == ExecStatus.TIMEOUT
    assert outcome.error_code == "ETIMEDOUT"
    assert outcome.signal == "SIGTERM"
    assert outcome.returncode is None
    assert outcome.duration_ms < 10_000


def test_output_limit():
    outcome = run_command(
        _py("import sys; sys.stdout.write('x' * 100_000); sys.stdout.flush()"),
        timeout_ms=10_000, max_buffer=1000,
    )
    assert outcome.status == ExecStatus.OUTPUT_LIMIT
    assert outcome.error_code == "ENOBUFS"
    assert len(outcome.stdout) <= 1000


def test_killed_by_signal():
    outcome = run_command(
        _py("import os, signal; os.kill(os.getpid(), signal.SIGKILL)"),
        timeout_ms=10_000, max_buffer=1024,
    )
    assert outcome.status == ExecStatus.SIGNAL
    assert outcome.signal == "SIGKILL"


def test_spawn_error():
    outcome = run_command(
        ["migraguard-definitely-not-installed"], timeout_ms=1000, max_buffer=1024,
    )
    assert outcome.status == ExecStatus.SPAWN_ERROR
    assert outcome.error_code == "ENOENT"
    assert "failed to start" in outcome.error


def test_stdin_is_closed():
    outcome = run_command(
        _py("import sys; print(repr(sys.stdin.read()))"),
        timeout_ms=10_000, max_buffer=1024,
    )
    assert outcome.ok
    assert outcome.stdout.strip() == "''"
