"""Bounded external command execution.

Spawns a command without a shell in its own process group, enforces a
wall-clock timeout and a per-stream output cap, and reports how it ended as
an ExecOutcome. Nothing is retried here; callers decide what to do next.
"""

from __future__ import annotations

import contextlib
import enum
import errno
import logging
import os
import selectors
import signal
import subprocess
import time
from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path

logger = logging.getLogger(__name__)

KILL_GRACE_S = 2.0
_READ_CHUNK = 64 * 1024


class ExecStatus(enum.Enum):
    SUCCESS = "success"
    NON_ZERO_EXIT = "non_zero_exit"
    SIGNAL = "signal"
    TIMEOUT = "timeout"
    OUTPUT_LIMIT = "output_limit"
    SPAWN_ERROR = "spawn_error"


@dataclass(frozen=True)
class ExecOutcome:
    status: ExecStatus
    argv: tuple[str, ...]
    returncode: int | None = None
    signal: str | None = None
    error_code: str | None = None  # ETIMEDOUT, ENOBUFS, ENOENT, ...
    error: str | None = None
    stdout: str = ""
    stderr: str = ""
    duration_ms: float = 0.0

    @property
    def ok(self) -> bool:
        return self.status == ExecStatus.SUCCESS


def run_command(
    argv: Sequence[str],
    *,
    timeout_ms: int,
    max_buffer: int,
    cwd: str | Path | None = None,
) -> ExecOutcome:
    """Run argv to completion, or until it times out or floods its output.

    Args:
        argv: Program and arguments. Never passed through a shell.
        timeout_ms: Wall-clock budget for the whole run.
        max_buffer: Byte cap applied to stdout and stderr separately.
        cwd: Working directory for the child.
    """
    argv = tuple(argv)
    t0 = time.monotonic()
    deadline = t0 + timeout_ms / 1000
    logger.debug("exec %s (timeout=%dms, max_buffer=%d)", argv, timeout_ms, max_buffer)

    try:
        proc = subprocess.Popen(
            argv,
            stdin=subprocess.DEVNULL,
            stdout=subprocess.PIPE,
            stderr=subprocess.PIPE,
            cwd=cwd,
            start_new_session=True,  # own process group, so timeouts kill grandchildren too
        )
    except OSError as e:
        return ExecOutcome(
            status=ExecStatus.SPAWN_ERROR,
            argv=argv,
            error_code=errno.errorcode.get(e.errno, "ESPAWN") if e.errno else "ESPAWN",
            error=f"failed to start {argv[0]}: {e.strerror or e}",
            duration_ms=_elapsed_ms(t0),
        )

    out, err = bytearray(), bytearray()
    stopped: ExecStatus | None = None

    with selectors.DefaultSelector() as sel:
        sel.register(proc.stdout, selectors.EVENT_READ, out)
        sel.register(proc.stderr, selectors.EVENT_READ, err)
        while stopped is None and sel.get_map():
            remaining = deadline - time.monotonic()
            if remaining <= 0:
                stopped = ExecStatus.TIMEOUT
                break
            for key, _ in sel.select(timeout=remaining):
                chunk = os.read(key.fd, _READ_CHUNK)
                if not chunk:
                    sel.unregister(key.fileobj)
                    continue
                key.data.extend(chunk)
                if len(key.data) > max_buffer:
                    stopped = ExecStatus.OUTPUT_LIMIT
                    break

    if stopped is None:
        try:
            proc.wait(timeout=max(deadline - time.monotonic(), 0))
        except subprocess.TimeoutExpired:
            stopped = ExecStatus.TIMEOUT
    if stopped is not None:
        _kill_process_group(proc)
    proc.stdout.close()
    proc.stderr.close()

    stdout = bytes(out[:max_buffer]).decode("utf-8", errors="replace")
    stderr = bytes(err[:max_buffer]).decode("utf-8", errors="replace")
    duration_ms = _elapsed_ms(t0)
    program = argv[0]

    if stopped == ExecStatus.TIMEOUT:
        return ExecOutcome(
            status=ExecStatus.TIMEOUT, argv=argv, signal="SIGTERM", error_code="ETIMEDOUT",
            error=f"{program} timed out after {timeout_ms}ms",
            stdout=stdout, stderr=stderr, duration_ms=duration_ms,
        )
    if stopped == ExecStatus.OUTPUT_LIMIT:
        return ExecOutcome(
            status=ExecStatus.OUTPUT_LIMIT, argv=argv, signal="SIGTERM", error_code="ENOBUFS",
            error=f"{program} output exceeded {max_buffer} bytes",
            stdout=stdout, stderr=stderr, duration_ms=duration_ms,
        )

    rc = proc.returncode
    if rc == 0:
        return ExecOutcome(
            status=ExecStatus.SUCCESS, argv=argv, returncode=0,
            stdout=stdout, stderr=stderr, duration_ms=duration_ms,
        )
    if rc < 0:
        name = _signal_name(-rc)
        return ExecOutcome(
            status=ExecStatus.SIGNAL, argv=argv, signal=name,
            error=f"{program} was terminated by {name}",
            stdout=stdout, stderr=stderr, duration_ms=duration_ms,
        )
    return ExecOutcome(
        status=ExecStatus.NON_ZERO_EXIT, argv=argv, returncode=rc,
        error=f"{program} exited with status {rc}",
        stdout=stdout, stderr=stderr, duration_ms=duration_ms,
    )


def _kill_process_group(proc: subprocess.Popen) -> None:
    """SIGTERM the child's process group, escalating to SIGKILL after a grace period."""
    _signal_group(proc, signal.SIGTERM)
    try:
        proc.wait(timeout=KILL_GRACE_S)
    except subprocess.TimeoutExpired:
        _signal_group(proc, signal.SIGKILL)
        proc.wait()


def _signal_group(proc: subprocess.Popen, sig: int) -> None:
    # Process already gone is fine.
    with contextlib.suppress(ProcessLookupError, PermissionError):
        if hasattr(os, "killpg"):
            os.killpg(proc.pid, sig)
        else:
            proc.send_signal(sig)


def _signal_name(signum: int) -> str:
    try:
        return signal.Signals(signum).name
    except ValueError:
        return f"SIG{signum}"


def _elapsed_ms(t0: float) -> float:
    return (time.monotonic() - t0) * 1000
