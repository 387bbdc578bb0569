"""tools/core_cmd.py

Process-execution helpers for running the Bridge CLI.

This module deliberately avoids product-specific knowledge (no stages, no
inputs). It provides:

* :func:`run_cmd` - run subprocesses (no shell=True), optionally capturing output.
"""

from __future__ import annotations

import os
import subprocess
import sys
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Optional

from bridge.errors import SpawnError
from bridge.exit_policy import TIMEOUT_EXIT_CODE


@dataclass(frozen=True)
class CmdResult:
    exit_code: int
    elapsed_seconds: float
    command_str: str
    stdout: str = ""
    stderr: str = ""
    timed_out: bool = False


def _redact(cmd: List[str], secrets: Optional[List[str]]) -> str:
    text = " ".join(cmd)
    for s in secrets or []:
        if s:
            text = text.replace(s, "***")
    return text


def run_cmd(
    cmd: List[str],
    *,
    cwd: Optional[Path] = None,
    timeout_seconds: int = 0,
    env: Optional[Dict[str, str]] = None,
    capture: bool = False,
    secrets: Optional[List[str]] = None,
) -> CmdResult:
    """Run a subprocess (no ``shell=True``).

    With ``capture=False`` (the default) the child inherits stdout/stderr so
    the Bridge CLI's progress streams straight into the CI log.

    Never raises on non-zero exit codes. A timeout is reported as exit code
    124. Raises :class:`~bridge.errors.SpawnError` when the process cannot be
    started at all (missing binary, not executable, ...).
    """
    t0 = time.time()

    # If env is provided, merge it onto the current process environment.
    env2 = None
    if env is not None:
        env2 = os.environ.copy()
        env2.update(env)

    command_str = _redact(cmd, secrets)
    timeout = timeout_seconds if timeout_seconds and timeout_seconds > 0 else None

    try:
        proc = subprocess.run(
            cmd,
            cwd=str(cwd) if cwd else None,
            text=True,
            capture_output=capture,
            timeout=timeout,
            env=env2,
        )
    except subprocess.TimeoutExpired as e:
        print(f"⚠️ Command timed out after {timeout}s: {command_str}", file=sys.stderr)
        return CmdResult(
            exit_code=TIMEOUT_EXIT_CODE,
            elapsed_seconds=time.time() - t0,
            command_str=command_str,
            stdout=_as_text(e.stdout),
            stderr=_as_text(e.stderr),
            timed_out=True,
        )
    except OSError as e:
        raise SpawnError(f"Failed to start {cmd[0]!r}: {e}") from e

    return CmdResult(
        exit_code=proc.returncode,
        elapsed_seconds=time.time() - t0,
        command_str=command_str,
        stdout=proc.stdout or "",
        stderr=proc.stderr or "",
    )


def _as_text(value: object) -> str:
    if value is None:
        return ""
    if isinstance(value, bytes):
        return value.decode("utf-8", errors="replace")
    return str(value)
