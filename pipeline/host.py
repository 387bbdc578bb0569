"""pipeline.host

Report messages, outputs and the final status to the CI system running us.

Each CI host has its own text protocol on stdout:

* GitHub Actions: ``::warning::`` workflow commands, outputs appended to the
  file named by ``$GITHUB_OUTPUT``
* Azure Pipelines: ``##vso[...]`` logging commands
* anything else: plain console lines

Debug detail goes through :mod:`logging` so ``--verbose`` controls it
independently of the host.
"""

from __future__ import annotations

import logging
import os
import sys
from pathlib import Path
from typing import List, Mapping, Optional, Tuple

from bridge.exit_policy import workflow_failure_message
from bridge.models import ExitOutcome

logger = logging.getLogger(__name__)


class CIHost:
    """Console host; also the base class for CI-specific hosts."""

    name = "console"

    def __init__(self, stream=None) -> None:
        self._stream = stream
        self.outputs: List[Tuple[str, str]] = []
        self.failed_message: Optional[str] = None
        self.unstable = False

    def _emit(self, line: str) -> None:
        print(line, file=self._stream or sys.stdout, flush=True)

    def info(self, message: str) -> None:
        self._emit(message)

    def debug(self, message: str) -> None:
        logger.debug(message)

    def warning(self, message: str) -> None:
        self._emit(f"⚠️ {message}")

    def error(self, message: str) -> None:
        self._emit(f"❌ {message}")

    def set_output(self, name: str, value: object) -> None:
        self.outputs.append((name, str(value)))
        self._emit(f"{name}={value}")

    def mark_unstable(self, message: str) -> None:
        self.unstable = True
        self.warning(message)

    def set_failed(self, message: str) -> None:
        self.failed_message = message
        self.error(message)


def _escape_data(value: str) -> str:
    return str(value).replace("%", "%25").replace("\r", "%0D").replace("\n", "%0A")


class GitHubActionsHost(CIHost):
    name = "github"

    def __init__(self, stream=None, output_file: Optional[str] = None) -> None:
        super().__init__(stream)
        self._output_file = output_file if output_file is not None else os.environ.get("GITHUB_OUTPUT")

    def debug(self, message: str) -> None:
        super().debug(message)
        self._emit(f"::debug::{_escape_data(message)}")

    def warning(self, message: str) -> None:
        self._emit(f"::warning::{_escape_data(message)}")

    def error(self, message: str) -> None:
        self._emit(f"::error::{_escape_data(message)}")

    def set_output(self, name: str, value: object) -> None:
        self.outputs.append((name, str(value)))
        if not self._output_file:
            # Deprecated fallback for runners without GITHUB_OUTPUT.
            self._emit(f"::set-output name={name}::{_escape_data(str(value))}")
            return
        with Path(self._output_file).open("a", encoding="utf-8") as f:
            f.write(f"{name}={value}\n")


class AzurePipelinesHost(CIHost):
    name = "azure"

    def debug(self, message: str) -> None:
        super().debug(message)
        self._emit(f"##[debug]{message}")

    def warning(self, message: str) -> None:
        self._emit(f"##vso[task.logissue type=warning]{_escape_data(message)}")

    def error(self, message: str) -> None:
        self._emit(f"##vso[task.logissue type=error]{_escape_data(message)}")

    def set_output(self, name: str, value: object) -> None:
        self.outputs.append((name, str(value)))
        self._emit(f"##vso[task.setvariable variable={name};isOutput=true]{value}")

    def mark_unstable(self, message: str) -> None:
        super().mark_unstable(message)
        self._emit("##vso[task.complete result=SucceededWithIssues;]")

    def set_failed(self, message: str) -> None:
        super().set_failed(message)
        self._emit(f"##vso[task.complete result=Failed;]{_escape_data(message)}")


HOSTS = {
    "console": CIHost,
    "github": GitHubActionsHost,
    "azure": AzurePipelinesHost,
}


def detect_host(environ: Optional[Mapping[str, str]] = None, *, stream=None) -> CIHost:
    env = os.environ if environ is None else environ
    if str(env.get("GITHUB_ACTIONS", "")).lower() == "true":
        return GitHubActionsHost(stream, output_file=env.get("GITHUB_OUTPUT", ""))
    if str(env.get("TF_BUILD", "")).lower() == "true":
        return AzurePipelinesHost(stream)
    return CIHost(stream)


def build_host(kind: str = "auto", *, environ: Optional[Mapping[str, str]] = None) -> CIHost:
    if kind == "auto":
        return detect_host(environ)
    if kind not in HOSTS:
        raise ValueError(f"Unknown host {kind!r}. Valid: {sorted(HOSTS)} or 'auto'")
    if kind == "github":
        env = os.environ if environ is None else environ
        return GitHubActionsHost(output_file=env.get("GITHUB_OUTPUT", ""))
    return HOSTS[kind]()


def report_outcome(host: CIHost, outcome: ExitOutcome) -> None:
    """Surface an outcome without touching the exit code.

    failure -> error annotation + failed step
    unstable -> warning + "succeeded with issues"
    success -> info line
    """
    if outcome.treated_as_failure:
        host.error(outcome.message)
        host.set_failed(workflow_failure_message(outcome))
        return
    if outcome.is_unstable:
        host.mark_unstable(outcome.message)
        return
    if outcome.is_policy_violation:
        host.warning(outcome.message)
        return
    host.info(outcome.message)
