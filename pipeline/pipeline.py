"""pipeline.pipeline

This module defines a *single, high-level* object that represents this repo's
primary capability: run the Bridge CLI once for a CI job.

Why this exists
---------------
The behavior is implemented across several modules:

- :mod:`bridge.resolver` / :mod:`bridge.exit_policy` hold the decisions.
- :mod:`pipeline.inputs` / :mod:`pipeline.command` turn inputs into a command.
- :mod:`pipeline.orchestrator` sequences the run.
- :mod:`tools` performs the I/O.

Callers (CLI, tests, other entrypoints) should not wire those together
themselves. The :class:`BridgeActionPipeline` facade gives them one obvious
entrypoint with a small API.
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional, Union

from pipeline.host import CIHost
from pipeline.inputs import ActionInputs
from pipeline.orchestrator import Collaborators, RunRequest, RunResult, run_bridge_action


class BridgeActionPipeline:
    """High-level facade over the orchestrator.

    Build it via :func:`pipeline.wiring.build_pipeline` for real runs, or pass
    fake collaborators directly in tests.
    """

    def __init__(self, collaborators: Collaborators) -> None:
        self._collaborators = collaborators

    @property
    def collaborators(self) -> Collaborators:
        return self._collaborators

    def run(
        self,
        inputs: ActionInputs,
        host: CIHost,
        *,
        workdir: Optional[Union[str, Path]] = None,
        dry_run: bool = False,
    ) -> RunResult:
        req = RunRequest(
            inputs=inputs,
            host=host,
            workdir=Path(workdir) if workdir else Path.cwd(),
            dry_run=dry_run,
        )
        return run_bridge_action(req, self._collaborators)
