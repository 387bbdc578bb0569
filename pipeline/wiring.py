"""pipeline.wiring

This module is the **composition root** for the Python runtime.

"Composition root" means: the single place where we *assemble* the running
application from its building blocks:

- load configuration / environment variables (``.env`` via python-dotenv)
- choose real implementations (requests session, subprocess, filesystem store)
- build the high-level pipeline facade object

Keeping this wiring in one place prevents configuration and dependency setup
from being duplicated across entrypoints (CLI, composite action, scripts).
"""

from __future__ import annotations

import functools
import os
from pathlib import Path
from typing import Mapping, Optional, Union

from dotenv import load_dotenv

from bridge.layout import detect_platform
from pipeline.inputs import ActionInputs, build_repository
from pipeline.installer import BridgeInstaller
from pipeline.orchestrator import Collaborators
from pipeline.pipeline import BridgeActionPipeline
from tools.artifacts import ArtifactStore
from tools.core_cmd import run_cmd
from tools.download import build_session, download, extract_zip, fetch_text
from tools.github.sarif import upload_sarif

ROOT_DIR = Path(__file__).resolve().parents[1]
ENV_PATH: Path = ROOT_DIR / ".env"

DEFAULT_ARTIFACTS_DIRNAME = "bridge-artifacts"


def load_env(dotenv_path: Optional[Path] = None) -> None:
    """Load ``.env`` from the working directory, then from the repo root.

    Never overrides variables that are already set, so CI-provided secrets
    always win over a developer's local file.
    """
    for p in (dotenv_path or Path.cwd() / ".env", ENV_PATH):
        if p.exists():
            load_dotenv(p, override=False)


def build_pipeline(
    inputs: ActionInputs,
    *,
    workdir: Optional[Union[str, Path]] = None,
    environ: Optional[Mapping[str, str]] = None,
    platform: Optional[str] = None,
) -> BridgeActionPipeline:
    """Build the facade with real network/process/filesystem collaborators."""
    env = dict(os.environ if environ is None else environ)
    session = build_session()
    repository = build_repository(inputs)

    installer = BridgeInstaller(
        download_fn=functools.partial(download, session=session),
        extract_fn=extract_zip,
        fetch_text_fn=functools.partial(fetch_text, session=session),
        repository=repository,
    )

    base = Path(workdir) if workdir else Path.cwd()
    artifacts_root = Path(env.get("BRIDGE_ARTIFACTS_DIR") or base / DEFAULT_ARTIFACTS_DIRNAME)

    collaborators = Collaborators(
        installer=installer,
        execute_fn=run_cmd,
        artifact_store=ArtifactStore(artifacts_root),
        upload_sarif_fn=functools.partial(upload_sarif, session=session),
        platform=platform or detect_platform(),
        environ=env,
    )
    return BridgeActionPipeline(collaborators)
