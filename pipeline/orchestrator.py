"""pipeline.orchestrator

The one sequential run of the action:

    inputs -> product -> acquisition request -> resolve -> install
           -> input JSON -> execute -> classify -> report -> uploads

There is no parallelism: download finishes before execution, the exit code is
the only input to classification, and uploads never feed back into the
outcome.
"""

from __future__ import annotations

import logging
from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Callable, Dict, List, Mapping, Optional

from bridge.errors import (
    AIRGAP_BINARY_UNAVAILABLE_MESSAGE,
    ConfigError,
    SpawnError,
    UploadError,
    WorkflowFailed,
)
from bridge.exit_policy import (
    SPAWN_FAILURE_EXIT_CODE,
    classify,
    describe_exit_code,
    workflow_failure_message,
)
from bridge.layout import install_layout
from bridge.models import AcquisitionDecision, Error, ExitOutcome, Skip
from bridge.resolver import resolve
from pipeline.command import (
    INPUT_FILENAME,
    build_bridge_command,
    build_input_payload,
    github_context,
    sarif_report_path,
)
from pipeline.host import CIHost, report_outcome
from pipeline.inputs import (
    ActionInputs,
    build_acquisition_request,
    build_exit_policy,
    build_repository,
    select_product,
    validate_product_inputs,
)
from pipeline.installer import BridgeInstaller
from pipeline.products import ProductInfo
from tools.artifacts import ArtifactRef
from tools.core_cmd import CmdResult
from tools.github.types import github_config_from_env
from tools.io import write_json

logger = logging.getLogger(__name__)

DIAGNOSTICS_DIRNAME = ".bridge"
DIAGNOSTICS_ARTIFACT = "bridge_diagnostics"
RUN_METADATA_FILENAME = "bridge_run.json"


@dataclass
class Collaborators:
    """Everything with side effects, injected so tests can replace it."""

    installer: BridgeInstaller
    execute_fn: Callable[..., CmdResult]
    artifact_store: Any
    upload_sarif_fn: Optional[Callable[..., Dict[str, Any]]] = None
    platform: str = "linux64"
    environ: Mapping[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class RunRequest:
    inputs: ActionInputs
    host: CIHost
    workdir: Path
    dry_run: bool = False


@dataclass
class RunResult:
    exit_code: int
    product: str
    decision: AcquisitionDecision
    binary: Path
    command: List[str]
    outcome: Optional[ExitOutcome] = None
    artifacts: List[ArtifactRef] = field(default_factory=list)
    sarif_upload: Optional[Dict[str, Any]] = None


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def _redact(cmd: List[str], secrets: List[str]) -> List[str]:
    out = []
    for part in cmd:
        for s in secrets:
            if s:
                part = part.replace(s, "***")
        out.append(part)
    return out


def run_bridge_action(req: RunRequest, c: Collaborators) -> RunResult:
    """Run the action once. Raises on configuration errors and failing outcomes."""
    inputs, host = req.inputs, req.host
    workdir = Path(req.workdir).resolve()

    product = select_product(inputs)
    validate_product_inputs(inputs, product)
    host.info(f"Running Bridge CLI stage for {product.label}")

    layout = install_layout(
        inputs.bridgecli_install_directory,
        thin_client=inputs.bridgecli_thin_client,
        platform=c.platform,
    )
    acq = build_acquisition_request(inputs, layout, platform=c.platform, product=product)
    policy = build_exit_policy(inputs)

    decision = resolve(acq, build_repository(inputs))
    host.debug(f"Acquisition request: {acq}")
    if isinstance(decision, Error):
        # The caller reports ConfigError to the host.
        raise ConfigError(AIRGAP_BINARY_UNAVAILABLE_MESSAGE, kind=decision.reason)
    if isinstance(decision, Skip) and acq.airgap_enabled:
        host.info("Network air gap is enabled, skipping Bridge CLI download.")
    host.info(f"Bridge CLI: {decision.describe()}")

    output_dir = Path(inputs.output_directory).resolve() if inputs.output_directory else workdir / DIAGNOSTICS_DIRNAME
    input_path = output_dir / INPUT_FILENAME
    payload = build_input_payload(
        inputs, product, github=github_context(c.environ, inputs.github_token)
    )
    workflow_version = acq.effective_workflow_version

    if req.dry_run:
        cmd = build_bridge_command(
            layout.binary,
            product,
            input_path,
            workflow_version=workflow_version,
            thin_client=inputs.bridgecli_thin_client,
            disable_update=inputs.bridgecli_disable_update,
            include_diagnostics=inputs.include_diagnostics,
        )
        host.info("  Command : " + " ".join(cmd))
        host.info("  (dry-run: not downloading or executing)")
        return RunResult(exit_code=0, product=product.key, decision=decision, binary=layout.binary, command=cmd)

    binary = c.installer.install(decision, layout, thin_client=inputs.bridgecli_thin_client)
    cmd = build_bridge_command(
        binary,
        product,
        input_path,
        workflow_version=workflow_version,
        thin_client=inputs.bridgecli_thin_client,
        disable_update=inputs.bridgecli_disable_update,
        include_diagnostics=inputs.include_diagnostics,
    )

    secrets = inputs.secrets()
    write_json(input_path, payload)
    started_at = _now_iso()
    elapsed: Optional[float] = None
    try:
        res = c.execute_fn(
            cmd,
            cwd=workdir,
            timeout_seconds=inputs.bridgecli_timeout_seconds,
            secrets=secrets,
        )
        exit_code, elapsed = res.exit_code, res.elapsed_seconds
    except SpawnError as e:
        host.warning(str(e))
        exit_code = SPAWN_FAILURE_EXIT_CODE
    finally:
        # The input document carries tokens; never leave it behind.
        input_path.unlink(missing_ok=True)

    host.debug(f"Bridge CLI exit code {exit_code}: {describe_exit_code(exit_code)}")
    outcome = classify(exit_code, policy)

    if inputs.return_status:
        host.set_output("exit_code", exit_code)
    report_outcome(host, outcome)

    result = RunResult(
        exit_code=exit_code,
        product=product.key,
        decision=decision,
        binary=binary,
        command=_redact(cmd, secrets),
        outcome=outcome,
    )
    # Every executed outcome uploads, failing ones included.
    _upload_reports(req, c, product, workdir, result)

    write_json(
        output_dir / RUN_METADATA_FILENAME,
        build_run_metadata(result, started_at=started_at, elapsed_seconds=elapsed),
    )

    if outcome.treated_as_failure:
        raise WorkflowFailed(workflow_failure_message(outcome), exit_code)
    host.info("Bridge CLI workflow execution completed.")
    return result


def _upload_reports(
    req: RunRequest,
    c: Collaborators,
    product: ProductInfo,
    workdir: Path,
    result: RunResult,
) -> None:
    """Diagnostics + SARIF handling. Failures here are warnings, never outcomes."""
    inputs, host = req.inputs, req.host

    if inputs.include_diagnostics:
        diag_dir = workdir / DIAGNOSTICS_DIRNAME
        if diag_dir.is_dir():
            try:
                result.artifacts.append(c.artifact_store.upload_artifact(DIAGNOSTICS_ARTIFACT, diag_dir))
            except UploadError as e:
                host.warning(f"Diagnostics upload failed: {e}")
        else:
            host.warning(f"No diagnostics found at {diag_dir}")

    if not (product.supports_sarif and inputs.flag(product.sarif_create_input)):
        return

    sarif_path = workdir / sarif_report_path(inputs, product)
    if not sarif_path.is_file():
        host.warning(f"SARIF report not found at {sarif_path}")
        return

    try:
        result.artifacts.append(c.artifact_store.upload_artifact(f"{product.key}_sarif_report", sarif_path))
    except UploadError as e:
        host.warning(f"SARIF artifact upload failed: {e}")

    if not inputs.flag(product.sarif_upload_input):
        return
    cfg = github_config_from_env(inputs.github_token, c.environ)
    if cfg is None or c.upload_sarif_fn is None:
        host.warning("Skipping SARIF upload to GitHub code scanning: github_token or repository context missing")
        return
    try:
        result.sarif_upload = c.upload_sarif_fn(cfg, sarif_path, tool_name=product.sarif_tool_name or None)
        host.info(f"SARIF report uploaded to GitHub code scanning ({cfg.repository})")
    except UploadError as e:
        host.warning(f"SARIF upload to GitHub code scanning failed: {e}")


def build_run_metadata(
    result: RunResult,
    *,
    started_at: str,
    elapsed_seconds: Optional[float],
) -> Dict[str, Any]:
    """Standard metadata dict written after every executed run."""
    outcome = result.outcome
    return {
        "product": result.product,
        "decision": type(result.decision).__name__,
        "decision_detail": asdict(result.decision),
        "binary": str(result.binary),
        "command": " ".join(result.command),
        "started_at": started_at,
        "finished_at": _now_iso(),
        "elapsed_seconds": elapsed_seconds,
        "exit_code": result.exit_code,
        "exit_code_description": describe_exit_code(result.exit_code),
        "build_status_mode": outcome.build_status_mode.value if outcome else None,
        "policy_violation": outcome.is_policy_violation if outcome else None,
        "treated_as_failure": outcome.treated_as_failure if outcome else None,
        "message": outcome.message if outcome else None,
        "artifacts": [a.name for a in result.artifacts],
    }
