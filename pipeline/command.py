# pipeline/command.py
"""Bridge CLI command construction.

The Bridge CLI is driven by a stage name on the command line plus a JSON
input document (``--input``) carrying the product's connection settings.
Commands are always returned as a list (safe, no shell).
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional

from pipeline.inputs import ActionInputs, parse_bool
from pipeline.products import ProductInfo

INPUT_FILENAME = "bridge_input.json"


def _set_dotted(target: Dict[str, Any], dotted: str, value: Any) -> None:
    parts = dotted.split(".")
    node = target
    for part in parts[:-1]:
        node = node.setdefault(part, {})
    node[parts[-1]] = value


def _coerce(name: str, raw: str, product: ProductInfo) -> Any:
    if name in product.list_inputs:
        return [x.strip() for x in raw.split(",") if x.strip()]
    lowered = raw.strip().lower()
    if lowered in {"true", "false"}:
        return parse_bool(lowered)
    return raw


def build_input_payload(
    inputs: ActionInputs,
    product: ProductInfo,
    *,
    github: Optional[Mapping[str, Any]] = None,
) -> Dict[str, Any]:
    """Build the Bridge CLI input document for ``product``.

    Unset inputs are left out so Bridge applies its own defaults.
    """
    section: Dict[str, Any] = {}
    for name, dotted in product.input_map.items():
        raw = inputs.value(name)
        if raw is None:
            continue
        _set_dotted(section, dotted, _coerce(name, raw, product))

    if product.supports_sarif and inputs.flag(product.sarif_create_input):
        # Always pin the report location so it can be picked up afterwards.
        _set_dotted(section, "reports.sarif.create", True)
        _set_dotted(section, "reports.sarif.file.path", sarif_report_path(inputs, product))

    data: Dict[str, Any] = {product.key: section}
    if github:
        data["github"] = dict(github)
    return {"data": data}


def sarif_report_path(inputs: ActionInputs, product: ProductInfo) -> str:
    return inputs.value(product.sarif_file_path_input) or product.sarif_default_path


def github_context(environ: Mapping[str, str], token: Optional[str]) -> Dict[str, Any]:
    """Repository context Bridge uses for PR comments and fix PRs."""
    if not token or not environ.get("GITHUB_REPOSITORY"):
        return {}
    owner, _, name = environ.get("GITHUB_REPOSITORY", "").partition("/")
    ctx: Dict[str, Any] = {
        "user": {"token": token},
        "repository": {
            "name": name,
            "owner": {"name": owner},
            "branch": {"name": environ.get("GITHUB_REF_NAME", "")},
        },
    }
    if environ.get("GITHUB_API_URL"):
        ctx["host"] = {"url": environ["GITHUB_API_URL"]}
    ref = environ.get("GITHUB_REF", "")
    if ref.startswith("refs/pull/"):
        ctx["repository"]["pull"] = {"number": ref.split("/")[2]}
    return ctx


def build_bridge_command(
    binary: Path,
    product: ProductInfo,
    input_path: Path,
    *,
    workflow_version: Optional[str] = None,
    thin_client: bool = False,
    disable_update: bool = False,
    include_diagnostics: bool = False,
) -> List[str]:
    stage = product.stage
    if thin_client and workflow_version:
        stage = f"{stage}@{workflow_version}"

    cmd: List[str] = [str(binary), "--stage", stage, "--input", str(input_path)]
    if include_diagnostics:
        cmd.append("--diagnostics")
    if thin_client and not disable_update:
        cmd.append("--update")
    return cmd
