"""pipeline.inputs

Read the action's inputs once, at the start of the invocation, into an
immutable :class:`ActionInputs`.

Why this exists
---------------
The runtime is driven from three different hosts that pass inputs three
different ways:

* GitHub Actions exports ``with:`` values as ``INPUT_<NAME>`` variables
* Azure DevOps tasks and plain shell steps use ``<NAME>`` variables
* local runs can keep them in a YAML inputs file (and secrets in ``.env``)

Reading the environment at arbitrary points quickly turns into hidden global
state. Instead, everything downstream receives the frozen ``ActionInputs`` and
the request/config objects built from it here.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Union

import yaml

from bridge.errors import ConfigError
from bridge.exit_policy import is_valid_build_status, parse_build_status
from bridge.layout import InstallLayout, read_version_manifest
from bridge.models import AcquisitionRequest, ExitPolicyConfig, POLICY_VIOLATION_EXIT_CODE
from bridge.resolver import DEFAULT_REPOSITORY_URL, BridgeRepository, explicit_version
from pipeline.products import PRODUCT_INPUT_NAMES, PRODUCTS, SECRET_INPUTS, ProductInfo

logger = logging.getLogger(__name__)

_TRUE = {"true", "1", "yes", "y", "on"}
_FALSE = {"false", "0", "no", "n", "off"}


def parse_bool(value: Any, *, default: bool = False, name: str = "") -> bool:
    if value is None:
        return default
    if isinstance(value, bool):
        return value
    v = str(value).strip().lower()
    if not v:
        return default
    if v in _TRUE:
        return True
    if v in _FALSE:
        return False
    raise ConfigError(f"Invalid boolean value for {name or 'input'}: {value!r}")


def parse_int(value: Any, *, default: int, name: str = "") -> int:
    if value is None or str(value).strip() == "":
        return default
    try:
        return int(str(value).strip())
    except ValueError as e:
        raise ConfigError(f"Invalid integer value for {name or 'input'}: {value!r}") from e


class InputSource:
    """Look up raw input values.

    Order: ``INPUT_<NAME>`` env, ``<NAME>`` env, then the YAML inputs file.
    Empty strings count as unset, because GitHub exports every declared
    input, set or not.
    """

    def __init__(
        self,
        environ: Optional[Mapping[str, str]] = None,
        file_values: Optional[Mapping[str, Any]] = None,
    ) -> None:
        self._env = os.environ if environ is None else environ
        self._file = dict(file_values or {})

    @classmethod
    def from_yaml(
        cls,
        path: Union[str, Path],
        environ: Optional[Mapping[str, str]] = None,
    ) -> "InputSource":
        return cls(environ=environ, file_values=load_inputs_file(path))

    def get(self, name: str) -> Optional[str]:
        upper = name.upper()
        for key in (f"INPUT_{upper}", upper):
            val = self._env.get(key)
            if val is not None and str(val).strip() != "":
                return str(val).strip()
        val = self._file.get(name)
        if val is None:
            val = self._file.get(upper)
        if val is None:
            return None
        if isinstance(val, bool):
            return "true" if val else "false"
        if isinstance(val, (list, tuple)):
            return ",".join(str(v) for v in val)
        text = str(val).strip()
        return text or None


def load_inputs_file(path: Union[str, Path]) -> Dict[str, Any]:
    """Load a YAML mapping of input name -> value."""
    p = Path(path)
    if not p.exists():
        raise ConfigError(f"Inputs file not found: {p}")
    try:
        data = yaml.safe_load(p.read_text(encoding="utf-8"))
    except yaml.YAMLError as e:
        raise ConfigError(f"Inputs file is not valid YAML: {p}: {e}") from e
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(f"Inputs file must contain a mapping of input names to values: {p}")
    # Accept an action-style "with:" block as well as a flat mapping.
    if isinstance(data.get("with"), dict):
        data = data["with"]
    return {str(k).strip().lower(): v for k, v in data.items()}


@dataclass(frozen=True)
class ActionInputs:
    """Every input the action understands, parsed once."""

    scan_type: Optional[str] = None

    # Bridge CLI acquisition
    bridgecli_download_url: Optional[str] = None
    bridgecli_download_version: Optional[str] = None
    bridgecli_install_directory: Optional[str] = None
    bridgecli_repository_url: Optional[str] = None
    network_airgap: bool = False
    bridgecli_thin_client: bool = False
    bridgecli_disable_update: bool = False
    bridgecli_timeout_seconds: int = 0

    # Run / reporting
    include_diagnostics: bool = False
    mark_build_status: Optional[str] = None
    policy_violation_exit_code: int = POLICY_VIOLATION_EXIT_CODE
    return_status: bool = True
    github_token: Optional[str] = None
    output_directory: Optional[str] = None

    # Product-specific raw values, keyed by input name (see pipeline.products)
    product_values: Dict[str, str] = field(default_factory=dict)

    def value(self, name: str) -> Optional[str]:
        return self.product_values.get(name)

    def flag(self, name: str, default: bool = False) -> bool:
        return parse_bool(self.product_values.get(name), default=default, name=name)

    def secrets(self) -> List[str]:
        out = [v for k, v in self.product_values.items() if k in SECRET_INPUTS and v]
        if self.github_token:
            out.append(self.github_token)
        return out


def load_inputs(source: InputSource) -> ActionInputs:
    get = source.get

    product_values: Dict[str, str] = {}
    for name in PRODUCT_INPUT_NAMES:
        val = get(name)
        if val is not None:
            product_values[name] = val

    scan_type = get("scan_type")
    return ActionInputs(
        scan_type=scan_type.lower() if scan_type else None,
        bridgecli_download_url=get("bridgecli_download_url"),
        bridgecli_download_version=get("bridgecli_download_version"),
        bridgecli_install_directory=get("bridgecli_install_directory"),
        bridgecli_repository_url=get("bridgecli_repository_url"),
        network_airgap=parse_bool(get("network_airgap"), name="network_airgap"),
        bridgecli_thin_client=parse_bool(get("bridgecli_thin_client"), name="bridgecli_thin_client"),
        bridgecli_disable_update=parse_bool(
            get("bridgecli_disable_update"), name="bridgecli_disable_update"
        ),
        bridgecli_timeout_seconds=parse_int(
            get("bridgecli_timeout_seconds"), default=0, name="bridgecli_timeout_seconds"
        ),
        include_diagnostics=parse_bool(get("include_diagnostics"), name="include_diagnostics"),
        mark_build_status=get("mark_build_status"),
        policy_violation_exit_code=parse_int(
            get("policy_violation_exit_code"),
            default=POLICY_VIOLATION_EXIT_CODE,
            name="policy_violation_exit_code",
        ),
        return_status=parse_bool(get("return_status"), default=True, name="return_status"),
        github_token=get("github_token"),
        output_directory=get("output_directory"),
        product_values=product_values,
    )


# ---------------------------------------------------------------------------
# Product selection / validation
# ---------------------------------------------------------------------------


def select_product(inputs: ActionInputs) -> ProductInfo:
    """Pick the one product this invocation runs a stage for."""
    if inputs.scan_type:
        product = PRODUCTS.get(inputs.scan_type)
        if product is None:
            raise ConfigError(
                f"Unknown scan_type {inputs.scan_type!r}. Valid: {sorted(PRODUCTS.keys())}"
            )
        return product

    enabled = [p for p in PRODUCTS.values() if inputs.value(p.trigger_input)]
    if not enabled:
        triggers = ", ".join(p.trigger_input for p in PRODUCTS.values())
        raise ConfigError(f"Requires at least one scan type: set one of {triggers}.")
    if len(enabled) > 1:
        keys = ", ".join(p.key for p in enabled)
        raise ConfigError(f"Several products are configured ({keys}); set scan_type to choose one.")
    return enabled[0]


def validate_product_inputs(inputs: ActionInputs, product: ProductInfo) -> None:
    missing = [name for name in product.required_inputs if not inputs.value(name)]
    if missing:
        raise ConfigError(f"Required parameters for {product.label} are missing: {', '.join(missing)}")


# ---------------------------------------------------------------------------
# Core request/config builders
# ---------------------------------------------------------------------------


def build_repository(inputs: ActionInputs) -> BridgeRepository:
    return BridgeRepository(base_url=inputs.bridgecli_repository_url or DEFAULT_REPOSITORY_URL)


def build_acquisition_request(
    inputs: ActionInputs,
    layout: InstallLayout,
    *,
    platform: str,
    product: Optional[ProductInfo] = None,
) -> AcquisitionRequest:
    """Probe the install root once and freeze the acquisition inputs."""
    cached = layout.is_installed
    cached_version = read_version_manifest(layout.manifest) if cached else None
    workflow_version = inputs.value(product.workflow_version_input) if product else None

    return AcquisitionRequest(
        airgap_enabled=inputs.network_airgap,
        thin_client_enabled=inputs.bridgecli_thin_client,
        cached=cached,
        cached_version=cached_version,
        custom_url=inputs.bridgecli_download_url,
        requested_version=explicit_version(inputs.bridgecli_download_version),
        requested_workflow_version=workflow_version,
        platform=platform,
    )


def build_exit_policy(inputs: ActionInputs) -> ExitPolicyConfig:
    if inputs.mark_build_status and not is_valid_build_status(inputs.mark_build_status):
        logger.warning(
            "Unsupported mark_build_status %r; falling back to FAILURE", inputs.mark_build_status
        )
    return ExitPolicyConfig(
        build_status_mode=parse_build_status(inputs.mark_build_status),
        policy_violation_exit_code=inputs.policy_violation_exit_code,
    )
