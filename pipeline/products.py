"""pipeline.products

Central registry of products the Bridge CLI can run a stage for.

Why this exists
---------------
Several parts of the runtime need to agree on the *same* product facts:
- which products are supported (validation, ``scan_type``)
- which input switches a product on (product auto-detection)
- which inputs are mandatory (fail fast with a good error)
- how inputs map onto the Bridge CLI's JSON input document
- whether the product can produce a SARIF report

Defining them once here keeps the inputs loader, the command builder and the
orchestrator from drifting apart.

These entries must remain *pure* data: no environment reads, no I/O.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, FrozenSet, List, Tuple


@dataclass(frozen=True)
class ProductInfo:
    """Static metadata describing one Bridge CLI product stage."""

    key: str
    label: str
    stage: str

    # The input whose presence enables this product when scan_type is unset.
    trigger_input: str
    required_inputs: Tuple[str, ...]

    # input name -> dotted key under data.<key> in the Bridge input JSON
    input_map: Dict[str, str] = field(default_factory=dict)

    # inputs whose value is a comma-separated list in the Bridge input JSON
    list_inputs: FrozenSet[str] = frozenset()

    supports_sarif: bool = False
    sarif_default_path: str = ""
    sarif_tool_name: str = ""

    @property
    def workflow_version_input(self) -> str:
        return f"{self.key}_workflow_version"

    @property
    def sarif_create_input(self) -> str:
        return f"{self.key}_reports_sarif_create"

    @property
    def sarif_file_path_input(self) -> str:
        return f"{self.key}_reports_sarif_file_path"

    @property
    def sarif_upload_input(self) -> str:
        return f"{self.key}_upload_sarif_report"

    @property
    def input_names(self) -> List[str]:
        names = list(self.input_map.keys()) + [self.workflow_version_input]
        if self.supports_sarif:
            names += [self.sarif_create_input, self.sarif_file_path_input, self.sarif_upload_input]
        return sorted(set(names))


_BLACKDUCKSCA = ProductInfo(
    key="blackducksca",
    label="Black Duck SCA",
    stage="blackducksca",
    trigger_input="blackducksca_url",
    required_inputs=("blackducksca_url", "blackducksca_token"),
    input_map={
        "blackducksca_url": "url",
        "blackducksca_token": "token",
        "blackducksca_scan_failure_severities": "scan.failure.severities",
        "blackducksca_scan_full": "scan.full",
        "blackducksca_prcomment_enabled": "automation.prcomment",
        "blackducksca_fixpr_enabled": "fixpr.enabled",
        "blackducksca_reports_sarif_create": "reports.sarif.create",
        "blackducksca_reports_sarif_file_path": "reports.sarif.file.path",
    },
    list_inputs=frozenset({"blackducksca_scan_failure_severities"}),
    supports_sarif=True,
    sarif_default_path=".bridge/Blackduck SCA SARIF Generator/report.sarif.json",
    sarif_tool_name="Black Duck SCA",
)

_POLARIS = ProductInfo(
    key="polaris",
    label="Polaris",
    stage="polaris",
    trigger_input="polaris_server_url",
    required_inputs=("polaris_server_url", "polaris_access_token", "polaris_assessment_types"),
    input_map={
        "polaris_server_url": "serverUrl",
        "polaris_access_token": "accesstoken",
        "polaris_assessment_types": "assessment.types",
        "polaris_application_name": "application.name",
        "polaris_project_name": "project.name",
        "polaris_branch_name": "branch.name",
        "polaris_prcomment_enabled": "prcomment.enabled",
        "polaris_reports_sarif_create": "reports.sarif.create",
        "polaris_reports_sarif_file_path": "reports.sarif.file.path",
    },
    list_inputs=frozenset({"polaris_assessment_types"}),
    supports_sarif=True,
    sarif_default_path=".bridge/Polaris SARIF Generator/report.sarif.json",
    sarif_tool_name="Polaris",
)

_COVERITY = ProductInfo(
    key="coverity",
    label="Coverity",
    stage="connect",
    trigger_input="coverity_url",
    required_inputs=("coverity_url", "coverity_user", "coverity_passphrase"),
    input_map={
        "coverity_url": "connect.url",
        "coverity_user": "connect.user.name",
        "coverity_passphrase": "connect.user.password",
        "coverity_project_name": "connect.project.name",
        "coverity_stream_name": "connect.stream.name",
        "coverity_policy_view": "connect.policy.view",
        "coverity_prcomment_enabled": "automation.prcomment",
    },
)

_SRM = ProductInfo(
    key="srm",
    label="Software Risk Manager",
    stage="srm",
    trigger_input="srm_url",
    required_inputs=("srm_url", "srm_apikey", "srm_assessment_types"),
    input_map={
        "srm_url": "url",
        "srm_apikey": "apikey",
        "srm_assessment_types": "assessment.types",
        "srm_project_name": "project.name",
        "srm_branch_name": "branch.name",
    },
    list_inputs=frozenset({"srm_assessment_types"}),
)


PRODUCTS: Dict[str, ProductInfo] = {p.key: p for p in (_BLACKDUCKSCA, _POLARIS, _COVERITY, _SRM)}

SUPPORTED_PRODUCTS = frozenset(PRODUCTS.keys())

PRODUCT_INPUT_NAMES: Tuple[str, ...] = tuple(
    sorted({name for p in PRODUCTS.values() for name in p.input_names})
)

# Inputs whose values must never reach a log line.
SECRET_INPUTS = frozenset(
    {
        "blackducksca_token",
        "polaris_access_token",
        "coverity_passphrase",
        "srm_apikey",
        "github_token",
    }
)
