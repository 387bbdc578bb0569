"""bridge.models

Small, immutable data contracts shared by the resolver, the exit policy and
the orchestration layer.

Every object here is constructed once per invocation (from inputs read at the
start of the run) and passed by value. Nothing in this module reads the
environment.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Union

POLICY_VIOLATION_EXIT_CODE = 8


class ConfigErrorKind(str, Enum):
    """Reasons the resolver can refuse to produce a download decision."""

    AIRGAP_BINARY_UNAVAILABLE = "airgap_binary_unavailable"


class BuildStatus(str, Enum):
    """How a policy violation should be reported to the CI system."""

    SUCCESS = "SUCCESS"
    FAILURE = "FAILURE"
    UNSTABLE = "UNSTABLE"


# ---------------------------------------------------------------------------
# Acquisition
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class AcquisitionRequest:
    """Everything the resolver needs to decide how to obtain the Bridge CLI.

    ``cached`` / ``cached_version`` describe the installation root as probed
    once at startup. ``platform`` is only used to render default repository
    URLs.
    """

    airgap_enabled: bool = False
    thin_client_enabled: bool = False
    cached: bool = False
    cached_version: Optional[str] = None
    custom_url: Optional[str] = None
    requested_version: Optional[str] = None
    requested_workflow_version: Optional[str] = None
    platform: str = "linux64"

    @property
    def effective_workflow_version(self) -> Optional[str]:
        # Workflow pins only exist for the thin client.
        if not self.thin_client_enabled:
            return None
        return self.requested_workflow_version


@dataclass(frozen=True)
class Skip:
    """Use the cached binary as-is."""

    def describe(self) -> str:
        return "skip download (using cached Bridge CLI)"


@dataclass(frozen=True)
class DownloadLatest:
    source: str

    def describe(self) -> str:
        return f"download latest Bridge CLI from {self.source}"


@dataclass(frozen=True)
class DownloadVersion:
    version: str
    source: str

    def describe(self) -> str:
        return f"download Bridge CLI {self.version} from {self.source}"


@dataclass(frozen=True)
class DownloadFromCustomUrl:
    """Download from a user-supplied URL.

    ``version`` is the explicitly requested version, if any. When it is
    ``None`` the URL is assumed to already encode the desired version.
    """

    url: str
    version: Optional[str] = None

    def describe(self) -> str:
        suffix = f" (version {self.version})" if self.version else ""
        return f"download Bridge CLI from custom URL {self.url}{suffix}"


@dataclass(frozen=True)
class Error:
    reason: ConfigErrorKind

    def describe(self) -> str:
        return f"configuration error: {self.reason.value}"


AcquisitionDecision = Union[Skip, DownloadLatest, DownloadVersion, DownloadFromCustomUrl, Error]

DOWNLOAD_DECISIONS = (DownloadLatest, DownloadVersion, DownloadFromCustomUrl)


# ---------------------------------------------------------------------------
# Exit policy
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ExitPolicyConfig:
    build_status_mode: BuildStatus = BuildStatus.FAILURE
    policy_violation_exit_code: int = POLICY_VIOLATION_EXIT_CODE


@dataclass(frozen=True)
class ExitOutcome:
    """Result of classifying one Bridge CLI exit code.

    ``reported_exit_code`` is always the raw process exit code; the policy only
    changes the pass/fail interpretation and the message.
    """

    reported_exit_code: int
    is_policy_violation: bool
    treated_as_failure: bool
    message: str
    build_status_mode: BuildStatus = BuildStatus.FAILURE

    @property
    def is_unstable(self) -> bool:
        return (
            self.is_policy_violation
            and not self.treated_as_failure
            and self.build_status_mode is BuildStatus.UNSTABLE
        )
