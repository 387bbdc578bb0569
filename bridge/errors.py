"""bridge.errors

Exception types raised by the orchestration layer and its collaborators.

The resolver and the classifier never raise; they return values. These types
are for the I/O edges (download, spawn, upload) and for configuration
problems detected before anything is executed.
"""

from __future__ import annotations

from typing import Optional

from bridge.models import ConfigErrorKind


class BridgeError(RuntimeError):
    """Base class for every error this package raises on purpose."""


class ConfigError(BridgeError):
    """Inputs are missing, inconsistent, or forbid acquiring the Bridge CLI."""

    def __init__(self, message: str, kind: Optional[ConfigErrorKind] = None) -> None:
        super().__init__(message)
        self.kind = kind


class DownloadError(BridgeError):
    """Fetching or unpacking the Bridge CLI archive failed."""


class SpawnError(BridgeError):
    """The Bridge CLI process could not be started."""


class UploadError(BridgeError):
    """An artifact or SARIF upload failed."""


class WorkflowFailed(BridgeError):
    """The Bridge CLI outcome must fail the CI step.

    Raised only after the outcome has been reported and the exit code has
    been recorded as an output.
    """

    def __init__(self, message: str, exit_code: int) -> None:
        super().__init__(message)
        self.exit_code = exit_code


AIRGAP_BINARY_UNAVAILABLE_MESSAGE = (
    "Network air gap is enabled but no Bridge CLI is installed and no bridgecli_download_url "
    "was provided. Pre-install the Bridge CLI in the install directory or set a custom download URL."
)
