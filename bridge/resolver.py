"""bridge.resolver

Acquisition Resolver: decide whether, from where and which version of the
Bridge CLI to fetch.

The decision is a single ordered rule list evaluated top to bottom (first
match wins). It is a pure function of the :class:`~bridge.models.AcquisitionRequest`:
no network, no filesystem, no environment. Callers probe the cache *before*
building the request and perform the chosen action *after* resolving.

Rules
-----
1. Airgap without a cached binary and without a custom URL is a
   configuration error: nothing safe can be fetched.
2. A cached binary is used as-is unless a custom URL or an explicit version
   was requested. An explicit version that matches the cached version also
   short-circuits; "latest" never does.
3. Otherwise download. A custom URL always wins over the default repository.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from bridge.models import (
    AcquisitionDecision,
    AcquisitionRequest,
    ConfigErrorKind,
    DownloadFromCustomUrl,
    DownloadLatest,
    DownloadVersion,
    Error,
    Skip,
)

__all__ = [
    "BridgeRepository",
    "DEFAULT_REPOSITORY",
    "LATEST_VERSION",
    "explicit_version",
    "resolve",
]

LATEST_VERSION = "latest"

DEFAULT_REPOSITORY_URL = (
    "https://repo.blackduck.com/bds-integrations-release/com/blackduck/integration/bridge/binaries"
)


@dataclass(frozen=True)
class BridgeRepository:
    """URL layout of a Bridge CLI binary repository.

    The public repository and internal mirrors share the same layout::

        <base>/<artifact>/latest/<artifact>-<platform>.zip
        <base>/<artifact>/<version>/<artifact>-<version>-<platform>.zip
        <base>/<artifact>/latest/versions.txt
    """

    base_url: str = DEFAULT_REPOSITORY_URL
    bundle_artifact: str = "bridge-cli-bundle"
    thin_client_artifact: str = "bridge-cli-thin-client"

    def artifact(self, thin_client: bool) -> str:
        return self.thin_client_artifact if thin_client else self.bundle_artifact

    def _root(self, thin_client: bool) -> str:
        return f"{self.base_url.rstrip('/')}/{self.artifact(thin_client)}"

    def latest_url(self, platform: str, thin_client: bool = False) -> str:
        artifact = self.artifact(thin_client)
        return f"{self._root(thin_client)}/{LATEST_VERSION}/{artifact}-{platform}.zip"

    def version_url(self, version: str, platform: str, thin_client: bool = False) -> str:
        artifact = self.artifact(thin_client)
        return f"{self._root(thin_client)}/{version}/{artifact}-{version}-{platform}.zip"

    def latest_versions_url(self, thin_client: bool = False) -> str:
        return f"{self._root(thin_client)}/{LATEST_VERSION}/versions.txt"


DEFAULT_REPOSITORY = BridgeRepository()


def explicit_version(value: Optional[str]) -> Optional[str]:
    """Return the pinned version, or None when no concrete version was asked for.

    A literal "latest" (any case) is the same as not pinning a version.
    """
    v = (value or "").strip()
    if not v or v.lower() == LATEST_VERSION:
        return None
    return v


def resolve(
    req: AcquisitionRequest,
    repository: BridgeRepository = DEFAULT_REPOSITORY,
) -> AcquisitionDecision:
    """Map an acquisition request onto exactly one decision variant."""
    custom_url = (req.custom_url or "").strip() or None
    version = explicit_version(req.requested_version)

    # 1. airgap with nothing safe to use
    if req.airgap_enabled and not req.cached and not custom_url:
        return Error(ConfigErrorKind.AIRGAP_BINARY_UNAVAILABLE)

    # 2. cached binary
    if req.cached:
        if not custom_url and not version:
            return Skip()
        if version and req.cached_version and req.cached_version.strip() == version:
            return Skip()

    # 3. download (custom URL > airgap guard > pinned version > latest)
    if custom_url:
        return DownloadFromCustomUrl(url=custom_url, version=version)
    if req.airgap_enabled:
        return Error(ConfigErrorKind.AIRGAP_BINARY_UNAVAILABLE)
    if version:
        return DownloadVersion(
            version=version,
            source=repository.version_url(version, req.platform, req.thin_client_enabled),
        )
    return DownloadLatest(source=repository.latest_url(req.platform, req.thin_client_enabled))
