"""pipeline.installer

Carry out an :data:`~bridge.models.AcquisitionDecision`.

The resolver only *decides*; this module performs the download, the
extraction into the installation root and the version-marker bookkeeping.
The download and extraction functions are injected so tests never touch the
network.
"""

from __future__ import annotations

import logging
import os
import stat
import tempfile
from pathlib import Path
from typing import Callable, Optional

from bridge.errors import AIRGAP_BINARY_UNAVAILABLE_MESSAGE, ConfigError, DownloadError
from bridge.layout import InstallLayout, manifest_text, parse_versions_text, read_version_manifest
from bridge.models import (
    AcquisitionDecision,
    DownloadFromCustomUrl,
    DownloadLatest,
    DownloadVersion,
    Error,
    Skip,
)
from bridge.resolver import BridgeRepository

logger = logging.getLogger(__name__)

DownloadFn = Callable[[str, Path], Path]
ExtractFn = Callable[[Path, Path], Path]
FetchTextFn = Callable[[str], str]


class BridgeInstaller:
    def __init__(
        self,
        *,
        download_fn: DownloadFn,
        extract_fn: ExtractFn,
        fetch_text_fn: Optional[FetchTextFn] = None,
        repository: Optional[BridgeRepository] = None,
    ) -> None:
        self._download = download_fn
        self._extract = extract_fn
        self._fetch_text = fetch_text_fn
        self._repository = repository or BridgeRepository()

    def install(self, decision: AcquisitionDecision, layout: InstallLayout, *, thin_client: bool = False) -> Path:
        """Return the path of a ready-to-run Bridge CLI binary."""
        if isinstance(decision, Error):
            raise ConfigError(AIRGAP_BINARY_UNAVAILABLE_MESSAGE, kind=decision.reason)

        if isinstance(decision, Skip):
            if not layout.binary.is_file():
                raise ConfigError(f"Bridge CLI executable not found at {layout.binary}")
            return layout.binary

        if isinstance(decision, DownloadLatest):
            url, version = decision.source, self.latest_version(thin_client)
        elif isinstance(decision, DownloadVersion):
            url, version = decision.source, decision.version
        elif isinstance(decision, DownloadFromCustomUrl):
            url, version = decision.url, decision.version
        else:
            raise TypeError(f"Unsupported acquisition decision: {decision!r}")

        with tempfile.TemporaryDirectory(prefix="bridge-cli-") as td:
            archive = Path(td) / Path(url.split("?", 1)[0]).name
            if archive.suffix != ".zip":
                archive = archive.with_name(archive.name + ".zip")
            print(f"📥 Downloading Bridge CLI from {url} ...")
            self._download(url, archive)
            self._extract(archive, layout.root)

        if not layout.binary.is_file():
            raise DownloadError(
                f"Bridge CLI executable {layout.binary.name} not found in the downloaded archive ({url})"
            )
        _ensure_executable(layout.binary)

        installed = read_version_manifest(layout.manifest)
        if installed is None and version:
            layout.manifest.write_text(manifest_text(version, thin_client=thin_client), encoding="utf-8")
            installed = version
        print(f"✅ Bridge CLI {installed or '(unknown version)'} installed at {layout.root}")
        return layout.binary

    def latest_version(self, thin_client: bool = False) -> Optional[str]:
        """Best-effort lookup of the version behind "latest" (for the marker and logs)."""
        if self._fetch_text is None:
            return None
        url = self._repository.latest_versions_url(thin_client)
        try:
            return parse_versions_text(self._fetch_text(url))
        except DownloadError as e:
            logger.debug("Could not determine latest Bridge CLI version from %s: %s", url, e)
            return None


def _ensure_executable(path: Path) -> None:
    if os.name == "nt":
        return
    mode = path.stat().st_mode
    path.chmod(mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
