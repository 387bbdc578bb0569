"""bridge.layout

Canonical on-disk layout of a Bridge CLI installation.

One installation root per client mode, each holding one binary and one
version marker::

    <install_dir>/bridge-cli-bundle/bridge-cli
    <install_dir>/bridge-cli-bundle/versions.txt
    <install_dir>/bridge-cli-thin-client/bridge-cli
    <install_dir>/bridge-cli-thin-client/versions.txt

The goal is to keep the installer, the cache probe and the CLI from
re-implementing their own path heuristics.
"""

from __future__ import annotations

import platform as _platform
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Union

DEFAULT_INSTALL_DIR = Path.home() / ".blackduck" / "integrations"

BUNDLE_DIRNAME = "bridge-cli-bundle"
THIN_CLIENT_DIRNAME = "bridge-cli-thin-client"
VERSION_MANIFEST = "versions.txt"

SUPPORTED_PLATFORMS = ("linux64", "linux_arm", "macosx", "macos_arm", "win64")

_VERSION_RE = re.compile(r"^\d+\.\d+\.\d+([.-][0-9A-Za-z.-]+)?$")


@dataclass(frozen=True)
class InstallLayout:
    """Paths for one installation root."""

    root: Path
    binary: Path
    manifest: Path

    @property
    def is_installed(self) -> bool:
        return self.binary.is_file()


def binary_name(platform: str) -> str:
    return "bridge-cli.exe" if platform.startswith("win") else "bridge-cli"


def install_layout(
    install_dir: Optional[Union[str, Path]] = None,
    *,
    thin_client: bool = False,
    platform: str = "linux64",
) -> InstallLayout:
    base = Path(install_dir).expanduser() if install_dir else DEFAULT_INSTALL_DIR
    root = base / (THIN_CLIENT_DIRNAME if thin_client else BUNDLE_DIRNAME)
    return InstallLayout(
        root=root,
        binary=root / binary_name(platform),
        manifest=root / VERSION_MANIFEST,
    )


def detect_platform(system: Optional[str] = None, machine: Optional[str] = None) -> str:
    """Map the running OS/CPU onto a Bridge CLI platform suffix."""
    system = (system if system is not None else _platform.system()).lower()
    machine = (machine if machine is not None else _platform.machine()).lower()
    is_arm = machine.startswith(("arm", "aarch64"))

    if system == "darwin":
        return "macos_arm" if is_arm else "macosx"
    if system == "windows":
        return "win64"
    return "linux_arm" if is_arm else "linux64"


def parse_versions_text(text: str) -> Optional[str]:
    """Extract the Bridge CLI version from a ``versions.txt`` body.

    Accepts ``bridge-cli-bundle: 2.1.1`` style lines (bundle or thin client)
    and a bare ``2.1.1`` line. Returns None when nothing looks like a version.
    """
    for raw in (text or "").splitlines():
        line = raw.strip()
        if not line or line.startswith("#"):
            continue
        if ":" in line or "=" in line:
            key, val = re.split(r"[:=]", line, maxsplit=1)
            if key.strip() in {BUNDLE_DIRNAME, THIN_CLIENT_DIRNAME, "bridge-cli", "version"}:
                val = val.strip()
                if val:
                    return val
            continue
        if _VERSION_RE.match(line):
            return line
    return None


def read_version_manifest(path: Union[str, Path]) -> Optional[str]:
    """Best-effort read of the version marker at ``path``."""
    p = Path(path)
    if not p.is_file():
        return None
    try:
        return parse_versions_text(p.read_text(encoding="utf-8", errors="replace"))
    except OSError:
        return None


def manifest_text(version: str, *, thin_client: bool = False) -> str:
    key = THIN_CLIENT_DIRNAME if thin_client else BUNDLE_DIRNAME
    return f"{key}: {version}\n"
