"""tools/artifacts.py

Artifact upload collaborator.

Artifacts (diagnostics, SARIF reports) are "uploaded" into a run-scoped
artifact directory that the surrounding workflow publishes with its own
upload step (``actions/upload-artifact``, ``PublishPipelineArtifact``). Keeping
the store on the filesystem means the Python side never needs CI-service
credentials.
"""

from __future__ import annotations

import shutil
from dataclasses import dataclass
from pathlib import Path
from typing import List, Union

from bridge.errors import UploadError


@dataclass(frozen=True)
class ArtifactRef:
    name: str
    path: Path
    files: List[str]
    size: int


def _dir_size(p: Path) -> int:
    return sum(f.stat().st_size for f in p.rglob("*") if f.is_file())


class ArtifactStore:
    """Copy files or directories under ``root/<name>``."""

    def __init__(self, root: Union[str, Path]) -> None:
        self.root = Path(root)

    def upload_artifact(self, name: str, path: Union[str, Path]) -> ArtifactRef:
        src = Path(path)
        if not name or "/" in name or "\\" in name or name in {".", ".."}:
            raise UploadError(f"Invalid artifact name: {name!r}")
        if not src.exists():
            raise UploadError(f"Artifact source does not exist: {src}")

        dest = self.root / name
        try:
            dest.mkdir(parents=True, exist_ok=True)
            if src.is_dir():
                shutil.copytree(src, dest, dirs_exist_ok=True)
            else:
                shutil.copy2(src, dest / src.name)
        except OSError as e:
            raise UploadError(f"Failed to store artifact {name!r}: {e}") from e

        files = sorted(str(f.relative_to(dest)) for f in dest.rglob("*") if f.is_file())
        return ArtifactRef(name=name, path=dest, files=files, size=_dir_size(dest))
