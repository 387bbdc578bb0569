"""tools/download.py

All Bridge CLI HTTP downloads live here.

Design goals:
  - Keep network I/O separated from the acquisition decision.
  - Stream archives to disk (bundles are large).
  - Let the HTTP session own its retry policy; callers never loop.
"""

from __future__ import annotations

import shutil
import zipfile
from pathlib import Path
from typing import Optional

import requests
from requests.adapters import HTTPAdapter, Retry

from bridge.errors import DownloadError

DEFAULT_TIMEOUT_SECONDS = 60
CHUNK_SIZE = 1024 * 1024


def build_session(retries: int = 3, backoff_factor: float = 1.0) -> requests.Session:
    """requests session that retries idempotent GETs on transient failures."""
    retry = Retry(
        total=retries,
        backoff_factor=backoff_factor,
        status_forcelist=(429, 500, 502, 503, 504),
        allowed_methods=frozenset({"GET", "HEAD"}),
    )
    session = requests.Session()
    adapter = HTTPAdapter(max_retries=retry)
    session.mount("https://", adapter)
    session.mount("http://", adapter)
    return session


def download(
    url: str,
    destination: Path,
    *,
    session: Optional[requests.Session] = None,
    timeout: int = DEFAULT_TIMEOUT_SECONDS,
) -> Path:
    """Download ``url`` to ``destination`` (a file path). Returns the path."""
    s = session or requests.Session()
    destination = Path(destination)
    destination.parent.mkdir(parents=True, exist_ok=True)

    try:
        with s.get(url, stream=True, timeout=timeout) as resp:
            if resp.status_code == 404:
                raise DownloadError(f"Bridge CLI archive not found (404): {url}")
            resp.raise_for_status()
            with destination.open("wb") as f:
                for chunk in resp.iter_content(chunk_size=CHUNK_SIZE):
                    if chunk:
                        f.write(chunk)
    except requests.RequestException as e:
        destination.unlink(missing_ok=True)
        raise DownloadError(f"Failed to download {url}: {e}") from e

    return destination


def fetch_text(
    url: str,
    *,
    session: Optional[requests.Session] = None,
    timeout: int = 15,
) -> str:
    """GET a small text document (e.g. ``versions.txt``)."""
    s = session or requests.Session()
    try:
        resp = s.get(url, timeout=timeout)
        resp.raise_for_status()
    except requests.RequestException as e:
        raise DownloadError(f"Failed to fetch {url}: {e}") from e
    return resp.text


def _safe_target(root: Path, member: str) -> Path:
    target = (root / member).resolve()
    if target != root and root not in target.parents:
        raise DownloadError(f"Refusing to extract {member!r} outside {root}")
    return target


def extract_zip(archive: Path, destination: Path) -> Path:
    """Extract ``archive`` into ``destination``.

    When the archive holds a single top-level directory (the usual
    ``bridge-cli-bundle-linux64/`` shape), its contents are moved up so the
    binary lands directly in ``destination``.
    """
    destination = Path(destination)
    staging = destination.parent / f".{destination.name}.extract"
    if staging.exists():
        shutil.rmtree(staging)
    staging.mkdir(parents=True)
    root = staging.resolve()

    try:
        with zipfile.ZipFile(archive) as zf:
            for info in zf.infolist():
                _safe_target(root, info.filename)
            zf.extractall(staging)
            # zipfile drops unix permissions; restore the executable bits.
            for info in zf.infolist():
                mode = (info.external_attr >> 16) & 0o777
                if mode and not info.is_dir():
                    (staging / info.filename).chmod(mode)
    except zipfile.BadZipFile as e:
        shutil.rmtree(staging, ignore_errors=True)
        raise DownloadError(f"Downloaded file is not a valid zip archive: {archive}") from e
    except DownloadError:
        shutil.rmtree(staging, ignore_errors=True)
        raise

    entries = list(staging.iterdir())
    content_root = entries[0] if len(entries) == 1 and entries[0].is_dir() else staging

    if destination.exists():
        shutil.rmtree(destination)
    shutil.move(str(content_root), str(destination))
    shutil.rmtree(staging, ignore_errors=True)
    return destination
