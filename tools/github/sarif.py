"""tools/github/sarif.py

All GitHub code-scanning HTTP calls live here.

GitHub expects the SARIF document gzip-compressed and base64-encoded, posted
to ``/repos/{owner}/{repo}/code-scanning/sarifs`` together with the commit
and ref the analysis belongs to. The API answers 202 with an upload id that
can be polled; we only record it.
"""

from __future__ import annotations

import base64
import gzip
from pathlib import Path
from typing import Any, Dict, Optional

import requests

from bridge.errors import UploadError

from .types import GitHubConfig

# GitHub rejects compressed uploads above 10 MB.
MAX_COMPRESSED_BYTES = 10 * 1024 * 1024


def _auth_headers(cfg: GitHubConfig) -> Dict[str, str]:
    return {
        "Authorization": f"Bearer {cfg.token}",
        "Accept": "application/vnd.github+json",
        "X-GitHub-Api-Version": "2022-11-28",
    }


def encode_sarif(sarif_path: Path) -> str:
    """gzip + base64 the SARIF file, as the code-scanning API requires."""
    raw = Path(sarif_path).read_bytes()
    compressed = gzip.compress(raw)
    if len(compressed) > MAX_COMPRESSED_BYTES:
        raise UploadError(
            f"SARIF report {sarif_path} is {len(compressed)} bytes compressed; "
            f"GitHub accepts at most {MAX_COMPRESSED_BYTES}."
        )
    return base64.b64encode(compressed).decode("ascii")


def upload_sarif(
    cfg: GitHubConfig,
    sarif_path: Path,
    *,
    session: Optional[requests.Session] = None,
    tool_name: Optional[str] = None,
) -> Dict[str, Any]:
    """Upload one SARIF report. Returns the API response JSON (id, url)."""
    p = Path(sarif_path)
    if not p.is_file():
        raise UploadError(f"SARIF report not found: {p}")

    payload: Dict[str, Any] = {
        "commit_sha": cfg.sha,
        "ref": cfg.ref,
        "sarif": encode_sarif(p),
    }
    if tool_name:
        payload["tool_name"] = tool_name

    url = f"{cfg.api_url}/repos/{cfg.owner}/{cfg.repo}/code-scanning/sarifs"
    s = session or requests.Session()
    try:
        resp = s.post(url, json=payload, headers=_auth_headers(cfg), timeout=30)
    except requests.RequestException as e:
        raise UploadError(f"SARIF upload request failed: {e}") from e

    if resp.status_code == 403:
        raise UploadError(
            "SARIF upload forbidden (403). The token needs the 'security-events: write' permission."
        )
    if not resp.ok:
        raise UploadError(f"SARIF upload failed: HTTP {resp.status_code} {resp.text[:200]!r}")

    try:
        return resp.json() or {}
    except ValueError:
        return {}
