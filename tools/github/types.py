from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Mapping, Optional

GITHUB_API_URL_DEFAULT = "https://api.github.com"


@dataclass(frozen=True)
class GitHubConfig:
    """Connection settings for GitHub REST API calls."""
    api_url: str
    repository: str
    token: str
    sha: str
    ref: str

    @property
    def owner(self) -> str:
        return self.repository.split("/", 1)[0]

    @property
    def repo(self) -> str:
        return self.repository.split("/", 1)[-1]


def github_config_from_env(
    token: Optional[str],
    environ: Optional[Mapping[str, str]] = None,
) -> Optional[GitHubConfig]:
    """Build a GitHubConfig from the Actions runner environment.

    Returns None when not running inside GitHub Actions or when the token or
    repository context is missing.
    """
    env = os.environ if environ is None else environ
    repository = env.get("GITHUB_REPOSITORY", "")
    sha = env.get("GITHUB_SHA", "")
    ref = env.get("GITHUB_REF", "")
    if not (token and repository and sha and ref):
        return None
    return GitHubConfig(
        api_url=(env.get("GITHUB_API_URL") or GITHUB_API_URL_DEFAULT).rstrip("/"),
        repository=repository,
        token=token,
        sha=sha,
        ref=ref,
    )
