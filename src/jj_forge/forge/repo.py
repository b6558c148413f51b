"""Repository identity from git remote URLs."""

from __future__ import annotations

import re
from typing import TYPE_CHECKING

from pydantic import BaseModel, ConfigDict

from jj_forge.forge.errors import ForgeConfigError

if TYPE_CHECKING:
    from jj_forge.jj.client import JJClient

# Matches GitHub URLs in both SSH and HTTPS formats:
#   git@github.com:owner/repo.git
#   https://github.com/owner/repo.git
#   https://github.com/owner/repo
_GITHUB_URL = re.compile(r"github\.com[:/]([^/]+)/(.+?)(\.git)?/?$")


class RepoInfo(BaseModel):
    """Owner and name of a hosted repository."""

    model_config = ConfigDict(frozen=True)

    owner: str  # user or organization
    name: str

    @property
    def slug(self) -> str:
        return f"{self.owner}/{self.name}"


def parse_repo_url(url: str) -> RepoInfo:
    """Extract owner and repository name from a GitHub remote URL.

    Raises:
        ForgeConfigError: If the URL is not a GitHub URL.
    """
    match = _GITHUB_URL.search(url.strip())
    if match is None:
        raise ForgeConfigError(f"could not parse GitHub URL: {url}")
    name = match.group(2)
    if name.endswith(".git"):
        name = name[: -len(".git")]
    return RepoInfo(owner=match.group(1), name=name)


def normalize_repo_url(url: str) -> str:
    """Normalize an SSH or HTTPS remote URL to ``https://github.com/owner/repo``."""
    info = parse_repo_url(url)
    return f"https://github.com/{info.slug}"


def get_repo_info(client: JJClient, remote: str) -> RepoInfo:
    """Look up ``remote``'s URL and parse the repository it points to."""
    url = client.remote_url(remote)
    try:
        return parse_repo_url(url)
    except ForgeConfigError as exc:
        raise ForgeConfigError(f"could not parse GitHub URL from remote {remote}: {url}") from exc
