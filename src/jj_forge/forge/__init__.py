"""Code forge integration: repository identity, config store, GitHub client."""

from jj_forge.forge.config import ConfigManager
from jj_forge.forge.errors import (
    ForgeAuthError,
    ForgeClientError,
    ForgeConfigError,
    ForgeResponseError,
)
from jj_forge.forge.github import GitHubClient
from jj_forge.forge.repo import RepoInfo, get_repo_info, normalize_repo_url, parse_repo_url

__all__ = [
    "ConfigManager",
    "ForgeAuthError",
    "ForgeClientError",
    "ForgeConfigError",
    "ForgeResponseError",
    "GitHubClient",
    "RepoInfo",
    "get_repo_info",
    "normalize_repo_url",
    "parse_repo_url",
]
