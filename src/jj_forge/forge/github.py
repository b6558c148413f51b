"""GitHub forge over the REST API.

Implements the Forge protocol with a sync httpx client. Reads the token and
API base from constructor arguments or environment variables. Idempotent
reads are retried with tenacity on transient failures; creating a pull
request is never retried, so a lost response cannot open it twice.
"""

from __future__ import annotations

import logging
import os
from typing import Any

import httpx
import tenacity

from jj_forge.forge.errors import ForgeAuthError, ForgeConfigError, ForgeResponseError
from jj_forge.forge.repo import parse_repo_url
from jj_forge.protocols import ReviewCreateParams, ReviewCreateResult

logger = logging.getLogger(__name__)

TOKEN_ENV_VARS = ("JJ_FORGE_GITHUB_TOKEN", "GITHUB_TOKEN", "GH_TOKEN")
API_URL_ENV_VAR = "JJ_FORGE_GITHUB_API_URL"
DEFAULT_API_URL = "https://api.github.com"

_REVIEW_ID_PREFIX = "pr/"
_RETRYABLE_STATUS_CODES = {500, 502, 503, 504}
_AUTH_ERROR_STATUS_CODES = {401, 403}


def _is_retryable(exc: BaseException) -> bool:
    if isinstance(exc, ForgeResponseError) and exc.status_code is not None:
        return exc.status_code in _RETRYABLE_STATUS_CODES
    # Transport failures arrive wrapped; only a refused connection is safe to retry.
    return isinstance(exc.__cause__, (httpx.ConnectError, httpx.ConnectTimeout))


def _token_from_env() -> str:
    for name in TOKEN_ENV_VARS:
        value = os.environ.get(name, "")
        if value:
            return value
    return ""


class GitHubClient:
    """GitHub implementation of the Forge protocol.

    Usage::

        with GitHubClient() as forge:
            branch = forge.default_branch("git@github.com:owner/repo.git")
    """

    def __init__(
        self,
        token: str | None = None,
        api_url: str | None = None,
        timeout: float = 30.0,
        max_retries: int = 3,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        """Initialize the client.

        Args:
            token: API token. Falls back to JJ_FORGE_GITHUB_TOKEN, GITHUB_TOKEN,
                then GH_TOKEN.
            api_url: API base URL. Falls back to JJ_FORGE_GITHUB_API_URL, then
                to https://api.github.com.
            timeout: Request timeout in seconds.
            max_retries: Attempts for idempotent requests.
            transport: Optional httpx transport (used by tests).

        Raises:
            ForgeConfigError: If no token is provided or found in environment.
        """
        self._token = token or _token_from_env()
        if not self._token:
            raise ForgeConfigError(
                "No GitHub token provided. Pass token= or set one of "
                f"{', '.join(TOKEN_ENV_VARS)}."
            )
        self._api_url = (api_url or os.environ.get(API_URL_ENV_VAR, DEFAULT_API_URL)).rstrip("/")
        self._max_retries = max_retries
        self._client = httpx.Client(
            timeout=timeout,
            transport=transport,
            headers={
                "Accept": "application/vnd.github+json",
                "Authorization": f"Bearer {self._token}",
                "X-GitHub-Api-Version": "2022-11-28",
            },
        )

    # ------------------------------------------------------------------
    # Forge protocol
    # ------------------------------------------------------------------

    def create_review(self, repo_uri: str, params: ReviewCreateParams) -> ReviewCreateResult:
        """Open a pull request, then request reviewers if any were given.

        Raises:
            ForgeConfigError: If ``repo_uri`` is not a GitHub URL.
            ForgeAuthError: On 401/403.
            ForgeResponseError: On any other failure or a malformed payload.
        """
        repo = parse_repo_url(repo_uri)
        data = self._request(
            "POST",
            f"/repos/{repo.slug}/pulls",
            json={
                "title": params.title,
                "body": params.body,
                "head": params.from_branch,
                "base": params.to_branch,
            },
        )
        try:
            number = int(data["number"])
            url = str(data["html_url"])
        except (KeyError, TypeError, ValueError) as exc:
            raise ForgeResponseError(f"Unexpected pull request payload: {data}") from exc
        logger.debug("Created pull request #%d in %s", number, repo.slug)

        if params.reviewers:
            self._request(
                "POST",
                f"/repos/{repo.slug}/pulls/{number}/requested_reviewers",
                json={"reviewers": list(params.reviewers)},
            )
        return ReviewCreateResult(number=number, url=url)

    def format_id(self, number: int) -> str:
        return f"{_REVIEW_ID_PREFIX}{number}"

    def parse_id(self, review_id: str) -> int:
        """Parse ``"pr/<n>"`` or a bare ``"<n>"``.

        Raises:
            ForgeConfigError: If the id is not a positive PR number.
        """
        raw = review_id.removeprefix(_REVIEW_ID_PREFIX)
        if not raw.isdigit() or int(raw) <= 0:
            raise ForgeConfigError(f"invalid review id: {review_id!r}")
        return int(raw)

    def default_branch(self, repo_uri: str) -> str:
        repo = parse_repo_url(repo_uri)
        data = self._get(f"/repos/{repo.slug}")
        branch = data.get("default_branch")
        if not isinstance(branch, str) or not branch:
            raise ForgeResponseError(f"Repository {repo.slug} has no default branch")
        return branch

    # ------------------------------------------------------------------
    # HTTP plumbing
    # ------------------------------------------------------------------

    def _get(self, path: str) -> dict[str, Any]:
        retryer = tenacity.Retrying(
            retry=tenacity.retry_if_exception(_is_retryable),
            wait=tenacity.wait_exponential(multiplier=1, min=1, max=10),
            stop=tenacity.stop_after_attempt(self._max_retries),
            before_sleep=tenacity.before_sleep_log(logger, logging.WARNING),
            reraise=True,
        )
        return retryer(self._request, "GET", path)

    def _request(self, method: str, path: str, **kwargs: Any) -> dict[str, Any]:
        """Execute a single request (no retry) and decode the JSON object."""
        try:
            response = self._client.request(method, f"{self._api_url}{path}", **kwargs)
        except httpx.TransportError as exc:
            raise ForgeResponseError(f"{method} {path} failed: {exc}") from exc

        if response.status_code in _AUTH_ERROR_STATUS_CODES:
            raise ForgeAuthError(
                f"Authentication failed: HTTP {response.status_code} - {response.text}"
            )
        if response.is_error:
            raise ForgeResponseError(
                f"{method} {path} failed: HTTP {response.status_code} - {response.text}",
                status_code=response.status_code,
            )

        try:
            data = response.json()
        except ValueError as exc:
            raise ForgeResponseError(
                f"{method} {path} returned invalid JSON", status_code=response.status_code
            ) from exc
        if not isinstance(data, dict):
            raise ForgeResponseError(
                f"{method} {path} returned unexpected payload: {data}",
                status_code=response.status_code,
            )
        return data

    def close(self) -> None:
        """Close the underlying httpx client."""
        self._client.close()

    def __enter__(self) -> GitHubClient:
        return self

    def __exit__(self, *args: object) -> None:
        self.close()
