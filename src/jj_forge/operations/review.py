"""Open a forge review for an uploaded change."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from jj_forge.description import remove_parent_trailer, split_title_body
from jj_forge.exceptions import QueryError, ReviewError
from jj_forge.forge.errors import ForgeClientError
from jj_forge.forge.repo import get_repo_info
from jj_forge.models.config import ReviewRecord, ReviewStatus
from jj_forge.models.results import OpenResult
from jj_forge.models.revision import push_bookmark
from jj_forge.protocols import ReviewCreateParams

if TYPE_CHECKING:
    from jj_forge.forge.config import ConfigManager
    from jj_forge.jj.client import JJClient
    from jj_forge.models.revision import Revision
    from jj_forge.protocols import Forge

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class OpenParams:
    """Parameters for ``review open``."""

    rev: str
    reviewers: tuple[str, ...] = field(default_factory=tuple)
    upstream_remote: str = "up"  # remote the review targets
    fork_remote: str = "og"  # remote holding the push bookmark


def is_uploaded(rev: Revision, remote: str) -> bool:
    """True when ``<remote>/push-<id>`` exists for ``rev``."""
    return rev.is_pushed_to(remote)


def _check_existing(config: ConfigManager, change_id: str) -> None:
    try:
        record = config.find_review_record(change_id)
    except QueryError as exc:
        raise ReviewError(f"failed to read config: {exc}") from exc
    if record is None:
        return
    if record.status == ReviewStatus.OPEN:
        raise ReviewError(f"review already exists for change {change_id}: {record.url}")
    if record.status == ReviewStatus.MERGED:
        raise ReviewError(f"change {change_id} was already merged in review {record.forge_id}")
    # A closed review may be replaced by a new one.
    logger.info("Replacing closed review %s for %s", record.forge_id, change_id)


def open_review(
    jj_client: JJClient,
    forge: Forge,
    config: ConfigManager,
    params: OpenParams,
) -> OpenResult:
    """Open a review for the single change ``params.rev`` and record it.

    Raises:
        QueryError: If the revision or a remote cannot be resolved.
        ReviewError: If the change is not ready for review, already has an
            open or merged review, or the forge rejects the request.
        ConfigError: If the stored review records are malformed.
    """
    try:
        rev = jj_client.rev(params.rev)
    except QueryError as exc:
        raise QueryError(f"failed to resolve revision {params.rev}") from exc

    if not rev.description.strip():
        raise ReviewError(
            f"change {rev.id} has empty description. "
            f"Add a description with: jj describe {rev.id}"
        )
    if not is_uploaded(rev, params.fork_remote):
        raise ReviewError(
            f"change {rev.id} has not been uploaded to {params.fork_remote}. "
            f"Run: jj-forge change upload {rev.id}"
        )
    _check_existing(config, rev.id)

    try:
        upstream_url = jj_client.remote_url(params.upstream_remote)
    except QueryError as exc:
        raise QueryError(f"failed to get remote URL for {params.upstream_remote}") from exc
    try:
        base_branch = forge.default_branch(upstream_url)
        fork = get_repo_info(jj_client, params.fork_remote)
    except ForgeClientError as exc:
        raise ReviewError(f"failed to resolve review branches: {exc}") from exc
    head_branch = f"{fork.owner}:{push_bookmark(rev.id)}"

    title, body = split_title_body(remove_parent_trailer(rev.description))
    logger.info("Opening review for %s (%s -> %s)...", rev.id, head_branch, base_branch)
    try:
        created = forge.create_review(
            upstream_url,
            ReviewCreateParams(
                title=title,
                body=body,
                from_branch=head_branch,
                to_branch=base_branch,
                reviewers=tuple(params.reviewers),
            ),
        )
    except ForgeClientError as exc:
        raise ReviewError(f"failed to create review: {exc}") from exc

    record = ReviewRecord(
        change_id=rev.id,
        forge_id=forge.format_id(created.number),
        url=created.url,
        status=ReviewStatus.OPEN.value,
    )
    config.add_review_record(record)
    return OpenResult(change_id=rev.id, number=created.number, url=created.url)
