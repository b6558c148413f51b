"""Upload a stack of changes to a remote.

Walks the stack parent-first, points each change's forge-parent trailer at
its nearest mutable parent, and pushes whatever is new or changed.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from jj_forge.description import remove_parent_trailer, update_parent_trailer
from jj_forge.exceptions import ConsistencyError, QueryError
from jj_forge.models.results import UploadResult

if TYPE_CHECKING:
    from jj_forge.jj.client import JJClient
    from jj_forge.models.revision import Revision

logger = logging.getLogger(__name__)


def parent_revset(revset: str) -> str:
    """Revset for the immediate parents of ``revset`` outside of it."""
    return f"parents({revset})~({revset})"


def mutable_parent_id(rev: Revision, revmap: dict[str, Revision]) -> str | None:
    """Return the first declared parent of ``rev`` that is still mutable.

    Raises:
        ConsistencyError: If a declared parent was not resolved.
    """
    for parent_id in rev.parents:
        parent = revmap.get(parent_id)
        if parent is None:
            raise ConsistencyError(rev.id, parent_id)
        if parent.is_mutable:
            return parent.id
    return None


def upload(client: JJClient, revset: str, remote: str) -> UploadResult:
    """Update forge-parent trailers and push every change in ``revset``.

    Changes already carrying ``<remote>/push-<id>`` with an unchanged
    description are skipped, so re-running is safe after a failure.

    Raises:
        QueryError: If resolving, describing, or pushing fails. The
            underlying CommandError is chained as ``__cause__``.
        ConsistencyError: If the revset leaves out a needed parent.
    """
    result = UploadResult()
    try:
        stack = client.revs(revset)
    except QueryError as exc:
        raise QueryError(f"failed to get stack for {revset}") from exc
    stack.reverse()  # parents before children
    if not stack:
        return result

    try:
        parents = client.revs(parent_revset(revset))
    except QueryError as exc:
        raise QueryError(f"failed to get parent stack for {revset}") from exc
    revmap = {rev.id: rev for rev in [*stack, *parents]}

    for rev in stack:
        if rev.is_empty:
            logger.info("Skipping empty change: %s", rev.id)
            result.skipped_empty += 1
            continue
        if rev.is_anonymous:
            logger.info("Skipping anonymous change: %s", rev.id)
            result.skipped_anonymous += 1
            continue

        parent_id = mutable_parent_id(rev, revmap)
        if parent_id is not None:
            new_description = update_parent_trailer(rev.description, parent_id)
        else:
            new_description = remove_parent_trailer(rev.description)

        if new_description != rev.description:
            logger.info("Updating trailers for %s...", rev.id)
            try:
                client.run("describe", rev.id, "--no-edit", "-m", new_description)
            except QueryError as exc:
                raise QueryError(f"failed to update trailers for {rev.id}") from exc
            result.trailers_updated += 1
            # The rewritten change is a new commit, any push marker is stale.
        elif rev.is_pushed_to(remote):
            logger.info("Skipping synced change: %s", rev.id)
            result.skipped_synced += 1
            continue

        logger.info("Pushing %s to %s...", rev.id, remote)
        try:
            client.run("git", "push", "--change", rev.id, "--remote", remote, "--allow-new")
        except QueryError as exc:
            raise QueryError(f"failed to push {rev.id}") from exc
        result.pushed += 1

    return result
