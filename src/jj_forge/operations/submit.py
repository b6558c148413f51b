"""Land a linear stack directly on a remote branch.

Submit fast-forwards the target branch one change at a time. The whole
stack is validated before anything is pushed, and the remote head is
re-read after every push so a concurrent writer is noticed after at most
one push.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from jj_forge.exceptions import ConsistencyError, QueryError, RemoteStateError, StackValidationError
from jj_forge.models.results import SubmitResult
from jj_forge.operations.upload import parent_revset

if TYPE_CHECKING:
    from jj_forge.jj.client import JJClient
    from jj_forge.models.revision import Revision

logger = logging.getLogger(__name__)


def remote_bookmark(branch: str, remote: str) -> str:
    """jj's name for a branch as last seen on a remote, e.g. ``main@og``."""
    return f"{branch}@{remote}"


def _fetch(client: JJClient, remote: str, what: str) -> None:
    try:
        client.run("git", "fetch", "--remote", remote)
    except QueryError as exc:
        raise QueryError(f"{what} from {remote} failed") from exc


def _remote_head(client: JJClient, bookmark: str) -> Revision:
    try:
        heads = client.revs(bookmark)
    except QueryError as exc:
        raise QueryError(f"querying remote bookmark {bookmark} failed") from exc
    if len(heads) != 1:
        raise QueryError(f"expected exactly one revision at {bookmark}, got {len(heads)}")
    return heads[0]


def validate_stack(
    stack: list[Revision],
    base: str,
    revmap: dict[str, Revision],
    bookmark: str,
) -> None:
    """Check that ``stack`` (parent-first) is a linear chain on top of ``base``.

    Raises:
        StackValidationError: On a merge change or a change whose parent is
            not the one before it.
        ConsistencyError: If a parent was not resolved.
    """
    expected_parent = base
    for position, rev in enumerate(stack, start=1):
        if len(rev.parents) > 1:
            raise StackValidationError(
                f"validation failed: revision {rev.id} (position {position} in stack) "
                f"is a merge commit (parents: {', '.join(rev.parents)}).\n"
                "Submit only supports linear stacks.",
                change_id=rev.id,
                position=position,
                expected_parent=expected_parent,
                actual_parents=rev.parents,
            )
        if len(rev.parents) != 1 or rev.parents[0] != expected_parent:
            actual = rev.parents[0] if rev.parents else ""
            raise StackValidationError(
                f"validation failed: revision {rev.id} (position {position} in stack) "
                f"is not a direct child of {bookmark}.\n"
                f"Expected parent: {expected_parent}\n"
                f"Actual parent: {actual}\n"
                f"Please rebase your stack onto {bookmark} before submitting.",
                change_id=rev.id,
                position=position,
                expected_parent=expected_parent,
                actual_parents=rev.parents,
            )
        if expected_parent not in revmap:
            raise ConsistencyError(rev.id, expected_parent)
        expected_parent = rev.id


def submit(client: JJClient, revset: str, remote: str, branch: str) -> SubmitResult:
    """Fast-forward ``branch`` on ``remote`` through every change in ``revset``.

    Raises:
        QueryError: If a jj command fails or the remote head is ambiguous.
        StackValidationError: If the stack is not a linear chain on the
            remote head. Raised before anything is pushed.
        RemoteStateError: If the remote head is not the change just pushed.
            Earlier pushes stay in place.
    """
    result = SubmitResult()
    bookmark = remote_bookmark(branch, remote)

    # Phase 1: fetch and resolve the remote head
    logger.info("Fetching from %s to get current state...", remote)
    _fetch(client, remote, "initial fetch")
    head = _remote_head(client, bookmark)
    logger.info("Current remote head at %s: %s", bookmark, head.id)

    # Phase 2: resolve the stack and its parents
    try:
        stack = client.revs(revset)
    except QueryError as exc:
        raise QueryError(f"getting revisions for {revset} failed") from exc
    if not stack:
        return result
    try:
        parents = client.revs(parent_revset(revset))
    except QueryError as exc:
        raise QueryError(f"getting parent revisions for {revset} failed") from exc
    revmap = {rev.id: rev for rev in [*stack, *parents]}
    revmap[head.id] = head
    stack.reverse()  # parents before children

    # Changes at or below the remote head have already landed.
    stack_ids = [rev.id for rev in stack]
    if head.id in stack_ids:
        landed = stack_ids.index(head.id) + 1
        logger.info("%d change(s) already on %s", landed, bookmark)
        result.already_landed = landed
        stack = stack[landed:]

    # Phase 3: validate everything before the first push
    validate_stack(stack, head.id, revmap, bookmark)

    # Phase 4: push one change at a time and verify the remote head
    for position, rev in enumerate(stack, start=1):
        logger.info("Processing commit %d/%d: %s", position, len(stack), rev)
        logger.info("  Submitting %s to %s...", rev.id, bookmark)
        try:
            client.run("bookmark", "set", branch, "-r", rev.id)
        except QueryError as exc:
            raise QueryError(f"moving bookmark {branch} to {rev.id} failed") from exc
        try:
            client.run("git", "push", "--bookmark", branch, "--remote", remote)
        except QueryError as exc:
            raise QueryError(f"pushing {rev.id} failed") from exc
        result.submitted += 1

        logger.info("  Fetching from %s...", remote)
        _fetch(client, remote, f"fetch after push {position}")
        new_head = _remote_head(client, bookmark)
        if new_head.id != rev.id:
            raise RemoteStateError(bookmark, rev.id, new_head.id, submitted=result.submitted)
        logger.info("  Verified: %s is now at %s", rev.id, bookmark)

    return result
