"""Revision domain model for jj-forge.

Revision is a read-only snapshot of one jj change as reported by ``jj log``.
"""

from __future__ import annotations

from pydantic import BaseModel

PUSH_BOOKMARK_PREFIX = "push-"


def push_bookmark(change_id: str) -> str:
    """Name of the bookmark ``jj git push --change`` creates for a change."""
    return f"{PUSH_BOOKMARK_PREFIX}{change_id}"


class Revision(BaseModel):
    """Immutable snapshot of a single change.

    Snapshots are never updated in place. A description rewrite only shows
    up in a freshly fetched Revision.
    """

    model_config = {"frozen": True}

    id: str
    parents: tuple[str, ...] = ()
    description: str = ""
    is_mutable: bool = False
    is_empty: bool = False
    is_conflicted: bool = False
    is_divergent: bool = False
    remote_bookmarks: frozenset[str] = frozenset()  # e.g. {"og/push-abc123", "origin/main"}

    def is_pushed_to(self, remote: str) -> bool:
        """True if ``<remote>/push-<id>`` points at this change."""
        return f"{remote}/{push_bookmark(self.id)}" in self.remote_bookmarks

    @property
    def is_anonymous(self) -> bool:
        return not self.description.strip()

    def __str__(self) -> str:
        title = self.description.strip().split("\n", 1)[0]
        if len(title) > 60:
            title = title[:57] + "..."
        return f"{self.id} {title}".rstrip()
