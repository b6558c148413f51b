"""Protocol definitions for jj-forge.

Defines the pluggable boundaries to external tools (Executor, Forge) and
the frozen dataclasses exchanged across them.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Protocol, runtime_checkable


@runtime_checkable
class Executor(Protocol):
    """Runs one jj command and returns its stdout.

    Implementations raise CommandError when the command fails.
    """

    def __call__(self, args: Sequence[str]) -> str: ...


@dataclass(frozen=True)
class ReviewCreateParams:
    """Parameters for opening a code review."""

    title: str  # typically first line of the description
    body: str
    from_branch: str  # e.g. "owner:push-abc123"
    to_branch: str  # e.g. "main"
    reviewers: tuple[str, ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class ReviewCreateResult:
    """A freshly opened review."""

    number: int
    url: str


@runtime_checkable
class Forge(Protocol):
    """Interface for code forges (GitHub, ...)."""

    def create_review(self, repo_uri: str, params: ReviewCreateParams) -> ReviewCreateResult:
        """Open a new review and return its number and URL."""
        ...

    def format_id(self, number: int) -> str:
        """Format a review number as a string id (e.g. ``"pr/123"``)."""
        ...

    def parse_id(self, review_id: str) -> int:
        """Parse a string id (e.g. ``"pr/123"``) back into a number."""
        ...

    def default_branch(self, repo_uri: str) -> str:
        """Return the repository's default branch name."""
        ...
