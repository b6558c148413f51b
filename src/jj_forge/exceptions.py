"""jj-forge exception hierarchy.

All jj-forge exceptions inherit from ForgeError.
"""

from __future__ import annotations

import enum
from collections.abc import Sequence


class ForgeError(Exception):
    """Base exception for all jj-forge errors."""


class QueryError(ForgeError):
    """Raised when an external command fails or returns an unexpected shape."""


class CommandError(QueryError):
    """Raised by an executor when a jj command exits unsuccessfully."""

    def __init__(
        self,
        args: Sequence[str],
        returncode: int | None = None,
        stderr: str = "",
        *,
        program: str = "jj",
    ) -> None:
        self.command = [program, *args]
        self.returncode = returncode
        self.stderr = stderr
        message = f"command failed: {' '.join(self.command)}"
        if returncode is not None:
            message += f"\nexit status: {returncode}"
        if stderr:
            message += f"\nstderr: {stderr.rstrip()}"
        super().__init__(message)


class OperationCancelled(ForgeError):
    """Raised when the caller cancels before the next external command."""

    def __init__(self, args: Sequence[str]) -> None:
        self.command = list(args)
        super().__init__(f"Cancelled before running: jj {' '.join(args)}")


class ConsistencyError(ForgeError):
    """Raised when a declared parent is missing from the resolved working set.

    Usually means the revset given by the caller did not include an
    ancestor that the stack depends on.
    """

    def __init__(self, change_id: str, parent_id: str) -> None:
        self.change_id = change_id
        self.parent_id = parent_id
        super().__init__(f"Missing parent {parent_id} for {change_id}")


class StackValidationError(ForgeError):
    """Raised when a stack is not linear or not rooted on the expected base.

    Named StackValidationError (not ValidationError) to avoid
    collision with pydantic.ValidationError.
    """

    def __init__(
        self,
        message: str,
        *,
        change_id: str,
        position: int,
        expected_parent: str,
        actual_parents: Sequence[str],
    ) -> None:
        self.change_id = change_id
        self.position = position
        self.expected_parent = expected_parent
        self.actual_parents = list(actual_parents)
        super().__init__(message)

    @property
    def is_merge(self) -> bool:
        return len(self.actual_parents) > 1


class RemoteStateError(ForgeError):
    """Raised when the remote head is not where a push should have left it.

    Another writer most likely pushed to the branch concurrently.
    ``submitted`` counts the pushes that landed before the mismatch.
    """

    def __init__(self, bookmark: str, expected: str, actual: str, *, submitted: int) -> None:
        self.bookmark = bookmark
        self.expected = expected
        self.actual = actual
        self.submitted = submitted
        super().__init__(
            f"Remote head verification failed: expected {expected} at {bookmark}, "
            f"but found {actual}.\n"
            "This might indicate a concurrent push by another developer."
        )


class TrailerErrorKind(str, enum.Enum):
    """Kinds of strict trailer parsing failures."""

    BLANK_LINE = "blank_line"
    NON_TRAILER_LINE = "non_trailer_line"

    def __str__(self) -> str:
        return self.value


class TrailerFormatError(ForgeError):
    """Raised when trailer-only text contains a blank or non-trailer line."""

    def __init__(self, kind: TrailerErrorKind, line: str = "") -> None:
        self.kind = kind
        self.line = line
        if kind is TrailerErrorKind.BLANK_LINE:
            message = "The trailer paragraph can't contain a blank line"
        else:
            message = f"Invalid trailer line: {line}"
        super().__init__(message)


class ConfigError(ForgeError):
    """Raised when the forge section of the repo config cannot be read."""


class ReviewError(ForgeError):
    """Raised when a review cannot be opened for a change."""
