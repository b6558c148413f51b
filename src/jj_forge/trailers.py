"""Trailer parsing and manipulation for change descriptions.

Trailers are ``Key: Value`` lines in the final paragraph of a description,
like::

    Co-authored-by: Name <email@example.com>
    Signed-off-by: Name <email@example.com>

The parser scans backward from the end of the text with an explicit state
machine. Each step takes the previous ``_ScanState`` and a line and returns a
new state, so buffered continuation lines can only leak into a trailer by
being carried forward explicitly.

All list operations are pure: they return new lists and never mutate input.
"""

from __future__ import annotations

import enum
import re
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, replace

from jj_forge.exceptions import TrailerErrorKind, TrailerFormatError

# Keys are alphanumeric with hyphens only (matching jj and git conventions).
TRAILER_PATTERN = re.compile(r"^([a-zA-Z0-9-]+) *: *(.*)$")

_CHERRY_PICK_PREFIX = "(cherry picked from commit "
_SIGNED_OFF_BY = "signed-off-by"
_TRAILING_SPACE = " \t\n\r"


@dataclass(frozen=True)
class Trailer:
    """A single trailer. ``value`` may span lines; continuation lines keep
    their leading whitespace."""

    key: str
    value: str

    def matches(self, key: str) -> bool:
        """Case-insensitive key comparison."""
        return self.key.lower() == key.lower()

    def __str__(self) -> str:
        return format_trailer(self)


@dataclass(frozen=True)
class ScanResult:
    """Raw outcome of a backward scan, before either parse mode applies its rules.

    ``block_start`` is the index (in the right-trimmed text's lines) of the
    first line below the blank line that ended the scan, or 0 when the scan
    reached the top of the text.
    """

    trailers: tuple[Trailer, ...] = ()
    found_blank: bool = False
    found_git_trailer: bool = False
    offending_line: str | None = None
    block_start: int = 0


class _Phase(enum.Enum):
    TRAILER = "trailer"
    CONTINUATION = "continuation"
    DONE = "done"


@dataclass(frozen=True)
class _ScanState:
    phase: _Phase = _Phase.TRAILER
    trailers: tuple[Trailer, ...] = ()  # bottom-to-top
    continuation: tuple[str, ...] = ()  # bottom-to-top
    found_blank: bool = False
    found_git_trailer: bool = False
    offending_line: str | None = None


def _step(state: _ScanState, line: str) -> _ScanState:
    """Advance the backward scan by one line."""
    if line.startswith(" "):
        return replace(
            state,
            phase=_Phase.CONTINUATION,
            continuation=state.continuation + (line,),
        )

    match = TRAILER_PATTERN.match(line)
    if match is not None:
        key, first = match.group(1), match.group(2)
        value_lines = [first, *reversed(state.continuation)]
        value_lines[-1] = value_lines[-1].rstrip(" \t")
        return replace(
            state,
            phase=_Phase.TRAILER,
            trailers=state.trailers + (Trailer(key, "\n".join(value_lines)),),
            continuation=(),
            found_git_trailer=state.found_git_trailer or key.lower() == _SIGNED_OFF_BY,
        )

    if line.startswith(_CHERRY_PICK_PREFIX):
        # Recognized by git but not parseable as a trailer. Anything buffered
        # belongs to the content above it.
        return replace(
            state,
            phase=_Phase.TRAILER,
            continuation=(),
            found_git_trailer=True,
            offending_line=_first_offender(state, line),
        )

    if not line.strip():
        return replace(state, phase=_Phase.DONE, found_blank=True)

    return replace(
        state,
        phase=_Phase.TRAILER,
        continuation=(),
        offending_line=_first_offender(state, line),
    )


def _first_offender(state: _ScanState, line: str) -> str:
    # The offender nearest the end of the text is the one reported.
    return state.offending_line if state.offending_line is not None else line


def scan_trailers(text: str) -> ScanResult:
    """Scan ``text`` backward from its last line and collect trailers.

    Stops at the first blank line. Trailers come back in top-to-bottom order.
    """
    trimmed = text.rstrip(_TRAILING_SPACE)
    if not trimmed:
        return ScanResult()

    lines = trimmed.split("\n")
    state = _ScanState()
    block_start = 0
    for index in range(len(lines) - 1, -1, -1):
        state = _step(state, lines[index])
        if state.phase is _Phase.DONE:
            block_start = index + 1
            break

    return ScanResult(
        trailers=tuple(reversed(state.trailers)),
        found_blank=state.found_blank,
        found_git_trailer=state.found_git_trailer,
        offending_line=state.offending_line,
        block_start=block_start,
    )


def parse_description_trailers(description: str) -> list[Trailer]:
    """Parse trailers from a full change description.

    The trailer paragraph must be separated from the body by a blank line.
    A paragraph with any non-trailer line is rejected unless it also carries
    a recognized git trailer (``Signed-off-by`` or a cherry-pick note).
    Returns an empty list when no valid trailer paragraph exists.
    """
    result = scan_trailers(description)
    if not result.found_blank:
        # Single paragraph, can't be a trailer block.
        return []
    if result.offending_line is not None and not result.found_git_trailer:
        return []
    return list(result.trailers)


def parse_trailers(text: str) -> list[Trailer]:
    """Parse trailer-only text with strict validation.

    Raises:
        TrailerFormatError: On a blank line (``BLANK_LINE``) or any line that
            is not a trailer or continuation (``NON_TRAILER_LINE``).
    """
    result = scan_trailers(text)
    if result.found_blank:
        raise TrailerFormatError(TrailerErrorKind.BLANK_LINE)
    if result.offending_line is not None:
        raise TrailerFormatError(TrailerErrorKind.NON_TRAILER_LINE, result.offending_line)
    return list(result.trailers)


def format_trailer(trailer: Trailer) -> str:
    """Format a single trailer as ``Key: Value``."""
    return f"{trailer.key}: {trailer.value}"


def format_trailers(trailers: Iterable[Trailer]) -> str:
    """Format trailers as a block with no leading or trailing newline."""
    return "\n".join(format_trailer(t) for t in trailers)


def get_trailer(trailers: Iterable[Trailer], key: str) -> Trailer | None:
    """Return the first trailer matching ``key`` (case-insensitive)."""
    for trailer in trailers:
        if trailer.matches(key):
            return trailer
    return None


def get_all_trailers(trailers: Iterable[Trailer], key: str) -> list[Trailer]:
    """Return every trailer matching ``key`` in original order."""
    return [t for t in trailers if t.matches(key)]


def set_trailer(trailers: Sequence[Trailer], key: str, value: str) -> list[Trailer]:
    """Replace the first matching trailer in place, or append one."""
    result = list(trailers)
    for index, trailer in enumerate(result):
        if trailer.matches(key):
            result[index] = Trailer(key, value)
            return result
    result.append(Trailer(key, value))
    return result


def add_trailer(trailers: Sequence[Trailer], key: str, value: str) -> list[Trailer]:
    """Append a trailer; duplicates are allowed."""
    return [*trailers, Trailer(key, value)]


def remove_trailer(trailers: Iterable[Trailer], key: str) -> list[Trailer]:
    """Drop every trailer matching ``key``."""
    return [t for t in trailers if not t.matches(key)]
