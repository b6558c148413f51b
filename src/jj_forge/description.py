"""Description rewriting for the forge-parent trailer.

A change records the mutable change it was stacked on in a ``forge-parent``
trailer. These helpers add, update, and strip that trailer while leaving
the rest of the description alone. The trailer paragraph is edited line by
line, so lines the lenient parser tolerates without reading them as
trailers (a cherry-pick note, prose next to a sign-off) survive a rewrite.
"""

from __future__ import annotations

from jj_forge.trailers import (
    TRAILER_PATTERN,
    Trailer,
    format_trailer,
    get_trailer,
    parse_description_trailers,
    scan_trailers,
)

PARENT_TRAILER_KEY = "forge-parent"

_TRAILING_SPACE = " \t\n\r"


def _split_lines(description: str) -> tuple[str, list[str]]:
    """Return the body and the raw lines of the trailer paragraph.

    The line list is empty when the description has no valid trailer
    paragraph; the body is then the whole description, right-trimmed.
    """
    trimmed = description.rstrip(_TRAILING_SPACE)
    if not parse_description_trailers(description):
        return trimmed, []
    lines = trimmed.split("\n")
    block_start = scan_trailers(description).block_start
    body = "\n".join(lines[:block_start]).rstrip(_TRAILING_SPACE)
    return body, lines[block_start:]


def split_description(description: str) -> tuple[str, list[Trailer], bool]:
    """Split a description into ``(body, trailers, has_trailer_block)``.

    The body is everything above the blank line that bounds the trailer
    paragraph, right-trimmed. Without a valid trailer paragraph the whole
    description (right-trimmed) is the body.
    """
    body, block = _split_lines(description)
    if not block:
        return body, [], False
    return body, parse_description_trailers(description), True


def _header_key(line: str) -> str | None:
    match = TRAILER_PATTERN.match(line)
    return match.group(1).lower() if match is not None else None


def _edit_block(block: list[str], key: str, replacement: str | None, *, first_only: bool) -> list[str]:
    """Replace or drop ``key`` headers together with their continuation lines.

    Every other line is kept as is. With ``first_only`` later copies of the
    header are left alone.
    """
    result: list[str] = []
    skipping = False
    done = False
    for line in block:
        if skipping and line.startswith(" "):
            continue
        skipping = False
        if not done and _header_key(line) == key.lower():
            skipping = True
            done = first_only
            if replacement is not None:
                result.append(replacement)
            continue
        result.append(line)
    return result


def _join(body: str, block: list[str]) -> str:
    if not block:
        return body + "\n" if body else "\n"
    paragraph = "\n".join(block)
    if not body:
        return paragraph + "\n"
    return body + "\n\n" + paragraph + "\n"


def update_parent_trailer(description: str, parent_id: str) -> str:
    """Add or update the forge-parent trailer at the end of the description."""
    body, block = _split_lines(description)

    current = get_trailer(parse_description_trailers(description), PARENT_TRAILER_KEY)
    if current is not None and current.key == PARENT_TRAILER_KEY and current.value == parent_id:
        return description

    line = format_trailer(Trailer(PARENT_TRAILER_KEY, parent_id))
    if current is None:
        return _join(body, [*block, line])
    return _join(body, _edit_block(block, PARENT_TRAILER_KEY, line, first_only=True))


def remove_parent_trailer(description: str) -> str:
    """Strip every forge-parent trailer from the description.

    Descriptions without one are returned unchanged.
    """
    body, block = _split_lines(description)
    if not block or get_trailer(parse_description_trailers(description), PARENT_TRAILER_KEY) is None:
        return description
    return _join(body, _edit_block(block, PARENT_TRAILER_KEY, None, first_only=False))


def split_title_body(description: str) -> tuple[str, str]:
    """Split a description into its first line and the remaining text."""
    lines = description.strip().split("\n")
    title = lines[0].strip()
    body = "\n".join(lines[1:]).strip() if len(lines) > 1 else ""
    return title, body
