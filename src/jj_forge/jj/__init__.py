"""Jujutsu command-line client."""

from jj_forge.jj.client import (
    REVISION_TEMPLATE,
    JJClient,
    SubprocessExecutor,
    parse_revisions,
)

__all__ = [
    "JJClient",
    "REVISION_TEMPLATE",
    "SubprocessExecutor",
    "parse_revisions",
]
