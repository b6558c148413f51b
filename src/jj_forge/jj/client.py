"""Client for the Jujutsu (jj) command line.

All interaction with jj goes through an Executor, a callable that runs
``jj <args>`` and returns stdout. The default SubprocessExecutor shells out;
tests substitute a scripted fake.
"""

from __future__ import annotations

import json
import logging
import shlex
import subprocess
import threading
from collections.abc import Mapping, Sequence

from jj_forge.exceptions import CommandError, OperationCancelled, QueryError
from jj_forge.models.revision import Revision
from jj_forge.protocols import Executor

logger = logging.getLogger(__name__)

# One field per template part, space separated, one revision per line.
# The description is JSON-escaped so it never contains a raw newline.
REVISION_TEMPLATE_PARTS: tuple[str, ...] = (
    "change_id.short()",
    "conflict",
    "divergent",
    "!immutable",
    "empty",
    'parents.map(|c| c.change_id().short()).join(",")',
    'remote_bookmarks.map(|b| b.remote() ++ "/" ++ b.name()).join(",")',
    "description.escape_json()",
    '"\\n"',
)
REVISION_TEMPLATE = '++" "++'.join(REVISION_TEMPLATE_PARTS)

_FIELD_COUNT = len(REVISION_TEMPLATE_PARTS) - 1


class SubprocessExecutor:
    """Executor that runs the jj binary with ``subprocess.run``."""

    def __init__(
        self,
        program: str = "jj",
        *,
        env: Mapping[str, str] | None = None,
        timeout: float | None = None,
    ) -> None:
        self.program = program
        self.env = dict(env) if env is not None else None
        self.timeout = timeout

    def __call__(self, args: Sequence[str]) -> str:
        command = [self.program, *args]
        logger.debug("Running %s", shlex.join(command))
        try:
            proc = subprocess.run(
                command,
                capture_output=True,
                text=True,
                check=False,
                env=self.env,
                timeout=self.timeout,
            )
        except FileNotFoundError as exc:
            raise CommandError(args, None, f"{self.program} not found: {exc}", program=self.program) from exc
        except subprocess.TimeoutExpired as exc:
            raise CommandError(
                args, None, f"timed out after {self.timeout}s", program=self.program
            ) from exc
        if proc.returncode != 0:
            raise CommandError(args, proc.returncode, proc.stderr, program=self.program)
        return proc.stdout


def _split_csv(field: str) -> list[str]:
    return field.split(",") if field else []


def parse_revisions(output: str) -> list[Revision]:
    """Parse ``jj log`` output produced with REVISION_TEMPLATE.

    Revisions are returned in jj's order (children before parents).

    Raises:
        QueryError: If a line has too few fields or a malformed description.
    """
    revisions: list[Revision] = []
    stripped = output.strip()
    if not stripped:
        return revisions
    for line in stripped.split("\n"):
        parts = line.split(" ", _FIELD_COUNT - 1)
        if len(parts) < _FIELD_COUNT:
            raise QueryError(f"unexpected log entry format: {line!r}")
        try:
            description = json.loads(parts[7])
        except json.JSONDecodeError as exc:
            raise QueryError(f"bad json encoding in log entry: {line!r}") from exc
        if not isinstance(description, str):
            raise QueryError(f"description is not a string in log entry: {line!r}")
        revisions.append(
            Revision(
                id=parts[0],
                is_conflicted=parts[1] == "true",
                is_divergent=parts[2] == "true",
                is_mutable=parts[3] == "true",
                is_empty=parts[4] == "true",
                parents=tuple(_split_csv(parts[5])),
                remote_bookmarks=frozenset(_split_csv(parts[6])),
                description=description,
            )
        )
    return revisions


class JJClient:
    """Runs jj commands against one repository.

    Args:
        repository: Path passed as ``-R``. None uses jj's own discovery.
        executor: Command runner. Defaults to SubprocessExecutor.
        cancel: Optional event checked before every command. Once set, the
            next command raises OperationCancelled instead of running.
    """

    def __init__(
        self,
        repository: str | None = None,
        executor: Executor | None = None,
        *,
        cancel: threading.Event | None = None,
    ) -> None:
        self.repository = repository
        self._executor = executor if executor is not None else SubprocessExecutor()
        self._cancel = cancel

    def run(self, *args: str) -> str:
        """Execute a jj command and return its stdout."""
        if self._cancel is not None and self._cancel.is_set():
            raise OperationCancelled(args)
        full_args = list(args)
        if self.repository:
            full_args = ["-R", self.repository, *full_args]
        return self._executor(full_args)

    def root(self) -> str:
        """Return the workspace root path."""
        try:
            out = self.run("root")
        except CommandError as exc:
            raise QueryError("failed to get root path") from exc
        return out.strip()

    def revs(self, revset: str) -> list[Revision]:
        """Return every revision in ``revset``, children first."""
        try:
            out = self.run("log", "--no-graph", "--template", REVISION_TEMPLATE, "-r", revset)
        except CommandError as exc:
            raise QueryError(f"failed to get commit info for {revset}") from exc
        return parse_revisions(out)

    def rev(self, revset: str) -> Revision:
        """Return the single revision in ``revset``.

        Raises:
            QueryError: If the revset does not resolve to exactly one revision.
        """
        revisions = self.revs(revset)
        if len(revisions) != 1:
            raise QueryError(
                f"failed to get one revision for revset {revset} (got {len(revisions)})"
            )
        return revisions[0]

    def remote_url(self, remote: str) -> str:
        """Return the URL configured for a git remote."""
        try:
            out = self.run("git", "remote", "list")
        except CommandError as exc:
            raise QueryError("failed to list remotes") from exc
        for line in out.strip().split("\n"):
            parts = line.split()
            if len(parts) >= 2 and parts[0] == remote:
                return parts[1]
        raise QueryError(f"remote {remote!r} not found")

    def git_dir(self) -> str:
        """Return the absolute path of the backing git directory."""
        try:
            out = self.run("git", "root")
        except CommandError as exc:
            raise QueryError("failed to get git root") from exc
        out = out.strip()
        if not out:
            raise QueryError("git root is empty")
        return out
