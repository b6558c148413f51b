"""Result models for the change pipelines and the review flow."""

from __future__ import annotations

from pydantic import BaseModel


class UploadResult(BaseModel):
    """Outcome of ``change upload``.

    Counters are filled in while the stack is walked and the model is
    returned once at the end.
    """

    pushed: int = 0
    skipped_empty: int = 0
    skipped_anonymous: int = 0
    skipped_synced: int = 0
    trailers_updated: int = 0

    @property
    def skipped(self) -> int:
        return self.skipped_empty + self.skipped_anonymous + self.skipped_synced


class SubmitResult(BaseModel):
    """Outcome of ``change submit``."""

    submitted: int = 0
    already_landed: int = 0  # stack members at or below the remote head


class OpenResult(BaseModel):
    """Outcome of ``review open``."""

    change_id: str
    number: int
    url: str
