"""Configuration models for jj-forge.

ForgeConfig mirrors the ``[forge]`` table of the jj repo config.
ReviewRecord maps a jj change to the forge review opened for it.
"""

from __future__ import annotations

import enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from jj_forge.exceptions import ConfigError

# jj templating is line-oriented, so records are newline-delimited.
RECORD_SEPARATOR = "\n"


class ReviewStatus(str, enum.Enum):
    """Lifecycle of a forge review."""

    OPEN = "open"
    MERGED = "merged"
    CLOSED = "closed"

    def __str__(self) -> str:
        return self.value


class ReviewRecord(BaseModel):
    """A mapping between a jj change and a forge review (PR)."""

    model_config = ConfigDict(frozen=True)

    change_id: str
    forge_id: str
    url: str
    status: str = ReviewStatus.OPEN.value

    def serialize(self) -> str:
        return RECORD_SEPARATOR.join([self.change_id, self.forge_id, self.url, self.status])

    @classmethod
    def parse(cls, raw: str) -> ReviewRecord:
        """Parse a serialized record.

        Raises:
            ConfigError: If ``raw`` does not hold exactly four fields.
        """
        parts = raw.split(RECORD_SEPARATOR)
        if len(parts) != 4:
            raise ConfigError(f"invalid review record format: {raw!r}")
        change_id, forge_id, url, status = parts
        return cls(change_id=change_id, forge_id=forge_id, url=url, status=status)


class ForgeConfig(BaseModel):
    """The ``[forge]`` section of the jj repo config."""

    model_config = ConfigDict(populate_by_name=True)

    default_reviewer: Optional[str] = Field(default=None, alias="default-reviewer")
    reviews: list[str] = []
