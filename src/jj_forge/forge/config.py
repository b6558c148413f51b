"""Review records and settings stored in the jj repo config.

Everything lives under the ``[forge]`` table of the repository-level jj
config, read with ``jj config list --repo forge`` and written back one key
at a time with ``jj config set --repo``.
"""

from __future__ import annotations

import json
import logging
import tomllib
from typing import TYPE_CHECKING, Optional

from pydantic import ValidationError

from jj_forge.exceptions import ConfigError
from jj_forge.models.config import ForgeConfig, ReviewRecord

if TYPE_CHECKING:
    from jj_forge.jj.client import JJClient

logger = logging.getLogger(__name__)

REVIEWS_KEY = "forge.reviews"


def _toml_string_array(values: list[str]) -> str:
    # JSON string escapes are a subset of TOML basic string escapes. DEL is
    # the one control character JSON leaves bare, and TOML rejects it. Non-ASCII
    # stays literal because TOML forbids the surrogate escapes JSON would emit.
    return "[" + ", ".join(
        json.dumps(value, ensure_ascii=False).replace("\x7f", "\\u007f") for value in values
    ) + "]"


class ConfigManager:
    """Reads and writes jj-forge configuration through jj.

    Every read goes back to jj, so records written by another invocation
    are always visible.
    """

    def __init__(self, client: JJClient) -> None:
        self._client = client

    def get_config(self) -> ForgeConfig:
        """Return the parsed ``[forge]`` table.

        Raises:
            QueryError: If ``jj config list`` fails.
            ConfigError: If the output is not valid TOML or has the wrong shape.
        """
        output = self._client.run("config", "list", "--repo", "forge").strip()
        if not output:
            return ForgeConfig()
        try:
            data = tomllib.loads(output)
        except tomllib.TOMLDecodeError as exc:
            raise ConfigError(f"failed to parse forge config: {exc}") from exc
        try:
            return ForgeConfig.model_validate(data.get("forge", {}))
        except ValidationError as exc:
            raise ConfigError(f"invalid forge config: {exc}") from exc

    def get_review_records(self) -> list[ReviewRecord]:
        return [ReviewRecord.parse(raw) for raw in self.get_config().reviews]

    def find_review_record(self, change_id: str) -> Optional[ReviewRecord]:
        for record in self.get_review_records():
            if record.change_id == change_id:
                return record
        return None

    def add_review_record(self, record: ReviewRecord) -> None:
        """Store ``record``, replacing any existing record for the same change."""
        records = self.get_review_records()
        for i, existing in enumerate(records):
            if existing.change_id == record.change_id:
                records[i] = record
                break
        else:
            records.append(record)
        self._save_records(records)

    def remove_review_record(self, change_id: str) -> bool:
        """Drop the record for ``change_id``. Returns False if there was none."""
        records = self.get_review_records()
        remaining = [r for r in records if r.change_id != change_id]
        if len(remaining) == len(records):
            return False
        self._save_records(remaining)
        return True

    def get_default_reviewer(self) -> Optional[str]:
        return self.get_config().default_reviewer or None

    def _save_records(self, records: list[ReviewRecord]) -> None:
        value = _toml_string_array([r.serialize() for r in records])
        logger.debug("Writing %d review record(s)", len(records))
        self._client.run("config", "set", "--repo", REVIEWS_KEY, value)
