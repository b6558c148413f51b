"""Forge-specific error hierarchy.

All forge client errors inherit from ForgeError for consistent exception handling.
"""

from __future__ import annotations

from jj_forge.exceptions import ForgeError


class ForgeClientError(ForgeError):
    """Base for all forge client errors."""


class ForgeConfigError(ForgeClientError):
    """Missing or invalid forge configuration (e.g., no token, unsupported URL)."""


class ForgeAuthError(ForgeClientError):
    """Authentication failed (401/403)."""


class ForgeResponseError(ForgeClientError):
    """Request failed or the forge returned an unexpected payload."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        self.status_code = status_code
        super().__init__(message)
