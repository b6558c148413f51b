"""Shared test fixtures for jj-forge.

Provides a fake repository with an immutable root, a CLI runner, and a
forge double.
"""

import pytest
from click.testing import CliRunner

from tests.fakes import FakeForge, FakeRepo


@pytest.fixture
def repo() -> FakeRepo:
    """Fake repo holding only the immutable root commit."""
    return FakeRepo()


@pytest.fixture
def forge() -> FakeForge:
    return FakeForge()


@pytest.fixture
def runner() -> CliRunner:
    """Create a Click test runner."""
    return CliRunner()


@pytest.fixture(autouse=True)
def _no_github_env(monkeypatch):
    """Keep real credentials out of the tests."""
    for name in ("JJ_FORGE_GITHUB_TOKEN", "GITHUB_TOKEN", "GH_TOKEN", "JJ_FORGE_GITHUB_API_URL"):
        monkeypatch.delenv(name, raising=False)
