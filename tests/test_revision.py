"""Tests for the Revision snapshot model."""

from __future__ import annotations

import pydantic
import pytest

from jj_forge.models.revision import Revision, push_bookmark


class TestRevision:
    def test_str_shows_id_and_title(self) -> None:
        rev = Revision(id="abc", description="feat: thing\n\nlonger body\n")
        assert str(rev) == "abc feat: thing"

    def test_str_truncates_long_title(self) -> None:
        rev = Revision(id="abc", description="x" * 61)
        assert str(rev) == "abc " + "x" * 57 + "..."

    def test_str_keeps_sixty_char_title(self) -> None:
        rev = Revision(id="abc", description="y" * 60)
        assert str(rev) == "abc " + "y" * 60

    def test_str_anonymous_is_bare_id(self) -> None:
        rev = Revision(id="abc")
        assert str(rev) == "abc"
        assert rev.is_anonymous

    def test_frozen(self) -> None:
        rev = Revision(id="abc")
        with pytest.raises(pydantic.ValidationError):
            rev.description = "changed"

    def test_is_pushed_to(self) -> None:
        rev = Revision(id="abc", remote_bookmarks=frozenset({f"og/{push_bookmark('abc')}"}))
        assert rev.is_pushed_to("og")
        assert not rev.is_pushed_to("up")
