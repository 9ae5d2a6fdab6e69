"""
Unit Tests for Note Schemas.

Tests request parsing: aliases and password normalization.
"""

import pytest
from pydantic import ValidationError as PydanticValidationError

from microdoc.backend.schemas.note import NoteCreate, NoteRestore, NoteUpdate, strip_secret


class TestStripSecret:
    """Tests for strip_secret."""

    @pytest.mark.parametrize(
        "value,expected",
        [(None, None), ("", None), ("   ", None), (" pw ", "pw"), ("pass word", "pass word")],
    )
    def test_normalizes_presented_password(self, value, expected):
        assert strip_secret(value) == expected


class TestNewPasswords:
    """Passwords that will be hashed are stripped the same way they are presented."""

    def test_create_strips_password(self):
        data = NoteCreate(title="t", content="c", password="  pw\t")

        assert data.password == "pw"

    def test_create_empty_password_means_unprotected(self):
        data = NoteCreate(title="t", content="c", password="")

        assert data.password is None

    def test_create_rejects_blank_password(self):
        with pytest.raises(PydanticValidationError) as exc_info:
            NoteCreate(title="t", content="c", password="   ")

        assert exc_info.value.errors()[0]["loc"] == ("password",)

    def test_update_strips_new_password(self):
        data = NoteUpdate.model_validate(
            {"title": "t", "content": "c", "newPassword": " new "}
        )

        assert data.new_password == "new"

    def test_update_rejects_blank_new_password(self):
        with pytest.raises(PydanticValidationError):
            NoteUpdate.model_validate({"title": "t", "content": "c", "newPassword": " "})

    def test_update_blank_current_password_is_none(self):
        data = NoteUpdate.model_validate(
            {"title": "t", "content": "c", "currentPassword": "  "}
        )

        assert data.current_password is None

    def test_restore_strips_current_password(self):
        data = NoteRestore.model_validate({"currentPassword": " pw "})

        assert data.current_password == "pw"


class TestTextLimits:
    """Title and content length is left to the configured note limits."""

    def test_long_title_and_content_parse(self):
        data = NoteCreate(title="x" * 300, content="y" * 100_001)

        assert len(data.title) == 300
        assert len(data.content) == 100_001
