"""
Unit Tests for the Revision Log.
"""

from datetime import datetime

import pytest

from microdoc.backend.core.exceptions import NotFoundError
from microdoc.backend.models.note import Note
from microdoc.backend.services.revision import RevisionLog

T0 = datetime(2024, 1, 1, 12, 0, 0)
T1 = datetime(2024, 1, 1, 12, 5, 0)


def make_note() -> Note:
    note = Note(slug="n", title="T", content="A")
    RevisionLog.append(note, "A", T0)
    return note


class TestShouldAppend:
    """Tests for the append rule."""

    def test_changed_content_appends(self):
        """Should append when content differs."""
        assert RevisionLog.should_append("A", "B") is True

    def test_identical_content_does_not_append(self):
        """Should not append when content is unchanged."""
        assert RevisionLog.should_append("A", "A") is False

    def test_whitespace_counts_as_change(self):
        """Should compare exactly, without trimming."""
        assert RevisionLog.should_append("A", "A ") is True


class TestRevisionLog:
    """Tests for append, list and get."""

    def test_append_keeps_order(self):
        """Should keep history oldest first."""
        note = make_note()
        RevisionLog.append(note, "B", T1)

        contents = [rev.content for rev in RevisionLog.list(note)]
        assert contents == ["A", "B"]
        assert RevisionLog.list(note)[1].timestamp == T1

    def test_entry_snapshot(self):
        """Should build an entry carrying content and timestamp."""
        entry = RevisionLog.entry("B", T1)

        assert entry.content == "B"
        assert entry.timestamp == T1

    def test_get_by_index(self):
        """Should return the revision at a zero-based index."""
        note = make_note()
        RevisionLog.append(note, "B", T1)

        assert RevisionLog.get(note, 0).content == "A"
        assert RevisionLog.get(note, 1).content == "B"

    @pytest.mark.parametrize("index", [-1, 1, 99])
    def test_get_out_of_range(self, index):
        """Should raise NotFoundError for positions outside the history."""
        with pytest.raises(NotFoundError):
            RevisionLog.get(make_note(), index)

    def test_list_is_a_copy(self):
        """Should not let callers mutate history through the listing."""
        note = make_note()
        RevisionLog.list(note).clear()

        assert len(note.history) == 1
