"""
Revision Log.

A note's history is an append-only list of content snapshots, oldest first.
"""

from datetime import datetime

from microdoc.backend.core.exceptions import NotFoundError
from microdoc.backend.models.note import Note, NoteRevision
from microdoc.backend.repositories.store import RevisionEntry


class RevisionLog:
    """Rules for when and how history grows."""

    @staticmethod
    def should_append(previous_content: str, new_content: str) -> bool:
        """A save only produces a revision when the text actually changed."""
        return previous_content != new_content

    @staticmethod
    def entry(content: str, timestamp: datetime) -> RevisionEntry:
        """Snapshot to hand to the store with an update request."""
        return RevisionEntry(content=content, timestamp=timestamp)

    @staticmethod
    def append(note: Note, content: str, timestamp: datetime) -> NoteRevision:
        """Add a snapshot to the end of a note's in-memory history."""
        revision = NoteRevision(content=content, created_at=timestamp)
        note.history.append(revision)
        return revision

    @staticmethod
    def list(note: Note) -> list[NoteRevision]:
        """History oldest first."""
        return list(note.history)

    @classmethod
    def get(cls, note: Note, index: int) -> NoteRevision:
        """
        Revision at a zero-based position in the oldest-first history.

        Raises:
            NotFoundError: If there is no revision at that position
        """
        revisions = cls.list(note)
        if index < 0 or index >= len(revisions):
            raise NotFoundError(f"Revision {index} not found")
        return revisions[index]
