"""
Note Store Contract.

The narrow persistence interface the note lifecycle depends on, plus the
explicit update request handed to it. Services type against ``NoteStore``
only; ``NoteRepository`` is the SQLAlchemy implementation.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Final, Protocol

from microdoc.backend.core.exceptions import ValidationError
from microdoc.backend.models.note import Note


class _Unset:
    """Marker for 'leave this field as it is'."""

    def __repr__(self) -> str:
        return "UNSET"

    def __bool__(self) -> bool:
        return False


UNSET: Final = _Unset()


@dataclass(frozen=True)
class RevisionEntry:
    """A history snapshot waiting to be appended."""

    content: str
    timestamp: datetime


@dataclass(frozen=True)
class NoteFieldSet:
    """
    Field assignments for one update.

    ``credential_digest`` and ``expires_at`` default to UNSET, meaning the
    stored value is kept. ``expires_at=None`` clears the expiry.
    """

    title: str
    content: str
    updated_at: datetime
    credential_digest: str | _Unset = UNSET
    expires_at: datetime | None | _Unset = UNSET

    def as_values(self) -> dict[str, Any]:
        """Column values for the UPDATE statement, skipping UNSET fields."""
        values: dict[str, Any] = {
            "title": self.title,
            "content": self.content,
            "updated_at": self.updated_at,
        }
        if self.credential_digest is not UNSET:
            values["credential_digest"] = self.credential_digest
        if self.expires_at is not UNSET:
            values["expires_at"] = self.expires_at
        return values


@dataclass(frozen=True)
class NoteUpdateRequest:
    """Everything one update writes: the field set and an optional revision."""

    fields: NoteFieldSet
    append_revision: RevisionEntry | None = None

    def validate(self) -> "NoteUpdateRequest":
        """
        Check the request is internally consistent before it reaches storage.

        Raises:
            ValidationError: If title/content are blank or the revision
                does not snapshot the new content
        """
        if not self.fields.title.strip() or not self.fields.content.strip():
            raise ValidationError(
                "Title and content are required",
                details={"fields": ["title", "content"]},
            )
        if self.append_revision is not None and self.append_revision.content != self.fields.content:
            raise ValidationError("Revision content must match the new note content")
        return self


@dataclass(frozen=True)
class UpdateResult:
    matched_count: int
    modified_count: int
    revision_appended: bool = field(default=False)


class NoteStore(Protocol):
    """Persistence capability for notes keyed by slug."""

    async def find_by_slug(self, slug: str) -> Note | None:
        """Fetch a note with its history (oldest first), or None."""
        ...

    async def slug_exists(self, slug: str) -> bool:
        """Whether any stored note, expired or not, uses this slug."""
        ...

    async def insert(self, note: Note) -> Note:
        """Persist a new note and its initial history."""
        ...

    async def update_by_slug(self, slug: str, request: NoteUpdateRequest) -> UpdateResult:
        """Apply a field set and optional revision append as one operation."""
        ...
