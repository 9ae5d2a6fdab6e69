"""
Note Models.

A Note is the shared document addressed by its slug. Its history is an
append-only list of NoteRevision snapshots, oldest first.
"""

from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from microdoc.backend.core.utils import utc_now
from microdoc.backend.models.base import Base, TimestampMixin, UUIDMixin


class Note(UUIDMixin, TimestampMixin, Base):
    """
    Note database model.

    ``credential_digest`` is a bcrypt digest of the note's password, or
    None for public notes. ``expires_at`` is a soft expiry: once it has
    passed the note is treated as nonexistent, but the row stays.
    """

    __tablename__ = "notes"

    slug: Mapped[str] = mapped_column(
        String(64),
        nullable=False,
        unique=True,
        index=True,
    )
    title: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
    )
    content: Mapped[str] = mapped_column(
        Text,
        nullable=False,
    )
    credential_digest: Mapped[str | None] = mapped_column(
        String(255),
        nullable=True,
    )
    expires_at: Mapped[datetime | None] = mapped_column(
        DateTime,
        nullable=True,
    )

    history: Mapped[list["NoteRevision"]] = relationship(
        back_populates="note",
        order_by="NoteRevision.id",
        cascade="all, delete-orphan",
        lazy="raise",
    )

    @property
    def is_protected(self) -> bool:
        return self.credential_digest is not None

    def is_expired(self, now: datetime) -> bool:
        """Whether the note's expiry has been reached at ``now``."""
        return self.expires_at is not None and self.expires_at <= now

    def __repr__(self) -> str:
        return f"<Note(slug={self.slug!r}, title={self.title!r})>"


class NoteRevision(Base):
    """
    Immutable content snapshot.

    Rows are only ever inserted. The integer primary key gives the
    insertion order, which is the chronological order of the history.
    """

    __tablename__ = "note_revisions"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    note_id: Mapped[str] = mapped_column(
        ForeignKey("notes.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    content: Mapped[str] = mapped_column(Text, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime,
        default=utc_now,
        nullable=False,
    )

    note: Mapped[Note] = relationship(back_populates="history")

    @property
    def timestamp(self) -> datetime:
        return self.created_at

    def __repr__(self) -> str:
        return f"<NoteRevision(id={self.id}, note_id={self.note_id!r})>"
