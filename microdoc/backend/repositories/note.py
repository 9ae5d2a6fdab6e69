"""
Note Repository.

SQLAlchemy implementation of the NoteStore contract. Notes are looked up by
slug; updates are applied as a single UPDATE plus an optional revision
INSERT inside the caller's transaction.
"""

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from microdoc.backend.core.logging import get_logger
from microdoc.backend.models.note import Note, NoteRevision
from microdoc.backend.repositories.base import BaseRepository
from microdoc.backend.repositories.store import NoteUpdateRequest, UpdateResult

logger = get_logger(__name__)


class NoteRepository(BaseRepository[Note]):
    """Repository for Note and its revision history."""

    model = Note

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session)

    async def find_by_slug(self, slug: str) -> Note | None:
        """
        Get a note by slug with its history loaded oldest first.

        ``populate_existing`` makes sure a note already in the session's
        identity map is refreshed from the row instead of returned stale.
        """
        stmt = (
            select(Note)
            .where(Note.slug == slug)
            .options(selectinload(Note.history))
            .execution_options(populate_existing=True)
        )
        result = await self._execute("find note by slug", self.session.execute(stmt))
        return result.scalar_one_or_none()

    async def slug_exists(self, slug: str) -> bool:
        """Check the full table, expired notes included."""
        return await self.exists_where(slug=slug)

    async def insert(self, note: Note) -> Note:
        """
        Insert a new note together with its initial history.

        Raises:
            ConflictError: If the slug is already taken
        """
        return await self.add(note)

    async def update_by_slug(self, slug: str, request: NoteUpdateRequest) -> UpdateResult:
        """
        Apply an update request to the note with this slug.

        Args:
            slug: Note slug
            request: Field set and optional revision to append

        Returns:
            UpdateResult with matched/modified counts (0 when no such slug)
        """
        request.validate()

        stmt = (
            update(Note)
            .where(Note.slug == slug)
            .values(**request.fields.as_values())
            .returning(Note.id)
        )
        result = await self._execute("update note", self.session.execute(stmt))
        note_id = result.scalar_one_or_none()

        if note_id is None:
            return UpdateResult(matched_count=0, modified_count=0)

        appended = False
        if request.append_revision is not None:
            self.session.add(
                NoteRevision(
                    note_id=note_id,
                    content=request.append_revision.content,
                    created_at=request.append_revision.timestamp,
                )
            )
            appended = True

        await self._execute("update note", self.session.flush())

        logger.debug(
            "Note row updated",
            extra={"slug": slug, "revision_appended": appended},
        )
        return UpdateResult(matched_count=1, modified_count=1, revision_appended=appended)
