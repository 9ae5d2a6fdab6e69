"""
Note Service.

Business logic layer for notes: create, read, update, restore, history and
revision diffs. Orchestrates the slug allocator, access gate, revision log
and note store.

Consistency model: an update reads the note, decides, then writes in one
store call. Nothing guards the gap between read and write, so concurrent
updates to the same slug are last-writer-wins.
"""

import asyncio
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime

from microdoc.backend.core.config import get_app_config
from microdoc.backend.core.config_schema import NotesSchema
from microdoc.backend.core.exceptions import NotFoundError, OffensiveContentError, ValidationError
from microdoc.backend.core.utils import utc_now
from microdoc.backend.models.note import Note
from microdoc.backend.repositories.store import (
    UNSET,
    NoteFieldSet,
    NoteStore,
    NoteUpdateRequest,
)
from microdoc.backend.schemas.note import NoteCreate, NoteUpdate
from microdoc.backend.services.access import AccessGate, SecretHasher
from microdoc.backend.services.base import BaseService
from microdoc.backend.services.content_policy import ContentPolicy
from microdoc.backend.services.diff import DiffSegment, Granularity, diff_texts
from microdoc.backend.services.revision import RevisionLog
from microdoc.backend.services.slug import SlugAllocator

NOT_FOUND_MESSAGE = "Note not found"


@dataclass(frozen=True)
class NoteUpdateOutcome:
    note: Note
    revision_appended: bool


class NoteService(BaseService):
    """
    Service for the note lifecycle.

    Expired notes behave exactly like missing ones for every operation,
    and nothing here can bring an expired note back.
    """

    def __init__(
        self,
        store: NoteStore,
        hasher: SecretHasher,
        content_policy: ContentPolicy,
        *,
        config: NotesSchema | None = None,
        slug_allocator: SlugAllocator | None = None,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        super().__init__()
        self.store = store
        self.hasher = hasher
        self.content_policy = content_policy
        self.config = config or get_app_config().notes
        self.gate = AccessGate(hasher)
        self.revisions = RevisionLog()
        self.slugs = slug_allocator or SlugAllocator(store, self.config.slugs)
        self._clock = clock

    # -------------------------------------------------------------------------
    # Checks
    # -------------------------------------------------------------------------

    def _check_text(self, title: str, content: str) -> None:
        """
        Raises:
            ValidationError: Blank or oversized title/content
            OffensiveContentError: Content policy rejected the text
        """
        self._validate_required({"title": title, "content": content}, ["title", "content"])
        limits = self.config.limits
        self._validate_string_length(title, "title", limits.title_max_length)
        self._validate_string_length(content, "content", limits.content_max_length)

        if self.content_policy.is_offensive(f"{title} {content}"):
            raise OffensiveContentError()

    @staticmethod
    def _require_future(expires_at: datetime, now: datetime) -> None:
        if expires_at <= now:
            raise ValidationError(
                "Expiration date must be in the future",
                details={"expires_at": expires_at.isoformat()},
            )

    async def _load_live(self, slug: str, now: datetime) -> Note:
        """
        Fetch a note that exists and has not expired.

        Raises:
            NotFoundError: Absent or expired, with the same message either way
        """
        note = await self.store.find_by_slug(slug)
        if note is None:
            raise NotFoundError(NOT_FOUND_MESSAGE)
        if note.is_expired(now):
            self._log_debug("Expired note requested", slug=slug)
            raise NotFoundError(NOT_FOUND_MESSAGE)
        return note

    # -------------------------------------------------------------------------
    # Operations
    # -------------------------------------------------------------------------

    async def create_note(self, data: NoteCreate) -> Note:
        """
        Create a new note with a one-entry history.

        Raises:
            ValidationError: Blank fields or non-future expiry
            OffensiveContentError: Content policy rejected the text
            ConflictError: Slug taken by a concurrent create
        """
        self._check_text(data.title, data.content)

        now = self._clock()
        if data.expires_at is not None:
            self._require_future(data.expires_at, now)

        slug = await self.slugs.allocate(data.custom_slug or data.title)
        digest = self.hasher.hash(data.password) if data.password else None

        note = Note(
            slug=slug,
            title=data.title,
            content=data.content,
            credential_digest=digest,
            expires_at=data.expires_at,
            created_at=now,
            updated_at=now,
        )
        self.revisions.append(note, data.content, now)

        self._log_operation(
            "Creating note",
            slug=slug,
            protected=digest is not None,
            expires_at=data.expires_at.isoformat() if data.expires_at else None,
        )
        return await self.store.insert(note)

    async def get_note(self, slug: str, secret: str | None = None) -> Note:
        """
        Get a live note the caller may see.

        Raises:
            NotFoundError: Absent or expired
            SecretRequiredError: Protected and no password given
            UnauthorizedError: Wrong password
        """
        note = await self._load_live(slug, self._clock())
        self.gate.authorize(note, secret)
        return note

    async def get_history(self, slug: str, secret: str | None = None) -> Note:
        """Same checks as get_note; the caller projects ``note.history``."""
        return await self.get_note(slug, secret)

    async def update_note(self, slug: str, data: NoteUpdate) -> NoteUpdateOutcome:
        """
        Update title/content and optionally password and expiry.

        A revision is appended only when the content changes.

        Raises:
            ValidationError: Blank fields or non-future expiry
            OffensiveContentError: Content policy rejected the text
            NotFoundError: Absent or expired
            SecretRequiredError / UnauthorizedError: Password gate
        """
        self._check_text(data.title, data.content)

        now = self._clock()
        note = await self._load_live(slug, now)
        self.gate.authorize(note, data.current_password)

        append = self.revisions.should_append(note.content, data.content)

        expires_at = UNSET
        if data.expires_at_provided:
            if data.expires_at is not None:
                self._require_future(data.expires_at, now)
            expires_at = data.expires_at

        digest = self.hasher.hash(data.new_password) if data.new_password else UNSET

        request = NoteUpdateRequest(
            fields=NoteFieldSet(
                title=data.title,
                content=data.content,
                updated_at=now,
                credential_digest=digest,
                expires_at=expires_at,
            ),
            append_revision=self.revisions.entry(data.content, now) if append else None,
        ).validate()

        self._log_operation(
            "Updating note",
            slug=slug,
            revision_appended=append,
            password_changed=digest is not UNSET,
            expiry_changed=expires_at is not UNSET,
        )
        result = await self.store.update_by_slug(slug, request)
        if result.matched_count == 0:
            # Row vanished between read and write
            raise NotFoundError(NOT_FOUND_MESSAGE)

        updated = await self.store.find_by_slug(slug)
        if updated is None:
            raise NotFoundError(NOT_FOUND_MESSAGE)
        return NoteUpdateOutcome(note=updated, revision_appended=append)

    async def restore_revision(
        self,
        slug: str,
        index: int,
        current_password: str | None = None,
    ) -> NoteUpdateOutcome:
        """
        Make an earlier revision the current content.

        This is an ordinary update with the revision's content and the
        note's current title, so history keeps growing and restoring the
        content that is already current adds nothing.

        Raises:
            NotFoundError: Note absent/expired, or no revision at ``index``
        """
        note = await self.get_note(slug, current_password)
        revision = self.revisions.get(note, index)

        self._log_debug("Restoring revision", slug=slug, index=index)
        return await self.update_note(
            slug,
            NoteUpdate(
                title=note.title,
                content=revision.content,
                current_password=current_password,
            ),
        )

    async def diff_revisions(
        self,
        slug: str,
        base: int,
        target: int | None = None,
        secret: str | None = None,
        granularity: Granularity | None = None,
    ) -> list[DiffSegment]:
        """
        Diff revision ``base`` against revision ``target``, or against the
        current content when ``target`` is None.

        The diff runs in a worker thread so a slow pair never stalls the
        event loop.

        Raises:
            ValidationError: A snapshot is longer than ``diff.max_chars``
        """
        note = await self.get_note(slug, secret)
        old_text = self.revisions.get(note, base).content
        if target is None:
            new_text = note.content
        else:
            new_text = self.revisions.get(note, target).content

        diff_config = self.config.diff
        for name, text in (("base", old_text), ("target", new_text)):
            if len(text) > diff_config.max_chars:
                raise ValidationError(
                    "Revision too long to diff",
                    details={name: f"Maximum length is {diff_config.max_chars}"},
                )

        return await asyncio.to_thread(
            diff_texts,
            old_text,
            new_text,
            granularity or diff_config.default_granularity,
            diff_config.timeout_seconds,
        )
