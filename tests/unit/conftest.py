"""
Unit Test Fixtures.

Fixtures for unit tests - all external dependencies are faked or mocked.
Unit tests should be fast and isolated, never touching real databases.
"""

from datetime import datetime, timedelta
from unittest.mock import AsyncMock, MagicMock

import pytest

from microdoc.backend.core.config_schema import (
    ContentPolicySchema,
    DiffSchema,
    NoteLimitsSchema,
    NotesSchema,
    SlugSchema,
)
from microdoc.backend.core.exceptions import ConflictError
from microdoc.backend.models.note import Note, NoteRevision
from microdoc.backend.repositories.store import NoteUpdateRequest, UpdateResult
from microdoc.backend.services.note import NoteService


# =============================================================================
# Fake Capabilities
# =============================================================================


class FakeNoteStore:
    """In-memory NoteStore keyed by slug."""

    def __init__(self) -> None:
        self.notes: dict[str, Note] = {}
        self.update_calls: list[tuple[str, NoteUpdateRequest]] = []

    async def find_by_slug(self, slug: str) -> Note | None:
        return self.notes.get(slug)

    async def slug_exists(self, slug: str) -> bool:
        return slug in self.notes

    async def insert(self, note: Note) -> Note:
        if note.slug in self.notes:
            raise ConflictError("Note already exists")
        self.notes[note.slug] = note
        return note

    async def update_by_slug(self, slug: str, request: NoteUpdateRequest) -> UpdateResult:
        request.validate()
        self.update_calls.append((slug, request))

        note = self.notes.get(slug)
        if note is None:
            return UpdateResult(matched_count=0, modified_count=0)

        for key, value in request.fields.as_values().items():
            setattr(note, key, value)

        appended = request.append_revision is not None
        if appended:
            note.history.append(
                NoteRevision(
                    content=request.append_revision.content,
                    created_at=request.append_revision.timestamp,
                )
            )
        return UpdateResult(matched_count=1, modified_count=1, revision_appended=appended)


class FakeHasher:
    """Salted-looking but reversible hasher; fast enough for unit tests."""

    def __init__(self) -> None:
        self._counter = 0

    def hash(self, plaintext: str) -> str:
        self._counter += 1
        return f"fake${self._counter}${plaintext}"

    def verify(self, plaintext: str, digest: str) -> bool:
        return digest.split("$", 2)[2] == plaintext


class BlocklistContentPolicy:
    """Flags text containing any of a few fixed words."""

    def __init__(self, words: set[str] | None = None) -> None:
        self.words = words or {"forbidden"}

    def is_offensive(self, text: str) -> bool:
        lowered = text.lower()
        return any(word in lowered for word in self.words)


class FakeClock:
    """Controllable clock returning naive UTC datetimes."""

    def __init__(self, start: datetime | None = None) -> None:
        self.now = start or datetime(2024, 1, 1, 12, 0, 0)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now = self.now + timedelta(seconds=seconds)


# =============================================================================
# Note Service Fixtures
# =============================================================================


def make_notes_config(**slug_overrides) -> NotesSchema:
    """NotesSchema mirroring notes.yaml, with optional slug overrides."""
    slugs = {
        "max_length": 50,
        "random_length": 8,
        "suffix_length": 4,
        "max_attempts": 5,
        "fallback_max_attempts": None,
    }
    slugs.update(slug_overrides)
    return NotesSchema(
        slugs=SlugSchema(**slugs),
        limits=NoteLimitsSchema(title_max_length=255, content_max_length=100_000),
        content_policy=ContentPolicySchema(enabled=True, extra_words=[]),
        diff=DiffSchema(
            default_granularity="word",
            max_chars=20000,
            timeout_seconds=1.0,
        ),
    )


@pytest.fixture
def notes_config() -> NotesSchema:
    return make_notes_config()


@pytest.fixture
def store() -> FakeNoteStore:
    return FakeNoteStore()


@pytest.fixture
def hasher() -> FakeHasher:
    return FakeHasher()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def note_service(
    store: FakeNoteStore,
    hasher: FakeHasher,
    clock: FakeClock,
    notes_config: NotesSchema,
) -> NoteService:
    """NoteService wired to in-memory fakes and a controllable clock."""
    return NoteService(
        store,
        hasher,
        BlocklistContentPolicy(),
        config=notes_config,
        clock=clock,
    )


# =============================================================================
# Database Mock Fixtures
# =============================================================================


@pytest.fixture
def mock_db_session() -> AsyncMock:
    """
    Mock database session for unit tests.

    Usage:
        def test_repository(mock_db_session: AsyncMock):
            repo = NoteRepository(mock_db_session)
    """
    session = AsyncMock()
    session.commit = AsyncMock()
    session.rollback = AsyncMock()
    session.flush = AsyncMock()
    session.execute = AsyncMock()
    session.add = MagicMock()
    return session


# =============================================================================
# Redis Mock Fixtures
# =============================================================================


@pytest.fixture
def mock_redis() -> MagicMock:
    """Mock Redis client with the calls the rate limiter makes."""
    redis = MagicMock()
    redis.incr = AsyncMock(return_value=1)
    redis.expire = AsyncMock(return_value=True)
    redis.ttl = AsyncMock(return_value=-1)
    return redis


# =============================================================================
# Logging Mock Fixtures
# =============================================================================


@pytest.fixture
def mock_logger() -> MagicMock:
    """
    Mock logger for testing logging calls.

    Usage:
        def test_logging(mock_logger):
            with patch("module.logger", mock_logger):
                mock_logger.info.assert_called_once()
    """
    logger = MagicMock()
    logger.debug = MagicMock()
    logger.info = MagicMock()
    logger.warning = MagicMock()
    logger.error = MagicMock()
    logger.exception = MagicMock()
    return logger
