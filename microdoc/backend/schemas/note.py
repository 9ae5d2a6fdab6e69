"""
Note Schemas.

Pydantic schemas for note API request/response validation.

Request fields accept both snake_case and the camelCase names used by
browser clients (customSlug, expiresAt, currentPassword, newPassword).
Timestamps are ISO-8601 on the wire; aware values are normalized to naive
UTC on the way in and rendered with a trailing Z on the way out.

Title and content lengths are not capped here; the limits in
notes.yaml are enforced by NoteService.
"""

from datetime import datetime
from typing import Annotated, Literal

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, PlainSerializer, field_validator

from microdoc.backend.core.utils import to_iso, to_naive_utc

UtcDatetime = Annotated[datetime, PlainSerializer(to_iso, return_type=str)]


def strip_secret(value: str | None) -> str | None:
    """
    Normalize a password the caller presents.

    Surrounding whitespace is dropped (HTTP trims it from header values
    anyway) and a blank result counts as no password.
    """
    if value is None:
        return None
    return value.strip() or None


def _new_secret(value: str | None) -> str | None:
    if value is None or value == "":
        return None
    stripped = value.strip()
    if not stripped:
        raise ValueError("Password must not be blank")
    return stripped


class _NoteRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    @field_validator("password", "new_password", mode="after", check_fields=False)
    @classmethod
    def _normalize_new_password(cls, value: str | None) -> str | None:
        return _new_secret(value)

    @field_validator("current_password", mode="after", check_fields=False)
    @classmethod
    def _normalize_current_password(cls, value: str | None) -> str | None:
        return strip_secret(value)

    @field_validator("expires_at", mode="after", check_fields=False)
    @classmethod
    def _normalize_expires_at(cls, value: datetime | None) -> datetime | None:
        return to_naive_utc(value) if value is not None else None


class NoteCreate(_NoteRequest):
    """Schema for creating a new note."""

    title: str = Field(
        ...,
        description="Note title",
        examples=["Meeting notes"],
    )
    content: str = Field(
        ...,
        description="Markdown content",
        examples=["# Agenda\n\n- item one"],
    )
    custom_slug: str | None = Field(
        default=None,
        max_length=200,
        validation_alias=AliasChoices("custom_slug", "customSlug"),
        description="Preferred slug; derived from the title when omitted",
    )
    password: str | None = Field(
        default=None,
        max_length=128,
        description="Optional password protecting the note",
    )
    expires_at: datetime | None = Field(
        default=None,
        validation_alias=AliasChoices("expires_at", "expiresAt"),
        description="Optional expiry; must be in the future",
    )


class NoteUpdate(_NoteRequest):
    """
    Schema for updating an existing note.

    ``expires_at`` is three-way: omit it to keep the current expiry,
    send null to clear it, or send a future timestamp to set it.
    """

    title: str = Field(..., description="Note title")
    content: str = Field(..., description="Markdown content")
    current_password: str | None = Field(
        default=None,
        max_length=128,
        validation_alias=AliasChoices("current_password", "currentPassword"),
    )
    new_password: str | None = Field(
        default=None,
        max_length=128,
        validation_alias=AliasChoices("new_password", "newPassword"),
    )
    expires_at: datetime | None = Field(
        default=None,
        validation_alias=AliasChoices("expires_at", "expiresAt"),
    )

    @property
    def expires_at_provided(self) -> bool:
        return "expires_at" in self.model_fields_set


class NoteRestore(BaseModel):
    """Schema for restoring a revision."""

    model_config = ConfigDict(populate_by_name=True)

    current_password: str | None = Field(
        default=None,
        max_length=128,
        validation_alias=AliasChoices("current_password", "currentPassword"),
    )

    @field_validator("current_password", mode="after")
    @classmethod
    def _normalize_current_password(cls, value: str | None) -> str | None:
        return strip_secret(value)


class NoteCreatedResponse(BaseModel):
    slug: str = Field(description="Slug assigned to the new note")


class NoteResponse(BaseModel):
    """Projected note view. Never carries the password digest."""

    slug: str
    title: str
    content: str
    is_protected: bool
    created_at: UtcDatetime
    updated_at: UtcDatetime
    expires_at: UtcDatetime | None = None

    model_config = ConfigDict(from_attributes=True)


class NoteUpdatedResponse(BaseModel):
    slug: str
    revision_appended: bool = Field(description="Whether this save added a history entry")
    revision_count: int
    updated_at: UtcDatetime


class RevisionResponse(BaseModel):
    content: str
    timestamp: UtcDatetime

    model_config = ConfigDict(from_attributes=True)


class NoteHistoryResponse(BaseModel):
    """History oldest first; reverse it for newest-first display."""

    title: str
    is_protected: bool
    history: list[RevisionResponse]

    model_config = ConfigDict(from_attributes=True)


class DiffSegmentResponse(BaseModel):
    kind: Literal["equal", "insert", "delete"]
    text: str


class DiffStatsResponse(BaseModel):
    inserted_chars: int
    deleted_chars: int
    unchanged_chars: int


class NoteDiffResponse(BaseModel):
    base: int = Field(description="Index of the older revision")
    target: int | None = Field(description="Index of the newer revision, null for current content")
    granularity: Literal["char", "word"]
    segments: list[DiffSegmentResponse]
    stats: DiffStatsResponse
