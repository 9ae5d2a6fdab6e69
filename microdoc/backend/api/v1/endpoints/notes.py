"""
Notes API Endpoints.

REST API endpoints for creating, reading, editing and restoring notes.

Read-side endpoints take the note password as ``Authorization: Bearer``;
write-side endpoints take it in the request body as ``current_password``.
"""

from typing import Literal

from fastapi import APIRouter, Depends, Query

from microdoc.backend.core.dependencies import BearerSecret, NoteServiceDep, RequestId, rate_limit
from microdoc.backend.core.rate_limiter import SCOPE_ACCESS, SCOPE_CREATE
from microdoc.backend.schemas.base import ApiResponse, ResponseMetadata
from microdoc.backend.schemas.note import (
    DiffSegmentResponse,
    DiffStatsResponse,
    NoteCreate,
    NoteCreatedResponse,
    NoteDiffResponse,
    NoteHistoryResponse,
    NoteResponse,
    NoteRestore,
    NoteUpdate,
    NoteUpdatedResponse,
    RevisionResponse,
)
from microdoc.backend.services.diff import summarize
from microdoc.backend.services.note import NoteUpdateOutcome

router = APIRouter()

create_limit = Depends(rate_limit(SCOPE_CREATE))
access_limit = Depends(rate_limit(SCOPE_ACCESS))


def _updated(outcome: NoteUpdateOutcome) -> NoteUpdatedResponse:
    note = outcome.note
    return NoteUpdatedResponse(
        slug=note.slug,
        revision_appended=outcome.revision_appended,
        revision_count=len(note.history),
        updated_at=note.updated_at,
    )


@router.post(
    "",
    response_model=ApiResponse[NoteCreatedResponse],
    status_code=201,
    dependencies=[create_limit],
    summary="Create a note",
    description="Create a note, optionally password protected and expiring.",
)
async def create_note(
    data: NoteCreate,
    service: NoteServiceDep,
    request_id: RequestId,
) -> ApiResponse[NoteCreatedResponse]:
    """Create a new note and return its slug."""
    note = await service.create_note(data)
    return ApiResponse(
        data=NoteCreatedResponse(slug=note.slug),
        metadata=ResponseMetadata(request_id=request_id),
    )


@router.get(
    "/{slug}",
    response_model=ApiResponse[NoteResponse],
    dependencies=[access_limit],
    summary="Get a note",
)
async def get_note(
    slug: str,
    service: NoteServiceDep,
    secret: BearerSecret,
    request_id: RequestId,
) -> ApiResponse[NoteResponse]:
    """Get a live note. Expired notes are reported as not found."""
    note = await service.get_note(slug, secret)
    return ApiResponse(
        data=NoteResponse.model_validate(note),
        metadata=ResponseMetadata(request_id=request_id),
    )


@router.put(
    "/{slug}",
    response_model=ApiResponse[NoteUpdatedResponse],
    dependencies=[access_limit],
    summary="Update a note",
    description=(
        "Replace title and content. Changing the content appends a revision. "
        "Omit expires_at to keep the current expiry, send null to clear it."
    ),
)
async def update_note(
    slug: str,
    data: NoteUpdate,
    service: NoteServiceDep,
    request_id: RequestId,
) -> ApiResponse[NoteUpdatedResponse]:
    outcome = await service.update_note(slug, data)
    return ApiResponse(
        data=_updated(outcome),
        metadata=ResponseMetadata(request_id=request_id),
    )


@router.get(
    "/{slug}/history",
    response_model=ApiResponse[NoteHistoryResponse],
    dependencies=[access_limit],
    summary="Get note history",
)
async def get_history(
    slug: str,
    service: NoteServiceDep,
    secret: BearerSecret,
    request_id: RequestId,
) -> ApiResponse[NoteHistoryResponse]:
    """Revision history, oldest first."""
    note = await service.get_history(slug, secret)
    return ApiResponse(
        data=NoteHistoryResponse(
            title=note.title,
            is_protected=note.is_protected,
            history=[RevisionResponse.model_validate(rev) for rev in note.history],
        ),
        metadata=ResponseMetadata(request_id=request_id),
    )


@router.get(
    "/{slug}/diff",
    response_model=ApiResponse[NoteDiffResponse],
    dependencies=[access_limit],
    summary="Diff two revisions",
    description="Compare revision `base` with revision `target`, or with the current content.",
)
async def diff_revisions(
    slug: str,
    service: NoteServiceDep,
    secret: BearerSecret,
    request_id: RequestId,
    base: int = Query(..., ge=0, description="Index of the older revision"),
    target: int | None = Query(default=None, ge=0, description="Index of the newer revision"),
    granularity: Literal["char", "word"] | None = Query(default=None),
) -> ApiResponse[NoteDiffResponse]:
    segments = await service.diff_revisions(
        slug,
        base,
        target=target,
        secret=secret,
        granularity=granularity,
    )
    stats = summarize(segments)
    return ApiResponse(
        data=NoteDiffResponse(
            base=base,
            target=target,
            granularity=granularity or service.config.diff.default_granularity,
            segments=[
                DiffSegmentResponse(kind=segment.kind.value, text=segment.text)
                for segment in segments
            ],
            stats=DiffStatsResponse(
                inserted_chars=stats.inserted_chars,
                deleted_chars=stats.deleted_chars,
                unchanged_chars=stats.unchanged_chars,
            ),
        ),
        metadata=ResponseMetadata(request_id=request_id),
    )


@router.post(
    "/{slug}/history/{index}/restore",
    response_model=ApiResponse[NoteUpdatedResponse],
    dependencies=[access_limit],
    summary="Restore a revision",
    description="Save an earlier revision's content as a new update. History is kept.",
)
async def restore_revision(
    slug: str,
    index: int,
    service: NoteServiceDep,
    request_id: RequestId,
    data: NoteRestore | None = None,
) -> ApiResponse[NoteUpdatedResponse]:
    password = data.current_password if data else None
    outcome = await service.restore_revision(slug, index, password)
    return ApiResponse(
        data=_updated(outcome),
        metadata=ResponseMetadata(request_id=request_id),
    )
