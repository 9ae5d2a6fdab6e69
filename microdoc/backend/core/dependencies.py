"""
FastAPI Dependencies.

Shared dependencies for request handling: database session, request id,
note service wiring, password extraction and per-client rate limits.
"""

import uuid
from collections.abc import Awaitable, Callable
from functools import lru_cache
from typing import Annotated

from fastapi import Depends, Header, Request
from sqlalchemy.ext.asyncio import AsyncSession

from microdoc.backend.core.config import get_app_config
from microdoc.backend.core.database import get_db_session
from microdoc.backend.core.exceptions import RateLimitError
from microdoc.backend.core.logging import get_logger
from microdoc.backend.core.rate_limiter import RateLimiter, get_rate_limiter
from microdoc.backend.core.security import BcryptSecretHasher
from microdoc.backend.repositories.note import NoteRepository
from microdoc.backend.repositories.store import NoteStore
from microdoc.backend.schemas.note import strip_secret
from microdoc.backend.services.access import SecretHasher
from microdoc.backend.services.content_policy import ContentPolicy, build_content_policy
from microdoc.backend.services.note import NoteService

logger = get_logger(__name__)

# Type alias for database session dependency
DbSession = Annotated[AsyncSession, Depends(get_db_session)]


async def get_request_id(x_request_id: str | None = Header(None)) -> str:
    """
    Extract or generate request ID from headers.

    Used for request tracing and correlation.
    """
    return x_request_id or str(uuid.uuid4())


RequestId = Annotated[str, Depends(get_request_id)]


async def get_note_store(db: DbSession) -> NoteStore:
    return NoteRepository(db)


@lru_cache
def get_secret_hasher() -> SecretHasher:
    return BcryptSecretHasher()


@lru_cache
def get_content_policy() -> ContentPolicy:
    # Loading the word list is slow; build it once per process
    return build_content_policy(get_app_config().notes.content_policy)


async def get_note_service(
    store: Annotated[NoteStore, Depends(get_note_store)],
    hasher: Annotated[SecretHasher, Depends(get_secret_hasher)],
    content_policy: Annotated[ContentPolicy, Depends(get_content_policy)],
) -> NoteService:
    return NoteService(store, hasher, content_policy)


NoteServiceDep = Annotated[NoteService, Depends(get_note_service)]


async def get_bearer_secret(authorization: str | None = Header(None)) -> str | None:
    """
    Note password sent as ``Authorization: Bearer <password>``.

    Anything else (missing header, other scheme, empty token) counts as no
    password.
    """
    if not authorization:
        return None
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer":
        return None
    return strip_secret(token)


BearerSecret = Annotated[str | None, Depends(get_bearer_secret)]


def get_client_key(request: Request) -> str:
    """
    Client identity for rate limiting.

    The connecting peer's address. When the rate_limiting section of
    security.yaml sets trust_forwarded_for, the first X-Forwarded-For entry
    is used instead; only enable that behind a proxy that overwrites the
    header.
    """
    if get_app_config().security.rate_limiting.trust_forwarded_for:
        forwarded = request.headers.get("x-forwarded-for")
        if forwarded:
            first = forwarded.split(",")[0].strip()
            if first:
                return first
    if request.client and request.client.host:
        return request.client.host
    return "anonymous"


def rate_limit(scope: str) -> Callable[..., Awaitable[None]]:
    """
    Build a dependency enforcing the quota for ``scope``.

    Usage:
        @router.post("", dependencies=[Depends(rate_limit(SCOPE_CREATE))])
    """

    async def _enforce(
        request: Request,
        limiter: Annotated[RateLimiter, Depends(get_rate_limiter)],
    ) -> None:
        if not get_app_config().features.rate_limit_enabled:
            return

        key = get_client_key(request)
        result = await limiter.check(scope, key)
        if not result.allowed:
            raise RateLimitError(
                "Too many requests, please try again later",
                retry_after_seconds=result.retry_after_seconds,
            )

    return _enforce
