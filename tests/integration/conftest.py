"""
Integration Test Fixtures.

Fixtures for integration tests - uses the real app, a real database and
real services. These fixtures build on the root conftest.py database fixtures.
"""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from datetime import datetime, timedelta
from typing import Annotated, Any

import pytest
from fastapi import Depends
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from microdoc.backend.core.config_schema import RateLimitQuotaSchema
from microdoc.backend.core.database import get_db_session
from microdoc.backend.core.dependencies import (
    get_content_policy,
    get_note_service,
    get_note_store,
    get_secret_hasher,
)
from microdoc.backend.core.rate_limiter import (
    SCOPE_ACCESS,
    SCOPE_CREATE,
    InMemoryRateLimiter,
    get_rate_limiter,
)
from microdoc.backend.core.security import BcryptSecretHasher
from microdoc.backend.repositories.store import NoteStore
from microdoc.backend.services.access import SecretHasher
from microdoc.backend.services.content_policy import ContentPolicy
from microdoc.backend.services.note import NoteService


class TestClock:
    """Settable clock injected into the note service."""

    __test__ = False

    def __init__(self, start: datetime) -> None:
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += timedelta(seconds=seconds)


def _quotas(create: int, access: int) -> dict[str, RateLimitQuotaSchema]:
    return {
        SCOPE_CREATE: RateLimitQuotaSchema(requests=create, window_seconds=60),
        SCOPE_ACCESS: RateLimitQuotaSchema(requests=access, window_seconds=60),
    }


@asynccontextmanager
async def _test_client(
    db_session: AsyncSession,
    clock: TestClock,
    limiter: InMemoryRateLimiter,
) -> AsyncGenerator[AsyncClient, None]:
    from microdoc.backend.main import create_app

    async def override_get_db_session() -> AsyncGenerator[AsyncSession, None]:
        yield db_session

    async def override_get_note_service(
        store: Annotated[NoteStore, Depends(get_note_store)],
        hasher: Annotated[SecretHasher, Depends(get_secret_hasher)],
        content_policy: Annotated[ContentPolicy, Depends(get_content_policy)],
    ) -> NoteService:
        return NoteService(store, hasher, content_policy, clock=clock)

    app = create_app()
    app.dependency_overrides[get_db_session] = override_get_db_session
    app.dependency_overrides[get_note_service] = override_get_note_service
    app.dependency_overrides[get_secret_hasher] = lambda: BcryptSecretHasher(rounds=4)
    app.dependency_overrides[get_rate_limiter] = lambda: limiter

    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as test_client:
        yield test_client

    app.dependency_overrides.clear()


# =============================================================================
# API Client Fixtures
# =============================================================================


@pytest.fixture
def clock() -> TestClock:
    """Clock the note service reads; advance it to expire notes."""
    return TestClock(datetime(2024, 1, 1, 12, 0, 0))


@pytest.fixture
async def client(
    db_session: AsyncSession,
    clock: TestClock,
) -> AsyncGenerator[AsyncClient, None]:
    """
    Create a test client with database session override.

    The client uses the test database session, ensuring all API
    operations use the same session that gets rolled back after the test.
    Rate limits are high enough never to trigger.

    Usage:
        async def test_health_endpoint(client: AsyncClient):
            response = await client.get("/health")
            assert response.status_code == 200
    """
    limiter = InMemoryRateLimiter(_quotas(create=1000, access=1000))
    async with _test_client(db_session, clock, limiter) as test_client:
        yield test_client


@pytest.fixture
async def limited_client(
    db_session: AsyncSession,
    clock: TestClock,
) -> AsyncGenerator[AsyncClient, None]:
    """Test client whose limiter allows 2 creates and 3 reads per minute."""
    limiter = InMemoryRateLimiter(_quotas(create=2, access=3))
    async with _test_client(db_session, clock, limiter) as test_client:
        yield test_client


# =============================================================================
# API Response Assertion Helpers
# =============================================================================


class ApiAssertions:
    """Helper class for API response assertions."""

    @staticmethod
    def assert_success(response: Any, expected_status: int = 200) -> dict[str, Any]:
        """
        Assert API response is successful.

        Args:
            response: httpx Response object
            expected_status: Expected HTTP status code

        Returns:
            Response JSON data
        """
        assert response.status_code == expected_status, (
            f"Expected status {expected_status}, got {response.status_code}: "
            f"{response.text}"
        )
        data = response.json()
        assert data.get("success") is True, f"Response not successful: {data}"
        return data

    @staticmethod
    def assert_error(
        response: Any,
        expected_status: int,
        expected_code: str | None = None,
    ) -> dict[str, Any]:
        """
        Assert API response is an error.

        Args:
            response: httpx Response object
            expected_status: Expected HTTP status code
            expected_code: Expected error code (optional)

        Returns:
            Response JSON data
        """
        assert response.status_code == expected_status, (
            f"Expected status {expected_status}, got {response.status_code}: "
            f"{response.text}"
        )
        data = response.json()
        assert data.get("success") is False, f"Response should be error: {data}"
        assert data.get("error") is not None, f"Missing error details: {data}"

        if expected_code:
            actual_code = data["error"].get("code")
            assert actual_code == expected_code, (
                f"Expected error code {expected_code}, got {actual_code}"
            )

        return data

    @staticmethod
    def assert_validation_error(
        response: Any,
        field: str | None = None,
    ) -> dict[str, Any]:
        """
        Assert API response is a request validation error (422).

        Args:
            response: httpx Response object
            field: Expected field with validation error (optional)
        """
        data = ApiAssertions.assert_error(response, 422, "VAL_REQUEST_INVALID")

        if field:
            errors = data["error"].get("details", {}).get("validation_errors", [])
            fields = [e.get("field", "") for e in errors]
            assert any(field in f for f in fields), (
                f"Expected validation error for field '{field}', "
                f"got errors for: {fields}"
            )

        return data


@pytest.fixture
def api() -> ApiAssertions:
    """Provide API assertion helpers."""
    return ApiAssertions()
