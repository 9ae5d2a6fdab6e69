"""
Request Rate Limiter.

Config-driven, per-client, per-scope rate limiting.
Reads quotas from config/settings/security.yaml (rate_limiting section).

Two backends implement the same ``RateLimiter`` interface:

- InMemoryRateLimiter: fixed windows in a process-local dict. Each window
  resets lazily on the first request after it has elapsed, and windows
  that have elapsed are swept out at most once per shortest window length.
  Fine for a single instance; counts are not shared between processes.
- RedisRateLimiter: INCR + EXPIRE per key, shared across instances.

The limiter is an abuse brake, not a correctness mechanism.
"""

import math
import time
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any, Protocol

from microdoc.backend.core.config import get_app_config, get_redis_url
from microdoc.backend.core.config_schema import RateLimitQuotaSchema
from microdoc.backend.core.logging import get_logger

logger = get_logger(__name__)

SCOPE_CREATE = "create"
SCOPE_ACCESS = "access"


class RateLimitResult:
    """Result of a rate limit check."""

    def __init__(self, allowed: bool, retry_after_seconds: int = 0) -> None:
        self.allowed = allowed
        self.retry_after_seconds = retry_after_seconds

    def __repr__(self) -> str:
        return f"RateLimitResult(allowed={self.allowed}, retry_after_seconds={self.retry_after_seconds})"


class RateLimiter(Protocol):
    """Anything that can decide whether a keyed request may proceed."""

    async def check(self, scope: str, key: str) -> RateLimitResult: ...


@dataclass
class _Window:
    started_at: float
    count: int = 0


class InMemoryRateLimiter:
    """
    Fixed-window rate limiter keyed by (scope, client key).

    Scopes without a configured quota are never limited.
    """

    def __init__(
        self,
        quotas: dict[str, RateLimitQuotaSchema],
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._quotas = quotas
        self._clock = clock
        self._windows: dict[tuple[str, str], _Window] = {}
        self._sweep_interval = min(
            (quota.window_seconds for quota in quotas.values()), default=60
        )
        self._next_sweep_at = 0.0

    async def check(self, scope: str, key: str) -> RateLimitResult:
        """
        Count a request and report whether it is within the scope's quota.

        Args:
            scope: Quota name (create, access)
            key: Client identifier, usually the remote address

        Returns:
            RateLimitResult indicating whether the request is allowed
        """
        quota = self._quotas.get(scope)
        if quota is None:
            return RateLimitResult(allowed=True)

        now = self._clock()
        self._sweep(now)
        window = self._windows.get((scope, key))
        if window is None or now - window.started_at > quota.window_seconds:
            window = _Window(started_at=now)
            self._windows[(scope, key)] = window

        window.count += 1

        if window.count > quota.requests:
            retry_after = math.ceil(window.started_at + quota.window_seconds - now)
            logger.warning(
                "Rate limit exceeded",
                extra={"scope": scope, "client": key, "limit": quota.requests},
            )
            return RateLimitResult(allowed=False, retry_after_seconds=max(retry_after, 1))

        return RateLimitResult(allowed=True)

    def _sweep(self, now: float) -> None:
        if now < self._next_sweep_at:
            return
        self._next_sweep_at = now + self._sweep_interval

        expired = [
            window_key
            for window_key, window in self._windows.items()
            if now - window.started_at > self._quotas[window_key[0]].window_seconds
        ]
        for window_key in expired:
            del self._windows[window_key]
        if expired:
            logger.debug("Dropped expired rate limit windows", extra={"count": len(expired)})

    @property
    def tracked_windows(self) -> int:
        return len(self._windows)

    def reset(self) -> None:
        """Forget all windows."""
        self._windows.clear()
        self._next_sweep_at = 0.0


class RedisRateLimiter:
    """
    Fixed-window rate limiter stored in Redis.

    Uses INCR on ``ratelimit:{scope}:{key}`` and sets the key's TTL to the
    window length on the first hit, so counts are shared by every instance
    talking to the same Redis.
    """

    def __init__(self, client: Any, quotas: dict[str, RateLimitQuotaSchema]) -> None:
        self._client = client
        self._quotas = quotas

    async def check(self, scope: str, key: str) -> RateLimitResult:
        quota = self._quotas.get(scope)
        if quota is None:
            return RateLimitResult(allowed=True)

        redis_key = f"ratelimit:{scope}:{key}"
        count = await self._client.incr(redis_key)
        if count == 1:
            await self._client.expire(redis_key, quota.window_seconds)

        if count > quota.requests:
            ttl = await self._client.ttl(redis_key)
            if ttl is None or ttl < 0:
                # Key lost its TTL (e.g. expire call failed); start a new window
                await self._client.expire(redis_key, quota.window_seconds)
                ttl = quota.window_seconds
            logger.warning(
                "Rate limit exceeded",
                extra={"scope": scope, "client": key, "limit": quota.requests},
            )
            return RateLimitResult(allowed=False, retry_after_seconds=max(int(ttl), 1))

        return RateLimitResult(allowed=True)


def _configured_quotas() -> dict[str, RateLimitQuotaSchema]:
    rate_limiting = get_app_config().security.rate_limiting
    return {
        SCOPE_CREATE: rate_limiting.create,
        SCOPE_ACCESS: rate_limiting.access,
    }


def build_rate_limiter() -> RateLimiter:
    """Build the limiter selected by security.yaml rate_limiting.backend."""
    backend = get_app_config().security.rate_limiting.backend
    quotas = _configured_quotas()

    if backend == "redis":
        import redis.asyncio as redis

        logger.info("Using Redis rate limiter")
        return RedisRateLimiter(redis.from_url(get_redis_url()), quotas)

    logger.info("Using in-memory rate limiter")
    return InMemoryRateLimiter(quotas)


_rate_limiter: RateLimiter | None = None


def get_rate_limiter() -> RateLimiter:
    """Get or create the rate limiter singleton."""
    global _rate_limiter
    if _rate_limiter is None:
        _rate_limiter = build_rate_limiter()
    return _rate_limiter
