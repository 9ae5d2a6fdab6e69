"""
Slug Allocation.

Turns a proposed title or custom slug into a unique URL-safe identifier.

Allocation order:
    1. the normalized base itself
    2. base + "-" + short random suffix, until max_attempts is used up
    3. fully random slugs until one is free

Step 3 has no bound by default and only terminates probabilistically; the
random space (36**8) makes a long run practically impossible. Setting
``fallback_max_attempts`` caps it and raises ResourceExhaustedError instead.

The check-then-insert sequence can race with a concurrent create using the
same candidate; the unique index on notes.slug catches that at insert time.
"""

import re
import secrets
import string

from microdoc.backend.core.config_schema import SlugSchema
from microdoc.backend.core.exceptions import ResourceExhaustedError
from microdoc.backend.core.logging import get_logger
from microdoc.backend.repositories.store import NoteStore

logger = get_logger(__name__)

SLUG_ALPHABET = string.ascii_lowercase + string.digits

_WHITESPACE_RE = re.compile(r"\s+")
_DISALLOWED_RE = re.compile(r"[^a-z0-9-]")


def normalize_slug(proposed: str | None, max_length: int = 50) -> str:
    """
    Normalize a proposed slug base.

    Lowercases, turns whitespace runs into hyphens, drops anything outside
    ``[a-z0-9-]`` and truncates. Returns an empty string when nothing usable
    is left.

    Examples:
        >>> normalize_slug("  My First Note! ")
        'my-first-note'
        >>> normalize_slug("Ünïcode only ✓")
        'ncode-only-'
    """
    if not proposed:
        return ""
    base = _WHITESPACE_RE.sub("-", proposed.strip().lower())
    base = _DISALLOWED_RE.sub("", base)
    return base[:max_length]


def random_token(length: int) -> str:
    """Random string from the slug alphabet."""
    return "".join(secrets.choice(SLUG_ALPHABET) for _ in range(length))


class SlugAllocator:
    """Allocates slugs that no stored note (expired or not) is using."""

    def __init__(self, store: NoteStore, config: SlugSchema) -> None:
        self.store = store
        self.config = config

    def _candidate(self, base: str, attempt: int) -> str:
        if not base:
            return random_token(self.config.random_length)
        if attempt == 0:
            return base
        return f"{base}-{random_token(self.config.suffix_length)}"

    async def allocate(self, proposed: str | None = None) -> str:
        """
        Return a slug that is free at the moment of the check.

        Args:
            proposed: Custom slug or title to derive the slug from

        Raises:
            ResourceExhaustedError: If the fallback loop is capped and exhausted
        """
        base = normalize_slug(proposed, self.config.max_length)

        for attempt in range(self.config.max_attempts):
            candidate = self._candidate(base, attempt)
            if not await self.store.slug_exists(candidate):
                return candidate
            logger.warning(
                "Slug already exists, retrying",
                extra={"slug": candidate, "attempt": attempt + 1},
            )

        logger.error(
            "Could not derive a unique slug, falling back to random slugs",
            extra={"proposed": proposed, "base": base},
        )
        return await self._allocate_random()

    async def _allocate_random(self) -> str:
        cap = self.config.fallback_max_attempts
        tries = 0
        while cap is None or tries < cap:
            tries += 1
            candidate = random_token(self.config.random_length)
            if not await self.store.slug_exists(candidate):
                return candidate

        raise ResourceExhaustedError(
            f"No free slug found after {cap} random attempts"
        )
