"""
Content Policy.

Decides whether note text is acceptable. The default policy is a
profanity check backed by better-profanity, extended with any words listed
under content_policy.extra_words in notes.yaml.
"""

from typing import Protocol

from better_profanity import Profanity

from microdoc.backend.core.config_schema import ContentPolicySchema
from microdoc.backend.core.logging import get_logger

logger = get_logger(__name__)


class ContentPolicy(Protocol):
    def is_offensive(self, text: str) -> bool: ...


class ProfanityContentPolicy:
    """Flags text containing words from the profanity word list."""

    def __init__(self, extra_words: list[str] | None = None) -> None:
        self._filter = Profanity()
        self._filter.load_censor_words()
        if extra_words:
            self._filter.add_censor_words(extra_words)

    def is_offensive(self, text: str) -> bool:
        return self._filter.contains_profanity(text)


class AllowAllContentPolicy:
    """Accepts everything. Used when the content policy is switched off."""

    def is_offensive(self, text: str) -> bool:
        return False


def build_content_policy(config: ContentPolicySchema) -> ContentPolicy:
    if not config.enabled:
        logger.info("Content policy disabled")
        return AllowAllContentPolicy()
    return ProfanityContentPolicy(extra_words=config.extra_words)
