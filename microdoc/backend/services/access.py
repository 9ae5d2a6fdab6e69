"""
Note Access Gate.

Decides whether a caller may read or write a note. A note without a
credential digest is public. A protected note needs the password, checked
only through the hasher's one-way verify.
"""

from typing import Protocol

from microdoc.backend.core.exceptions import SecretRequiredError, UnauthorizedError
from microdoc.backend.core.logging import get_logger
from microdoc.backend.models.note import Note

logger = get_logger(__name__)


class SecretHasher(Protocol):
    """One-way password digesting capability."""

    def hash(self, plaintext: str) -> str:
        """Digest a password; randomized (salted) per call."""
        ...

    def verify(self, plaintext: str, digest: str) -> bool:
        """Check a password against a digest produced by ``hash``."""
        ...


class AccessGate:
    """Stateless password check for notes."""

    def __init__(self, hasher: SecretHasher) -> None:
        self.hasher = hasher

    @staticmethod
    def is_protected(note: Note) -> bool:
        return note.credential_digest is not None

    def authorize(self, note: Note, secret: str | None) -> None:
        """
        Allow the call or raise.

        Raises:
            SecretRequiredError: Note is protected and no password was given
            UnauthorizedError: Password does not match the note's digest
        """
        if not self.is_protected(note):
            return

        if not secret:
            raise SecretRequiredError("Password required")

        if not self.hasher.verify(secret, note.credential_digest):
            logger.info("Note password rejected", extra={"slug": note.slug})
            raise UnauthorizedError("Invalid password")
