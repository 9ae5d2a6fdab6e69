"""
Security Utilities.

Password hashing helpers and the bcrypt-backed secret hasher used by the
note access gate.
"""

import bcrypt

from microdoc.backend.core.config import get_app_config
from microdoc.backend.core.exceptions import ValidationError
from microdoc.backend.core.logging import get_logger

logger = get_logger(__name__)

# bcrypt only looks at the first 72 bytes of its input
BCRYPT_MAX_PASSWORD_BYTES = 72


def hash_password(password: str, rounds: int = 12) -> str:
    """
    Hash a password using bcrypt.

    Raises:
        ValidationError: If the password is longer than bcrypt can handle
    """
    password_bytes = password.encode("utf-8")
    if len(password_bytes) > BCRYPT_MAX_PASSWORD_BYTES:
        raise ValidationError(
            "Password too long",
            details={"password": f"Maximum length is {BCRYPT_MAX_PASSWORD_BYTES} bytes"},
        )
    salt = bcrypt.gensalt(rounds=rounds)
    return bcrypt.hashpw(password_bytes, salt).decode("utf-8")


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify a password against its hash."""
    password_bytes = plain_password.encode("utf-8")
    if len(password_bytes) > BCRYPT_MAX_PASSWORD_BYTES:
        return False
    try:
        return bcrypt.checkpw(password_bytes, hashed_password.encode("utf-8"))
    except ValueError:
        # Malformed digest in storage
        logger.warning("Stored password digest could not be parsed")
        return False


class BcryptSecretHasher:
    """
    Secret hasher backed by bcrypt.

    Each call to ``hash`` uses a fresh salt, so hashing the same password
    twice yields different digests.
    """

    def __init__(self, rounds: int | None = None) -> None:
        if rounds is None:
            rounds = get_app_config().security.password_hashing.bcrypt_rounds
        self.rounds = rounds

    def hash(self, plaintext: str) -> str:
        return hash_password(plaintext, rounds=self.rounds)

    def verify(self, plaintext: str, digest: str) -> bool:
        return verify_password(plaintext, digest)
