"""Password hashing utilities built on PBKDF2-HMAC-SHA256."""
from __future__ import annotations

import hashlib
import hmac
import secrets

from lumina_stage.core.settings import settings


def generate_salt() -> str:
    """Return a random hex-encoded 16-byte salt."""
    return secrets.token_hex(16)


def hash_password(password: str, salt: str, iterations: int | None = None) -> str:
    """Derive a hex digest for ``password`` using ``salt``.

    Args:
        password: Plain-text password supplied by the user.
        salt: Hex salt stored alongside the digest.
        iterations: PBKDF2 rounds; defaults to the configured value.

    Returns:
        Hex-encoded derived key.
    """
    rounds = iterations or settings.password_hash_iterations
    digest = hashlib.pbkdf2_hmac(
        "sha256",
        password.encode("utf-8"),
        bytes.fromhex(salt),
        rounds,
    )
    return digest.hex()


def verify_password(password: str, salt: str, expected_hash: str) -> bool:
    """Return True if ``password`` matches the stored digest."""
    try:
        candidate = hash_password(password, salt)
    except ValueError:
        return False
    return hmac.compare_digest(candidate, expected_hash)
