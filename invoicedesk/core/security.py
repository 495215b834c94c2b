"""Password hashing primitives.

Hashes are stored as ``pbkdf2_sha256$<iterations>$<salt_hex>$<digest_hex>`` so
the iteration count can be raised later without invalidating old hashes.
"""

from __future__ import annotations

import hashlib
import hmac
import secrets

ALGORITHM = "pbkdf2_sha256"
DEFAULT_ITERATIONS = 310_000
SALT_BYTES = 16


def _derive(password: str, salt: bytes, iterations: int) -> bytes:
    return hashlib.pbkdf2_hmac("sha256", password.encode("utf-8"), salt, iterations)


def hash_password(password: str, iterations: int = DEFAULT_ITERATIONS) -> str:
    """Return a salted PBKDF2 hash for storage."""
    salt = secrets.token_bytes(SALT_BYTES)
    digest = _derive(password, salt, iterations)
    return f"{ALGORITHM}${iterations}${salt.hex()}${digest.hex()}"


def verify_password(password: str, hashed_password: str) -> bool:
    """Constant-time comparison against a stored hash."""
    try:
        algorithm, iterations, salt_hex, digest_hex = hashed_password.split("$")
        if algorithm != ALGORITHM:
            return False
        candidate = _derive(password, bytes.fromhex(salt_hex), int(iterations))
    except ValueError:
        return False
    return hmac.compare_digest(candidate.hex(), digest_hex)
