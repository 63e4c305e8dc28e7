"""
Salted password hashing.

=============================================================================
NOTES: Storage format
=============================================================================

Each user row stores two base64 strings:
- salt: 16 random bytes from os.urandom
- password_hash: PBKDF2-HMAC-SHA256(password, salt, ITERATIONS)

Verification recomputes the hash and compares with hmac.compare_digest so
the comparison time does not depend on how many leading bytes match.
=============================================================================
"""

import base64
import hashlib
import hmac
import os

SALT_LENGTH = 16
ITERATIONS = 200_000


def generate_salt() -> str:
    """Return a new random salt, base64 encoded."""
    return base64.b64encode(os.urandom(SALT_LENGTH)).decode("ascii")


def hash_password(password: str, salt: str) -> str:
    """
    Hash a password with the given salt.

    Example:
        >>> salt = generate_salt()
        >>> verify_password("secret1", salt, hash_password("secret1", salt))
        True
    """
    digest = hashlib.pbkdf2_hmac(
        "sha256",
        password.encode("utf-8"),
        base64.b64decode(salt),
        ITERATIONS,
    )
    return base64.b64encode(digest).decode("ascii")


def verify_password(password: str, salt: str, password_hash: str) -> bool:
    """Check a password against a stored salt and hash."""
    return hmac.compare_digest(hash_password(password, salt), password_hash)
