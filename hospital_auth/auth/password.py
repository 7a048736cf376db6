"""
Hospital Auth - Password Hashing Utilities

Password hashing using bcrypt.
Work factor comes from settings (12 by default, lowered in tests).

Security:
- Never log or expose plaintext passwords
- bcrypt includes salt automatically
- checkpw compares in constant time
"""

from typing import Optional

import bcrypt

from hospital_auth.config import settings


_dummy_hash: Optional[bytes] = None


def hash_password(password: str) -> str:
    """
    Hash a password using bcrypt.

    Args:
        password: Plaintext password

    Returns:
        bcrypt hash string (includes salt)

    Example:
        >>> hashed = hash_password("Secret123")
        >>> hashed.startswith("$2b$")
        True
    """
    password_bytes = password.encode("utf-8")
    salt = bcrypt.gensalt(rounds=settings.BCRYPT_ROUNDS)
    hashed = bcrypt.hashpw(password_bytes, salt)
    return hashed.decode("utf-8")


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """
    Verify a password against a bcrypt hash.

    Uses constant-time comparison to prevent timing attacks.

    Returns:
        True if password matches, False otherwise (including malformed hashes)
    """
    try:
        password_bytes = plain_password.encode("utf-8")
        hashed_bytes = hashed_password.encode("utf-8")
        return bcrypt.checkpw(password_bytes, hashed_bytes)
    except (ValueError, TypeError):
        # Invalid hash format
        return False


def burn_password_check(plain_password: str) -> None:
    """
    Run a bcrypt check against a throwaway hash.

    Called when the email is unknown so that the response time matches
    the wrong-password path.
    """
    global _dummy_hash
    if _dummy_hash is None:
        _dummy_hash = bcrypt.hashpw(b"unused-password", bcrypt.gensalt(rounds=settings.BCRYPT_ROUNDS))
    try:
        bcrypt.checkpw(plain_password.encode("utf-8"), _dummy_hash)
    except (ValueError, TypeError):
        pass
