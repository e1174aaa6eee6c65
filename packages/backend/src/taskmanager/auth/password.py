"""Password hashing utilities.

bcrypt handles salting itself; hashes start with "$2b$". Passwords are
truncated to 72 bytes (bcrypt's limit).
"""

from functools import lru_cache
from typing import Optional

import bcrypt

from taskmanager.config import settings


def hash_password(password: str, rounds: Optional[int] = None) -> str:
    """Hash a password with bcrypt."""
    pw_bytes = password.encode("utf-8")[:72]
    salt = bcrypt.gensalt(rounds=rounds or settings.bcrypt_rounds)
    return bcrypt.hashpw(pw_bytes, salt).decode("utf-8")


def verify_password(password: str, password_hash: str) -> bool:
    """Verify a password against its bcrypt hash."""
    try:
        pw_bytes = password.encode("utf-8")[:72]
        return bcrypt.checkpw(pw_bytes, password_hash.encode("utf-8"))
    except (ValueError, TypeError):
        return False


@lru_cache(maxsize=1)
def _dummy_hash() -> str:
    return hash_password("not-a-real-account")


def burn_verification(password: str) -> None:
    """Spend the same bcrypt work as a real check when there is no user.

    Keeps login timing the same for unknown emails and wrong passwords.
    """
    verify_password(password, _dummy_hash())
