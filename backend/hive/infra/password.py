"""Centralized password hashing configuration.

All modules requiring password hashing import from here so every hash is
produced with the configured argon2id cost.
"""

from argon2 import PasswordHasher
from argon2.exceptions import InvalidHashError, VerificationError

from hive.settings import settings

PASSWORD_HASHER = PasswordHasher(
    time_cost=settings.password_time_cost,
    memory_cost=settings.password_memory_cost,
    parallelism=settings.password_parallelism,
    hash_len=32,
    salt_len=16,
)


def hash_password(password: str) -> str:
    """Hash a password using Argon2id with the configured parameters."""
    return PASSWORD_HASHER.hash(password)


def verify_password(hash: str, password: str) -> bool:
    """Verify a password against its hash.

    Returns True if valid, False otherwise.
    """
    try:
        PASSWORD_HASHER.verify(hash, password)
        return True
    except (VerificationError, InvalidHashError):
        return False


def check_needs_rehash(hash: str) -> bool:
    """Return True when the hash was created with different cost parameters."""
    return PASSWORD_HASHER.check_needs_rehash(hash)
