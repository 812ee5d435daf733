"""Password hashing and verification.

bcrypt only looks at the first 72 bytes of its input, so two long passwords
sharing a prefix would collide. The password is first reduced with SHA-256
(base64, always 44 bytes) and that digest is what bcrypt sees.
"""

import base64
import hashlib
from typing import Optional

import bcrypt

from bookshelf.config import config


def _prehash_password(password: str) -> bytes:
    """Base64-encoded SHA-256 of the password, as bytes."""
    sha256_hash = hashlib.sha256(password.encode("utf-8")).digest()
    return base64.b64encode(sha256_hash)


def hash_password(password: str, rounds: Optional[int] = None) -> str:
    """
    Hash a password for storage.

    Args:
        password: The plaintext password
        rounds: bcrypt cost factor (defaults to BCRYPT_ROUNDS)

    Returns:
        The bcrypt digest as text; the plaintext is never kept
    """
    salt = bcrypt.gensalt(rounds=rounds or config.BCRYPT_ROUNDS)
    return bcrypt.hashpw(_prehash_password(password), salt).decode("utf-8")


def verify_password(password: str, hashed: str) -> bool:
    """
    Check a plaintext password against a stored digest.

    A digest that is not valid bcrypt counts as a mismatch.
    """
    try:
        return bcrypt.checkpw(_prehash_password(password), hashed.encode("utf-8"))
    except ValueError:
        return False
