"""Argon2id password hashing in the PHC string format."""

from __future__ import annotations

import base64
import binascii
import hmac
import secrets

from cryptography.hazmat.primitives.kdf.argon2 import Argon2id

ARGON2_VERSION = 0x13
TIME_COST = 1
MEMORY_COST = 64 * 1024
PARALLELISM = 4
KEY_LENGTH = 32
SALT_LENGTH = 16


def _encode(data: bytes) -> str:
    return base64.urlsafe_b64encode(data).decode("ascii")


def _hash_with_salt(password: str, salt: bytes) -> str:
    kdf = Argon2id(
        salt=salt,
        length=KEY_LENGTH,
        iterations=TIME_COST,
        lanes=PARALLELISM,
        memory_cost=MEMORY_COST,
    )
    key = kdf.derive(password.encode("utf-8"))
    return (
        f"$argon2id$v={ARGON2_VERSION}"
        f"$m={MEMORY_COST},t={TIME_COST},p={PARALLELISM}"
        f"${_encode(salt)}${_encode(key)}"
    )


def hash_password(password: str) -> str:
    """Hash a password with a fresh random salt."""
    return _hash_with_salt(password, secrets.token_bytes(SALT_LENGTH))


def validate_password(password: str, hash: str) -> bool:
    """Return True if the password produces the given hash.

    Raises ValueError if the hash string is malformed.
    """
    fields = hash.split("$")
    if len(fields) < 2:
        raise ValueError("malformed password hash")
    try:
        salt = base64.b64decode(fields[-2], altchars=b"-_", validate=True)
    except (binascii.Error, ValueError) as exc:
        raise ValueError("malformed salt in password hash") from exc
    if len(salt) != SALT_LENGTH:
        raise ValueError("salt in password hash has the wrong length")
    candidate = _hash_with_salt(password, salt)
    return hmac.compare_digest(candidate.encode("utf-8"), hash.encode("utf-8"))