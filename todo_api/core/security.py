"""
bcrypt password hashing.

The same hasher stores user passwords and refresh-token digests. bcrypt only
looks at the first 72 bytes of its input, and JWTs for one user share a long
common prefix, so anything longer than that is reduced to its SHA-256 hex
digest before hashing.
"""
from __future__ import annotations

import hashlib
from functools import lru_cache

import bcrypt

from todo_api.core.config import get_settings

BCRYPT_MAX_BYTES = 72


def sha256_hex(s: str) -> str:
    return hashlib.sha256(s.encode("utf-8")).hexdigest()


def _prepare(plaintext: str) -> bytes:
    raw = plaintext.encode("utf-8")
    if len(raw) > BCRYPT_MAX_BYTES:
        return sha256_hex(plaintext).encode("ascii")
    return raw


class PasswordHasher:
    def __init__(self, rounds: int = 10) -> None:
        self.rounds = rounds

    def hash(self, plaintext: str) -> str:
        hashed = bcrypt.hashpw(_prepare(plaintext), bcrypt.gensalt(rounds=self.rounds))
        return hashed.decode("utf-8")

    def compare(self, plaintext: str, digest: str | None) -> bool:
        if not digest:
            return False
        try:
            return bcrypt.checkpw(_prepare(plaintext), digest.encode("utf-8"))
        except ValueError:
            # not a bcrypt digest
            return False


@lru_cache
def get_password_hasher() -> PasswordHasher:
    return PasswordHasher(rounds=get_settings().bcrypt_rounds)
