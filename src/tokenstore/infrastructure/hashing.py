"""bcrypt-backed token hashing.

bcrypt is deliberately slow, so both operations run in a worker thread to keep the
event loop responsive while a hash is being computed.

bcrypt only looks at the first 72 bytes of its input, so every token is first reduced
to the base64 of its SHA-256 digest (44 ASCII bytes) and bcrypt salts and stretches that.
"""

import asyncio
import base64
import hashlib

import bcrypt

from ..exceptions import HashingError

DEFAULT_ROUNDS = 10


def prehash(token: str) -> bytes:
    """Fixed-length digest of a token of any length, fed to bcrypt."""
    return base64.b64encode(hashlib.sha256(token.encode("utf-8")).digest())


class BcryptTokenHasher:
    """Salted one-way hashing of login tokens."""

    def __init__(self, rounds: int = DEFAULT_ROUNDS):
        self.rounds = rounds

    def _hash(self, token: str) -> str:
        return bcrypt.hashpw(prehash(token), bcrypt.gensalt(rounds=self.rounds)).decode("ascii")

    def _compare(self, token: str, hashed_token: str) -> bool:
        return bcrypt.checkpw(prehash(token), hashed_token.encode("ascii"))

    async def hash(self, token: str) -> str:
        try:
            return await asyncio.to_thread(self._hash, token)
        except (ValueError, TypeError, AttributeError) as e:
            raise HashingError(f"failed to hash token: {e}") from e

    async def compare(self, token: str, hashed_token: str) -> bool:
        try:
            return await asyncio.to_thread(self._compare, token, hashed_token)
        except (ValueError, TypeError, AttributeError) as e:
            raise HashingError(f"failed to compare token: {e}") from e
