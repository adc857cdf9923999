"""Token domain model."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional


def utcnow() -> datetime:
    """Current UTC time as a naive datetime, matching what SQLite stores."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


@dataclass(slots=True)
class TokenRecord:
    """The persisted login token of a single user.

    Only the salted hash of the token is kept; the plaintext never reaches the store.
    """

    uid: str
    hashed_token: str
    ttl: datetime
    origin_url: Optional[str] = None

    def is_valid(self, now: Optional[datetime] = None) -> bool:
        return (now or utcnow()) < self.ttl


__all__ = ["TokenRecord", "utcnow"]
