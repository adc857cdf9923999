from typing import Optional, Protocol, runtime_checkable


class TokenStore(Protocol):
    """Protocol for passwordless token persistence."""

    async def authenticate(self, token: str, uid: str) -> tuple[bool, Optional[str]]: ...

    async def store_or_update(
        self, token: str, uid: str, ms_to_live: int, origin_url: Optional[str] = None
    ) -> None: ...

    async def invalidate_user(self, uid: str) -> None: ...

    async def clear(self) -> None: ...

    async def length(self) -> int: ...


class TokenHasher(Protocol):
    """Protocol for the slow, salted one-way hash applied to tokens."""

    async def hash(self, token: str) -> str: ...

    async def compare(self, token: str, hashed_token: str) -> bool: ...


@runtime_checkable
class ExpiringTokenStore(Protocol):
    """A store that can drop records whose ttl has passed."""

    async def purge_expired(self) -> int: ...
