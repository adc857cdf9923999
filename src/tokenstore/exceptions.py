"""Exception hierarchy for the token store."""

from typing import Any, Dict, Optional


class TokenStoreError(Exception):
    """Base class for every error raised by the token store."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        self.message = message
        self.details = details or {}
        super().__init__(self.message)


class InvalidArgument(TokenStoreError, ValueError):
    """A required parameter is missing or has the wrong type.

    Raised before any I/O happens; this is a programming error and is never retried.
    """


class StoreError(TokenStoreError):
    """The backing database failed to execute a query."""


class HashingError(TokenStoreError):
    """The hashing collaborator failed to hash or compare a token."""


class IndexCreationError(TokenStoreError):
    """The table or one of its required indexes could not be created.

    The store has no degraded mode without its indexes, so it stays
    uninitialized and the next operation retries the setup.
    """
