"""Repository adapters package: explicit public exports."""

from .token_store import SqlAlchemyTokenStore

__all__ = ["SqlAlchemyTokenStore"]
