"""Protocols for the store's collaborators and public surface."""

from .token_store import ExpiringTokenStore, TokenHasher, TokenStore

__all__ = ["TokenStore", "TokenHasher", "ExpiringTokenStore"]
