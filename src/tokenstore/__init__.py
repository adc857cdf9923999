"""Top-level package public surface."""

from .composition import create_sweeper, create_token_store
from .config import TokenStoreSettings
from .domain.token import TokenRecord
from .exceptions import (
    HashingError,
    IndexCreationError,
    InvalidArgument,
    StoreError,
    TokenStoreError,
)
from .infrastructure.repositories import SqlAlchemyTokenStore
from .logging_config import configure_logging, get_logger
from .ports import TokenStore
from .services.expiry_sweeper import ExpiredTokenSweeper
from .utils.token import generate_token

__all__ = [
    "create_sweeper",
    "create_token_store",
    "configure_logging",
    "generate_token",
    "get_logger",
    "ExpiredTokenSweeper",
    "HashingError",
    "IndexCreationError",
    "InvalidArgument",
    "SqlAlchemyTokenStore",
    "StoreError",
    "TokenRecord",
    "TokenStore",
    "TokenStoreError",
    "TokenStoreSettings",
]
