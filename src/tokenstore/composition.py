from typing import Optional

from .config import TokenStoreSettings
from .infrastructure.repositories import SqlAlchemyTokenStore
from .logging_config import get_logger
from .services.expiry_sweeper import ExpiredTokenSweeper

logger = get_logger(__name__)


def create_token_store(settings: Optional[TokenStoreSettings] = None) -> SqlAlchemyTokenStore:
    """Build a token store from settings (read from the environment when omitted).

    Settings are instantiated at call time so environment changes made before the
    call, as tests do, are respected.
    """
    settings = settings or TokenStoreSettings()
    store = SqlAlchemyTokenStore(
        settings.db_path,
        options={
            "hash_rounds": settings.hash_rounds,
            "purge_interval_seconds": settings.purge_interval_seconds,
            "echo": settings.echo,
        },
    )
    logger.info("token_store_created", path=settings.db_path, hash_rounds=settings.hash_rounds)
    return store


def create_sweeper(store: SqlAlchemyTokenStore) -> ExpiredTokenSweeper:
    """Build an expired-token sweeper using the store's configured interval."""
    return ExpiredTokenSweeper(store, store.settings.purge_interval_seconds)
