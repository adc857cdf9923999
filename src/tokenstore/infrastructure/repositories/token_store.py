"""SQLite-backed token store.

Each user owns at most one row in the ``tokens`` table. The row holds a bcrypt hash of
the user's current login token, an absolute expiry and the URL the user originally
asked for. The database is opened lazily on the first operation, at which point the
table and its two indexes (unique ``uid``, ``ttl``) are ensured.
"""

import asyncio
from contextlib import asynccontextmanager
from datetime import datetime, timedelta
from typing import Any, AsyncIterator, Mapping, Optional

from pydantic import ValidationError
from sqlalchemy import delete, func, select
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from ...config import TokenStoreSettings
from ...db import create_engine, create_sessionmaker
from ...domain.token import TokenRecord, utcnow
from ...exceptions import IndexCreationError, InvalidArgument, StoreError
from ...logging_config import get_logger
from ...metrics import record_auth_attempt, record_error, record_operation
from ...ports import TokenHasher
from ..db.models import REQUIRED_INDEXES, TokenModel
from ..hashing import BcryptTokenHasher

logger = get_logger(__name__)

# Settings that may be overridden per store through the ``options`` mapping
OPTION_FIELDS = frozenset({"hash_rounds", "purge_interval_seconds", "echo"})


def _is_text(value: Any) -> bool:
    return isinstance(value, str) and bool(value)


def _expiry(ms_to_live: Any) -> datetime:
    """Absolute expiry for a lifetime in milliseconds; rejects anything that is not one."""
    if isinstance(ms_to_live, bool) or not isinstance(ms_to_live, (int, float)) or not ms_to_live:
        raise InvalidArgument("TokenStore:storeOrUpdate called with invalid parameters")
    try:
        return utcnow() + timedelta(milliseconds=ms_to_live)
    except (OverflowError, ValueError) as e:
        raise InvalidArgument(f"ms_to_live out of range: {ms_to_live!r}") from e


def _resolve_settings(path: str, options: Optional[Mapping[str, Any]]) -> TokenStoreSettings:
    if options is None:
        options = {}
    if not isinstance(options, Mapping):
        raise InvalidArgument("options must be a mapping")
    unknown = set(options) - OPTION_FIELDS
    if unknown:
        raise InvalidArgument(
            f"unknown token store options: {', '.join(sorted(unknown))}",
            details={"unknown": sorted(unknown)},
        )
    try:
        return TokenStoreSettings(db_path=path, **options)
    except ValidationError as e:
        raise InvalidArgument(f"invalid token store options: {e}") from e


class SqlAlchemyTokenStore:
    """Stores, authenticates and expires single-use login tokens."""

    def __init__(
        self,
        path: Optional[str] = None,
        options: Optional[Mapping[str, Any]] = None,
        hasher: Optional[TokenHasher] = None,
    ):
        """Create a store backed by the SQLite file at ``path``.

        Args:
            path: Location of the database file, or ":memory:"
            options: Optional overrides for hash_rounds, purge_interval_seconds and echo
            hasher: Hashing collaborator; defaults to bcrypt with the configured cost
        """
        if not isinstance(path, str) or not path:
            raise InvalidArgument("A valid path string has to be provided")
        self.settings = _resolve_settings(path, options)
        self._path = path
        self._hasher: TokenHasher = hasher or BcryptTokenHasher(self.settings.hash_rounds)
        self._engine: Optional[AsyncEngine] = None
        self._sessionmaker: Optional[async_sessionmaker[AsyncSession]] = None
        # single-flight guard for the lazy connection and index setup
        self._init_lock = asyncio.Lock()

    @property
    def path(self) -> str:
        return self._path

    async def authenticate(self, token: str, uid: str) -> tuple[bool, Optional[str]]:
        """Check a token against the live record of ``uid``.

        Returns:
            (True, origin_url) when the token matches an unexpired record,
            (False, None) otherwise
        """
        if not _is_text(token) or not _is_text(uid):
            raise InvalidArgument("TokenStore:authenticate called with invalid parameters")
        try:
            async with self._session() as session:
                res = await session.execute(
                    select(TokenModel).where(TokenModel.uid == uid, TokenModel.ttl > utcnow())
                )
                item = res.scalars().first()
        except SQLAlchemyError as e:
            raise self._store_error("authenticate", e) from e

        if item is None:
            record_auth_attempt(False)
            return False, None
        try:
            valid = await self._hasher.compare(token, item.hashed_token)
        except Exception as e:
            record_error("authenticate", e)
            logger.error("token_compare_failed", uid=uid, error=str(e))
            raise
        record_auth_attempt(valid)
        if not valid:
            return False, None
        return True, item.origin_url

    async def store_or_update(
        self, token: str, uid: str, ms_to_live: int, origin_url: Optional[str] = None
    ) -> None:
        """Store a new token for ``uid``, replacing any token it already had.

        The whole record is overwritten, so a user only ever has one valid token.
        """
        if not _is_text(token) or not _is_text(uid):
            raise InvalidArgument("TokenStore:storeOrUpdate called with invalid parameters")
        ttl = _expiry(ms_to_live)
        try:
            hashed_token = await self._hasher.hash(token)
        except Exception as e:
            record_error("store", e)
            logger.error("token_hash_failed", uid=uid, error=str(e))
            raise

        stmt = sqlite_insert(TokenModel.__table__).values(
            uid=uid, hashed_token=hashed_token, ttl=ttl, origin_url=origin_url
        )
        # insert or overwrite every field of the existing row
        stmt = stmt.on_conflict_do_update(
            index_elements=[TokenModel.uid],
            set_={
                "hashed_token": stmt.excluded.hashed_token,
                "ttl": stmt.excluded.ttl,
                "origin_url": stmt.excluded.origin_url,
            },
        )
        try:
            async with self._session() as session:
                await session.execute(stmt)
                await session.commit()
        except SQLAlchemyError as e:
            raise self._store_error("store", e) from e
        record_operation("store")
        logger.debug("token_stored", uid=uid, ttl=ttl.isoformat())

    async def invalidate_user(self, uid: str) -> None:
        """Remove the token of ``uid``. Unknown users are not an error."""
        if not _is_text(uid):
            raise InvalidArgument("TokenStore:invalidateUser called with invalid parameters")
        try:
            async with self._session() as session:
                await session.execute(delete(TokenModel).where(TokenModel.uid == uid))
                await session.commit()
        except SQLAlchemyError as e:
            raise self._store_error("invalidate", e) from e
        record_operation("invalidate")
        logger.debug("token_invalidated", uid=uid)

    async def clear(self) -> None:
        """Remove and invalidate all tokens."""
        try:
            async with self._session() as session:
                await session.execute(delete(TokenModel))
                await session.commit()
        except SQLAlchemyError as e:
            raise self._store_error("clear", e) from e
        record_operation("clear")
        logger.info("token_store_cleared", path=self._path)

    async def length(self) -> int:
        """Number of stored tokens, expired or not."""
        try:
            async with self._session() as session:
                res = await session.execute(select(func.count()).select_from(TokenModel))
                return int(res.scalar_one())
        except SQLAlchemyError as e:
            raise self._store_error("length", e) from e

    async def purge_expired(self) -> int:
        """Delete every record whose ttl has passed and return how many were removed."""
        try:
            async with self._session() as session:
                res = await session.execute(delete(TokenModel).where(TokenModel.ttl <= utcnow()))
                await session.commit()
        except SQLAlchemyError as e:
            raise self._store_error("purge", e) from e
        deleted = int(res.rowcount or 0)
        record_operation("purge")
        if deleted:
            logger.info("expired_tokens_purged", deleted=deleted)
        return deleted

    async def get_record(self, uid: str) -> Optional[TokenRecord]:
        """Return the persisted record of ``uid`` regardless of its expiry."""
        if not _is_text(uid):
            raise InvalidArgument("TokenStore:getRecord called with invalid parameters")
        try:
            async with self._session() as session:
                res = await session.execute(select(TokenModel).where(TokenModel.uid == uid))
                item = res.scalars().first()
        except SQLAlchemyError as e:
            raise self._store_error("get", e) from e
        if item is None:
            return None
        return TokenRecord(
            uid=item.uid,
            hashed_token=item.hashed_token,
            ttl=item.ttl,
            origin_url=item.origin_url,
        )

    async def close(self) -> None:
        """Dispose the engine. A later operation reopens the database."""
        async with self._init_lock:
            engine, self._engine, self._sessionmaker = self._engine, None, None
        if engine is not None:
            await engine.dispose()
            logger.debug("token_store_closed", path=self._path)

    async def __aenter__(self) -> "SqlAlchemyTokenStore":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.close()

    @asynccontextmanager
    async def _session(self) -> AsyncIterator[AsyncSession]:
        factory = await self._get_db()
        async with factory() as session:
            yield session

    async def _get_db(self) -> async_sessionmaker[AsyncSession]:
        if self._sessionmaker is not None:
            return self._sessionmaker
        async with self._init_lock:
            if self._sessionmaker is None:
                engine = create_engine(self._path, echo=self.settings.echo)
                try:
                    await self._set_indexes(engine)
                except Exception:
                    await engine.dispose()
                    raise
                self._engine = engine
                self._sessionmaker = create_sessionmaker(engine)
                logger.info("token_store_initialized", path=self._path)
            return self._sessionmaker

    async def _set_indexes(self, engine: AsyncEngine) -> None:
        table = TokenModel.__table__
        try:
            # reading the schema version touches the file header
            async with engine.connect() as conn:
                await conn.exec_driver_sql("PRAGMA schema_version")
        except (SQLAlchemyError, OSError) as e:
            logger.error("token_store_open_failed", path=self._path, error=str(e))
            raise StoreError(
                f"Error opening token store at {self._path}: {e}", details={"operation": "open"}
            ) from e
        try:
            async with engine.begin() as conn:
                await conn.run_sync(table.create, checkfirst=True)
        except (SQLAlchemyError, OSError) as e:
            logger.error("token_table_create_failed", path=self._path, error=str(e))
            raise IndexCreationError(f"Error creating table {table.name}: {e}") from e
        for index in REQUIRED_INDEXES:
            try:
                async with engine.begin() as conn:
                    await conn.run_sync(index.create, checkfirst=True)
            except (SQLAlchemyError, OSError) as e:
                logger.error(
                    "token_index_create_failed", path=self._path, index=index.name, error=str(e)
                )
                raise IndexCreationError(
                    f"Error creating index {index.name}: {e}", details={"index": index.name}
                ) from e

    def _store_error(self, operation: str, exc: Exception) -> StoreError:
        record_error(operation, exc)
        logger.error("token_store_query_failed", operation=operation, error=str(exc))
        return StoreError(f"token store {operation} failed: {exc}", details={"operation": operation})
