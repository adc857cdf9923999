"""Background removal of expired tokens.

SQLite has no native time-to-live, so expired rows are deleted by a periodic sweep
over the ``ttl`` index.
"""

import asyncio
from typing import Optional

from ..logging_config import get_logger
from ..ports import ExpiringTokenStore

logger = get_logger(__name__)


class ExpiredTokenSweeper:
    """Periodically calls ``purge_expired`` on a token store."""

    def __init__(self, store: ExpiringTokenStore, interval_seconds: float):
        if interval_seconds <= 0:
            raise ValueError("interval_seconds must be positive")
        self.store = store
        self.interval_seconds = interval_seconds
        self._task: Optional[asyncio.Task] = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def run_once(self) -> int:
        return await self.store.purge_expired()

    def start(self) -> None:
        if self.running:
            return
        self._task = asyncio.create_task(self._loop())
        logger.info("expired_token_sweeper_started", interval_seconds=self.interval_seconds)

    async def stop(self) -> None:
        task, self._task = self._task, None
        if task is None:
            return
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass
        logger.info("expired_token_sweeper_stopped")

    async def _loop(self) -> None:
        while True:
            try:
                deleted = await self.run_once()
                logger.debug("expired_token_sweep_completed", deleted=deleted)
            except Exception as e:
                # keep sweeping
                logger.exception("expired_token_sweep_failed", error=str(e))
            await asyncio.sleep(self.interval_seconds)
