import asyncio
import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from src.core import settings
from src.helpers.errors import LockoutTimeout

logger = logging.getLogger(__name__)


class SingleFlight:
    """
    Mutual exclusion for long running bulk jobs, keyed by job name.

    A second caller waits for the running job to finish. If it waits longer than the failsafe it gives up with
    `LockoutTimeout`. The lock is released when the `async with` block exits, including on errors.
    """

    def __init__(self, failsafe: float | None = None):
        self.failsafe = failsafe if failsafe is not None else settings.gban.FAILSAFE_SECONDS
        self._locks: dict[str, asyncio.Lock] = {}

    def _lock_for(self, name: str) -> asyncio.Lock:
        return self._locks.setdefault(name, asyncio.Lock())

    def is_running(self, name: str) -> bool:
        return self._lock_for(name).locked()

    @asynccontextmanager
    async def hold(self, name: str) -> AsyncIterator[None]:
        lock = self._lock_for(name)
        if lock.locked():
            logger.info(f"Job '{name}' is already running, waiting up to {self.failsafe}s.")
        try:
            await asyncio.wait_for(lock.acquire(), timeout=self.failsafe)
        except asyncio.TimeoutError:
            raise LockoutTimeout("Failsafe triggered. Command taking too long to finish") from None

        logger.debug(f"Job '{name}' acquired the lockout.")
        try:
            yield
        finally:
            lock.release()
            logger.debug(f"Job '{name}' released the lockout.")


lockout = SingleFlight()
