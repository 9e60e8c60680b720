import asyncio
import logging
from datetime import timedelta
from typing import Callable, Optional

from sqlalchemy.orm import Session
from starlette.concurrency import run_in_threadpool

from app.modules.auth.services.session import SessionStore

logger = logging.getLogger("app")

class SessionSweeper:
    """Periodically removes expired sessions on its own DB session"""

    def __init__(self, session_factory: Callable[[], Session], interval_seconds: float, max_age: timedelta):
        self.session_factory = session_factory
        self.interval_seconds = interval_seconds
        self.max_age = max_age
        self._task: Optional[asyncio.Task] = None

    def sweep_once(self) -> int:
        db = self.session_factory()
        try:
            return SessionStore(db).cleanup(self.max_age)
        finally:
            db.close()

    async def _run(self) -> None:
        while True:
            await asyncio.sleep(self.interval_seconds)
            try:
                await run_in_threadpool(self.sweep_once)
            except Exception as e:
                # retried on the next cycle
                logger.error(f"Session sweep failed: {e}")

    def start(self) -> None:
        if self._task is None or self._task.done():
            self._task = asyncio.get_running_loop().create_task(self._run())
            logger.info(f"Session sweeper started (every {self.interval_seconds}s)")

    async def stop(self) -> None:
        if self._task is None:
            return
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        self._task = None
        logger.info("Session sweeper stopped")
