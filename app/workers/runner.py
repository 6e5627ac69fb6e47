# app/workers/runner.py
import asyncio
import logging
from typing import Any, Callable, Optional

logger = logging.getLogger(__name__)


class PeriodicWorker:
    """
    Runs ``job.run_once`` on a fixed interval inside the event loop.

    A tick never overlaps the previous one: a trigger arriving while a run
    is in progress is skipped. A failed tick is logged and the next one is
    scheduled after ``retry_delay``. ``stop`` lets the current row finish;
    jobs receive ``should_stop`` and check it between rows.
    """

    def __init__(
        self,
        name: str,
        job: Any,
        interval: float,
        initial_delay: float = 0,
        retry_delay: Optional[float] = None,
    ):
        self.name = name
        self.job = job
        self.interval = interval
        self.initial_delay = initial_delay
        self.retry_delay = retry_delay if retry_delay is not None else interval
        self._lock = asyncio.Lock()
        self._stop = asyncio.Event()
        self._task: Optional[asyncio.Task] = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    @property
    def should_stop(self) -> Callable[[], bool]:
        return self._stop.is_set

    def start(self) -> None:
        if self.running:
            return
        self._stop.clear()
        self._task = asyncio.create_task(self._loop(), name=f"worker:{self.name}")
        logger.info(f"⏱️ Worker {self.name} started (every {self.interval}s, first run in {self.initial_delay}s)")

    async def stop(self, timeout: float = 30) -> None:
        self._stop.set()
        if self._task is None:
            return
        done, _ = await asyncio.wait({self._task}, timeout=timeout)
        if not done:
            logger.warning(f"Worker {self.name} did not stop within {timeout}s, cancelling")
            self._task.cancel()
        self._task = None
        logger.info(f"Worker {self.name} stopped")

    async def trigger(self):
        """Run one tick now; returns None if a tick is already in progress."""
        if self._lock.locked():
            logger.warning(f"Worker {self.name} is still running, skipping this tick")
            return None
        async with self._lock:
            return await self.job.run_once(should_stop=self.should_stop)

    async def _sleep(self, seconds: float) -> bool:
        """Wait up to ``seconds``; True if a stop was requested meanwhile."""
        try:
            await asyncio.wait_for(self._stop.wait(), timeout=seconds)
            return True
        except asyncio.TimeoutError:
            return False

    async def _loop(self) -> None:
        if await self._sleep(self.initial_delay):
            return
        while not self._stop.is_set():
            delay = self.interval
            try:
                result = await self.trigger()
                logger.info(f"Worker {self.name} tick finished: {result}")
            except Exception:
                logger.exception(f"❌ Worker {self.name} tick failed, retrying in {self.retry_delay}s")
                delay = self.retry_delay
            if await self._sleep(delay):
                return
