# src/crawler/managers/worker_pool_manager.py
import asyncio
import logging
from typing import Any, Awaitable, Callable, List

logger = logging.getLogger(__name__)


class WorkerPoolManager:
    """
    Fixed number of crawl workers draining one asyncio.Queue.

    Workers block on the queue until `shutdown()` cancels them. Each item
    taken is marked done even when its handler fails, so `queue.join()`
    resolves once the crawl frontier is exhausted.
    """

    def __init__(self, handler: Callable[[Any], Awaitable[Any]], queue: asyncio.Queue, size: int):
        self.handler = handler
        self.queue = queue
        self.size = max(1, size)
        self._workers: List[asyncio.Task] = []

    def start(self) -> None:
        if self._workers:
            raise RuntimeError("Worker pool already started.")
        self._workers = [
            asyncio.create_task(self._work(index), name=f"crawl-worker-{index}")
            for index in range(1, self.size + 1)
        ]
        logger.debug("Started %d crawl workers.", self.size)

    async def shutdown(self) -> None:
        for worker in self._workers:
            worker.cancel()
        await asyncio.gather(*self._workers, return_exceptions=True)
        logger.debug("Crawl workers stopped.")

    async def _work(self, index: int) -> None:
        while True:
            item = await self.queue.get()
            try:
                await self.handler(item)
            except Exception:
                logger.exception("Crawl worker %d failed on %s", index, item)
            finally:
                self.queue.task_done()
