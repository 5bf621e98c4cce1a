# src/measurer/controllers/batch_runner.py
import asyncio
import logging
from typing import List, Optional

from measurer.controllers.page_measurer import PageMeasurer
from measurer.managers.progress_manager import ProgressManager
from measurer.model import BatchResult, PageMeasurement, Visit

logger = logging.getLogger(__name__)

PASS_LABELS = {
    "cold": "First visits",
    "warm": "Return visits",
}


class BatchRunner:
    """
    Measures a URL list in fixed-size groups.

    Pages inside a group load concurrently; the next group starts only when
    every page of the current one has finished or failed. Failed pages are
    logged and left out of the result.
    """

    def __init__(self, measurer: PageMeasurer, concurrency: int = 3, group_pause: float = 0.0,
                 show_progress: bool = True):
        if concurrency < 1:
            raise ValueError("concurrency must be at least 1")
        self.measurer = measurer
        self.concurrency = concurrency
        self.group_pause = group_pause
        self.show_progress = show_progress

    async def run_batch(self, urls: List[str], visit: Visit) -> BatchResult:
        result = BatchResult(visit=visit, attempted=len(urls))
        progress: Optional[ProgressManager] = None
        if self.show_progress:
            progress = ProgressManager(total=len(urls), desc=PASS_LABELS.get(visit, visit))

        try:
            for start in range(0, len(urls), self.concurrency):
                group = urls[start:start + self.concurrency]
                outcomes = await asyncio.gather(
                    *(self.measurer.measure(url, visit) for url in group),
                    return_exceptions=True,
                )
                for url, outcome in zip(group, outcomes):
                    measurement = self._accept(url, outcome)
                    if measurement is None:
                        result.failures += 1
                    else:
                        result.measurements.append(measurement)
                    if progress:
                        progress.advance(measured=len(result.measurements), failures=result.failures)

                has_more = start + self.concurrency < len(urls)
                if has_more and self.group_pause > 0:
                    await asyncio.sleep(self.group_pause)
        finally:
            if progress:
                progress.close()

        logger.info(
            "%s: %d of %d pages measured.",
            PASS_LABELS.get(visit, visit), len(result.measurements), result.attempted
        )
        return result

    @staticmethod
    def _accept(url: str, outcome) -> Optional[PageMeasurement]:
        if isinstance(outcome, BaseException):
            logger.warning("⚠️  Measurement of %s failed: %s", url, outcome)
            return None
        if outcome.failed:
            logger.info("✗ %s – not measured", url)
            return None
        logger.info("✓ %s – %d bytes", url, outcome.bytes_transferred)
        return outcome
