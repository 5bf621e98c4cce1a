# src/crawler/utils/run_timers.py
import time
from typing import Optional


class RunTimers:
    """Wall-clock stopwatch for a crawl or an assessment, also usable as `with RunTimers():`."""

    def __init__(self, label: str = "run"):
        self.label = label
        self.started_at: Optional[float] = None
        self.stopped_at: Optional[float] = None

    def start(self) -> "RunTimers":
        self.started_at, self.stopped_at = time.perf_counter(), None
        return self

    def stop(self) -> float:
        if self.started_at is not None and self.stopped_at is None:
            self.stopped_at = time.perf_counter()
        return self.duration

    @property
    def duration(self) -> float:
        if self.started_at is None:
            return 0.0
        return (self.stopped_at or time.perf_counter()) - self.started_at

    __enter__ = start

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.stop()

    def __repr__(self) -> str:
        return f"<RunTimers {self.label} {self.duration:.3f}s>"
