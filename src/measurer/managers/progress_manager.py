# src/measurer/managers/progress_manager.py
import logging
import sys
from typing import Optional

from tqdm import tqdm

logger = logging.getLogger(__name__)


class ProgressManager:
    """
    tqdm bar for one measurement pass, counting attempted pages.

    Drawn on stderr and switched off automatically when stderr is not a
    terminal, so CSV results piped from stdout stay clean.
    """

    def __init__(self, total: int, desc: str, unit: str = "page"):
        self.pbar: Optional[tqdm] = tqdm(
            total=max(total, 1),
            desc=desc,
            unit=f" {unit}",
            file=sys.stderr,
            disable=None,
            leave=False,
            dynamic_ncols=True,
            mininterval=0.5,
            bar_format="{l_bar}{bar}| {n_fmt}/{total_fmt} [{elapsed}] {postfix}",
        )

    def advance(self, measured: int, failures: int) -> None:
        if self.pbar is None:
            return
        self.pbar.set_postfix(measured=measured, failures=failures, refresh=False)
        self.pbar.update(1)

    def close(self) -> None:
        if self.pbar is None:
            return
        self.pbar.close()
        self.pbar = None
        logger.debug("Progress bar closed.")
