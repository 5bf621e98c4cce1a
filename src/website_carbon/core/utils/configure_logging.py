# src/website_carbon/core/utils/configure_logging.py
import logging
import sys
from typing import Dict, Optional, Union

from tqdm import tqdm

LOG_FORMAT = "%(levelname)s - [%(name)s] - %(message)s"

Level = Union[str, int]


class LogWithTqdm(logging.Handler):
    """
    Sends records through `tqdm.write()` on stderr so they are printed above
    a running progress bar instead of through it. Result lines on stdout are
    never touched.
    """

    def emit(self, record: logging.LogRecord) -> None:
        try:
            tqdm.write(self.format(record), file=sys.stderr)
        except Exception:
            self.handleError(record)


def to_level(level: Optional[Level], fallback: int) -> int:
    """'debug', 'INFO' or 10 -> logging level number; anything unknown gives `fallback`."""
    if isinstance(level, int):
        return level
    if isinstance(level, str):
        value = logging.getLevelName(level.strip().upper())
        if isinstance(value, int):
            return value
    return fallback


def configure_logger(
        general_level: Level = "INFO",
        module_specific_levels: Optional[Dict[str, Level]] = None,
        silenced_loggers: Optional[Dict[str, Level]] = None,
        override_level: Optional[Level] = None,
) -> None:
    """
    Installs the tqdm-aware handler on the root logger.

    Args:
        general_level: Root level, normally `debug.level` from settings.json.
        module_specific_levels: Per-package levels, e.g. {'measurer': 'INFO'}.
        silenced_loggers: Third-party loggers to raise to a quiet level.
        override_level: A level given on the command line. It replaces the
            root level and every per-package level.
    """
    handler = LogWithTqdm()
    handler.setFormatter(logging.Formatter(LOG_FORMAT))

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.addHandler(handler)

    override = to_level(override_level, 0) if override_level is not None else 0
    root_logger.setLevel(override or to_level(general_level, logging.INFO))

    for name, level in (module_specific_levels or {}).items():
        logging.getLogger(name).setLevel(override or to_level(level, logging.INFO))

    for name, level in (silenced_loggers or {}).items():
        logging.getLogger(name).setLevel(to_level(level, logging.CRITICAL))
