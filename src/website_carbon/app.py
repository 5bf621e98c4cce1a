from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from pathlib import Path
from typing import List, Optional

from pydantic import ValidationError

from crawler.utils.url_utils import UrlUtils
from emissions.model import ModelConfiguration
from measurer.model import MEASURE_EVENTS, MEASURE_MODES, MeasureSettings
from website_carbon.core.controllers.scorecard_controller import ScorecardController
from website_carbon.core.managers.config_manager import config_manager
from website_carbon.core.utils.configure_logging import configure_logger
from website_carbon.errors import ConfigurationError, ScorecardError
from website_carbon.model import AssessmentTarget, RunOptions

logger = logging.getLogger(__name__)

MODEL_CHOICES = ("swd", "swd3", "swd4", "1byte")
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


def _positive_int(value: str) -> int:
    try:
        number = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"'{value}' is not an integer")
    if number < 1:
        raise argparse.ArgumentTypeError(f"must be a positive integer, got {number}")
    return number


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="website-carbon",
        description="Estimate the carbon footprint of a website, page by page.",
    )
    parser.add_argument("url", nargs="?", help="Site root to assess, e.g. https://example.com")
    parser.add_argument("-f", "--file", type=Path,
                        help="Text file with one page URL per line (takes precedence over the site URL).")
    parser.add_argument("-o", "--output", choices=("cli", "csv"), default="cli", help="Output format.")
    parser.add_argument("-p", "--max-pages", type=_positive_int,
                        default=int(config_manager.get_nested("discovery.default_max_pages", 100)),
                        help="Maximum number of pages to assess (default: %(default)s).")
    parser.add_argument("--measure-event", choices=MEASURE_EVENTS,
                        default=config_manager.get_nested("measure.event", "idle"),
                        help="When a page counts as loaded: network idle or the load event.")
    parser.add_argument("--measure-mode", choices=MEASURE_MODES,
                        default=config_manager.get_nested("measure.mode", "cdp"),
                        help="Byte accounting: DevTools transfer sizes (cdp) or response bodies (buffer, less accurate).")
    parser.add_argument("-m", "--model", choices=MODEL_CHOICES, default="swd",
                        help="Carbon model; 'swd' is the latest Sustainable Web Design version.")
    parser.add_argument("--ratings", action=argparse.BooleanOptionalAction, default=True,
                        help="Show carbon ratings (Sustainable Web Design models only).")
    parser.add_argument("--export", type=Path,
                        help="Also write all measurements to a .csv or .xlsx file (relative paths go to Documents).")
    parser.add_argument("--log-level", type=str.upper, choices=LOG_LEVELS,
                        help="Override the log level from settings.json.")
    return parser


def _apply_overrides(args: argparse.Namespace) -> None:
    """Puts the command line flags on top of settings.json for this run."""
    config_manager.set_nested("discovery.default_max_pages", args.max_pages)
    config_manager.set_nested("measure.mode", args.measure_mode)
    config_manager.set_nested("measure.event", args.measure_event)


def _measure_settings() -> MeasureSettings:
    measure = config_manager.section("measure")
    viewport = measure.get("viewport", {})
    return MeasureSettings(
        mode=measure.get("mode", "cdp"),
        event=measure.get("event", "idle"),
        timeout_ms=int(measure.get("timeout_ms", 45000)),
        concurrency=int(measure.get("concurrency", 3)),
        group_pause=float(measure.get("group_pause", 0)),
        headless=bool(measure.get("headless", True)),
        viewport_width=int(viewport.get("width", 1900)),
        viewport_height=int(viewport.get("height", 1000)),
    )


def build_run_options(args: argparse.Namespace) -> RunOptions:
    """
    Raises:
        ConfigurationError: invalid site URL or settings.
    """
    site_url = args.url
    if args.file is not None:
        if site_url:
            logger.info("ℹ️  --file given; ignoring site URL '%s'.", site_url)
        site_url = None
    elif not UrlUtils.is_valid_url(site_url):
        raise ConfigurationError(f"Invalid URL: '{site_url}'. Use a full http(s) URL, e.g. https://example.com")

    _apply_overrides(args)
    try:
        return RunOptions(
            target=AssessmentTarget(site_url=site_url, url_file=args.file),
            output_format=args.output,
            max_pages=int(config_manager.get_nested("discovery.default_max_pages", 100)),
            measure=_measure_settings(),
            carbon_model=ModelConfiguration(model_name=args.model, ratings_enabled=args.ratings),
            export_path=args.export,
        )
    except ValidationError as e:
        raise ConfigurationError(f"Invalid settings: {e}") from e


def _setup_logging(cli_level: Optional[str]) -> None:
    configure_logger(
        config_manager.get_nested("debug.level", "WARNING"),
        config_manager.get_nested("debug.module_levels", {}),
        config_manager.get_nested("debug.silenced_loggers", {}),
        override_level=cli_level,
    )


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    _setup_logging(args.log_level)

    if args.url is None and args.file is None:
        parser.print_help()
        return 0

    try:
        options = build_run_options(args)
        asyncio.run(ScorecardController(options).run())
    except ScorecardError as e:
        logger.debug("Run aborted.", exc_info=True)
        print(f"❌ {e}", file=sys.stderr)
        return 1
    except KeyboardInterrupt:
        print("\nInterrupted.", file=sys.stderr)
        return 130
    return 0


if __name__ == "__main__":
    sys.exit(main())
