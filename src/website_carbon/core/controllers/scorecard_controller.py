# src/website_carbon/core/controllers/scorecard_controller.py
import logging
from typing import Callable, List, Optional

from crawler.utils.run_timers import RunTimers
from crawler.utils.url_utils import UrlUtils
from emissions.estimator import CarbonEstimator
from emissions.services.green_hosting_service import GreenHostingService
from measurer.controllers.batch_runner import PASS_LABELS, BatchRunner
from measurer.controllers.page_measurer import PageMeasurer
from measurer.model import BatchResult
from measurer.services.browser_session_service import BrowserSession
from website_carbon.core.managers.config_manager import config_manager
from website_carbon.core.managers.report_manager import ReportManager
from website_carbon.core.services.url_resolver_service import UrlResolver
from website_carbon.core.utils.path_utils import PathUtils
from website_carbon.errors import NoPagesMeasured
from website_carbon.model import RunOptions, RunSummary

logger = logging.getLogger(__name__)

PASS_ICONS = {
    "cold": "🔄",
    "warm": "💾",
}


class ScorecardController:
    """
    Runs one assessment: resolve URLs, classify hosting, measure every page
    cold and then warm, print both passes and summarise the cold one.

    Collaborators can be injected; by default they are built from the run
    options and settings.json.
    """

    def __init__(
            self,
            options: RunOptions,
            emit: Callable[[str], None] = print,
            resolver: Optional[UrlResolver] = None,
            hosting: Optional[GreenHostingService] = None,
            browser_factory: Callable[..., BrowserSession] = BrowserSession,
            estimator: Optional[CarbonEstimator] = None,
    ):
        self.options = options
        self.emit = emit
        self.resolver = resolver or UrlResolver()
        self.hosting = hosting or GreenHostingService(config_manager.get_nested("hosting", {}))
        self.browser_factory = browser_factory
        self.estimator = estimator or CarbonEstimator(options.carbon_model)
        self.reporter = ReportManager(options.output_format)
        self.timer = RunTimers("assessment")

    async def run(self) -> RunSummary:
        """
        Returns the cold-pass summary.

        Raises:
            NoUrlsFound: discovery came back empty.
            NoPagesMeasured: not one page of the cold pass could be measured.
            ConfigurationError: invalid measurement settings or URL file.
        """
        with self.timer:
            logger.info("🧮 Using %s", self.estimator.describe())
            warning = self.estimator.capability_warning()
            if warning:
                logger.warning("⚠️  %s", warning)

            target = self.options.target
            urls = await self.resolver.resolve(target, self.options.max_pages)
            site_root = target.hosting_root(urls)

            is_green = await self._check_hosting(site_root)
            logger.info("🌍 Assessing %s (%d pages)...", site_root, len(urls))

            settings = self.options.measure
            async with self.browser_factory(settings) as browser:
                measurer = PageMeasurer(browser, self.estimator, settings, is_green=is_green)
                runner = BatchRunner(measurer, concurrency=settings.concurrency,
                                     group_pause=settings.group_pause)
                cold = await self._run_pass(runner, urls, "cold")
                if not cold.measurements:
                    raise NoPagesMeasured()
                warm = await self._run_pass(runner, urls, "warm")

            summary = self.reporter.summarize(cold, self.estimator)
            for line in self.reporter.render_summary(summary):
                self.emit(line)

            if self.options.export_path is not None:
                self._export([cold, warm])

        logger.debug("Assessment finished in %.2fs.", self.timer.duration)
        return summary

    async def _check_hosting(self, site_root: Optional[str]) -> bool:
        if not site_root:
            return False
        is_green = await self.hosting.is_green(site_root)
        if is_green:
            logger.info("🌿 Hosting for '%s' is green!", UrlUtils.get_hostname(site_root))
        return is_green

    async def _run_pass(self, runner: BatchRunner, urls: List[str], visit: str) -> BatchResult:
        if self.options.output_format == "cli":
            self.emit("")
            self.emit(f"{PASS_ICONS[visit]} {PASS_LABELS[visit]}...")
        result = await runner.run_batch(urls, visit)
        for line in self.reporter.render(result):
            self.emit(line)
        return result

    def _export(self, batches: List[BatchResult]) -> None:
        output_file = PathUtils.resolve_export_path(str(self.options.export_path))
        self.reporter.export(batches, output_file)
