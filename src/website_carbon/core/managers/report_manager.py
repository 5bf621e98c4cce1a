# src/website_carbon/core/managers/report_manager.py
import logging
import math
from pathlib import Path
from typing import Iterable, List, Optional

import pandas as pd

from crawler.utils.url_utils import UrlUtils
from emissions.estimator import CarbonEstimator
from measurer.model import BatchResult, PageMeasurement
from website_carbon.model import OutputFormat, RunSummary

logger = logging.getLogger(__name__)

SIZE_UNITS = ['Bytes', 'KB', 'MB', 'GB', 'TB']
SUMMARY_TITLE = "=== 🌱 Website carbon summary ==="
SUMMARY_RULE = "=" * 33

EXPORT_COLUMNS = ["visit", "url", "path", "bytes_transferred", "co2_grams", "rating"]


def format_bytes(num_bytes: float, decimals: int = 2, unit: Optional[str] = None, output_unit: bool = True) -> str:
    """
    Human readable size with a 1024 base, e.g. 1536 -> '1.5 KB'.

    Args:
        num_bytes: The size to format.
        decimals: Maximum number of decimals; trailing zeros are dropped.
        unit: Force a unit from SIZE_UNITS instead of picking the largest fitting one.
        output_unit: Append the unit name.
    """
    if not num_bytes:
        return '0 Bytes' if output_unit else '0'

    dm = max(decimals, 0)
    if unit is not None and unit not in SIZE_UNITS:
        logger.warning("Unsupported unit: %s. Using defaults.", unit)
        unit = None

    if unit is not None:
        i = SIZE_UNITS.index(unit)
    else:
        i = int(math.floor(math.log(abs(num_bytes), 1024)))
        i = min(max(i, 0), len(SIZE_UNITS) - 1)

    value = f"{num_bytes / 1024 ** i:.{dm}f}"
    if '.' in value:
        value = value.rstrip('0').rstrip('.')
    return f"{value} {SIZE_UNITS[i]}" if output_unit else value


def sort_measurements(measurements: Iterable[PageMeasurement]) -> List[PageMeasurement]:
    """Orders measurements by URL, case-insensitively, whatever order they finished in."""
    return sorted(measurements, key=lambda m: m.url.lower())


class ReportManager:
    """
    Turns batch results into output lines, the run summary and export files.
    Rendering returns lines; printing them is left to the caller.
    """

    def __init__(self, output_format: OutputFormat = "cli"):
        if output_format not in ("cli", "csv"):
            raise ValueError(f"Unsupported output format: {output_format}")
        self.output_format = output_format

    def render(self, batch: BatchResult) -> List[str]:
        render_line = self._csv_line if self.output_format == "csv" else self._cli_line
        return [render_line(m) for m in sort_measurements(batch.measurements)]

    @staticmethod
    def _cli_line(measurement: PageMeasurement) -> str:
        line = (
            f"{UrlUtils.get_path(measurement.url)} – {format_bytes(measurement.bytes_transferred)}"
            f" – {measurement.co2_grams:.3f}g CO2e"
        )
        if measurement.rating is not None:
            line += f" – {measurement.rating} rating"
        return line

    @staticmethod
    def _csv_line(measurement: PageMeasurement) -> str:
        fields = [
            UrlUtils.get_path(measurement.url),
            format_bytes(measurement.bytes_transferred, unit='KB', output_unit=False),
            f"{measurement.co2_grams:.3f}",
        ]
        if measurement.rating is not None:
            fields.append(measurement.rating)
        return ", ".join(fields)

    @staticmethod
    def summarize(batch: BatchResult, estimator: CarbonEstimator) -> RunSummary:
        """
        Means over the successful measurements of one pass. An empty pass
        gives a summary without means (`has_data` is False).
        """
        measured = [m for m in batch.measurements if not m.failed]
        if not measured:
            return RunSummary(pages_assessed=0)

        df = pd.DataFrame(
            [(m.bytes_transferred, m.co2_grams) for m in measured],
            columns=["bytes_transferred", "co2_grams"],
        )
        mean_bytes = float(df["bytes_transferred"].mean())
        mean_co2 = float(df["co2_grams"].mean())
        return RunSummary(
            pages_assessed=len(measured),
            mean_bytes=mean_bytes,
            mean_co2=mean_co2,
            overall_rating=estimator.rate(mean_co2),
        )

    @staticmethod
    def render_summary(summary: RunSummary) -> List[str]:
        lines = ["", SUMMARY_TITLE, f"Pages assessed: {summary.pages_assessed}"]
        if not summary.has_data:
            lines.append("No pages could be measured - no averages available.")
        else:
            lines.append(f"Average size:   {format_bytes(summary.mean_bytes)}")
            lines.append(f"Average CO2e:   {summary.mean_co2:.2f} g per page")
            if summary.overall_rating is not None:
                lines.append(f"Overall Rating: {summary.overall_rating}")
        lines.append(SUMMARY_RULE)
        return lines

    @staticmethod
    def to_dataframe(batches: Iterable[BatchResult]) -> pd.DataFrame:
        rows = [
            {
                "visit": m.visit,
                "url": m.url,
                "path": UrlUtils.get_path(m.url),
                "bytes_transferred": m.bytes_transferred,
                "co2_grams": m.co2_grams,
                "rating": m.rating,
            }
            for batch in batches
            for m in sort_measurements(batch.measurements)
        ]
        return pd.DataFrame(rows, columns=EXPORT_COLUMNS)

    def export(self, batches: Iterable[BatchResult], output_file: Path) -> Path:
        """
        Writes every measurement of the given passes to Excel (.xlsx) or CSV
        (any other suffix).
        """
        df = self.to_dataframe(batches)
        output_file = Path(output_file)
        if output_file.suffix.lower() == ".xlsx":
            df.to_excel(output_file, index=False, engine="openpyxl")
        else:
            df.to_csv(output_file, index=False)
        logger.info("💾 Exported %d rows to %s", len(df), output_file)
        return output_file
