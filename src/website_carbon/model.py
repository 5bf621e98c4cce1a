# src/website_carbon/model.py (Application Layer)
from pathlib import Path
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

from crawler.utils.url_utils import UrlUtils
from emissions.model import ModelConfiguration, Rating
from measurer.model import MeasureSettings

OutputFormat = Literal["cli", "csv"]


class AssessmentTarget(BaseModel):
    """
    What to assess: a site root, or an explicit list of page URLs in a file.
    When both are given the file wins.
    """
    site_url: Optional[str] = None
    url_file: Optional[Path] = None

    @model_validator(mode="after")
    def _require_source(self) -> "AssessmentTarget":
        if self.site_url is None and self.url_file is None:
            raise ValueError("Either a site URL or a URL file is required.")
        return self

    @property
    def uses_file(self) -> bool:
        return self.url_file is not None

    def hosting_root(self, urls: List[str]) -> Optional[str]:
        """
        Site root used for the green hosting check: the origin of the first
        listed URL for file input, the site argument otherwise.
        """
        if self.uses_file:
            return UrlUtils.get_origin(urls[0]) if urls else None
        return self.site_url


class RunSummary(BaseModel):
    """Aggregate of the cold pass. Means are None when nothing was measured."""
    model_config = ConfigDict(frozen=True)

    pages_assessed: int = 0
    mean_bytes: Optional[float] = None
    mean_co2: Optional[float] = None
    overall_rating: Optional[Rating] = None

    @property
    def has_data(self) -> bool:
        return self.pages_assessed > 0 and self.mean_bytes is not None and self.mean_co2 is not None


class RunOptions(BaseModel):
    target: AssessmentTarget
    output_format: OutputFormat = "cli"
    max_pages: int = Field(default=100, ge=1)
    measure: MeasureSettings = Field(default_factory=MeasureSettings)
    carbon_model: ModelConfiguration = Field(default_factory=ModelConfiguration)
    export_path: Optional[Path] = None
