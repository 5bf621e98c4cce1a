# src/measurer/model.py (Measurement Layer)
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

from emissions.model import Rating

Visit = Literal["cold", "warm"]
MeasureMode = Literal["cdp", "buffer"]
MeasureEvent = Literal["idle", "load"]

MEASURE_MODES = ("cdp", "buffer")
MEASURE_EVENTS = ("idle", "load")

# Playwright lifecycle event awaited for each measurement event
WAIT_UNTIL = {
    "idle": "networkidle",
    "load": "load",
}


class MeasureSettings(BaseModel):
    mode: MeasureMode = "cdp"
    event: MeasureEvent = "idle"
    timeout_ms: int = Field(default=45000, ge=1)
    concurrency: int = Field(default=3, ge=1)
    group_pause: float = Field(default=0.0, ge=0, description="Seconds to wait between groups.")
    headless: bool = True
    viewport_width: int = 1900
    viewport_height: int = 1000


class PageMeasurement(BaseModel):
    """One page load. A missing co2_grams marks a load that failed."""
    model_config = ConfigDict(frozen=True)

    url: str
    visit: Visit = "cold"
    bytes_transferred: int = Field(default=0, ge=0)
    co2_grams: Optional[float] = Field(default=None, ge=0)
    rating: Optional[Rating] = None

    @property
    def failed(self) -> bool:
        return self.co2_grams is None


class BatchResult(BaseModel):
    visit: Visit
    measurements: List[PageMeasurement] = Field(default_factory=list)
    attempted: int = 0
    failures: int = 0
