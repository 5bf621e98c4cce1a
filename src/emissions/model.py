# src/emissions/model.py (Estimation Layer)
from typing import Dict, Literal, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field

Rating = Literal["A+", "A", "B", "C", "D", "E", "F"]
ModelName = Literal["swd", "swd3", "swd4", "1byte"]

RATING_BANDS: Tuple[Tuple[str, str], ...] = (
    ("fifth_percentile", "A+"),
    ("tenth_percentile", "A"),
    ("twentieth_percentile", "B"),
    ("thirtieth_percentile", "C"),
    ("fortieth_percentile", "D"),
    ("fiftieth_percentile", "E"),
)
WORST_RATING: Rating = "F"
BEST_RATING: Rating = "A+"


class RatingTable(BaseModel):
    """Upper CO2e bounds (grams per page view) of the Digital Carbon Rating bands."""
    model_config = ConfigDict(frozen=True)

    version: int
    fifth_percentile: float
    tenth_percentile: float
    twentieth_percentile: float
    thirtieth_percentile: float
    fortieth_percentile: float
    fiftieth_percentile: float

    def thresholds(self) -> Dict[str, float]:
        return {label: getattr(self, field) for field, label in RATING_BANDS}

    def classify(self, co2e: float) -> Rating:
        """Label of the first band whose upper bound the value does not exceed."""
        for field, label in RATING_BANDS:
            if co2e <= getattr(self, field):
                return label
        return WORST_RATING


class CarbonResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    total: float = Field(ge=0, description="Grams of CO2e.")
    rating: Optional[Rating] = None


class ModelConfiguration(BaseModel):
    model_config = ConfigDict(frozen=True, protected_namespaces=())

    model_name: ModelName = "swd"
    ratings_enabled: bool = True
