# src/emissions/estimator.py
import logging
from typing import Optional, Tuple

from emissions.model import BEST_RATING, ModelConfiguration, Rating
from emissions.models.base import CarbonModel
from emissions.models.factory import build_model
from emissions.ratings import carbon_rating

logger = logging.getLogger(__name__)


class CarbonEstimator:
    """
    Turns byte counts into (grams CO2e, rating) pairs for one model configuration.

    The estimator holds no per-call state: every call returns its own values.
    Whether a rating is produced at all is decided by `ratings_active`, which
    requires both the user's consent and a model that can rate.
    """

    def __init__(self, config: ModelConfiguration, model: Optional[CarbonModel] = None):
        self.config = config
        self.model = model or build_model(config.model_name)

    @property
    def ratings_active(self) -> bool:
        return self.config.ratings_enabled and self.model.supports_rating

    def describe(self) -> str:
        suffix = " (latest)" if self.config.model_name == "swd" else ""
        return f"{self.model.label}{suffix}"

    def capability_warning(self) -> Optional[str]:
        """Message for runs that ask for ratings the chosen model cannot give."""
        if self.config.ratings_enabled and not self.model.supports_rating:
            return (
                "Carbon ratings are only available with the Sustainable Web Design Model. "
                "Carbon ratings will not display."
            )
        return None

    def estimate(self, bytes_transferred: int, is_green: bool = False) -> Tuple[float, Optional[Rating]]:
        """
        Estimates the emissions of one page view.

        Args:
            bytes_transferred: Bytes sent over the wire, >= 0.
            is_green: Whether the site is on green hosting.

        Returns:
            (co2_grams, rating); rating is None unless ratings are active.
        """
        if bytes_transferred < 0:
            raise ValueError(f"bytes_transferred must be >= 0, got {bytes_transferred}")

        if bytes_transferred == 0:
            return 0.0, (BEST_RATING if self.ratings_active else None)

        result = self.model.per_byte(bytes_transferred, green=is_green, rating=self.ratings_active)
        if not self.ratings_active:
            return result.total, None
        return result.total, result.rating or self.rate(result.total)

    def rate(self, co2e: Optional[float]) -> Optional[Rating]:
        """
        Rates an arbitrary CO2e value, e.g. the site-wide mean, with the
        table matching the model version. None when ratings are inactive.
        """
        if not self.ratings_active or co2e is None:
            return None
        return carbon_rating(co2e, self.model.version)
