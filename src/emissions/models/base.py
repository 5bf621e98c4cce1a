# src/emissions/models/base.py
from abc import ABC, abstractmethod
from typing import Optional

from emissions.model import CarbonResult


class CarbonModel(ABC):
    """
    Converts bytes transferred into grams of CO2e.

    Models that belong to the Sustainable Web Design family expose their
    major `version` and can rate their own results.
    """

    name: str = "base"
    label: str = "Carbon model"
    version: Optional[int] = None

    @property
    def supports_rating(self) -> bool:
        return False

    @abstractmethod
    def per_byte(self, bytes_transferred: float, green: bool = False, rating: bool = False) -> CarbonResult:
        """
        Estimates emissions for a transfer.

        Args:
            bytes_transferred: Bytes sent over the wire.
            green: Whether the data centre runs on renewable energy.
            rating: Attach the model-native rating when the model supports one.
        """

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.name}>"
