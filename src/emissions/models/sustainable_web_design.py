# src/emissions/models/sustainable_web_design.py
"""
Sustainable Web Design Model, versions 3 and 4.

https://sustainablewebdesign.org/estimating-digital-emissions/

Both versions split the energy of a transfer into segments (data centre,
network, user device, production). Green hosting changes only the data-centre
segment: v3 prices it at the renewables grid intensity, v4 drops its
operational emissions entirely.
"""
from abc import abstractmethod
from typing import Dict

from emissions.model import CarbonResult
from emissions.models.base import CarbonModel
from emissions.ratings import SWDM3_RATINGS, SWDM4_RATINGS

GIGABYTE = 1000 * 1000 * 1000
RENEWABLES_GRID_INTENSITY = 50  # gCO2e/kWh


class SustainableWebDesignModel(CarbonModel):
    rating_table = SWDM4_RATINGS

    @property
    def supports_rating(self) -> bool:
        return True

    @abstractmethod
    def segments(self, bytes_transferred: float, green: bool = False) -> Dict[str, float]:
        """Grams of CO2e per segment of the transfer."""

    def per_byte(self, bytes_transferred: float, green: bool = False, rating: bool = False) -> CarbonResult:
        if bytes_transferred < 1:
            total = 0.0
        else:
            total = sum(self.segments(bytes_transferred, green).values())
        return CarbonResult(
            total=total,
            rating=self.rating_table.classify(total) if rating else None,
        )


class SustainableWebDesignV3(SustainableWebDesignModel):
    name = "swd3"
    label = "Sustainable Web Design Model v3"
    version = 3
    rating_table = SWDM3_RATINGS

    KWH_PER_GB = 0.81
    GLOBAL_GRID_INTENSITY = 442
    SEGMENT_SHARES = {
        "consumer_device": 0.52,
        "network": 0.14,
        "production": 0.19,
        "data_center": 0.15,
    }

    def segments(self, bytes_transferred: float, green: bool = False) -> Dict[str, float]:
        energy = bytes_transferred / GIGABYTE * self.KWH_PER_GB
        result = {}
        for segment, share in self.SEGMENT_SHARES.items():
            intensity = self.GLOBAL_GRID_INTENSITY
            if green and segment == "data_center":
                intensity = RENEWABLES_GRID_INTENSITY
            result[segment] = energy * share * intensity
        return result


class SustainableWebDesignV4(SustainableWebDesignModel):
    name = "swd4"
    label = "Sustainable Web Design Model v4"
    version = 4
    rating_table = SWDM4_RATINGS

    GLOBAL_GRID_INTENSITY = 494
    # Share of operational data-centre emissions removed by green hosting
    GREEN_HOSTING_FACTOR = 1.0
    OPERATIONAL_KWH_PER_GB = {
        "data_center": 0.055,
        "network": 0.059,
        "user_device": 0.080,
    }
    EMBODIED_KWH_PER_GB = {
        "data_center": 0.012,
        "network": 0.013,
        "user_device": 0.081,
    }

    def segments(self, bytes_transferred: float, green: bool = False) -> Dict[str, float]:
        gigabytes = bytes_transferred / GIGABYTE
        result = {}
        for segment, kwh in self.OPERATIONAL_KWH_PER_GB.items():
            share = 1.0 - self.GREEN_HOSTING_FACTOR if green and segment == "data_center" else 1.0
            result[f"operational_{segment}"] = gigabytes * kwh * self.GLOBAL_GRID_INTENSITY * share
        # Embodied emissions do not depend on how the data centre is powered
        for segment, kwh in self.EMBODIED_KWH_PER_GB.items():
            result[f"embodied_{segment}"] = gigabytes * kwh * self.GLOBAL_GRID_INTENSITY
        return result
