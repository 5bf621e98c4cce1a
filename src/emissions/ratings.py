# src/emissions/ratings.py
"""
Digital Carbon Rating tables of the Sustainable Web Design Model.

See https://sustainablewebdesign.org/digital-carbon-ratings/. Page-level
ratings come with the model result; these tables also rate values the model
never saw, such as the site-wide mean.
"""
from typing import Dict, Optional

from emissions.model import Rating, RatingTable

SWDM3_RATINGS = RatingTable(
    version=3,
    fifth_percentile=0.095,
    tenth_percentile=0.186,
    twentieth_percentile=0.341,
    thirtieth_percentile=0.493,
    fortieth_percentile=0.656,
    fiftieth_percentile=0.846,
)

SWDM4_RATINGS = RatingTable(
    version=4,
    fifth_percentile=0.04,
    tenth_percentile=0.079,
    twentieth_percentile=0.145,
    thirtieth_percentile=0.209,
    fortieth_percentile=0.278,
    fiftieth_percentile=0.359,
)

RATING_TABLES: Dict[int, RatingTable] = {
    3: SWDM3_RATINGS,
    4: SWDM4_RATINGS,
}


def rating_table_for(version: int) -> RatingTable:
    try:
        return RATING_TABLES[version]
    except KeyError:
        raise ValueError(f"No carbon rating table for Sustainable Web Design v{version}") from None


def carbon_rating(co2e: Optional[float], version: int) -> Optional[Rating]:
    """
    Rates a CO2e value (grams) against the table of the given model version.
    Thresholds are inclusive upper bounds; None in, None out.
    """
    if co2e is None:
        return None
    return rating_table_for(version).classify(co2e)
