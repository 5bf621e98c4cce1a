# src/emissions/models/one_byte.py
from emissions.model import CarbonResult
from emissions.models.base import CarbonModel

# The Shift Project's "1byte" model coefficients
CO2_PER_KWH_GRID = 519  # gCO2e/kWh
KWH_PER_BYTE_IN_DC = 0.00000000072
FIXED_NETWORK_WIRED = 0.00000000429
FIXED_NETWORK_WIFI = 0.00000000152
FOUR_G_MOBILE = 0.00000000884
KWH_PER_BYTE_FOR_NETWORK = (FIXED_NETWORK_WIRED + FIXED_NETWORK_WIFI + FOUR_G_MOBILE) / 3


class OneByteModel(CarbonModel):
    """
    Energy per byte for the data centre and the network, times one grid
    intensity. Has no notion of green hosting and no rating scale.
    """

    name = "1byte"
    label = "1byte"

    def per_byte(self, bytes_transferred: float, green: bool = False, rating: bool = False) -> CarbonResult:
        if bytes_transferred < 1:
            return CarbonResult(total=0.0)
        kwh_per_byte = KWH_PER_BYTE_IN_DC + KWH_PER_BYTE_FOR_NETWORK
        return CarbonResult(total=bytes_transferred * kwh_per_byte * CO2_PER_KWH_GRID)
