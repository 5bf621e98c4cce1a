# tests/estimation/test_estimator.py
from unittest.mock import MagicMock

import pytest

from emissions.estimator import CarbonEstimator
from emissions.model import CarbonResult, ModelConfiguration


@pytest.fixture
def swd_estimator():
    return CarbonEstimator(ModelConfiguration(model_name="swd", ratings_enabled=True))


def test_zero_bytes_skips_the_model():
    model = MagicMock()
    model.supports_rating = True
    estimator = CarbonEstimator(ModelConfiguration(), model=model)

    assert estimator.estimate(0) == (0.0, "A+")
    model.per_byte.assert_not_called()


def test_zero_bytes_without_ratings():
    estimator = CarbonEstimator(ModelConfiguration(ratings_enabled=False))
    assert estimator.estimate(0) == (0.0, None)


def test_negative_bytes_rejected(swd_estimator):
    with pytest.raises(ValueError):
        swd_estimator.estimate(-1)


def test_estimate_is_monotonic_in_bytes(swd_estimator):
    sizes = [1, 1_000, 250_000, 1_000_000, 5_000_000, 80_000_000]
    totals = [swd_estimator.estimate(size)[0] for size in sizes]
    assert totals == sorted(totals)
    assert totals[0] > 0


def test_green_hosting_lowers_estimate(swd_estimator):
    grey, _ = swd_estimator.estimate(2_000_000, is_green=False)
    green, _ = swd_estimator.estimate(2_000_000, is_green=True)
    assert green < grey


def test_estimates_do_not_share_state(swd_estimator):
    small = swd_estimator.estimate(100_000)
    swd_estimator.estimate(9_000_000)
    assert swd_estimator.estimate(100_000) == small


def test_one_byte_has_no_rating():
    estimator = CarbonEstimator(ModelConfiguration(model_name="1byte", ratings_enabled=True))
    co2, rating = estimator.estimate(1_000_000)

    assert co2 > 0
    assert rating is None
    assert not estimator.ratings_active
    assert estimator.rate(0.01) is None


def test_capability_warning_only_for_incapable_model():
    assert CarbonEstimator(ModelConfiguration(model_name="1byte")).capability_warning()
    assert CarbonEstimator(ModelConfiguration(model_name="1byte", ratings_enabled=False)).capability_warning() is None
    assert CarbonEstimator(ModelConfiguration(model_name="swd3")).capability_warning() is None


def test_fallback_rating_when_model_gives_none():
    model = MagicMock()
    model.supports_rating = True
    model.version = 4
    model.per_byte.return_value = CarbonResult(total=0.1, rating=None)
    estimator = CarbonEstimator(ModelConfiguration(), model=model)

    assert estimator.estimate(500) == (0.1, "B")


def test_rate_uses_model_version():
    v3 = CarbonEstimator(ModelConfiguration(model_name="swd3"))
    v4 = CarbonEstimator(ModelConfiguration(model_name="swd4"))
    assert v3.rate(0.3) == "B"
    assert v4.rate(0.3) == "E"


def test_describe_marks_latest():
    assert CarbonEstimator(ModelConfiguration(model_name="swd")).describe().endswith("(latest)")
    assert "v3" in CarbonEstimator(ModelConfiguration(model_name="swd3")).describe()
