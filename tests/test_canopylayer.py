import numpy as np
import pytest

from leafsim.biophysics_funcs import saturation_vapor_pressure
from leafsim.canopylayer import BIN_FIELDS, CanopyLayer


def test_default_state(canopy):
    for name in BIN_FIELDS:
        assert getattr(canopy, name).shape == (canopy.nleaf,)
    assert canopy.g_min == canopy.g_min25
    assert canopy.g_max == canopy.g_max25
    assert canopy.p_sat == pytest.approx(saturation_vapor_pressure(canopy.T))
    canopy.check_drivers()
    canopy.check_bins()


def test_bins_from_lists():
    canopy = CanopyLayer(nleaf=3, APAR=[1500, 800, 100], g_sw=[0.2, 0.1, 0.05])
    assert canopy.APAR.dtype == float
    assert np.all(canopy.g_bw == 3.0)
    canopy.check_bins()


def test_reset_forces_next_update(canopy):
    canopy.T_old = canopy.T
    canopy.p_old = canopy.p_ups
    canopy.reset()
    assert canopy.T_old != canopy.T
    assert canopy.p_old != canopy.p_ups


@pytest.mark.parametrize(
    "kwargs, match",
    [
        ({"T": 0.0}, "'T'"),
        ({"T": np.nan}, "'T'"),
        ({"p_ups": np.inf}, "'p_ups'"),
        ({"g_min25": -0.01}, "'g_min25'"),
        ({"g_min25": 0.5, "g_max25": 0.2}, "cannot exceed"),
    ],
)
def test_invalid_drivers(canopy, kwargs, match):
    for name, value in kwargs.items():
        setattr(canopy, name, value)
    with pytest.raises(ValueError, match=match):
        canopy.check_drivers()


def test_bins_must_share_length():
    canopy = CanopyLayer()
    canopy.g_m = np.array([0.5])
    with pytest.raises(ValueError, match="'g_m' has length 1"):
        canopy.check_bins()


def test_bins_must_match_nleaf():
    canopy = CanopyLayer()
    canopy.nleaf = 3
    with pytest.raises(ValueError, match="nleaf"):
        canopy.check_bins()


def test_bin_values_validated():
    with pytest.raises(ValueError, match="'g_bw'"):
        CanopyLayer(g_bw=[3.0, 0.0]).check_bins()
    with pytest.raises(ValueError, match="'APAR'"):
        CanopyLayer(APAR=[1000.0, -1.0]).check_bins()
