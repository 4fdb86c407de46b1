import numpy as np
import pytest
from numpy.testing import assert_allclose

from leafsim.canopylayer import CanopyLayer
from leafsim.leafgasexchange import LeafBiochemistry, leaf_photosynthesis
from leafsim.stomatalcontrol import gas_exchange, gas_exchange_all, gsw_control


def _a_net_at(canopy, envir, i, g_sw, apar):
    g_lc = 1 / (1.6/g_sw + 1/canopy.g_m[i] + 1/canopy.g_bc[i])
    return leaf_photosynthesis(LeafBiochemistry(apar=apar), envir, "glc", g_lc)


def test_conductance_below_minimum_is_raised(envir):
    canopy = CanopyLayer(g_min25=0.1, g_sw=[0.05, 0.3])
    gsw_control(canopy, envir)
    assert canopy.g_sw[0] == 0.1
    assert canopy.a_net[0] == pytest.approx(_a_net_at(canopy, envir, 0, 0.1, canopy.APAR[0]), rel=1e-8)
    # bin 1 is within range and left untouched
    assert canopy.g_sw[1] == 0.3
    assert canopy.a_net[1] == 0.0


def test_conductance_above_maximum_is_lowered(canopy, envir):
    canopy.g_sw = np.array([0.2, 2.0])
    gsw_control(canopy, envir)
    assert canopy.g_sw[1] == canopy.g_max
    assert canopy.g_lc[1] == pytest.approx(1 / (1.6/canopy.g_max + 1/canopy.g_m[1] + 1/canopy.g_bc[1]))
    assert canopy.a_net[0] == 0.0


def test_all_bins_within_bounds(envir):
    rng = np.random.default_rng(42)
    canopy = CanopyLayer(nleaf=6, APAR=rng.uniform(0.0, 2000.0, 6), g_sw=rng.uniform(0.0, 2.0, 6))
    gsw_control(canopy, envir)
    assert np.all(canopy.g_sw >= canopy.g_min)
    assert np.all(canopy.g_sw <= canopy.g_max)


def test_single_bin_uses_current_light(canopy, envir):
    canopy.g_sw[0] = 0.001
    canopy.ps.apar = 500.0
    gsw_control(canopy, envir, 0)
    assert canopy.g_sw[0] == canopy.g_min
    assert canopy.ps.apar == 500.0
    assert canopy.a_net[0] == pytest.approx(_a_net_at(canopy, envir, 0, canopy.g_min, 500.0), rel=1e-8)


@pytest.mark.parametrize("g_sw", [np.nan, np.inf, -0.1])
def test_single_bin_rejects_invalid_conductance(canopy, envir, g_sw):
    canopy.g_sw[0] = g_sw
    with pytest.raises(ValueError, match="'g_sw'"):
        gsw_control(canopy, envir, 0)
    assert canopy.a_net[0] == 0.0


def test_gas_exchange_fluxes(canopy, envir):
    gas_exchange(canopy, envir, 0, 0.2)
    g_lw = 1 / (1/0.2 + 1/canopy.g_bw[0])
    assert canopy.g_lw[0] == pytest.approx(g_lw)
    assert canopy.g_sc[0] == pytest.approx(0.2 / 1.6)
    assert canopy.e[0] == pytest.approx(g_lw * (canopy.p_sat - envir.p_H2O) / envir.P_AIR)
    assert canopy.a_gross[0] == pytest.approx(canopy.a_net[0] + canopy.ps.PSM.Rd)
    assert 0 < canopy.p_i[0] < envir.p_a


def test_gas_exchange_requires_positive_conductance(canopy, envir):
    with pytest.raises(ValueError, match="'g_sw'"):
        gas_exchange(canopy, envir, 0, 0.0)


def test_sunlit_bin_assimilates_more(canopy, envir):
    canopy.APAR = np.array([1500.0, 100.0])
    canopy.g_sw = np.array([0.2, 0.2])
    gas_exchange_all(canopy, envir)
    assert canopy.a_net[0] > canopy.a_net[1]
    assert_allclose(canopy.e[0], canopy.e[1])
