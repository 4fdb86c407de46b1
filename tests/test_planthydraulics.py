import numpy as np
import pytest
from numpy.testing import assert_allclose

from leafsim.planthydraulics import (
    LeafHydraulics,
    _solve_critical_flow,
    critical_flow,
    temperature_effects,
    weibull_k_ratio,
)
from leafsim.utils import SolveError


def test_weibull_vulnerability_curve():
    assert weibull_k_ratio(0.0, 2.0, 5.0) == pytest.approx(1.0)
    assert weibull_k_ratio(0.5, 2.0, 5.0) == pytest.approx(1.0)
    assert weibull_k_ratio(-2.0, 2.0, 5.0) == pytest.approx(np.exp(-1))
    assert weibull_k_ratio(-50.0, 2.0, 5.0) > 0


def test_critical_pressure_from_vulnerability(leaf_hs):
    assert leaf_hs.p_crt < 0
    assert weibull_k_ratio(leaf_hs.p_crt, leaf_hs.b, leaf_hs.c) == pytest.approx(leaf_hs.ratio_crit)


def test_critical_flow_reaches_critical_pressure(leaf_hs):
    leaf_hs.p_ups = -0.5
    ec = critical_flow(leaf_hs, 0.01)
    assert ec > 0
    assert_allclose(leaf_hs.xylem_end_pressure(ec), leaf_hs.p_crt, atol=1e-6)
    leaf_hs.pressure_profile(ec)
    assert_allclose(leaf_hs.p_dos, leaf_hs.p_crt, atol=1e-6)
    assert np.all(np.diff(leaf_hs.p_element) < 0)


def test_critical_flow_independent_of_seed(leaf_hs):
    leaf_hs.p_ups = -0.3
    ecs = [LeafHydraulics(p_ups=-0.3).critical_flow(seed) for seed in (0.0, 1e-4, 0.01, 5.0)]
    assert_allclose(ecs, ecs[0], rtol=1e-9)


def test_critical_flow_monotone_in_upstream_pressure(leaf_hs):
    ecs = []
    for p_ups in (0.0, -0.5, -1.0, -1.5, -2.0, -2.5):
        leaf_hs.p_ups = p_ups
        ecs.append(critical_flow(leaf_hs, ecs[-1] if ecs else 0.01))
    assert np.all(np.diff(ecs) < 0)


def test_critical_flow_is_zero_below_critical_pressure(leaf_hs):
    leaf_hs.p_ups = leaf_hs.p_crt - 0.5
    assert critical_flow(leaf_hs, 0.01) == 0.0


def test_drought_legacy_is_irreversible_until_reset(leaf_hs):
    ec_fresh = LeafHydraulics().critical_flow(0.01)

    leaf_hs.p_ups = -2.0
    leaf_hs.critical_flow(0.01)
    assert_allclose(leaf_hs.k_history, np.exp(-1))
    assert_allclose(leaf_hs.p_history, -2.0)

    leaf_hs.p_ups = 0.0
    ec_recovered = leaf_hs.critical_flow(0.01)
    assert ec_recovered < ec_fresh
    assert leaf_hs.k_history[-1] == pytest.approx(np.exp(-1))

    leaf_hs.reset_legacy()
    assert_allclose(leaf_hs.critical_flow(0.01), ec_fresh, rtol=1e-9)
    assert leaf_hs.k_history[-1] == 1.0


def test_temperature_effects_scale_critical_flow(leaf_hs):
    ec_25 = leaf_hs.critical_flow(0.01)
    leaf_hs.T_sap = 308.15
    temperature_effects(leaf_hs)
    assert leaf_hs.f_vis < 1.0
    assert leaf_hs.f_st < 1.0
    ec_35 = leaf_hs.critical_flow(ec_25)
    # both the conductance and the 25oC equivalent pressures scale, so the flow scales by f_st/f_vis
    assert_allclose(ec_35, ec_25 * leaf_hs.f_st / leaf_hs.f_vis, rtol=1e-8)


def test_unbracketable_residual_raises_solve_error():
    with pytest.raises(SolveError):
        _solve_critical_flow(lambda flow: 1.0, 0.01, max_expand=5)


def test_whole_plant_critical_flow(plant_hs):
    plant_hs.p_ups = -0.2
    flow = plant_hs.critical_flow(1.0)
    assert flow > 0
    p_leaf = plant_hs.pressure_profile(flow)
    assert_allclose(p_leaf, plant_hs.leaf.p_crt, atol=1e-6)
    assert plant_hs.stem.p_ups == plant_hs.root.p_dos
    assert plant_hs.leaf.p_ups == plant_hs.stem.p_dos
    # the leaf segment alone would allow more flow than the plant
    assert flow / plant_hs.leaf.area < LeafHydraulics(k_max=plant_hs.leaf.k_max, p_ups=-0.2).critical_flow(0.01)


def test_whole_plant_shares_leaf_history(plant_hs):
    assert plant_hs.k_history is plant_hs.leaf.k_history
    plant_hs.p_ups = -1.8
    plant_hs.critical_flow(1.0)
    assert plant_hs.k_history[-1] < 1.0
    plant_hs.reset_legacy()
    assert np.all(plant_hs.k_history == 1.0)
    assert np.all(plant_hs.root.k_history == 1.0)
