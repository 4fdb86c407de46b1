"""
Leaf state updates: refresh temperature and pressure dependent leaf state, and the maximal assimilation allowed by hydraulics
"""

import logging
import numpy as np
from leafsim.biophysics_funcs import relative_diffusive_coefficient, latent_heat_vapor, M_H2O, saturation_vapor_pressure
from leafsim.constants import cst
from leafsim.leafgasexchange import photosystem_temperature_dependence, leaf_photosynthesis
from leafsim.planthydraulics import LeafHydraulics, WholePlantHydraulics, temperature_effects, critical_flow
from leafsim.utils import check_finite, check_positive

logger = logging.getLogger(__name__)

GSW_FLOOR = 1e-3  ## Floor on the stomatal resistance left once boundary layer resistance is removed (m2 s mol-1)

def update_leaf_TP(canopyi, hs, envir):
    """
    Update leaf physiological state if leaf temperature or upstream water potential changed since the last update.

    Parameters
    ----------
    canopyi : CanopyLayer
        Leaf layer state, updated in place
    hs : LeafHydraulics or WholePlantHydraulics
        Hydraulic system supplying the leaf layer
    envir : AirLayer
        Environmental state

    Returns
    -------
    None

    Notes
    -----
    A temperature change refreshes everything, including the critical flow. A change in upstream water potential
    alone only refreshes the critical flow. Otherwise nothing is done.

    With LeafHydraulics, the leaf's upstream water potential is written into the hydraulic system before solving.
    With WholePlantHydraulics it is not: the soil-side water potential of the plant must be kept in sync by the
    driver, and the whole-plant critical flow is converted to a per leaf area value with canopyi.LA.

    Sap temperature is not taken from the leaf: the driver must set hs.T_sap (for a single leaf, usually to
    canopyi.T) before the update. Otherwise a leaf temperature change refreshes the temperature dependent leaf
    state but leaves ec unchanged.
    """
    canopyi.check_drivers()
    if isinstance(hs, LeafHydraulics):
        _update_leaf_TP_leaf(canopyi, hs, envir)
    elif isinstance(hs, WholePlantHydraulics):
        check_positive(LA=canopyi.LA)
        _update_leaf_TP_plant(canopyi, hs, envir)
    else:
        raise TypeError(f"Hydraulic system of type {type(hs).__name__} not supported, use LeafHydraulics or WholePlantHydraulics")

def _update_temperature_dependence(canopyi, hs, envir):
    logger.debug("Leaf temperature changed from %.2f to %.2f K", canopyi.T_old, canopyi.T)
    canopyi.g_max = canopyi.g_max25 * relative_diffusive_coefficient(canopyi.T)
    canopyi.g_min = canopyi.g_min25 * relative_diffusive_coefficient(canopyi.T)
    canopyi.LV = latent_heat_vapor(canopyi.T) * M_H2O()
    canopyi.ps.t = canopyi.T
    photosystem_temperature_dependence(canopyi.ps.PSM, envir, canopyi.ps.t)
    canopyi.ps.p_H2O_sat = saturation_vapor_pressure(canopyi.ps.t)
    canopyi.p_sat = canopyi.ps.p_H2O_sat
    canopyi.ps._t = canopyi.ps.t
    temperature_effects(hs)

def _update_leaf_TP_leaf(canopyi, hs, envir):
    if canopyi.T != canopyi.T_old:
        _update_temperature_dependence(canopyi, hs, envir)
        hs.p_ups = canopyi.p_ups
        canopyi.ec = critical_flow(hs, canopyi.ec)
        canopyi.T_old = canopyi.T
        canopyi.p_old = canopyi.p_ups
    elif canopyi.p_ups != canopyi.p_old:
        logger.debug("Upstream water potential changed from %.4f to %.4f MPa", canopyi.p_old, canopyi.p_ups)
        hs.p_ups = canopyi.p_ups
        canopyi.ec = critical_flow(hs, canopyi.ec)
        canopyi.p_old = canopyi.p_ups

def _update_leaf_TP_plant(canopyi, hs, envir):
    # canopyi.p_ups is not written into hs
    if canopyi.T != canopyi.T_old:
        _update_temperature_dependence(canopyi, hs, envir)
        tree_ec = critical_flow(hs, canopyi.ec * canopyi.LA)
        canopyi.ec = tree_ec / canopyi.LA
        canopyi.T_old = canopyi.T
        canopyi.p_old = canopyi.p_ups
    elif canopyi.p_ups != canopyi.p_old:
        logger.debug("Upstream water potential changed from %.4f to %.4f MPa", canopyi.p_old, canopyi.p_ups)
        tree_ec = critical_flow(hs, canopyi.ec * canopyi.LA)
        canopyi.ec = tree_ec / canopyi.LA
        canopyi.p_old = canopyi.p_ups

def critical_conductance(ec, p_sat, p_H2O, P_AIR):
    """
    Total leaf conductance to H2O at which transpiration equals the critical flow.

    Parameters
    ----------
    ec : float
        Critical transpiration per leaf area (mol m-2 s-1)
    p_sat : float
        Saturation vapor pressure at leaf temperature (Pa)
    p_H2O : float
        Atmospheric water vapor partial pressure (Pa)
    P_AIR : float
        Atmospheric pressure (Pa)

    Returns
    -------
    g_crit : float
        Critical conductance (mol m-2 s-1). Infinite when there is no vapor pressure deficit to drive transpiration.
    """
    vpd = p_sat - p_H2O
    if vpd <= 0:
        return np.inf
    return ec / vpd * P_AIR

def max_stomatal_conductance(g_crit, g_bw):
    """
    Largest stomatal conductance to H2O that, in series with the boundary layer, does not exceed g_crit.

    Parameters
    ----------
    g_crit : float
        Critical total leaf conductance to H2O (mol m-2 s-1)
    g_bw : float
        Boundary layer conductance to H2O (mol m-2 s-1)

    Returns
    -------
    g_sw : float
        Stomatal conductance to H2O (mol m-2 s-1), at most 1/GSW_FLOOR
    """
    r_crit = 1/g_crit if g_crit > 0 else np.inf
    return 1 / max(r_crit - 1/g_bw, GSW_FLOOR)

def update_leaf_AK(canopyi, hs, envir):
    """
    Update the maximal net assimilation of each light bin, and the maximal relative hydraulic conductance of the leaf,
    for use by stomatal optimization models.

    Parameters
    ----------
    canopyi : CanopyLayer
        Leaf layer state, with ec current for the present temperature and water potential (see update_leaf_TP)
    hs : LeafHydraulics
        Leaf hydraulic system
    envir : AirLayer
        Environmental state

    Returns
    -------
    None

    Notes
    -----
    The stomatal conductance of each bin is the hydraulic maximum bounded to [g_min, g_max]. Boundary layer,
    stomatal and mesophyll conductances act in series for CO2, with stomatal conductance to CO2 being that to H2O
    divided by 1.6.
    """
    canopyi.check_bins()
    check_positive(P_AIR=envir.P_AIR)
    check_finite(ec=canopyi.ec, p_sat=canopyi.p_sat, p_H2O=envir.p_H2O)

    g_crit = critical_conductance(canopyi.ec, canopyi.p_sat, envir.p_H2O, envir.P_AIR)
    for i in range(canopyi.nleaf):
        g_sw = max_stomatal_conductance(g_crit, canopyi.g_bw[i])
        g_sw = min(g_sw, canopyi.g_max)
        g_sw = max(g_sw, canopyi.g_min)
        g_lc = 1 / (1/canopyi.g_bc[i] + cst.D_H2O_CO2/g_sw + 1/canopyi.g_m[i])
        canopyi.ps.apar = canopyi.APAR[i]
        try:
            leaf_photosynthesis(canopyi.ps, envir, "glc", g_lc)
        except Exception as err:
            err.light_bin = i
            raise

        canopyi.a_max[i] = canopyi.ps.PSM.a_net

    canopyi.kr_max = hs.k_history[-1]
