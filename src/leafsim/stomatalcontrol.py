"""
Stomatal control: gas exchange at a prescribed stomatal conductance, and enforcement of the physiological conductance range
"""

import logging
from leafsim.constants import cst
from leafsim.leafgasexchange import leaf_photosynthesis
from leafsim.utils import check_nonnegative, check_positive

logger = logging.getLogger(__name__)

def gas_exchange(canopyi, envir, ind, g_sw):
    """
    Leaf gas exchange of one light bin driven by stomatal conductance.

    Parameters
    ----------
    canopyi : CanopyLayer
        Leaf layer state, updated in place
    envir : AirLayer
        Environmental state
    ind : int
        Light bin index
    g_sw : float
        Stomatal conductance to H2O (mol m-2 s-1)

    Returns
    -------
    None

    Notes
    -----
    Absorbed PAR is taken from canopyi.ps.apar as currently set by the caller.
    """
    check_positive(g_sw=g_sw)
    canopyi.g_sw[ind] = g_sw
    canopyi.g_lw[ind] = 1 / (1/g_sw + 1/canopyi.g_bw[ind])
    canopyi.g_sc[ind] = g_sw / cst.D_H2O_CO2
    canopyi.g_lc[ind] = 1 / (1/canopyi.g_sc[ind] + 1/canopyi.g_m[ind] + 1/canopyi.g_bc[ind])

    leaf_photosynthesis(canopyi.ps, envir, "glc", canopyi.g_lc[ind])

    canopyi.a_net[ind] = canopyi.ps.PSM.a_net
    canopyi.a_gross[ind] = canopyi.ps.PSM.a_gross
    canopyi.p_i[ind] = canopyi.ps.PSM.p_i
    canopyi.e[ind] = canopyi.g_lw[ind] * (canopyi.p_sat - envir.p_H2O) / envir.P_AIR

def gas_exchange_all(canopyi, envir):
    """Leaf gas exchange of every light bin at its current stomatal conductance and absorbed PAR."""
    canopyi.check_bins()
    for i in range(canopyi.nleaf):
        canopyi.ps.apar = canopyi.APAR[i]
        try:
            gas_exchange(canopyi, envir, i, canopyi.g_sw[i])
        except Exception as err:
            err.light_bin = i
            raise

def gsw_control(canopyi, envir, ind=None):
    """
    Make sure stomatal conductance is within its physiological range [g_min, g_max], re-evaluating gas exchange at
    the violated bound.

    Parameters
    ----------
    canopyi : CanopyLayer
        Leaf layer state, updated in place
    envir : AirLayer
        Environmental state
    ind : int, optional
        Light bin index. The caller must have set canopyi.ps.apar for this bin. If None, every bin is checked with
        its own absorbed PAR.

    Returns
    -------
    None

    Raises
    ------
    ValueError: If a checked g_sw is negative or not finite.

    Notes
    -----
    This is meant to be used after stomatal conductance has been set externally, e.g. by a stomatal optimization
    model, and before fluxes of the leaf layer are used.
    """
    if ind is None:
        canopyi.check_bins()
        for i in range(canopyi.nleaf):
            canopyi.ps.apar = canopyi.APAR[i]
            try:
                gsw_control(canopyi, envir, i)
            except Exception as err:
                err.light_bin = i
                raise
        return

    check_nonnegative(g_sw=canopyi.g_sw[ind])
    if canopyi.g_sw[ind] < canopyi.g_min:
        logger.debug("g_sw of light bin %d below g_min, %.4g < %.4g", ind, canopyi.g_sw[ind], canopyi.g_min)
        gas_exchange(canopyi, envir, ind, canopyi.g_min)
    elif canopyi.g_sw[ind] > canopyi.g_max:
        logger.debug("g_sw of light bin %d above g_max, %.4g > %.4g", ind, canopyi.g_sw[ind], canopyi.g_max)
        gas_exchange(canopyi, envir, ind, canopyi.g_max)
