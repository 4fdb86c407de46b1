"""
Biophysics helper functions used across more than one leafsim module
"""

import numpy as np
from leafsim.constants import cst

def fT_arrheniuspeaked(k_25, T_k, E_a=70.0, H_d=200.0, DeltaS=0.650):
    """
    Scales a 25oC rate constant to leaf temperature with a peaked Arrhenius function, which rises exponentially
    below a thermal optimum and falls off above it as the enzyme deactivates.

    Parameters
    ----------
    k_25: float
        Rate constant at 25oC

    T_k: float
        Leaf temperature, K

    E_a: float
        Activation energy, kJ mol-1. Sets the exponential rise below the optimum

    H_d: float
        Deactivation energy, kJ mol-1. Sets the decline above the optimum

    DeltaS: float
        Entropy term, kJ mol-1 K-1. Together with H_d it places the optimum temperature

    Returns
    -------
    Rate constant at T_k, same units as k_25

    References
    ----------
    Medlyn et al. (2002, doi: 10.1046/j.1365-3040.2002.00891.x) Equation 17.
    """
    E_a_J = E_a * 1e3
    H_d_J = H_d * 1e3
    DeltaS_J = DeltaS * 1e3

    f_activation = np.exp((E_a_J*(T_k - cst.T_25))/(cst.T_25*cst.R*T_k))
    f_deactivation_25 = 1.0 + np.exp((cst.T_25*DeltaS_J - H_d_J)/(cst.T_25*cst.R))
    f_deactivation = 1.0 + np.exp((T_k*DeltaS_J - H_d_J)/(T_k*cst.R))

    return k_25 * f_activation * f_deactivation_25/f_deactivation

def fT_arrhenius(k_25, T_k, E_a=70.0):
    """
    Scales a 25oC rate constant to leaf temperature with an Arrhenius function.

    Parameters
    ----------
    k_25: float
        Rate constant at 25oC

    T_k: float
        Leaf temperature, K

    E_a: float
        Activation energy, kJ mol-1. Negative values give a constant that decreases with temperature

    Returns
    -------
    Rate constant at T_k, same units as k_25

    References
    ----------
    Medlyn et al. (2002, doi: 10.1046/j.1365-3040.2002.00891.x) Equation 16.
    """
    return k_25 * np.exp((E_a*1e3 * (T_k - cst.T_25))/(cst.T_25*cst.R*T_k))

def fT_Q10(k_25, T_k, Q10=2.0):
    """
    Scales a 25oC rate constant to leaf temperature with a Q10 function, e.g. for mitochondrial respiration.

    Parameters
    ----------
    k_25: float
        Rate constant at 25oC

    T_k: float
        Leaf temperature, K

    Q10: float
        Factor by which the rate changes for every 10oC, unitless

    Returns
    -------
    Rate constant at T_k, same units as k_25
    """
    return k_25 * Q10**((T_k - cst.T_25)/10)

def relative_diffusive_coefficient(T):
    """
    Diffusivity of a gas in air at temperature T relative to its value at 25oC.

    Parameters
    ----------
    T: float
        Temperature, K

    Returns
    -------
    Relative diffusive coefficient, unitless

    Notes
    -----
    Diffusive conductances (stomatal, boundary layer) scale with the binary diffusion coefficient, which
    follows a power law in absolute temperature (Campbell and Norman, 1998, Eq. 3.10).
    """
    return (T / cst.T_25) ** cst.D_exponent

def latent_heat_vapor(T):
    """
    Latent heat of vaporization of water, J kg-1, assuming constant isobaric heat capacities
    of vapour and liquid (Kirchhoff's equation) referenced to the triple point.

    Parameters
    ----------
    T: float
        Temperature, K
    """
    return cst.LH_v0 + (cst.cp_v - cst.cp_l) * (T - cst.T_triple)

def M_H2O():
    """Molar mass of water, kg mol-1"""
    return cst.M_H2O

def saturation_vapor_pressure(T):
    """
    Computes the saturation vapor pressure over liquid water (Pa) by integrating the
    Clausius-Clapeyron relation with a temperature-dependent latent heat from the triple point.

    Parameters
    ----------
    T: float
        Temperature, K

    Returns
    -------
    p_sat: float
        Saturation vapor pressure, Pa
    """
    Delta_cp = cst.cp_v - cst.cp_l
    p_sat = cst.P_triple * (T / cst.T_triple) ** (Delta_cp / cst.R_v) * np.exp(
        (cst.LH_v0 - Delta_cp * cst.T_triple) / cst.R_v * (1 / cst.T_triple - 1 / T)
    )
    return p_sat

def relative_viscosity(T):
    """
    Dynamic viscosity of liquid water at temperature T relative to 25oC, unitless.

    References
    ----------
    Reid, Prausnitz and Poling (1987) The Properties of Gases and Liquids, 4th ed.
    """
    def _exponent(_T):
        return cst.vis_A / _T + cst.vis_B * _T + cst.vis_C * _T ** 2
    return np.exp(_exponent(T) - _exponent(cst.T_25))

def surface_tension(T):
    """
    Surface tension of water against air (N m-1), IAPWS (1994) formulation.

    Parameters
    ----------
    T: float
        Temperature, K
    """
    tau = 1 - T / cst.T_crit_H2O
    return 0.2358 * tau ** 1.256 * (1 - 0.625 * tau)

def relative_surface_tension(T):
    """Surface tension of water at temperature T relative to 25oC, unitless"""
    return surface_tension(T) / surface_tension(cst.T_25)

def MinQuadraticSmooth(x, y, eta=0.99):
    """
    Smooth minimum of two limiting rates, the smaller root of eta*z**2 - (x + y)*z + x*y = 0.

    Parameters
    ----------
    x, y: float or array_like
        Limiting rates, e.g. Rubisco and electron transport limited assimilation

    eta: float
        Curvature of the transition, 1 gives the hard minimum

    Returns
    -------
    Co-limited rate, at most min(x, y)
    """
    x = np.asarray(x)
    y = np.asarray(y)
    discriminant = np.maximum((x + y)**2 - 4.0*eta*x*y, 1e-18)
    return (x + y - np.sqrt(discriminant)) / (2.0*eta)
