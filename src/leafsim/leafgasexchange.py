"""
Leaf gas exchange model classes: Includes C3 photosynthesis equations, temperature dependence and the leaf biochemistry state
"""

import logging
import numpy as np
from attrs import define, field
from scipy.optimize import brentq
from leafsim.biophysics_funcs import fT_arrhenius, fT_arrheniuspeaked, fT_Q10, MinQuadraticSmooth, saturation_vapor_pressure
from leafsim.constants import cst

logger = logging.getLogger(__name__)

@define
class C3Photosynthesis:
    """
    Calculator of C3 leaf photosynthesis following Farquhar et al. (1980), with CO2 partial pressures in Pa and
    rates in umol m-2 s-1.
    """

    ## Biochemical constants at 25oC
    Vcmax25: float = field(default=80.0)  ## Maximum Rubisco activity at 25oC, umol CO2 m-2 s-1
    Jmax25: float = field(default=133.6)  ## Maximum electron transport rate at 25oC, umol e-1 m-2 s-1
    Rd25: float = field(default=1.2)  ## Mitochondrial respiration at 25oC, umol CO2 m-2 s-1
    Kc25: float = field(default=41.01637)  ## Michaelis-Menten kinetic coefficient for CO2 at 25oC, Pa
    Ko25: float = field(default=28201.92)  ## Michaelis-Menten kinetic coefficient for O2 at 25oC, Pa
    spfy25: float = field(default=2600.0)  ## Rubisco specificity for CO2/O2 at 25oC (tau in Collatz e.a. 1991), dimensionless

    ## Light response
    theta: float = field(default=0.85)  ## Empirical curvature parameter for the shape of light response curve
    alpha: float = field(default=0.24)  ## Quantum yield of electron transport (mol mol-1)
    eta_colim: float = field(default=0.99)  ## Co-limitation curvature between Rubisco and electron transport limited rates

    ## Temperature dependence parameters
    Kc_Ea: float = field(default=79.43)  ## activation energy of Kc, kJ mol-1 (Bernacchi et al., 2001; Medlyn et al., 2002, Eq. 5)
    Ko_Ea: float = field(default=36.38)  ## activation energy of Ko, kJ mol-1 (Bernacchi et al., 2001; Medlyn et al., 2002, Eq. 6)
    Vcmax_Ea: float = field(default=70.0)  ## activation energy of Vcmax, kJ mol-1 (Medlyn et al., 2002)
    Vcmax_Hd: float = field(default=200.0)  ## deactivation energy of Vcmax, kJ mol-1 (Medlyn et al., 2002)
    Vcmax_DeltaS: float = field(default=0.65)  ## entropy of process for Vcmax, kJ mol-1 K-1 (Medlyn et al., 2002)
    Jmax_Ea: float = field(default=80.0)  ## activation energy of Jmax, kJ mol-1 (Medlyn et al., 2002)
    Jmax_Hd: float = field(default=200.0)  ## deactivation energy of Jmax, kJ mol-1 (Medlyn et al., 2002)
    Jmax_DeltaS: float = field(default=0.632)  ## entropy of process for Jmax, kJ mol-1 K-1 (Medlyn et al., 2002)
    Rd_Q10: float = field(default=1.8)  ## Q10 coefficient for the temperature response of Rd
    spfy_Ea: float = field(default=-29.0)  ## activation energy for the specificity factor (Medlyn et al., 2002, p. 1170)

    ## Rates at the current leaf temperature, see set_rates
    Vcmax: float = field(default=None)
    Jmax: float = field(default=None)
    Rd: float = field(default=None)
    Kc: float = field(default=None)
    Ko: float = field(default=None)
    Gamma_star: float = field(default=None)  ## CO2 compensation point in the absence of Rd, Pa
    Km: float = field(default=None)  ## Effective Michaelis-Menten coefficient, Kc*(1+O/Ko), Pa

    ## Outputs of the last evaluation
    J: float = field(default=0.0)  ## Electron transport rate, umol e-1 m-2 s-1
    Ac: float = field(default=0.0)  ## Rubisco limited gross assimilation, umol m-2 s-1
    Aj: float = field(default=0.0)  ## Electron transport limited gross assimilation, umol m-2 s-1
    a_gross: float = field(default=0.0)  ## Gross assimilation, umol m-2 s-1
    a_net: float = field(default=0.0)  ## Net assimilation, umol m-2 s-1
    p_i: float = field(default=0.0)  ## Internal (chloroplastic) CO2 partial pressure, Pa

    def __attrs_post_init__(self):
        if self.Vcmax is None:
            self.set_rates(cst.T_25, 0.21*101325.0)

    def set_rates(self, T, p_O2):
        """
        Scale the 25oC biochemical parameters to leaf temperature T (K) given the O2 partial pressure p_O2 (Pa).
        """
        self.Vcmax = fT_arrheniuspeaked(self.Vcmax25, T, E_a=self.Vcmax_Ea, H_d=self.Vcmax_Hd, DeltaS=self.Vcmax_DeltaS)
        self.Jmax = fT_arrheniuspeaked(self.Jmax25, T, E_a=self.Jmax_Ea, H_d=self.Jmax_Hd, DeltaS=self.Jmax_DeltaS)
        self.Rd = fT_Q10(self.Rd25, T, Q10=self.Rd_Q10)
        self.Kc = fT_arrhenius(self.Kc25, T, E_a=self.Kc_Ea)
        self.Ko = fT_arrhenius(self.Ko25, T, E_a=self.Ko_Ea)
        S = fT_arrhenius(self.spfy25, T, E_a=self.spfy_Ea)
        self.Gamma_star = 0.5 / S * p_O2
        self.Km = self.Kc * (1 + p_O2 / self.Ko)

    def Jfun(self, Q):
        """
        Electron transport rate from non-rectangular hyperbola

        References
        ----------
        von Caemmerer, 2000, S. Biochemical models of leaf photosynthesis. CSIRO Publishing, Australia
        """
        J = (self.alpha*Q + self.Jmax - np.sqrt((self.alpha*Q + self.Jmax)**2 - 4*self.alpha*self.theta*Q*self.Jmax))/(2*self.theta)
        return J

    def calculate(self, p_i, Q):
        """
        Net assimilation at a given internal CO2 partial pressure.

        Parameters
        ----------
        p_i : float
            Internal CO2 partial pressure, Pa
        Q : float
            Absorbed PAR, umol m-2 s-1

        Returns
        -------
        a_net : float
            Net CO2 assimilation, umol m-2 s-1
        """
        self.J = self.Jfun(Q)
        self.Ac = self.Vcmax*(p_i - self.Gamma_star)/(p_i + self.Km)
        self.Aj = self.J*(p_i - self.Gamma_star)/(4*p_i + 8*self.Gamma_star)
        self.a_gross = float(MinQuadraticSmooth(self.Ac, self.Aj, eta=self.eta_colim))
        self.a_net = self.a_gross - self.Rd
        self.p_i = p_i
        return self.a_net

    def solve_glc(self, g_lc, Q, p_a, P_AIR):
        """
        Net assimilation when CO2 supply is set by a total leaf conductance to CO2.

        Parameters
        ----------
        g_lc : float
            Total leaf conductance to CO2 (boundary layer, stomata and mesophyll in series), mol m-2 s-1
        Q : float
            Absorbed PAR, umol m-2 s-1
        p_a : float
            Atmospheric CO2 partial pressure, Pa
        P_AIR : float
            Atmospheric pressure, Pa

        Returns
        -------
        a_net : float
            Net CO2 assimilation, umol m-2 s-1

        Notes
        -----
        Solves the supply = demand condition A_net(p_i) = g_lc (p_a - p_i) / P_AIR. The left hand side increases and
        the right hand side decreases with p_i, so there is exactly one root between zero and an upper bound where
        supply cannot match the respiratory loss.
        """
        def f(p_i):
            return self.calculate(p_i, Q) - g_lc*(p_a - p_i)/P_AIR*1e6

        p_hi = p_a + self.Rd*P_AIR/(g_lc*1e6) + 1.0
        p_i = brentq(f, 0.0, p_hi, xtol=1e-10)
        return self.calculate(p_i, Q)


@define
class LeafBiochemistry:
    """
    Biochemistry state of a leaf: the photosynthesis model plus the temperature and light it is evaluated at.
    """

    PSM: C3Photosynthesis = field(factory=C3Photosynthesis)  ## Photosynthesis model and its rate parameters
    t: float = field(default=298.15)  ## Leaf temperature for evaluation (K)
    apar: float = field(default=1000.0)  ## Absorbed PAR for evaluation (umol m-2 s-1)
    p_H2O_sat: float = field(default=None)  ## Saturation vapor pressure at t (Pa)
    _t: float = field(default=298.15, init=False)  ## Temperature the rate parameters were last computed for (K)

    def __attrs_post_init__(self):
        if self.p_H2O_sat is None:
            self.p_H2O_sat = saturation_vapor_pressure(self.t)


def photosystem_temperature_dependence(psm, envir, T):
    """
    Update the rate parameters of a photosynthesis model in place for leaf temperature T (K).

    Parameters
    ----------
    psm : C3Photosynthesis
    envir : AirLayer
        Supplies the O2 partial pressure
    T : float
        Leaf temperature (K)
    """
    psm.set_rates(T, envir.p_O2)

def leaf_photosynthesis(ps, envir, mode, value):
    """
    Evaluate leaf photosynthesis for a leaf biochemistry state.

    Parameters
    ----------
    ps : LeafBiochemistry
    envir : AirLayer
    mode : str
        "glc" if value is the total leaf conductance to CO2 (mol m-2 s-1), "pi" if value is the internal CO2 partial
        pressure (Pa)
    value : float

    Returns
    -------
    a_net : float
        Net CO2 assimilation, umol m-2 s-1, also stored on ps.PSM
    """
    if ps.t != ps._t:
        logger.debug("Refreshing stale photosynthesis temperature dependence for t=%.2f K", ps.t)
        photosystem_temperature_dependence(ps.PSM, envir, ps.t)
        ps.p_H2O_sat = saturation_vapor_pressure(ps.t)
        ps._t = ps.t

    if mode == "glc":
        return ps.PSM.solve_glc(value, ps.apar, envir.p_a, envir.P_AIR)
    elif mode == "pi":
        return ps.PSM.calculate(value, ps.apar)
    else:
        raise ValueError(f"Error: Chosen photosynthesis mode, {mode}, not available. Choose one of 'glc' or 'pi'")
