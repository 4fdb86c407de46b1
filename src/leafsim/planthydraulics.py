"""
Plant hydraulics classes: Includes xylem vulnerability, drought legacy and critical transpiration calculators for single leaves and whole plants
"""

import logging
import numpy as np
from attrs import define, field
from scipy.optimize import bisect
from leafsim.biophysics_funcs import relative_viscosity, relative_surface_tension
from leafsim.constants import cst
from leafsim.utils import SolveError

logger = logging.getLogger(__name__)

def weibull_k_ratio(P, b, c):
    """
    Calculates xylem vulnerability curves based on a two-parameter Weibull function (Neufeld et al., 1992).

    Parameters
    ----------
    P: float
        xylem water potential at 25oC [MPa]

    b: float
        one of two Weibull parameters [MPa], it is P at k / kmax = 0.37

    c: float
        one of two Weibull parameters [unitless], it controls whether
        the curve has a threshold sigmoidal form or non-threshold
        sigmoidal form

    Returns
    -------
    Conductance relative to its maximum [unitless]. Positive pressures do not refill beyond the maximum.

    References
    ----------
    Neufeld et al. (1992) doi:10.1104/pp.100.2.1020
    """
    P = np.minimum(P, 0.0)
    return np.maximum(cst.zero, np.exp(-(-P / b) ** c))


@define
class HydraulicSegment:
    """
    A xylem segment discretised into N slices in series, with drought legacy per slice.

    Flow through the segment is in the units of k_max times MPa: per unit leaf area for a leaf, per plant for
    roots and stems.
    """

    k_max: float = field(default=0.005)  ## Maximum hydraulic conductance of the segment at 25oC
    N: int = field(default=5)  ## Number of slices in series
    b: float = field(default=2.0)  ## Weibull vulnerability parameter b (MPa)
    c: float = field(default=5.0)  ## Weibull vulnerability parameter c (-)
    ratio_crit: float = field(default=1e-3)  ## Relative conductance at the critical water potential (-)
    dh: float = field(default=0.0)  ## Height gain from the upstream to the downstream end (m)

    T_sap: float = field(default=298.15)  ## Sap temperature (K), set by the driver
    f_vis: float = field(default=1.0)  ## Relative viscosity of sap at T_sap (-)
    f_st: float = field(default=1.0)  ## Relative surface tension of sap at T_sap (-)

    p_ups: float = field(default=0.0)  ## Upstream water potential (MPa)
    p_dos: float = field(default=0.0)  ## Downstream water potential of the last pressure profile (MPa)
    p_crt: float = field(default=None)  ## Critical water potential at 25oC (MPa). Derived from b, c and ratio_crit if not given.

    p_element: np.ndarray = field(default=None)  ## Water potential at the downstream end of each slice (MPa)
    p_history: np.ndarray = field(default=None)  ## Lowest 25oC-equivalent water potential experienced by each slice (MPa)
    k_history: np.ndarray = field(default=None)  ## Relative conductance at p_history for each slice, upstream to downstream (-)

    def __attrs_post_init__(self):
        if self.N < 1:
            raise ValueError(f"Number of xylem slices must be at least 1, got {self.N}")
        if self.p_crt is None:
            self.p_crt = -self.b * np.log(1.0 / self.ratio_crit) ** (1.0 / self.c)
        if self.p_element is None:
            self.p_element = np.full(self.N, self.p_ups, dtype=float)
        if (self.p_history is None) or (self.k_history is None):
            self.reset_legacy()

    @property
    def k_element(self):
        """Maximum conductance of a single slice; N slices in series give k_max."""
        return self.k_max * self.N

    def reset_legacy(self):
        """Forget the drought legacy, e.g. between independent simulation runs."""
        self.p_history = np.zeros(self.N)
        self.k_history = np.ones(self.N)

    def temperature_effects(self):
        """
        Update the viscosity and surface tension corrections for the current sap temperature.

        Notes
        -----
        Conductance is inversely proportional to sap viscosity. Xylem pressures are converted to 25oC
        equivalents by the relative surface tension before they are compared to the vulnerability curve.
        """
        self.f_vis = relative_viscosity(self.T_sap)
        self.f_st = relative_surface_tension(self.T_sap)

    def _slice_k_ratio(self, i, p):
        p_25 = p / self.f_st
        if p_25 < self.p_history[i]:
            return weibull_k_ratio(p_25, self.b, self.c)
        return self.k_history[i]

    def end_pressure(self, p_ups, flow):
        """
        Water potential at the downstream end of the segment for a given upstream water potential and flow.

        Parameters
        ----------
        p_ups : float
            Upstream water potential (MPa)
        flow : float
            Flow through the segment, in the flow units of the segment

        Returns
        -------
        p_end : float
            Downstream water potential (MPa)
        """
        p_end = p_ups
        for i in range(self.N):
            k = self._slice_k_ratio(i, p_end) / self.f_vis * self.k_element
            p_end -= flow / k + cst.rho_g * self.dh / self.N
        return p_end

    def xylem_end_pressure(self, flow):
        """Downstream water potential (MPa) for the current upstream water potential and a given flow."""
        return self.end_pressure(self.p_ups, flow)

    def pressure_profile(self, flow, update=False):
        """
        Calculate the water potential along the slices of the segment.

        Parameters
        ----------
        flow : float
            Flow through the segment
        update : bool
            If True, slices that reach a water potential lower than they have experienced before record the new
            minimum and the corresponding (lower) relative conductance. This loss is not recovered until reset_legacy.

        Returns
        -------
        p_element : np.ndarray
            Downstream water potential of each slice (MPa)
        """
        p_end = self.p_ups
        for i in range(self.N):
            p_25 = p_end / self.f_st
            k_ratio = self._slice_k_ratio(i, p_end)
            if update and (p_25 < self.p_history[i]):
                self.p_history[i] = p_25
                self.k_history[i] = k_ratio
            p_end -= flow / (k_ratio / self.f_vis * self.k_element) + cst.rho_g * self.dh / self.N
            self.p_element[i] = p_end
        self.p_dos = p_end
        return self.p_element


@define
class RootHydraulics(HydraulicSegment):
    """Root xylem and rhizosphere, conductance on a whole-plant basis (mol s-1 MPa-1)"""

    k_max: float = field(default=2.0)
    b: float = field(default=1.5)
    c: float = field(default=3.0)


@define
class StemHydraulics(HydraulicSegment):
    """Stem xylem, conductance on a whole-plant basis (mol s-1 MPa-1)"""

    k_max: float = field(default=2.0)
    b: float = field(default=2.5)
    c: float = field(default=4.0)
    dh: float = field(default=5.0)


@define
class LeafHydraulics(HydraulicSegment):
    """
    Leaf xylem, conductance per unit leaf area (mol m-2 s-1 MPa-1) and flow as transpiration per unit leaf area
    (mol m-2 s-1). Used either on its own or as the last segment of a WholePlantHydraulics.
    """

    area: float = field(default=1.0)  ## Leaf area (m2), converts whole-plant flow to flow per leaf area

    def critical_flow(self, flow_ini=0.01):
        """
        Maximum transpiration rate (mol m-2 s-1) the leaf can sustain before the downstream water potential
        reaches the critical water potential.

        Parameters
        ----------
        flow_ini : float
            Starting point of the search, usually the previous critical flow

        Returns
        -------
        flow : float
            Critical flow (mol m-2 s-1). Zero when the upstream water potential is already at or below the critical
            water potential.

        Notes
        -----
        Before solving, the drought legacy is updated for the water potential every slice experiences at rest
        (zero flow), so a drop of upstream water potential causes irreversible conductance loss.
        """
        self.pressure_profile(0.0, update=True)

        def f(flow):
            return self.xylem_end_pressure(flow) - self.p_crt * self.f_st

        return _solve_critical_flow(f, flow_ini)


@define
class WholePlantHydraulics:
    """
    Soil-to-leaf hydraulic system with root, stem and leaf segments in series. Flow is whole-plant transpiration
    (mol s-1); the leaf segment receives flow divided by its leaf area.

    Notes
    -----
    The upstream water potential is the soil-side water potential of the root segment. It is kept in sync by the
    driver that owns the soil state; leaf-level updates do not write it.
    """

    root: RootHydraulics = field(factory=RootHydraulics)
    stem: StemHydraulics = field(factory=StemHydraulics)
    leaf: LeafHydraulics = field(factory=lambda: LeafHydraulics(k_max=0.02, area=150.0))

    @property
    def p_ups(self):
        return self.root.p_ups

    @p_ups.setter
    def p_ups(self, value):
        self.root.p_ups = value

    @property
    def k_history(self):
        return self.leaf.k_history

    @property
    def segments(self):
        return (self.root, self.stem, self.leaf)

    def reset_legacy(self):
        for segment in self.segments:
            segment.reset_legacy()

    def temperature_effects(self):
        for segment in self.segments:
            segment.temperature_effects()

    def xylem_end_pressure(self, flow):
        """Leaf water potential (MPa) for a whole-plant flow (mol s-1)."""
        p_stem = self.root.end_pressure(self.root.p_ups, flow)
        p_leaf = self.stem.end_pressure(p_stem, flow)
        return self.leaf.end_pressure(p_leaf, flow / self.leaf.area)

    def pressure_profile(self, flow, update=False):
        """
        Propagate water potentials from soil to leaf for a whole-plant flow (mol s-1), writing each segment's
        upstream water potential. Returns the leaf water potential (MPa).
        """
        self.root.pressure_profile(flow, update=update)
        self.stem.p_ups = self.root.p_dos
        self.stem.pressure_profile(flow, update=update)
        self.leaf.p_ups = self.stem.p_dos
        self.leaf.pressure_profile(flow / self.leaf.area, update=update)
        return self.leaf.p_dos

    def critical_flow(self, flow_ini=1.0):
        """
        Maximum whole-plant transpiration rate (mol s-1) before the leaf water potential reaches the critical
        water potential of the leaf. See LeafHydraulics.critical_flow.
        """
        self.pressure_profile(0.0, update=True)

        def f(flow):
            return self.xylem_end_pressure(flow) - self.leaf.p_crt * self.leaf.f_st

        return _solve_critical_flow(f, flow_ini)


def _solve_critical_flow(f, flow_ini, flow_min=1e-9, max_expand=100, xtol=1e-14, maxiter=200):
    """
    Find the root of a residual that decreases with flow, bracketing outward from flow_ini.
    """
    if f(0.0) <= 0:
        logger.debug("Upstream water potential at or below critical water potential, critical flow is zero")
        return 0.0

    hi = max(flow_ini, flow_min)
    if f(hi) > 0:
        lo = hi
        for _ in range(max_expand):
            hi = 2 * lo
            if f(hi) <= 0:
                break
            lo = hi
        else:
            raise SolveError(f"Could not bracket the critical flow starting from {flow_ini}")
    else:
        while (hi > flow_min) and (f(hi / 2) <= 0):
            hi = hi / 2
        lo = hi / 2 if hi > flow_min else 0.0
    logger.debug("Critical flow bracketed in [%g, %g]", lo, hi)

    flow, r = bisect(f, lo, hi, xtol=xtol, maxiter=maxiter, full_output=True, disp=False)
    if not r.converged:
        raise SolveError(f"Critical flow did not converge after {r.iterations} iterations: {r.flag}")
    return float(flow)

def temperature_effects(hs):
    """Update viscosity and surface tension corrections of a hydraulic system for its sap temperature."""
    hs.temperature_effects()

def critical_flow(hs, flow_ini):
    """Critical flow of a hydraulic system (LeafHydraulics or WholePlantHydraulics), seeded with flow_ini."""
    return hs.critical_flow(flow_ini)
