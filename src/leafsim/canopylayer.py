"""
Canopy layer class: Includes the thermal, hydraulic and gas exchange state of one canopy leaf layer and its light bins
"""

import numpy as np
from attrs import define, field
from leafsim.biophysics_funcs import latent_heat_vapor, M_H2O, saturation_vapor_pressure
from leafsim.leafgasexchange import LeafBiochemistry
from leafsim.utils import check_finite, check_positive, check_nonnegative, check_same_length

# Per light bin arrays, in the order they are allocated and validated
BIN_FIELDS = ("APAR", "g_bc", "g_bw", "g_m", "g_sw", "a_max", "g_lw", "g_sc", "g_lc", "a_net", "a_gross", "p_i", "e")

@define
class CanopyLayer:
    """
    State of a canopy leaf layer, discretised into light bins (e.g. sunlit leaf angle classes and shaded leaves)
    that share temperature and water supply but differ in absorbed radiation.
    """

    nleaf: int = field(default=2)  ## Number of light bins (e.g. sunlit and shaded)

    ## Thermal state
    T: float = field(default=298.15)  ## Leaf temperature (K)
    T_old: float = field(default=0.0)  ## Leaf temperature at the last update (K); zero forces the first update

    ## Hydraulic driver
    p_ups: float = field(default=0.0)  ## Upstream (stem or soil) water potential (MPa)
    p_old: float = field(default=1.0)  ## Upstream water potential at the last update (MPa); forces the first update

    ## Stomatal conductance bounds
    g_min25: float = field(default=0.01)  ## Minimum stomatal conductance to H2O at 25oC (mol m-2 s-1)
    g_max25: float = field(default=0.8)  ## Maximum stomatal conductance to H2O at 25oC (mol m-2 s-1)
    g_min: float = field(default=None)  ## Minimum stomatal conductance to H2O at T (mol m-2 s-1)
    g_max: float = field(default=None)  ## Maximum stomatal conductance to H2O at T (mol m-2 s-1)

    ## Per light bin arrays, dimensions (nleaf,)
    APAR: np.ndarray = field(default=None)  ## Absorbed PAR (umol m-2 s-1)
    g_bc: np.ndarray = field(default=None)  ## Boundary layer conductance to CO2 (mol m-2 s-1)
    g_bw: np.ndarray = field(default=None)  ## Boundary layer conductance to H2O (mol m-2 s-1)
    g_m: np.ndarray = field(default=None)  ## Mesophyll conductance to CO2 (mol m-2 s-1)
    g_sw: np.ndarray = field(default=None)  ## Stomatal conductance to H2O (mol m-2 s-1)
    a_max: np.ndarray = field(default=None)  ## Maximal net assimilation allowed by hydraulics and diffusion (umol m-2 s-1)
    g_lw: np.ndarray = field(default=None)  ## Total leaf conductance to H2O (mol m-2 s-1)
    g_sc: np.ndarray = field(default=None)  ## Stomatal conductance to CO2 (mol m-2 s-1)
    g_lc: np.ndarray = field(default=None)  ## Total leaf conductance to CO2 (mol m-2 s-1)
    a_net: np.ndarray = field(default=None)  ## Net assimilation (umol m-2 s-1)
    a_gross: np.ndarray = field(default=None)  ## Gross assimilation (umol m-2 s-1)
    p_i: np.ndarray = field(default=None)  ## Internal CO2 partial pressure (Pa)
    e: np.ndarray = field(default=None)  ## Transpiration per leaf area (mol m-2 s-1)

    ## Derived scalars
    LV: float = field(default=None)  ## Latent heat of vaporization (J mol-1)
    p_sat: float = field(default=None)  ## Saturation vapor pressure at T (Pa)
    ec: float = field(default=0.01)  ## Critical transpiration per leaf area (mol m-2 s-1)
    kr_max: float = field(default=1.0)  ## Maximal relative hydraulic conductance of the leaf (-)
    LA: float = field(default=150.0)  ## Leaf area of the plant the layer belongs to (m2), used with whole-plant hydraulics

    ## Biochemistry sub-state
    ps: LeafBiochemistry = field(factory=LeafBiochemistry)

    def __attrs_post_init__(self):
        _defaults = {"APAR": 1000.0, "g_bc": 3/1.35, "g_bw": 3.0, "g_m": 0.5, "g_sw": 0.1}
        for name in BIN_FIELDS:
            if getattr(self, name) is None:
                setattr(self, name, np.full(self.nleaf, _defaults.get(name, 0.0)))
            else:
                setattr(self, name, np.array(getattr(self, name), dtype=float))
        if self.g_min is None:
            self.g_min = self.g_min25
        if self.g_max is None:
            self.g_max = self.g_max25
        if self.LV is None:
            self.LV = latent_heat_vapor(self.T) * M_H2O()
        if self.p_sat is None:
            self.p_sat = saturation_vapor_pressure(self.T)

    def reset(self):
        """Clear the memory of the last update so the next update recomputes all dependent state."""
        self.T_old = 0.0
        self.p_old = 1.0

    def check_drivers(self):
        """
        Validate the scalar drivers of the leaf state updates.

        Raises
        ------
        ValueError: If temperature or pressure are not finite, or conductance bounds are not positive and ordered.
        """
        check_positive(T=self.T, g_min25=self.g_min25, g_max25=self.g_max25)
        check_finite(p_ups=self.p_ups)
        if self.g_min25 > self.g_max25:
            raise ValueError(f"g_min25 ({self.g_min25}) cannot exceed g_max25 ({self.g_max25})")

    def check_bins(self):
        """
        Validate the per light bin arrays.

        Raises
        ------
        ValueError: If array lengths differ, conductances are not positive, or light or g_sw are negative.
        """
        n = check_same_length(**{name: getattr(self, name) for name in BIN_FIELDS})
        if n != self.nleaf:
            raise ValueError(f"Per light bin arrays have length {n} but nleaf is {self.nleaf}")
        check_positive(g_bc=self.g_bc, g_bw=self.g_bw, g_m=self.g_m)
        check_nonnegative(APAR=self.APAR, g_sw=self.g_sw)
