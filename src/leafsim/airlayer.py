"""
Air layer class: Includes the environmental drivers of a canopy air layer that leaf calculations read from
"""

import numpy as np
from attrs import define, field
from leafsim.biophysics_funcs import saturation_vapor_pressure

@define
class AirLayer:
    """
    Environmental state of the canopy air space surrounding a leaf layer. Read-only to the leaf calculations.
    """

    t_air: float = field(default=298.15)  ## Air temperature (K)
    P_AIR: float = field(default=101325.0)  ## Atmospheric pressure (Pa)
    p_a: float = field(default=41.0)  ## Atmospheric CO2 partial pressure (Pa)
    p_O2: float = field(default=21278.25)  ## Atmospheric O2 partial pressure (Pa), 21% of P_AIR
    p_H2O: float = field(default=1500.0)  ## Atmospheric water vapor partial pressure (Pa)

    @classmethod
    def from_relative_humidity(cls, t_air, RH, P_AIR=101325.0, CO2_ppm=405.0, **kwargs):
        """
        Creates an AirLayer from air temperature and relative humidity.

        Parameters
        ----------
        t_air : float
            Air temperature (K)
        RH : float
            Relative humidity (%)
        P_AIR : float
            Atmospheric pressure (Pa)
        CO2_ppm : float
            Atmospheric CO2 mole fraction (umol mol-1)

        Returns
        -------
        AirLayer
        """
        p_H2O = saturation_vapor_pressure(t_air) * RH/100
        return cls(t_air=t_air, P_AIR=P_AIR, p_a=CO2_ppm*1e-6*P_AIR, p_O2=0.21*P_AIR, p_H2O=p_H2O, **kwargs)

    def compute_relative_humidity(self):
        """
        Computes the relative humidity of the air layer (%).
        """
        e_s = saturation_vapor_pressure(self.t_air)
        RH = self.p_H2O/e_s * 100
        return RH

    def compute_VPD(self, T=None):
        """
        Computes the vapor pressure deficit between saturated air at temperature T and the air layer.

        Parameters
        ----------
        T : scalar or ndarray
            Temperature at which the evaporating surface is saturated (K). Defaults to the air temperature, which
            gives the air vapor pressure deficit; pass the leaf temperature for the leaf-to-air deficit.

        Returns
        -------
        VPD : scalar or ndarray (see dtype of parameters)
            Vapor pressure deficit (Pa)
        """
        if T is None:
            T = self.t_air
        e_s = saturation_vapor_pressure(T)
        VPD = np.maximum(e_s - self.p_H2O, 0.0)
        return VPD
