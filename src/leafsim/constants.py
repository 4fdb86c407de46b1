"""
Physical constants: process-wide, immutable values shared by every leafsim module
"""

from attrs import define, field

@define(frozen=True)
class PhysicalConstants:
    """
    Physical constants used across leafsim. A single instance, `cst`, is created at import.
    """

    ## Reference states
    T_25: float = field(default=298.15)  ## Reference temperature for 25 degrees Celsius (K)
    T_0: float = field(default=273.15)  ## Conversion factor for degrees Celsius to Kelvin (K)
    T_triple: float = field(default=273.16)  ## Triple point temperature of water (K)
    P_triple: float = field(default=611.657)  ## Triple point pressure of water (Pa)
    T_crit_H2O: float = field(default=647.096)  ## Critical temperature of water (K)

    ## Gas constants
    R: float = field(default=8.314462618)  ## Universal gas constant (J mol-1 K-1)
    M_H2O: float = field(default=0.01801528)  ## Molar mass of water (kg mol-1)

    ## Water vapour thermodynamics
    LH_v0: float = field(default=2.5008e6)  ## Latent heat of vaporization at the triple point (J kg-1)
    cp_v: float = field(default=1859.0)  ## Isobaric specific heat of water vapour (J kg-1 K-1)
    cp_l: float = field(default=4181.0)  ## Isobaric specific heat of liquid water (J kg-1 K-1)

    ## Water viscosity, Vogel-type coefficients (Reid et al., 1987)
    vis_A: float = field(default=4209.0)  ## K
    vis_B: float = field(default=0.04527)  ## K-1
    vis_C: float = field(default=-3.376e-5)  ## K-2

    ## Diffusion
    D_H2O_CO2: float = field(default=1.6)  ## Ratio of the diffusivity of water vapour to CO2 in air (-)
    D_exponent: float = field(default=1.8)  ## Temperature exponent of gas diffusivity in air (-)

    ## Hydrostatics
    rho_g: float = field(default=998.0 * 9.81 * 1e-6)  ## Water density times gravity (MPa m-1)

    ## Numerics
    zero: float = field(default=1e-17)  ## Smallest relative conductance, avoids division by zero in xylem slices

    @property
    def R_v(self):
        """Specific gas constant of water vapour (J kg-1 K-1)"""
        return self.R / self.M_H2O


cst = PhysicalConstants()
