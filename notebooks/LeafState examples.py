# ---
# jupyter:
#   jupytext:
#     text_representation:
#       extension: .py
#       format_name: percent
#       format_version: '1.3'
#       jupytext_version: 1.16.1
#   kernelspec:
#     display_name: Python 3 (ipykernel)
#     language: python
#     name: python3
# ---

# %%
import numpy as np
import matplotlib.pyplot as plt

# %%
from leafsim.airlayer import AirLayer
from leafsim.canopylayer import CanopyLayer
from leafsim.planthydraulics import LeafHydraulics, WholePlantHydraulics
from leafsim.leafupdate import update_leaf_TP, update_leaf_AK
from leafsim.stomatalcontrol import gsw_control

# %% [markdown]
# ## Leaf state under a drying soil
#
# A leaf layer with a sunlit and a shaded light bin is supplied with water by a leaf hydraulic system. At each step the driver sets the leaf temperature and the upstream water potential, then:
#
#  1. `update_leaf_TP` refreshes temperature dependent state (conductance bounds, latent heat, saturation vapor pressure, photosynthesis rates) and solves the critical transpiration rate $E_{crit}$ at which the leaf water potential reaches its critical value.
#  2. `update_leaf_AK` converts $E_{crit}$ into the largest stomatal conductance the hydraulic system can support and evaluates the maximal net assimilation of each light bin, $A_{max}$.
#  3. A stomatal model sets $g_{sw}$, which `gsw_control` keeps within $[g_{min}, g_{max}]$.
#
# The critical conductance to water vapor is
#
# $g_{crit} = \frac{E_{crit}}{p_{sat}(T_{leaf}) - p_{H2O}} P_{air}$
#
# The drought legacy of the xylem means conductance lost at low water potentials is not recovered when the soil re-wets.

# %%
envir = AirLayer.from_relative_humidity(t_air=298.15, RH=50.0)
canopy = CanopyLayer(APAR=[1500.0, 200.0])
hs = LeafHydraulics()

_nsteps = 60
p_ups_t = np.concatenate([np.linspace(0.0, -2.5, 40), np.linspace(-2.5, 0.0, 20)])
T_t = 298.15 + 5*np.sin(np.linspace(0, 2*np.pi, _nsteps))

ec_t = np.zeros(_nsteps)
amax_t = np.zeros((_nsteps, canopy.nleaf))
kr_t = np.zeros(_nsteps)
anet_t = np.zeros((_nsteps, canopy.nleaf))

for it in range(_nsteps):
    canopy.T = T_t[it]
    canopy.p_ups = p_ups_t[it]
    hs.T_sap = canopy.T
    update_leaf_TP(canopy, hs, envir)
    update_leaf_AK(canopy, hs, envir)

    ## A simple stomatal model: operate at 70% of the hydraulically allowed conductance
    canopy.g_sw = 0.7 * np.full(canopy.nleaf, canopy.ec / (canopy.p_sat - envir.p_H2O) * envir.P_AIR)
    gsw_control(canopy, envir)

    ec_t[it] = canopy.ec
    amax_t[it] = canopy.a_max
    kr_t[it] = canopy.kr_max
    anet_t[it] = canopy.a_net

# %%
fig, axes = plt.subplots(1, 4, figsize=(16, 3.5))

axes[0].plot(p_ups_t, c="k")
axes[0].set_ylabel("Upstream water potential (MPa)")
axes[1].plot(ec_t*1e3)
axes[1].set_ylabel(r"$E_{crit}$ (mmol m$^{-2}$ s$^{-1}$)")
axes[2].plot(amax_t[:, 0], label="sunlit")
axes[2].plot(amax_t[:, 1], label="shaded")
axes[2].plot(anet_t[:, 0], c="C0", linestyle=":")
axes[2].plot(anet_t[:, 1], c="C1", linestyle=":")
axes[2].set_ylabel(r"$A_{max}$, $A_{net}$ ($\mu$mol m$^{-2}$ s$^{-1}$)")
axes[2].legend()
axes[3].plot(kr_t)
axes[3].set_ylabel("Maximal relative leaf conductance (-)")
for ax in axes:
    ax.set_xlabel("Time step")

plt.tight_layout()

# %% [markdown]
# ## Whole-plant hydraulics
#
# With a whole-plant hydraulic system the critical flow is solved for the whole plant and converted to a per leaf area value with the leaf area of the plant. The soil water potential of the plant is owned by the driver and must be set on the hydraulic system directly.

# %%
canopy = CanopyLayer(LA=150.0)
hs = WholePlantHydraulics()

psoil = np.linspace(0.0, -2.5, 26)
ec_plant = np.zeros(psoil.size)
for it, p in enumerate(psoil):
    hs.p_ups = p
    canopy.p_ups = p
    update_leaf_TP(canopy, hs, envir)
    ec_plant[it] = canopy.ec

fig, ax = plt.subplots(1, 1, figsize=(4, 3.5))
ax.plot(psoil, ec_plant*1e3)
ax.set_xlabel("Soil water potential (MPa)")
ax.set_ylabel(r"$E_{crit}$ (mmol m$^{-2}$ s$^{-1}$)")
plt.tight_layout()
