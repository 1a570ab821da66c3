"""
Sublimation of blowing snow in the saltation and suspension layers.

Available flux methods:
- 'liston_sturm': Saltation layer plus integrated suspension layer
  (Liston and Sturm 1998; Pomeroy and Male 1986)
- 'sbsm': Simplified Blowing Snow Model power law (Essery et al. 1999)

Fluxes are positive for sublimation (mass leaving the snowpack).
"""

import logging
from functools import partial
from typing import NamedTuple

import numpy as np

from .constants import PI, RHO_ICE, VON_KARMAN, GRAVITY
from .solvers import romberg

logger = logging.getLogger(__name__)


class LayerParams(NamedTuple):
    """Parameters of the blowing snow layer for one wind realization."""
    es: float          # Saturation vapour pressure [Pa]
    wind: float        # 10 m wind speed [m/s]
    eact_air: float    # Actual vapour pressure [Pa]
    f_resist: float    # Resistance term F [m·s/kg]
    hsalt: float       # Saltation layer height [m]
    phi_r: float       # Saltation layer mass concentration [kg/m³]
    ushear: float      # Shear velocity [m/s]
    zrh: float         # Humidity reference height [m]
    settling: float = 0.3   # Particle settling velocity [m/s]
    kin_vis: float = 1.3e-5  # Kinematic viscosity of air [m²/s]


# =============================================================================
# Height Profile
# =============================================================================

def sub_with_height(z, layer, concentration=True):
    """
    Sublimation rate at height z above the snow surface.

    Radiation absorbed by the particles is neglected.

    Parameters
    ----------
    z : float
        Height above the surface [m]
    layer : LayerParams
        Layer parameters
    concentration : bool
        If True return the rate times the suspended mass concentration
        [kg/(m³·s)], otherwise the loss-rate coefficient only [1/s]
    """
    # Particle radius and shape correction with height
    rrz = 4.6e-5 * z ** -0.258
    alpha = 4.08 + 12.6 * z
    mz = (4.0 / 3.0) * PI * RHO_ICE * rrz ** 3 * (
        1.0 + 3.0 / alpha + 2.0 / alpha ** 2)

    r_mean = ((3.0 * mz) / (4.0 * PI * RHO_ICE)) ** (1.0 / 3.0)

    # Pomeroy and Male (1986)
    terminal_v = 1.1e7 * r_mean ** 1.8
    # Pomeroy (1988)
    fluctuat_v = 0.005 * layer.wind ** 1.36
    # Ventilation velocity for turbulent suspension, Lee (1975)
    vtz = terminal_v + 3.0 * fluctuat_v * np.cos(PI / 4.0)

    re = 2.0 * r_mean * vtz / layer.kin_vis
    nu = 1.79 + 0.606 * re ** 0.5

    undersat = (1.0 - layer.eact_air / layer.es) * (
        1.0 - 0.027 * np.log(z / layer.zrh))
    dmdt = 2.0 * PI * r_mean * undersat * nu / layer.f_resist

    # Loss-rate coefficient [1/s]
    psi = dmdt / mz
    if not concentration:
        return psi

    # Suspended snow concentration, Kind (1992)
    ratio = (0.5 * layer.ushear ** 2) / (layer.wind * layer.settling)
    phi = layer.phi_r * (
        (ratio + 1.0) * (z / layer.hsalt) ** (-layer.settling / (VON_KARMAN * layer.ushear))
        - ratio)
    return psi * phi


# =============================================================================
# Flux Composition
# =============================================================================

def calc_sub_flux(eact_air, es, zrh, air_dens, utshear, ushear, fetch, u10,
                  f_resist, method='liston_sturm', fetch_correction=True,
                  csalt=0.68, settling=0.3, kin_vis=1.3e-5, sbsm_b=0.25,
                  romberg_tol=1e-6, romberg_max_iter=100, romberg_order=5,
                  flux_floor=-5e-5):
    """
    Blowing snow sublimation flux for one wind realization.

    Parameters
    ----------
    eact_air : float
        Actual vapour pressure [Pa]
    es : float
        Saturation vapour pressure [Pa]
    zrh : float
        Humidity reference height [m]
    air_dens : float
        Air density [kg/m³]
    utshear : float
        Threshold shear velocity [m/s]
    ushear : float
        Shear velocity [m/s]
    fetch : float
        Fetch distance [m]
    u10 : float
        10 m wind speed [m/s]
    f_resist : float
        Resistance term F [m·s/kg]
    method : str
        'liston_sturm' or 'sbsm'
    fetch_correction : bool
        Reduce saltation transport for short fetch

    Returns
    -------
    flux : float
        Sublimation flux [kg/(m²·s)], floored at flux_floor
    """
    if method == 'sbsm':
        flux = sbsm_flux(eact_air, es, zrh, u10, f_resist, b=sbsm_b)
    elif method == 'liston_sturm':
        flux = _layered_flux(eact_air, es, zrh, air_dens, utshear, ushear,
                             fetch, u10, f_resist, fetch_correction, csalt,
                             settling, kin_vis, romberg_tol, romberg_max_iter,
                             romberg_order)
    else:
        raise ValueError(f"Unknown flux method: {method}")

    return max(flux, flux_floor)


def sbsm_flux(eact_air, es, zrh, u10, f_resist, b=0.25):
    """Simplified Blowing Snow Model flux [kg/(m²·s)]."""
    undersat_2 = (1.0 - eact_air / es) * (
        1.0 - 0.027 * np.log(zrh) + 0.027 * np.log(2.0))
    return float(b * undersat_2 * u10 ** 5 / f_resist)


def saltation_transport(air_dens, utshear, ushear, fetch=None, csalt=0.68):
    """
    Saltation transport rate [kg/(m·s)] (Liston and Sturm 1998, eq. 6).

    If fetch is given, the rate is reduced for a developing saltation layer.
    """
    qsalt = (csalt * air_dens / GRAVITY) * (utshear / ushear) * (
        ushear ** 2 - utshear ** 2)
    if fetch is not None:
        qsalt *= 1.0 + (500.0 / (3.0 * fetch)) * (np.exp(-3.0 * fetch / 500.0) - 1.0)
    return qsalt


def suspension_top(hsalt, ushear, u10, settling=0.3):
    """Height at which the suspended concentration vanishes [m]."""
    t = 0.5 * ushear ** 2 / (u10 * settling)
    return hsalt * (t / (t + 1.0)) ** ((VON_KARMAN * ushear) / -settling)


def _layered_flux(eact_air, es, zrh, air_dens, utshear, ushear, fetch, u10,
                  f_resist, fetch_correction, csalt, settling, kin_vis,
                  romberg_tol, romberg_max_iter, romberg_order):
    # Horizontal particle velocity, Pomeroy and Gray (1990)
    particle = utshear * 2.8

    qsalt = saltation_transport(air_dens, utshear, ushear,
                                fetch if fetch_correction else None, csalt)
    hsalt = 1.6 * ushear ** 2 / (2.0 * GRAVITY)

    # Saltation layer mass concentration [kg/m³]
    phi_s = qsalt / (hsalt * particle)

    layer = LayerParams(es=es, wind=u10, eact_air=eact_air, f_resist=f_resist,
                        hsalt=hsalt, phi_r=phi_s, ushear=ushear, zrh=zrh,
                        settling=settling, kin_vis=kin_vis)

    # Saltation layer, uniform with height
    psi_s = sub_with_height(hsalt / 2.0, layer, concentration=False)
    flux = phi_s * psi_s * hsalt

    # Suspension layer
    ztop = suspension_top(hsalt, ushear, u10, settling)
    flux += romberg(partial(sub_with_height, layer=layer), hsalt, ztop,
                    tol=romberg_tol, max_iter=romberg_max_iter,
                    order=romberg_order)

    logger.debug("hsalt=%g, ztop=%g, phi_s=%g, flux=%g",
                 hsalt, ztop, phi_s, flux)
    return float(flux)
