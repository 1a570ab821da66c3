"""
Near-surface atmospheric quantities shared by all wind realizations.

Includes:
- Saturation vapour pressure (Tetens with ice correction)
- Vapour diffusivity and the combined vapour/heat resistance term F
- 10 m wind speed from the 2 m wind above the snow
- Sub-grid wind spread and vegetation roughness geometry
"""

import logging
from dataclasses import dataclass

import numpy as np

from .constants import (KELVIN, MW_WATER, R_UNIVERSAL, R_VAPOR,
                        LV_VAPORIZATION, LV_SLOPE, SVP_A, SVP_B, SVP_C, Z_REF)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DerivedQuantities:
    """Quantities computed once per call and shared across wind bins."""
    es: float            # Saturation vapour pressure [Pa]
    diffusivity: float   # Vapour diffusivity [m²/s]
    f_resist: float      # Combined resistance term F [m·s/kg]
    lv: float            # Latent heat of vaporization at snow surface [J/kg]
    age: float           # Snow age [h]
    wind10: float        # 10 m wind speed [m/s]
    sigma_w: float       # Sub-grid wind spread [m/s]
    fetch: float         # Fetch distance [m]
    hv: float            # Effective vegetation height [m]
    nd: float            # Vegetation density factor


def sat_vapor_pressure(t_air):
    """
    Saturation vapour pressure [Pa].

    Parameters
    ----------
    t_air : float
        Air temperature [°C]
    """
    es = SVP_A * np.exp(SVP_B * t_air / (SVP_C + t_air))
    if t_air < 0:
        # Over ice
        es *= 1.0 + 0.00972 * t_air + 0.000042 * t_air ** 2
    return float(es)


def calc_diffusivity(t_air):
    """Diffusivity of water vapour in air [m²/s] (Liston & Sturm A-7)."""
    tk = t_air + KELVIN
    return 2.06e-5 * (tk / 273.0) ** 1.75


def calc_resistance(t_air, es, ls, ka=0.0245187, diffusivity=None):
    """
    Denominator F of the particle sublimation rate (Essery et al. 1999, eq. 6).

    Parameters
    ----------
    t_air : float
        Air temperature [°C]
    es : float
        Saturation vapour pressure [Pa]
    ls : float
        Latent heat of sublimation [J/kg]
    ka : float
        Thermal conductivity of air [W/(m·K)]
    diffusivity : float, optional
        Vapour diffusivity [m²/s]; computed from t_air if not given

    Returns
    -------
    F : float
        Heat conduction plus vapour diffusion resistance [m·s/kg]
    """
    tk = t_air + KELVIN

    # Saturation density of water vapour (Liston & Sturm A-8)
    rho_vs = 0.622 * es / (R_VAPOR * tk)

    heat = (ls / (ka * tk)) * (ls * MW_WATER / (R_UNIVERSAL * tk) - 1.0)
    if diffusivity is None:
        diffusivity = calc_diffusivity(t_air)
    vapor = 1.0 / (diffusivity * rho_vs)
    return heat + vapor


def calc_wind10(wind, z0, z_wind=2.0):
    """
    Log-profile 10 m wind from the wind measured z_wind above the snow.

    Parameters
    ----------
    wind : float
        Wind speed at z_wind [m/s]
    z0 : float
        Snow roughness length [m]
    """
    return wind * np.log(Z_REF / z0) / np.log((z_wind + z0) / z0)


def calc_sigma_w(wind10, lag_one, sigma_slope, max_sigma=10.0, fallback=0.22):
    """
    Standard deviation of the sub-grid wind distribution.

    Returns
    -------
    sigma_w : float
        Wind spread [m/s]
    substituted : bool
        True if the spread was outside +/- max_sigma and replaced
    """
    ratio = (2.4 - (0.4 / 0.9) * lag_one) * sigma_slope
    sigma_w = wind10 * ratio

    if sigma_w > max_sigma or sigma_w < -max_sigma:
        logger.warning("sigma problem: sigma_w=%f, wind10=%f, lag_one=%f, "
                       "sigma_slope=%f; using %f",
                       sigma_w, wind10, lag_one, sigma_slope, fallback)
        return fallback, True
    return sigma_w, False


def vegetation_geometry(displacement, roughness):
    """
    Effective vegetation height and density factor above the snow.

    Returns
    -------
    hv : float
        Vegetation height [m]
    nd : float
        Vegetation density factor
    """
    hv = 1.5 * displacement
    if displacement > 0:
        nd = (4.0 / 3.0) * (roughness / displacement)
    else:
        nd = 0.0
    return hv, nd


def latent_heat_vaporization(t_snow):
    """Latent heat of vaporization at the snow surface [J/kg]."""
    return LV_VAPORIZATION - LV_SLOPE * t_snow
