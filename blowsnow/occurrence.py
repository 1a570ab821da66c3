"""
Probability of blowing snow occurrence.

Available methods:
- 'li_pomeroy': Logistic in wind speed (Li and Pomeroy 1997)
- 'constant': Blowing snow always possible (probability 1)
"""

import numpy as np

from .constants import PI
from .shear import WET_SNOW_LIQUID


def calc_occurrence_probability(t_air, age, surface_liquid_water, u10,
                                method='li_pomeroy'):
    """
    Probability that blowing snow occurs.

    Parameters
    ----------
    t_air : float
        Air temperature [°C]
    age : float
        Time since last snowfall [h]
    surface_liquid_water : float
        Liquid water in the surface layer [m]
    u10 : float
        Vegetation-adjusted 10 m wind speed [m/s]
    method : str
        'li_pomeroy' or 'constant'

    Returns
    -------
    prob : float
        Occurrence probability [0-1]
    """
    if method == 'constant':
        return 1.0
    elif method == 'li_pomeroy':
        if surface_liquid_water < WET_SNOW_LIQUID:
            return _dry_snow(t_air, age, u10)
        return _wet_snow(u10)
    else:
        raise ValueError(f"Unknown occurrence method: {method}")


def _logistic(mean_u, sigma_u, u10):
    with np.errstate(over='ignore'):
        return float(1.0 / (1.0 + np.exp(np.sqrt(PI) * (mean_u - u10) / sigma_u)))


def _dry_snow(t_air, age, u10, u_min=3.0):
    """
    Dry snow: onset wind depends on temperature and snow age.

    Fresh snow (age 0) gives an onset wind of -inf, i.e. probability 1
    above u_min.
    """
    if u10 <= u_min:
        return 0.0
    log_age = np.log(age) if age > 0 else -np.inf
    mean_u = 11.2 + 0.365 * t_air + 0.00706 * t_air ** 2 + 0.9 * log_age
    sigma_u = 4.3 + 0.145 * t_air + 0.00196 * t_air ** 2
    return _logistic(mean_u, sigma_u, u10)


def _wet_snow(u10, u_min=7.0, mean_u=21.0, sigma_u=7.0):
    """Wet snow: fixed onset wind distribution."""
    if u10 <= u_min:
        return 0.0
    return _logistic(mean_u, sigma_u, u10)


def vegetation_wind(u10, snow_depth, hv, nd):
    """
    Wind speed reduced by vegetation protruding through the snow.

    Parameters
    ----------
    u10 : float
        10 m wind speed [m/s]
    snow_depth : float
        Snow depth [m]
    hv : float
        Effective vegetation height [m]
    nd : float
        Vegetation density factor
    """
    if snow_depth < hv:
        return float(u10 / np.sqrt(1.0 + 680.0 * nd * (hv - snow_depth)))
    return u10
