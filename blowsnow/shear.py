"""
Shear velocity during saltation and threshold shear velocity.

Available threshold methods:
- 'variable': Li and Pomeroy (1997), temperature and wetness dependent
- 'constant': Fixed threshold (Liston and Sturm 1998)
"""

import numpy as np

from .constants import VON_KARMAN, GRAVITY, Z_REF
from .solvers import solve_shear_velocity

WET_SNOW_LIQUID = 0.001  # Surface liquid water separating dry/wet snow [m]


def shear_stress(u10, z0, tol=1e-6, max_iter=100):
    """
    Shear velocity and saltation roughness length for a 10 m wind.

    The implicit relation between wind and shear velocity with a
    saltation-roughened surface (Owen 1964) is solved on
    [1e-7, u*_log + 5]. If the resulting saltation roughness is below the
    snow roughness, the plain log-profile estimate is used instead.

    Parameters
    ----------
    u10 : float
        Wind speed at 10 m [m/s]
    z0 : float
        Snow roughness length [m]

    Returns
    -------
    ushear : float
        Shear velocity [m/s]
    zo_salt : float
        Saltation roughness length [m]
    """
    ushear_log = VON_KARMAN * u10 / np.log(Z_REF / z0)

    ushear = solve_shear_velocity(u10, Z_REF, 1e-7, ushear_log + 5.0,
                                  tol=tol, max_iter=max_iter)
    zo_salt = 0.12 * ushear * ushear / (2.0 * GRAVITY)

    if zo_salt < z0:
        return float(ushear_log), z0
    return ushear, zo_salt


def threshold_wind10(t_air, surface_liquid_water):
    """
    10 m threshold wind speed after Li and Pomeroy (1997) [m/s].

    Parameters
    ----------
    t_air : float
        Air temperature [°C]
    surface_liquid_water : float
        Liquid water in the surface layer [m]
    """
    if surface_liquid_water < WET_SNOW_LIQUID:
        return 9.43 + 0.18 * t_air + 0.0033 * t_air ** 2
    return 9.9


def get_threshold(t_air, surface_liquid_water, u10, zo_salt, prob_occurrence,
                  ushear, method='variable', uthresh=0.25, min_prob=0.001):
    """
    Threshold shear velocity for snow transport.

    Parameters
    ----------
    t_air : float
        Air temperature [°C]
    surface_liquid_water : float
        Liquid water in the surface layer [m]
    u10 : float
        Wind speed at 10 m [m/s]
    zo_salt : float
        Saltation roughness length [m]
    prob_occurrence : float
        Probability of blowing snow occurrence [0-1]
    ushear : float
        Current shear velocity [m/s]
    method : str
        'variable' or 'constant'
    uthresh : float
        Threshold used by the 'constant' method [m/s]
    min_prob : float
        Occurrence probability above which the threshold may be lowered

    Returns
    -------
    utshear : float
        Threshold shear velocity [m/s]
    """
    if method == 'constant':
        return uthresh
    elif method == 'variable':
        log_z = np.log(Z_REF / zo_salt)
        ut10 = threshold_wind10(t_air, surface_liquid_water)
        utshear = VON_KARMAN * ut10 / log_z
        # Lower threshold once transport is under way
        if ushear < utshear and prob_occurrence > min_prob:
            utshear = VON_KARMAN * (u10 - 0.5) / log_z
        return float(utshear)
    else:
        raise ValueError(f"Unknown threshold method: {method}")
