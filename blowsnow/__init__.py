"""
blowsnow: Sublimation from blowing snow for land-surface energy balance models.

Computes the mass flux of water sublimated from wind-transported snow in
one time step, following the VIC blowing snow algorithm (Bowling et al.
2004) with Liston and Sturm (1998) saltation/suspension physics.

Usage
-----
>>> from blowsnow import calc_blowing_snow, BlowingSnowConfig, MeteorologicalState
>>>
>>> state = MeteorologicalState(
...     dt=3.0, t_air=-10.0, last_snow=8, surface_liquid_water=0.0,
...     wind=15.0, ls=2.838e6, air_dens=1.3, press=80000.0, eact_air=180.0,
...     zo=[0.0, 0.0, 0.0001], zrh=2.0, snow_depth=0.5,
...     lag_one=0.7, sigma_slope=0.02, t_snow=-10.0,
... )
>>> flux = calc_blowing_snow(state)  # kg/m²/s, positive = sublimation

Available Methods
-----------------
Flux:
    - 'liston_sturm': Saltation layer plus integrated suspension layer
    - 'sbsm': Simplified Blowing Snow Model power law

Threshold Shear Velocity:
    - 'variable': Li and Pomeroy (1997)
    - 'constant': Fixed threshold (Liston and Sturm 1998)

Occurrence Probability:
    - 'li_pomeroy': Logistic in wind speed (Li and Pomeroy 1997)
    - 'constant': Always 1

Switches:
    - spatial_wind: Integrate over the sub-grid wind distribution
    - fetch_correction: Fetch-limited saltation transport
"""

from .model import (BlowingSnowModel, BlowingSnowConfig, MeteorologicalState,
                    BlowingSnowFluxes, WindRealization, calc_blowing_snow)
from .errors import BlowingSnowError, FatalError, BracketError, ConvergenceError

__version__ = '0.1.0'
__all__ = ['BlowingSnowModel', 'BlowingSnowConfig', 'MeteorologicalState',
           'BlowingSnowFluxes', 'WindRealization', 'calc_blowing_snow',
           'BlowingSnowError', 'FatalError', 'BracketError', 'ConvergenceError']
