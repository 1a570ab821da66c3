"""Shared fixtures for the blowing snow tests."""

import pytest

from blowsnow import MeteorologicalState
from blowsnow.atmosphere import sat_vapor_pressure


@pytest.fixture
def cold_windy_state() -> MeteorologicalState:
    """Dry snow at -10°C, 15 m/s at 2 m, sub-saturated air."""
    return MeteorologicalState(
        dt=3.0,
        t_air=-10.0,
        last_snow=8,
        surface_liquid_water=0.0,
        wind=15.0,
        ls=2.838e6,
        air_dens=1.3,
        press=80000.0,
        eact_air=0.7 * sat_vapor_pressure(-10.0),
        zo=[0.01, 0.01, 0.0001],
        zrh=2.0,
        snow_depth=0.5,
        lag_one=0.7,
        sigma_slope=0.02,
        t_snow=-10.0,
        veg_index=0,
        n_veg=1,
        fetch=1000.0,
    )
