"""
Sub-grid wind speed distribution.

The 10 m wind across a grid cell is described by a Laplace distribution
centred on the mean wind Uo with scale sigma_w. The unit probability
interval is split into equiprobable bins; each bin is represented by the
conditional expectation of wind speed over its bounds.
"""

import logging
from dataclasses import dataclass
from typing import List

import numpy as np

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class WindBin:
    """One equiprobable interval of the wind distribution."""
    index: int
    lower: float        # Lower wind bound [m/s]
    upper: float        # Upper wind bound [m/s]
    wind: float         # Representative (expected) wind speed [m/s]
    probability: float  # Probability mass of the bin
    fallback: bool = False  # Expected value could not be evaluated


def bin_bounds(p, n_bins, uo, sigma_w):
    """
    Wind speed bounds of bin p from the inverse Laplace CDF.

    Bounds are limited to [0, 2 Uo]: the first bin starts at 0, the last
    bin ends at 2 Uo, and lower never exceeds upper.
    """
    area = 1.0 / n_bins
    half = n_bins // 2

    if p == 0:
        lower = 0.0
        upper = uo + sigma_w * np.log(2.0 * (p + 1) * area)
    elif p < half:
        lower = uo + sigma_w * np.log(2.0 * p * area)
        upper = uo + sigma_w * np.log(2.0 * (p + 1) * area)
    elif p < n_bins - 1:
        lower = uo - sigma_w * np.log(2.0 - 2.0 * p * area)
        upper = uo - sigma_w * np.log(2.0 - 2.0 * (p + 1) * area)
    else:
        lower = uo - sigma_w * np.log(2.0 - 2.0 * p * area)
        upper = uo * 2.0

    upper = min(max(upper, 0.0), 2.0 * uo)
    lower = min(max(lower, 0.0), upper)
    return float(lower), float(upper)


def bin_mass(lower, upper, uo, sigma_w):
    """Laplace probability of [lower, upper], or None if the bin straddles Uo."""
    if lower >= uo:
        return 0.5 * (np.exp(-(lower - uo) / sigma_w) - np.exp(-(upper - uo) / sigma_w))
    elif upper <= uo:
        return 0.5 * (np.exp((upper - uo) / sigma_w) - np.exp((lower - uo) / sigma_w))
    return None


def expected_wind(lower, upper, uo, sigma_w):
    """
    Conditional expectation of wind speed over [lower, upper].

    Integrates x times the Laplace density over the bin and divides by the
    probability of the bin as bounded, so a bin cut short at 0 or 2 Uo is
    still represented by a wind inside it. A zero-width bin returns its
    bound. Returns None when the bin straddles Uo, where neither one-sided
    closed form applies.
    """
    mass = bin_mass(lower, upper, uo, sigma_w)
    if mass is None:
        return None
    if mass <= 0.0:
        return float(lower)

    if lower >= uo:
        moment = -0.5 * ((upper + sigma_w) * np.exp(-(upper - uo) / sigma_w)
                         - (lower + sigma_w) * np.exp(-(lower - uo) / sigma_w))
    else:
        moment = 0.5 * ((upper - sigma_w) * np.exp((upper - uo) / sigma_w)
                        - (lower - sigma_w) * np.exp((lower - uo) / sigma_w))
    return float(np.clip(moment / mass, lower, upper))


def partition_wind(uo, sigma_w, n_bins=10, min_wind=0.4, max_wind=25.0,
                   fallback_wind=0.4) -> List[WindBin]:
    """
    Split the wind distribution into equiprobable bins.

    Parameters
    ----------
    uo : float
        Mean 10 m wind speed [m/s]
    sigma_w : float
        Scale of the wind distribution [m/s], non-zero
    n_bins : int
        Number of bins
    min_wind, max_wind : float
        Range the representative wind is clipped to [m/s]
    fallback_wind : float
        Representative wind used when the expected value is undefined

    Returns
    -------
    list of WindBin
    """
    if n_bins < 2:
        raise ValueError(f"n_bins must be at least 2, got {n_bins}")

    area = 1.0 / n_bins
    bins = []
    for p in range(n_bins):
        lower, upper = bin_bounds(p, n_bins, uo, sigma_w)
        u10 = expected_wind(lower, upper, uo, sigma_w)

        fallback = u10 is None
        if fallback:
            # TODO: flag the (uo, sigma_w) pair upstream instead of substituting
            logger.warning("Problem with probability ranges: increment=%d, "
                           "limits=%f - %f, sigma_w=%f, Uo=%f, area=%f",
                           p, lower, upper, sigma_w, uo, area)
            u10 = fallback_wind

        u10 = float(np.clip(u10, min_wind, max_wind))
        bins.append(WindBin(p, lower, upper, u10, area, fallback))

    return bins
