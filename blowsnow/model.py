"""
Blowing snow sublimation: configuration and main driver.

Combines the shear, occurrence, threshold and flux modules for one call
of the land-surface energy balance.
"""

import logging
from dataclasses import dataclass, field, replace
from typing import Callable, List, Optional, Sequence

from . import atmosphere
from . import occurrence
from . import shear
from . import sublimation
from . import wind as wind_module
from .errors import Diagnostic

logger = logging.getLogger(__name__)

FLUX_METHODS = ('liston_sturm', 'sbsm')
THRESHOLD_METHODS = ('variable', 'constant')
OCCURRENCE_METHODS = ('li_pomeroy', 'constant')


@dataclass(frozen=True)
class BlowingSnowConfig:
    """Configuration for blowing snow parameterizations."""

    # Method switches
    flux_method: str = 'liston_sturm'
    spatial_wind: bool = True
    threshold_method: str = 'variable'
    fetch_correction: bool = True
    occurrence_method: str = 'li_pomeroy'
    n_wind_bins: int = 10

    # Position of the snow roughness in the per-band roughness array
    roughness_band: int = 2

    # Particle and transport parameters
    csalt: float = 0.68       # Saltation constant [m/s]
    uthresh: float = 0.25     # Constant threshold shear velocity [m/s]
    settling: float = 0.3     # Particle settling velocity [m/s]
    kin_vis: float = 1.3e-5   # Kinematic viscosity of air [m²/s]
    ka: float = 0.0245187     # Thermal conductivity of air [W/(m·K)]
    sbsm_coefficient: float = 0.25

    # Numerics
    root_tol: float = 1e-6
    root_max_iter: int = 100
    romberg_tol: float = 1e-6
    romberg_max_iter: int = 100
    romberg_order: int = 5

    # Limits and fallbacks
    flux_floor: float = -5e-5   # [kg/(m²·s)]
    flux_ceiling: float = 5e-5  # [kg/(m²·s)]
    min_bin_wind: float = 0.4
    max_bin_wind: float = 25.0
    fallback_bin_wind: float = 0.4
    max_sigma_w: float = 10.0
    fallback_sigma_w: float = 0.22

    # Bare soil overrides
    bare_fetch: float = 1500.0  # [m]
    bare_sigma_slope: float = 0.0002

    def __post_init__(self):
        if self.flux_method not in FLUX_METHODS:
            raise ValueError(f"Unknown flux method: {self.flux_method}")
        if self.threshold_method not in THRESHOLD_METHODS:
            raise ValueError(f"Unknown threshold method: {self.threshold_method}")
        if self.occurrence_method not in OCCURRENCE_METHODS:
            raise ValueError(f"Unknown occurrence method: {self.occurrence_method}")
        if self.n_wind_bins < 2:
            raise ValueError(f"n_wind_bins must be at least 2, got {self.n_wind_bins}")
        if self.romberg_order < 2:
            raise ValueError(f"romberg_order must be at least 2, got {self.romberg_order}")
        if self.flux_ceiling <= self.flux_floor:
            raise ValueError(f"flux_ceiling ({self.flux_ceiling}) must exceed "
                             f"flux_floor ({self.flux_floor})")

    def replace(self, **changes) -> 'BlowingSnowConfig':
        """Return a copy with the given fields changed."""
        return replace(self, **changes)


@dataclass(frozen=True)
class MeteorologicalState:
    """Inputs for one blowing snow calculation."""
    dt: float                    # Model time step [h]
    t_air: float                 # Air temperature [°C]
    last_snow: int               # Time steps since last snowfall
    surface_liquid_water: float  # Liquid water in the surface layer [m]
    wind: float                  # Wind speed 2 m above the snow [m/s]
    ls: float                    # Latent heat of sublimation [J/kg]
    air_dens: float              # Air density [kg/m³]
    press: float                 # Air pressure [Pa]
    eact_air: float              # Actual vapour pressure [Pa]
    zo: Sequence[float]          # Roughness per band [m]
    zrh: float                   # Humidity reference height [m]
    snow_depth: float            # Snow depth [m]
    lag_one: float               # Lag-one autocorrelation of wind
    sigma_slope: float           # Standard deviation of terrain slope
    t_snow: float                # Snow surface temperature [°C]
    veg_index: int = 0           # Vegetation class of this tile
    n_veg: int = 1               # Vegetation class marking bare soil
    fetch: float = 1500.0        # Fetch distance [m]
    displacement: float = 0.0    # Vegetation displacement height [m]
    roughness: float = 0.0       # Vegetation roughness length [m]

    @property
    def bare_soil(self) -> bool:
        return self.veg_index == self.n_veg


@dataclass
class WindRealization:
    """Blowing snow state for one wind speed."""
    wind10: float           # 10 m wind speed [m/s]
    probability: float      # Weight of this realization
    u_veg: float = 0.0      # Vegetation-adjusted wind [m/s]
    prob_occurrence: float = 0.0
    ushear: float = 0.0     # Shear velocity [m/s]
    zo_salt: float = 0.0    # Saltation roughness [m]
    utshear: float = 0.0    # Threshold shear velocity [m/s]
    flux: float = 0.0       # Sublimation flux if transport occurs [kg/(m²·s)]
    wind_bin: Optional[wind_module.WindBin] = None

    @property
    def contribution(self) -> float:
        return self.probability * self.flux * self.prob_occurrence


@dataclass
class BlowingSnowFluxes:
    """Output of one blowing snow step."""
    total: float = 0.0  # Sublimation flux [kg/(m²·s)], positive = loss
    derived: Optional[atmosphere.DerivedQuantities] = None
    realizations: List[WindRealization] = field(default_factory=list)
    diagnostics: List[Diagnostic] = field(default_factory=list)


class BlowingSnowModel:
    """
    Sublimation from blowing snow for a single grid cell and time step.

    Examples
    --------
    >>> model = BlowingSnowModel(BlowingSnowConfig(flux_method='sbsm'))
    >>> fluxes = model.step(state)
    >>> fluxes.total
    """

    def __init__(self, config: Optional[BlowingSnowConfig] = None,
                 svp: Optional[Callable[[float], float]] = None):
        """
        Initialize the model.

        Parameters
        ----------
        config : BlowingSnowConfig, optional
            Model configuration. Uses defaults if not provided.
        svp : callable, optional
            Saturation vapour pressure svp(t_air [°C]) -> Pa.
        """
        self.config = config if config else BlowingSnowConfig()
        self.svp = svp if svp else atmosphere.sat_vapor_pressure

    def derive(self, state: MeteorologicalState,
               diagnostics: Optional[List[Diagnostic]] = None
               ) -> atmosphere.DerivedQuantities:
        """Quantities shared by all wind realizations."""
        cfg = self.config
        z0 = state.zo[cfg.roughness_band]

        es = self.svp(state.t_air)
        diffusivity = atmosphere.calc_diffusivity(state.t_air)
        wind10 = float(atmosphere.calc_wind10(state.wind, z0))

        fetch = state.fetch
        sigma_slope = state.sigma_slope
        if state.bare_soil:
            fetch = cfg.bare_fetch
            sigma_slope = cfg.bare_sigma_slope

        sigma_w, substituted = atmosphere.calc_sigma_w(
            wind10, state.lag_one, sigma_slope,
            max_sigma=cfg.max_sigma_w, fallback=cfg.fallback_sigma_w)
        if substituted and diagnostics is not None:
            diagnostics.append(Diagnostic(
                'sigma_w', f"wind spread outside +/-{cfg.max_sigma_w} m/s, "
                           f"using {cfg.fallback_sigma_w}"))

        hv, nd = atmosphere.vegetation_geometry(state.displacement, state.roughness)

        return atmosphere.DerivedQuantities(
            es=es,
            diffusivity=diffusivity,
            f_resist=atmosphere.calc_resistance(state.t_air, es, state.ls, ka=cfg.ka,
                                                diffusivity=diffusivity),
            lv=atmosphere.latent_heat_vaporization(state.t_snow),
            age=state.last_snow * state.dt,
            wind10=wind10,
            sigma_w=sigma_w,
            fetch=fetch,
            hv=hv,
            nd=nd,
        )

    def step(self, state: MeteorologicalState) -> BlowingSnowFluxes:
        """
        Calculate blowing snow sublimation for one time step.

        Parameters
        ----------
        state : MeteorologicalState
            Meteorological and snowpack inputs

        Returns
        -------
        BlowingSnowFluxes
            Total flux with per-realization detail

        Raises
        ------
        FatalError
            If the shear velocity or suspension integral cannot be solved
        """
        cfg = self.config
        fluxes = BlowingSnowFluxes()

        if state.snow_depth <= 0.0:
            return fluxes

        derived = self.derive(state, fluxes.diagnostics)
        fluxes.derived = derived

        if cfg.spatial_wind and derived.sigma_w != 0.0:
            bins = wind_module.partition_wind(
                derived.wind10, derived.sigma_w, n_bins=cfg.n_wind_bins,
                min_wind=cfg.min_bin_wind, max_wind=cfg.max_bin_wind,
                fallback_wind=cfg.fallback_bin_wind)
            for b in bins:
                if b.fallback:
                    fluxes.diagnostics.append(Diagnostic(
                        'wind_bin', f"bin {b.index} ({b.lower:g}-{b.upper:g} m/s) "
                                    f"straddles the mean wind, "
                                    f"using {cfg.fallback_bin_wind} m/s"))
            realizations = [WindRealization(b.wind, b.probability, wind_bin=b)
                            for b in bins]
        else:
            realizations = [WindRealization(derived.wind10, 1.0)]

        total = 0.0
        for real in realizations:
            self._solve_realization(real, state, derived)
            total += real.contribution
            logger.debug("U10=%f, prob_occurrence=%f, total=%g",
                         real.wind10, real.prob_occurrence, total)

        fluxes.realizations = realizations
        if total > cfg.flux_ceiling:
            logger.debug("Blowing snow flux %g capped at %g", total, cfg.flux_ceiling)
        fluxes.total = min(max(total, cfg.flux_floor), cfg.flux_ceiling)
        return fluxes

    def _solve_realization(self, real: WindRealization,
                           state: MeteorologicalState,
                           derived: atmosphere.DerivedQuantities) -> None:
        cfg = self.config
        z0 = state.zo[cfg.roughness_band]

        # Probability of occurrence (Li and Pomeroy 1997)
        real.u_veg = occurrence.vegetation_wind(
            real.wind10, state.snow_depth, derived.hv, derived.nd)
        real.prob_occurrence = occurrence.calc_occurrence_probability(
            state.t_air, derived.age, state.surface_liquid_water, real.u_veg,
            method=cfg.occurrence_method)

        # Shear velocity during saltation
        real.ushear, real.zo_salt = shear.shear_stress(
            real.wind10, z0, tol=cfg.root_tol, max_iter=cfg.root_max_iter)

        real.utshear = shear.get_threshold(
            state.t_air, state.surface_liquid_water, real.wind10, real.zo_salt,
            real.prob_occurrence, real.ushear,
            method=cfg.threshold_method, uthresh=cfg.uthresh)

        if real.ushear > real.utshear and state.eact_air < derived.es:
            real.flux = sublimation.calc_sub_flux(
                state.eact_air, derived.es, state.zrh, state.air_dens,
                real.utshear, real.ushear, derived.fetch, real.wind10,
                derived.f_resist,
                method=cfg.flux_method,
                fetch_correction=cfg.fetch_correction,
                csalt=cfg.csalt, settling=cfg.settling, kin_vis=cfg.kin_vis,
                sbsm_b=cfg.sbsm_coefficient,
                romberg_tol=cfg.romberg_tol,
                romberg_max_iter=cfg.romberg_max_iter,
                romberg_order=cfg.romberg_order,
                flux_floor=cfg.flux_floor)
        else:
            real.flux = 0.0


def calc_blowing_snow(state: MeteorologicalState,
                      config: Optional[BlowingSnowConfig] = None,
                      svp: Optional[Callable[[float], float]] = None) -> float:
    """
    Sublimation flux from blowing snow [kg/(m²·s)], positive for mass loss.

    Raises
    ------
    FatalError
        If the numerics fail to converge
    """
    return BlowingSnowModel(config, svp).step(state).total
