#!/usr/bin/env python3
"""
Sweep blowing snow sublimation over wind speed, temperature and humidity.

Usage:
    python run_wind_sweep.py
    python run_wind_sweep.py --temps -20 -10 -2 --rh 0.6 0.9 --csv sweep.csv
    python run_wind_sweep.py --method sbsm --no-spatial --plot sweep.png
"""

import argparse
import logging

import numpy as np
import pandas as pd
import matplotlib.pyplot as plt

from blowsnow import BlowingSnowConfig, BlowingSnowModel, MeteorologicalState
from blowsnow.atmosphere import sat_vapor_pressure


def make_state(wind, t_air, rh, args):
    """Build the inputs for one point of the sweep."""
    es = sat_vapor_pressure(t_air)
    return MeteorologicalState(
        dt=args.dt,
        t_air=t_air,
        last_snow=args.last_snow,
        surface_liquid_water=0.0,
        wind=wind,
        ls=2.838e6,
        air_dens=args.air_dens,
        press=args.press,
        eact_air=rh * es,
        zo=[0.0, 0.0, args.z0],
        zrh=2.0,
        snow_depth=args.depth,
        lag_one=args.lag_one,
        sigma_slope=args.sigma_slope,
        t_snow=min(t_air, 0.0),
        fetch=args.fetch,
    )


def run_sweep(model, winds, temps, rhs, args):
    """Run the model over all combinations and collect the results."""
    rows = []
    for t_air in temps:
        for rh in rhs:
            for wind in winds:
                fluxes = model.step(make_state(wind, t_air, rh, args))
                rows.append({
                    'wind': wind,
                    't_air': t_air,
                    'rh': rh,
                    'flux': fluxes.total,
                    # kg/m²/s -> mm/day
                    'flux_mm_day': fluxes.total * 86400.0,
                    'n_diagnostics': len(fluxes.diagnostics),
                })
    return pd.DataFrame(rows)


def plot_sweep(df, output):
    """Plot flux against wind speed, one line per temperature/humidity."""
    fig, ax = plt.subplots(figsize=(8, 5))
    for (t_air, rh), group in df.groupby(['t_air', 'rh']):
        ax.plot(group['wind'], group['flux_mm_day'],
                label=f"T={t_air:g}°C, RH={rh:g}")
    ax.set_xlabel('Wind speed at 2 m [m/s]')
    ax.set_ylabel('Blowing snow sublimation [mm/day]')
    ax.legend(fontsize=8)
    ax.grid(True, alpha=0.3)
    fig.tight_layout()
    fig.savefig(output, dpi=150)
    plt.close(fig)
    print(f"Saved {output}")


def main():
    parser = argparse.ArgumentParser(description=__doc__,
                                     formatter_class=argparse.RawDescriptionHelpFormatter)
    parser.add_argument('--wind-max', type=float, default=25.0)
    parser.add_argument('--wind-step', type=float, default=1.0)
    parser.add_argument('--temps', type=float, nargs='+', default=[-20.0, -10.0, -2.0])
    parser.add_argument('--rh', type=float, nargs='+', default=[0.7])
    parser.add_argument('--method', choices=['liston_sturm', 'sbsm'], default='liston_sturm')
    parser.add_argument('--no-spatial', action='store_true')
    parser.add_argument('--dt', type=float, default=3.0)
    parser.add_argument('--last-snow', type=int, default=8)
    parser.add_argument('--air-dens', type=float, default=1.3)
    parser.add_argument('--press', type=float, default=80000.0)
    parser.add_argument('--z0', type=float, default=0.0001)
    parser.add_argument('--depth', type=float, default=0.5)
    parser.add_argument('--lag-one', type=float, default=0.7)
    parser.add_argument('--sigma-slope', type=float, default=0.02)
    parser.add_argument('--fetch', type=float, default=1000.0)
    parser.add_argument('--csv', type=str, default=None)
    parser.add_argument('--plot', type=str, default=None)
    parser.add_argument('-v', '--verbose', action='store_true')
    args = parser.parse_args()

    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.WARNING,
                        format='%(levelname)s %(name)s: %(message)s')

    config = BlowingSnowConfig(flux_method=args.method,
                               spatial_wind=not args.no_spatial)
    model = BlowingSnowModel(config)

    winds = np.arange(args.wind_step, args.wind_max + 1e-9, args.wind_step)
    df = run_sweep(model, winds, args.temps, args.rh, args)

    summary = df.groupby(['t_air', 'rh'])['flux_mm_day'].max()
    print("\nMaximum sublimation [mm/day]:")
    print(summary.to_string())

    if args.csv:
        df.to_csv(args.csv, index=False)
        print(f"Saved {args.csv}")
    if args.plot:
        plot_sweep(df, args.plot)


if __name__ == '__main__':
    main()
