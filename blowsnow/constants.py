"""
Physical constants for blowing snow calculations.
"""

import numpy as np

# Temperature
KELVIN = 273.15  # Absolute zero offset [K]

# Densities [kg/m³]
RHO_ICE = 917.0

# Molecular properties
MW_WATER = 18.01  # Molecular weight of water [kg/kmol]
R_UNIVERSAL = 8.3143e3  # Universal gas constant [J/(kmol·K)]
R_VAPOR = 287.0  # Gas constant used for vapour density [J/(kg·K)]

# Latent heats [J/kg]
LV_VAPORIZATION = 2.501e6  # Latent heat of vaporization at 0°C
LV_SLOPE = 0.002361e6  # Decrease of Lv per °C

# Turbulence
VON_KARMAN = 0.40
GRAVITY = 9.80616  # Standard gravity [m/s²]

# Saturation vapour pressure (Tetens, in Pa)
SVP_A = 610.78
SVP_B = 17.269
SVP_C = 237.3

PI = np.pi

# Reference height of the 10 m wind [m]
Z_REF = 10.0
