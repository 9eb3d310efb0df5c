"""Terminal fall speed of a hailstone.

Uses the Best-number (Davies) formulation: the stone's mass, gravity, air
density and dynamic viscosity combine into the dimensionless Best number
X, an empirical fit maps X to a Reynolds number, and the fall speed
follows from ``Re * nu / (D * rho_air)``. Four regimes are selected by X
with no blending at their boundaries.

References:
    Rasmussen, R.M. & Heymsfield, A.J. (1987) J. Atmos. Sci. 44, 2754-2763.
    Brimelow, J.C. et al. (2002) Wea. Forecasting 17, 1048-1062 (HAILCAST).
"""

from __future__ import annotations

import math

PI = 3.141592654
GRAVITY = 9.78956              # m/s²
REFERENCE_VISCOSITY = 1.718e-5  # kg/(m·s) at 273.16 K
SUTHERLAND_CONSTANT = 120.0    # K

# Best-number regime boundaries
BEST_SMALL = 550.0
BEST_MEDIUM = 1800.0
BEST_LARGE = 3.45e8


def dynamic_viscosity(temperature: float) -> float:
    """Sutherland-type dynamic viscosity of air (kg/(m·s))."""
    return (
        REFERENCE_VISCOSITY
        * (273.16 + SUTHERLAND_CONSTANT) / (temperature + SUTHERLAND_CONSTANT)
        * (temperature / 273.16) ** 1.5
    )


def best_number(mass: float, air_density: float, viscosity: float) -> float:
    """Best (Davies) number X = 8 m g ρ / (π ν²)."""
    return 8.0 * mass * GRAVITY * air_density / (PI * viscosity * viscosity)


def reynolds_from_best(x: float) -> float:
    """Empirical Reynolds number for Best number *x*."""
    if x < BEST_SMALL:
        w = math.log10(x)
        y = -1.7095 + 1.33438 * w - 0.11591 * w ** 2
        return 10.0 ** y
    if x < BEST_MEDIUM:
        w = math.log10(x)
        y = -1.81391 + 1.34671 * w - 0.12427 * w ** 2 + 0.0063 * w ** 3
        return 10.0 ** y
    if x < BEST_LARGE:
        return 0.4487 * x ** 0.5536
    return (x / 0.6) ** 0.5


def terminal_velocity(
    air_density: float,
    stone_density: float,
    diameter: float,
    temperature: float,
) -> float:
    """Fall speed (m/s) of a sphere.

    Parameters
    ----------
    air_density : float
        Ambient air density (kg/m³).
    stone_density : float
        Bulk density of the stone (kg/m³).
    diameter : float
        Stone diameter (m).
    temperature : float
        Ambient temperature (K).

    Returns
    -------
    float
        Terminal velocity, 0 for a vanished stone.
    """
    if diameter <= 0.0 or stone_density <= 0.0:
        return 0.0
    mass = stone_density * PI * diameter ** 3 / 6.0
    nu = dynamic_viscosity(temperature)
    re = reynolds_from_best(best_number(mass, air_density, nu))
    return nu * re / (diameter * air_density)
