"""Shedding of excess surface water from large hailstones.

A stone can hold only a limited amount of liquid on its surface, which
grows linearly with its ice mass. Water beyond that limit is shed and the
stone's density and diameter are recomputed from the remaining mass.
"""

from __future__ import annotations

import logging

PI = 3.141592654
LIQUID_DENSITY = 1000.0  # kg/m³
ICE_DENSITY = 900.0      # kg/m³

logger = logging.getLogger(__name__)


def critical_water_mass(ice_mass: float) -> float:
    """Largest liquid mass (kg) sustainable on a stone with *ice_mass* kg of ice."""
    return 0.268 + 0.1389 * ice_mass


def shed_water(
    density: float, diameter: float, mass: float, liquid_fraction: float
) -> tuple[float, float, float, float]:
    """Shed liquid above the critical limit.

    Parameters
    ----------
    density : float
        Bulk density (kg/m³).
    diameter : float
        Diameter (m).
    mass : float
        Stone mass (kg).
    liquid_fraction : float
        Liquid mass fraction.

    Returns
    -------
    tuple[float, float, float, float]
        ``(density, diameter, mass, liquid_fraction)``, unchanged when the
        liquid load is below the limit.
    """
    water = liquid_fraction * mass
    crit = critical_water_mass(mass - water)
    if water <= crit:
        return density, diameter, mass, liquid_fraction

    mass = mass - (water - crit)
    liquid_fraction = min(max(crit / mass, 0.0), 1.0)
    density = ICE_DENSITY + liquid_fraction * (LIQUID_DENSITY - ICE_DENSITY)
    diameter = (6.0 * mass / (PI * density)) ** (1.0 / 3.0)
    logger.debug(
        f"Shed {water - crit:.3e} kg of water, diameter now {diameter * 1000.0:.2f} mm"
    )
    return density, diameter, mass, liquid_fraction
