"""Saturation vapour density difference between hailstone and cloud.

The stone surface is saturated over liquid in wet growth and over ice in
dry growth. The cloud air is taken as saturated with respect to a blend of
liquid and ice surfaces weighted by the frozen share of the cloud water.
"""

from __future__ import annotations

import numpy as np

from pyhailcast.core.models import GrowthRegime

RV = 461.48          # J/(kg·K), gas constant for water vapour
ALV = 2.5e6          # J/kg, latent heat of vaporisation
ALS = 2836050.0      # J/kg, latent heat of sublimation
E0 = 611.0           # Pa, saturation vapour pressure at the triple point
T0 = 273.16          # K


def saturation_vapor_density(temperature: float, over_ice: bool) -> float:
    """Clausius-Clapeyron saturation vapour density (kg/m³)."""
    latent = ALS if over_ice else ALV
    # numpy scalar: an unphysical surface temperature overflows to inf
    t = np.float64(temperature)
    with np.errstate(over="ignore", divide="ignore", invalid="ignore"):
        esat = E0 * np.exp(latent / RV * (1.0 / T0 - 1.0 / t))
        return float(esat / (RV * t))


def vapor_density_difference(
    ice_fraction: float,
    stone_temperature: float,
    ambient_temperature: float,
    regime: GrowthRegime,
) -> float:
    """Stone-minus-cloud saturation vapour density (kg/m³).

    Negative values mean net deposition/condensation onto the stone,
    positive values net evaporation/sublimation.
    """
    rho_stone = saturation_vapor_density(
        stone_temperature, over_ice=regime is not GrowthRegime.WET
    )
    rho_water = saturation_vapor_density(ambient_temperature, over_ice=False)
    rho_ice = saturation_vapor_density(ambient_temperature, over_ice=True)
    rho_cloud = ice_fraction * (rho_ice - rho_water) + rho_water
    return rho_stone - rho_cloud
