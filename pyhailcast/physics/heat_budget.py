"""Heat budget of a growing hailstone.

Balances the latent heat released by freezing accreted water and by
deposition/condensation, the sensible heat carried in by accreted liquid
and ice, and ventilated conduction and vapour exchange with the cloud air.
In dry growth the balance is solved for the new surface temperature; in
wet growth the surface is held at 0 °C and the balance is solved for the
liquid fraction instead.

References:
    Rasmussen, R.M. & Heymsfield, A.J. (1987) J. Atmos. Sci. 44, 2754-2763.
"""

from __future__ import annotations

from pyhailcast.core.models import GrowthRegime
from pyhailcast.physics.accretion import AccretionStep

PI = 3.141592654
ALF = 3.50e5    # J/kg, latent heat of freezing
ALV = 2.5e6     # J/kg, latent heat of vaporisation
ALS = 2.85e6    # J/kg, latent heat of sublimation
CI = 2093.0     # J/(kg·K), specific heat of ice
CW = 4187.0     # J/(kg·K), specific heat of water
KINEMATIC_REFERENCE = 1.46e-5  # m²/s
FREEZING_POINT = 273.15        # K


def thermal_conductivity(temperature: float) -> float:
    """Thermal conductivity of air (J/(m·s·K))."""
    return (5.8 + 0.0184 * (temperature - 273.155)) * 1.0e-3 * 4.187


def air_viscosity(temperature: float) -> float:
    """Dynamic viscosity of air (kg/(m·s))."""
    return 1.717e-5 * (393.0 / (temperature + 120.0)) * (temperature / 273.155) ** 1.5


def ventilation_coefficients(
    reynolds: float, diffusivity: float, conductivity: float
) -> tuple[float, float]:
    """Ventilation coefficients ``(heat, vapour)`` for Reynolds number *reynolds*."""
    root_re = reynolds ** 0.5
    h = (KINEMATIC_REFERENCE / diffusivity) ** (1.0 / 3.0) * root_re
    e = (KINEMATIC_REFERENCE / conductivity) ** (1.0 / 3.0) * root_re
    if reynolds < 6000.0:
        return 0.78 + 0.308 * h, 0.78 + 0.308 * e
    if reynolds < 20000.0:
        return 0.76 * h, 0.76 * e
    scale = 0.57 + 9.0e-6 * reynolds
    return scale * h, scale * e


def heat_budget(
    stone_temperature: float,
    liquid_fraction: float,
    ambient_temperature: float,
    terminal_velocity: float,
    vapor_difference: float,
    diameter: float,
    air_density: float,
    growth: AccretionStep,
    dt: float,
    regime: GrowthRegime,
) -> tuple[float, float]:
    """Solve the heat balance for one step.

    Parameters
    ----------
    stone_temperature : float
        Surface temperature before the step (K).
    liquid_fraction : float
        Liquid fraction before the step.
    ambient_temperature : float
        Cloud temperature (K).
    terminal_velocity : float
        Fall speed (m/s).
    vapor_difference : float
        Stone-minus-cloud saturation vapour density (kg/m³).
    diameter : float
        Diameter after accretion (m).
    air_density : float
        Cloud air density (kg/m³).
    growth : AccretionStep
        Mass increments and diffusivity from the accretion step.
    dt : float
        Time step (s).
    regime : GrowthRegime
        Current growth regime.

    Returns
    -------
    tuple[float, float]
        ``(surface_temperature, liquid_fraction)``; the liquid fraction is
        clamped to [0, 1].
    """
    ak = thermal_conductivity(ambient_temperature)
    nu = air_viscosity(ambient_temperature)
    re = diameter * terminal_velocity * air_density / nu
    ah, ae = ventilation_coefficients(re, growth.diffusivity, ak)

    tcc = ambient_temperature - FREEZING_POINT
    tsc = stone_temperature - FREEZING_POINT
    gm1 = growth.mass
    accreted_heat = (
        growth.liquid_gain / dt * (ALF + CW * tcc)
        + growth.ice_gain / dt * CI * tcc
    )

    ts = stone_temperature
    fw = liquid_fraction
    if regime is GrowthRegime.DRY:
        exchange = 2.0 * PI * diameter * (
            ah * ak * (ambient_temperature - stone_temperature)
            - ae * ALS * growth.diffusivity * vapor_difference
        )
        ts = (stone_temperature - tsc * growth.mass_gain / gm1
              + dt / (gm1 * CI) * (exchange + accreted_heat))
    else:
        exchange = 2.0 * PI * diameter * (
            ah * ak * tcc - ae * ALV * growth.diffusivity * vapor_difference
        )
        fw = (liquid_fraction - liquid_fraction * growth.mass_gain / gm1
              + dt / (gm1 * ALF) * (exchange + accreted_heat))

    return ts, min(max(fw, 0.0), 1.0)
