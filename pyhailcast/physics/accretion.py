"""Mass growth of a hailstone by accretion of cloud liquid and ice.

The stone sweeps its cross-section through the cloud at its fall speed,
collecting liquid with unit efficiency and ice with an efficiency that
depends on whether its surface is warm enough to be sticky. The new shell
does not share the stone's density: in dry growth it follows a Macklin
correlation (as applied by Ziegler et al. 1983) in mean droplet size,
supercooling and impact speed; in wet growth it is soaked ice at
900 kg/m³. The diameter is then advanced with the classical flux-based
growth rate rather than from the new mass.

References:
    Macklin, W.C. (1962) Q. J. R. Meteorol. Soc. 88, 30-50.
    Ziegler, C.L., Ray, P.S. & Knight, N.C. (1983) J. Atmos. Sci. 40, 1768-1791.
"""

from __future__ import annotations

from dataclasses import dataclass

from pyhailcast.core.models import GrowthRegime

PI = 3.141592654
REFERENCE_DIFFUSIVITY = 0.226e-4   # m²/s at 273.16 K and 1000 hPa
LIQUID_DENSITY = 1000.0            # kg/m³

LIQUID_COLLECTION_EFFICIENCY = 1.0
RIMED_ICE_EFFICIENCY = 1.0
ROUGH_ICE_EFFICIENCY = 0.21
STICKY_SURFACE_TEMPERATURE = 268.15  # K

RIME_DENSITY_MIN = 100.0   # kg/m³
RIME_DENSITY_MAX = 900.0   # kg/m³
WET_SHELL_DENSITY = 900.0  # kg/m³


@dataclass
class AccretionStep:
    """Result of one accretion step.

    Masses are in kg. ``mass`` is the stone mass *before* the step; the
    ``*_gain`` fields are the increments collected during the step.
    """
    diameter: float
    density: float
    mass: float
    liquid_mass: float
    ice_mass: float
    liquid_gain: float
    ice_gain: float
    diffusivity: float

    @property
    def mass_gain(self) -> float:
        return self.liquid_gain + self.ice_gain


def vapor_diffusivity(temperature: float, pressure: float) -> float:
    """Diffusivity of water vapour in air (m²/s)."""
    return REFERENCE_DIFFUSIVITY * (temperature / 273.16) ** 1.81 * (100000.0 / pressure)


def ice_collection_efficiency(stone_temperature: float) -> float:
    if stone_temperature >= STICKY_SURFACE_TEMPERATURE:
        return RIMED_ICE_EFFICIENCY
    return ROUGH_ICE_EFFICIENCY


def mean_droplet_diameter(liquid_content: float, droplet_concentration: float) -> float:
    """Mean cloud droplet diameter (microns) for a fixed number concentration."""
    return (
        0.74 * max(liquid_content, 0.0) / (PI * LIQUID_DENSITY * droplet_concentration)
    ) ** 0.33333333 * 1.0e6


def rime_density(
    liquid_content: float,
    terminal_velocity: float,
    stone_temperature: float,
    droplet_concentration: float = 3.0e8,
) -> float:
    """Density (kg/m³) of rime accreted in dry growth, clamped to [100, 900].

    Macklin form ``0.11 (Dc V / ΔT)^0.76`` g/cm³ with Dc the mean droplet
    diameter in microns and ΔT the stone's supercooling. Without
    supercooling the correlation diverges, so the upper bound applies.
    """
    supercooling = 273.15 - stone_temperature
    if not supercooling > 0.0:
        return RIME_DENSITY_MAX
    dc = mean_droplet_diameter(liquid_content, droplet_concentration)
    density = 0.11 * (dc * terminal_velocity / supercooling) ** 0.76 * 1000.0
    return min(max(density, RIME_DENSITY_MIN), RIME_DENSITY_MAX)


def accrete(
    diameter: float,
    ambient_temperature: float,
    stone_temperature: float,
    pressure: float,
    density: float,
    liquid_fraction: float,
    terminal_velocity: float,
    liquid_content: float,
    ice_content: float,
    dt: float,
    regime: GrowthRegime,
    droplet_concentration: float = 3.0e8,
) -> AccretionStep:
    """Advance the stone's mass, density and diameter by one step.

    Parameters
    ----------
    diameter : float
        Current diameter (m).
    ambient_temperature : float
        Cloud temperature (K).
    stone_temperature : float
        Stone surface temperature (K).
    pressure : float
        Ambient pressure (Pa).
    density : float
        Current bulk density (kg/m³).
    liquid_fraction : float
        Liquid mass fraction of the stone.
    terminal_velocity : float
        Fall speed (m/s).
    liquid_content, ice_content : float
        Cloud liquid and ice water content (kg/m³ of air).
    dt : float
        Time step (s).
    regime : GrowthRegime
        Current growth regime.
    droplet_concentration : float
        Cloud droplet number concentration (m⁻³).

    Returns
    -------
    AccretionStep
    """
    diffusivity = vapor_diffusivity(ambient_temperature, pressure)
    ew = LIQUID_COLLECTION_EFFICIENCY
    ei = ice_collection_efficiency(stone_temperature)

    mass = PI / 6.0 * diameter ** 3 * density
    liquid_mass = liquid_fraction * mass
    ice_mass = mass - liquid_mass

    # Swept volume uses the diameter at the start of the step.
    sweep = dt * PI / 4.0 * diameter ** 2 * terminal_velocity
    liquid_gain = sweep * liquid_content * ew
    ice_gain = sweep * ice_content * ei

    if regime is GrowthRegime.DRY:
        shell_density = rime_density(
            liquid_content, terminal_velocity, stone_temperature,
            droplet_concentration,
        )
    else:
        shell_density = WET_SHELL_DENSITY

    # Volume-weighted mix of the old stone and the new shell.
    total_volume = (liquid_gain + ice_gain) / shell_density + mass / density
    new_density = (mass + liquid_gain + ice_gain) / total_volume
    new_diameter = diameter + dt * 0.5 * terminal_velocity / new_density * (
        liquid_content * ew + ice_content * ei
    )

    return AccretionStep(
        diameter=new_diameter,
        density=new_density,
        mass=mass,
        liquid_mass=liquid_mass + liquid_gain,
        ice_mass=ice_mass + ice_gain,
        liquid_gain=liquid_gain,
        ice_gain=ice_gain,
        diffusivity=diffusivity,
    )
