"""Microphysics of a single growing hailstone."""

from pyhailcast.physics.accretion import AccretionStep, accrete
from pyhailcast.physics.breakup import shed_water
from pyhailcast.physics.heat_budget import heat_budget
from pyhailcast.physics.melting import melt, wet_bulb_temperature
from pyhailcast.physics.terminal_velocity import terminal_velocity
from pyhailcast.physics.vapor import saturation_vapor_density, vapor_density_difference

__all__ = [
    'AccretionStep',
    'accrete',
    'shed_water',
    'heat_budget',
    'melt',
    'wet_bulb_temperature',
    'terminal_velocity',
    'saturation_vapor_density',
    'vapor_density_difference',
]
