"""Core hailstone engine, column interpolation and models."""

from pyhailcast.core.engine import HailstoneEngine, find_cloud_levels, hailstone_driver
from pyhailcast.core.interpolator import PressureInterpolator, interpolate_at_pressure
from pyhailcast.core.models import (
    AtmosphericColumn,
    CloudEnvironment,
    CloudLevels,
    ConfigParseError,
    GrowthRegime,
    HailcastConfig,
    HailcastError,
    HailstoneState,
    InvalidColumnError,
    InvalidConfigError,
    StepRecord,
    TrialExit,
    TrialResult,
)

__all__ = [
    # Engine
    'HailstoneEngine',
    'find_cloud_levels',
    'hailstone_driver',
    # Interpolator
    'PressureInterpolator',
    'interpolate_at_pressure',
    # Models
    'AtmosphericColumn',
    'CloudEnvironment',
    'CloudLevels',
    'GrowthRegime',
    'HailcastConfig',
    'HailstoneState',
    'StepRecord',
    'TrialExit',
    'TrialResult',
    # Exceptions
    'ConfigParseError',
    'HailcastError',
    'InvalidColumnError',
    'InvalidConfigError',
]
