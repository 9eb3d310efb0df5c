"""pyhailcast - Python implementation of the HAILCAST one-dimensional hail growth model.

This package estimates the maximum hail diameter at the ground from a single
vertical column of a host weather model, by following five hail embryos
through the column's updraft.

Package Structure:
    core/       - Hailstone engine, column interpolation and models
    physics/    - Hailstone microphysics (fall speed, vapour, accretion, heat budget, breakup, melting)
    data/       - Configuration I/O (&HAILCAST namelist)
"""

__version__ = "0.1.0"

# Core
from pyhailcast.core.engine import HailstoneEngine, find_cloud_levels, hailstone_driver
from pyhailcast.core.interpolator import PressureInterpolator
from pyhailcast.core.models import (
    AtmosphericColumn,
    CloudLevels,
    ConfigParseError,
    GrowthRegime,
    HailcastConfig,
    HailcastError,
    InvalidColumnError,
    InvalidConfigError,
    StepRecord,
    TrialExit,
    TrialResult,
)

# Data I/O
from pyhailcast.data.config_parser import (
    parse_config,
    parse_hailcast_namelist,
    read_hailcast_namelist,
    write_hailcast_namelist,
)

__all__ = [
    # Core - Engine
    'HailstoneEngine',
    'find_cloud_levels',
    'hailstone_driver',
    # Core - Interpolator
    'PressureInterpolator',
    # Core - Models
    'AtmosphericColumn',
    'CloudLevels',
    'GrowthRegime',
    'HailcastConfig',
    'StepRecord',
    'TrialExit',
    'TrialResult',
    # Core - Exceptions
    'ConfigParseError',
    'HailcastError',
    'InvalidColumnError',
    'InvalidConfigError',
    # Data I/O
    'parse_config',
    'parse_hailcast_namelist',
    'read_hailcast_namelist',
    'write_hailcast_namelist',
]
