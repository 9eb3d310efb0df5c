"""Configuration input/output."""

from pyhailcast.data.config_parser import (
    parse_config,
    parse_hailcast_namelist,
    read_hailcast_namelist,
    write_hailcast_namelist,
)

__all__ = [
    'parse_config',
    'parse_hailcast_namelist',
    'read_hailcast_namelist',
    'write_hailcast_namelist',
]
