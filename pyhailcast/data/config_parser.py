"""&HAILCAST namelist parser and writer.

Reads the Fortran namelist block that overrides the hailstone model
constants into a HailcastConfig, and writes a HailcastConfig back out as
a namelist that reads back to an equal config.

Example::

    &HAILCAST
     DELT = 5.0,
     TAU = 3600.0,
     EMBRYO = 1.0E-5, 2.0E-5, 3.0E-5, 4.0E-5, 5.0E-5,
     /
"""

from __future__ import annotations

import re
from dataclasses import fields
from pathlib import Path

from pyhailcast.core.models import ConfigParseError, HailcastConfig


# ---------------------------------------------------------------------------
# Namelist parser
# ---------------------------------------------------------------------------

# Mapping from namelist keys to HailcastConfig field names
_NAMELIST_KEY_MAP: dict[str, str] = {
    "DELT": "time_step",
    "TSTART": "start_time",
    "TAU": "max_time",
    "EMBRYO": "embryo_diameters",
    "DENSE0": "initial_density",
    "NDROP": "droplet_concentration",
    "DBREAK": "breakup_diameter",
    "FWTOL": "melted_tolerance",
}


def _parse_real(value: str, key: str) -> float:
    # Fortran double-precision exponents: 1.0D-5
    text = value.strip().upper().replace("D", "E")
    try:
        return float(text)
    except ValueError:
        raise ConfigParseError(
            f"Cannot parse real value '{value.strip()}'",
            key=key,
            expected="real number",
        )


def _parse_embryos(value: str) -> tuple[float, ...]:
    items = [v for v in (s.strip() for s in value.split(",")) if v]
    diameters = tuple(_parse_real(v, "EMBRYO") for v in items)
    if len(diameters) != 5:
        raise ConfigParseError(
            f"EMBRYO lists {len(diameters)} diameters",
            key="EMBRYO",
            expected="5 comma-separated diameters (m)",
        )
    if any(d <= 0.0 for d in diameters):
        raise ConfigParseError(
            "EMBRYO diameters must be positive",
            key="EMBRYO",
            expected="5 positive diameters (m)",
        )
    return diameters


def parse_hailcast_namelist(text: str) -> dict:
    """Parse a ``&HAILCAST`` namelist block.

    Parameters
    ----------
    text : str
        Text holding the namelist. The ``&HAILCAST`` header and the
        closing ``/`` or ``&END`` are optional.

    Returns
    -------
    dict
        Parsed values keyed by HailcastConfig field name. Unknown keys are
        ignored.

    Raises
    ------
    ConfigParseError
        If a known key has a malformed value.
    """
    content = re.sub(r'&HAILCAST\b', '', text, flags=re.IGNORECASE)
    content = re.sub(r'&END\b', '', content, flags=re.IGNORECASE)
    content = re.sub(r'^\s*/\s*$', '', content, flags=re.MULTILINE)
    # Fortran comments
    content = re.sub(r'!.*$', '', content, flags=re.MULTILINE)

    # ['', KEY1, value1, KEY2, value2, ...]; values may span commas.
    tokens = re.split(r'(\w+)\s*=', content)
    result: dict = {}
    for key_raw, val_raw in zip(tokens[1::2], tokens[2::2]):
        key = key_raw.strip().upper()
        if key not in _NAMELIST_KEY_MAP:
            continue
        val = val_raw.strip().rstrip('/').strip().rstrip(',')
        if not val:
            raise ConfigParseError("Missing value", key=key, expected="value after '='")
        field_name = _NAMELIST_KEY_MAP[key]
        if key == "EMBRYO":
            result[field_name] = _parse_embryos(val)
        else:
            if "," in val:
                raise ConfigParseError(
                    f"Expected a single value, got '{val}'",
                    key=key,
                    expected="real number",
                )
            result[field_name] = _parse_real(val, key)
    return result


def parse_config(text: str | None = None) -> HailcastConfig:
    """Build a HailcastConfig from namelist text, or the defaults if None."""
    overrides = parse_hailcast_namelist(text) if text else {}
    return HailcastConfig(**overrides)


def read_hailcast_namelist(path: str | Path) -> HailcastConfig:
    """Read a namelist file into a HailcastConfig.

    Raises
    ------
    FileNotFoundError
        If *path* does not exist.
    """
    path = Path(path)
    return parse_config(path.read_text())


# ---------------------------------------------------------------------------
# Namelist writer
# ---------------------------------------------------------------------------

_FIELD_TO_NAMELIST_KEY: dict[str, str] = {v: k for k, v in _NAMELIST_KEY_MAP.items()}


def write_hailcast_namelist(config: HailcastConfig) -> str:
    """Generate a ``&HAILCAST`` namelist from a HailcastConfig.

    All fields are written, using ``repr`` so that floats read back
    exactly.
    """
    lines: list[str] = ["&HAILCAST"]
    for f in fields(config):
        key = _FIELD_TO_NAMELIST_KEY[f.name]
        value = getattr(config, f.name)
        if isinstance(value, tuple):
            text = ", ".join(repr(float(v)) for v in value)
        else:
            text = repr(float(value))
        lines.append(f" {key} = {text},")
    lines.append(" /")
    return "\n".join(lines) + "\n"
