"""Core data models and custom exceptions for pyhailcast.

Defines the read-only atmospheric column, the mutable hailstone state that
one embryo trial threads through every time step, the per-trial result
records, the model configuration, and all custom exception types used
throughout the package.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import Optional, Sequence

import numpy as np


# ---------------------------------------------------------------------------
# Custom Exceptions
# ---------------------------------------------------------------------------

class HailcastError(Exception):
    """Base exception for all pyhailcast errors."""


class InvalidColumnError(HailcastError):
    """Raised when column profiles have mismatched lengths or too few levels."""


class InvalidConfigError(HailcastError):
    """Raised when a HailcastConfig holds physically meaningless values."""


class ConfigParseError(HailcastError):
    """Raised when a &HAILCAST namelist block has format errors.

    Attributes:
        key: The namelist key being parsed when the error was detected.
        expected: Description of the expected format.
    """

    def __init__(self, message: str, key: str | None = None,
                 expected: str | None = None):
        self.key = key
        self.expected = expected
        parts = [message]
        if key is not None:
            parts.append(f"key {key}")
        if expected is not None:
            parts.append(f"expected: {expected}")
        super().__init__(" | ".join(parts))


# ---------------------------------------------------------------------------
# Enumerations
# ---------------------------------------------------------------------------

class GrowthRegime(enum.IntEnum):
    """Hailstone surface growth regime (numbered as in HAILCAST)."""
    DRY = 1
    WET = 2


class TrialExit(enum.Enum):
    """Reason an embryo trial left the time loop."""
    EXIT_DOMAIN = "exit_domain"      # pressure outside the tabulated column
    REACHED_BASE = "reached_base"    # fell to (or below) cloud base
    TIMED_OUT = "timed_out"          # simulated clock passed max_time


# ---------------------------------------------------------------------------
# Configuration
# ---------------------------------------------------------------------------

# Five fixed embryo diameters (m).
EMBRYO_DIAMETER_1 = 1.0e-5
EMBRYO_DIAMETER_2 = 2.0e-5
EMBRYO_DIAMETER_3 = 3.0e-5
EMBRYO_DIAMETER_4 = 4.0e-5
EMBRYO_DIAMETER_5 = 5.0e-5

DEFAULT_EMBRYO_DIAMETERS = (
    EMBRYO_DIAMETER_1,
    EMBRYO_DIAMETER_2,
    EMBRYO_DIAMETER_3,
    EMBRYO_DIAMETER_4,
    EMBRYO_DIAMETER_5,
)


@dataclass
class HailcastConfig:
    """Tunable constants of the hailstone growth model.

    The defaults reproduce the operational configuration; the namelist
    reader in :mod:`pyhailcast.data.config_parser` overrides them.
    """
    time_step: float = 5.0               # s
    start_time: float = 60.0             # s, simulated clock at seeding
    max_time: float = 3600.0             # s, upper limit of simulation
    embryo_diameters: tuple[float, ...] = DEFAULT_EMBRYO_DIAMETERS  # m
    initial_density: float = 500.0       # kg/m³
    droplet_concentration: float = 3.0e8  # m⁻³
    breakup_diameter: float = 0.009      # m
    melted_tolerance: float = 0.001      # |FW - 1| below which stone is water

    def __post_init__(self) -> None:
        self.embryo_diameters = tuple(float(d) for d in self.embryo_diameters)
        if self.time_step <= 0.0:
            raise InvalidConfigError(
                f"time_step must be positive, got {self.time_step}"
            )
        if self.max_time <= self.start_time:
            raise InvalidConfigError(
                f"max_time ({self.max_time}) must exceed start_time "
                f"({self.start_time})"
            )
        if len(self.embryo_diameters) != 5:
            raise InvalidConfigError(
                f"exactly 5 embryo diameters required, got "
                f"{len(self.embryo_diameters)}"
            )
        if any(d <= 0.0 for d in self.embryo_diameters):
            raise InvalidConfigError("embryo diameters must be positive")
        if self.initial_density <= 0.0 or self.droplet_concentration <= 0.0:
            raise InvalidConfigError(
                "initial_density and droplet_concentration must be positive"
            )


# ---------------------------------------------------------------------------
# Atmospheric column
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class AtmosphericColumn:
    """One vertical profile supplied by the host model.

    All profile arrays are 1-D ``float64`` of length ``nz`` and share the
    level index; index 0 is the lowest (warmest) level and pressure must
    decrease with index. Monotonicity is the caller's responsibility and
    is not checked.

    Attributes
    ----------
    temperature : np.ndarray
        Temperature (K).
    height : np.ndarray
        Height above sea level (m).
    pressure : np.ndarray
        Total pressure (Pa).
    density : np.ndarray
        Air density (kg/m³).
    vapor : np.ndarray
        Water vapour mixing ratio (kg/kg).
    cloud_ice, snow, graupel : np.ndarray
        Frozen hydrometeor mixing ratios (kg/kg).
    cloud_water, rain : np.ndarray
        Liquid hydrometeor mixing ratios (kg/kg).
    updraft : np.ndarray
        Updraft speed (m/s).
    terrain_height : float
        Terrain height (m).
    updraft_duration : int
        Duration of the updraft (whole seconds).
    graupel_number : np.ndarray or None
        Graupel number concentration. Carried for host compatibility only.
    """
    temperature: np.ndarray
    height: np.ndarray
    pressure: np.ndarray
    density: np.ndarray
    vapor: np.ndarray
    cloud_ice: np.ndarray
    cloud_water: np.ndarray
    rain: np.ndarray
    snow: np.ndarray
    graupel: np.ndarray
    updraft: np.ndarray
    terrain_height: float = 0.0
    updraft_duration: int = 0
    graupel_number: Optional[np.ndarray] = None

    def __post_init__(self) -> None:
        nz = len(self.pressure)
        if nz < 2:
            raise InvalidColumnError(f"column needs at least 2 levels, got {nz}")
        for name in ("temperature", "height", "density", "vapor", "cloud_ice",
                     "cloud_water", "rain", "snow", "graupel", "updraft"):
            if len(getattr(self, name)) != nz:
                raise InvalidColumnError(
                    f"profile '{name}' has {len(getattr(self, name))} levels, "
                    f"expected {nz}"
                )
        if self.graupel_number is not None and len(self.graupel_number) != nz:
            raise InvalidColumnError(
                f"profile 'graupel_number' has {len(self.graupel_number)} "
                f"levels, expected {nz}"
            )

    @classmethod
    def from_profiles(
        cls,
        temperature: Sequence[float],
        height: Sequence[float],
        pressure: Sequence[float],
        density: Sequence[float],
        vapor: Sequence[float],
        cloud_ice: Sequence[float],
        cloud_water: Sequence[float],
        rain: Sequence[float],
        snow: Sequence[float],
        graupel: Sequence[float],
        updraft: Sequence[float],
        terrain_height: float = 0.0,
        updraft_duration: float = 0.0,
        graupel_number: Optional[Sequence[float]] = None,
    ) -> "AtmosphericColumn":
        """Build a column from arbitrary sequences.

        Arrays are converted to ``float64`` and the updraft duration is
        truncated to whole seconds.
        """
        def _arr(values: Sequence[float]) -> np.ndarray:
            return np.asarray(values, dtype=np.float64).ravel()

        return cls(
            temperature=_arr(temperature),
            height=_arr(height),
            pressure=_arr(pressure),
            density=_arr(density),
            vapor=_arr(vapor),
            cloud_ice=_arr(cloud_ice),
            cloud_water=_arr(cloud_water),
            rain=_arr(rain),
            snow=_arr(snow),
            graupel=_arr(graupel),
            updraft=_arr(updraft),
            terrain_height=float(terrain_height),
            updraft_duration=int(updraft_duration),
            graupel_number=None if graupel_number is None else _arr(graupel_number),
        )

    @property
    def nz(self) -> int:
        """Number of vertical levels."""
        return len(self.pressure)

    @property
    def total_ice(self) -> np.ndarray:
        """Combined frozen mixing ratio: cloud ice + snow + graupel."""
        return self.cloud_ice + self.snow + self.graupel

    @property
    def total_liquid(self) -> np.ndarray:
        """Combined liquid mixing ratio: cloud water + rain."""
        return self.cloud_water + self.rain


@dataclass(frozen=True)
class CloudLevels:
    """Level indices (0-based) of cloud base and embryo start.

    ``kbas`` and ``kfzl`` both equal ``nz - 1`` (the model top) when no
    level qualifies, in which case ``has_cloud`` is False.
    """
    kbas: int
    kfzl: int
    has_cloud: bool


# ---------------------------------------------------------------------------
# Hailstone state
# ---------------------------------------------------------------------------

@dataclass
class HailstoneState:
    """Mutable state of one hailstone, owned by a single embryo trial."""
    diameter: float                  # m
    density: float                   # kg/m³
    surface_temperature: float       # K
    liquid_fraction: float           # mass fraction of liquid, [0, 1]
    pressure: float                  # Pa
    height: float                    # m above terrain
    velocity: float = 0.0            # m/s, upward positive
    terminal_velocity: float = 0.0   # m/s
    regime: Optional[GrowthRegime] = None
    ever_frozen: bool = True


@dataclass
class CloudEnvironment:
    """In-cloud conditions sampled at the hailstone's pressure level."""
    temperature: float       # K
    vapor: float             # kg/kg
    air_density: float       # kg/m³
    updraft: float           # m/s
    ice_content: float = 0.0     # kg/m³ of air
    liquid_content: float = 0.0  # kg/m³ of air
    ice_mixing_ratio: float = 0.0     # kg/kg
    liquid_mixing_ratio: float = 0.0  # kg/kg

    @property
    def ice_fraction(self) -> float:
        """Frozen share of the cloud water, 1 when the cloud holds none."""
        total = self.ice_content + self.liquid_content
        if total > 0.0:
            return self.ice_content / total
        return 1.0


# ---------------------------------------------------------------------------
# Trial results
# ---------------------------------------------------------------------------

@dataclass
class StepRecord:
    """Snapshot of a hailstone after one time step."""
    time: float                  # s
    pressure: float              # Pa
    height: float                # m above terrain
    diameter: float              # m
    density: float               # kg/m³
    liquid_fraction: float
    surface_temperature: float   # K
    ambient_temperature: float   # K
    regime: GrowthRegime
    updraft: float               # m/s
    terminal_velocity: float     # m/s


@dataclass
class TrialResult:
    """Outcome of one embryo trial.

    Attributes
    ----------
    embryo_diameter : float
        Initial diameter (m).
    diameter_mm : float
        Final diameter at the ground (mm), always finite and >= 0.
    exit_reason : TrialExit
        Why the time loop ended.
    steps : int
        Number of completed time steps.
    max_height : float
        Highest point reached (m above terrain).
    melt_applied : bool
        Whether the sub-cloud melt stage ran.
    diameter_before_melt_mm : float
        Diameter (mm) at loop exit, before any post-loop adjustment.
    trace : list[StepRecord]
        Per-step snapshots, empty unless tracing was requested.
    """
    embryo_diameter: float
    diameter_mm: float
    exit_reason: TrialExit
    steps: int
    max_height: float
    melt_applied: bool = False
    diameter_before_melt_mm: float = 0.0
    trace: list[StepRecord] = field(default_factory=list)
