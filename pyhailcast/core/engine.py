"""HailstoneEngine: one-column hail size driver for pyhailcast.

Locates cloud base and the embryo start level in a column, then follows
five hailstone embryos of fixed initial size through the updraft in fixed
time steps. Each step:

    interpolate updraft → terminal velocity → advect
    → sample cloud → growth regime → vapour closure
    → accretion → heat budget → breakup

A trial ends when the stone leaves the tabulated column, falls to cloud
base, or runs out of simulated time. Stones lost through the model top or
melted in cloud are assigned zero size; the rest are melted through the
sub-cloud layer. The five surviving diameters are returned largest first.

References:
    Brimelow, J.C., Reuter, G.W. & Poolman, E.R. (2002) Wea. Forecasting 17.
    Jewell, R. & Brimelow, J. (2009) Wea. Forecasting 24, 1592-1609.
"""

from __future__ import annotations

import logging
import math
from typing import Optional, Sequence

import numpy as np

from pyhailcast.core.interpolator import PressureInterpolator
from pyhailcast.core.models import (
    AtmosphericColumn,
    CloudEnvironment,
    CloudLevels,
    GrowthRegime,
    HailcastConfig,
    HailstoneState,
    StepRecord,
    TrialExit,
    TrialResult,
)
from pyhailcast.physics.accretion import accrete
from pyhailcast.physics.breakup import shed_water
from pyhailcast.physics.heat_budget import heat_budget
from pyhailcast.physics.melting import melt
from pyhailcast.physics.terminal_velocity import terminal_velocity
from pyhailcast.physics.vapor import vapor_density_difference

logger = logging.getLogger(__name__)

GRAVITY = 9.81          # m/s²
R_DRY = 287.0           # J/(kg·K)

CLOUD_THRESHOLD = 1.0e-12     # kg/kg, cloud ice + cloud water
EMBRYO_ICE_THRESHOLD = 1.0e-4  # kg/kg, ice + snow + graupel
FREEZING_TEMPERATURE = 273.15  # K

# Growth-regime temperatures (K)
EMBRYO_WARM_LIMIT = 264.15
EMBRYO_FREEZE_TEMPERATURE = 265.15
MELTING_SURFACE = 273.155


def find_cloud_levels(column: AtmosphericColumn) -> CloudLevels:
    """Find cloud base and the level where embryos start.

    Cloud base is the lowest level holding cloud ice plus cloud water of
    at least :data:`CLOUD_THRESHOLD`. Embryos start at the lowest
    sub-freezing level with at least :data:`EMBRYO_ICE_THRESHOLD` of frozen
    hydrometeors, but never below cloud base. Both default to the model
    top when no level qualifies.
    """
    top = column.nz - 1
    cloud = np.flatnonzero(column.cloud_ice + column.cloud_water >= CLOUD_THRESHOLD)
    frozen = np.flatnonzero(
        (column.total_ice >= EMBRYO_ICE_THRESHOLD)
        & (column.temperature < FREEZING_TEMPERATURE)
    )
    kbas = int(cloud[0]) if cloud.size else top
    kfzl = int(frozen[0]) if frozen.size else top
    return CloudLevels(kbas=kbas, kfzl=max(kfzl, kbas), has_cloud=kbas < top)


class HailstoneEngine:
    """Hail size calculation for a single atmospheric column.

    The engine holds no state between calls to :meth:`run`; every trial
    builds its own :class:`HailstoneState`, so repeated runs are
    bit-identical and trials are independent of each other.

    Heights are measured above terrain, and that includes the cloud-base
    height that ends the in-cloud phase. The WRF HAILCAST driver compared
    the stone's height above terrain with a cloud-base height above sea
    level, so over elevated terrain its stones left the cloud early.

    Parameters
    ----------
    column : AtmosphericColumn
        Read-only profile snapshot.
    config : HailcastConfig or None
        Model constants; defaults reproduce the operational setup.
    """

    def __init__(
        self,
        column: AtmosphericColumn,
        config: Optional[HailcastConfig] = None,
    ) -> None:
        self.column = column
        self.config = config or HailcastConfig()
        self.interpolator = PressureInterpolator(column)
        self.levels = find_cloud_levels(column)

        kbas, kfzl = self.levels.kbas, self.levels.kfzl
        self.cloud_base_height = float(column.height[kbas] - column.terrain_height)
        self.freezing_level_height = float(column.height[kfzl] - column.terrain_height)
        if self.levels.has_cloud:
            logger.info(
                f"Cloud base at level {kbas} ({column.height[kbas]:.0f} m, "
                f"{column.pressure[kbas] / 100.0:.1f} hPa); embryos start at "
                f"level {kfzl} ({column.height[kfzl]:.0f} m, "
                f"{column.temperature[kfzl]:.2f} K)"
            )

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def run(self) -> list[float]:
        """Return the five hail diameters (mm), largest first."""
        results = self.run_trials()
        return sorted((r.diameter_mm for r in results), reverse=True)

    def run_trials(self, record_trace: bool = False) -> list[TrialResult]:
        """Run one trial per embryo size, in configured embryo order.

        Parameters
        ----------
        record_trace : bool
            Keep a :class:`StepRecord` for every time step.

        Returns
        -------
        list[TrialResult]
        """
        if not self.levels.has_cloud:
            logger.warning("No cloud in column; all hail diameters set to 0")
            return [
                TrialResult(
                    embryo_diameter=d,
                    diameter_mm=0.0,
                    exit_reason=TrialExit.EXIT_DOMAIN,
                    steps=0,
                    max_height=0.0,
                )
                for d in self.config.embryo_diameters
            ]
        return [
            self._run_trial(d, record_trace) for d in self.config.embryo_diameters
        ]

    # ------------------------------------------------------------------
    # One embryo
    # ------------------------------------------------------------------

    def _run_trial(self, embryo_diameter: float, record_trace: bool) -> TrialResult:
        """Follow one embryo from the start level to the end of its life."""
        cfg = self.config
        state, env = self._seed(embryo_diameter)

        trace: list[StepRecord] = []
        max_height = state.height
        steps = 0
        sec = cfg.start_time
        exit_reason = TrialExit.TIMED_OUT

        while sec < cfg.max_time:
            sec += cfg.time_step
            outcome = self._step(state, env, sec)
            if outcome is TrialExit.EXIT_DOMAIN:
                exit_reason = outcome
                break
            steps += 1
            max_height = max(max_height, state.height)
            if record_trace:
                trace.append(self._record(state, env, sec))
            if outcome is TrialExit.REACHED_BASE:
                exit_reason = outcome
                break

        before_melt_mm = state.diameter * 1000.0
        diameter, melted = self._finish(state)
        diameter_mm = diameter * 1000.0
        if not math.isfinite(diameter_mm) or diameter_mm < 0.0:
            logger.warning(
                f"Non-finite hail diameter ({diameter_mm}) for embryo "
                f"{embryo_diameter * 1000.0:.2f} mm; set to 0"
            )
            diameter_mm = 0.0

        logger.debug(
            f"Embryo {embryo_diameter * 1000.0:.2f} mm: {exit_reason.value} after "
            f"{steps} steps (t={sec:.0f}s), {before_melt_mm:.2f} mm in cloud, "
            f"{diameter_mm:.2f} mm at ground"
        )
        return TrialResult(
            embryo_diameter=embryo_diameter,
            diameter_mm=diameter_mm,
            exit_reason=exit_reason,
            steps=steps,
            max_height=max_height,
            melt_applied=melted,
            diameter_before_melt_mm=before_melt_mm,
            trace=trace,
        )

    def _seed(self, embryo_diameter: float) -> tuple[HailstoneState, CloudEnvironment]:
        """Place a fresh embryo at the start level."""
        col = self.column
        k = self.levels.kfzl
        env = CloudEnvironment(
            temperature=float(col.temperature[k]),
            vapor=float(col.vapor[k]),
            air_density=float(col.density[k]),
            updraft=float(col.updraft[k]),
            ice_mixing_ratio=float(col.total_ice[k]),
            liquid_mixing_ratio=float(col.total_liquid[k]),
        )
        state = HailstoneState(
            diameter=embryo_diameter,
            density=self.config.initial_density,
            surface_temperature=env.temperature,
            liquid_fraction=0.0,
            pressure=float(col.pressure[k]),
            height=self.freezing_level_height,
        )
        state.terminal_velocity = terminal_velocity(
            env.air_density, state.density, state.diameter, env.temperature
        )
        return state, env

    def _step(
        self, state: HailstoneState, env: CloudEnvironment, sec: float
    ) -> Optional[TrialExit]:
        """Advance *state* by one time step.

        Returns :attr:`TrialExit.EXIT_DOMAIN` before touching the state when
        the stone is outside the column, :attr:`TrialExit.REACHED_BASE`
        after a step that ends at or below cloud base, else None.
        """
        dt = self.config.time_step

        # --- 1. Updraft and motion ---
        updraft, found = self.interpolator.updraft(state.pressure)
        if not found:
            return TrialExit.EXIT_DOMAIN
        if sec > self.column.updraft_duration:
            updraft = 0.0
        env.updraft = updraft

        # Terminal velocity from the previous diameter and density.
        state.terminal_velocity = terminal_velocity(
            env.air_density, state.density, state.diameter, env.temperature
        )
        state.velocity = updraft - state.terminal_velocity
        state.pressure -= env.air_density * GRAVITY * state.velocity * dt
        state.height += state.velocity * dt

        # --- 2. Cloud at the new level ---
        self._sample(state, env)

        # --- 3. Growth regime ---
        self._update_regime(state, env)

        # --- 4. Vapour, mass and heat ---
        delrw = vapor_density_difference(
            env.ice_fraction, state.surface_temperature, env.temperature, state.regime,
        )
        growth = accrete(
            state.diameter, env.temperature, state.surface_temperature,
            state.pressure, state.density, state.liquid_fraction,
            state.terminal_velocity, env.liquid_content, env.ice_content,
            dt, state.regime, self.config.droplet_concentration,
        )
        state.diameter = growth.diameter
        state.density = growth.density
        state.surface_temperature, state.liquid_fraction = heat_budget(
            state.surface_temperature, state.liquid_fraction, env.temperature,
            state.terminal_velocity, delrw, state.diameter, env.air_density,
            growth, dt, state.regime,
        )

        # --- 5. Breakup ---
        if state.diameter > self.config.breakup_diameter:
            state.density, state.diameter, _, state.liquid_fraction = shed_water(
                state.density, state.diameter, growth.mass, state.liquid_fraction,
            )

        if state.height <= self.cloud_base_height:
            return TrialExit.REACHED_BASE
        return None

    def _sample(self, state: HailstoneState, env: CloudEnvironment) -> None:
        """Refresh *env* at the stone's pressure.

        Outside the column the previous temperature, vapour and mixing
        ratios are kept, and only the air density and cloud contents follow
        the new pressure. The next step then ends the trial.
        """
        sample = self.interpolator.thermodynamics(state.pressure)
        if sample is not None:
            env.temperature, env.vapor, env.ice_mixing_ratio, env.liquid_mixing_ratio = sample
        env.air_density = state.pressure / (
            R_DRY * (1.0 + 0.609 * env.vapor / (1.0 + env.vapor)) * env.temperature
        )
        env.ice_content = env.ice_mixing_ratio * env.air_density
        env.liquid_content = env.liquid_mixing_ratio * env.air_density

    @staticmethod
    def _update_regime(state: HailstoneState, env: CloudEnvironment) -> None:
        """Choose wet or dry growth for this step.

        A stone that has never frozen stays liquid near 0 °C until the cloud
        cools to the embryo freezing temperature. Afterwards the surface
        temperature alone decides, and a wet surface is pinned to 0 °C.
        """
        if (state.surface_temperature >= EMBRYO_WARM_LIMIT
                and env.temperature >= EMBRYO_WARM_LIMIT
                and not state.ever_frozen):
            state.surface_temperature = env.temperature
            if env.temperature <= EMBRYO_FREEZE_TEMPERATURE:
                state.liquid_fraction = 0.0
                state.regime = GrowthRegime.DRY
                state.ever_frozen = True
            else:
                state.liquid_fraction = 1.0
                state.regime = GrowthRegime.WET
        elif state.surface_temperature < MELTING_SURFACE:
            state.liquid_fraction = 0.0
            state.regime = GrowthRegime.DRY
        else:
            state.surface_temperature = MELTING_SURFACE
            state.regime = GrowthRegime.WET

    # ------------------------------------------------------------------
    # After the loop
    # ------------------------------------------------------------------

    def _finish(self, state: HailstoneState) -> tuple[float, bool]:
        """Final diameter (m) and whether the sub-cloud melt stage ran."""
        if state.pressure < self.column.pressure[-1]:
            logger.debug("Stone left through the model top")
            return 0.0, False
        if abs(state.liquid_fraction - 1.0) < self.config.melted_tolerance:
            logger.debug("Stone melted entirely in cloud")
            return 0.0, False
        if state.height > 0.0:
            t_layer, p_layer, r_layer = self._sub_cloud_means()
            diameter = melt(
                state.diameter, t_layer, p_layer, r_layer,
                self.freezing_level_height, state.terminal_velocity,
            )
            return diameter, True
        return state.diameter, False

    def _sub_cloud_means(self) -> tuple[float, float, float]:
        """Mean temperature, pressure and vapour from the ground to cloud base."""
        sl = slice(0, self.levels.kbas + 1)
        col = self.column
        return (
            float(np.mean(col.temperature[sl])),
            float(np.mean(col.pressure[sl])),
            float(np.mean(col.vapor[sl])),
        )

    @staticmethod
    def _record(state: HailstoneState, env: CloudEnvironment, sec: float) -> StepRecord:
        return StepRecord(
            time=sec,
            pressure=state.pressure,
            height=state.height,
            diameter=state.diameter,
            density=state.density,
            liquid_fraction=state.liquid_fraction,
            surface_temperature=state.surface_temperature,
            ambient_temperature=env.temperature,
            regime=state.regime,
            updraft=env.updraft,
            terminal_velocity=state.terminal_velocity,
        )


def hailstone_driver(
    tca: Sequence[float],
    h1d: Sequence[float],
    ht: float,
    pa: Sequence[float],
    rho1d: Sequence[float],
    ra: Sequence[float],
    qi1d: Sequence[float],
    qc1d: Sequence[float],
    qr1d: Sequence[float],
    qs1d: Sequence[float],
    qg1d: Sequence[float],
    ng1d: Sequence[float],
    vuu: Sequence[float],
    wdur: float,
    nz: int,
    config: Optional[HailcastConfig] = None,
) -> tuple[float, float, float, float, float]:
    """Host-model entry point with the historical argument order.

    Only the first *nz* levels of each profile are used. ``ng1d`` (graupel
    number concentration) is accepted and carried on the column but does
    not enter the physics.

    Returns
    -------
    tuple[float, float, float, float, float]
        Hail diameters (mm), largest first.
    """
    column = AtmosphericColumn.from_profiles(
        temperature=tca[:nz],
        height=h1d[:nz],
        pressure=pa[:nz],
        density=rho1d[:nz],
        vapor=ra[:nz],
        cloud_ice=qi1d[:nz],
        cloud_water=qc1d[:nz],
        rain=qr1d[:nz],
        snow=qs1d[:nz],
        graupel=qg1d[:nz],
        updraft=vuu[:nz],
        terrain_height=ht,
        updraft_duration=wdur,
        graupel_number=ng1d[:nz],
    )
    d1, d2, d3, d4, d5 = HailstoneEngine(column, config).run()
    return d1, d2, d3, d4, d5
