"""End-to-end hail size scenarios on idealised storm columns.

Each scenario builds a 61-level column (0-15 km every 250 m) with cloud
between 1 and 11 km and ice from 1.75 km up, then runs all five embryos.
"""

from __future__ import annotations

import math

import numpy as np
import pytest

from pyhailcast import (
    AtmosphericColumn,
    GrowthRegime,
    HailcastConfig,
    HailstoneEngine,
    TrialExit,
    hailstone_driver,
)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _make_storm(peak_updraft: float, cloud_water: float, cloud_ice: float,
                updraft_everywhere: bool = False) -> AtmosphericColumn:
    z = np.arange(0.0, 15001.0, 250.0)
    t = 283.0 - 6.5 * z / 1000.0
    p = 1.0e5 * np.exp(-z / 8000.0)
    in_cloud = (z >= 1000.0) & (z <= 11000.0)
    if updraft_everywhere:
        w = np.full_like(z, peak_updraft)
    else:
        w = np.where(in_cloud, peak_updraft * np.sin(np.pi * (z - 1000.0) / 10000.0), 0.0)
        w = np.clip(w, 0.0, None)
    return AtmosphericColumn.from_profiles(
        temperature=t,
        height=z,
        pressure=p,
        density=p / (287.0 * t),
        vapor=6.0e-3 * np.exp(-z / 3000.0),
        cloud_ice=np.where(in_cloud & (z >= 1750.0), cloud_ice, 0.0),
        cloud_water=np.where(in_cloud, cloud_water, 0.0),
        rain=np.zeros_like(z),
        snow=np.zeros_like(z),
        graupel=np.zeros_like(z),
        updraft=w,
        terrain_height=0.0,
        updraft_duration=3600,
    )


def _assert_valid_sizes(sizes):
    assert len(sizes) == 5
    assert all(math.isfinite(d) and d >= 0.0 for d in sizes)
    assert all(a >= b for a, b in zip(sizes, sizes[1:]))


# ---------------------------------------------------------------------------
# Strong, moist updraft
# ---------------------------------------------------------------------------

class TestStrongUpdraft:
    @pytest.fixture(scope="class")
    def trials(self):
        column = _make_storm(40.0, 5.0e-3, 1.0e-3)
        return HailstoneEngine(column).run_trials(record_trace=True)

    def test_sizes_valid(self, trials):
        _assert_valid_sizes(sorted((t.diameter_mm for t in trials), reverse=True))

    def test_every_embryo_grows(self, trials):
        for t in trials:
            assert t.steps > 0
            assert max(r.diameter for r in t.trace) > t.embryo_diameter

    def test_largest_stone_reaches_hail_size_in_cloud(self, trials):
        assert max(t.diameter_before_melt_mm for t in trials) > 1.0

    def test_hail_reaches_ground(self):
        sizes = HailstoneEngine(_make_storm(40.0, 5.0e-3, 1.0e-3)).run()
        _assert_valid_sizes(sizes)
        d1, d2, d3 = sizes[:3]
        assert d1 > 10.0
        assert d1 >= d2 >= d3 > 0.0
        assert d1 > d3

    def test_embryos_are_lofted(self, trials):
        assert all(t.max_height > 1750.0 for t in trials)

    def test_state_bounds_hold_each_step(self, trials):
        for t in trials:
            for r in t.trace:
                assert 0.0 <= r.liquid_fraction <= 1.0
                assert 100.0 - 1e-9 <= r.density <= 1000.0 + 1e-9
                assert r.regime in (GrowthRegime.DRY, GrowthRegime.WET)
                assert r.terminal_velocity >= 0.0

    def test_melt_never_grows(self, trials):
        for t in trials:
            assert t.diameter_mm <= t.diameter_before_melt_mm + 1e-12

    def test_repeatable(self):
        column = _make_storm(40.0, 5.0e-3, 1.0e-3)
        assert HailstoneEngine(column).run() == HailstoneEngine(column).run()


# ---------------------------------------------------------------------------
# No updraft, nearly dry cloud
# ---------------------------------------------------------------------------

class TestNoUpdraft:
    def test_embryos_stay_tiny(self):
        column = _make_storm(0.0, 1.0e-6, 1.5e-4)
        trials = HailstoneEngine(column).run_trials()
        assert all(t.exit_reason is TrialExit.TIMED_OUT for t in trials)
        assert all(t.diameter_mm <= 0.05 for t in trials)


# ---------------------------------------------------------------------------
# Updraft through the model top
# ---------------------------------------------------------------------------

class TestLostThroughTop:
    def test_all_zero(self):
        column = _make_storm(50.0, 1.0e-6, 1.5e-4, updraft_everywhere=True)
        trials = HailstoneEngine(column).run_trials()
        assert all(t.exit_reason is TrialExit.EXIT_DOMAIN for t in trials)
        assert [t.diameter_mm for t in trials] == [0.0] * 5
        assert all(not t.melt_applied for t in trials)


# ---------------------------------------------------------------------------
# Large embryos falling straight out
# ---------------------------------------------------------------------------

class TestFallOut:
    def test_reach_cloud_base_and_melt(self):
        column = _make_storm(0.0, 1.0e-6, 1.5e-4)
        config = HailcastConfig(embryo_diameters=(8.0e-3, 7.0e-3, 6.0e-3, 5.0e-3, 4.0e-3))
        trials = HailstoneEngine(column, config).run_trials()
        for t in trials:
            assert t.exit_reason is TrialExit.REACHED_BASE
            assert t.melt_applied
            assert 0.0 < t.diameter_mm <= t.diameter_before_melt_mm

    def test_larger_embryos_give_larger_hail(self):
        column = _make_storm(0.0, 1.0e-6, 1.5e-4)
        config = HailcastConfig(embryo_diameters=(8.0e-3, 7.0e-3, 6.0e-3, 5.0e-3, 4.0e-3))
        trials = HailstoneEngine(column, config).run_trials()
        sizes = [t.diameter_mm for t in trials]
        assert sizes == sorted(sizes, reverse=True)


# ---------------------------------------------------------------------------
# Host entry point
# ---------------------------------------------------------------------------

def test_host_driver_returns_five_sorted_sizes():
    column = _make_storm(40.0, 5.0e-3, 1.0e-3)
    nz = column.nz
    sizes = hailstone_driver(
        column.temperature, column.height, 0.0, column.pressure,
        column.density, column.vapor, column.cloud_ice, column.cloud_water,
        column.rain, column.snow, column.graupel, np.zeros(nz),
        column.updraft, 3600, nz,
    )
    assert isinstance(sizes, tuple)
    _assert_valid_sizes(list(sizes))
