"""Property-based tests for the hailstone engine and its configuration.

Properties 8-9: output validity on arbitrary storms, namelist round trip.
"""

from __future__ import annotations

import math

import numpy as np
from hypothesis import given, settings, strategies as st

from pyhailcast.core.engine import HailstoneEngine
from pyhailcast.core.models import AtmosphericColumn, HailcastConfig
from pyhailcast.data.config_parser import parse_config, write_hailcast_namelist


def _make_storm(peak_updraft, cloud_water, cloud_ice, top_km):
    z = np.arange(0.0, 15001.0, 250.0)
    t = 285.0 - 6.5 * z / 1000.0
    p = 1.0e5 * np.exp(-z / 8000.0)
    in_cloud = (z >= 1000.0) & (z <= top_km * 1000.0)
    w = np.where(in_cloud, peak_updraft * np.sin(np.pi * (z - 1000.0) / (top_km * 1000.0 - 1000.0)), 0.0)
    return AtmosphericColumn.from_profiles(
        temperature=t, height=z, pressure=p, density=p / (287.0 * t),
        vapor=6.0e-3 * np.exp(-z / 3000.0),
        cloud_ice=np.where(in_cloud & (t < 273.15), cloud_ice, 0.0),
        cloud_water=np.where(in_cloud, cloud_water, 0.0),
        rain=np.zeros_like(z), snow=np.zeros_like(z), graupel=np.zeros_like(z),
        updraft=np.clip(w, 0.0, None), updraft_duration=3600,
    )


# ---------------------------------------------------------------------------
# Property 8: five finite, non-negative sizes, largest first, repeatable
# ---------------------------------------------------------------------------

@given(peak=st.floats(min_value=0.0, max_value=45.0),
       qc=st.floats(min_value=0.0, max_value=6e-3),
       qi=st.floats(min_value=2e-4, max_value=3e-3),
       top_km=st.floats(min_value=6.0, max_value=13.0))
@settings(max_examples=10, deadline=None)
def test_property_8_engine_output_valid(peak, qc, qi, top_km):
    engine = HailstoneEngine(_make_storm(peak, qc, qi, top_km))
    sizes = engine.run()
    assert len(sizes) == 5
    assert all(math.isfinite(s) and s >= 0.0 for s in sizes)
    assert sizes == sorted(sizes, reverse=True)
    assert engine.run() == sizes


# ---------------------------------------------------------------------------
# Property 9: written namelists read back to the same config
# ---------------------------------------------------------------------------

positive = st.floats(min_value=1e-3, max_value=1e4, allow_nan=False, allow_infinity=False)


@given(dt=st.floats(min_value=0.5, max_value=60.0),
       start=st.floats(min_value=0.0, max_value=600.0),
       span=st.floats(min_value=1.0, max_value=7200.0),
       embryos=st.lists(st.floats(min_value=1e-6, max_value=1e-2), min_size=5, max_size=5),
       dense=positive, ndrop=positive, dbreak=positive,
       fwtol=st.floats(min_value=0.0, max_value=0.1))
@settings(max_examples=100)
def test_property_9_namelist_round_trip(dt, start, span, embryos, dense, ndrop, dbreak, fwtol):
    config = HailcastConfig(
        time_step=dt, start_time=start, max_time=start + span,
        embryo_diameters=tuple(embryos), initial_density=dense,
        droplet_concentration=ndrop, breakup_diameter=dbreak,
        melted_tolerance=fwtol,
    )
    assert parse_config(write_hailcast_namelist(config)) == config
