"""Property-based tests for the hailstone microphysics.

Properties 3-7: fall speed, rime density, accretion density, heat-budget
liquid fraction, and sub-cloud melting.
"""

from __future__ import annotations

import math

from hypothesis import given, settings, strategies as st

from pyhailcast.core.models import GrowthRegime
from pyhailcast.physics.accretion import accrete, rime_density
from pyhailcast.physics.heat_budget import heat_budget
from pyhailcast.physics.melting import melt
from pyhailcast.physics.terminal_velocity import terminal_velocity


# ---------------------------------------------------------------------------
# Strategies
# ---------------------------------------------------------------------------

diameters = st.floats(min_value=1e-6, max_value=0.1)
stone_densities = st.floats(min_value=100.0, max_value=900.0)
air_densities = st.floats(min_value=0.2, max_value=1.3)
temperatures = st.floats(min_value=200.0, max_value=310.0)
contents = st.floats(min_value=0.0, max_value=1e-2)
regimes = st.sampled_from([GrowthRegime.DRY, GrowthRegime.WET])


# ---------------------------------------------------------------------------
# Property 3: fall speed is positive and finite
# ---------------------------------------------------------------------------

@given(rho_a=air_densities, rho_s=stone_densities, d=diameters, t=temperatures)
@settings(max_examples=200)
def test_property_3_fall_speed_positive(rho_a, rho_s, d, t):
    v = terminal_velocity(rho_a, rho_s, d, t)
    assert math.isfinite(v)
    assert v > 0.0


# ---------------------------------------------------------------------------
# Property 4: rime density stays in [100, 900]
# ---------------------------------------------------------------------------

@given(lwc=contents, vt=st.floats(min_value=0.0, max_value=60.0), ts=temperatures)
@settings(max_examples=200)
def test_property_4_rime_density_bounds(lwc, vt, ts):
    assert 100.0 <= rime_density(lwc, vt, ts) <= 900.0


# ---------------------------------------------------------------------------
# Property 5: accretion mixes densities and never shrinks the stone
# ---------------------------------------------------------------------------

@given(d=diameters, rho=stone_densities, ta=temperatures, ts=temperatures,
       vt=st.floats(min_value=0.0, max_value=60.0), lwc=contents, iwc=contents,
       regime=regimes)
@settings(max_examples=200)
def test_property_5_accretion_bounds(d, rho, ta, ts, vt, lwc, iwc, regime):
    step = accrete(d, ta, ts, 60000.0, rho, 0.0, vt, lwc, iwc, 5.0, regime)
    assert step.diameter >= d
    assert 100.0 - 1e-9 <= step.density <= 900.0 + 1e-9
    assert step.mass_gain >= 0.0


# ---------------------------------------------------------------------------
# Property 6: liquid fraction stays in [0, 1]
# ---------------------------------------------------------------------------

@given(fw=st.floats(min_value=0.0, max_value=1.0), ta=temperatures,
       d=st.floats(min_value=1e-4, max_value=0.05), lwc=contents, iwc=contents,
       regime=regimes)
@settings(max_examples=200)
def test_property_6_liquid_fraction_bounds(fw, ta, d, lwc, iwc, regime):
    ts = 273.155 if regime is GrowthRegime.WET else min(ta, 273.0)
    vt = terminal_velocity(0.8, 700.0, d, ta)
    growth = accrete(d, ta, ts, 60000.0, 700.0, fw, vt, lwc, iwc, 5.0, regime)
    _, new_fw = heat_budget(ts, fw, ta, vt, 0.0, growth.diameter, 0.8,
                            growth, 5.0, regime)
    assert 0.0 <= new_fw <= 1.0


# ---------------------------------------------------------------------------
# Property 7: melting never grows a stone
# ---------------------------------------------------------------------------

@given(d=st.floats(min_value=0.0, max_value=0.1),
       t=st.floats(min_value=270.0, max_value=305.0),
       p=st.floats(min_value=70000.0, max_value=100000.0),
       r=st.floats(min_value=1e-4, max_value=2.5e-3),
       depth=st.floats(min_value=0.0, max_value=5000.0),
       vt=st.floats(min_value=0.0, max_value=50.0))
@settings(max_examples=200)
def test_property_7_melting_never_grows(d, t, p, r, depth, vt):
    new_d = melt(d, t, p, r, depth, vt)
    assert 0.0 <= new_d <= d
