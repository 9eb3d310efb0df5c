"""Unit tests for saturation vapour density differences."""

import math

import pytest

from pyhailcast.core.models import GrowthRegime
from pyhailcast.physics.vapor import (
    E0,
    RV,
    T0,
    saturation_vapor_density,
    vapor_density_difference,
)


def test_triple_point_value():
    expected = E0 / (RV * T0)
    assert saturation_vapor_density(T0, over_ice=False) == pytest.approx(expected)
    assert saturation_vapor_density(T0, over_ice=True) == pytest.approx(expected)


def test_ice_below_liquid_when_supercooled():
    assert saturation_vapor_density(255.0, True) < saturation_vapor_density(255.0, False)


def test_equal_temperatures_all_ice_cloud_dry_growth():
    assert vapor_density_difference(1.0, 260.0, 260.0, GrowthRegime.DRY) == pytest.approx(0.0, abs=1e-15)


def test_equal_temperatures_all_liquid_cloud_wet_growth():
    assert vapor_density_difference(0.0, 270.0, 270.0, GrowthRegime.WET) == pytest.approx(0.0, abs=1e-15)


def test_warm_stone_evaporates():
    assert vapor_density_difference(1.0, 268.0, 260.0, GrowthRegime.DRY) > 0.0


def test_liquid_cloud_deposits_on_dry_stone():
    # Supercooled liquid cloud is supersaturated with respect to ice.
    assert vapor_density_difference(0.0, 260.0, 260.0, GrowthRegime.DRY) < 0.0


def test_unphysical_temperature_does_not_raise():
    value = vapor_density_difference(1.0, -1.0e-300, 260.0, GrowthRegime.DRY)
    assert not math.isfinite(value)
