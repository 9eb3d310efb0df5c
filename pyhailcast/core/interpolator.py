"""Linear interpolation of column profiles at an arbitrary pressure.

The column is tabulated on a pressure coordinate that decreases with level
index. A query pressure ``p`` is bracketed by the first pair ``(k, k+1)``
with ``pa[k] >= p > pa[k+1]``; the value is then interpolated linearly in
pressure. Queries that cannot be bracketed (above the model top, at or
below the lowest level in a way that fails the strict inequality, or NaN)
are reported as not found instead of raising.
"""

from __future__ import annotations

from typing import Optional

import numpy as np

from pyhailcast.core.models import AtmosphericColumn


def locate_bracket(pressures: np.ndarray, p: float) -> Optional[int]:
    """Return the lower index ``k`` of the bracketing pair, or None."""
    hits = np.flatnonzero((pressures[:-1] >= p) & (pressures[1:] < p))
    if hits.size == 0:
        return None
    return int(hits[0])


def interpolate_at_pressure(
    values: np.ndarray, pressures: np.ndarray, p: float
) -> tuple[float, bool]:
    """Interpolate ``values`` at pressure ``p``.

    Parameters
    ----------
    values : np.ndarray
        Profile co-indexed with *pressures*.
    pressures : np.ndarray
        Pressure coordinate (Pa), decreasing with index.
    p : float
        Query pressure (Pa).

    Returns
    -------
    tuple[float, bool]
        ``(value, found)``. When *found* is False the value is NaN and
        must not be used.
    """
    k = locate_bracket(pressures, p)
    if k is None:
        return float("nan"), False
    return _lerp(values, pressures, k, p), True


def _lerp(values: np.ndarray, pressures: np.ndarray, k: int, p: float) -> float:
    frac = (pressures[k] - p) / (pressures[k] - pressures[k + 1])
    return float(values[k] + (values[k + 1] - values[k]) * frac)


class PressureInterpolator:
    """Samples the profiles of one :class:`AtmosphericColumn`.

    Parameters
    ----------
    column : AtmosphericColumn
        Column to sample. Held by reference and never modified.
    """

    def __init__(self, column: AtmosphericColumn) -> None:
        self.column = column
        self._pressure = column.pressure
        # Derived profiles are computed once per column.
        self._ice = column.total_ice
        self._liquid = column.total_liquid

    def interpolate(self, values: np.ndarray, p: float) -> tuple[float, bool]:
        """Interpolate an arbitrary profile at pressure *p*."""
        return interpolate_at_pressure(values, self._pressure, p)

    def updraft(self, p: float) -> tuple[float, bool]:
        """Updraft speed (m/s) at pressure *p*."""
        return self.interpolate(self.column.updraft, p)

    def thermodynamics(self, p: float) -> Optional[tuple[float, float, float, float]]:
        """Temperature, vapour, total ice and total liquid at *p*.

        Returns None when *p* lies outside the column.
        """
        k = locate_bracket(self._pressure, p)
        if k is None:
            return None
        pa = self._pressure
        return (
            _lerp(self.column.temperature, pa, k, p),
            _lerp(self.column.vapor, pa, k, p),
            _lerp(self._ice, pa, k, p),
            _lerp(self._liquid, pa, k, p),
        )
