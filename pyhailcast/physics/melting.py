"""Melting of a hailstone below cloud base.

A spherical melting estimate after Goyer et al. (1969), eq. (3): the stone
surface is taken to be at 0 °C, heat arrives by conduction from air at the
wet-bulb temperature of the mean sub-cloud layer, and vapour exchange adds
or removes latent heat. The wet-bulb temperature comes from a bounded
Newton iteration on the psychrometric equation.

References:
    Goyer, G.G., Howell, W.E., Schaefer, V.J. et al. (1969)
        J. Appl. Meteor. 8, 315-318.
    Salby, M.L. (1996) Fundamentals of Atmospheric Physics, p. 317.
"""

from __future__ import annotations

import logging
import math

logger = logging.getLogger(__name__)

EPS = 0.622                # Rd/Rv
ZERO_CELSIUS = 273.155     # K
MAX_WETBULB_ITERATIONS = 11
WETBULB_CHANGE_THRESHOLD = 0.0001

KA = 0.02                  # W/(m·K), thermal conductivity of air
LF = 3.34e5                # J/kg, latent heat of fusion
LV = 2.5e6                 # J/kg, latent heat of vaporisation
DV = 0.25e-4               # m²/s, diffusivity of water vapour
RV = 1004.0 - 287.0        # J/(kg·K) as used by the Goyer formulation
RHO_ICE = 917.0            # kg/m³


def vapor_pressure(pressure: float, mixing_ratio: float) -> float:
    """Partial pressure of water vapour (Pa)."""
    return pressure * mixing_ratio / (mixing_ratio + EPS)


def dewpoint(pressure: float, mixing_ratio: float) -> float:
    """Dewpoint (°C) by inverting ``e = A exp(-B / T)``.

    Returns NaN for dry air, which has no dewpoint.
    """
    if mixing_ratio <= 0.0:
        return float("nan")
    a = 2.53e11   # Pa
    b = 5.42e3    # K
    return b / math.log(a * EPS / (mixing_ratio * pressure)) - ZERO_CELSIUS


def wet_bulb_temperature(temperature: float, pressure: float, mixing_ratio: float) -> float:
    """Wet-bulb temperature (°C) of air at *temperature* (K).

    The first guess weights temperature and dewpoint by the psychrometric
    constant and the slope of the saturation curve. Newton steps then
    refine it for at most :data:`MAX_WETBULB_ITERATIONS` iterations,
    stopping after the first step whose relative change exceeds
    :data:`WETBULB_CHANGE_THRESHOLD`.
    """
    tc = temperature - ZERO_CELSIUS
    hpa = pressure / 100.0
    eenv = vapor_pressure(pressure, mixing_ratio) / 100.0   # hPa

    gamma = 6.6e-4 * hpa
    if eenv > 0.0:
        td = dewpoint(pressure, mixing_ratio)
        delta = 4098.0 * eenv / ((td + 237.7) * (td + 237.7))
        wetbulb = (gamma * tc + delta * td) / (gamma + delta)
    else:
        wetbulb = tc

    for _ in range(MAX_WETBULB_ITERATIONS):
        ewet = 6.108 * math.exp(17.27 * wetbulb / (237.3 + wetbulb))
        de = 0.0006355 * hpa * (tc - wetbulb) - (ewet - eenv)
        der = (ewet * (0.0091379024 - 6106.396 / (ZERO_CELSIUS + wetbulb) ** 2)
               - 0.0006355 * hpa)
        wetold = wetbulb
        wetbulb = wetbulb - de / der
        if wetbulb != 0.0 and abs(wetbulb - wetold) / wetbulb > WETBULB_CHANGE_THRESHOLD:
            break
    return wetbulb


def melt(
    diameter: float,
    layer_temperature: float,
    layer_pressure: float,
    layer_mixing_ratio: float,
    layer_depth: float,
    terminal_velocity: float,
) -> float:
    """Diameter (m) after falling through the sub-cloud layer.

    Parameters
    ----------
    diameter : float
        Diameter at cloud exit (m).
    layer_temperature : float
        Mean sub-cloud temperature (K).
    layer_pressure : float
        Mean sub-cloud pressure (Pa).
    layer_mixing_ratio : float
        Mean sub-cloud vapour mixing ratio (kg/kg).
    layer_depth : float
        Depth used for the residence time (m).
    terminal_velocity : float
        Fall speed at cloud exit (m/s).

    Returns
    -------
    float
        New diameter, never larger than *diameter* and never negative.
    """
    if diameter <= 0.0 or terminal_velocity <= 0.0:
        return max(diameter, 0.0)

    wetbulb = wet_bulb_temperature(layer_temperature, layer_pressure, layer_mixing_ratio)
    wetbulb_k = wetbulb + ZERO_CELSIUS
    r = diameter / 2.0

    residence = layer_depth / terminal_velocity

    # Air density near 850 hPa stands in for the whole layer.
    rho = 85000.0 / (287.0 * layer_temperature)
    re = rho * r * terminal_velocity * 0.01 / 1.7e-5

    # Stone surface held at 0 °C, so the temperature excess is the wet bulb.
    delt = wetbulb
    esenv = 610.8 * math.exp(17.27 * wetbulb / (237.3 + wetbulb))
    rhosenv = esenv / (RV * wetbulb_k)
    rhosfc = 610.8 / (RV * ZERO_CELSIUS)
    dsig = rhosenv - rhosfc

    dmdt = (-1.7 * math.pi * r * re ** 0.5 / LF) * (KA * delt + (LV - LF) * DV * dsig)
    dmdt = min(dmdt, 0.0)

    mass_orig = 4.0 / 3.0 * math.pi * r ** 3 * RHO_ICE
    new_mass = max(mass_orig + dmdt * residence, 0.0)
    new_diameter = 2.0 * (0.75 * new_mass / (math.pi * RHO_ICE)) ** (1.0 / 3.0)
    logger.debug(
        f"Sub-cloud melt: wet bulb {wetbulb:.2f} C, residence {residence:.0f} s, "
        f"{diameter * 1000.0:.2f} -> {new_diameter * 1000.0:.2f} mm"
    )
    return min(new_diameter, diameter)
