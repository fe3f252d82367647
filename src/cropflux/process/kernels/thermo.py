"""Thermodynamic properties of moist air.

Pure scalar kernels of air temperature (C) shared by the leaf energy
balance, the boundary-layer model and soil evaporation. Linear and
quadratic fits follow WIMOVAC; saturation vapor pressure is the Arden
Buck equation.
"""

from __future__ import annotations

import math

from numba import njit

__all__ = [
    "dry_air_density",
    "latent_heat_vaporization",
    "saturation_slope",
    "saturation_vapor_pressure",
]


@njit(cache=True)
def dry_air_density(temp: float) -> float:
    """
    Density of dry air.

    rho = 1.295163636 - 0.004258182 * T

    Parameters
    ----------
    temp : float
        Air temperature (C)

    Returns
    -------
    float
        Dry air density (kg/m^3)
    """
    return 1.295163636 - 0.004258182 * temp


@njit(cache=True)
def latent_heat_vaporization(temp: float) -> float:
    """
    Latent heat of vaporization of water.

    Returns
    -------
    float
        Latent heat (MJ/kg); callers convert to J/kg
    """
    return 2.501 - 0.002372727 * temp


@njit(cache=True)
def saturation_slope(temp: float) -> float:
    """Slope of the saturation vapor density curve (g/m^3/K)."""
    return 0.338376068 + 0.011435897 * temp + 0.001111111 * temp ** 2


@njit(cache=True)
def saturation_vapor_pressure(temp: float) -> float:
    """
    Saturation vapor pressure (Arden Buck equation).

    es = 6.1121 * exp((18.678 - T/234.5) * T / (257.14 + T))

    Parameters
    ----------
    temp : float
        Temperature (C)

    Returns
    -------
    float
        Saturation vapor pressure (hPa)
    """
    a = (18.678 - temp / 234.5) * temp
    b = 257.14 + temp
    return 6.1121 * math.exp(a / b)
