"""Leaf boundary-layer conductance.

Pure physics kernel following the MLcan implementation of Nikolov, Massman
and Schoettle (1995), Ecological Modelling 80, 205-235: forced and free
convection estimates, the larger of which is returned.
"""

from __future__ import annotations

from numba import njit

from cropflux.process.kernels.thermo import saturation_vapor_pressure
from cropflux.units import ATMOSPHERIC_PRESSURE, ZERO_CELSIUS

__all__ = ["leaf_boundary_layer"]

CF = 1.6361e-3


@njit(cache=True)
def leaf_boundary_layer(
    wind_speed: float,
    leaf_width: float,
    air_temp: float,
    delta_t: float,
    stomatal_conductance: float,
    vapor_pressure: float,
) -> float:
    """
    Boundary-layer conductance to water vapor.

    g_forced = cf * Ta^0.56 * ((Ta + 120) * (u / w) / P)^0.5
    g_free   = cf * Tl^0.56 * ((Tl + 120) / P)^0.5 * (|dTv| / w)^0.25

    where dTv is the virtual temperature difference between the leaf surface
    and the air (Eq. 34-35 of Nikolov et al.), with the leaf-surface vapor
    pressure weighted by stomatal and forced-convection conductances.

    Physical constraints:
        - g > 0
        - g >= g_forced

    Parameters
    ----------
    wind_speed : float
        Wind speed (m/s)
    leaf_width : float
        Characteristic leaf dimension (m)
    air_temp : float
        Air temperature (C)
    delta_t : float
        Leaf minus air temperature (C)
    stomatal_conductance : float
        Stomatal conductance to water vapor (m/s)
    vapor_pressure : float
        Ambient vapor pressure (hPa)

    Returns
    -------
    float
        Boundary-layer conductance to water vapor (m/s)
    """
    leaf_temp = air_temp + delta_t
    tak = air_temp + ZERO_CELSIUS
    tlk = leaf_temp + ZERO_CELSIUS
    ea = vapor_pressure * 1e2
    es_leaf = saturation_vapor_pressure(leaf_temp) * 100.0

    g_forced = CF * tak ** 0.56 * ((tak + 120.0) * ((wind_speed / leaf_width) / ATMOSPHERIC_PRESSURE)) ** 0.5

    # Leaf-surface vapor pressure (Eq. 35) and virtual temperature difference (Eq. 34)
    eb = (stomatal_conductance * es_leaf + g_forced * ea) / (stomatal_conductance + g_forced)
    tv_diff = (tlk / (1.0 - 0.378 * eb / ATMOSPHERIC_PRESSURE)) - (tak / (1.0 - 0.378 * ea / ATMOSPHERIC_PRESSURE))
    if tv_diff < 0.0:
        tv_diff = -tv_diff

    g_free = CF * tlk ** 0.56 * ((tlk + 120.0) / ATMOSPHERIC_PRESSURE) ** 0.5 * (tv_diff / leaf_width) ** 0.25

    if g_forced > g_free:
        return g_forced
    return g_free
