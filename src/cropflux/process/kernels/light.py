"""Canopy light and micro-environment profiles.

Pure physics kernels distributing above-canopy irradiance across discrete
canopy layers, plus the simple exponential-decay profiles of wind speed,
relative humidity and leaf nitrogen that feed the leaf-level solvers.
Layer 0 is the top of the canopy.
"""

from __future__ import annotations

import math

import numpy as np
from numba import njit, prange
from numpy.typing import NDArray

__all__ = [
    "extinction_coefficient",
    "sun_ml",
    "wind_profile",
    "relative_humidity_profile",
    "leaf_nitrogen_profile",
]

SCATTERING_COEFFICIENT = 0.8
WIND_EXTINCTION = 0.7


@njit(cache=True)
def extinction_coefficient(cos_theta: float, chil: float) -> float:
    """
    Direct-beam extinction coefficient for an ellipsoidal leaf angle distribution.

    k = sqrt(chil^2 + tan^2(theta)) / (chil + 1.744 * (chil + 1.183)^-0.733)

    Physical constraints:
        - k > 0 (sign flipped when the denominator is negative)

    Parameters
    ----------
    cos_theta : float
        Cosine of the solar zenith angle, (0, 1]
    chil : float
        Leaf angle distribution parameter (1 = spherical)

    Returns
    -------
    float
        Extinction coefficient (dimensionless)
    """
    theta = math.acos(cos_theta)
    k0 = math.sqrt(chil ** 2 + math.tan(theta) ** 2)
    k1 = chil + 1.744 * (chil + 1.183) ** -0.733
    if k1 > 0.0:
        return k0 / k1
    return -k0 / k1


@njit(cache=True)
def sun_ml(
    i_dir: float,
    i_diff: float,
    lai: float,
    n_layers: int,
    cos_theta: float,
    kd: float,
    chil: float,
    heightf: float,
) -> tuple[
    NDArray[np.float64],
    NDArray[np.float64],
    NDArray[np.float64],
    NDArray[np.float64],
    NDArray[np.float64],
    NDArray[np.float64],
    float,
]:
    """
    Multi-layer sunlit/shaded light profile.

    For layer i with cumulative LAI at mid-layer L = LAIi * (i + 0.5):
        Ibeam  = Idir * cos(theta)
        Iscat  = Ibeam * (exp(-k sqrt(a) L) - exp(-k L)),  a = 0.8
        Isolar = Ibeam * k
        Idiff' = Idiff * exp(-kd L) + Iscat
        Ls     = (1 - exp(-k LAIi)) exp(-k L) / k
        Fsun   = Ls / LAIi,  Fshade = 1 - Fsun

    Physical constraints:
        - Fsun + Fshade = 1 in every layer
        - Irradiance values >= 0
        - No validation here; see canopy.canopy_light_profile

    Parameters
    ----------
    i_dir : float
        Direct irradiance above the canopy (umol/m^2/s)
    i_diff : float
        Diffuse irradiance above the canopy (umol/m^2/s)
    lai : float
        Leaf area index
    n_layers : int
        Number of canopy layers
    cos_theta : float
        Cosine of the solar zenith angle
    kd : float
        Diffuse extinction coefficient
    chil : float
        Leaf angle distribution parameter
    heightf : float
        Leaf area per unit canopy height (m^2 leaf / m^2 ground / m)

    Returns
    -------
    direct : (n_layers,)
        Irradiance on sunlit leaves (umol/m^2/s)
    diffuse : (n_layers,)
        Irradiance on shaded leaves (umol/m^2/s)
    total : (n_layers,)
        Layer-average irradiance (umol/m^2/s)
    sunlit : (n_layers,)
        Sunlit leaf fraction
    shaded : (n_layers,)
        Shaded leaf fraction
    height : (n_layers,)
        Height of the layer mid-point (m)
    k : float
        Direct-beam extinction coefficient

    Notes
    -----
    With zero leaf area every layer is reported fully sunlit with zero
    average irradiance, keeping the fraction sum at 1.
    """
    k = extinction_coefficient(cos_theta, chil)
    lai_i = lai / n_layers

    direct = np.empty(n_layers, dtype=np.float64)
    diffuse = np.empty(n_layers, dtype=np.float64)
    total = np.empty(n_layers, dtype=np.float64)
    sunlit = np.empty(n_layers, dtype=np.float64)
    shaded = np.empty(n_layers, dtype=np.float64)
    height = np.empty(n_layers, dtype=np.float64)

    sqrt_alpha = math.sqrt(SCATTERING_COEFFICIENT)
    i_beam = i_dir * cos_theta
    i_solar = i_beam * k

    for i in range(n_layers):
        cum_lai = lai_i * (i + 0.5)

        i_scat = i_beam * math.exp(-k * sqrt_alpha * cum_lai) - i_beam * math.exp(-k * cum_lai)
        i_diffuse = i_diff * math.exp(-kd * cum_lai) + i_scat

        if lai_i > 0.0:
            ls = (1.0 - math.exp(-k * lai_i)) * math.exp(-k * cum_lai) / k
            ld = lai_i - ls
            f_sun = ls / (ls + ld)
            f_shade = ld / (ls + ld)
        else:
            f_sun = 1.0
            f_shade = 0.0

        i_average = (f_sun * (i_solar + i_diffuse) + f_shade * i_diffuse) \
            * (1.0 - math.exp(-k * lai_i)) / k

        direct[i] = i_solar + i_diffuse
        diffuse[i] = i_diffuse
        total[i] = i_average
        sunlit[i] = f_sun
        shaded[i] = f_shade
        height[i] = (lai - cum_lai) / heightf

    return direct, diffuse, total, sunlit, shaded, height, k


@njit(cache=True, parallel=True)
def wind_profile(wind_speed: float, lai: float, n_layers: int) -> NDArray[np.float64]:
    """
    Wind speed within the canopy.

    u_i = u * exp(-0.7 * (CumLAI_i - LI)),  CumLAI_i = LI * (i + 1)

    Returns
    -------
    wind : (n_layers,)
        Wind speed per layer (m/s); layer 0 equals the input speed
    """
    wind = np.empty(n_layers, dtype=np.float64)
    li = lai / n_layers
    for i in prange(n_layers):
        cum_lai = li * (i + 1)
        wind[i] = wind_speed * math.exp(-WIND_EXTINCTION * (cum_lai - li))
    return wind


@njit(cache=True, parallel=True)
def relative_humidity_profile(rh: float, n_layers: int) -> NDArray[np.float64]:
    """
    Relative humidity within the canopy.

    RH_i = RH * exp((1 - RH) * (i + 1) / n)

    Physical constraints:
        - 0 <= RH_i <= 1 (capped)

    Parameters
    ----------
    rh : float
        Relative humidity above the canopy, [0, 1]
    n_layers : int
        Number of canopy layers

    Returns
    -------
    rh_layers : (n_layers,)
        Relative humidity per layer, increasing with depth
    """
    rh_layers = np.empty(n_layers, dtype=np.float64)
    kh = 1.0 - rh
    for i in prange(n_layers):
        value = rh * math.exp(kh * ((i + 1.0) / n_layers))
        if value > 1.0:
            value = 1.0
        rh_layers[i] = value
    return rh_layers


@njit(cache=True, parallel=True)
def leaf_nitrogen_profile(leaf_n: float, lai: float, n_layers: int, kpln: float) -> NDArray[np.float64]:
    """Leaf nitrogen per layer, N_i = N * exp(-kpLN * (CumLAI_i - LI))."""
    leaf_n_layers = np.empty(n_layers, dtype=np.float64)
    li = lai / n_layers
    for i in prange(n_layers):
        cum_lai = li * (i + 1)
        leaf_n_layers[i] = leaf_n * math.exp(-kpln * (cum_lai - li))
    return leaf_n_layers
