"""Leaf energy balance and transpiration.

Pure physics kernels solving the linearized leaf energy balance of
Thornley and Johnson (1990, p. 418) for the leaf-to-air temperature
difference, then estimating transpiration three ways (diffusion-resistance,
Penman, Priestley-Taylor). Both variants originate in WIMOVAC.

Kernels never raise: physically invalid derived quantities are reported
through a status code that the solver wrappers turn into exceptions.
"""

from __future__ import annotations

import math

from numba import njit

from cropflux.process.kernels.boundary_layer import leaf_boundary_layer
from cropflux.process.kernels.photosynthesis import c3_photosynthesis
from cropflux.process.kernels.thermo import (
    dry_air_density,
    latent_heat_vaporization,
    saturation_slope,
    saturation_vapor_pressure,
)
from cropflux.units import ATMOSPHERIC_PRESSURE_HPA, KG_TO_MMOL_WATER, MMOL_PER_M_PER_S, PAR_TO_WATTS

__all__ = [
    "evapo_trans",
    "evapo_trans2",
    "STATUS_OK",
    "STATUS_NEGATIVE_GA",
    "STATUS_RH_ABOVE_ONE",
    "STATUS_NEGATIVE_SWVC",
    "STATUS_RADIATION_TOO_HIGH",
    "ET_DIFFUSION",
    "ET_PENMAN",
    "ET_PRIESTLEY_TAYLOR",
]

STATUS_OK = 0
STATUS_NEGATIVE_GA = 1
STATUS_RH_ABOVE_ONE = 2
STATUS_NEGATIVE_SWVC = 3
STATUS_RADIATION_TOO_HIGH = 4

ET_DIFFUSION = 0
ET_PENMAN = 1
ET_PRIESTLEY_TAYLOR = 2

KAPPA = 0.41
LEAF_TRANSMISSION = 0.2
LEAF_REFLECTANCE = 0.2
SPECIFIC_HEAT = 1010.0  # J/kg/K
PRIESTLEY_TAYLOR_ALPHA = 1.26

MIN_CANOPY_HEIGHT = 0.1
MIN_WIND_SPEED = 0.5
MAX_LEAF_RADIATION = 650.0  # W/m^2

MAX_ITERATIONS = 10
DELTA_T_TOLERANCE = 0.5
INITIAL_DELTA_T = 0.01


@njit(cache=True)
def _absorbed_radiation(irradiance: float) -> float:
    """Short-wave radiation absorbed by both leaf faces (W/m^2)."""
    total = irradiance * PAR_TO_WATTS
    return 2.0 * total * ((1.0 - LEAF_REFLECTANCE - LEAF_TRANSMISSION) / (1.0 - LEAF_TRANSMISSION))


@njit(cache=True)
def evapo_trans(
    itot: float,
    air_temp: float,
    rh: float,
    wind_speed: float,
    canopy_height: float,
    vcmax: float,
    jmax: float,
    rd: float,
    b0: float,
    b1: float,
    ca: float,
    o2: float,
    theta: float,
    stress: float,
    stress_approach: int,
    electrons_per_carboxylation: float,
    electrons_per_oxygenation: float,
) -> tuple[float, float, float, float, float, int, bool, int]:
    """
    Leaf energy balance with stomatal conductance from the C3 solver.

    Aerodynamic conductance (neutral log profile, measured at 5 m):
        ga = kappa^2 u / (ln((z + zeta - d) / zeta) ln((z + zeta_m - d) / zeta_m))
        d = 0.77 h, zeta = 0.026 h, zeta_m = 0.13 h

    Iteration (at most 10, stop when |dT change| <= 0.5):
        rlc = 4 sigma (273 + Ta)^3 dT
        PhiN = Ja - rlc
        dT = (PhiN (1/ga + 1/gs) - lambda D) / (lambda (s + gamma (1 + ga/gs)))
        dT clamped to [-5, 5]

    Physical constraints:
        - canopy height >= 0.1 m, wind speed >= 0.5 m/s
        - -5 <= dT <= 5
        - net radiation floored at 0 for transpiration estimates

    Parameters
    ----------
    itot : float
        Irradiance on the leaf (umol/m^2/s)
    air_temp : float
        Air temperature (C)
    rh : float
        Relative humidity, [0, 1]
    wind_speed : float
        Wind speed (m/s)
    canopy_height : float
        Canopy height (m)
    vcmax ... electrons_per_oxygenation
        C3 photosynthesis parameters, see c3_photosynthesis

    Returns
    -------
    trans : float
        Diffusion-resistance transpiration (mmol/m^2/s)
    penman : float
        Penman transpiration (mmol/m^2/s)
    priestley : float
        Priestley-Taylor transpiration (mmol/m^2/s)
    delta_t : float
        Leaf minus air temperature (C)
    layer_cond : float
        Stomatal conductance used (mmol/m^2/s)
    iterations : int
    converged : bool
    status : int
        STATUS_OK or the code of the invalid derived quantity
    """
    wind_speed_height = 5.0
    d_coef = 0.77
    zeta_coef = 0.026
    zeta_m_coef = 0.13
    sigma = 5.67e-8

    if canopy_height < MIN_CANOPY_HEIGHT:
        canopy_height = MIN_CANOPY_HEIGHT
    if wind_speed < MIN_WIND_SPEED:
        wind_speed = MIN_WIND_SPEED

    nan = math.nan
    if rh > 1.0:
        return nan, nan, nan, nan, nan, 0, False, STATUS_RH_ABOVE_ONE

    swvc = saturation_vapor_pressure(air_temp) * 1e-3
    if swvc < 0.0:
        return nan, nan, nan, nan, nan, 0, False, STATUS_NEGATIVE_SWVC

    zeta = zeta_coef * canopy_height
    zeta_m = zeta_m_coef * canopy_height
    d = d_coef * canopy_height

    ga0 = KAPPA ** 2 * wind_speed
    ga1 = math.log((wind_speed_height + zeta - d) / zeta)
    ga2 = math.log((wind_speed_height + zeta_m - d) / zeta_m)
    ga = ga0 / (ga1 * ga2)
    # Also rejects NaN from a displacement height above the measurement height
    if not ga > 0.0:
        return nan, nan, nan, nan, nan, 0, False, STATUS_NEGATIVE_GA

    rho = dry_air_density(air_temp)
    lhv = latent_heat_vaporization(air_temp) * 1e6
    slope = saturation_slope(air_temp) * 1e-3

    gs_result = c3_photosynthesis(
        itot, air_temp, rh, vcmax, jmax, rd, b0, b1, ca, o2, theta,
        stress, stress_approach, electrons_per_carboxylation, electrons_per_oxygenation,
    )
    gs = gs_result[2] / MMOL_PER_M_PER_S
    if gs <= 0.0:
        gs = 0.01

    deficit = swvc * (1.0 - rh)
    psyc = (rho * SPECIFIC_HEAT) / lhv
    ja = _absorbed_radiation(itot)

    delta_t = INITIAL_DELTA_T
    change = 10.0
    phi_n = 0.0
    bottom = lhv * (slope + psyc * (1.0 + ga / gs))
    iterations = 0
    while change > DELTA_T_TOLERANCE and iterations < MAX_ITERATIONS:
        old_delta_t = delta_t

        rlc = 4.0 * sigma * (273.0 + air_temp) ** 3 * delta_t
        phi_n = ja - rlc

        top = phi_n * (1.0 / ga + 1.0 / gs) - lhv * deficit
        delta_t = min(max(top / bottom, -5.0), 5.0)

        change = abs(old_delta_t - delta_t)
        iterations += 1

    converged = change <= DELTA_T_TOLERANCE

    if phi_n < 0.0:
        phi_n = 0.0

    trans = (slope * phi_n + lhv * psyc * ga * deficit) / (lhv * (slope + psyc * (1.0 + ga / gs)))
    priestley = PRIESTLEY_TAYLOR_ALPHA * ((slope * phi_n) / (lhv * (slope + psyc)))
    penman = (slope * phi_n + lhv * psyc * ga * deficit) / (lhv * (slope + psyc))

    return (
        trans * KG_TO_MMOL_WATER,
        penman * KG_TO_MMOL_WATER,
        priestley * KG_TO_MMOL_WATER,
        delta_t,
        gs * MMOL_PER_M_PER_S,
        iterations,
        converged,
        STATUS_OK,
    )


@njit(cache=True)
def evapo_trans2(
    rad: float,
    iave: float,
    air_temp: float,
    rh: float,
    wind_speed: float,
    canopy_height: float,
    stomatal_conductance: float,
    leaf_width: float,
    et_equation: int,
) -> tuple[float, float, float, float, float, int, bool, int]:
    """
    Leaf energy balance with a leaf boundary layer recomputed each iteration.

    Iteration (at most 10, stop when |dT change| <= 0.5):
        rlc = 4 sigma (273 + Ta)^3 dT
        ga  = leaf_boundary_layer(u, w, Ta, dT, gs, ea)
        dT  = ((Ja2 - rlc) (1/ga + 1/gs) - lambda D) / (lambda (s + gamma (1 + ga/gs)))
        dT clamped to [-10, 10]

    Physical constraints:
        - canopy height >= 0.1 m, wind speed >= 0.5 m/s, gs >= 0.001 m/s
        - -10 <= dT <= 10
        - absorbed radiation <= 650 W/m^2
        - net radiation floored at 0 for transpiration estimates

    Parameters
    ----------
    rad : float
        Irradiance used for the transpiration estimates (umol/m^2/s)
    iave : float
        Irradiance used for the leaf temperature (umol/m^2/s)
    air_temp : float
        Air temperature (C)
    rh : float
        Relative humidity, [0, 1]
    wind_speed : float
        Wind speed (m/s)
    canopy_height : float
        Canopy height (m)
    stomatal_conductance : float
        Stomatal conductance (mmol/m^2/s)
    leaf_width : float
        Leaf width (m)
    et_equation : int
        Reported transpiration: ET_DIFFUSION, ET_PENMAN or ET_PRIESTLEY_TAYLOR

    Returns
    -------
    trans : float
        Reported transpiration (mmol/m^2/s)
    penman : float
        Penman transpiration (mmol/m^2/s)
    priestley : float
        Priestley-Taylor transpiration (mmol/m^2/s)
    delta_t : float
        Leaf minus air temperature (C)
    layer_cond : float
        Stomatal conductance after flooring (mmol/m^2/s)
    iterations : int
    converged : bool
    status : int
        STATUS_OK or STATUS_RADIATION_TOO_HIGH
    """
    sigma = 5.67037e-8
    wind_speed_height = 2.0

    if canopy_height < MIN_CANOPY_HEIGHT:
        canopy_height = MIN_CANOPY_HEIGHT

    # Raise the measurement height when the canopy would reach it
    if canopy_height + 1.0 > wind_speed_height:
        wind_speed_height = canopy_height + wind_speed_height

    rho = dry_air_density(air_temp)
    lhv = latent_heat_vaporization(air_temp) * 1e6
    slope = saturation_slope(air_temp) * 1e-3
    swvp = saturation_vapor_pressure(air_temp)
    # Saturated water vapor density (kg/m^3)
    swvc = (rho * 0.622 * swvp) / ATMOSPHERIC_PRESSURE_HPA

    psyc = (rho * SPECIFIC_HEAT) / lhv
    deficit = swvc * (1.0 - rh)
    actual_vapor_pressure = rh * swvp

    nan = math.nan
    if rad * PAR_TO_WATTS > MAX_LEAF_RADIATION:
        return nan, nan, nan, nan, nan, 0, False, STATUS_RADIATION_TOO_HIGH

    ja = _absorbed_radiation(rad)
    ja2 = _absorbed_radiation(iave)

    if wind_speed < MIN_WIND_SPEED:
        wind_speed = MIN_WIND_SPEED

    gvs = stomatal_conductance / MMOL_PER_M_PER_S
    if gvs <= 0.001:
        gvs = 0.001

    delta_t = INITIAL_DELTA_T
    change = 10.0
    rlc = 0.0
    ga = 0.0
    iterations = 0
    while change > DELTA_T_TOLERANCE and iterations < MAX_ITERATIONS:
        old_delta_t = delta_t

        # First-order Taylor expansion of sigma (Ta + dT)^4 - sigma Ta^4
        rlc = 4.0 * sigma * (273.0 + air_temp) ** 3 * delta_t

        ga = leaf_boundary_layer(wind_speed, leaf_width, air_temp, delta_t, gvs, actual_vapor_pressure)

        phi_n2 = ja2 - rlc
        top = phi_n2 * (1.0 / ga + 1.0 / gvs) - lhv * deficit
        bottom = lhv * (slope + psyc * (1.0 + ga / gvs))
        delta_t = top / bottom
        if delta_t > 10.0:
            delta_t = 10.0
        if delta_t < -10.0:
            delta_t = -10.0

        change = abs(old_delta_t - delta_t)
        iterations += 1

    converged = change <= DELTA_T_TOLERANCE

    phi_n = ja - rlc
    if phi_n < 0.0:
        phi_n = 0.0

    trans = (slope * phi_n + (lhv * psyc * ga * deficit)) / (lhv * (slope + psyc * (1.0 + ga / gvs)))
    penman = ((slope * phi_n) + lhv * psyc * ga * deficit) / (lhv * (slope + psyc))
    priestley = PRIESTLEY_TAYLOR_ALPHA * ((slope * phi_n) / (lhv * (slope + psyc)))

    if et_equation == ET_PENMAN:
        trans = penman
    elif et_equation == ET_PRIESTLEY_TAYLOR:
        trans = priestley

    return (
        trans * KG_TO_MMOL_WATER,
        penman * KG_TO_MMOL_WATER,
        priestley * KG_TO_MMOL_WATER,
        delta_t,
        gvs * MMOL_PER_M_PER_S,
        iterations,
        converged,
        STATUS_OK,
    )
