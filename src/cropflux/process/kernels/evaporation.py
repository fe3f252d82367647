"""Soil surface evaporation.

Penman-type evaporation from the exposed soil fraction, reduced by the
Campbell and Norman (1998, p. 142) dimensionless uptake rate so that dry
soils evaporate little water.
"""

from __future__ import annotations

import math

from numba import njit

from cropflux.process.kernels.thermo import (
    dry_air_density,
    latent_heat_vaporization,
    saturation_slope,
    saturation_vapor_pressure,
)
from cropflux.units import MMOL_S_TO_MG_HA_HR

__all__ = ["soil_evaporation"]

SOIL_CLOD_SIZE = 0.04  # m
SOIL_REFLECTANCE = 0.2
SOIL_TRANSMISSION = 0.01
SPECIFIC_HEAT = 1010.0
STEFAN_BOLTZMANN = 5.67e-8


@njit(cache=True)
def soil_evaporation(
    lai: float,
    k: float,
    air_temp: float,
    irradiance: float,
    water_content: float,
    field_capacity: float,
    wilting_point: float,
    wind_speed: float,
    rh: float,
    rsec: float,
) -> float:
    """
    Hourly evaporation from the soil surface.

    SoilArea = exp(-k LAI)
    rawc     = (theta - wp) / (fc - wp)
    Up       = 1 - (1 + 1.3 rawc)^-5
    E        = (s PhiN + lambda gamma gb D) / (lambda (s + gamma))

    Soil temperature is taken equal to air temperature and the long-wave
    term uses a fixed 0.005 K soil-air difference.

    Physical constraints:
        - 0 <= rawc (dry soil does not evaporate)
        - PhiN > 0 (floored at 1e-7)
        - E >= 0 (negative results replaced by 1e-6)

    Parameters
    ----------
    lai : float
        Leaf area index shading the soil
    k : float
        Canopy extinction coefficient
    air_temp : float
        Air temperature (C)
    irradiance : float
        Above-canopy irradiance (umol/m^2/s)
    water_content : float
        Volumetric water content of the surface layer
    field_capacity, wilting_point : float
        Volumetric bounds of plant-available water
    wind_speed : float
        Wind speed (m/s); non-positive values disable the boundary-layer term
    rh : float
        Relative humidity, [0, 1]
    rsec : float
        Fraction of irradiance reaching the soil

    Returns
    -------
    float
        Soil evaporation (Mg/ha/hr)
    """
    soil_area = math.exp(-k * lai)
    soil_temp = air_temp

    rawc = (water_content - wilting_point) / (field_capacity - wilting_point)
    if rawc < 0.0:
        rawc = 0.0
    uptake = 1.0 - (1.0 + 1.3 * rawc) ** -5.0

    total_radiation = irradiance * rsec * 0.235

    rho = dry_air_density(air_temp)
    lhv = latent_heat_vaporization(air_temp) * 1e6
    slope = saturation_slope(air_temp) * 1e-3
    swvc = saturation_vapor_pressure(air_temp) * 1e-3

    psyc = (rho * SPECIFIC_HEAT) / lhv
    deficit = swvc * (1.0 - rh)

    if wind_speed > 0.0:
        bl_thickness = 4e-3 * math.sqrt(SOIL_CLOD_SIZE / wind_speed)
        diff_coef = 2.126e-5 * 1.48e-7 * soil_temp
        soil_boundary_layer = diff_coef / bl_thickness
    else:
        soil_boundary_layer = 0.0

    ja = 2.0 * total_radiation * ((1.0 - SOIL_REFLECTANCE - SOIL_TRANSMISSION) / (1.0 - SOIL_TRANSMISSION))
    rlc = 4.0 * STEFAN_BOLTZMANN * (273.0 + soil_temp) ** 3 * 0.005

    phi_n = ja - rlc
    if phi_n < 0.0:
        phi_n = 1e-7

    evaporation = (slope * phi_n + lhv * psyc * soil_boundary_layer * deficit) / (lhv * (slope + psyc))

    # kg/m^2/s -> mmol/m^2/s, then exposed area, drying and hourly Mg/ha
    evaporation *= 1e6 / 18.0
    evaporation *= soil_area * uptake * MMOL_S_TO_MG_HA_HR
    if evaporation < 0.0:
        evaporation = 1e-6

    return evaporation
