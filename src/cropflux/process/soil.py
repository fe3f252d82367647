"""Validated soil-water solvers.

Wraps the single-bucket and layered soil water kernels: resolves texture
defaults, checks the soil profile, and packs results into dataclasses.
The layered solver updates ``SoilLayerState.water_content`` in place.
"""

from __future__ import annotations

import numpy as np

from cropflux.config import SoilParameters
from cropflux.errors import PhysicalRangeError, SoilProfileError
from cropflux.logging import soil_logger
from cropflux.process.kernels import water_balance
from cropflux.process.soil_texture import SoilTexture, SoilType, soil_texture
from cropflux.process.state import (
    SingleLayerWaterResult,
    SoilLayerState,
    SoilWaterResult,
    StressFunction,
    WaterStressCoefficients,
)

__all__ = [
    "resolve_water_bounds",
    "soil_water_single_layer",
    "soil_water_multilayer",
]


def resolve_water_bounds(
    texture: SoilTexture,
    field_capacity: float = -1.0,
    wilting_point: float = -1.0,
) -> tuple[float, float]:
    """Field capacity and wilting point, falling back to the texture values.

    Negative arguments select the texture defaults.

    Raises
    ------
    SoilProfileError
        Unless 0 < wilting point < field capacity <= saturation.
    """
    fc = texture.fieldc if field_capacity < 0 else float(field_capacity)
    wp = texture.wiltp if wilting_point < 0 else float(wilting_point)
    if not 0 < wp < fc:
        raise SoilProfileError(
            f"need 0 < wilting point < field capacity, got wp={wp}, fc={fc}"
        )
    if fc > texture.satur:
        raise SoilProfileError(
            f"field capacity {fc} exceeds saturation {texture.satur}"
        )
    return fc, wp


def _check_stress_shape(stress_function: StressFunction, phi1: float) -> None:
    if stress_function == StressFunction.LOGISTIC and not phi1 > 0:
        raise PhysicalRangeError(f"phi1 must be > 0 for the logistic stress form, got {phi1}")


def soil_water_single_layer(
    precipitation: float,
    demand: float,
    water_content: float,
    soil_depth: float,
    soil_type: SoilType | int | str = SoilType.LOAM,
    field_capacity: float = -1.0,
    wilting_point: float = -1.0,
    phi1: float = 0.01,
    phi2: float = 10.0,
    stress_function: StressFunction | int = StressFunction.LINEAR,
) -> SingleLayerWaterResult:
    """Update a single soil bucket for one time step.

    Parameters
    ----------
    precipitation : float
        Precipitation (mm), >= 0
    demand : float
        Evapotranspiration demand (Mg H2O/ha)
    water_content : float
        Current volumetric water content
    soil_depth : float
        Bucket depth (m), > 0
    soil_type : SoilType, int or str
        Texture class supplying saturation and hydraulic constants
    field_capacity, wilting_point : float
        Negative values select the texture defaults
    phi1, phi2 : float
        Stress function shape parameters
    stress_function : StressFunction
        Photosynthesis stress form

    Returns
    -------
    SingleLayerWaterResult
    """
    texture = soil_texture(soil_type)
    fc, wp = resolve_water_bounds(texture, field_capacity, wilting_point)
    form = StressFunction(stress_function)
    _check_stress_shape(form, phi1)
    if not soil_depth > 0:
        raise SoilProfileError(f"soil_depth must be > 0, got {soil_depth}")
    if not water_content >= 0:
        raise SoilProfileError(f"water_content must be >= 0, got {water_content}")
    if not precipitation >= 0:
        raise PhysicalRangeError(f"precipitation must be >= 0, got {precipitation}")

    awc, runoff, nleach, psim, photo, leaf = water_balance.watstr(
        float(precipitation), float(demand), float(water_content), float(soil_depth),
        fc, wp, float(phi1), float(phi2),
        texture.satur, texture.sand, texture.air_entry, texture.b, texture.ks,
        int(form),
    )
    return SingleLayerWaterResult(
        water_content=awc,
        runoff=runoff,
        nitrate_leaching=nleach,
        water_potential=psim,
        stress=WaterStressCoefficients(photosynthesis=photo, leaf_expansion=leaf),
    )


def soil_water_multilayer(
    precipitation: float,
    transpiration: float,
    state: SoilLayerState,
    root_biomass: float,
    lai: float,
    k: float,
    air_temp: float,
    irradiance: float,
    wind_speed: float,
    rh: float,
    params: SoilParameters | None = None,
) -> SoilWaterResult:
    """Update a layered soil column for one hour.

    ``state.water_content`` is modified in place and always ends within
    [wilting point, saturation]; the result carries a copy.

    Parameters
    ----------
    precipitation : float
        Precipitation (mm/hr), >= 0
    transpiration : float
        Canopy transpiration demand (Mg H2O/ha/hr)
    state : SoilLayerState
        Layer boundaries and caller-owned water content
    root_biomass : float
        Total root biomass (Mg/ha), >= 0
    lai, k : float
        Canopy leaf area index and extinction coefficient shading the soil
    air_temp : float
        Air temperature (C)
    irradiance : float
        Above-canopy irradiance (umol/m^2/s)
    wind_speed : float
        Wind speed (m/s)
    rh : float
        Relative humidity, [0, 1]
    params : SoilParameters, optional
        Texture, stress and root parameters; defaults when omitted

    Returns
    -------
    SoilWaterResult
    """
    p = params if params is not None else SoilParameters()
    texture = soil_texture(p.soil_type)
    fc, wp = resolve_water_bounds(texture, p.field_capacity, p.wilting_point)
    form = StressFunction(p.stress_function)
    _check_stress_shape(form, p.phi1)
    if not p.rfl > 0:
        raise PhysicalRangeError(f"rfl must be > 0, got {p.rfl}")
    if not root_biomass >= 0:
        raise PhysicalRangeError(f"root_biomass must be >= 0, got {root_biomass}")
    if not precipitation >= 0:
        raise PhysicalRangeError(f"precipitation must be >= 0, got {precipitation}")
    if not 0 <= rh <= 1:
        raise PhysicalRangeError(f"relative humidity must be in [0, 1], got {rh}")
    if state.water_content.shape != (state.n_layers,):
        raise SoilProfileError(
            f"water_content must have one value per layer ({state.n_layers}), "
            f"got shape {state.water_content.shape}"
        )

    (root_layers, fractions, hourly_flux, drainage, nleach,
     sevap, unmet, photo, leaf) = water_balance.soil_ml(
        float(precipitation), float(transpiration), state.water_content, state.depths,
        fc, wp, float(p.phi1), float(p.phi2),
        texture.satur, texture.sand, texture.air_entry, texture.b, texture.ks,
        int(form),
        float(root_biomass), float(lai), float(k), float(air_temp), float(irradiance),
        float(wind_speed), float(rh),
        bool(p.hydraulic_distribution), float(p.rfl), float(p.rsec), float(p.rsdf),
    )

    if unmet > 0:
        soil_logger.debug("demand_unmet", unmet_demand=unmet, n_layers=state.n_layers)

    return SoilWaterResult(
        water_content=np.array(state.water_content, copy=True),
        root_distribution=root_layers,
        root_fraction=fractions,
        hourly_flux=hourly_flux,
        drainage=drainage,
        nitrate_leaching=nleach,
        soil_evaporation=sevap,
        unmet_demand=unmet,
        stress=WaterStressCoefficients(photosynthesis=photo, leaf_expansion=leaf),
    )
