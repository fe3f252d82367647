"""
CROPFLUX Process Package

Single-time-step canopy and soil biophysics with:
- Pure physics kernels (numba JIT)
- Typed result containers
- Validated solver wrappers raising domain errors
- Structured logging of solver diagnostics
"""

from cropflux.process import kernels
from cropflux.process.canopy import (
    c3_photosynthesis,
    canopy_light_profile,
    evapo_trans,
    evapo_trans2,
    leaf_boundary_layer,
    leaf_nitrogen_profile,
    light_macro_environment,
    relative_humidity_profile,
    wind_profile,
)
from cropflux.process.soil import (
    resolve_water_bounds,
    soil_water_multilayer,
    soil_water_single_layer,
)
from cropflux.process.soil_texture import SoilTexture, SoilType, soil_texture
from cropflux.process.state import (
    MAX_LAYERS,
    CanopyHourResult,
    ETEquation,
    LeafEnergyBalanceResult,
    LeafGasExchangeResult,
    LightMacroEnvironment,
    LightProfile,
    LimitingRate,
    SingleLayerWaterResult,
    SoilLayerState,
    SoilWaterResult,
    StressFunction,
    WaterStressApproach,
    WaterStressCoefficients,
)
from cropflux.process.step import step_hour

__all__ = [
    "kernels",
    "MAX_LAYERS",
    "light_macro_environment",
    "canopy_light_profile",
    "wind_profile",
    "relative_humidity_profile",
    "leaf_nitrogen_profile",
    "c3_photosynthesis",
    "leaf_boundary_layer",
    "evapo_trans",
    "evapo_trans2",
    "resolve_water_bounds",
    "soil_water_single_layer",
    "soil_water_multilayer",
    "step_hour",
    "SoilType",
    "SoilTexture",
    "soil_texture",
    "LimitingRate",
    "WaterStressApproach",
    "ETEquation",
    "StressFunction",
    "LightProfile",
    "LightMacroEnvironment",
    "LeafGasExchangeResult",
    "LeafEnergyBalanceResult",
    "SoilLayerState",
    "WaterStressCoefficients",
    "SingleLayerWaterResult",
    "SoilWaterResult",
    "CanopyHourResult",
]
