"""Single-hour canopy and soil composition.

One call advances one hour: solar geometry, canopy light profile,
per-layer micro-environment, sunlit and shaded leaf gas exchange coupled
to the leaf energy balance, canopy totals, and the layered soil water
update driven by the canopy transpiration demand. Time stepping across
hours belongs to the caller.
"""

from __future__ import annotations

import numpy as np
import pandas as pd

from cropflux.config import ModelParameters
from cropflux.logging import get_logger
from cropflux.process.canopy import (
    c3_photosynthesis,
    canopy_light_profile,
    evapo_trans2,
    leaf_nitrogen_profile,
    light_macro_environment,
    relative_humidity_profile,
    wind_profile,
)
from cropflux.process.soil import soil_water_multilayer
from cropflux.process.state import CanopyHourResult, SoilLayerState
from cropflux.units import MMOL_S_TO_MG_HA_HR, UMOL_CO2_S_TO_MG_CH2O_HA_HR

__all__ = ["step_hour"]

logger = get_logger("step")

_LAYER_COLUMNS = [
    "sunlit_assimilation",
    "shaded_assimilation",
    "sunlit_conductance",
    "shaded_conductance",
    "sunlit_transpiration",
    "shaded_transpiration",
    "sunlit_delta_t",
    "shaded_delta_t",
    "wind_speed",
    "relative_humidity",
    "leaf_nitrogen",
]


def step_hour(
    latitude: float,
    day_of_year: int,
    hour: int,
    solar: float,
    air_temp: float,
    rh: float,
    wind_speed: float,
    precipitation: float,
    lai: float,
    soil_state: SoilLayerState | None = None,
    root_biomass: float = 0.0,
    params: ModelParameters | None = None,
    stress: float = 1.0,
    leaf_n: float = 2.0,
) -> CanopyHourResult:
    """Advance the canopy and soil by one hour.

    Parameters
    ----------
    latitude : float
        Degrees, north positive
    day_of_year : int
        1-366
    hour : int
        Local solar hour, 0-23
    solar : float
        Above-canopy irradiance (umol/m^2/s)
    air_temp : float
        Air temperature (C)
    rh : float
        Relative humidity, [0, 1]
    wind_speed : float
        Wind speed above the canopy (m/s)
    precipitation : float
        Precipitation (mm/hr)
    lai : float
        Leaf area index
    soil_state : SoilLayerState, optional
        Soil column; its water content is updated in place. Soil is skipped
        when omitted.
    root_biomass : float
        Root biomass (Mg/ha)
    params : ModelParameters, optional
        Defaults when omitted
    stress : float
        Water-stress scalar for photosynthesis, typically the previous
        hour's column coefficient
    leaf_n : float
        Leaf nitrogen at the top of the canopy

    Returns
    -------
    CanopyHourResult
        Canopy assimilation (Mg CH2O/ha/hr) and transpiration
        (Mg H2O/ha/hr); zeros at night.
    """
    p = params if params is not None else ModelParameters()
    canopy = p.canopy
    n_layers = canopy.n_layers

    sky = light_macro_environment(latitude, day_of_year, hour)
    cos_theta = sky.cosine_zenith_angle

    is_day = cos_theta > 0 and solar > 0 and lai > 0
    k = canopy.kd

    if is_day:
        profile = canopy_light_profile(
            solar * sky.direct_irradiance_fraction,
            solar * sky.diffuse_irradiance_fraction,
            lai,
            n_layers,
            min(cos_theta, 1.0),
            kd=canopy.kd,
            chil=canopy.chil,
            heightf=canopy.heightf,
        )
        k = profile.k
        layers = _canopy_layers(profile, lai, air_temp, rh, wind_speed, leaf_n, p, stress)
        lai_layer = lai / n_layers
        sun = profile.sunlit_fraction * lai_layer
        shade = profile.shaded_fraction * lai_layer

        assim = float(np.sum(sun * layers["sunlit_assimilation"] + shade * layers["shaded_assimilation"]))
        gross = float(np.sum(sun * layers["sunlit_gross"] + shade * layers["shaded_gross"]))
        trans = float(np.sum(sun * layers["sunlit_transpiration"] + shade * layers["shaded_transpiration"]))
        penman = float(np.sum(sun * layers["sunlit_penman"] + shade * layers["shaded_penman"]))
        priestley = float(np.sum(sun * layers["sunlit_priestley"] + shade * layers["shaded_priestley"]))
        conductance = float(np.sum(sun * layers["sunlit_conductance"] + shade * layers["shaded_conductance"]))

        frame = profile.to_frame()
        for column in _LAYER_COLUMNS:
            frame[column] = layers[column]
    else:
        assim = gross = trans = penman = priestley = conductance = 0.0
        frame = pd.DataFrame(columns=_LAYER_COLUMNS, index=pd.RangeIndex(0, name="layer"))

    transpiration = trans * MMOL_S_TO_MG_HA_HR

    soil = None
    if soil_state is not None:
        soil = soil_water_multilayer(
            precipitation,
            transpiration,
            soil_state,
            root_biomass=root_biomass,
            lai=lai,
            k=k,
            air_temp=air_temp,
            irradiance=max(solar, 0.0),
            wind_speed=wind_speed,
            rh=rh,
            params=p.soil,
        )

    logger.debug(
        "hour_complete",
        day_of_year=day_of_year,
        hour=hour,
        daylight=is_day,
        transpiration=transpiration,
    )

    return CanopyHourResult(
        assimilation=assim * UMOL_CO2_S_TO_MG_CH2O_HA_HR,
        gross_assimilation=gross * UMOL_CO2_S_TO_MG_CH2O_HA_HR,
        transpiration=transpiration,
        penman=penman * MMOL_S_TO_MG_HA_HR,
        priestley_taylor=priestley * MMOL_S_TO_MG_HA_HR,
        conductance=conductance,
        macro_environment=sky,
        soil=soil,
        layers=frame,
    )


def _canopy_layers(profile, lai, air_temp, rh, wind_speed, leaf_n, params, stress) -> dict:
    """Leaf gas exchange and energy balance for sunlit and shaded leaves of each layer."""
    canopy = params.canopy
    photo = params.photosynthesis
    n = profile.n_layers

    winds = wind_profile(wind_speed, lai, n)
    humidity = relative_humidity_profile(rh, n)
    nitrogen = leaf_nitrogen_profile(leaf_n, lai, n, canopy.kpln)

    out = {
        name: np.zeros(n, dtype=np.float64)
        for name in (
            "sunlit_assimilation", "shaded_assimilation",
            "sunlit_gross", "shaded_gross",
            "sunlit_conductance", "shaded_conductance",
            "sunlit_transpiration", "shaded_transpiration",
            "sunlit_penman", "shaded_penman",
            "sunlit_priestley", "shaded_priestley",
            "sunlit_delta_t", "shaded_delta_t",
        )
    }
    out["wind_speed"] = winds
    out["relative_humidity"] = humidity
    out["leaf_nitrogen"] = nitrogen

    for i in range(n):
        # Layer 0 is the top of the canopy
        for label, irradiance in (
            ("sunlit", profile.direct_irradiance[i]),
            ("shaded", profile.diffuse_irradiance[i]),
        ):
            # Conductance at air temperature feeds the energy balance;
            # assimilation is reported at leaf temperature
            first = c3_photosynthesis(irradiance, air_temp, humidity[i], photo, stress)
            energy = evapo_trans2(
                irradiance,
                profile.total_irradiance[i],
                air_temp,
                humidity[i],
                winds[i],
                profile.height[i],
                first.stomatal_conductance,
                leaf_width=canopy.leaf_width,
                et_equation=canopy.et_equation,
            )
            leaf = c3_photosynthesis(irradiance, air_temp + energy.delta_t, humidity[i], photo, stress)

            out[f"{label}_assimilation"][i] = leaf.net_assimilation
            out[f"{label}_gross"][i] = leaf.gross_assimilation
            out[f"{label}_conductance"][i] = leaf.stomatal_conductance
            out[f"{label}_transpiration"][i] = energy.transpiration
            out[f"{label}_penman"][i] = energy.penman
            out[f"{label}_priestley"][i] = energy.priestley_taylor
            out[f"{label}_delta_t"][i] = energy.delta_t

    return out
