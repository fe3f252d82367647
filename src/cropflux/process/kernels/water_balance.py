"""Soil water balance for a single bucket and a layered soil column.

Pure physics kernels. The multi-layer kernel updates the caller's water
content array in place; it is the only kernel in the package that mutates
an input.

Units:
    precipitation: mm/hr
    demand (transpiration, evaporation): Mg H2O/ha/hr
    water content: m^3/m^3
    depths: m
"""

from __future__ import annotations

import math

import numpy as np
from numba import njit
from numpy.typing import NDArray

from cropflux.process.kernels.evaporation import soil_evaporation
from cropflux.process.kernels.root_distribution import root_distribution
from cropflux.process.kernels.stress import water_stress
from cropflux.units import M2_PER_HA, MM_TO_M, STANDARD_GRAVITY, WATER_DENSITY

__all__ = ["watstr", "soil_ml"]


# Water potential references (Grant 1990), MPa
PSI_FIELD_CAPACITY = 0.033
PSI_WILTING_POINT = 1.5


@njit(cache=True)
def watstr(
    precipitation: float,
    demand: float,
    water_content: float,
    soil_depth: float,
    field_capacity: float,
    wilting_point: float,
    phi1: float,
    phi2: float,
    saturation: float,
    sand: float,
    air_entry: float,
    b: float,
    ks: float,
    stress_function: int,
) -> tuple[float, float, float, float, float, float]:
    """
    Single-bucket soil water update.

    aw    = P / depth + theta,  excess above saturation -> runoff
    theta = max(aw - wp - demand / (rho_w depth 1e4), 0) + wp
    psi   = -exp(ln 0.033 + (ln fc - ln theta) / (ln fc - ln wp) (ln 1.5 - ln 0.033)) 1e3
    if theta > fc:
        K = Ks (psi_e / psi)^(2 + 3/b)
        J = -K (-psi / (depth / 2)) - g K
        theta += J 3600 rho_w 1e-3 / depth

    Physical constraints:
        - wp <= theta <= saturation
        - runoff >= 0, psi < 0

    Parameters
    ----------
    precipitation : float
        Precipitation (mm)
    demand : float
        Evapotranspiration demand (Mg/ha)
    water_content : float
        Current volumetric water content
    soil_depth : float
        Bucket depth (m)
    field_capacity, wilting_point, saturation : float
        Volumetric water contents
    phi1, phi2 : float
        Stress function shape parameters
    sand, air_entry, b, ks : float
        Texture constants (fraction, kPa, -, kg s/m^3)
    stress_function : int
        Stress form code

    Returns
    -------
    water_content : float
    runoff : float
        Water above saturation (m)
    nitrate_leaching : float
    water_potential : float
        Soil water potential (kPa)
    photosynthesis_stress : float
    leaf_expansion_stress : float
    """
    runoff = 0.0
    nitrate_leaching = 0.0

    aw = (precipitation * MM_TO_M + water_content * soil_depth) / soil_depth

    if aw > saturation:
        runoff = (aw - saturation) * soil_depth
        nitrate_leaching = runoff / 18.0 * (0.2 + 0.7 * sand)
        aw = saturation

    pawha = (aw - wilting_point) * soil_depth * M2_PER_HA
    new_pawha = pawha - demand / WATER_DENSITY

    npaw = new_pawha / M2_PER_HA / soil_depth
    if npaw < 0.0:
        npaw = 0.0

    awc = npaw + wilting_point

    psim = -math.exp(
        math.log(PSI_FIELD_CAPACITY)
        + (math.log(field_capacity) - math.log(awc)) / (math.log(field_capacity) - math.log(wilting_point))
        * (math.log(PSI_WILTING_POINT) - math.log(PSI_FIELD_CAPACITY))
    ) * 1e3

    if awc > field_capacity:
        k_psim = ks * (air_entry / psim) ** (2.0 + 3.0 / b)
        j_w = -k_psim * (-psim / (soil_depth * 0.5)) - STANDARD_GRAVITY * k_psim
        drainage = j_w * 3600.0 * WATER_DENSITY * 1e-3
        awc = awc + drainage / soil_depth
        if awc < wilting_point:
            awc = wilting_point

    photo, leaf = water_stress(awc, field_capacity, wilting_point, phi1, phi2, stress_function)

    return awc, runoff, nitrate_leaching, psim, photo, leaf


@njit(cache=True)
def soil_ml(
    precipitation: float,
    transpiration: float,
    water_content: NDArray[np.float64],
    depths: NDArray[np.float64],
    field_capacity: float,
    wilting_point: float,
    phi1: float,
    phi2: float,
    saturation: float,
    sand: float,
    air_entry: float,
    b: float,
    ks: float,
    stress_function: int,
    root_biomass: float,
    lai: float,
    k: float,
    air_temp: float,
    irradiance: float,
    wind_speed: float,
    rh: float,
    hydraulic_distribution: bool,
    rfl: float,
    rsec: float,
    rsdf: float,
) -> tuple[
    NDArray[np.float64],
    NDArray[np.float64],
    NDArray[np.float64],
    float,
    float,
    float,
    float,
    float,
    float,
]:
    """
    Layered soil water update, deepest layer first.

    Per layer i (from n - 1 down to 0):
        1. optional redistribution with layer i - 1:
           psi = psi_e (theta / theta_s)^-b
           K   = Ks (psi_e / psi_i)^(2 + 3/b)
           J   = (K (psi_i - psi_{i-1}) / dz - g K) 3600 0.9882 1e-3
           J moves water between layers i and i - 1 (positive upward),
           limited so neither layer leaves [wp, theta_s]; downward J in
           the bottom layer drains out of that layer instead
        2. clamp theta to [wp, theta_s]
        3. add P / n plus overflow carried from the previous layer,
           holding the layer at field capacity
        4. withdraw transpiration * root_fraction (plus soil evaporation in
           the top layer) plus any demand the previous layer could not meet
        5. clamp theta to [wp, theta_s] and store it

    Physical constraints:
        - wp <= theta <= theta_s in every layer on return
        - water is conserved: storage change = infiltration - drainage
          - withdrawal + unmet demand, whenever theta starts in [wp, theta_s]
        - root fractions sum to 1
        - rooting depth <= soil depth

    Parameters
    ----------
    precipitation : float
        Precipitation (mm/hr)
    transpiration : float
        Canopy transpiration demand (Mg/ha/hr)
    water_content : (n_layers,)
        Volumetric water content; updated in place
    depths : (n_layers + 1,)
        Layer boundaries (m)
    field_capacity, wilting_point, saturation : float
        Volumetric water contents
    phi1, phi2 : float
        Stress function shape parameters
    sand, air_entry, b, ks : float
        Texture constants
    stress_function : int
        Stress form code
    root_biomass : float
        Total root biomass (Mg/ha)
    lai, k, air_temp, irradiance, wind_speed, rh : float
        Surface conditions for soil evaporation
    hydraulic_distribution : bool
        Enable redistribution between adjacent layers
    rfl, rsec, rsdf : float
        Root shape factor, soil radiation fraction, rooting depth per
        unit root biomass

    Returns
    -------
    root_biomass_layers : (n_layers,)
    root_fraction : (n_layers,)
    hourly_flux : (n_layers,)
        Redistribution flux per layer (m^3/m^2/hr)
    drainage : float
        Water leaving the bottom of the profile (m/hr)
    nitrate_leaching : float
    soil_evaporation : float
        Mg/ha/hr
    unmet_demand : float
        Demand the column could not supply (m^3/ha)
    photosynthesis_stress : float
        Column mean
    leaf_expansion_stress : float
        Column mean
    """
    n_layers = water_content.shape[0]
    soil_depth = depths[n_layers] - depths[0]

    root_depth = root_biomass * rsdf
    if root_depth > soil_depth:
        root_depth = soil_depth
    fractions = root_distribution(depths, root_depth, rfl)

    root_layers = np.zeros(n_layers, dtype=np.float64)
    hourly_flux = np.zeros(n_layers, dtype=np.float64)

    water_in = precipitation * MM_TO_M
    carried_water = 0.0
    carried_demand = 0.0
    drainage = 0.0
    sevap = 0.0
    photo_col = 0.0
    leaf_col = 0.0

    for i in range(n_layers - 1, -1, -1):
        thickness = depths[i + 1] - depths[i]

        j_w = 0.0
        # The top layer has no neighbour above; it only exchanges when it is also the bottom
        if hydraulic_distribution and (i > 0 or i == n_layers - 1):
            theta1 = max(water_content[i], wilting_point)
            psim1 = air_entry * (theta1 / saturation) ** -b
            if i > 0:
                theta2 = max(water_content[i - 1], wilting_point)
                psim2 = air_entry * (theta2 / saturation) ** -b
                dpsim = psim1 - psim2
            else:
                dpsim = 0.0
            k_psim = ks * (air_entry / psim1) ** (2.0 + 3.0 / b)
            j_w = k_psim * (dpsim / thickness) - STANDARD_GRAVITY * k_psim
            j_w *= 3600.0 * 0.9882 * 1e-3

            available = max(water_content[i] - wilting_point, 0.0) * thickness
            if i == n_layers - 1 and j_w < 0.0:
                # Downward flux leaves the profile from the bottom layer
                if -j_w > available:
                    j_w = -available
                water_content[i] += j_w / thickness
                drainage -= j_w
            elif i > 0:
                above = depths[i] - depths[i - 1]
                if j_w > 0.0:
                    limit = min(available, max(saturation - water_content[i - 1], 0.0) * above)
                    if j_w > limit:
                        j_w = limit
                else:
                    limit = min(
                        max(water_content[i - 1] - wilting_point, 0.0) * above,
                        max(saturation - water_content[i], 0.0) * thickness,
                    )
                    if -j_w > limit:
                        j_w = -limit
                water_content[i] -= j_w / thickness
                water_content[i - 1] += j_w / above
            else:
                j_w = 0.0
        hourly_flux[i] = j_w

        if water_content[i] > saturation:
            water_content[i] = saturation
        if water_content[i] < wilting_point:
            water_content[i] = wilting_point

        aw = water_content[i] * thickness

        if water_in > 0.0:
            aw += water_in / n_layers + carried_water
            diffw = field_capacity * thickness - aw
            if diffw < 0.0:
                carried_water = -diffw
                aw = field_capacity * thickness
            else:
                carried_water = 0.0

        root_layers[i] = root_biomass * fractions[i]

        pawha = (aw - wilting_point * thickness) * M2_PER_HA
        if pawha < 0.0:
            pawha = 0.0

        demand = transpiration * fractions[i]
        if i == 0:
            sevap = soil_evaporation(
                lai, k, air_temp, irradiance, aw / thickness,
                field_capacity, wilting_point, wind_speed, rh, rsec,
            )
            demand += sevap
        new_pawha = pawha - demand / WATER_DENSITY - carried_demand

        if new_pawha < 0.0:
            carried_demand = -new_pawha
            new_pawha = 0.0
        else:
            carried_demand = 0.0

        awc = new_pawha / M2_PER_HA / thickness + wilting_point
        if awc > saturation:
            awc = saturation
        water_content[i] = awc

        photo, leaf = water_stress(awc, field_capacity, wilting_point, phi1, phi2, stress_function)
        photo_col += photo
        leaf_col += leaf

    # Infiltration the column could not hold
    if water_in > 0.0:
        drainage += carried_water

    nitrate_leaching = 0.0
    if drainage > 0.0:
        nitrate_leaching = drainage * 0.1 * (30.0 / 24.0) / (18.0 * (0.2 + 0.7 * sand))

    return (
        root_layers,
        fractions,
        hourly_flux,
        drainage,
        nitrate_leaching,
        sevap,
        carried_demand,
        photo_col / n_layers,
        leaf_col / n_layers,
    )
