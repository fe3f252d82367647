"""Centralized unit documentation and conversion factors for CROPFLUX.

Lists the units the kernels expect, plus the conversion factors that the
photosynthesis, energy-balance and soil-water code share.

The leaf and soil models mix photon fluxes, molar gas fluxes, mass fluxes per
hectare and volumetric water contents. The solver wrappers import the named
constants below, and so do the kernels; numba reads them as compile-time
constants.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class UnitSpec:
    """Document a variable's units and conversion.

    Fields are documentation-first (strings), so this module stays dependency-
    free (no pint).
    """

    native_units: str
    canonical_units: str
    conversion: str
    notes: str = ""
    reference: str = ""


# -----------------------------------------------------------------------------
# Canonical units used by the process kernels
# -----------------------------------------------------------------------------

PROCESS_CANONICAL_UNITS: dict[str, str] = {
    # Atmosphere
    "air_temperature": "C",
    "relative_humidity": "fraction (0-1)",
    "wind_speed": "m/s",
    "co2": "umol/mol",
    "o2": "mmol/mol",
    # Radiation
    "irradiance": "umol/m^2/s (PAR photons)",
    # Leaf gas exchange
    "assimilation": "umol CO2/m^2/s",
    "stomatal_conductance": "mmol H2O/m^2/s",
    "intercellular_co2": "umol/mol",
    # Leaf energy balance
    "transpiration": "mmol H2O/m^2/s",
    "delta_t": "C (leaf - air)",
    # Soil
    "depth": "m",
    "water_content": "m^3/m^3",
    "precipitation": "mm/hr",
    "transpiration_demand": "Mg H2O/ha/hr",
    "soil_evaporation": "Mg H2O/ha/hr",
    "water_potential": "kPa",
    "hourly_flux": "m^3/m^2/hr",
    "root_biomass": "Mg/ha",
}


# -----------------------------------------------------------------------------
# Conversion factors
# -----------------------------------------------------------------------------

# 1 umol PAR photons ~ 0.235 J (WIMOVAC convention)
PAR_TO_WATTS = 0.235

# mmol H2O/m^2/s <-> m/s (1/41000 == 24.39e-6)
MMOL_PER_M_PER_S = 41000.0

# kg H2O/m^2/s -> mmol H2O/m^2/s
KG_TO_MMOL_WATER = 1e6 / 18.0

# mmol H2O/m^2/s -> Mg H2O/ha/hr  (3600 s, 1e-3 mol, 18 g, 1e-6 Mg, 1e4 m^2)
MMOL_S_TO_MG_HA_HR = 3600 * 1e-3 * 18 * 1e-6 * 10000

# umol CO2/m^2/s -> Mg CH2O/ha/hr  (3600 s, 1e-6 mol, 30 g CH2O, 1e-6 Mg, 1e4 m^2)
UMOL_CO2_S_TO_MG_CH2O_HA_HR = 3600 * 1e-6 * 30 * 1e-6 * 10000

# Density of water at 20 C (Mg/m^3); converts Mg/ha demand to m^3/ha
WATER_DENSITY = 0.9982

# m^2 per hectare
M2_PER_HA = 1e4

# mm -> m
MM_TO_M = 1e-3

# Standard atmosphere (Pa) and hPa equivalent
ATMOSPHERIC_PRESSURE = 101325.0
ATMOSPHERIC_PRESSURE_HPA = 1013.25

ZERO_CELSIUS = 273.15

STANDARD_GRAVITY = 9.8


CONVERSIONS: dict[str, UnitSpec] = {
    "irradiance": UnitSpec(
        native_units="umol/m^2/s",
        canonical_units="W/m^2",
        conversion="W = umol * 0.235",
        notes="Used for leaf and soil net radiation terms.",
    ),
    "leaf_conductance": UnitSpec(
        native_units="mmol/m^2/s",
        canonical_units="m/s",
        conversion="m/s = mmol / 41000",
        notes="Thornley and Johnson use m/s for the energy balance.",
    ),
    "transpiration": UnitSpec(
        native_units="kg/m^2/s",
        canonical_units="mmol/m^2/s",
        conversion="mmol = kg * 1e6 / 18",
    ),
    "soil_evaporation": UnitSpec(
        native_units="mmol/m^2/s",
        canonical_units="Mg/ha/hr",
        conversion="Mg/ha/hr = mmol * 0.648",
    ),
    "precipitation": UnitSpec(
        native_units="mm/hr",
        canonical_units="m/hr",
        conversion="m = mm * 1e-3",
    ),
}
