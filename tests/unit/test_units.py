"""Conversion factors shared between the units module and the kernels."""

from numpy.testing import assert_allclose

from cropflux import units
from cropflux.process.kernels import boundary_layer, energy_balance, evaporation, photosynthesis, water_balance


class TestConversionFactors:
    def test_hourly_water_factor(self):
        assert_allclose(units.MMOL_S_TO_MG_HA_HR, 0.648)
        assert_allclose(evaporation.MMOL_S_TO_MG_HA_HR, units.MMOL_S_TO_MG_HA_HR)

    def test_carbohydrate_factor(self):
        assert_allclose(units.UMOL_CO2_S_TO_MG_CH2O_HA_HR, 1.08e-3)

    def test_kernel_constants_match(self):
        assert energy_balance.PAR_TO_WATTS == units.PAR_TO_WATTS
        assert energy_balance.MMOL_PER_M_PER_S == units.MMOL_PER_M_PER_S
        assert energy_balance.KG_TO_MMOL_WATER == units.KG_TO_MMOL_WATER
        assert energy_balance.ATMOSPHERIC_PRESSURE_HPA * 100.0 == units.ATMOSPHERIC_PRESSURE
        assert water_balance.WATER_DENSITY == units.WATER_DENSITY
        assert water_balance.M2_PER_HA == units.M2_PER_HA
        assert water_balance.MM_TO_M == units.MM_TO_M
        assert photosynthesis.ATMOSPHERIC_PRESSURE == units.ATMOSPHERIC_PRESSURE
        assert photosynthesis.ZERO_CELSIUS == boundary_layer.ZERO_CELSIUS == units.ZERO_CELSIUS
        assert water_balance.STANDARD_GRAVITY == units.STANDARD_GRAVITY

    def test_canonical_units_documented(self):
        for name in ["irradiance", "stomatal_conductance", "water_content", "precipitation"]:
            assert name in units.PROCESS_CANONICAL_UNITS
        assert units.CONVERSIONS["leaf_conductance"].canonical_units == "m/s"
