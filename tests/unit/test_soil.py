"""Unit tests for soil texture lookup and the soil-water solvers."""

import numpy as np
import pytest
from numpy.testing import assert_allclose

from cropflux.config import SoilParameters
from cropflux.errors import PhysicalRangeError, SoilProfileError
from cropflux.process.soil import (
    resolve_water_bounds,
    soil_water_multilayer,
    soil_water_single_layer,
)
from cropflux.process.soil_texture import SOIL_TEXTURES, SoilType, soil_texture
from cropflux.process.state import (
    SingleLayerWaterResult,
    SoilLayerState,
    SoilWaterResult,
    StressFunction,
)


class TestSoilTexture:
    def test_eleven_classes(self):
        assert len(SOIL_TEXTURES) == 11

    def test_lookup_by_name_code_and_enum(self):
        by_enum = soil_texture(SoilType.SILTY_CLAY_LOAM)
        assert soil_texture(7) == by_enum
        assert soil_texture("silty clay loam") == by_enum
        assert soil_texture("Silty-Clay-Loam") == by_enum

    def test_loam_values(self):
        loam = soil_texture("loam")
        assert loam.satur == 0.57
        assert loam.fieldc == 0.27
        assert loam.wiltp == 0.12
        assert loam.sand == 0.42

    def test_particle_fractions_sum_to_one(self):
        for soil_type, texture in SOIL_TEXTURES.items():
            assert_allclose(texture.silt + texture.clay + texture.sand, 1.0, err_msg=soil_type.name)

    def test_unknown(self):
        with pytest.raises(SoilProfileError, match="Unknown soil type"):
            soil_texture("peat")
        with pytest.raises(SoilProfileError, match="Unknown soil type code"):
            soil_texture(11)


class TestResolveWaterBounds:
    def test_defaults_from_texture(self):
        assert resolve_water_bounds(soil_texture("clay")) == (0.40, 0.27)

    def test_overrides(self):
        assert resolve_water_bounds(soil_texture("loam"), 0.3, 0.1) == (0.3, 0.1)

    def test_wilting_point_above_field_capacity(self):
        with pytest.raises(SoilProfileError):
            resolve_water_bounds(soil_texture("loam"), 0.1, 0.2)

    def test_field_capacity_above_saturation(self):
        with pytest.raises(SoilProfileError, match="exceeds saturation"):
            resolve_water_bounds(soil_texture("loam"), 0.6, 0.1)


class TestSingleLayer:
    """Tests for the single-bucket wrapper."""

    def test_runoff(self):
        result = soil_water_single_layer(200.0, 0.0, 0.5, 1.0)

        assert isinstance(result, SingleLayerWaterResult)
        assert_allclose(result.runoff, 0.13, rtol=1e-9)
        assert result.nitrate_leaching > 0
        assert 0.27 < result.water_content < 0.57
        assert result.stress.photosynthesis == 1.0
        assert result.stress.leaf_expansion == 1.0

    def test_linear_stress(self):
        result = soil_water_single_layer(0.0, 0.0, 0.15, 1.0)
        assert_allclose(result.stress.photosynthesis, 0.2, rtol=1e-9)
        assert result.runoff == 0.0

    def test_wilting_point_potential(self):
        result = soil_water_single_layer(0.0, 0.0, 0.12, 1.0)
        assert_allclose(result.water_potential, -1500.0, rtol=1e-9)

    def test_no_stress_function(self):
        result = soil_water_single_layer(0.0, 0.0, 0.13, 1.0, stress_function=StressFunction.NONE)
        assert result.stress.photosynthesis == 1.0
        assert result.stress.leaf_expansion == 1.0

    def test_logistic_requires_positive_phi1(self):
        with pytest.raises(PhysicalRangeError, match="phi1"):
            soil_water_single_layer(0.0, 0.0, 0.2, 1.0, phi1=0.0, stress_function=StressFunction.LOGISTIC)

    def test_invalid_depth(self):
        with pytest.raises(SoilProfileError):
            soil_water_single_layer(0.0, 0.0, 0.2, 0.0)

    def test_negative_precipitation(self):
        with pytest.raises(PhysicalRangeError):
            soil_water_single_layer(-1.0, 0.0, 0.2, 1.0)


class TestMultiLayer:
    """Tests for the layered wrapper."""

    def _run(self, state, params, precipitation=0.0, transpiration=0.5, root_biomass=1.0, **surface):
        conditions = dict(lai=3.0, k=0.5, air_temp=25.0, irradiance=1000.0, wind_speed=2.0, rh=0.5)
        conditions.update(surface)
        return soil_water_multilayer(
            precipitation, transpiration, state, root_biomass, params=params, **conditions
        )

    def test_updates_state_in_place(self, four_layer_state, loam_params):
        water = four_layer_state.water_content
        result = self._run(four_layer_state, loam_params)

        assert isinstance(result, SoilWaterResult)
        assert four_layer_state.water_content is water
        assert_allclose(result.water_content, water)
        assert result.water_content is not water
        # Only the rooted layers supply transpiration
        assert water[0] < 0.25
        assert water[1] < 0.25
        assert_allclose(water[2:], 0.25)

    def test_root_fractions(self, four_layer_state, loam_params):
        result = self._run(four_layer_state, loam_params, root_biomass=1.0)

        assert_allclose(result.root_fraction.sum(), 1.0)
        assert_allclose(result.root_distribution.sum(), 1.0)
        # Rooting depth 0.44 m reaches the second layer only
        assert result.root_fraction[2] == 0.0
        assert result.root_fraction[3] == 0.0

    def test_no_redistribution_flux_when_disabled(self, four_layer_state, loam_params):
        result = self._run(four_layer_state, loam_params)
        assert np.all(result.hourly_flux == 0.0)

    def test_soil_evaporation_reported(self, four_layer_state, loam_params):
        result = self._run(four_layer_state, loam_params, transpiration=0.0)
        assert result.soil_evaporation > 0
        assert result.unmet_demand == 0.0

    def test_to_frame(self, four_layer_state, loam_params):
        frame = self._run(four_layer_state, loam_params).to_frame()
        assert list(frame.columns) == ["water_content", "root_distribution", "root_fraction", "hourly_flux"]
        assert len(frame) == 4

    def test_stress_coefficients_in_range(self, four_layer_state, loam_params):
        result = self._run(four_layer_state, loam_params)
        assert 0 < result.stress.photosynthesis <= 1
        assert 0 <= result.stress.leaf_expansion <= 1

    def test_invalid_humidity(self, four_layer_state, loam_params):
        with pytest.raises(PhysicalRangeError, match="relative humidity"):
            self._run(four_layer_state, loam_params, rh=1.5)

    def test_invalid_rfl(self, four_layer_state):
        with pytest.raises(PhysicalRangeError, match="rfl"):
            self._run(four_layer_state, SoilParameters(rfl=0.0))

    def test_deep_profile_large_shape_factor(self):
        state = SoilLayerState.uniform(1.0, 200, initial=0.25)
        params = SoilParameters(field_capacity=0.27, wilting_point=0.12, rfl=10.0)
        result = self._run(state, params, root_biomass=10.0)

        assert_allclose(result.root_fraction.sum(), 1.0)
        assert np.all(np.isfinite(result.water_content))
        assert np.all(result.water_content >= 0.12)

    def test_negative_root_biomass(self, four_layer_state, loam_params):
        with pytest.raises(PhysicalRangeError, match="root_biomass"):
            self._run(four_layer_state, loam_params, root_biomass=-1.0)

    def test_replaced_water_content_shape(self, four_layer_state, loam_params):
        four_layer_state.water_content = np.full(3, 0.2)
        with pytest.raises(SoilProfileError):
            self._run(four_layer_state, loam_params)

    def test_default_parameters(self):
        state = SoilLayerState.uniform(1.0, 5, initial=0.25)
        result = soil_water_multilayer(0.0, 0.1, state, 0.5, 2.0, 0.5, 20.0, 800.0, 1.0, 0.6)
        assert result.water_content.shape == (5,)
