"""Unit tests for process package physics kernels.

Tests verify:
1. Kernels compile correctly with numba
2. Physical constraints are enforced
3. Output shapes match the layer count
4. Edge cases are handled properly
"""

import math

import numpy as np
import pytest
from numpy.testing import assert_allclose, assert_array_almost_equal

from cropflux.process.kernels.boundary_layer import leaf_boundary_layer
from cropflux.process.kernels.energy_balance import (
    ET_PENMAN,
    ET_PRIESTLEY_TAYLOR,
    STATUS_NEGATIVE_GA,
    STATUS_OK,
    STATUS_RADIATION_TOO_HIGH,
    STATUS_RH_ABOVE_ONE,
    evapo_trans,
    evapo_trans2,
)
from cropflux.process.kernels.evaporation import soil_evaporation
from cropflux.process.kernels.light import (
    extinction_coefficient,
    relative_humidity_profile,
    sun_ml,
    wind_profile,
)
from cropflux.process.kernels.photosynthesis import (
    GS_CEILING,
    GS_FLOOR,
    LIGHT_LIMITED,
    MAX_ITERATIONS,
    ball_berry,
    c3_photosynthesis,
    co2_solubility,
    o2_solubility,
)
from cropflux.process.kernels.root_distribution import (
    poisson_log_pmf,
    poisson_pmf,
    root_distribution,
    seq_root_depth,
)
from cropflux.process.kernels.solar import cos_zenith_angle, irradiance_fractions
from cropflux.process.kernels.stress import (
    STRESS_EXPONENTIAL,
    STRESS_LINEAR,
    STRESS_LOGISTIC,
    STRESS_NONE,
    water_stress,
)
from cropflux.process.kernels.thermo import (
    dry_air_density,
    latent_heat_vaporization,
    saturation_vapor_pressure,
)
from cropflux.process.kernels.water_balance import watstr

# Default C3 parameter tuple: vcmax, jmax, rd, b0, b1, ca, o2, theta
C3_DEFAULTS = (100.0, 180.0, 1.1, 0.08, 5.0, 380.0, 210.0, 0.7)
ELECTRONS = (4.5, 10.5)

# Loam texture constants: satur, sand, air_entry, b, ks
LOAM = (0.57, 0.42, -1.1, 4.5, 3.7e-4)


def _c3(qp, leaf_temp=25.0, rh=0.7, stress=1.0, approach=0, params=C3_DEFAULTS):
    return c3_photosynthesis(qp, leaf_temp, rh, *params, stress, approach, *ELECTRONS)


class TestThermo:
    """Tests for thermodynamic property functions."""

    def test_saturation_vapor_pressure_at_20c(self):
        """Buck equation gives ~23.38 hPa at 20 C."""
        assert_allclose(saturation_vapor_pressure(20.0), 23.38, rtol=1e-3)

    def test_saturation_vapor_pressure_increases(self):
        temps = [0.0, 10.0, 20.0, 30.0, 40.0]
        values = [saturation_vapor_pressure(t) for t in temps]
        assert np.all(np.diff(values) > 0)

    def test_linear_fits(self):
        assert_allclose(dry_air_density(0.0), 1.295163636)
        assert_allclose(latent_heat_vaporization(0.0), 2.501)
        assert dry_air_density(30.0) < dry_air_density(0.0)


class TestSolarGeometry:
    """Tests for zenith angle and irradiance partitioning."""

    def test_summer_noon_mid_latitude(self):
        """Latitude 40, day 172, noon: sun high, direct beam dominates."""
        cos_theta = cos_zenith_angle(40.0, 172, 12)
        direct, diffuse = irradiance_fractions(cos_theta)

        # Zenith ~16.5 degrees at the solstice
        assert 0.95 < cos_theta <= 1.0
        assert direct > diffuse
        assert direct > 0.9

    def test_fractions_sum_to_one(self):
        for cos_theta in [0.05, 0.3, 0.7, 1.0]:
            direct, diffuse = irradiance_fractions(cos_theta)
            assert_allclose(direct + diffuse, 1.0)

    def test_night_all_diffuse(self):
        """Sun below the horizon gives (0, 1)."""
        cos_theta = cos_zenith_angle(40.0, 172, 0)
        assert cos_theta < 0

        direct, diffuse = irradiance_fractions(cos_theta)
        assert direct == 0.0
        assert diffuse == 1.0

    def test_symmetric_about_noon(self):
        assert_allclose(cos_zenith_angle(40.0, 100, 9), cos_zenith_angle(40.0, 100, 15))


class TestExtinctionCoefficient:
    """Tests for the ellipsoidal leaf angle extinction coefficient."""

    def test_overhead_sun_spherical_leaves(self):
        """cos(theta) = 1, chil = 1 matches the closed form."""
        expected = math.sqrt(1.0 + math.tan(0.0) ** 2) / (1.0 + 1.744 * (1.0 + 1.183) ** -0.733)
        assert_allclose(extinction_coefficient(1.0, 1.0), expected, rtol=1e-12)

    def test_always_positive(self):
        for chil in [0.5, 1.0, 3.0]:
            for cos_theta in [0.1, 0.5, 1.0]:
                assert extinction_coefficient(cos_theta, chil) > 0

    def test_increases_toward_horizon(self):
        assert extinction_coefficient(0.2, 1.0) > extinction_coefficient(0.9, 1.0)


class TestSunML:
    """Tests for the multi-layer sunlit/shaded light profile kernel."""

    @pytest.mark.parametrize("n_layers", [1, 2, 10, 50, 200])
    @pytest.mark.parametrize("cos_theta", [0.05, 0.3, 0.7, 1.0])
    @pytest.mark.parametrize("lai", [0.0, 0.5, 3.0, 8.0])
    def test_fractions_and_irradiance(self, n_layers, cos_theta, lai):
        """Sunlit + shaded = 1 and irradiance non-negative in every layer."""
        direct, diffuse, total, sunlit, shaded, height, k = sun_ml(
            1000.0, 200.0, lai, n_layers, cos_theta, 0.7, 1.0, 3.0
        )

        assert direct.shape == (n_layers,)
        assert_allclose(sunlit + shaded, np.ones(n_layers), atol=1e-12)
        assert np.all(sunlit >= 0) and np.all(shaded >= 0)
        assert np.all(total >= 0)
        assert np.all(direct >= 0)
        assert np.all(diffuse >= 0)
        assert np.all(direct >= diffuse)
        assert k > 0

    def test_zero_lai_fully_sunlit(self):
        direct, diffuse, total, sunlit, shaded, height, k = sun_ml(
            1000.0, 200.0, 0.0, 5, 0.9, 0.7, 1.0, 3.0
        )
        assert_array_almost_equal(sunlit, np.ones(5))
        assert_array_almost_equal(shaded, np.zeros(5))
        assert_array_almost_equal(total, np.zeros(5))

    def test_light_decreases_with_depth(self):
        direct, diffuse, total, sunlit, shaded, height, k = sun_ml(
            1000.0, 200.0, 4.0, 10, 0.8, 0.7, 1.0, 3.0
        )
        assert np.all(np.diff(diffuse) < 0)
        assert np.all(np.diff(sunlit) < 0)
        assert np.all(np.diff(height) < 0)

    def test_height_from_lai(self):
        """Mid-layer height is (LAI - cumulative LAI) / heightf."""
        *_, height, _ = sun_ml(1000.0, 200.0, 3.0, 3, 0.8, 0.7, 1.0, 3.0)
        assert_allclose(height, [(3.0 - 0.5) / 3.0, (3.0 - 1.5) / 3.0, (3.0 - 2.5) / 3.0])


class TestProfiles:
    """Tests for wind and humidity profiles."""

    def test_wind_top_layer_unchanged(self):
        wind = wind_profile(3.0, 4.0, 8)
        assert wind.shape == (8,)
        assert_allclose(wind[0], 3.0)
        assert np.all(np.diff(wind) < 0)

    def test_humidity_capped(self):
        rh = relative_humidity_profile(0.95, 20)
        assert np.all(rh <= 1.0)
        assert np.all(np.diff(rh) >= 0)

    def test_humidity_formula(self):
        rh = relative_humidity_profile(0.5, 4)
        expected = [0.5 * math.exp(0.5 * (i + 1) / 4) for i in range(4)]
        assert_allclose(rh, expected)


class TestSolubility:
    def test_unity_near_25c(self):
        assert o2_solubility(25.0) == 1.0
        assert co2_solubility(25.0) == 1.0

    def test_decreases_with_temperature(self):
        assert o2_solubility(35.0) < o2_solubility(15.0)
        assert co2_solubility(35.0) < co2_solubility(15.0)


class TestBallBerry:
    def test_intercept_when_no_assimilation(self):
        """Non-positive assimilation returns b0 in mmol."""
        assert ball_berry(0.0, 380e-6, 0.7, 0.08, 5.0) == pytest.approx(80.0)
        assert ball_berry(-1e-6, 380e-6, 0.7, 0.08, 5.0) == pytest.approx(80.0)

    def test_increases_with_assimilation(self):
        low = ball_berry(5e-6, 380e-6, 0.7, 0.08, 5.0)
        high = ball_berry(20e-6, 380e-6, 0.7, 0.08, 5.0)
        assert high > low > 80.0


class TestC3Photosynthesis:
    """Tests for the coupled photosynthesis / stomatal conductance kernel."""

    def test_idempotent(self):
        """Identical inputs give identical outputs."""
        first = _c3(1200.0, 27.0, 0.6)
        second = _c3(1200.0, 27.0, 0.6)
        assert first == second

    @pytest.mark.parametrize("qp", [0.0, 50.0, 500.0, 2000.0])
    @pytest.mark.parametrize("leaf_temp", [5.0, 25.0, 40.0])
    @pytest.mark.parametrize("approach", [0, 1])
    @pytest.mark.parametrize("stress", [0.0, 0.5, 1.0])
    def test_conductance_bounds_and_positive_ci(self, qp, leaf_temp, approach, stress):
        assim, gross, gs, ci, iterations, converged, limiting = _c3(
            qp, leaf_temp, 0.7, stress=stress, approach=approach
        )
        assert GS_FLOOR <= gs <= GS_CEILING
        assert ci > 0
        assert 1 <= iterations <= MAX_ITERATIONS
        assert limiting in (0, 1, 2)

    def test_gross_is_net_plus_respiration(self):
        assim, gross, *_ = _c3(1000.0)
        assert gross > assim

    def test_dark_leaf_respires(self):
        assim, gross, gs, ci, *_ = _c3(0.0)
        assert assim < 0
        assert gs == pytest.approx(80.0)

    def test_low_light_is_light_limited(self):
        *_, limiting = _c3(50.0)
        assert limiting == LIGHT_LIMITED

    def test_converges_for_typical_leaf(self):
        *_, iterations, converged, _ = _c3(1000.0)
        assert converged
        assert iterations < MAX_ITERATIONS

    def test_ceiling_applied(self):
        """A very steep stomatal slope is clamped at the ceiling."""
        params = (100.0, 180.0, 1.1, 0.08, 1000.0, 380.0, 210.0, 0.7)
        _, _, gs, ci, *_ = _c3(1500.0, params=params)
        assert gs <= GS_CEILING
        assert ci > 0

    def test_conductance_stress_floor(self):
        """Zero stress on conductance pins Gs at the floor and Ci stays positive."""
        _, _, gs, ci, *_ = _c3(1500.0, stress=0.0, approach=1)
        assert gs == GS_FLOOR
        assert ci > 0

    def test_non_positive_co2_clamped(self):
        params = (100.0, 180.0, 1.1, 0.08, 5.0, -10.0, 210.0, 0.7)
        assim, gross, gs, ci, *_ = _c3(1000.0, params=params)
        assert np.isfinite(assim)
        assert ci > 0

    def test_capacity_stress_reduces_assimilation(self):
        unstressed = _c3(1000.0)[0]
        stressed = _c3(1000.0, stress=0.5)[0]
        assert stressed < unstressed


class TestLeafBoundaryLayer:
    def test_positive_and_at_least_forced(self):
        g = leaf_boundary_layer(2.0, 0.04, 25.0, 1.0, 0.01, 20.0)
        tak = 298.15
        forced = 1.6361e-3 * tak ** 0.56 * ((tak + 120.0) * (2.0 / 0.04) / 101325.0) ** 0.5
        assert g > 0
        assert g >= forced - 1e-15

    def test_increases_with_wind(self):
        calm = leaf_boundary_layer(0.5, 0.04, 25.0, 0.5, 0.01, 20.0)
        windy = leaf_boundary_layer(5.0, 0.04, 25.0, 0.5, 0.01, 20.0)
        assert windy > calm


class TestEvapoTrans:
    """Tests for energy-balance variant 1 (conductance from the C3 solver)."""

    def _run(self, itot=1000.0, air_temp=25.0, rh=0.6, wind=2.0, height=1.0, stress=1.0):
        return evapo_trans(
            itot, air_temp, rh, wind, height, *C3_DEFAULTS, stress, 0, *ELECTRONS
        )

    @pytest.mark.parametrize("itot", [0.0, 300.0, 1500.0])
    @pytest.mark.parametrize("air_temp", [0.0, 20.0, 38.0])
    @pytest.mark.parametrize("rh", [0.1, 0.5, 0.95])
    @pytest.mark.parametrize("wind", [0.0, 1.0, 8.0])
    def test_iteration_cap_and_clamp(self, itot, air_temp, rh, wind):
        trans, penman, priestley, delta_t, cond, iterations, converged, status = self._run(
            itot, air_temp, rh, wind
        )
        assert status == STATUS_OK
        assert 1 <= iterations <= 10
        assert -5.0 <= delta_t <= 5.0
        assert priestley >= 0

    def test_relative_humidity_above_one(self):
        *_, status = self._run(rh=1.2)
        assert status == STATUS_RH_ABOVE_ONE

    def test_tall_canopy_invalid_aerodynamic_conductance(self):
        """Displacement height above the 5 m measurement height."""
        *_, status = self._run(height=10.0)
        assert status == STATUS_NEGATIVE_GA

    def test_layer_conductance_in_mmol(self):
        *_, cond, _, _, status = self._run()
        assert status == STATUS_OK
        gs = c3_photosynthesis(1000.0, 25.0, 0.6, *C3_DEFAULTS, 1.0, 0, *ELECTRONS)[2]
        assert_allclose(cond, gs, rtol=1e-12)


class TestEvapoTrans2:
    """Tests for energy-balance variant 2 (boundary layer each iteration)."""

    def _run(self, rad=800.0, iave=600.0, air_temp=25.0, rh=0.6, wind=2.0, height=1.0,
             gs=300.0, width=0.04, eq=0):
        return evapo_trans2(rad, iave, air_temp, rh, wind, height, gs, width, eq)

    @pytest.mark.parametrize("rad", [0.0, 400.0, 2000.0])
    @pytest.mark.parametrize("air_temp", [0.0, 25.0, 40.0])
    @pytest.mark.parametrize("gs", [0.0, 50.0, 800.0])
    @pytest.mark.parametrize("wind", [0.0, 3.0])
    def test_iteration_cap_and_clamp(self, rad, air_temp, gs, wind):
        trans, penman, priestley, delta_t, cond, iterations, converged, status = self._run(
            rad=rad, iave=rad, air_temp=air_temp, gs=gs, wind=wind
        )
        assert status == STATUS_OK
        assert 1 <= iterations <= 10
        assert -10.0 <= delta_t <= 10.0

    def test_conductance_floor(self):
        """Conductance below 0.001 m/s is raised to it."""
        *_, cond, _, _, _ = self._run(gs=0.0)
        assert_allclose(cond, 0.001 * 41000.0)

    def test_radiation_ceiling(self):
        *_, status = self._run(rad=3000.0)
        assert status == STATUS_RADIATION_TOO_HIGH

    def test_estimator_selection(self):
        diffusion = self._run(eq=0)
        penman = self._run(eq=ET_PENMAN)
        priestley = self._run(eq=ET_PRIESTLEY_TAYLOR)

        assert penman[0] == pytest.approx(penman[1])
        assert priestley[0] == pytest.approx(priestley[2])
        # Penman and Priestley-Taylor do not depend on the selector
        assert diffusion[1] == pytest.approx(penman[1])
        assert diffusion[2] == pytest.approx(priestley[2])


class TestSoilEvaporation:
    def test_positive_for_moist_soil(self):
        e = soil_evaporation(2.0, 0.5, 25.0, 1500.0, 0.25, 0.27, 0.12, 2.0, 0.5, 0.2)
        assert e > 0

    def test_dry_soil_does_not_evaporate(self):
        """At wilting point the uptake factor is zero."""
        e = soil_evaporation(2.0, 0.5, 25.0, 1500.0, 0.12, 0.27, 0.12, 2.0, 0.5, 0.2)
        assert e == 0.0

    def test_dense_canopy_reduces_evaporation(self):
        open_canopy = soil_evaporation(0.5, 0.5, 25.0, 1500.0, 0.25, 0.27, 0.12, 2.0, 0.5, 0.2)
        closed = soil_evaporation(6.0, 0.5, 25.0, 1500.0, 0.25, 0.27, 0.12, 2.0, 0.5, 0.2)
        assert closed < open_canopy

    def test_calm_air(self):
        e = soil_evaporation(2.0, 0.5, 25.0, 1500.0, 0.25, 0.27, 0.12, 0.0, 0.5, 0.2)
        assert np.isfinite(e)
        assert e >= 0


class TestWaterStress:
    """Tests for the four stress functional forms."""

    def test_linear_value(self):
        photo, leaf = water_stress(0.15, 0.27, 0.12, 0.01, 10.0, STRESS_LINEAR)
        assert_allclose(photo, 0.2, rtol=1e-9)
        assert_allclose(leaf, (0.15 / 0.27) ** 10, rtol=1e-9)

    def test_linear_below_wilting_point_floored(self):
        photo, _ = water_stress(0.10, 0.27, 0.12, 0.01, 10.0, STRESS_LINEAR)
        assert photo == 1e-10

    def test_logistic_midpoint(self):
        photo, _ = water_stress(0.195, 0.27, 0.12, 0.01, 10.0, STRESS_LOGISTIC)
        assert_allclose(photo, 0.5)

    def test_exponential_endpoints(self):
        at_fc, _ = water_stress(0.27, 0.27, 0.12, 0.01, 10.0, STRESS_EXPONENTIAL)
        at_wp, _ = water_stress(0.12, 0.27, 0.12, 0.01, 10.0, STRESS_EXPONENTIAL)
        assert_allclose(at_fc, 1.0)
        assert at_wp <= 1e-9

    def test_none(self):
        assert water_stress(0.05, 0.27, 0.12, 0.01, 10.0, STRESS_NONE) == (1.0, 1.0)

    @pytest.mark.parametrize("form", [STRESS_LINEAR, STRESS_LOGISTIC, STRESS_EXPONENTIAL, STRESS_NONE])
    def test_capped_at_one(self, form):
        photo, leaf = water_stress(0.5, 0.27, 0.12, 0.01, 10.0, form)
        assert 0 < photo <= 1
        assert 0 <= leaf <= 1


class TestRootDistribution:
    """Tests for the Poisson root distribution."""

    def test_poisson_pmf(self):
        assert_allclose(poisson_pmf(2, 1.5), 1.5 ** 2 * math.exp(-1.5) / 2.0)

    def test_poisson_log_pmf_large_mean(self):
        assert_allclose(poisson_log_pmf(1, 2000.0), math.log(2000.0) - 2000.0)
        assert_allclose(math.exp(poisson_log_pmf(3, 2.5)), poisson_pmf(3, 2.5))

    @pytest.mark.parametrize("root_depth", [0.0, 0.1, 0.3, 0.6, 0.99, 1.0])
    @pytest.mark.parametrize("n_layers", [1, 3, 10, 200])
    def test_fractions_sum_to_one(self, root_depth, n_layers):
        depths = seq_root_depth(1.0, n_layers)
        fractions = root_distribution(depths, root_depth, 0.2)
        assert fractions.shape == (n_layers,)
        assert np.all(fractions >= 0)
        assert_allclose(fractions.sum(), 1.0)

    def test_large_shape_factor_deep_profile(self):
        """Every Poisson weight is far below the mode; fractions stay finite."""
        fractions = root_distribution(seq_root_depth(1.0, 200), 1.0, 10.0)

        assert np.all(np.isfinite(fractions))
        assert np.all(fractions >= 0)
        assert_allclose(fractions.sum(), 1.0)
        assert np.argmax(fractions) == 199

    def test_roots_stop_below_rooting_depth(self):
        depths = np.array([0.0, 0.25, 0.5, 0.75, 1.0])
        fractions = root_distribution(depths, 0.6, 0.2)
        # Two layer bottoms above 0.6 m -> three rooted layers
        assert np.all(fractions[:3] > 0)
        assert fractions[3] == 0.0

    def test_shallow_roots_in_top_layer(self):
        depths = np.array([0.0, 0.25, 0.5, 0.75, 1.0])
        fractions = root_distribution(depths, 0.0, 0.2)
        assert_array_almost_equal(fractions, [1.0, 0.0, 0.0, 0.0])

    def test_seq_root_depth(self):
        assert_allclose(seq_root_depth(1.0, 4), [0.0, 0.25, 0.5, 0.75, 1.0])


class TestWatstr:
    """Tests for the single-bucket soil water kernel."""

    def _run(self, precip, demand, cws, depth=1.0, form=STRESS_LINEAR):
        return watstr(precip, demand, cws, depth, 0.27, 0.12, 0.01, 10.0, *LOAM, form)

    def test_runoff_above_saturation(self):
        awc, runoff, nleach, psim, photo, leaf = self._run(200.0, 0.0, 0.5)

        assert_allclose(runoff, 0.13, rtol=1e-9)
        assert nleach > 0
        # Drained from saturation but still above field capacity
        assert 0.27 < awc < 0.57
        assert psim < 0
        assert photo == 1.0
        assert leaf == 1.0

    def test_dry_soil_stress(self):
        awc, runoff, nleach, psim, photo, leaf = self._run(0.0, 0.0, 0.15)

        assert runoff == 0.0
        assert_allclose(awc, 0.15, rtol=1e-12)
        assert_allclose(photo, 0.2, rtol=1e-9)
        assert leaf < 0.01

    def test_wilting_point_potential(self):
        """Water potential is -1500 kPa at wilting point."""
        awc, _, _, psim, _, _ = self._run(0.0, 0.0, 0.12)
        assert_allclose(awc, 0.12)
        assert_allclose(psim, -1500.0, rtol=1e-9)

    def test_demand_never_below_wilting_point(self):
        awc, *_ = self._run(0.0, 1e6, 0.2)
        assert awc == pytest.approx(0.12)
