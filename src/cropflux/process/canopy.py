"""Validated canopy and leaf solvers.

Thin Python wrappers around the numba kernels: they check preconditions,
raise :mod:`cropflux.errors` exceptions for out-of-domain inputs or
derived quantities, log solver diagnostics, and pack kernel tuples into
the dataclasses of :mod:`cropflux.process.state`.
"""

from __future__ import annotations

import numpy as np

from cropflux.config import PhotosynthesisParameters
from cropflux.errors import (
    IrradianceError,
    LayerCountError,
    LeafAreaError,
    PhysicalRangeError,
    ZenithAngleError,
)
from cropflux.logging import canopy_logger
from cropflux.process.kernels import boundary_layer, energy_balance, light, photosynthesis, solar
from cropflux.process.state import (
    MAX_LAYERS,
    ETEquation,
    LeafEnergyBalanceResult,
    LeafGasExchangeResult,
    LightMacroEnvironment,
    LightProfile,
    LimitingRate,
    WaterStressApproach,
)

__all__ = [
    "light_macro_environment",
    "canopy_light_profile",
    "wind_profile",
    "relative_humidity_profile",
    "leaf_nitrogen_profile",
    "c3_photosynthesis",
    "evapo_trans",
    "evapo_trans2",
    "leaf_boundary_layer",
]

_STATUS_MESSAGES = {
    energy_balance.STATUS_NEGATIVE_GA: "aerodynamic conductance must be > 0",
    energy_balance.STATUS_RH_ABOVE_ONE: "relative humidity must be <= 1",
    energy_balance.STATUS_NEGATIVE_SWVC: "saturated water vapor content must be >= 0",
    energy_balance.STATUS_RADIATION_TOO_HIGH: "absorbed leaf radiation must be <= 650 W/m^2",
}


def _check_layers(n_layers: int) -> int:
    if not 1 <= n_layers <= MAX_LAYERS:
        raise LayerCountError(f"n_layers must be in [1, {MAX_LAYERS}], got {n_layers}")
    return int(n_layers)


def _check_status(status: int, **context) -> None:
    if status != energy_balance.STATUS_OK:
        details = ", ".join(f"{k}={v}" for k, v in context.items())
        raise PhysicalRangeError(f"{_STATUS_MESSAGES[status]} ({details})")


def _c3_arguments(params: PhotosynthesisParameters | None):
    """Kernel arguments from a parameter set, coerced to the kernel's types."""
    p = params if params is not None else PhotosynthesisParameters()
    biochemistry = tuple(
        float(v) for v in (p.vcmax, p.jmax, p.rd, p.b0, p.b1, p.co2, p.o2, p.theta)
    )
    approach = int(WaterStressApproach(p.water_stress_approach))
    electrons = (float(p.electrons_per_carboxylation), float(p.electrons_per_oxygenation))
    return biochemistry, approach, electrons


def light_macro_environment(latitude: float, day_of_year: int, hour: int) -> LightMacroEnvironment:
    """Solar zenith angle and direct/diffuse split for one hour.

    Parameters
    ----------
    latitude : float
        Degrees, north positive
    day_of_year : int
        1-366
    hour : int
        Local solar hour, 0-23
    """
    cos_theta = solar.cos_zenith_angle(float(latitude), int(day_of_year), int(hour))
    direct, diffuse = solar.irradiance_fractions(cos_theta)
    return LightMacroEnvironment(
        cosine_zenith_angle=cos_theta,
        direct_irradiance_fraction=direct,
        diffuse_irradiance_fraction=diffuse,
    )


def canopy_light_profile(
    i_dir: float,
    i_diff: float,
    lai: float,
    n_layers: int,
    cos_theta: float,
    kd: float = 0.7,
    chil: float = 1.0,
    heightf: float = 3.0,
) -> LightProfile:
    """Per-layer sunlit/shaded irradiance for the canopy.

    Parameters
    ----------
    i_dir, i_diff : float
        Direct and diffuse irradiance above the canopy (umol/m^2/s), > 0
    lai : float
        Leaf area index, >= 0
    n_layers : int
        Number of canopy layers, 1 to MAX_LAYERS
    cos_theta : float
        Cosine of the solar zenith angle, (0, 1]
    kd : float
        Diffuse extinction coefficient
    chil : float
        Leaf angle distribution parameter
    heightf : float
        Leaf area per metre of canopy height

    Returns
    -------
    LightProfile

    Raises
    ------
    IrradianceError, LeafAreaError, LayerCountError, ZenithAngleError
        When an input lies outside its bound.
    PhysicalRangeError
        When chil is negative or the leaf angle distribution gives a zero
        extinction coefficient.
    """
    if not i_dir > 0:
        raise IrradianceError(f"direct irradiance must be > 0, got {i_dir}")
    if not i_diff > 0:
        raise IrradianceError(f"diffuse irradiance must be > 0, got {i_diff}")
    if not lai >= 0:
        raise LeafAreaError(f"LAI must be >= 0, got {lai}")
    n_layers = _check_layers(n_layers)
    if not 0 < cos_theta <= 1:
        raise ZenithAngleError(f"cos_theta must be in (0, 1], got {cos_theta}")
    if not heightf > 0:
        raise LeafAreaError(f"heightf must be > 0, got {heightf}")
    if not chil >= 0:
        raise PhysicalRangeError(f"chil must be >= 0, got {chil}")
    if light.extinction_coefficient(float(cos_theta), float(chil)) <= 0:
        raise PhysicalRangeError(
            f"extinction coefficient must be > 0 (cos_theta={cos_theta}, chil={chil})"
        )

    direct, diffuse, total, sunlit, shaded, height, k = light.sun_ml(
        float(i_dir), float(i_diff), float(lai), n_layers,
        float(cos_theta), float(kd), float(chil), float(heightf),
    )
    return LightProfile(
        n_layers=n_layers,
        direct_irradiance=direct,
        diffuse_irradiance=diffuse,
        total_irradiance=total,
        sunlit_fraction=sunlit,
        shaded_fraction=shaded,
        height=height,
        k=k,
    )


def wind_profile(wind_speed: float, lai: float, n_layers: int) -> np.ndarray:
    """Wind speed per canopy layer (m/s)."""
    return light.wind_profile(float(wind_speed), float(lai), _check_layers(n_layers))


def relative_humidity_profile(rh: float, n_layers: int) -> np.ndarray:
    """Relative humidity per canopy layer, capped at 1."""
    return light.relative_humidity_profile(float(rh), _check_layers(n_layers))


def leaf_nitrogen_profile(leaf_n: float, lai: float, n_layers: int, kpln: float = 0.2) -> np.ndarray:
    """Leaf nitrogen per canopy layer."""
    return light.leaf_nitrogen_profile(float(leaf_n), float(lai), _check_layers(n_layers), float(kpln))


def c3_photosynthesis(
    qp: float,
    leaf_temp: float,
    rh: float,
    params: PhotosynthesisParameters | None = None,
    stress: float = 1.0,
) -> LeafGasExchangeResult:
    """Coupled C3 photosynthesis and Ball-Berry stomatal conductance for one leaf.

    Hitting the iteration cap is not an error: the last estimate is returned
    with ``converged=False`` and the event is logged at DEBUG.

    Parameters
    ----------
    qp : float
        Absorbed photon flux (umol/m^2/s)
    leaf_temp : float
        Leaf temperature (C)
    rh : float
        Relative humidity, [0, 1]
    params : PhotosynthesisParameters, optional
        Biochemical and stomatal parameters; defaults when omitted
    stress : float
        Water-stress scalar in [0, 1]
    """
    biochemistry, approach, electrons = _c3_arguments(params)
    assim, gross, gs, ci, iterations, converged, limiting = photosynthesis.c3_photosynthesis(
        float(qp), float(leaf_temp), float(rh),
        *biochemistry, float(stress), approach, *electrons,
    )
    if not converged:
        canopy_logger.debug(
            "iteration_cap_reached",
            solver="c3_photosynthesis",
            iterations=iterations,
            qp=qp,
            leaf_temp=leaf_temp,
        )
    return LeafGasExchangeResult(
        net_assimilation=assim,
        gross_assimilation=gross,
        stomatal_conductance=gs,
        intercellular_co2=ci,
        iterations=iterations,
        converged=converged,
        limiting_rate=LimitingRate(limiting),
    )


def _energy_balance_result(raw, solver: str) -> LeafEnergyBalanceResult:
    trans, penman, priestley, delta_t, cond, iterations, converged, _ = raw
    if not converged:
        canopy_logger.debug("iteration_cap_reached", solver=solver, iterations=iterations, delta_t=delta_t)
    return LeafEnergyBalanceResult(
        transpiration=trans,
        penman=penman,
        priestley_taylor=priestley,
        delta_t=delta_t,
        layer_conductance=cond,
        iterations=iterations,
        converged=converged,
    )


def evapo_trans(
    itot: float,
    air_temp: float,
    rh: float,
    wind_speed: float,
    canopy_height: float,
    params: PhotosynthesisParameters | None = None,
    stress: float = 1.0,
) -> LeafEnergyBalanceResult:
    """Leaf energy balance with conductance from the C3 solver.

    Aerodynamic conductance comes from a neutral log wind profile measured
    at 5 m and is held fixed while the leaf temperature offset iterates
    (clamped to +/-5 C).

    Raises
    ------
    PhysicalRangeError
        When relative humidity exceeds 1, the saturated vapor content is
        negative or the aerodynamic conductance is not positive.
    """
    biochemistry, approach, electrons = _c3_arguments(params)
    raw = energy_balance.evapo_trans(
        float(itot), float(air_temp), float(rh), float(wind_speed), float(canopy_height),
        *biochemistry, float(stress), approach, *electrons,
    )
    _check_status(raw[-1], rh=rh, air_temp=air_temp, canopy_height=canopy_height)
    return _energy_balance_result(raw, "evapo_trans")


def evapo_trans2(
    rad: float,
    iave: float,
    air_temp: float,
    rh: float,
    wind_speed: float,
    canopy_height: float,
    stomatal_conductance: float,
    leaf_width: float = 0.04,
    et_equation: ETEquation | int = ETEquation.DIFFUSION,
) -> LeafEnergyBalanceResult:
    """Leaf energy balance with the boundary layer recomputed each iteration.

    Parameters
    ----------
    rad : float
        Irradiance for the transpiration estimates (umol/m^2/s)
    iave : float
        Irradiance for the leaf temperature (umol/m^2/s)
    air_temp : float
        Air temperature (C)
    rh : float
        Relative humidity, [0, 1]
    wind_speed : float
        m/s
    canopy_height : float
        m
    stomatal_conductance : float
        mmol/m^2/s
    leaf_width : float
        m
    et_equation : ETEquation
        Estimator reported as ``transpiration``

    Raises
    ------
    PhysicalRangeError
        When the absorbed radiation exceeds 650 W/m^2.
    """
    if not leaf_width > 0:
        raise PhysicalRangeError(f"leaf_width must be > 0, got {leaf_width}")
    equation = ETEquation(et_equation)
    raw = energy_balance.evapo_trans2(
        float(rad), float(iave), float(air_temp), float(rh), float(wind_speed),
        float(canopy_height), float(stomatal_conductance), float(leaf_width), int(equation),
    )
    _check_status(raw[-1], rad=rad)
    return _energy_balance_result(raw, "evapo_trans2")


def leaf_boundary_layer(
    wind_speed: float,
    leaf_width: float,
    air_temp: float,
    delta_t: float,
    stomatal_conductance: float,
    vapor_pressure: float,
) -> float:
    """Leaf boundary-layer conductance to water vapor (m/s).

    ``stomatal_conductance`` in m/s and ``vapor_pressure`` in hPa.
    """
    if not leaf_width > 0:
        raise PhysicalRangeError(f"leaf_width must be > 0, got {leaf_width}")
    if not wind_speed > 0:
        raise PhysicalRangeError(f"wind_speed must be > 0, got {wind_speed}")
    if not stomatal_conductance >= 0:
        raise PhysicalRangeError(f"stomatal_conductance must be >= 0, got {stomatal_conductance}")
    return boundary_layer.leaf_boundary_layer(
        float(wind_speed), float(leaf_width), float(air_temp), float(delta_t),
        float(stomatal_conductance), float(vapor_pressure),
    )
