"""C3 leaf photosynthesis coupled to Ball-Berry stomatal conductance.

Pure physics kernels for the Farquhar-type biochemical model (Rubisco,
electron-transport and triose-phosphate-utilization limits) iterated
jointly with stomatal conductance until the net assimilation estimate is
self-consistent.

Temperature responses follow Bernacchi et al. (2001), "Improved temperature
response functions for models of Rubisco-limited photosynthesis".
"""

from __future__ import annotations

import math

from numba import njit

from cropflux.process.kernels.thermo import saturation_vapor_pressure
from cropflux.units import ATMOSPHERIC_PRESSURE, ZERO_CELSIUS

__all__ = [
    "arrhenius_exponent",
    "o2_solubility",
    "co2_solubility",
    "ball_berry",
    "c3_photosynthesis",
    "RUBISCO_LIMITED",
    "LIGHT_LIMITED",
    "TPU_LIMITED",
]

GAS_CONSTANT = 8.314472  # J/K/mol
LEAF_REFLECTANCE = 0.2
MAXIMUM_TPU_RATE = 23e-6  # mol/m^2/s

GS_FLOOR = 1e-5  # mmol/m^2/s
GS_CEILING = 800.0  # mmol/m^2/s
CI_FLOOR = 1e-5  # Pa
CA_FLOOR = 1e-4  # umol/mol
MAX_ITERATIONS = 50
ASSIMILATION_TOLERANCE = 1e-8  # mol/m^2/s

# Boundary-layer conductance to water used by Ball-Berry (Collatz et al. 1992)
GBW = 1.2  # mol/m^2/s

# Limiting-rate codes, in tie-break precedence order
RUBISCO_LIMITED = 0
LIGHT_LIMITED = 1
TPU_LIMITED = 2


@njit(cache=True)
def arrhenius_exponent(c: float, activation_energy: float, temp_k: float) -> float:
    """
    Exponential term of the Arrhenius function, exp(c - Ea / (R T)).

    Parameters
    ----------
    c : float
        Scaling constant (dimensionless)
    activation_energy : float
        Activation energy (J/mol)
    temp_k : float
        Temperature (K)

    Returns
    -------
    float
        Dimensionless exponential term
    """
    return math.exp(c - activation_energy / (GAS_CONSTANT * temp_k))


@njit(cache=True)
def o2_solubility(leaf_temp: float) -> float:
    """Solubility of O2 relative to 25 C; 1 between 24 and 26 C."""
    if 24.0 < leaf_temp < 26.0:
        return 1.0
    return (0.047 - 0.0013087 * leaf_temp + 2.5603e-05 * leaf_temp ** 2
            - 2.1441e-07 * leaf_temp ** 3) / 0.026934


@njit(cache=True)
def co2_solubility(leaf_temp: float) -> float:
    """Solubility of CO2 relative to 25 C; 1 between 24 and 26 C."""
    if 24.0 < leaf_temp < 26.0:
        return 1.0
    return (1.673998 - 0.0612936 * leaf_temp + 0.00116875 * leaf_temp ** 2
            - 8.874081e-06 * leaf_temp ** 3) / 0.735465


@njit(cache=True)
def ball_berry(
    assimilation: float,
    co2: float,
    rh: float,
    b0: float,
    b1: float,
) -> float:
    """
    Ball-Berry stomatal conductance to water vapor.

    gs = b1 * A * hs / Cs + b0   for A > 0
    gs = b0                      otherwise

    The leaf-surface humidity hs is solved from the coupling of stomatal and
    boundary-layer conductances (leaf and air at 25 C), giving
    a hs^2 + b hs + c = 0 with a = b1 A/Cs, b = b0 + gbw - a,
    c = -(RH gbw + b0); the larger root is taken.

    Parameters
    ----------
    assimilation : float
        Net assimilation (mol/m^2/s)
    co2 : float
        Atmospheric CO2 (mol/mol)
    rh : float
        Relative humidity, [0, 1]
    b0 : float
        Intercept (mol/m^2/s)
    b1 : float
        Slope (dimensionless)

    Returns
    -------
    float
        Stomatal conductance (mmol/m^2/s)
    """
    leaf_vapor_pressure = saturation_vapor_pressure(25.0)
    air_vapor_pressure = rh * saturation_vapor_pressure(25.0)

    if assimilation > 0.0:
        cs = co2 - (1.4 / GBW) * assimilation
        if cs <= 0.0:
            cs = 1.0
        acs = assimilation / cs
        aaa = b1 * acs
        bbb = b0 + GBW - aaa
        ccc = -(air_vapor_pressure / leaf_vapor_pressure * GBW) - b0
        if aaa == 0.0:
            hs = -ccc / bbb
        else:
            hs = (-bbb + math.sqrt(bbb * bbb - 4.0 * aaa * ccc)) / (2.0 * aaa)
        gs = b1 * acs * hs + b0
    else:
        gs = b0

    return gs * 1000.0


@njit(cache=True)
def c3_photosynthesis(
    qp: float,
    leaf_temp: float,
    rh: float,
    vcmax0: float,
    jmax0: float,
    rd0: float,
    b0: float,
    b1: float,
    ca: float,
    o2: float,
    theta0: float,
    stress: float,
    stress_approach: int,
    electrons_per_carboxylation: float,
    electrons_per_oxygenation: float,
) -> tuple[float, float, float, float, int, bool, int]:
    """
    Coupled C3 photosynthesis and stomatal conductance.

    Each iteration, from the current intercellular CO2 Ci:
        Ac = Vcmax (Ci - G*) / (Ci + Kc (1 + O/Ko))
        Aj = J (Ci - G*) / (ec Ci + 2 eo G*),  floored at 0
        Ap = 3 TPU / (1 - G*/Ci),              0 when Ci <= G*
        A  = min(Ac, Aj, Ap) - Rd
        Gs = BallBerry(A, Ca, RH)  clamped to [1e-5, 800] mmol/m^2/s
        Ci = Ca - 1.6 A P / Gs,                floored at 1e-5 Pa

    Physical constraints:
        - 1e-5 <= Gs <= 800 (mmol/m^2/s)
        - Ci > 0
        - Stops after 50 iterations or when |A - A_prev| < 1e-8 mol/m^2/s

    Parameters
    ----------
    qp : float
        Absorbed photon flux (umol/m^2/s)
    leaf_temp : float
        Leaf temperature (C)
    rh : float
        Relative humidity, [0, 1]
    vcmax0, jmax0, rd0 : float
        Capacities at 25 C (umol/m^2/s)
    b0, b1 : float
        Ball-Berry intercept (mol/m^2/s) and slope
    ca : float
        Atmospheric CO2 (umol/mol); values <= 0 are clamped to 1e-4
    o2 : float
        Atmospheric O2 (mmol/mol)
    theta0 : float
        Curvature of the light response at 0 C
    stress : float
        Water-stress scalar, [0, 1]
    stress_approach : int
        0 scales net assimilation, 1 scales stomatal conductance
    electrons_per_carboxylation, electrons_per_oxygenation : float
        Electron requirements of the light-limited rate

    Returns
    -------
    assim : float
        Net assimilation (umol/m^2/s)
    gross_assim : float
        Gross assimilation, assim + Rd (umol/m^2/s)
    gs : float
        Stomatal conductance (mmol/m^2/s)
    ci : float
        Intercellular CO2 (umol/mol)
    iterations : int
        Iterations performed
    converged : bool
        False when the iteration cap was reached
    limiting : int
        RUBISCO_LIMITED, LIGHT_LIMITED or TPU_LIMITED for the final estimate

    Notes
    -----
    Ties between limiting rates resolve in the order Rubisco, light, TPU.
    Under stress_approach 1 the conductance is scaled after the clamp and the
    floor is applied again, so Gs never leaves [1e-5, 800].
    """
    temp_k = leaf_temp + ZERO_CELSIUS

    rd_base = rd0 * 1e-6
    vcmax_base = vcmax0 * 1e-6
    jmax = jmax0 * 1e-6
    qp_mol = qp * 1e-6
    o2_frac = o2 * 1e-3

    kc = 1e-6 * arrhenius_exponent(38.05, 79.43e3, temp_k)
    ko = 1e-3 * arrhenius_exponent(20.30, 36.38e3, temp_k)
    gstar = 1e-6 * arrhenius_exponent(19.02, 37.83e3, temp_k)
    vcmax = vcmax_base * arrhenius_exponent(26.35, 65.33e3, temp_k)
    rd = rd_base * arrhenius_exponent(18.72, 46.39e3, temp_k)

    theta = theta0 + 0.018 * leaf_temp - 3.7e-4 * leaf_temp ** 2

    # Light limited
    feii = 0.352 + 0.022 * leaf_temp - 3.4 * leaf_temp ** 2 / 10000.0
    i2 = qp_mol * feii * (1.0 - LEAF_REFLECTANCE) / 2.0
    j = (jmax + i2 - math.sqrt((jmax + i2) ** 2 - 4.0 * theta * i2 * jmax)) / (2.0 * theta)

    oi = o2_frac * o2_solubility(leaf_temp)

    if ca <= 0.0:
        ca = CA_FLOOR
    ca_pa = ca * 1e-6 * ATMOSPHERIC_PRESSURE

    ci_pa = 0.0
    assim = 0.0
    gs = 0.0
    limiting = RUBISCO_LIMITED
    converged = False
    iterations = 0

    while iterations < MAX_ITERATIONS:
        old_assim = assim

        ci = ci_pa / ATMOSPHERIC_PRESSURE

        # Rubisco limited
        ac = vcmax * (ci - gstar) / (ci + kc * (1.0 + oi / ko))

        # Electron transport limited
        aj = j * (ci - gstar) / (electrons_per_carboxylation * ci + 2.0 * electrons_per_oxygenation * gstar)
        if aj < 0.0:
            aj = 0.0

        # Triose phosphate utilization limited
        if ci > gstar:
            ap = 3.0 * MAXIMUM_TPU_RATE / (1.0 - gstar / ci)
        else:
            ap = 0.0

        if ac <= aj and ac <= ap:
            vc = ac
            limiting = RUBISCO_LIMITED
        elif aj <= ap:
            vc = aj
            limiting = LIGHT_LIMITED
        else:
            vc = ap
            limiting = TPU_LIMITED

        assim = vc - rd

        if stress_approach == 0:
            assim *= stress

        gs = ball_berry(assim, ca * 1e-6, rh, b0, b1)

        if gs < GS_FLOOR:
            gs = GS_FLOOR
        elif gs > GS_CEILING:
            gs = GS_CEILING

        if stress_approach == 1:
            gs *= stress
            if gs < GS_FLOOR:
                gs = GS_FLOOR

        # Gs in mmol -> mol/m^2/s for the diffusion relation
        ci_pa = ca_pa - assim * 1.6 * ATMOSPHERIC_PRESSURE / (gs * 1e-3)
        if ci_pa < CI_FLOOR:
            ci_pa = CI_FLOOR

        iterations += 1

        if abs(old_assim - assim) < ASSIMILATION_TOLERANCE:
            converged = True
            break

    ci_out = ci_pa / ATMOSPHERIC_PRESSURE * 1e6
    return assim * 1e6, (assim + rd) * 1e6, gs, ci_out, iterations, converged, limiting
