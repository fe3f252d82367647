"""Solar geometry and sky irradiance partitioning.

Pure physics kernels for the cosine of the solar zenith angle and the split
of above-canopy irradiance into direct and diffuse fractions (Campbell and
Norman, An Introduction to Environmental Biophysics, ch. 11).
"""

from __future__ import annotations

import math

from numba import njit

__all__ = ["cos_zenith_angle", "irradiance_fractions"]

RADIANS_PER_DEGREE = math.pi / 180.0
SOLAR_NOON = 12
AXIAL_TILT = 23.5 * RADIANS_PER_DEGREE
RADIANS_PER_HOUR = 15.0 * RADIANS_PER_DEGREE

ATMOSPHERIC_TRANSMITTANCE = 0.85
SCATTERED_PROPORTION = 0.3


@njit(cache=True)
def cos_zenith_angle(latitude: float, day_of_year: int, hour: int) -> float:
    """
    Cosine of the solar zenith angle.

    delta = -tilt * cos(2 pi (doy + 10) / 365)
    tau   = (hour - 12) * 15 deg
    cos(theta) = sin(delta) sin(phi) + cos(delta) cos(phi) cos(tau)

    Physical constraints:
        - -1 <= cos(theta) <= 1
        - cos(theta) <= 0 when the sun is at or below the horizon

    Parameters
    ----------
    latitude : float
        Latitude (degrees, north positive)
    day_of_year : int
        Day of year (1-366)
    hour : int
        Local solar hour (0-23)

    Returns
    -------
    float
        Cosine of the zenith angle (dimensionless)

    Notes
    -----
    The declination uses delta = -tilt cos(omega), an approximation accurate
    to within 0.26 degrees of sin(delta) = -sin(tilt) cos(omega). The day
    count is shifted by 10 to measure the orbit from the December solstice.
    """
    phi = latitude * RADIANS_PER_DEGREE
    nds = day_of_year + 10
    omega = 360.0 * (nds / 365.0) * RADIANS_PER_DEGREE
    delta = -AXIAL_TILT * math.cos(omega)
    tau = (hour - SOLAR_NOON) * RADIANS_PER_HOUR
    return math.sin(delta) * math.sin(phi) + math.cos(delta) * math.cos(phi) * math.cos(tau)


@njit(cache=True)
def irradiance_fractions(cos_theta: float) -> tuple[float, float]:
    """
    Partition irradiance into direct and diffuse fractions.

    tau_dir  = 0.85 ** (1 / cos(theta))
    tau_diff = 0.3 * (1 - tau_dir) * cos(theta)

    Physical constraints:
        - direct + diffuse = 1
        - direct = 0, diffuse = 1 when the sun is at or below the horizon

    Parameters
    ----------
    cos_theta : float
        Cosine of the zenith angle

    Returns
    -------
    direct : float
        Fraction of irradiance that is direct beam
    diffuse : float
        Fraction of irradiance that is diffuse

    References
    ----------
    Campbell and Norman (1998), Eq. 11.11 and 11.13 (sea-level pressure).
    """
    if cos_theta <= 0.0:
        direct = 0.0
        diffuse = 1.0
    else:
        direct = ATMOSPHERIC_TRANSMITTANCE ** (1.0 / cos_theta)
        diffuse = SCATTERED_PROPORTION * (1.0 - direct) * cos_theta

    total = direct + diffuse
    return direct / total, diffuse / total
