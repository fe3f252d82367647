"""Water-stress coefficients from soil water content.

Four selectable forms reduce photosynthetic capacity; leaf expansion uses a
steeper power law, (theta / fc)^phi2, since water stress reduces leaf
expansion first.
"""

from __future__ import annotations

import math

from numba import njit

__all__ = [
    "water_stress",
    "STRESS_LINEAR",
    "STRESS_LOGISTIC",
    "STRESS_EXPONENTIAL",
    "STRESS_NONE",
]

STRESS_LINEAR = 0
STRESS_LOGISTIC = 1
STRESS_EXPONENTIAL = 2
STRESS_NONE = 3

PHOTO_FLOOR = 1e-10


@njit(cache=True)
def water_stress(
    water_content: float,
    field_capacity: float,
    wilting_point: float,
    phi1: float,
    phi2: float,
    stress_function: int,
) -> tuple[float, float]:
    """
    Photosynthesis and leaf-expansion stress coefficients.

    LINEAR:       ws = (theta - wp) / (fc - wp)
    LOGISTIC:     ws = 1 / (1 + exp(((fc + wp) / 2 - theta) / phi1))
    EXPONENTIAL:  t = theta (1 - wp) / (fc - wp) + 1 - fc (1 - wp) / (fc - wp)
                  ws = (1 - exp(-2.5 (t - wp) / (1 - wp))) / (1 - exp(-2.5))
    NONE:         ws = 1

    Physical constraints:
        - 1e-10 <= photosynthesis coefficient <= 1
        - 0 <= leaf-expansion coefficient <= 1

    Parameters
    ----------
    water_content : float
        Volumetric water content
    field_capacity, wilting_point : float
        Volumetric bounds, fc > wp
    phi1 : float
        Logistic spread
    phi2 : float
        Leaf-expansion exponent
    stress_function : int
        One of the STRESS_* codes; evaluated in the order listed

    Returns
    -------
    photosynthesis : float
    leaf_expansion : float
    """
    if stress_function == STRESS_LINEAR:
        slope = 1.0 / (field_capacity - wilting_point)
        intercept = 1.0 - field_capacity * slope
        photo = slope * water_content + intercept
    elif stress_function == STRESS_LOGISTIC:
        phi10 = (field_capacity + wilting_point) / 2.0
        photo = 1.0 / (1.0 + math.exp((phi10 - water_content) / phi1))
    elif stress_function == STRESS_EXPONENTIAL:
        slope = (1.0 - wilting_point) / (field_capacity - wilting_point)
        intercept = 1.0 - field_capacity * slope
        theta = slope * water_content + intercept
        photo = (1.0 - math.exp(-2.5 * (theta - wilting_point) / (1.0 - wilting_point))) / (1.0 - math.exp(-2.5))
    else:
        photo = 1.0

    if photo <= 0.0:
        photo = PHOTO_FLOOR
    if photo > 1.0:
        photo = 1.0

    if stress_function == STRESS_NONE:
        leaf = 1.0
    else:
        leaf = (water_content / field_capacity) ** phi2
        if leaf > 1.0:
            leaf = 1.0

    return photo, leaf
