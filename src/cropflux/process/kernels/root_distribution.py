"""Vertical root distribution.

Root biomass is spread over the soil layers with a Poisson-shaped profile
whose mean grows with the number of layers reached by the roots.
"""

from __future__ import annotations

import math

import numpy as np
from numba import njit
from numpy.typing import NDArray

__all__ = ["poisson_log_pmf", "poisson_pmf", "root_distribution", "seq_root_depth"]


@njit(cache=True)
def poisson_log_pmf(x: int, mu: float) -> float:
    """Natural log of the Poisson probability mass P(X = x) for mean mu > 0."""
    return x * math.log(mu) - mu - math.lgamma(x + 1.0)


@njit(cache=True)
def poisson_pmf(x: int, mu: float) -> float:
    """Poisson probability mass P(X = x) for mean mu > 0."""
    return math.exp(poisson_log_pmf(x, mu))


@njit(cache=True)
def root_distribution(
    depths: NDArray[np.float64],
    root_depth: float,
    rfl: float,
) -> NDArray[np.float64]:
    """
    Fraction of root biomass in each soil layer.

    n_root = 1 + #{layers whose bottom lies above the rooting depth}
    w_j    = Poisson(j + 1; n_root * rfl)   for j < n_root, else 0
    f_j    = w_j / sum(w)

    Parameters
    ----------
    depths : (n_layers + 1,)
        Layer boundaries from the surface (m), strictly increasing
    root_depth : float
        Rooting depth (m)
    rfl : float
        Root distribution shape factor, > 0

    Returns
    -------
    fractions : (n_layers,)
        Root fraction per layer, summing to 1
    """
    n_layers = depths.shape[0] - 1

    n_root = 1
    for i in range(n_layers):
        if root_depth > depths[i + 1] - depths[0]:
            n_root += 1

    mu = n_root * rfl
    n_weights = min(n_root, n_layers)
    fractions = np.zeros(n_layers, dtype=np.float64)

    # Weights are scaled by the largest one so large means cannot underflow
    log_max = poisson_log_pmf(1, mu)
    for j in range(1, n_weights):
        log_w = poisson_log_pmf(j + 1, mu)
        if log_w > log_max:
            log_max = log_w

    total = 0.0
    for j in range(n_weights):
        w = math.exp(poisson_log_pmf(j + 1, mu) - log_max)
        fractions[j] = w
        total += w

    for j in range(n_weights):
        fractions[j] /= total

    return fractions


@njit(cache=True)
def seq_root_depth(to: float, n_layers: int) -> NDArray[np.float64]:
    """Uniform layer boundaries 0, to/n, ..., to (n_layers + 1 values)."""
    by = to / n_layers
    out = np.empty(n_layers + 1, dtype=np.float64)
    for i in range(n_layers + 1):
        out[i] = i * by
    return out
