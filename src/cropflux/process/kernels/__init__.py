"""
Physics kernels for CROPFLUX canopy and soil biophysics.

Design Rules:
1. Functions take numpy arrays or scalars as input
2. Functions return numpy arrays, scalars or tuples as output
3. No file I/O, no `self`, no exceptions; invalid derived quantities are
   reported as status codes
4. The soil water content array in water_balance.soil_ml is the only
   input a kernel may mutate
5. All physical constraints documented in docstrings
6. Numba JIT compiled with cache=True for performance
"""

from cropflux.process.kernels import (
    boundary_layer,
    energy_balance,
    evaporation,
    light,
    photosynthesis,
    root_distribution,
    solar,
    stress,
    thermo,
    water_balance,
)

__all__ = [
    "thermo",
    "solar",
    "light",
    "photosynthesis",
    "boundary_layer",
    "energy_balance",
    "evaporation",
    "stress",
    "root_distribution",
    "water_balance",
]
