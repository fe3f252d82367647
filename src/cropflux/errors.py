"""Domain errors raised by the CROPFLUX solvers.

Only two classes of problems surface as exceptions:

- precondition violations on solver inputs (layer count, zenith angle,
  irradiance, leaf area, soil profile geometry);
- physically invalid derived quantities that indicate corrupted upstream
  inputs (negative aerodynamic conductance, relative humidity above 100%,
  negative saturation vapor pressure, leaf radiation load above the model
  ceiling).

Everything else (non-convergence, out-of-range intermediates) is clamped
and reported through result fields, never raised.
"""

from __future__ import annotations

__all__ = [
    "DomainError",
    "LayerCountError",
    "ZenithAngleError",
    "IrradianceError",
    "LeafAreaError",
    "PhysicalRangeError",
    "SoilProfileError",
    "ConfigError",
]


class DomainError(ValueError):
    """Base class for out-of-domain solver inputs and derived quantities."""


class LayerCountError(DomainError):
    """Raised when a layer count falls outside [1, MAX_LAYERS]."""


class ZenithAngleError(DomainError):
    """Raised when cos(zenith) falls outside (0, 1]."""


class IrradianceError(DomainError):
    """Raised when direct or diffuse irradiance is not positive."""


class LeafAreaError(DomainError):
    """Raised when leaf area index is negative."""


class PhysicalRangeError(DomainError):
    """Raised when a derived physical quantity is out of its valid range."""


class SoilProfileError(DomainError):
    """Raised when soil depth boundaries, water content arrays or the soil type are invalid."""


class ConfigError(ValueError):
    """Raised when a parameter file is missing keys or has unknown ones."""
