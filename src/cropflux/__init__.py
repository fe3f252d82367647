"""
CROPFLUX: canopy and soil water/carbon exchange core.

Single-time-step biophysics for a layered plant canopy and a layered soil
column. Couples canopy light interception, C3 leaf photosynthesis with
Ball-Berry stomatal control, leaf energy balance, soil evaporation, and a
multi-layer soil water balance that returns water-stress coefficients.

Subpackages:
    process: Physics kernels, result containers, and validated solvers.

Modules:
    config: TOML parameter loading.
    errors: Domain error taxonomy.
    logging: Structured component loggers.
    units: Canonical units and conversion factors.

Example:
    >>> from cropflux.process import canopy_light_profile, light_macro_environment
    >>> sky = light_macro_environment(latitude=40.0, day_of_year=172, hour=12)
    >>> profile = canopy_light_profile(
    ...     1500.0 * sky.direct_irradiance_fraction,
    ...     1500.0 * sky.diffuse_irradiance_fraction,
    ...     lai=3.0, n_layers=10, cos_theta=sky.cosine_zenith_angle,
    ... )
"""

__version__ = "0.1.0"
