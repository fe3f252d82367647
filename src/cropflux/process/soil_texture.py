"""Soil hydraulic properties by texture class.

Values from Campbell and Norman (1998), Table 9.1, extended with saturation,
field capacity, wilting point and bulk density.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum

from cropflux.errors import SoilProfileError

__all__ = ["SoilType", "SoilTexture", "SOIL_TEXTURES", "soil_texture"]


class SoilType(IntEnum):
    SAND = 0
    LOAMY_SAND = 1
    SANDY_LOAM = 2
    LOAM = 3
    SILT_LOAM = 4
    SANDY_CLAY_LOAM = 5
    CLAY_LOAM = 6
    SILTY_CLAY_LOAM = 7
    SANDY_CLAY = 8
    SILTY_CLAY = 9
    CLAY = 10


@dataclass(frozen=True)
class SoilTexture:
    """Static texture constants for one soil class.

    Attributes
    ----------
    silt, clay, sand : float
        Particle size fractions
    air_entry : float
        Air entry potential (kPa)
    b : float
        Campbell retention exponent
    ks : float
        Saturated hydraulic conductivity (kg s/m^3)
    satur, fieldc, wiltp : float
        Volumetric water content at saturation, field capacity and
        permanent wilting point
    bulkd : float
        Bulk density (Mg/m^3)
    """

    silt: float
    clay: float
    sand: float
    air_entry: float
    b: float
    ks: float
    satur: float
    fieldc: float
    wiltp: float
    bulkd: float


SOIL_TEXTURES: dict[SoilType, SoilTexture] = {
    SoilType.SAND: SoilTexture(0.05, 0.03, 0.92, -0.7, 1.7, 5.8e-3, 0.87, 0.09, 0.03, 0.01),
    SoilType.LOAMY_SAND: SoilTexture(0.12, 0.07, 0.81, -0.9, 2.1, 1.7e-3, 0.72, 0.13, 0.06, 1.55),
    SoilType.SANDY_LOAM: SoilTexture(0.25, 0.10, 0.65, -1.5, 3.1, 7.2e-4, 0.57, 0.21, 0.10, 1.50),
    SoilType.LOAM: SoilTexture(0.40, 0.18, 0.42, -1.1, 4.5, 3.7e-4, 0.57, 0.27, 0.12, 1.43),
    SoilType.SILT_LOAM: SoilTexture(0.65, 0.15, 0.20, -2.1, 4.7, 1.9e-4, 0.59, 0.33, 0.13, 1.36),
    SoilType.SANDY_CLAY_LOAM: SoilTexture(0.13, 0.27, 0.60, -2.8, 4.0, 1.2e-4, 0.48, 0.26, 0.15, 1.39),
    SoilType.CLAY_LOAM: SoilTexture(0.34, 0.34, 0.32, -2.6, 5.2, 6.4e-5, 0.52, 0.32, 0.20, 1.35),
    SoilType.SILTY_CLAY_LOAM: SoilTexture(0.58, 0.33, 0.09, -3.3, 6.6, 4.2e-5, 0.52, 0.37, 0.21, 1.24),
    SoilType.SANDY_CLAY: SoilTexture(0.07, 0.40, 0.53, -2.9, 6.0, 3.3e-5, 0.51, 0.34, 0.24, 1.30),
    SoilType.SILTY_CLAY: SoilTexture(0.45, 0.45, 0.10, -3.4, 7.9, 2.5e-5, 0.52, 0.39, 0.25, 1.28),
    SoilType.CLAY: SoilTexture(0.20, 0.60, 0.20, -3.7, 7.6, 1.7e-5, 0.53, 0.40, 0.27, 1.19),
}


def soil_texture(soil_type: SoilType | int | str) -> SoilTexture:
    """Look up texture constants by enum member, integer code or name.

    Names are case-insensitive and accept spaces or hyphens, e.g.
    ``"silty clay loam"``.
    """
    if isinstance(soil_type, str):
        key = soil_type.strip().upper().replace(" ", "_").replace("-", "_")
        try:
            member = SoilType[key]
        except KeyError:
            raise SoilProfileError(f"Unknown soil type: {soil_type!r}") from None
    else:
        try:
            member = SoilType(int(soil_type))
        except ValueError:
            raise SoilProfileError(f"Unknown soil type code: {soil_type!r}") from None
    return SOIL_TEXTURES[member]
