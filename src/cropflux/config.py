"""Parameter sets for the CROPFLUX solvers.

Parameters are grouped by component and can be read from a TOML file::

    [photosynthesis]
    vcmax = 100.0
    jmax = 180.0

    [canopy]
    n_layers = 10
    leaf_width = 0.04

    [soil]
    soil_type = "loam"
    stress_function = 0

Sections absent from the file keep their defaults. Keys that do not name a
parameter raise :class:`~cropflux.errors.ConfigError`.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field, fields
from pathlib import Path

import toml

from cropflux.errors import ConfigError

__all__ = [
    "PhotosynthesisParameters",
    "CanopyParameters",
    "SoilParameters",
    "ModelParameters",
]


@dataclass(frozen=True)
class PhotosynthesisParameters:
    """C3 leaf biochemistry and Ball-Berry stomatal parameters.

    Attributes
    ----------
    vcmax : float
        Maximum carboxylation rate at 25 C (umol/m^2/s)
    jmax : float
        Maximum electron transport rate at 25 C (umol/m^2/s)
    rd : float
        Leaf respiration at 25 C (umol/m^2/s)
    b0 : float
        Ball-Berry intercept (mol/m^2/s)
    b1 : float
        Ball-Berry slope (dimensionless)
    co2 : float
        Atmospheric CO2 (umol/mol)
    o2 : float
        Atmospheric O2 (mmol/mol)
    theta : float
        Curvature of the light response at 0 C
    water_stress_approach : int
        0 scales photosynthetic capacity, 1 scales stomatal conductance
    electrons_per_carboxylation : float
    electrons_per_oxygenation : float
    """

    vcmax: float = 100.0
    jmax: float = 180.0
    rd: float = 1.1
    b0: float = 0.08
    b1: float = 5.0
    co2: float = 380.0
    o2: float = 210.0
    theta: float = 0.7
    water_stress_approach: int = 0
    electrons_per_carboxylation: float = 4.5
    electrons_per_oxygenation: float = 10.5


@dataclass(frozen=True)
class CanopyParameters:
    """Canopy structure and leaf energy-balance parameters.

    ``kd`` is the diffuse extinction coefficient, ``chil`` the leaf angle
    distribution parameter and ``heightf`` the LAI per metre of canopy height.
    ``et_equation`` selects the reported transpiration (0 diffusion form,
    1 Penman, 2 Priestley-Taylor). ``kpln`` is the leaf nitrogen decay
    coefficient.
    """

    n_layers: int = 10
    kd: float = 0.7
    chil: float = 1.0
    heightf: float = 3.0
    leaf_width: float = 0.04
    et_equation: int = 0
    kpln: float = 0.2


@dataclass(frozen=True)
class SoilParameters:
    """Soil column parameters.

    Negative ``field_capacity`` or ``wilting_point`` select the texture-table
    values for ``soil_type``.
    """

    soil_type: str = "loam"
    field_capacity: float = -1.0
    wilting_point: float = -1.0
    phi1: float = 0.01
    phi2: float = 10.0
    stress_function: int = 0
    hydraulic_distribution: bool = False
    rfl: float = 0.2
    rsec: float = 0.2
    rsdf: float = 0.44


def _section(cls, raw: dict, name: str):
    """Build one parameter dataclass from a TOML section."""
    if raw is None:
        return cls()
    if not isinstance(raw, dict):
        raise ConfigError(f"[{name}] must be a table")
    known = {f.name for f in fields(cls)}
    unknown = sorted(set(raw) - known)
    if unknown:
        raise ConfigError(f"Unknown keys in [{name}]: {', '.join(unknown)}")
    return cls(**raw)


@dataclass(frozen=True)
class ModelParameters:
    """Complete parameter bundle for one canopy/soil column."""

    photosynthesis: PhotosynthesisParameters = field(default_factory=PhotosynthesisParameters)
    canopy: CanopyParameters = field(default_factory=CanopyParameters)
    soil: SoilParameters = field(default_factory=SoilParameters)

    @classmethod
    def from_dict(cls, raw: dict) -> ModelParameters:
        """Create parameters from a nested mapping (one table per component)."""
        return cls(
            photosynthesis=_section(PhotosynthesisParameters, raw.get("photosynthesis"), "photosynthesis"),
            canopy=_section(CanopyParameters, raw.get("canopy"), "canopy"),
            soil=_section(SoilParameters, raw.get("soil"), "soil"),
        )

    @classmethod
    def from_toml(cls, path: str | Path) -> ModelParameters:
        """Read parameters from a TOML file."""
        path = Path(path)
        if not path.exists():
            raise ConfigError(f"Parameter file not found: {path}")
        with open(path, "r") as f:
            raw = toml.load(f)
        return cls.from_dict(raw)

    def to_dict(self) -> dict:
        return {
            "photosynthesis": asdict(self.photosynthesis),
            "canopy": asdict(self.canopy),
            "soil": asdict(self.soil),
        }
