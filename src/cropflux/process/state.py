"""Typed state and result containers for CROPFLUX.

Provides dataclass-based containers for:
- LightProfile: per-layer irradiance and geometry of the canopy
- LightMacroEnvironment: solar geometry for one hour
- LeafGasExchangeResult / LeafEnergyBalanceResult: leaf solver outputs
- SoilLayerState: caller-owned soil water content with layer boundaries
- WaterStressCoefficients, SingleLayerWaterResult, SoilWaterResult
- CanopyHourResult: canopy totals for one hour

Enumerated selectors passed to the numba kernels as integers are IntEnums
so their values can be handed over unchanged.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import IntEnum
from typing import TYPE_CHECKING

import numpy as np
import pandas as pd

from cropflux.errors import LayerCountError, SoilProfileError

if TYPE_CHECKING:
    from numpy.typing import NDArray

__all__ = [
    "MAX_LAYERS",
    "LimitingRate",
    "WaterStressApproach",
    "ETEquation",
    "StressFunction",
    "LightProfile",
    "LightMacroEnvironment",
    "LeafGasExchangeResult",
    "LeafEnergyBalanceResult",
    "SoilLayerState",
    "WaterStressCoefficients",
    "SingleLayerWaterResult",
    "SoilWaterResult",
    "CanopyHourResult",
]

MAX_LAYERS = 200


class LimitingRate(IntEnum):
    """Rate limiting carboxylation; ties resolve to the lowest value."""

    RUBISCO = 0
    LIGHT = 1
    TPU = 2


class WaterStressApproach(IntEnum):
    """Where the water-stress scalar enters the C3 solver."""

    CAPACITY = 0
    CONDUCTANCE = 1


class ETEquation(IntEnum):
    """Transpiration estimator reported as the actual rate."""

    DIFFUSION = 0
    PENMAN = 1
    PRIESTLEY_TAYLOR = 2


class StressFunction(IntEnum):
    LINEAR = 0
    LOGISTIC = 1
    EXPONENTIAL = 2
    NONE = 3


@dataclass
class LightProfile:
    """Per-layer light environment of the canopy. Layer 0 is the top.

    Attributes
    ----------
    n_layers : int
        Number of canopy layers
    direct_irradiance : NDArray[np.float64]
        Irradiance on sunlit leaves (umol/m^2/s)
    diffuse_irradiance : NDArray[np.float64]
        Irradiance on shaded leaves (umol/m^2/s)
    total_irradiance : NDArray[np.float64]
        Layer-average irradiance (umol/m^2/s)
    sunlit_fraction : NDArray[np.float64]
        Fraction of layer leaf area in direct beam
    shaded_fraction : NDArray[np.float64]
        1 - sunlit_fraction
    height : NDArray[np.float64]
        Height of the layer mid-point (m)
    k : float
        Direct-beam extinction coefficient
    """

    n_layers: int
    direct_irradiance: NDArray[np.float64]
    diffuse_irradiance: NDArray[np.float64]
    total_irradiance: NDArray[np.float64]
    sunlit_fraction: NDArray[np.float64]
    shaded_fraction: NDArray[np.float64]
    height: NDArray[np.float64]
    k: float

    def to_frame(self) -> pd.DataFrame:
        """Profile as a DataFrame indexed by layer."""
        return pd.DataFrame(
            {
                "direct_irradiance": self.direct_irradiance,
                "diffuse_irradiance": self.diffuse_irradiance,
                "total_irradiance": self.total_irradiance,
                "sunlit_fraction": self.sunlit_fraction,
                "shaded_fraction": self.shaded_fraction,
                "height": self.height,
            },
            index=pd.RangeIndex(self.n_layers, name="layer"),
        )


@dataclass(frozen=True)
class LightMacroEnvironment:
    cosine_zenith_angle: float
    direct_irradiance_fraction: float
    diffuse_irradiance_fraction: float


@dataclass(frozen=True)
class LeafGasExchangeResult:
    """Output of the coupled C3 photosynthesis / stomatal solver.

    Assimilation in umol/m^2/s, conductance in mmol/m^2/s, intercellular
    CO2 in umol/mol. ``converged`` is False when the iteration cap stopped
    the solver; the values are then the last estimate.
    """

    net_assimilation: float
    gross_assimilation: float
    stomatal_conductance: float
    intercellular_co2: float
    iterations: int
    converged: bool
    limiting_rate: LimitingRate


@dataclass(frozen=True)
class LeafEnergyBalanceResult:
    """Output of the leaf energy-balance solver.

    Transpiration values in mmol H2O/m^2/s, ``delta_t`` is leaf minus air
    temperature (C), ``layer_conductance`` in mmol/m^2/s.
    """

    transpiration: float
    penman: float
    priestley_taylor: float
    delta_t: float
    layer_conductance: float
    iterations: int
    converged: bool


@dataclass
class SoilLayerState:
    """Soil column geometry and water content.

    ``depths`` holds the n_layers + 1 layer boundaries (m) measured from
    the surface and is never modified. ``water_content`` (m^3/m^3, one value
    per layer, layer 0 on top) belongs to the caller and is updated in place
    by the multi-layer solver. Omitted water content starts at ``initial``.
    """

    depths: NDArray[np.float64]
    water_content: NDArray[np.float64] = field(default=None)
    initial: float = 0.3

    def __post_init__(self):
        self.depths = np.asarray(self.depths, dtype=np.float64)
        if self.depths.ndim != 1 or self.depths.shape[0] < 2:
            raise SoilProfileError("depths must hold at least two layer boundaries")
        n = self.depths.shape[0] - 1
        if n > MAX_LAYERS:
            raise LayerCountError(f"n_layers must be <= {MAX_LAYERS}, got {n}")
        if not np.all(np.isfinite(self.depths)) or np.any(np.diff(self.depths) <= 0):
            raise SoilProfileError("depths must be finite and strictly increasing")

        if self.water_content is None:
            self.water_content = np.full(n, self.initial, dtype=np.float64)
        elif not (isinstance(self.water_content, np.ndarray) and self.water_content.dtype == np.float64):
            self.water_content = np.asarray(self.water_content, dtype=np.float64)
        if self.water_content.shape != (n,):
            raise SoilProfileError(
                f"water_content must have one value per layer ({n}), got shape {self.water_content.shape}"
            )
        if not np.all(np.isfinite(self.water_content)) or np.any(self.water_content < 0):
            raise SoilProfileError("water_content must be finite and non-negative")

    @property
    def n_layers(self) -> int:
        return self.depths.shape[0] - 1

    @property
    def thickness(self) -> NDArray[np.float64]:
        return np.diff(self.depths)

    @property
    def soil_depth(self) -> float:
        return float(self.depths[-1] - self.depths[0])

    @classmethod
    def uniform(cls, soil_depth: float, n_layers: int, initial: float = 0.3) -> SoilLayerState:
        """Column of ``n_layers`` equal layers down to ``soil_depth``."""
        from cropflux.process.kernels.root_distribution import seq_root_depth

        if not 1 <= n_layers <= MAX_LAYERS:
            raise LayerCountError(f"n_layers must be in [1, {MAX_LAYERS}], got {n_layers}")
        if soil_depth <= 0:
            raise SoilProfileError(f"soil_depth must be > 0, got {soil_depth}")
        return cls(depths=seq_root_depth(float(soil_depth), int(n_layers)), initial=initial)


@dataclass(frozen=True)
class WaterStressCoefficients:
    """Multipliers in [0, 1] on photosynthetic capacity and leaf expansion."""

    photosynthesis: float
    leaf_expansion: float


@dataclass(frozen=True)
class SingleLayerWaterResult:
    """Output of the single-bucket soil water update.

    Attributes
    ----------
    water_content : float
        Updated volumetric water content
    runoff : float
        Water above saturation (m)
    nitrate_leaching : float
        NO3 leached with runoff
    water_potential : float
        Soil water potential (kPa)
    stress : WaterStressCoefficients
    """

    water_content: float
    runoff: float
    nitrate_leaching: float
    water_potential: float
    stress: WaterStressCoefficients


@dataclass
class SoilWaterResult:
    """Output of the multi-layer soil water update.

    Attributes
    ----------
    water_content : NDArray[np.float64]
        Copy of the updated water content (m^3/m^3)
    root_distribution : NDArray[np.float64]
        Root biomass per layer (Mg/ha)
    root_fraction : NDArray[np.float64]
        Root fraction per layer, sums to 1
    hourly_flux : NDArray[np.float64]
        Redistribution flux per layer (m^3/m^2/hr); zeros when disabled
    drainage : float
        Water leaving the bottom of the profile (m/hr)
    nitrate_leaching : float
        NO3 leached with drainage
    soil_evaporation : float
        Evaporation from the soil surface (Mg/ha/hr)
    unmet_demand : float
        Demand the column could not supply (m^3/ha)
    stress : WaterStressCoefficients
        Column-mean stress coefficients
    """

    water_content: NDArray[np.float64]
    root_distribution: NDArray[np.float64]
    root_fraction: NDArray[np.float64]
    hourly_flux: NDArray[np.float64]
    drainage: float
    nitrate_leaching: float
    soil_evaporation: float
    unmet_demand: float
    stress: WaterStressCoefficients

    def to_frame(self) -> pd.DataFrame:
        """Per-layer values as a DataFrame indexed by layer."""
        return pd.DataFrame(
            {
                "water_content": self.water_content,
                "root_distribution": self.root_distribution,
                "root_fraction": self.root_fraction,
                "hourly_flux": self.hourly_flux,
            },
            index=pd.RangeIndex(self.water_content.shape[0], name="layer"),
        )


@dataclass
class CanopyHourResult:
    """Canopy and soil outputs for one hour.

    Canopy assimilation in Mg CH2O/ha/hr and transpiration in Mg H2O/ha/hr,
    both scaled by leaf area. ``layers`` holds the per-layer leaf values
    (sunlit and shaded assimilation, conductance, transpiration, leaf
    temperature offset) and is empty at night.
    """

    assimilation: float
    gross_assimilation: float
    transpiration: float
    penman: float
    priestley_taylor: float
    conductance: float
    macro_environment: LightMacroEnvironment
    soil: SoilWaterResult | None
    layers: pd.DataFrame
