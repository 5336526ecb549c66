"""Normalizer configuration schema and validation."""

from __future__ import annotations

import math
import numbers
from dataclasses import dataclass

from vol_dashboard.exceptions import ConfigValidationError

DEFAULT_K_FACTOR = 1.5
DEFAULT_PERCENTILE = 0.05


@dataclass(frozen=True, slots=True)
class NormalizerConfig:
    """Tuning for the robust range normalizer.

    Attributes:
        k_factor: Tukey fence multiplier applied to the IQR.
        percentile: Tail fraction used to pick the winsorizing replacement
            values (0.05 selects the 5th/95th percentile ranks).
    """

    k_factor: float = DEFAULT_K_FACTOR
    percentile: float = DEFAULT_PERCENTILE

    def __post_init__(self) -> None:
        if not isinstance(self.k_factor, numbers.Real) or isinstance(self.k_factor, bool):
            raise ConfigValidationError("k_factor must be a number")
        if not math.isfinite(self.k_factor) or self.k_factor < 0:
            raise ConfigValidationError("k_factor must be finite and >= 0")
        if not isinstance(self.percentile, numbers.Real) or isinstance(self.percentile, bool):
            raise ConfigValidationError("percentile must be a number")
        if not 0 < self.percentile < 0.5:
            raise ConfigValidationError("percentile must be in (0, 0.5)")

    @classmethod
    def from_dict(cls, data: dict) -> "NormalizerConfig":
        return cls(
            k_factor=float(data.get("k_factor", DEFAULT_K_FACTOR)),
            percentile=float(data.get("percentile", DEFAULT_PERCENTILE)),
        )

    def to_dict(self) -> dict:
        return {"k_factor": self.k_factor, "percentile": self.percentile}


DEFAULT_NORMALIZER_CONFIG = NormalizerConfig()

__all__ = ["NormalizerConfig", "DEFAULT_NORMALIZER_CONFIG", "DEFAULT_K_FACTOR", "DEFAULT_PERCENTILE"]
