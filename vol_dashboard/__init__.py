"""Volatility dashboard core: robust range normalization and Deribit data access."""

from vol_dashboard.normalization.robust_range import (
    NormalizationResult,
    RangeStats,
    compute_ratio_with_outlier_handling,
    normalize,
)
from vol_dashboard.schema.normalizer_config import NormalizerConfig

__version__ = "0.1.0"

__all__ = [
    "NormalizationResult",
    "NormalizerConfig",
    "RangeStats",
    "compute_ratio_with_outlier_handling",
    "normalize",
]
