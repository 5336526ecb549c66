from vol_dashboard.normalization.robust_range import (
    NormalizationResult,
    RangeStats,
    calculate_median,
    calculate_quartiles,
    compute_ratio_with_outlier_handling,
    normalize,
    range_stats,
    winsorize,
)

__all__ = [
    "NormalizationResult",
    "RangeStats",
    "calculate_median",
    "calculate_quartiles",
    "compute_ratio_with_outlier_handling",
    "normalize",
    "range_stats",
    "winsorize",
]
