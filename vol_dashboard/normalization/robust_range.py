"""Outlier-aware min/max normalization.

Positions a value inside the "typical" range of a reference sample. The range
is taken from the sample after winsorizing anything beyond an IQR fence, with
the fence multiplier shrunk when more than 10% of the sample falls outside the
initial fence.
"""

from __future__ import annotations

import math
import numbers
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import Literal, Optional, Tuple

import numpy as np
import pandas as pd

from vol_dashboard.schema.normalizer_config import DEFAULT_NORMALIZER_CONFIG, NormalizerConfig
from vol_dashboard.utils.logging import get_logger

log = get_logger(__name__, component="normalization")

OUTLIER_RATIO_THRESHOLD = 0.1
MIN_ADJUSTED_K_FACTOR = 1.0


@dataclass(frozen=True, slots=True)
class RangeStats:
    q1: float
    q3: float
    iqr: float
    lower_bound: float
    upper_bound: float
    outlier_ratio: float
    adjusted_k_factor: float
    adjusted_lower_bound: float
    adjusted_upper_bound: float
    p_low: float
    p_high: float
    new_min: float
    new_max: float

    @property
    def is_degenerate(self) -> bool:
        return self.new_min == self.new_max

    def to_dict(self) -> dict:
        return {
            "q1": self.q1,
            "q3": self.q3,
            "iqr": self.iqr,
            "lower_bound": self.lower_bound,
            "upper_bound": self.upper_bound,
            "outlier_ratio": self.outlier_ratio,
            "adjusted_k_factor": self.adjusted_k_factor,
            "adjusted_lower_bound": self.adjusted_lower_bound,
            "adjusted_upper_bound": self.adjusted_upper_bound,
            "p_low": self.p_low,
            "p_high": self.p_high,
            "new_min": self.new_min,
            "new_max": self.new_max,
        }


@dataclass(frozen=True, slots=True)
class NormalizationResult:
    """Tagged outcome of :func:`normalize`.

    ``value`` is ``None`` only for invalid samples, so a degenerate ``0.0``
    is never confused with "no result".
    """

    status: Literal["valid", "invalid"]
    value: Optional[float] = None
    stats: Optional[RangeStats] = None
    reason: Optional[str] = None

    @property
    def is_valid(self) -> bool:
        return self.status == "valid"

    @classmethod
    def invalid(cls, reason: str) -> "NormalizationResult":
        return cls(status="invalid", reason=reason)

    @classmethod
    def of(cls, value: float, stats: RangeStats) -> "NormalizationResult":
        return cls(status="valid", value=value, stats=stats)


def calculate_median(sorted_values: np.ndarray) -> float:
    """Median of an already sorted, non-empty array."""
    n = len(sorted_values)
    mid = n // 2
    if n % 2 != 0:
        return float(sorted_values[mid])
    return float((sorted_values[mid - 1] + sorted_values[mid]) / 2)


def calculate_quartiles(sorted_values: np.ndarray) -> Tuple[Optional[float], Optional[float]]:
    """Q1/Q3 by the exclusive-median split.

    For odd lengths the middle element belongs to neither half. Returns
    ``(None, None)`` for an empty array.
    """
    n = len(sorted_values)
    if n == 0:
        return None, None
    if n == 1:
        # both halves are empty; the lone sample is its own quartile
        only = float(sorted_values[0])
        return only, only

    half = n // 2
    lower_half = sorted_values[:half]
    upper_half = sorted_values[half:] if n % 2 == 0 else sorted_values[half + 1 :]
    return calculate_median(lower_half), calculate_median(upper_half)


def winsorize(
    data: np.ndarray, lower: float, upper: float, low_value: float, high_value: float
) -> np.ndarray:
    """Replace values below ``lower`` with ``low_value`` and above ``upper`` with ``high_value``."""
    return np.where(data < lower, low_value, np.where(data > upper, high_value, data))


def _coerce_sample(data) -> Optional[np.ndarray]:
    """Return a float copy of ``data`` or ``None`` when it is not a usable sample."""
    if data is None or isinstance(data, (str, bytes, Mapping)):
        return None
    if isinstance(data, pd.Series):
        data = data.to_numpy()
    if isinstance(data, np.ndarray):
        if data.ndim != 1 or data.dtype.kind not in "iuf":
            return None
        values = data.astype(float, copy=True)
    elif isinstance(data, Sequence):
        if not all(isinstance(x, numbers.Real) and not isinstance(x, bool) for x in data):
            return None
        values = np.array(data, dtype=float)
    else:
        return None
    if values.size == 0 or not np.all(np.isfinite(values)):
        return None
    return values


def _range_stats(values: np.ndarray, config: NormalizerConfig) -> Optional[RangeStats]:
    sorted_values = np.sort(values)
    q1, q3 = calculate_quartiles(sorted_values)
    if q1 is None or q3 is None:
        return None

    k_factor = config.k_factor
    iqr = q3 - q1
    lower_bound = q1 - k_factor * iqr
    upper_bound = q3 + k_factor * iqr

    n = len(values)
    outliers = int(np.count_nonzero((values < lower_bound) | (values > upper_bound)))
    outlier_ratio = outliers / n

    adjusted_k_factor = k_factor
    if outlier_ratio > OUTLIER_RATIO_THRESHOLD:
        adjusted_k_factor = max(MIN_ADJUSTED_K_FACTOR, k_factor * (1 - outlier_ratio))

    adjusted_lower_bound = q1 - adjusted_k_factor * iqr
    adjusted_upper_bound = q3 + adjusted_k_factor * iqr

    # rank lookup, no interpolation between neighbours
    p_low = float(sorted_values[math.floor(n * config.percentile)])
    # 1 - percentile rounds to 1.0 for tiny percentiles
    p_high = float(sorted_values[min(n - 1, math.floor(n * (1 - config.percentile)))])

    winsorized = winsorize(values, adjusted_lower_bound, adjusted_upper_bound, p_low, p_high)

    return RangeStats(
        q1=q1,
        q3=q3,
        iqr=iqr,
        lower_bound=lower_bound,
        upper_bound=upper_bound,
        outlier_ratio=outlier_ratio,
        adjusted_k_factor=float(adjusted_k_factor),
        adjusted_lower_bound=adjusted_lower_bound,
        adjusted_upper_bound=adjusted_upper_bound,
        p_low=p_low,
        p_high=p_high,
        new_min=float(np.min(winsorized)),
        new_max=float(np.max(winsorized)),
    )


def range_stats(data, config: Optional[NormalizerConfig] = None) -> Optional[RangeStats]:
    """Fences, winsorizing bounds and cleaned min/max for ``data``; ``None`` if invalid."""
    values = _coerce_sample(data)
    if values is None:
        return None
    return _range_stats(values, config or DEFAULT_NORMALIZER_CONFIG)


def normalize(data, value: float, config: Optional[NormalizerConfig] = None) -> NormalizationResult:
    """Position ``value`` within the winsorized range of ``data``.

    Returns an invalid result for empty, non-numeric or non-finite samples,
    ``0.0`` when the winsorized sample collapses to a single point, and
    ``(value - new_min) / (new_max - new_min)`` otherwise. The output is not
    clamped: values outside the cleaned range map below 0 or above 1.
    """
    config = config or DEFAULT_NORMALIZER_CONFIG

    if not isinstance(value, numbers.Real) or isinstance(value, bool):
        return NormalizationResult.invalid("value must be a real number")

    values = _coerce_sample(data)
    if values is None:
        return NormalizationResult.invalid("sample must be a non-empty sequence of finite numbers")

    stats = _range_stats(values, config)
    if stats is None:
        return NormalizationResult.invalid("quartiles undefined for sample")

    if stats.is_degenerate:
        ratio = 0.0
    else:
        ratio = (float(value) - stats.new_min) / (stats.new_max - stats.new_min)

    log.debug(
        "Normalized value against %d samples: ratio=%s outlier_ratio=%.4f adjusted_k=%.4f range=[%s, %s]",
        len(values),
        ratio,
        stats.outlier_ratio,
        stats.adjusted_k_factor,
        stats.new_min,
        stats.new_max,
    )
    return NormalizationResult.of(ratio, stats)


def compute_ratio_with_outlier_handling(
    data, value: float, k_factor: float = 1.5, percentile: float = 0.05
) -> Optional[float]:
    """Sentinel form of :func:`normalize`: ``None`` when invalid, ``0`` when degenerate."""
    result = normalize(data, value, NormalizerConfig(k_factor=k_factor, percentile=percentile))
    return result.value


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
