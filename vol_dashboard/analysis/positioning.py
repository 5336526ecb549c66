"""Place current readings inside their recent history."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

import numpy as np
import pandas as pd

from vol_dashboard.normalization.robust_range import RangeStats, normalize
from vol_dashboard.schema.normalizer_config import NormalizerConfig
from vol_dashboard.utils.logging import get_logger

log = get_logger(__name__, component="analysis")


@dataclass(slots=True)
class PositionReport:
    label: str
    current: float
    position: Optional[float]
    sample_size: int
    stats: Optional[RangeStats] = None

    def to_dict(self) -> dict:
        return {
            "label": self.label,
            "current": self.current,
            "position": self.position,
            "sample_size": self.sample_size,
            "stats": self.stats.to_dict() if self.stats is not None else None,
        }


def _clean_history(history) -> list[float]:
    if isinstance(history, pd.DataFrame):
        if history.shape[1] != 1:
            raise ValueError("history frame must have exactly one column")
        history = history.iloc[:, 0]
    series = pd.to_numeric(pd.Series(history, dtype="object"), errors="coerce")
    series = series.replace([np.inf, -np.inf], np.nan).dropna()
    return series.astype(float).tolist()


def position_within_history(
    history, current: float, config: Optional[NormalizerConfig] = None, label: str = ""
) -> PositionReport:
    """Normalize ``current`` against ``history`` after dropping missing readings.

    ``position`` is ``None`` when the cleaned history cannot be normalized
    (for instance because it is empty).
    """
    sample = _clean_history(history)
    result = normalize(sample, current, config)
    if not result.is_valid:
        log.warning("Cannot position %s: %s", label or "value", result.reason, extra={"symbol": label})
    return PositionReport(
        label=label,
        current=float(current),
        position=result.value,
        sample_size=len(sample),
        stats=result.stats,
    )


def normalize_series(series: pd.Series, config: Optional[NormalizerConfig] = None) -> pd.Series:
    """Normalize each element of ``series`` against the series itself.

    Produces the per-point intensities used for heatmap-style coloring. When
    the series cannot be normalized every output is NaN.
    """
    sample = _clean_history(series)
    if not sample:
        return pd.Series(np.nan, index=series.index, dtype=float)

    first = normalize(sample, sample[0], config)
    if not first.is_valid or first.stats is None:
        return pd.Series(np.nan, index=series.index, dtype=float)

    stats = first.stats
    values = pd.to_numeric(series, errors="coerce").astype(float).replace([np.inf, -np.inf], np.nan)
    if stats.is_degenerate:
        out = pd.Series(0.0, index=series.index)
        return out.where(values.notna())
    return (values - stats.new_min) / (stats.new_max - stats.new_min)


__all__ = ["PositionReport", "normalize_series", "position_within_history"]
