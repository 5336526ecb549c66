import math

import numpy as np
import pandas as pd
import pytest

from vol_dashboard.analysis.positioning import normalize_series, position_within_history
from vol_dashboard.schema.normalizer_config import NormalizerConfig


def test_position_drops_missing_readings():
    history = [1, 2, None, 3, 4, float("nan"), 5, 6, 7, 8, 9]
    report = position_within_history(history, 4.0, label="BTC")
    assert report.sample_size == 9
    assert report.position == pytest.approx(0.375)
    assert report.stats is not None
    assert report.to_dict()["label"] == "BTC"


def test_position_from_frame_column():
    frame = pd.DataFrame({"value": [1.0, 2.0, 3.0, 4.0, 5.0, 6.0, 7.0, 8.0, 9.0]})
    report = position_within_history(frame, 9.0, NormalizerConfig(k_factor=3.0))
    assert report.position == pytest.approx(1.0)


def test_position_rejects_multi_column_frame():
    with pytest.raises(ValueError):
        position_within_history(pd.DataFrame({"a": [1], "b": [2]}), 1.0)


def test_empty_history_has_no_position():
    report = position_within_history([], 50.0, label="ETH")
    assert report.position is None
    assert report.sample_size == 0
    assert report.to_dict()["stats"] is None


def test_normalize_series_matches_pointwise():
    series = pd.Series([1.0, 2.0, 3.0, 4.0, 5.0, 6.0, 7.0, 8.0, 9.0, np.nan])
    out = normalize_series(series)
    assert out.iloc[0] == pytest.approx(0.0)
    assert out.iloc[3] == pytest.approx(0.375)
    assert out.iloc[8] == pytest.approx(1.0)
    assert math.isnan(out.iloc[9])


def test_normalize_series_degenerate_and_empty():
    flat = normalize_series(pd.Series([5.0, 5.0, np.nan]))
    assert flat.iloc[:2].tolist() == [0.0, 0.0]
    assert math.isnan(flat.iloc[2])

    empty = normalize_series(pd.Series([np.nan, np.nan]))
    assert empty.isna().all()
