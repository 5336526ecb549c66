import pytest

from vol_dashboard.exceptions import ConfigValidationError
from vol_dashboard.schema.normalizer_config import DEFAULT_NORMALIZER_CONFIG, NormalizerConfig


def test_defaults():
    assert DEFAULT_NORMALIZER_CONFIG.k_factor == 1.5
    assert DEFAULT_NORMALIZER_CONFIG.percentile == 0.05


@pytest.mark.parametrize(
    "kwargs",
    [
        {"k_factor": -0.1},
        {"k_factor": float("inf")},
        {"percentile": 0.0},
        {"percentile": 0.5},
        {"percentile": float("nan")},
        {"k_factor": "1.5"},
    ],
)
def test_rejects_out_of_range(kwargs):
    with pytest.raises(ConfigValidationError):
        NormalizerConfig(**kwargs)


def test_zero_k_factor_allowed():
    assert NormalizerConfig(k_factor=0).k_factor == 0


def test_dict_round_trip():
    cfg = NormalizerConfig.from_dict({"k_factor": "3", "percentile": 0.1})
    assert cfg.k_factor == 3.0
    assert NormalizerConfig.from_dict(cfg.to_dict()) == cfg
    assert NormalizerConfig.from_dict({}) == DEFAULT_NORMALIZER_CONFIG


def test_accepts_numpy_scalars():
    np = pytest.importorskip("numpy")
    cfg = NormalizerConfig(k_factor=np.int64(2), percentile=np.float64(0.1))
    assert cfg.k_factor == 2
    assert NormalizerConfig(k_factor=np.float32(1.5)).k_factor == pytest.approx(1.5)
    with pytest.raises(ConfigValidationError):
        NormalizerConfig(k_factor=np.bool_(True))
