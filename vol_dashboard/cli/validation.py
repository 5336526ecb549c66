"""CLI input validation helpers."""

from __future__ import annotations

from vol_dashboard.exceptions import ConfigValidationError
from vol_dashboard.schema.normalizer_config import NormalizerConfig

VALID_RESOLUTIONS = {"1", "60", "3600", "43200", "1D"}


def parse_sample(raw: str) -> list[float]:
    """Parse ``"1, 2.5,3"`` into floats."""
    tokens = [tok.strip() for tok in raw.split(",") if tok.strip()]
    if not tokens:
        raise ConfigValidationError("--data must contain at least one number")
    try:
        return [float(tok) for tok in tokens]
    except ValueError as exc:
        raise ConfigValidationError(f"--data must be comma-separated numbers: {exc}") from exc


def build_normalizer_config(k_factor: float, percentile: float) -> NormalizerConfig:
    return NormalizerConfig(k_factor=float(k_factor), percentile=float(percentile))


def validate_currency(currency: str) -> str:
    normalized = currency.strip().upper()
    if not normalized.isalpha():
        raise ConfigValidationError(f"Invalid currency symbol: {currency!r}")
    return normalized


def validate_resolution(resolution: str) -> str:
    if resolution not in VALID_RESOLUTIONS:
        raise ConfigValidationError(
            f"Invalid resolution '{resolution}'. Must be one of: {', '.join(sorted(VALID_RESOLUTIONS))}"
        )
    return resolution


def validate_page(offset: int, count: int) -> None:
    if offset < 0:
        raise ConfigValidationError("offset must be >= 0")
    if count <= 0:
        raise ConfigValidationError("count must be > 0")


__all__ = [
    "build_normalizer_config",
    "parse_sample",
    "validate_currency",
    "validate_page",
    "validate_resolution",
]
