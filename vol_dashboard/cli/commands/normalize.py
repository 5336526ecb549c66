"""CLI command normalizing a value against an ad-hoc sample."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console

from vol_dashboard.cli.validation import build_normalizer_config, parse_sample
from vol_dashboard.config.loader import load_config_with_precedence
from vol_dashboard.normalization.robust_range import normalize as normalize_value
from vol_dashboard.schema.normalizer_config import DEFAULT_K_FACTOR, DEFAULT_PERCENTILE
from vol_dashboard.utils.logging import get_logger

console = Console()
log = get_logger(__name__, component="cli.normalize")


def normalize(
    data: str = typer.Option(..., "--data", help="Comma-separated reference sample, e.g. '1,2,3,100'"),
    value: float = typer.Option(..., "--value", help="Value to position within the sample"),
    config: Optional[Path] = typer.Option(None, "--config", help="Optional YAML/JSON config path"),
    k_factor: Optional[float] = typer.Option(None, "--k-factor", help="IQR fence multiplier (default 1.5)"),
    percentile: Optional[float] = typer.Option(None, "--percentile", help="Winsorizing tail fraction (default 0.05)"),
    show_stats: bool = typer.Option(False, "--stats/--no-stats", help="Print intermediate range statistics as JSON"),
) -> None:
    """Position VALUE within the outlier-robust range of DATA."""
    merged = load_config_with_precedence(
        config_path=config,
        env_prefix="VOLDASH_",
        cli_values={"k_factor": k_factor, "percentile": percentile},
        defaults={"k_factor": DEFAULT_K_FACTOR, "percentile": DEFAULT_PERCENTILE},
        casters={"k_factor": float, "percentile": float},
    )
    normalizer_config = build_normalizer_config(merged["k_factor"], merged["percentile"])
    sample = parse_sample(data)

    result = normalize_value(sample, value, normalizer_config)
    if not result.is_valid:
        console.print("invalid")
        log.warning(f"Normalization undefined: {result.reason}")
        raise typer.Exit(code=3)

    console.print(f"{result.value:.6f}")
    if show_stats and result.stats is not None:
        console.print(json.dumps(result.stats.to_dict(), indent=2))
