"""CLI command positioning the current DVOL inside realized volatility history."""

from __future__ import annotations

import json
import time
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.markup import escape

from vol_dashboard.analysis.positioning import position_within_history
from vol_dashboard.cli.validation import build_normalizer_config, validate_currency, validate_resolution
from vol_dashboard.config.loader import load_config_with_precedence
from vol_dashboard.data.factory import data_source_factory
from vol_dashboard.exceptions import DataSourceError, InsufficientDataError
from vol_dashboard.schema.normalizer_config import DEFAULT_K_FACTOR, DEFAULT_PERCENTILE
from vol_dashboard.utils.logging import get_logger

console = Console()
log = get_logger(__name__, component="cli.position")


def position(
    currency: Optional[str] = typer.Option(None, "--currency", help="Currency (BTC, ETH, ...)"),
    resolution: Optional[str] = typer.Option(None, "--resolution", help="History resolution (default 1D)"),
    config: Optional[Path] = typer.Option(None, "--config", help="Optional YAML/JSON config path"),
    data_source: Optional[str] = typer.Option(None, "--data-source", help="deribit | deribit_mainnet"),
    timeout: Optional[float] = typer.Option(None, "--timeout", help="HTTP timeout seconds"),
    k_factor: Optional[float] = typer.Option(None, "--k-factor", help="IQR fence multiplier"),
    percentile: Optional[float] = typer.Option(None, "--percentile", help="Winsorizing tail fraction"),
    as_json: bool = typer.Option(False, "--json/--no-json", help="Emit the report as JSON"),
) -> None:
    """Show where the current DVOL sits within the realized volatility range."""
    defaults = {
        "currency": "BTC",
        "resolution": "1D",
        "data_source": "deribit",
        "timeout": 10.0,
        "k_factor": DEFAULT_K_FACTOR,
        "percentile": DEFAULT_PERCENTILE,
    }
    cli_values = {
        "currency": currency,
        "resolution": resolution,
        "data_source": data_source,
        "timeout": timeout,
        "k_factor": k_factor,
        "percentile": percentile,
    }
    casters = {
        "currency": str,
        "resolution": str,
        "data_source": str,
        "timeout": float,
        "k_factor": float,
        "percentile": float,
    }
    merged = load_config_with_precedence(
        config_path=config,
        env_prefix="VOLDASH_",
        cli_values=cli_values,
        defaults=defaults,
        casters=casters,
    )
    currency = validate_currency(merged["currency"])
    resolution = validate_resolution(merged["resolution"])
    normalizer_config = build_normalizer_config(merged["k_factor"], merged["percentile"])

    provider = data_source_factory(merged["data_source"], timeout=merged["timeout"]).create()
    started = time.perf_counter()
    try:
        history = provider.fetch_historical_volatility(currency, resolution=resolution)
        current = provider.fetch_current_dvol(currency)
    except DataSourceError as exc:
        console.print(f"[red]Error fetching {currency} data: {escape(str(exc))}[/red]")
        raise typer.Exit(code=2)
    duration_ms = round((time.perf_counter() - started) * 1000, 1)
    log.info(f"Fetched {currency} history and DVOL", extra={"symbol": currency, "duration_ms": duration_ms})

    report = position_within_history(history["value"], current, normalizer_config, label=currency)
    if as_json:
        console.print(json.dumps(report.to_dict(), indent=2))
    elif report.position is None:
        console.print(f"[yellow]{currency}: not enough history to position DVOL {current}[/yellow]")
    else:
        console.print(
            f"[bold cyan]{currency}[/bold cyan] DVOL {current:.2f} sits at "
            f"{report.position:.2%} of the robust range over {report.sample_size} samples"
        )
    if report.position is None:
        raise InsufficientDataError(f"{currency} history of {report.sample_size} samples cannot be normalized")
