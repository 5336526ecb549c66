"""CLI commands printing Deribit volatility data."""

from __future__ import annotations

from pathlib import Path
from typing import Optional

import pandas as pd
import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from vol_dashboard.analysis.positioning import normalize_series
from vol_dashboard.cli.validation import validate_currency, validate_page, validate_resolution
from vol_dashboard.config.loader import load_config_with_precedence
from vol_dashboard.data.factory import get_data_source
from vol_dashboard.exceptions import DataSourceError
from vol_dashboard.utils.logging import get_logger

console = Console()
log = get_logger(__name__, component="cli.market")

SOURCE_DEFAULTS = {"data_source": "deribit", "timeout": 10.0}
SOURCE_CASTERS = {"data_source": str, "timeout": float}


def _render(frame: pd.DataFrame, title: str) -> None:
    table = Table(title=title)
    for column in frame.columns:
        table.add_column(str(column))
    for row in frame.itertuples(index=False):
        table.add_row(*(str(v) for v in row))
    console.print(table)


def volatility(
    currency: str = typer.Option("BTC", "--currency", help="Currency (BTC, ETH, ...)"),
    resolution: str = typer.Option("1D", "--resolution", help="Bucket resolution: 1, 60, 3600, 43200, 1D"),
    config: Optional[Path] = typer.Option(None, "--config", help="Optional YAML/JSON config path"),
    data_source: Optional[str] = typer.Option(None, "--data-source", help="deribit | deribit_mainnet"),
    timeout: Optional[float] = typer.Option(None, "--timeout", help="HTTP timeout seconds"),
    normalized: bool = typer.Option(
        False, "--normalized/--raw", help="Add an outlier-robust intensity column (0..1 for typical readings)"
    ),
) -> None:
    """Print the historical volatility series for CURRENCY."""
    currency = validate_currency(currency)
    resolution = validate_resolution(resolution)
    merged = load_config_with_precedence(
        config_path=config,
        env_prefix="VOLDASH_",
        cli_values={"data_source": data_source, "timeout": timeout},
        defaults=SOURCE_DEFAULTS,
        casters=SOURCE_CASTERS,
    )
    provider = get_data_source(merged["data_source"], timeout=merged["timeout"])
    try:
        frame = provider.fetch_historical_volatility(currency, resolution=resolution)
    except DataSourceError as exc:
        console.print(f"[red]Error fetching {currency} volatility: {escape(str(exc))}[/red]")
        raise typer.Exit(code=2)

    log.info(f"Fetched {len(frame)} volatility rows for {currency}", extra={"symbol": currency})
    if normalized:
        frame = frame.assign(intensity=normalize_series(frame["value"]).round(4))
    _render(frame, f"{currency} historical volatility ({resolution})")


def dvol(
    symbol: str = typer.Option("BTC", "--symbol", help="Currency whose DVOL index to read"),
    offset: int = typer.Option(0, "--offset", help="Number of most recent days to skip"),
    count: int = typer.Option(100, "--count", help="Number of delivery prices to fetch"),
    config: Optional[Path] = typer.Option(None, "--config", help="Optional YAML/JSON config path"),
    data_source: Optional[str] = typer.Option(None, "--data-source", help="deribit | deribit_mainnet"),
    timeout: Optional[float] = typer.Option(None, "--timeout", help="HTTP timeout seconds"),
) -> None:
    """Print DVOL delivery prices for SYMBOL."""
    symbol = validate_currency(symbol)
    validate_page(offset, count)
    merged = load_config_with_precedence(
        config_path=config,
        env_prefix="VOLDASH_",
        cli_values={"data_source": data_source, "timeout": timeout},
        defaults=SOURCE_DEFAULTS,
        casters=SOURCE_CASTERS,
    )
    provider = get_data_source(merged["data_source"], timeout=merged["timeout"])
    try:
        frame = provider.fetch_dvol_delivery_prices(symbol, offset=offset, count=count)
    except DataSourceError as exc:
        console.print(f"[red]Error fetching DVOL data for {symbol}: {escape(str(exc))}[/red]")
        raise typer.Exit(code=2)

    log.info(f"Fetched {len(frame)} DVOL rows for {symbol}", extra={"symbol": symbol})
    _render(frame, f"{symbol} DVOL delivery prices")
