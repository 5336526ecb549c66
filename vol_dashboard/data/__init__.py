"""Market data providers.

Providers return pandas DataFrames shaped for the dashboard views and raise
`vol_dashboard.exceptions.DataSourceError` for every recoverable failure.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable

import pandas as pd


@runtime_checkable
class VolatilityDataSource(Protocol):
    """Minimal interface implemented by volatility data providers."""

    name: str

    def fetch_historical_volatility(self, currency: str, resolution: str = "1D") -> pd.DataFrame:
        """Return ``timestamp``/``value`` rows of realized volatility."""

    def fetch_dvol_delivery_prices(self, symbol: str, offset: int, count: int = 100) -> pd.DataFrame:
        """Return ``date``/``dvol`` rows of DVOL delivery prices."""

    def fetch_current_dvol(self, currency: str) -> float:
        """Return the latest DVOL index value."""


__all__ = ["VolatilityDataSource"]
