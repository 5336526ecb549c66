"""Factory for market data sources."""

from __future__ import annotations

from vol_dashboard.config.factories import FactoryBase
from vol_dashboard.data.deribit import MAINNET_BASE_URL, TESTNET_BASE_URL, DeribitDataSource
from vol_dashboard.exceptions import DependencyError

_DERIBIT_KWARGS = {"timeout", "http_get"}


def _build_provider(name: str, **kwargs):
    name = name.lower()
    options = {k: v for k, v in kwargs.items() if k in _DERIBIT_KWARGS}
    if name == "deribit":
        return DeribitDataSource(base_url=TESTNET_BASE_URL, **options)
    if name == "deribit_mainnet":
        return DeribitDataSource(base_url=MAINNET_BASE_URL, **options)
    raise DependencyError(f"Unknown data source: {name}")


def get_data_source(name: str, **kwargs) -> DeribitDataSource:
    return _build_provider(name, **kwargs)


def data_source_factory(name: str, **kwargs) -> FactoryBase[DeribitDataSource]:
    return FactoryBase(name=name, builder=lambda: get_data_source(name, **kwargs))


__all__ = ["data_source_factory", "get_data_source"]
