"""Deribit public API client with normalized responses."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Mapping

import pandas as pd

from vol_dashboard.exceptions import DataSourceError
from vol_dashboard.utils.logging import get_logger

log = get_logger(__name__, component="data.deribit")

TESTNET_BASE_URL = "https://test.deribit.com/api/v2"
MAINNET_BASE_URL = "https://www.deribit.com/api/v2"

_HttpGetter = Callable[..., Any]


@dataclass(slots=True)
class _DeribitResponse:
    status_code: int
    payload: Any

    def json(self) -> Any:
        return self.payload


def dvol_index_name(symbol: str) -> str:
    """Deribit index name for a currency's DVOL, e.g. ``btcdvol_usdc``."""
    return f"{symbol.lower()}dvol_usdc"


def _format_timestamp(ts: pd.Timestamp) -> str:
    return ts.strftime("%Y-%m-%dT%H:%M:%S.") + f"{ts.microsecond // 1000:03d}Z"


class DeribitDataSource:
    """REST adapter for the Deribit public market data endpoints.

    All network calls go through an injectable HTTP getter so tests never hit
    the network. JSON-RPC envelopes are unwrapped and reshaped into pandas
    DataFrames; any transport, HTTP or payload failure surfaces as
    DataSourceError. Requests are issued once, without retries.
    """

    name = "deribit"

    def __init__(
        self,
        *,
        base_url: str = TESTNET_BASE_URL,
        timeout: float = 10.0,
        http_get: _HttpGetter | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._http_get = http_get

    def fetch_historical_volatility(self, currency: str, resolution: str = "1D") -> pd.DataFrame:
        """Realized volatility series as ``timestamp``/``value`` rows."""
        result = self._request(
            "public/get_historical_volatility",
            params={"currency": currency, "resolution": resolution},
            context=currency,
        )
        if not isinstance(result, list):
            raise self._fail(currency, "Historical volatility result must be a list")

        try:
            frame = pd.DataFrame(result, columns=["timestamp", "value"])
        except ValueError as exc:
            raise self._fail(currency, "Historical volatility rows must be [timestamp, value] pairs") from exc
        log.debug("First few values for %s: %s", currency, result[:3], extra={"symbol": currency})

        try:
            stamps = pd.to_datetime(frame["timestamp"].astype("int64"), unit="ms", utc=True)
            frame["value"] = frame["value"].astype(float).round(2)
        except (TypeError, ValueError) as exc:
            raise self._fail(currency, f"Non-numeric historical volatility row: {exc}") from exc
        frame["timestamp"] = [_format_timestamp(ts) for ts in stamps]
        return frame

    def fetch_dvol_delivery_prices(self, symbol: str, offset: int, count: int = 100) -> pd.DataFrame:
        """One page of DVOL daily delivery prices as ``date``/``dvol`` rows."""
        result = self._request(
            "public/get_delivery_prices",
            params={"offset": offset, "count": count, "index_name": dvol_index_name(symbol)},
            context=symbol,
        )
        rows = result.get("data") if isinstance(result, Mapping) else None
        if not isinstance(rows, list):
            raise self._fail(symbol, "Delivery prices result is missing its data list")

        records = []
        for item in rows:
            if not isinstance(item, Mapping) or "date" not in item or "delivery_price" not in item:
                raise self._fail(symbol, f"Malformed delivery price row: {item!r}")
            records.append({"date": item["date"], "dvol": round(float(item["delivery_price"]), 2)})
        return pd.DataFrame(records, columns=["date", "dvol"])

    def fetch_current_dvol(self, currency: str) -> float:
        """Latest DVOL index value."""
        result = self._request(
            "public/get_index_price",
            params={"index_name": dvol_index_name(currency)},
            context=currency,
        )
        price = result.get("index_price") if isinstance(result, Mapping) else None
        if price is None:
            raise self._fail(currency, "Index price missing from Deribit response")
        return round(float(price), 2)

    def _request(self, path: str, params: Mapping[str, Any], context: str) -> Any:
        try:
            response = self._perform_request(path, params)
        except DataSourceError:
            raise
        except Exception as exc:
            raise self._fail(context, f"Request to {path} failed: {exc}") from exc

        try:
            payload = response.json()
        except Exception as exc:  # pragma: no cover - depends on transport
            raise self._fail(context, "Unable to parse Deribit response as JSON") from exc

        status_code = getattr(response, "status_code", 500)
        if status_code >= 400 or (isinstance(payload, Mapping) and payload.get("error")):
            raise self._fail(context, self._extract_error(payload, status_code))
        if not isinstance(payload, Mapping) or "result" not in payload:
            raise self._fail(context, "Deribit response is missing a result member")
        return payload["result"]

    def _perform_request(self, path: str, params: Mapping[str, Any]):
        client = self._http_get
        if client is None:
            import requests

            client = requests.get

        url = f"{self.base_url}/{path.lstrip('/')}"
        response = client(url, params=dict(params), timeout=self.timeout)
        if not hasattr(response, "status_code"):
            # Test hooks may return the bare payload
            return _DeribitResponse(status_code=200, payload=response)
        return response

    def _fail(self, context: str, message: str) -> DataSourceError:
        log.error("Deribit request failed for %s: %s", context, message, extra={"symbol": context})
        return DataSourceError(message)

    @staticmethod
    def _extract_error(payload: Any, status_code: int) -> str:
        error = payload.get("error") if isinstance(payload, Mapping) else None
        if isinstance(error, Mapping):
            code = error.get("code", status_code)
            return f"Deribit API {code}: {error.get('message', 'unexpected error')}"
        return f"Deribit API {status_code}: unexpected error"


__all__ = ["DeribitDataSource", "MAINNET_BASE_URL", "TESTNET_BASE_URL", "dvol_index_name"]
