import pytest

from vol_dashboard.data import VolatilityDataSource
from vol_dashboard.data.deribit import TESTNET_BASE_URL, DeribitDataSource, dvol_index_name
from vol_dashboard.exceptions import DataSourceError


class FakeResponse:
    def __init__(self, status_code: int, payload):
        self.status_code = status_code
        self._payload = payload

    def json(self):
        return self._payload


def _recording_get(payload, status_code=200):
    calls = []

    def fake_get(url, params=None, timeout=None):
        calls.append({"url": url, "params": params, "timeout": timeout})
        return FakeResponse(status_code, payload)

    return fake_get, calls


def test_historical_volatility_reshaped():
    payload = {
        "jsonrpc": "2.0",
        "result": [[1704067200000, 45.1234], [1704153600000, 50.0]],
        "testnet": True,
    }
    fake_get, calls = _recording_get(payload)
    ds = DeribitDataSource(http_get=fake_get, timeout=3.0)
    df = ds.fetch_historical_volatility("BTC")

    assert list(df.columns) == ["timestamp", "value"]
    assert df.iloc[0]["timestamp"] == "2024-01-01T00:00:00.000Z"
    assert df.iloc[1]["timestamp"] == "2024-01-02T00:00:00.000Z"
    assert df.iloc[0]["value"] == pytest.approx(45.12)
    assert calls[0]["url"] == f"{TESTNET_BASE_URL}/public/get_historical_volatility"
    assert calls[0]["params"] == {"currency": "BTC", "resolution": "1D"}
    assert calls[0]["timeout"] == 3.0


def test_dvol_delivery_prices_reshaped():
    payload = {
        "result": {
            "data": [
                {"date": "2024-03-02", "delivery_price": 61.4567},
                {"date": "2024-03-01", "delivery_price": 58.0},
            ],
            "records_total": 2,
        }
    }
    fake_get, calls = _recording_get(payload)
    ds = DeribitDataSource(http_get=fake_get)
    df = ds.fetch_dvol_delivery_prices("ETH", offset=100, count=50)

    assert list(df.columns) == ["date", "dvol"]
    assert df["dvol"].tolist() == [61.46, 58.0]
    assert calls[0]["params"] == {"offset": 100, "count": 50, "index_name": "ethdvol_usdc"}


def test_current_dvol_rounded():
    fake_get, calls = _recording_get({"result": {"index_price": 52.3456}})
    ds = DeribitDataSource(http_get=fake_get)
    assert ds.fetch_current_dvol("btc") == pytest.approx(52.35)
    assert calls[0]["url"].endswith("/public/get_index_price")
    assert calls[0]["params"] == {"index_name": "btcdvol_usdc"}


def test_bare_payload_from_test_hook_accepted():
    ds = DeribitDataSource(http_get=lambda *_, **__: {"result": {"index_price": 40.0}})
    assert ds.fetch_current_dvol("BTC") == 40.0


def test_http_error_normalization():
    fake_get, _ = _recording_get({"error": {"code": 10001, "message": "invalid_params"}}, status_code=400)
    ds = DeribitDataSource(http_get=fake_get)
    with pytest.raises(DataSourceError) as exc:
        ds.fetch_historical_volatility("BTC")
    assert "10001" in str(exc.value)
    assert "invalid_params" in str(exc.value)


def test_json_rpc_error_with_ok_status():
    fake_get, _ = _recording_get({"error": {"code": 13020, "message": "not_found"}})
    ds = DeribitDataSource(http_get=fake_get)
    with pytest.raises(DataSourceError, match="not_found"):
        ds.fetch_current_dvol("XYZ")


def test_missing_result_raises():
    fake_get, _ = _recording_get({"jsonrpc": "2.0"})
    ds = DeribitDataSource(http_get=fake_get)
    with pytest.raises(DataSourceError):
        ds.fetch_dvol_delivery_prices("BTC", offset=0)


def test_malformed_rows_raise():
    fake_get, _ = _recording_get({"result": {"data": [{"date": "2024-01-01"}]}})
    ds = DeribitDataSource(http_get=fake_get)
    with pytest.raises(DataSourceError, match="Malformed"):
        ds.fetch_dvol_delivery_prices("BTC", offset=0)

    fake_get, _ = _recording_get({"result": [[1704067200000, 1.0, 2.0]]})
    ds = DeribitDataSource(http_get=fake_get)
    with pytest.raises(DataSourceError):
        ds.fetch_historical_volatility("BTC")


def test_transport_failure_wrapped():
    def failing_get(*args, **kwargs):
        raise ConnectionError("unreachable")

    ds = DeribitDataSource(http_get=failing_get)
    with pytest.raises(DataSourceError, match="unreachable"):
        ds.fetch_current_dvol("BTC")


def test_satisfies_protocol():
    assert isinstance(DeribitDataSource(), VolatilityDataSource)
    assert dvol_index_name("SOL") == "soldvol_usdc"
