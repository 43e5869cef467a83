"""Tests for BinanceClient — HMAC signing + trade history paging."""

import hashlib
import hmac
from unittest.mock import AsyncMock, MagicMock, patch
from urllib.parse import urlencode

import pytest

from cgtcalc.exceptions import ExternalServiceError
from cgtcalc.infra.cex.binance_client import PAGE_LIMIT, BinanceClient


@pytest.fixture()
def mock_http():
    return AsyncMock()


@pytest.fixture()
def client(mock_http):
    return BinanceClient(api_key="test_key", api_secret="test_secret", http_client=mock_http)


def _mock_response(data):
    resp = MagicMock()
    resp.json.return_value = data
    return resp


def _fill(trade_id: int) -> dict:
    return {"id": trade_id, "symbol": "ETHBTC", "qty": "1", "price": "0.05", "isBuyer": True, "time": 1700000000000}


class TestHMACSigning:
    def test_sign_adds_timestamp_and_signature(self, client):
        params = {"symbol": "ETHBTC", "limit": 10}
        with patch("cgtcalc.infra.cex.binance_client.time") as mock_time:
            mock_time.time.return_value = 1700000000.0
            signed = client._sign(params)

        assert signed["timestamp"] == 1700000000000
        query = urlencode({"symbol": "ETHBTC", "limit": 10, "timestamp": 1700000000000})
        expected_sig = hmac.new(b"test_secret", query.encode(), hashlib.sha256).hexdigest()
        assert signed["signature"] == expected_sig

    def test_sign_deterministic(self, client):
        with patch("cgtcalc.infra.cex.binance_client.time") as mock_time:
            mock_time.time.return_value = 1700000000.0
            sig1 = client._sign({"a": "1"})
            sig2 = client._sign({"a": "1"})
        assert sig1["signature"] == sig2["signature"]


class TestGetTrades:
    async def test_request(self, client, mock_http):
        mock_http.get.return_value = _mock_response([_fill(1)])

        result = await client.get_trades("ETHBTC", from_id=42)

        assert result == [_fill(1)]
        url = mock_http.get.call_args[0][0]
        params = mock_http.get.call_args[1]["params"]
        headers = mock_http.get.call_args[1]["headers"]
        assert url.endswith("/api/v3/myTrades")
        assert params["symbol"] == "ETHBTC"
        assert params["fromId"] == 42
        assert params["limit"] == PAGE_LIMIT
        assert "signature" in params
        assert headers == {"X-MBX-APIKEY": "test_key"}

    async def test_non_list_result_is_empty(self, client, mock_http):
        mock_http.get.return_value = _mock_response({"code": 200})
        assert await client.get_trades("ETHBTC") == []

    async def test_api_error_raises_without_retry(self, client, mock_http):
        mock_http.get.return_value = _mock_response({"code": -1121, "msg": "Invalid symbol."})

        with pytest.raises(ExternalServiceError, match="Invalid symbol"):
            await client.get_trades("NOPE")

        assert mock_http.get.call_count == 1


class TestGetTradeHistory:
    async def test_pages_until_empty(self, client, mock_http):
        mock_http.get.side_effect = [
            _mock_response([_fill(1), _fill(5)]),
            _mock_response([_fill(6)]),
            _mock_response([]),
        ]

        trades = await client.get_trade_history("ETHBTC")

        assert [t["id"] for t in trades] == [1, 5, 6]
        from_ids = [call[1]["params"]["fromId"] for call in mock_http.get.call_args_list]
        assert from_ids == [0, 6, 7]

    async def test_no_trades(self, client, mock_http):
        mock_http.get.return_value = _mock_response([])
        assert await client.get_trade_history("ETHBTC") == []
