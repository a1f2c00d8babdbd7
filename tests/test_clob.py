"""Tests for the authenticated CLOB client."""

from __future__ import annotations

import base64
import hashlib
import hmac
import json

import httpx
import pytest
import respx

from binary_edge.common.errors import ConfigurationError, TransportError
from binary_edge.engine.models import LogAction
from binary_edge.engine.monitor import monitor_positions
from binary_edge.engine.sizing import size_positions
from binary_edge.venue.clob import ClobClient, ClobCredentials, sign_request
from binary_edge.venue.models import OrderRequest

from conftest import make_signal

BASE = "https://clob.polymarket.com"
SECRET = base64.b64encode(b"secret-key").decode()
NOW = 1700000000.0


@pytest.fixture
def creds():
    return ClobCredentials(api_key="key-1", secret=SECRET, passphrase="pass-1", proxy_wallet="0xabc")


@pytest.fixture
def client(creds):
    return ClobClient(creds, base_url=BASE, time_fn=lambda: NOW)


def _expected_signature(message: str) -> str:
    digest = hmac.new(b"secret-key", message.encode(), hashlib.sha256).digest()
    return base64.b64encode(digest).decode()


def test_sign_request():
    sig = sign_request(SECRET, "1700000000", "POST", "/order", '{"a":1}')
    assert sig == _expected_signature('1700000000POST/order{"a":1}')


def test_sign_request_depends_on_body():
    a = sign_request(SECRET, "1", "POST", "/order", "{}")
    b = sign_request(SECRET, "1", "POST", "/order", '{"x":1}')
    assert a != b


def test_missing_credentials():
    creds = ClobCredentials(api_key="k", secret="", passphrase="", proxy_wallet="0x1")
    with pytest.raises(ConfigurationError, match="CLOB_SECRET, CLOB_PASSPHRASE"):
        ClobClient(creds)


def test_from_settings_requires_credentials(settings):
    with pytest.raises(ConfigurationError):
        ClobClient.from_settings(settings.model_copy(update={"clob_api_key": ""}))


@respx.mock
@pytest.mark.asyncio
async def test_get_balance_signed(client):
    route = respx.get(f"{BASE}/balance").mock(return_value=httpx.Response(200, json={"balance": "1234.5"}))

    assert await client.get_balance() == 1234.5

    headers = route.calls.last.request.headers
    assert headers["POLY-API-KEY"] == "key-1"
    assert headers["POLY-PASSPHRASE"] == "pass-1"
    assert headers["POLY-TIMESTAMP"] == "1700000000"
    assert headers["POLY-SIGNATURE"] == _expected_signature("1700000000GET/balance")


@respx.mock
@pytest.mark.asyncio
async def test_malformed_balance(client):
    respx.get(f"{BASE}/balance").mock(return_value=httpx.Response(200, json={"cash": 1}))
    with pytest.raises(TransportError, match="Malformed balance"):
        await client.get_balance()


@respx.mock
@pytest.mark.asyncio
async def test_non_2xx_is_transport_error(client):
    respx.get(f"{BASE}/balance").mock(return_value=httpx.Response(401, text="Unauthorized"))
    with pytest.raises(TransportError, match=r"CLOB GET /balance failed \(401\): Unauthorized"):
        await client.get_balance()


@respx.mock
@pytest.mark.asyncio
async def test_network_error_is_transport_error(client):
    respx.get(f"{BASE}/balance").mock(side_effect=httpx.ConnectTimeout("timed out"))
    with pytest.raises(TransportError):
        await client.get_balance()


@respx.mock
@pytest.mark.asyncio
async def test_invalid_json_is_transport_error(client):
    respx.get(f"{BASE}/balance").mock(return_value=httpx.Response(200, text="<html>"))
    with pytest.raises(TransportError, match="malformed JSON"):
        await client.get_balance()


@respx.mock
@pytest.mark.asyncio
async def test_get_open_orders(client):
    respx.get(f"{BASE}/orders").mock(
        return_value=httpx.Response(
            200,
            json=[
                {
                    "id": "o1",
                    "asset_id": "111",
                    "side": "BUY",
                    "price": "0.45",
                    "original_size": "50",
                    "size_matched": "20",
                    "market": "cond-btc",
                    "status": "LIVE",
                },
            ],
        )
    )

    orders = await client.get_open_orders()

    assert len(orders) == 1
    order = orders[0]
    assert order.order_id == "o1"
    assert order.remaining_size == 30.0
    assert order.remaining_notional == pytest.approx(13.5)


@respx.mock
@pytest.mark.asyncio
async def test_get_open_orders_for_market(client):
    route = respx.get(f"{BASE}/orders", params={"market": "cond-btc"}).mock(
        return_value=httpx.Response(200, json=[])
    )
    assert await client.get_open_orders("cond-btc") == []
    assert route.call_count == 1


@respx.mock
@pytest.mark.asyncio
async def test_get_filled_orders(client):
    respx.get(f"{BASE}/trades").mock(
        return_value=httpx.Response(
            200,
            json=[{"id": "t1", "asset_id": "111", "side": "BUY", "price": "0.45", "size": "10",
                   "match_time": "1700000000"}],
        )
    )
    fills = await client.get_filled_orders()
    assert fills[0].trade_id == "t1"
    assert fills[0].size == 10.0
    assert fills[0].match_time == 1700000000


@respx.mock
@pytest.mark.asyncio
async def test_place_order(client):
    route = respx.post(f"{BASE}/order").mock(
        return_value=httpx.Response(200, json={"orderID": "0xdead", "status": "LIVE"})
    )
    order = OrderRequest(token_id="111", price=0.45, size=50, side="BUY")

    response = await client.place_order(order)

    assert response.order_id == "0xdead"
    assert response.status == "LIVE"
    request = route.calls.last.request
    body = request.content.decode()
    assert json.loads(body) == {"tokenID": "111", "price": 0.45, "size": 50, "side": "BUY", "expiration": 0}
    assert request.headers["POLY-SIGNATURE"] == _expected_signature(f"1700000000POST/order{body}")


@respx.mock
@pytest.mark.asyncio
async def test_place_order_not_retried(client):
    route = respx.post(f"{BASE}/order").mock(return_value=httpx.Response(503, text="busy"))
    order = OrderRequest(token_id="111", price=0.45, size=50, side="BUY")

    with pytest.raises(TransportError, match=r"\(503\)"):
        await client.place_order(order)
    assert route.call_count == 1


@respx.mock
@pytest.mark.asyncio
async def test_place_order_rejected(client):
    respx.post(f"{BASE}/order").mock(
        return_value=httpx.Response(200, json={"success": False, "errorMsg": "not enough balance"})
    )
    with pytest.raises(TransportError, match="Order rejected"):
        await client.place_order(OrderRequest(token_id="111", price=0.45, size=50, side="BUY"))


@respx.mock
@pytest.mark.asyncio
async def test_cancel_order(client):
    respx.delete(f"{BASE}/order/o1").mock(return_value=httpx.Response(200, json={"success": True}))
    assert await client.cancel_order("o1") is True


@respx.mock
@pytest.mark.asyncio
async def test_malformed_open_order_row(client):
    respx.get(f"{BASE}/orders").mock(
        return_value=httpx.Response(200, json=[{"id": "o1", "price": "n/a", "original_size": "10"}])
    )
    with pytest.raises(TransportError, match="Malformed open orders"):
        await client.get_open_orders()


@respx.mock
@pytest.mark.asyncio
async def test_non_dict_open_order_row(client):
    respx.get(f"{BASE}/orders").mock(return_value=httpx.Response(200, json=["garbage"]))
    with pytest.raises(TransportError, match="Malformed open orders"):
        await client.get_open_orders()


@respx.mock
@pytest.mark.asyncio
async def test_malformed_trade_row(client):
    respx.get(f"{BASE}/trades").mock(return_value=httpx.Response(200, json=[{"size": "lots"}, 7]))
    with pytest.raises(TransportError, match="Malformed trades"):
        await client.get_filled_orders()


@respx.mock
@pytest.mark.asyncio
async def test_malformed_orders_fall_back_to_zero_exposure(client, settings):
    respx.get(f"{BASE}/balance").mock(return_value=httpx.Response(200, json={"balance": "1000"}))
    respx.get(f"{BASE}/orders").mock(
        return_value=httpx.Response(200, json=[{"id": "o1", "price": "n/a", "original_size": "10"}])
    )

    positions, logs = await size_positions([make_signal()], client, settings)

    assert len(positions) == 1
    assert positions[0].size_usd == pytest.approx(25.0)
    assert [e.action for e in logs] == [LogAction.ERROR]
    assert "assuming zero existing exposure" in logs[0].details


@respx.mock
@pytest.mark.asyncio
async def test_malformed_orders_monitor_single_error(client):
    respx.get(f"{BASE}/orders").mock(return_value=httpx.Response(200, json=["garbage"]))

    logs = await monitor_positions(client)

    assert len(logs) == 1
    assert logs[0].action is LogAction.ERROR
    assert logs[0].details.startswith("Monitor failed: Malformed open orders response")
