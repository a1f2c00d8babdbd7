"""Polymarket CLOB API client.

HMAC-SHA256 authenticated calls for balance, open orders, fills and order
placement. Every failure surfaces as TransportError.
"""

from __future__ import annotations

import base64
import hashlib
import hmac
import json
import logging
import time
from collections.abc import Callable
from dataclasses import dataclass

import httpx

from binary_edge.common.errors import ConfigurationError, TransportError
from binary_edge.common.http import HttpClient
from binary_edge.config import Settings
from binary_edge.venue.models import FilledOrder, OpenOrder, OrderRequest, OrderResponse

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ClobCredentials:
    """L2 API credentials for one trading account."""

    api_key: str
    secret: str
    passphrase: str
    proxy_wallet: str

    @classmethod
    def from_settings(cls, settings: Settings) -> ClobCredentials:
        creds = cls(
            api_key=settings.clob_api_key,
            secret=settings.clob_secret,
            passphrase=settings.clob_passphrase,
            proxy_wallet=settings.proxy_wallet,
        )
        creds.validate()
        return creds

    def validate(self) -> None:
        missing = [
            name for name, value in (
                ("CLOB_API_KEY", self.api_key),
                ("CLOB_SECRET", self.secret),
                ("CLOB_PASSPHRASE", self.passphrase),
                ("PROXY_WALLET", self.proxy_wallet),
            )
            if not value
        ]
        if missing:
            raise ConfigurationError(f"Missing Polymarket CLOB credentials: {', '.join(missing)}")


def sign_request(secret: str, timestamp: str, method: str, path: str, body: str) -> str:
    """Base64 HMAC-SHA256 of timestamp + method + path + body, keyed by the base64 secret."""
    key = base64.b64decode(secret)
    message = (timestamp + method + path + body).encode("utf-8")
    digest = hmac.new(key, message, hashlib.sha256).digest()
    return base64.b64encode(digest).decode("ascii")


class ClobClient:
    """Authenticated CLOB client bound to one set of credentials."""

    def __init__(
        self,
        credentials: ClobCredentials,
        base_url: str = "https://clob.polymarket.com",
        timeout: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
        time_fn: Callable[[], float] = time.time,
    ) -> None:
        credentials.validate()
        self._creds = credentials
        self._time_fn = time_fn
        self._http = HttpClient(base_url=base_url, timeout=timeout, transport=transport)

    @classmethod
    def from_settings(cls, settings: Settings) -> ClobClient:
        return cls(
            ClobCredentials.from_settings(settings),
            base_url=settings.clob_api_url,
            timeout=settings.http_timeout,
        )

    def _headers(self, method: str, path: str, body: str) -> dict[str, str]:
        timestamp = str(int(self._time_fn()))
        return {
            "Content-Type": "application/json",
            "POLY-API-KEY": self._creds.api_key,
            "POLY-SIGNATURE": sign_request(self._creds.secret, timestamp, method, path, body),
            "POLY-TIMESTAMP": timestamp,
            "POLY-PASSPHRASE": self._creds.passphrase,
        }

    async def _call(self, method: str, path: str, payload: dict | None = None) -> object:
        body = json.dumps(payload, separators=(",", ":")) if payload is not None else ""
        try:
            resp = await self._http.request(
                method, path, headers=self._headers(method, path, body), content=body or None,
            )
            return resp.json()
        except httpx.HTTPStatusError as exc:
            raise TransportError(
                f"CLOB {method} {path} failed ({exc.response.status_code}): {exc.response.text}"
            ) from exc
        except httpx.HTTPError as exc:
            raise TransportError(f"CLOB {method} {path} failed: {exc!r}") from exc
        except ValueError as exc:
            raise TransportError(f"CLOB {method} {path} returned malformed JSON") from exc

    async def get_balance(self) -> float:
        """USDC balance available for trading."""
        data = await self._call("GET", "/balance")
        try:
            return float(data["balance"])  # type: ignore[index]
        except (KeyError, TypeError, ValueError) as exc:
            raise TransportError(f"Malformed balance response: {data!r}") from exc

    async def get_open_orders(self, market: str | None = None) -> list[OpenOrder]:
        path = f"/orders?market={market}" if market else "/orders"
        data = await self._call("GET", path)
        if not isinstance(data, list):
            raise TransportError(f"Malformed open orders response: {data!r}")
        try:
            return [OpenOrder.from_api(raw) for raw in data]
        except (AttributeError, KeyError, TypeError, ValueError) as exc:
            raise TransportError(f"Malformed open orders response: {exc}") from exc

    async def get_filled_orders(self, market: str | None = None) -> list[FilledOrder]:
        path = f"/trades?market={market}" if market else "/trades"
        data = await self._call("GET", path)
        if not isinstance(data, list):
            raise TransportError(f"Malformed trades response: {data!r}")
        try:
            return [FilledOrder.from_api(raw) for raw in data]
        except (AttributeError, KeyError, TypeError, ValueError) as exc:
            raise TransportError(f"Malformed trades response: {exc}") from exc

    async def place_order(self, order: OrderRequest) -> OrderResponse:
        """Place a limit order. Single attempt, never retried."""
        data = await self._call("POST", "/order", order.to_payload())
        if not isinstance(data, dict) or not data.get("orderID"):
            raise TransportError(f"Order rejected: {data!r}")
        logger.info("Placed %s %d @ %.2f on %s -> %s", order.side, order.size, order.price,
                    order.token_id, data["orderID"])
        return OrderResponse(order_id=str(data["orderID"]), status=str(data.get("status", "")))

    async def cancel_order(self, order_id: str) -> bool:
        data = await self._call("DELETE", f"/order/{order_id}")
        return bool(isinstance(data, dict) and data.get("success"))

    async def close(self) -> None:
        await self._http.close()

    async def __aenter__(self) -> ClobClient:
        return self

    async def __aexit__(self, *args: object) -> None:
        await self.close()
