"""Canonical records and capability protocols for the Upbit adapter."""

from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Mapping, Protocol


def _freeze(params: Mapping[str, Any] | None) -> Mapping[str, Any] | None:
    if params is None:
        return None
    return MappingProxyType(dict(params))


@dataclass(frozen=True, slots=True)
class CanonicalSymbol:
    """Exchange-agnostic currency pair, e.g. BTC/KRW."""

    base: str
    quote: str

    def __str__(self) -> str:
        return f"{self.base}/{self.quote}"


@dataclass(frozen=True, slots=True)
class Credentials:
    """API key pair. Either field may be empty for public-only use."""

    access_key: str | None = None
    secret: str | None = None

    def __repr__(self) -> str:
        return f"Credentials(access_key={'***' if self.access_key else None!r}, secret=***)"


@dataclass(frozen=True, slots=True)
class RequestDescriptor:
    """Canonical description of one vendor call, prior to signing.

    ``query`` and ``body`` keep insertion order and are read-only once built.
    """

    path: str
    method: str = "GET"
    query: Mapping[str, Any] = field(default_factory=dict)
    body: Mapping[str, Any] | None = None
    requires_auth: bool = False

    def __post_init__(self) -> None:
        object.__setattr__(self, "method", self.method.upper())
        object.__setattr__(self, "query", _freeze(self.query))
        object.__setattr__(self, "body", _freeze(self.body))

    @property
    def params(self) -> dict[str, Any]:
        """All non-path parameters, query first."""
        merged = dict(self.query)
        if self.body:
            merged.update(self.body)
        return merged


@dataclass(frozen=True, slots=True)
class SignedEnvelope:
    url: str
    method: str
    headers: Mapping[str, str]
    body: str | None = None


@dataclass(frozen=True, slots=True)
class TransportResponse:
    status: int
    headers: Mapping[str, str]
    body: str


@dataclass(frozen=True, slots=True)
class OrderBook:
    """Order book snapshot.

    Levels are ``[price, size]`` pairs in the order the vendor delivered them.
    """

    symbol: str
    timestamp: int
    bids: list[list[float]]
    asks: list[list[float]]


@dataclass(frozen=True, slots=True)
class Trade:
    id: str
    timestamp: int
    symbol: str
    side: str
    price: float
    amount: float
    cost: float
    fee: float


@dataclass(frozen=True, slots=True)
class OrderHandle:
    id: str


class Transport(Protocol):
    """Capability that performs one HTTP request."""

    async def perform(
        self,
        url: str,
        method: str,
        headers: Mapping[str, str],
        body: str | None,
    ) -> TransportResponse:
        """Send the request and return status, headers and raw body text.

        Raises:
            TransportError: On network failure or timeout
        """
        ...

    async def close(self) -> None:
        ...


class ExchangeClient(Protocol):
    """Public surface of the adapter."""

    name: str

    async def fetch_order_book(self, symbol: str) -> OrderBook:
        ...

    async def fetch_balance(self) -> dict[str, float]:
        ...

    async def fetch_my_trades(self, symbol: str, state: str | None = None) -> list[Trade]:
        ...

    async def create_order(
        self,
        symbol: str,
        type: str,
        side: str,
        amount: float,
        price: float | None = None,
    ) -> OrderHandle:
        ...

    async def cancel_order(self, order_id: str) -> dict[str, Any]:
        ...

    async def close(self) -> None:
        ...
