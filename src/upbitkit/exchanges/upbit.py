"""Upbit exchange adapter."""

from __future__ import annotations

import logging
from typing import Any, Callable

from .auth import AuthStrategy
from .base import BaseExchangeClient, milliseconds
from .builder import DEFAULT_TRADING_FEE, RequestBuilder
from .errors import MalformedResponse
from .normalizer import merge_trades, parse_balance, parse_order_book, parse_order_handle, parse_trades
from .protocol import OrderBook, OrderHandle, Trade, Transport
from .symbols import parse_symbol

logger = logging.getLogger(__name__)

BASE_URL = "https://api.upbit.com/v1"

# fetched and merged when no explicit state filter is given
DEFAULT_TRADE_STATES = ("done", "cancel")


class UpbitClient(BaseExchangeClient):
    """Upbit exchange client.

    Exposes order book, balance, own trades, limit order placement and
    cancellation. Every call either returns a fully normalized record or
    raises; there are no retries and no partial results.
    """

    def __init__(
        self,
        auth: AuthStrategy,
        transport: Transport,
        *,
        base_url: str = BASE_URL,
        trading_fee: float = DEFAULT_TRADING_FEE,
        clock: Callable[[], int] = milliseconds,
    ):
        super().__init__("upbit", auth, transport, base_url=base_url, clock=clock)
        self.builder = RequestBuilder(trading_fee)

    async def fetch_order_book(self, symbol: str) -> OrderBook:
        """Fetch the order book for a BASE/QUOTE symbol."""
        canonical = parse_symbol(symbol)
        response = await self.request(self.builder.order_book(canonical))
        return parse_order_book(response, str(canonical), self.clock())

    async def fetch_balance(self) -> dict[str, float]:
        """Fetch free balance per currency."""
        response = await self.request(self.builder.balance())
        return parse_balance(response)

    async def fetch_my_trades(self, symbol: str, state: str | None = None) -> list[Trade]:
        """Fetch own orders as trades, newest first.

        Without ``state`` both finished and cancelled orders are fetched and
        merged; a failure in either request fails the whole call.
        """
        canonical = parse_symbol(symbol)
        states = (state,) if state is not None else DEFAULT_TRADE_STATES
        descriptors = [self.builder.my_trades(canonical, s) for s in states]

        batches = []
        for descriptor in descriptors:
            response = await self.request(descriptor)
            batches.append(parse_trades(response, str(canonical)))

        return merge_trades(*batches)

    async def create_order(
        self,
        symbol: str,
        type: str,
        side: str,
        amount: float,
        price: float | None = None,
    ) -> OrderHandle:
        """Place a limit order and return its vendor id."""
        descriptor = self.builder.create_order(parse_symbol(symbol), type, side, amount, price)
        response = await self.request(descriptor)
        handle = parse_order_handle(response)
        logger.info("upbit %s %s %s @ %s placed as %s", side, amount, symbol, price, handle.id)
        return handle

    async def cancel_order(self, order_id: str) -> dict[str, Any]:
        """Cancel an order; the vendor acknowledgment is returned as-is."""
        response = await self.request(self.builder.cancel_order(order_id))
        if not isinstance(response, dict):
            raise MalformedResponse(f"upbit cancel response must be an object, got {type(response).__name__}")
        logger.info("upbit order %s cancel requested", order_id)
        return response
