"""Normalization of Upbit JSON payloads into canonical records."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Iterable, Mapping

from .errors import MalformedResponse
from .protocol import OrderBook, OrderHandle, Trade

logger = logging.getLogger(__name__)

# vendor side -> canonical side
SIDES = {"bid": "buy", "ask": "sell"}


def _float(value: Any, what: str) -> float:
    if value is None or isinstance(value, bool):
        raise MalformedResponse(f"upbit {what} is missing")
    try:
        return float(value)
    except (TypeError, ValueError):
        raise MalformedResponse(f"upbit {what} is not numeric: {value!r}") from None


def _mapping(value: Any, what: str) -> Mapping[str, Any]:
    if not isinstance(value, Mapping):
        raise MalformedResponse(f"upbit {what} must be an object, got {type(value).__name__}")
    return value


def _list(value: Any, what: str) -> list[Any]:
    if not isinstance(value, list):
        raise MalformedResponse(f"upbit {what} must be a list, got {type(value).__name__}")
    return value


def parse_timestamp(value: Any) -> int:
    """Convert a vendor time (ISO-8601 string or epoch millis) to epoch millis."""
    if isinstance(value, bool):
        raise MalformedResponse(f"upbit timestamp is invalid: {value!r}")
    if isinstance(value, (int, float)):
        return int(value)
    if isinstance(value, str):
        if value.isdigit():
            return int(value)
        try:
            parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
        except ValueError:
            raise MalformedResponse(f"upbit timestamp is invalid: {value!r}") from None
        if parsed.tzinfo is None:
            parsed = parsed.replace(tzinfo=timezone.utc)
        return int(parsed.timestamp() * 1000)
    raise MalformedResponse(f"upbit timestamp is missing or invalid: {value!r}")


def parse_order_book(response: Any, symbol: str, fallback_timestamp: int) -> OrderBook:
    """Build an order book from either vendor shape.

    The current shape is a list of snapshots, each with ``orderbook_units``
    holding one bid and one ask per unit; vendor order is kept as-is. The
    legacy shape nests pre-split ``bids``/``asks`` of ``price``/``quantity``
    under ``data``; those levels are sorted (bids descending, asks ascending).
    """
    if isinstance(response, Mapping) and "data" in response:
        return _parse_keyed_order_book(_mapping(response["data"], "orderbook data"), symbol, fallback_timestamp)

    snapshots = _list(response, "orderbook response")
    if not snapshots:
        raise MalformedResponse(f"upbit returned an empty orderbook for {symbol}")
    snapshot = _mapping(snapshots[0], "orderbook snapshot")

    bids: list[list[float]] = []
    asks: list[list[float]] = []
    for unit in _list(snapshot.get("orderbook_units"), "orderbook_units"):
        unit = _mapping(unit, "orderbook unit")
        bids.append([_float(unit.get("bid_price"), "bid_price"), _float(unit.get("bid_size"), "bid_size")])
        asks.append([_float(unit.get("ask_price"), "ask_price"), _float(unit.get("ask_size"), "ask_size")])

    timestamp = snapshot.get("timestamp")
    return OrderBook(
        symbol=symbol,
        timestamp=parse_timestamp(timestamp) if timestamp is not None else fallback_timestamp,
        bids=bids,
        asks=asks,
    )


def _parse_keyed_order_book(data: Mapping[str, Any], symbol: str, fallback_timestamp: int) -> OrderBook:
    def levels(key: str) -> list[list[float]]:
        out = []
        for level in _list(data.get(key), key):
            level = _mapping(level, f"{key} level")
            out.append([_float(level.get("price"), "price"), _float(level.get("quantity"), "quantity")])
        return out

    timestamp = data.get("timestamp")
    return OrderBook(
        symbol=symbol,
        timestamp=parse_timestamp(timestamp) if timestamp is not None else fallback_timestamp,
        bids=sorted(levels("bids"), key=lambda level: level[0], reverse=True),
        asks=sorted(levels("asks"), key=lambda level: level[0]),
    )


def parse_balance(response: Any) -> dict[str, float]:
    """Map currency -> free balance. Any bad entry fails the whole call."""
    balances: dict[str, float] = {}
    for account in _list(response, "accounts response"):
        account = _mapping(account, "account")
        currency = account.get("currency")
        if not currency:
            raise MalformedResponse(f"upbit account without currency: {account!r}")
        balances[str(currency).upper()] = _float(account.get("balance"), f"{currency} balance")
    return balances


def parse_trade(order: Any, symbol: str) -> Trade:
    """Convert one vendor order record into a trade.

    Price prefers ``avg_price`` when present and non-zero. Cost nets the fee:
    a sell (``ask``) receives amount*price minus fee, a buy (``bid``) pays
    amount*price plus fee.
    """
    order = _mapping(order, "order")

    vendor_side = order.get("side")
    if vendor_side not in SIDES:
        raise MalformedResponse(f"upbit order side is invalid: {vendor_side!r}")

    amount = _float(order.get("executed_volume"), "executed_volume")
    avg_price = order.get("avg_price")
    if avg_price is not None and _float(avg_price, "avg_price") != 0:
        price = _float(avg_price, "avg_price")
    else:
        price = _float(order.get("price"), "price")
    fee = _float(order.get("paid_fee", 0), "paid_fee")

    cost = amount * price
    cost = cost - fee if vendor_side == "ask" else cost + fee

    order_id = order.get("uuid")
    if not order_id:
        raise MalformedResponse(f"upbit order without uuid: {order!r}")

    return Trade(
        id=str(order_id),
        timestamp=parse_timestamp(order.get("created_at")),
        symbol=symbol,
        side=SIDES[vendor_side],
        price=price,
        amount=amount,
        cost=cost,
        fee=fee,
    )


def parse_trades(response: Any, symbol: str) -> list[Trade]:
    return [parse_trade(order, symbol) for order in _list(response, "orders response")]


def merge_trades(*batches: Iterable[Trade]) -> list[Trade]:
    """Concatenate batches, drop repeated ids, newest first."""
    seen: set[str] = set()
    merged: list[Trade] = []
    for batch in batches:
        for trade in batch:
            if trade.id in seen:
                logger.debug("Dropping duplicate trade %s", trade.id)
                continue
            seen.add(trade.id)
            merged.append(trade)
    merged.sort(key=lambda trade: trade.timestamp, reverse=True)
    return merged


def parse_order_handle(response: Any) -> OrderHandle:
    response = _mapping(response, "order response")
    order_id = response.get("uuid")
    if not order_id:
        raise MalformedResponse(f"upbit order response without uuid: {response!r}")
    return OrderHandle(str(order_id))
