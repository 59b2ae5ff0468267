"""Request descriptors for the five supported Upbit operations."""

from __future__ import annotations

import re
from decimal import ROUND_DOWN, Decimal
from typing import Any, Mapping
from urllib.parse import urlencode

from .errors import InvalidArgument, UnsupportedOrderType
from .protocol import CanonicalSymbol, RequestDescriptor
from .symbols import encode_market

TRADE_STATES = ("done", "cancel", "wait")

# canonical side -> vendor side
SIDES = {"buy": "bid", "sell": "ask"}

DEFAULT_TRADING_FEE = 0.0015

_PLACEHOLDER = re.compile(r"\{([^}]+)\}")

_STEP = Decimal("1e-8")


def to_decimal(value: float | Decimal) -> Decimal:
    return value if isinstance(value, Decimal) else Decimal(str(value))


def format_number(value: float | Decimal) -> str:
    """Render a number truncated to 8 decimals, without exponent or trailing zeros.

    Truncation is toward zero so an order never exceeds the requested amount.
    """
    quantized = to_decimal(value).quantize(_STEP, rounding=ROUND_DOWN)
    text = format(quantized, "f").rstrip("0").rstrip(".")
    return text if text not in ("", "-0") else "0"


def urlencode_params(params: Mapping[str, Any]) -> str:
    """URL-encode parameters in their insertion order."""
    return urlencode([(key, _stringify(value)) for key, value in params.items()])


def _stringify(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (float, Decimal)):
        return format_number(value)
    return str(value)


def implode_path(path: str, params: Mapping[str, Any]) -> tuple[str, dict[str, Any]]:
    """Substitute ``{name}`` placeholders and return the leftover params."""
    used = set(_PLACEHOLDER.findall(path))
    missing = used - set(params)
    if missing:
        raise ValueError(f"Missing path parameters for {path}: {sorted(missing)}")
    rendered = _PLACEHOLDER.sub(lambda m: str(params[m.group(1)]), path)
    rest = {k: v for k, v in params.items() if k not in used}
    return rendered, rest


def build_descriptor(
    path: str,
    method: str = "GET",
    params: Mapping[str, Any] | None = None,
    *,
    requires_auth: bool = False,
) -> RequestDescriptor:
    """Place parameters by method: GET in the query, anything else in the body."""
    rendered, rest = implode_path(path, params or {})
    method = method.upper()
    if method == "GET":
        return RequestDescriptor(rendered, method, query=rest, requires_auth=requires_auth)
    return RequestDescriptor(rendered, method, query={}, body=rest, requires_auth=requires_auth)


class RequestBuilder:
    """Turns logical operations into request descriptors."""

    def __init__(self, trading_fee: float = DEFAULT_TRADING_FEE):
        self.trading_fee = trading_fee

    def order_book(self, symbol: CanonicalSymbol | str) -> RequestDescriptor:
        return build_descriptor("orderbook", "GET", {"markets": encode_market(symbol)})

    def balance(self) -> RequestDescriptor:
        return build_descriptor("accounts", "GET", requires_auth=True)

    def my_trades(self, symbol: CanonicalSymbol | str, state: str) -> RequestDescriptor:
        if state not in TRADE_STATES:
            raise InvalidArgument(
                f"upbit order state {state!r} is not one of {', '.join(TRADE_STATES)}"
            )
        return build_descriptor(
            "orders",
            "GET",
            {"market": encode_market(symbol), "state": state, "order_by": "desc"},
            requires_auth=True,
        )

    def create_order(
        self,
        symbol: CanonicalSymbol | str,
        type: str,
        side: str,
        amount: float,
        price: float | None,
    ) -> RequestDescriptor:
        """Build a limit order.

        The fee on this vendor is withheld from the quote balance, so buy
        volume is reduced by the fee factor to keep the total within budget.
        """
        if type != "limit":
            raise UnsupportedOrderType(f"upbit supports limit orders only, got {type!r}")
        if side not in SIDES:
            raise InvalidArgument(f"upbit order side must be buy or sell, got {side!r}")
        if price is None or price <= 0:
            raise InvalidArgument(f"upbit limit order requires a positive price, got {price!r}")
        if amount <= 0:
            raise InvalidArgument(f"upbit order amount must be positive, got {amount!r}")

        market = encode_market(symbol)
        volume = to_decimal(amount)
        if side == "buy":
            volume *= 1 - to_decimal(self.trading_fee)
        if volume.quantize(_STEP, rounding=ROUND_DOWN) <= 0:
            raise InvalidArgument(f"upbit order amount {amount!r} is below the 1e-8 volume step")

        return build_descriptor(
            "orders",
            "POST",
            {
                "market": market,
                "side": SIDES[side],
                "volume": format_number(volume),
                "price": format_number(price),
                "ord_type": "limit",
            },
            requires_auth=True,
        )

    def cancel_order(self, order_id: str) -> RequestDescriptor:
        if not order_id:
            raise InvalidArgument("upbit cancel requires an order id")
        return build_descriptor("order", "DELETE", {"uuid": order_id}, requires_auth=True)
