"""Symbol conversion between canonical pairs and Upbit market codes."""

from __future__ import annotations

from .errors import InvalidSymbolFormat
from .protocol import CanonicalSymbol

SEPARATOR = "/"
MARKET_SEPARATOR = "-"


def parse_symbol(symbol: str) -> CanonicalSymbol:
    """Parse a user-supplied ``BASE/QUOTE`` string.

    - btc/krw -> CanonicalSymbol("BTC", "KRW")
    - " ETH / BTC " -> CanonicalSymbol("ETH", "BTC")

    Args:
        symbol: Pair in slash format

    Returns:
        Canonical symbol with uppercased currency codes

    Raises:
        InvalidSymbolFormat: If the input does not split on exactly one
            separator into two non-empty parts
    """
    if not isinstance(symbol, str):
        raise InvalidSymbolFormat(f"upbit symbol must be a string, got {type(symbol).__name__}")

    parts = symbol.strip().upper().split(SEPARATOR)
    if len(parts) != 2:
        raise InvalidSymbolFormat(f"upbit symbol {symbol!r} must look like BASE/QUOTE")

    base, quote = (p.strip() for p in parts)
    if not base or not quote:
        raise InvalidSymbolFormat(f"upbit symbol {symbol!r} has an empty currency code")

    return CanonicalSymbol(base, quote)


def encode_market(symbol: CanonicalSymbol | str) -> str:
    """Convert a canonical pair into the vendor market code.

    BTC/KRW -> KRW-BTC. Always recomputed, never cached.
    """
    if not isinstance(symbol, CanonicalSymbol):
        symbol = parse_symbol(symbol)
    return f"{symbol.quote}{MARKET_SEPARATOR}{symbol.base}"
