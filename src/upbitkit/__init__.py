"""upbitkit: signed request pipeline for the Upbit REST API."""

from .settings import Settings
from .exchanges import UpbitClient, create_exchange_client, encode_market, parse_symbol

__all__ = [
    "Settings",
    "UpbitClient",
    "create_exchange_client",
    "encode_market",
    "parse_symbol",
]
