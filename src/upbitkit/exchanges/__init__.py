"""Upbit adapter and its signed request pipeline."""

from .auth import AuthStrategy, BearerTokenAuth, HmacDigestAuth, create_auth_strategy
from .base import BaseExchangeClient
from .classifier import ErrorClassifier
from .errors import (
    ConfigurationError,
    DomainError,
    ExchangeError,
    FeatureRetired,
    MalformedResponse,
    MissingCredentials,
    InvalidSymbolFormat,
    TransportError,
    UnsupportedOperation,
    UnsupportedOrderType,
)
from .factory import create_client_from_settings, create_exchange_client
from .protocol import CanonicalSymbol, Credentials, ExchangeClient, OrderBook, OrderHandle, Trade
from .symbols import encode_market, parse_symbol
from .transport import AiohttpTransport, ProxyConfig
from .upbit import UpbitClient

__all__ = [
    "AuthStrategy",
    "BearerTokenAuth",
    "HmacDigestAuth",
    "create_auth_strategy",
    "BaseExchangeClient",
    "ErrorClassifier",
    "ConfigurationError",
    "DomainError",
    "ExchangeError",
    "FeatureRetired",
    "MalformedResponse",
    "MissingCredentials",
    "InvalidSymbolFormat",
    "TransportError",
    "UnsupportedOperation",
    "UnsupportedOrderType",
    "create_client_from_settings",
    "create_exchange_client",
    "CanonicalSymbol",
    "Credentials",
    "ExchangeClient",
    "OrderBook",
    "OrderHandle",
    "Trade",
    "encode_market",
    "parse_symbol",
    "AiohttpTransport",
    "ProxyConfig",
    "UpbitClient",
]
