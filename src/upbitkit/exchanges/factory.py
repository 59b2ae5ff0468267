"""Factory for creating the Upbit client from arguments or settings."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, Callable

from .auth import create_auth_strategy
from .base import milliseconds
from .builder import DEFAULT_TRADING_FEE
from .protocol import Credentials, Transport
from .transport import AiohttpTransport, ProxyConfig, Throttle
from .upbit import BASE_URL, UpbitClient

if TYPE_CHECKING:
    from ..settings import Settings

logger = logging.getLogger(__name__)


def create_exchange_client(
    access_key: str | None = None,
    secret: str | None = None,
    *,
    auth_scheme: str = "jwt",
    base_url: str = BASE_URL,
    trading_fee: float = DEFAULT_TRADING_FEE,
    timeout_s: float = 10.0,
    rate_limit_ms: int = 500,
    proxy: dict[str, Any] | None = None,
    transport: Transport | None = None,
    clock: Callable[[], int] = milliseconds,
) -> UpbitClient:
    """Create an Upbit client.

    Args:
        access_key: API access key (optional for public-only use)
        secret: API secret key
        auth_scheme: ``jwt`` (bearer token) or ``hmac`` (legacy Api-* headers)
        base_url: API root
        trading_fee: Fee factor applied to buy volume
        timeout_s: Total request timeout for the default transport
        rate_limit_ms: Minimum spacing between requests for the default transport
        proxy: Proxy configuration (url, username, password)
        transport: Custom transport; overrides timeout, rate limit and proxy
        clock: Millisecond clock

    Returns:
        Configured client

    Raises:
        ValueError: If the auth scheme is not supported
    """
    auth = create_auth_strategy(auth_scheme, Credentials(access_key or None, secret or None))

    if transport is None:
        proxy_config = None
        if proxy:
            proxy_config = ProxyConfig(
                url=proxy.get("url"),
                username=proxy.get("username"),
                password=proxy.get("password"),
            )
        transport = AiohttpTransport(
            proxy=proxy_config,
            timeout_s=timeout_s,
            throttle=Throttle(rate_limit_ms) if rate_limit_ms > 0 else None,
        )

    return UpbitClient(auth, transport, base_url=base_url, trading_fee=trading_fee, clock=clock)


def create_client_from_settings(settings: "Settings", *, transport: Transport | None = None) -> UpbitClient:
    """Create the client described by ``settings.exchange`` and ``settings.proxy``."""
    exchange = settings.exchange

    access_key = secret = None
    if exchange.credentials:
        access_key = exchange.credentials.access_key.get_secret_value()
        secret = exchange.credentials.secret.get_secret_value()
    else:
        logger.warning("upbit has no credentials configured, only public calls will work")

    proxy = None
    if settings.proxy.enabled and settings.proxy.url:
        proxy = {
            "url": settings.proxy.url,
            "username": settings.proxy.username,
            "password": settings.proxy.password.get_secret_value() if settings.proxy.password else None,
        }

    client = create_exchange_client(
        access_key,
        secret,
        auth_scheme=exchange.auth_scheme,
        base_url=exchange.base_url,
        trading_fee=exchange.trading_fee,
        timeout_s=exchange.timeout_s,
        rate_limit_ms=exchange.rate_limit_ms,
        proxy=proxy,
        transport=transport,
    )
    logger.info("Initialized upbit client (%s signing)", exchange.auth_scheme)
    return client
