"""Pytest configuration and fixtures."""

import json
from unittest.mock import AsyncMock, MagicMock

import pytest

from upbitkit.exchanges.auth import BearerTokenAuth, HmacDigestAuth
from upbitkit.exchanges.protocol import Credentials, TransportResponse
from upbitkit.exchanges.upbit import UpbitClient

FIXED_MS = 1700000000000


def make_response(payload=None, status=200, body=None):
    """Create a transport response from a payload or raw body."""
    if body is None:
        body = json.dumps(payload)
    return TransportResponse(status, {"Content-Type": "application/json"}, body)


def make_transport(*responses):
    """Create a mock transport returning ``responses`` in order."""
    transport = MagicMock()
    transport.perform = AsyncMock(side_effect=list(responses))
    transport.close = AsyncMock()
    return transport


@pytest.fixture
def access_key():
    """Test access key."""
    return "test_access_key_123456"


@pytest.fixture
def secret():
    """Test secret key."""
    return "test_secret_key_789012"


@pytest.fixture
def credentials(access_key, secret):
    return Credentials(access_key, secret)


@pytest.fixture
def clock():
    return lambda: FIXED_MS


@pytest.fixture
def jwt_auth(credentials):
    return BearerTokenAuth(credentials)


@pytest.fixture
def hmac_auth(credentials):
    return HmacDigestAuth(credentials)


@pytest.fixture
def client_factory(jwt_auth, clock):
    """Build an UpbitClient over a mock transport."""

    def _make(*responses, auth=None):
        return UpbitClient(auth or jwt_auth, make_transport(*responses), clock=clock)

    return _make


@pytest.fixture
def sample_orderbook_response():
    """Current unit-array order book shape."""
    return [
        {
            "market": "KRW-BTC",
            "timestamp": 1529910247984,
            "total_ask_size": 8.83621228,
            "total_bid_size": 2.43976741,
            "orderbook_units": [
                {"ask_price": 6956000.0, "bid_price": 6954000.0, "ask_size": 0.24078656, "bid_size": 0.00718341},
                {"ask_price": 6958000.0, "bid_price": 6953000.0, "ask_size": 1.12919, "bid_size": 0.11500074},
            ],
        }
    ]


@pytest.fixture
def sample_accounts_response():
    return [
        {"currency": "KRW", "balance": "1000000.0", "locked": "0.0", "avg_buy_price": "0", "unit_currency": "KRW"},
        {"currency": "BTC", "balance": "2.0", "locked": "0.5", "avg_buy_price": "101000", "unit_currency": "KRW"},
    ]


@pytest.fixture
def done_orders_response():
    return [
        {
            "uuid": "a-newest",
            "side": "ask",
            "ord_type": "limit",
            "price": "50100.0",
            "avg_price": "50000.0",
            "state": "done",
            "market": "KRW-BTC",
            "created_at": "2018-04-10T15:42:23+09:00",
            "volume": "2.0",
            "executed_volume": "2.0",
            "paid_fee": "15.0",
        },
        {
            "uuid": "c-oldest",
            "side": "bid",
            "ord_type": "limit",
            "price": "1000.0",
            "state": "done",
            "market": "KRW-BTC",
            "created_at": "2018-04-08T10:00:00+09:00",
            "volume": "1.0",
            "executed_volume": "1.0",
            "paid_fee": "1.5",
        },
    ]


@pytest.fixture
def cancel_orders_response():
    return [
        {
            "uuid": "b-middle",
            "side": "bid",
            "ord_type": "limit",
            "price": "2000.0",
            "avg_price": "0",
            "state": "cancel",
            "market": "KRW-BTC",
            "created_at": "2018-04-09T12:00:00+09:00",
            "volume": "1.0",
            "executed_volume": "0.5",
            "paid_fee": "1.5",
        },
    ]
