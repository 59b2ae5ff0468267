"""Typed exception hierarchy for the Upbit adapter.

Lets callers tell local misconfiguration, vendor-side business errors,
contract drift in vendor payloads and network failures apart. Nothing in
this package retries; that decision belongs to the caller.
"""

from __future__ import annotations

from types import MappingProxyType


class ExchangeError(Exception):
    """Base class for all adapter errors."""


class ConfigurationError(ExchangeError):
    """Local setup problem, raised before any network call."""


class MissingCredentials(ConfigurationError):
    """An authenticated call was attempted without access key or secret."""


class InvalidSymbolFormat(ConfigurationError):
    """Symbol is not of the form BASE/QUOTE."""


class InvalidArgument(ConfigurationError):
    """A call argument was rejected locally, before any network call."""


class UnsupportedOperation(ExchangeError):
    """The adapter cannot express the requested operation."""


class UnsupportedOrderType(UnsupportedOperation):
    """Only limit orders are supported."""


class DomainError(ExchangeError):
    """The vendor rejected the request; message embeds its feedback."""


class FeatureRetired(DomainError):
    """Vendor endpoint has been retired."""


class AuthenticationError(DomainError):
    pass


class InsufficientFunds(DomainError):
    pass


class InvalidOrder(DomainError):
    pass


class OrderNotFound(DomainError):
    pass


class MalformedResponse(ExchangeError):
    """A successful response could not be normalized."""


class TransportError(ExchangeError):
    """Network-level failure, passed through unchanged."""


class RequestTimeout(TransportError):
    pass


class ExchangeNotAvailable(TransportError):
    pass


class RateLimitExceeded(TransportError):
    pass


# Vendor "status" codes found in response bodies.
STATUS_EXCEPTIONS: MappingProxyType[str, type[DomainError]] = MappingProxyType({
    # {"status":"5100","message":"After May 23th, recent_transactions is no longer, ..."}
    "5100": FeatureRetired,
})

# Vendor "error.name" values returned with 4xx responses.
ERROR_NAME_EXCEPTIONS: MappingProxyType[str, type[DomainError]] = MappingProxyType({
    "invalid_access_key": AuthenticationError,
    "jwt_verification": AuthenticationError,
    "expired_access_key": AuthenticationError,
    "nonce_used": AuthenticationError,
    "no_authorization_i_p": AuthenticationError,
    "out_of_scope": AuthenticationError,
    "insufficient_funds_bid": InsufficientFunds,
    "insufficient_funds_ask": InsufficientFunds,
    "under_min_total_bid": InvalidOrder,
    "under_min_total_ask": InvalidOrder,
    "invalid_volume_bid": InvalidOrder,
    "invalid_volume_ask": InvalidOrder,
    "invalid_price_bid": InvalidOrder,
    "invalid_price_ask": InvalidOrder,
    "validation_error": InvalidOrder,
    "order_not_found": OrderNotFound,
})
