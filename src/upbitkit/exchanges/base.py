"""Signed request pipeline shared by the adapter operations."""

from __future__ import annotations

import json
import logging
import time
from typing import Any, Callable

from .auth import AuthStrategy
from .builder import urlencode_params
from .classifier import ErrorClassifier
from .errors import MalformedResponse
from .protocol import RequestDescriptor, SignedEnvelope, Transport

logger = logging.getLogger(__name__)


def milliseconds() -> int:
    """Current wall-clock time in epoch milliseconds."""
    return int(time.time() * 1000)


class BaseExchangeClient:
    """Sign, dispatch, classify and decode one request at a time.

    Holds no per-call state: credentials live inside the auth strategy and are
    read-only, so operations may run concurrently on one instance.
    """

    def __init__(
        self,
        name: str,
        auth: AuthStrategy,
        transport: Transport,
        *,
        base_url: str,
        clock: Callable[[], int] = milliseconds,
        classifier: ErrorClassifier | None = None,
    ):
        """Initialize exchange client.

        Args:
            name: Exchange identifier, prefixed to every error message
            auth: Signing strategy bound to the credentials
            transport: Capability that performs HTTP requests
            base_url: API root shared by public and private calls
            clock: Millisecond clock used for nonces and fallback timestamps
            classifier: Response classifier (defaults to one named after the exchange)
        """
        self.name = name
        self.auth = auth
        self.transport = transport
        self.base_url = base_url.rstrip("/")
        self.clock = clock
        self.classifier = classifier or ErrorClassifier(name)

    def nonce(self) -> str:
        return str(self.clock())

    def sign(self, descriptor: RequestDescriptor) -> SignedEnvelope:
        """Turn a descriptor into a transport-ready envelope."""
        url = f"{self.base_url}/{descriptor.path.lstrip('/')}"
        if descriptor.query:
            url += "?" + urlencode_params(descriptor.query)

        body = urlencode_params(descriptor.body) if descriptor.body else None

        if not descriptor.requires_auth:
            return SignedEnvelope(url, descriptor.method, {}, body)

        signed = self.auth.sign(descriptor, self.nonce())
        headers = {"Accept": "application/json"}
        headers.update(signed.headers)
        if signed.body is not None:
            body = signed.body
        if body is not None:
            headers["Content-Type"] = "application/x-www-form-urlencoded"

        return SignedEnvelope(url, descriptor.method, headers, body)

    async def request(self, descriptor: RequestDescriptor) -> Any:
        """Run the full pipeline and return the decoded payload.

        Raises:
            ConfigurationError: Missing credentials, before any network call
            DomainError: Vendor rejected the request
            MalformedResponse: Body was not valid JSON
            TransportError: Network failure, passed through unchanged
        """
        envelope = self.sign(descriptor)
        logger.debug("%s %s %s", self.name, envelope.method, descriptor.path)

        response = await self.transport.perform(
            envelope.url, envelope.method, envelope.headers, envelope.body
        )

        self.classifier.check_raw(response.status, response.body)
        self.classifier.default_error_handler(response.status, response.body)

        try:
            payload = json.loads(response.body)
        except ValueError as e:
            raise MalformedResponse(
                f"{self.name} {descriptor.method} {descriptor.path} returned non-JSON body: {response.body[:200]!r}"
            ) from e

        self.classifier.check_decoded(payload)
        return payload

    async def close(self) -> None:
        """Close connections."""
        await self.transport.close()

    async def __aenter__(self) -> "BaseExchangeClient":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()
