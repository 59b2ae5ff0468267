"""Authentication strategies for signed Upbit requests.

The vendor has used two incompatible schemes over its API revisions: a
bearer JSON Web Token (current) and an HMAC-SHA512 digest sent in ``Api-*``
headers (legacy). An adapter instance commits to one at construction.
"""

from __future__ import annotations

import base64
import hashlib
import hmac
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field

import jwt

from .builder import urlencode_params
from .errors import MissingCredentials
from .protocol import Credentials, RequestDescriptor

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class AuthResult:
    """Headers to add and, if set, the body to send instead of the default."""

    headers: dict[str, str] = field(default_factory=dict)
    body: str | None = None


class AuthStrategy(ABC):
    """Signs a request descriptor with the instance credentials."""

    scheme: str = ""

    def __init__(self, credentials: Credentials):
        self.credentials = credentials

    def check_credentials(self) -> None:
        if not self.credentials.access_key or not self.credentials.secret:
            raise MissingCredentials(
                f"upbit requires access_key and secret for {self.scheme} signed requests"
            )

    def sign(self, descriptor: RequestDescriptor, nonce: str) -> AuthResult:
        """Sign ``descriptor`` using ``nonce``.

        Raises:
            MissingCredentials: Before any cryptographic work if keys are absent
        """
        self.check_credentials()
        return self._sign(descriptor, nonce)

    @abstractmethod
    def _sign(self, descriptor: RequestDescriptor, nonce: str) -> AuthResult:
        ...


class BearerTokenAuth(AuthStrategy):
    """JWT claims signed with HS256, sent as ``Authorization: Bearer``."""

    scheme = "jwt"
    algorithm = "HS256"

    def claims(self, descriptor: RequestDescriptor, nonce: str) -> dict[str, str]:
        """Signed claims; ``query`` covers URL params on GET and the form body otherwise."""
        claims = {
            "access_key": self.credentials.access_key,
            "nonce": nonce,
        }
        params = descriptor.params
        if params:
            claims["query"] = urlencode_params(params)
        return claims

    def _sign(self, descriptor: RequestDescriptor, nonce: str) -> AuthResult:
        token = jwt.encode(
            self.claims(descriptor, nonce),
            self.credentials.secret,
            algorithm=self.algorithm,
        )
        return AuthResult(headers={"Authorization": f"Bearer {token}"})


class HmacDigestAuth(AuthStrategy):
    """HMAC-SHA512 over ``endpoint \\0 body \\0 nonce`` sent in ``Api-*`` headers."""

    scheme = "hmac"

    @staticmethod
    def endpoint(descriptor: RequestDescriptor) -> str:
        return "/" + descriptor.path.lstrip("/")

    def payload(self, descriptor: RequestDescriptor) -> str:
        endpoint = self.endpoint(descriptor)
        return urlencode_params({"endpoint": endpoint, **descriptor.params})

    def signature(self, endpoint: str, payload: str, nonce: str) -> str:
        message = "\0".join([endpoint, payload, nonce])
        digest = hmac.new(
            self.credentials.secret.encode(),
            message.encode(),
            hashlib.sha512,
        ).digest()
        return base64.b64encode(digest).decode()

    def _sign(self, descriptor: RequestDescriptor, nonce: str) -> AuthResult:
        payload = self.payload(descriptor)
        headers = {
            "Api-Key": self.credentials.access_key,
            "Api-Sign": self.signature(self.endpoint(descriptor), payload, nonce),
            "Api-Nonce": nonce,
        }
        body = payload if descriptor.method != "GET" else None
        return AuthResult(headers=headers, body=body)


AUTH_STRATEGIES: dict[str, type[AuthStrategy]] = {
    BearerTokenAuth.scheme: BearerTokenAuth,
    HmacDigestAuth.scheme: HmacDigestAuth,
}


def create_auth_strategy(scheme: str, credentials: Credentials) -> AuthStrategy:
    """Instantiate the strategy registered for ``scheme`` (jwt or hmac)."""
    try:
        strategy_class = AUTH_STRATEGIES[scheme.lower()]
    except KeyError:
        supported = ", ".join(AUTH_STRATEGIES)
        raise ValueError(f"Unsupported auth scheme: {scheme}. Supported schemes: {supported}") from None
    logger.debug("Using %s request signing", strategy_class.scheme)
    return strategy_class(credentials)
