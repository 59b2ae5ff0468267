"""Classification of raw and decoded Upbit responses into typed errors."""

from __future__ import annotations

import json
import logging
from types import MappingProxyType
from typing import Any, Mapping

from .errors import (
    ERROR_NAME_EXCEPTIONS,
    STATUS_EXCEPTIONS,
    AuthenticationError,
    DomainError,
    ExchangeNotAvailable,
    InvalidOrder,
    OrderNotFound,
    RateLimitExceeded,
    TransportError,
)

logger = logging.getLogger(__name__)

SUCCESS_STATUS = "0000"

HTTP_EXCEPTIONS: MappingProxyType[int, type[Exception]] = MappingProxyType({
    400: InvalidOrder,
    401: AuthenticationError,
    403: AuthenticationError,
    404: OrderNotFound,
    429: RateLimitExceeded,
})


def _compact(payload: Any) -> str:
    return json.dumps(payload, separators=(",", ":"), ensure_ascii=False)


class ErrorClassifier:
    """Decides whether a vendor response is a success or a typed failure.

    The same status check runs on the raw body before decoding and on the
    decoded object afterwards, so both paths always agree.
    """

    def __init__(self, exchange_id: str = "upbit"):
        self.exchange_id = exchange_id

    def feedback(self, payload: Any) -> str:
        return f"{self.exchange_id} {_compact(payload)}"

    def check_raw(self, http_status: int, body: Any) -> None:
        """Pre-flight check on the undecoded body.

        Returns without raising when the body cannot be classified here, which
        leaves it to :meth:`default_error_handler`.
        """
        payload = self._decode(body)
        if payload is None:
            return
        self.check_decoded(payload)

    def check_decoded(self, payload: Any) -> None:
        """Raise the mapped domain error for a non-success ``status`` field."""
        if not isinstance(payload, Mapping) or "status" not in payload:
            return

        status = payload.get("status")
        if status is None:
            return
        status = str(status)
        if status == SUCCESS_STATUS:
            return

        feedback = self.feedback(payload)
        error_class = STATUS_EXCEPTIONS.get(status, DomainError)
        logger.warning("%s rejected request with status %s", self.exchange_id, status)
        raise error_class(feedback)

    def default_error_handler(self, http_status: int, body: Any) -> None:
        """Transport-level handling by HTTP status, used when :meth:`check_raw` declined."""
        if http_status < 400:
            return

        payload = self._decode(body)
        error = payload.get("error") if isinstance(payload, Mapping) else None
        if isinstance(error, Mapping):
            name = str(error.get("name", ""))
            feedback = self.feedback(payload)
            error_class = ERROR_NAME_EXCEPTIONS.get(name)
            if error_class is None:
                error_class = HTTP_EXCEPTIONS.get(http_status, DomainError)
                if http_status >= 500:
                    error_class = ExchangeNotAvailable
            logger.warning("%s HTTP %s error %s", self.exchange_id, http_status, name or "unnamed")
            raise error_class(feedback)

        snippet = body[:200] if isinstance(body, str) else ""
        message = f"{self.exchange_id} HTTP {http_status} {snippet}".rstrip()
        if http_status == 429:
            raise RateLimitExceeded(message)
        if http_status >= 500:
            raise ExchangeNotAvailable(message)
        raise TransportError(message)

    @staticmethod
    def _decode(body: Any) -> Any:
        if not isinstance(body, str) or len(body) < 2:
            return None
        if body[0] not in "{[":
            return None
        try:
            return json.loads(body)
        except ValueError:
            return None
