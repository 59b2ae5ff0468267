"""Tests for response classification."""

import json

import pytest

from upbitkit.exchanges.classifier import HTTP_EXCEPTIONS, ErrorClassifier
from upbitkit.exchanges.errors import (
    STATUS_EXCEPTIONS,
    AuthenticationError,
    DomainError,
    ExchangeNotAvailable,
    FeatureRetired,
    InsufficientFunds,
    OrderNotFound,
    RateLimitExceeded,
    TransportError,
)


@pytest.fixture
def classifier():
    return ErrorClassifier()


RETIRED = {
    "status": "5100",
    "message": "After May 23th, recent_transactions is no longer, hence users will not be able to connect to recent_transactions",
}


class TestStatusCheck:
    """Tests for the status field check on raw and decoded responses."""

    def test_success_status_never_raises(self, classifier):
        payload = {"status": "0000", "data": {}}
        classifier.check_raw(200, json.dumps(payload))
        classifier.check_decoded(payload)

    def test_mapped_status(self, classifier):
        with pytest.raises(FeatureRetired) as exc:
            classifier.check_raw(200, json.dumps(RETIRED))
        assert str(exc.value).startswith("upbit ")
        assert "recent_transactions" in str(exc.value)

    def test_unmapped_status(self, classifier):
        with pytest.raises(DomainError) as exc:
            classifier.check_decoded({"status": "5600", "message": "bad"})
        assert type(exc.value) is DomainError
        assert "5600" in str(exc.value)

    def test_numeric_status_is_compared_as_string(self, classifier):
        with pytest.raises(FeatureRetired):
            classifier.check_decoded({"status": 5100})

    @pytest.mark.parametrize(
        "payload",
        [RETIRED, {"status": "0000"}, {"status": "9999", "message": "x"}, {"data": []}, [1, 2]],
    )
    def test_raw_and_decoded_paths_agree(self, classifier, payload):
        def outcome(check, arg):
            try:
                check(arg)
            except DomainError as e:
                return type(e), str(e)
            return None

        raw = outcome(lambda body: classifier.check_raw(200, body), json.dumps(payload))
        decoded = outcome(classifier.check_decoded, payload)
        assert raw == decoded

    @pytest.mark.parametrize("body", ["", "{", "x", "not json", "{broken", None, b'{"status":"5100"}'])
    def test_unparseable_bodies_are_deferred(self, classifier, body):
        classifier.check_raw(500, body)

    def test_body_without_status_is_success_shaped(self, classifier):
        classifier.check_raw(200, json.dumps([{"currency": "KRW", "balance": "1"}]))
        classifier.check_decoded({"uuid": "abc"})

    def test_status_table_is_read_only(self):
        with pytest.raises(TypeError):
            STATUS_EXCEPTIONS["9999"] = DomainError


class TestDefaultErrorHandler:
    """Tests for HTTP-status based handling."""

    def test_success_statuses_pass(self, classifier):
        classifier.default_error_handler(200, "[]")
        classifier.default_error_handler(201, "{}")

    def test_error_name_mapping(self, classifier):
        body = json.dumps({"error": {"name": "insufficient_funds_bid", "message": "not enough KRW"}})
        with pytest.raises(InsufficientFunds, match="not enough KRW"):
            classifier.default_error_handler(400, body)

    def test_auth_error_name(self, classifier):
        body = json.dumps({"error": {"name": "jwt_verification", "message": "bad token"}})
        with pytest.raises(AuthenticationError):
            classifier.default_error_handler(401, body)

    def test_unknown_error_name_falls_back_to_http_status(self, classifier):
        body = json.dumps({"error": {"name": "something_new", "message": "?"}})
        with pytest.raises(OrderNotFound):
            classifier.default_error_handler(404, body)

    def test_unknown_error_name_with_server_error(self, classifier):
        body = json.dumps({"error": {"name": "server_error", "message": "?"}})
        with pytest.raises(ExchangeNotAvailable):
            classifier.default_error_handler(502, body)

    def test_rate_limited(self, classifier):
        with pytest.raises(RateLimitExceeded):
            classifier.default_error_handler(429, "Too many requests")

    def test_server_error_without_json(self, classifier):
        with pytest.raises(ExchangeNotAvailable):
            classifier.default_error_handler(503, "<html>down</html>")

    def test_unclassified_client_error_is_transport_error(self, classifier):
        with pytest.raises(TransportError) as exc:
            classifier.default_error_handler(418, "teapot")
        assert str(exc.value) == "upbit HTTP 418 teapot"

    def test_http_table_is_read_only(self):
        with pytest.raises(TypeError):
            HTTP_EXCEPTIONS[500] = DomainError
