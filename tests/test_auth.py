"""Tests for request signing strategies."""

import base64
import hashlib
import hmac

import jwt
import pytest

from upbitkit.exchanges.auth import (
    BearerTokenAuth,
    HmacDigestAuth,
    create_auth_strategy,
)
from upbitkit.exchanges.builder import RequestBuilder
from upbitkit.exchanges.errors import MissingCredentials
from upbitkit.exchanges.protocol import Credentials


@pytest.fixture
def builder():
    return RequestBuilder()


class TestBearerTokenAuth:
    """Tests for JWT signing."""

    def test_header_and_claims_without_params(self, jwt_auth, builder, access_key, secret):
        result = jwt_auth.sign(builder.balance(), "1700000000000")

        scheme, token = result.headers["Authorization"].split(" ")
        assert scheme == "Bearer"
        claims = jwt.decode(token, secret, algorithms=["HS256"])
        assert claims == {"access_key": access_key, "nonce": "1700000000000"}
        assert result.body is None

    def test_query_claim_for_body(self, jwt_auth, builder, secret):
        descriptor = builder.create_order("BTC/KRW", "limit", "sell", 2.0, 50000.0)
        token = jwt_auth.sign(descriptor, "1").headers["Authorization"].split(" ")[1]
        claims = jwt.decode(token, secret, algorithms=["HS256"])
        assert claims["query"] == "market=KRW-BTC&side=ask&volume=2&price=50000&ord_type=limit"

    def test_query_claim_for_get_params(self, jwt_auth, builder, secret):
        token = jwt_auth.sign(builder.my_trades("BTC/KRW", "done"), "1").headers["Authorization"][7:]
        claims = jwt.decode(token, secret, algorithms=["HS256"])
        assert claims["query"] == "market=KRW-BTC&state=done&order_by=desc"

    def test_deterministic(self, credentials, builder):
        descriptor = builder.cancel_order("abc")
        first = BearerTokenAuth(credentials).sign(descriptor, "42")
        second = BearerTokenAuth(credentials).sign(descriptor, "42")
        assert first == second

    def test_nonce_changes_token(self, jwt_auth, builder):
        descriptor = builder.balance()
        assert jwt_auth.sign(descriptor, "1").headers != jwt_auth.sign(descriptor, "2").headers

    @pytest.mark.parametrize("creds", [Credentials(None, "s"), Credentials("k", None), Credentials()])
    def test_missing_credentials(self, creds, builder):
        with pytest.raises(MissingCredentials):
            BearerTokenAuth(creds).sign(builder.balance(), "1")


class TestHmacDigestAuth:
    """Tests for the legacy HMAC-SHA512 scheme."""

    def test_headers(self, hmac_auth, builder, access_key, secret):
        descriptor = builder.balance()
        result = hmac_auth.sign(descriptor, "1700000000000")

        payload = "endpoint=%2Faccounts"
        expected = base64.b64encode(
            hmac.new(
                secret.encode(),
                "\x00".join(["/accounts", "endpoint=%2Faccounts", "1700000000000"]).encode(),
                hashlib.sha512,
            ).digest()
        ).decode()

        assert hmac_auth.payload(descriptor) == payload
        assert result.headers == {
            "Api-Key": access_key,
            "Api-Sign": expected,
            "Api-Nonce": "1700000000000",
        }
        assert result.body is None

    def test_non_get_body_is_signed_payload(self, hmac_auth, builder):
        descriptor = builder.cancel_order("abc")
        result = hmac_auth.sign(descriptor, "5")
        assert result.body == "endpoint=%2Forder&uuid=abc"

    def test_signature_is_raw_digest_base64(self, hmac_auth, builder):
        signature = hmac_auth.sign(builder.balance(), "1").headers["Api-Sign"]
        assert len(base64.b64decode(signature)) == 64

    def test_deterministic(self, credentials, builder):
        descriptor = builder.create_order("ETH/KRW", "limit", "buy", 1.0, 3000.0)
        first = HmacDigestAuth(credentials).sign(descriptor, "99")
        second = HmacDigestAuth(credentials).sign(descriptor, "99")
        assert first.headers["Api-Sign"] == second.headers["Api-Sign"]
        assert first == second

    def test_missing_credentials(self, builder):
        with pytest.raises(MissingCredentials):
            HmacDigestAuth(Credentials("key", "")).sign(builder.balance(), "1")


class TestCreateAuthStrategy:
    """Tests for strategy selection."""

    def test_jwt(self, credentials):
        assert isinstance(create_auth_strategy("jwt", credentials), BearerTokenAuth)

    def test_hmac_case_insensitive(self, credentials):
        assert isinstance(create_auth_strategy("HMAC", credentials), HmacDigestAuth)

    def test_unknown(self, credentials):
        with pytest.raises(ValueError, match="Unsupported auth scheme"):
            create_auth_strategy("oauth", credentials)
