"""Tests for bewit building, decoding and authentication."""

import pytest

from hawkauth.bewit import authenticate_bewit, build_bewit, decode_bewit, extract_bewit
from hawkauth.crypto import b64url_encode_nopad
from hawkauth.models import AuthenticationFailure, Bewit, Credentials, FailureField, SigningContext

EXPIRES = 1353832834


@pytest.fixture
def bewit_context() -> SigningContext:
    return SigningContext(
        method="GET",
        resource="/resource/4?a=1&b=2",
        host="example.com",
        port=80,
        ext="some-app-data",
    )


def _request(context: SigningContext, token: str, resource: str | None = None) -> SigningContext:
    base = resource or context.resource
    separator = "&" if "?" in base else "?"
    return SigningContext(
        method=context.method,
        resource=f"{base}{separator}bewit={token}",
        host=context.host,
        port=context.port,
    )


class TestBuildBewit:
    """Test bewit generation."""

    def test_known_token(self, bewit_context):
        credentials = Credentials(id="123456", key="2983d45yun89q", algorithm="sha256")
        token = build_bewit(bewit_context, credentials, ttl_seconds=60, now=EXPIRES - 60)
        assert token == (
            "MTIzNDU2XDEzNTM4MzI4MzRcdUNCamEwcVlUZFp1b3ZCdFRvMUpoaTRVUkc2cmk5TlBGS1pTYVA0d3cyVT1cc29tZS1hcHAtZGF0YQ"
        )

    def test_token_is_url_safe(self, bewit_context, credentials, now):
        token = build_bewit(bewit_context, credentials, ttl_seconds=3600, now=now)
        assert "=" not in token
        assert "+" not in token
        assert "/" not in token

    def test_decode_round_trip(self, bewit_context, credentials, now):
        token = build_bewit(bewit_context, credentials, ttl_seconds=300, now=now)
        bewit = decode_bewit(token)
        assert isinstance(bewit, Bewit)
        assert bewit.id == credentials.id
        assert bewit.ts == now + 300
        assert bewit.ext == "some-app-data"


class TestDecodeBewit:
    """Test malformed bewit handling."""

    @pytest.mark.parametrize(
        "raw",
        [
            "123456\\1353832834\\mac",
            "123456\\1353832834\\mac\\ext\\extra",
            "\\1353832834\\mac\\",
            "123456\\soon\\mac\\",
        ],
    )
    def test_bad_structure(self, raw):
        result = decode_bewit(b64url_encode_nopad(raw))
        assert isinstance(result, AuthenticationFailure)
        assert result.field is FailureField.ID

    @pytest.mark.parametrize("token", ["!!!", "a", "éééé"])
    def test_bad_encoding(self, token):
        result = decode_bewit(token)
        assert isinstance(result, AuthenticationFailure)
        assert result.field is FailureField.ID

    def test_empty_ext(self):
        bewit = decode_bewit(b64url_encode_nopad("123456\\1353832834\\mac\\"))
        assert bewit == Bewit(id="123456", ts=1353832834, mac="mac", ext=None)


class TestExtractBewit:
    """Test bewit parameter stripping."""

    @pytest.mark.parametrize(
        "resource, token, stripped",
        [
            ("/resource/4?bewit=abc", "abc", "/resource/4"),
            ("/resource/4?a=1&b=2&bewit=abc", "abc", "/resource/4?a=1&b=2"),
            ("/resource/4?bewit=abc&a=1", "abc", "/resource/4?a=1"),
            ("/resource/4?a=1&bewit=abc&b=2", "abc", "/resource/4?a=1&b=2"),
            ("/resource/4?a=1&bewit=abc#frag", "abc", "/resource/4?a=1#frag"),
            ("/resource/4?notbewit=1&bewit=abc", "abc", "/resource/4?notbewit=1"),
        ],
    )
    def test_extract(self, resource, token, stripped):
        assert extract_bewit(resource) == (token, stripped)

    @pytest.mark.parametrize("resource", ["/resource/4", "/resource/4?a=1", "/resource/4#bewit=abc"])
    def test_no_bewit(self, resource):
        assert extract_bewit(resource) == (None, resource)


class TestAuthenticateBewit:
    """Test bewit verification for both algorithms."""

    def test_valid_bewit(self, bewit_context, credentials, credentials_lookup, now):
        token = build_bewit(bewit_context, credentials, ttl_seconds=60, now=now)
        result = authenticate_bewit(None, _request(bewit_context, token), credentials_lookup, now=now)
        assert result is credentials

    def test_explicit_token(self, bewit_context, credentials, credentials_lookup, now):
        token = build_bewit(bewit_context, credentials, ttl_seconds=60, now=now)
        result = authenticate_bewit(token, _request(bewit_context, token), credentials_lookup, now=now)
        assert result is credentials

    def test_bewit_in_middle_of_query(self, bewit_context, credentials, credentials_lookup, now):
        token = build_bewit(bewit_context, credentials, ttl_seconds=60, now=now)
        request = SigningContext(
            method="GET",
            resource=f"/resource/4?a=1&bewit={token}&b=2",
            host="example.com",
            port=80,
        )
        assert authenticate_bewit(None, request, credentials_lookup, now=now) is credentials

    def test_expiry_boundary(self, bewit_context, credentials, credentials_lookup, now):
        """Expired one second ago fails; one second left succeeds."""
        expired = build_bewit(bewit_context, credentials, ttl_seconds=-1, now=now)
        result = authenticate_bewit(None, _request(bewit_context, expired), credentials_lookup, now=now)
        assert isinstance(result, AuthenticationFailure)
        assert result.field is FailureField.TS

        fresh = build_bewit(bewit_context, credentials, ttl_seconds=1, now=now)
        assert authenticate_bewit(None, _request(bewit_context, fresh), credentials_lookup, now=now) is credentials

    def test_missing_bewit(self, bewit_context, credentials_lookup, now):
        result = authenticate_bewit(None, bewit_context, credentials_lookup, now=now)
        assert isinstance(result, AuthenticationFailure)
        assert result.field is FailureField.ID

    def test_malformed_bewit(self, bewit_context, credentials_lookup, now):
        result = authenticate_bewit(None, _request(bewit_context, "%%%"), credentials_lookup, now=now)
        assert isinstance(result, AuthenticationFailure)
        assert result.field is FailureField.ID

    def test_unidentified_id(self, bewit_context, credentials, now):
        token = build_bewit(bewit_context, credentials, ttl_seconds=60, now=now)
        result = authenticate_bewit(None, _request(bewit_context, token), lambda id: None, now=now)
        assert isinstance(result, AuthenticationFailure)
        assert result.field is FailureField.ID
        assert result.message == "Unidentified id"

    def test_different_resource(self, bewit_context, credentials, credentials_lookup, now):
        token = build_bewit(bewit_context, credentials, ttl_seconds=60, now=now)
        request = _request(bewit_context, token, resource="/resource/5?a=1&b=2")
        result = authenticate_bewit(None, request, credentials_lookup, now=now)
        assert isinstance(result, AuthenticationFailure)
        assert result.field is FailureField.BEWIT
        assert result.message == "Invalid signature"

    def test_tampered_ext(self, bewit_context, credentials, credentials_lookup, now):
        token = build_bewit(bewit_context, credentials, ttl_seconds=60, now=now)
        bewit = decode_bewit(token)
        forged = b64url_encode_nopad(f"{bewit.id}\\{bewit.ts}\\{bewit.mac}\\other-data")
        result = authenticate_bewit(None, _request(bewit_context, forged), credentials_lookup, now=now)
        assert isinstance(result, AuthenticationFailure)
        assert result.field is FailureField.BEWIT

    def test_absolute_url_retry(self, bewit_context, credentials, credentials_lookup, now):
        """A full URL is retried as path and query only."""
        token = build_bewit(bewit_context, credentials, ttl_seconds=60, now=now)
        request = _request(bewit_context, token, resource="http://example.com/resource/4?a=1&b=2")
        assert authenticate_bewit(None, request, credentials_lookup, now=now) is credentials

    def test_absolute_url_signed(self, bewit_context, credentials, credentials_lookup, now):
        """A bewit signed over a full URL validates against the same full URL."""
        signed = SigningContext(
            method="GET",
            resource="https://example.com/resource/4?a=1",
            host="example.com",
            port=443,
        )
        token = build_bewit(signed, credentials, ttl_seconds=60, now=now)
        request = _request(signed, token)
        assert authenticate_bewit(None, request, credentials_lookup, now=now) is credentials
