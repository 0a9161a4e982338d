"""Server-side Hawk verification of Authorization and Server-Authorization headers."""

from __future__ import annotations

import dataclasses
import time
from typing import Any, Mapping

from hawkauth import header
from hawkauth.canonical import calculate_mac, calculate_payload_hash
from hawkauth.client import REQUIRED_OPTIONS, coerce_credentials, require_options
from hawkauth.common.logging import get_logger
from hawkauth.crypto import constant_time_equal
from hawkauth.models import (
    AuthenticationFailure,
    AuthenticationResult,
    Credentials,
    CredentialsLookup,
    FailureField,
    MessageType,
    NonceLookup,
    SigningContext,
)

logger = get_logger(__name__)

DEFAULT_TIMESTAMP_SKEW = 60  # ±60 seconds


def authentication_failure(
    field: FailureField,
    message: str,
    claimed_id: str | None = None,
    credentials: Credentials | None = None,
) -> AuthenticationFailure:
    logger.info(
        "Hawk authentication failed",
        field=field.value,
        reason=message,
        id=claimed_id,
    )
    return AuthenticationFailure(field, message, credentials=credentials)


def resolve_credentials(
    credentials_lookup: CredentialsLookup | None,
    claimed_id: str | None,
) -> Credentials | None:
    """Look up credentials by id; unknown ids and failed lookups give None."""
    if claimed_id is None or not callable(credentials_lookup):
        return None
    try:
        found: Any = credentials_lookup(claimed_id)
    except LookupError:
        return None
    if found is None:
        return None
    return coerce_credentials(found)


def _verify_signature(
    parts: Mapping[str, str],
    context: SigningContext,
    credentials: Credentials,
) -> AuthenticationFailure | None:
    claimed_id = parts.get("id", credentials.id)

    # The MAC covers the hash as sent; the payload itself is checked afterwards.
    expected_mac = calculate_mac(
        credentials,
        dataclasses.replace(context, hash=parts.get("hash", "")),
    )
    if "mac" not in parts or not constant_time_equal(expected_mac, parts["mac"]):
        return authentication_failure(FailureField.MAC, "Invalid mac", claimed_id)

    if "hash" in parts:
        payload = context.payload if context.payload is not None else b""
        expected_hash = calculate_payload_hash(
            credentials.algorithm, payload, context.content_type
        )
        if not constant_time_equal(expected_hash, parts["hash"]):
            return authentication_failure(FailureField.HASH, "Invalid hash", claimed_id)

    return None


def authenticate(
    authorization: str | None,
    context: SigningContext,
    credentials_lookup: CredentialsLookup | None,
    nonce_lookup: NonceLookup | None = None,
    timestamp_skew: int = DEFAULT_TIMESTAMP_SKEW,
    *,
    now: int | None = None,
) -> AuthenticationResult:
    """
    Verify a request's ``Authorization`` header.

    Checks run in order and the first failure wins: credentials lookup,
    timestamp skew, nonce presence and replay, MAC, payload hash.

    Args:
        authorization: Raw header value
        context: The request as received (method, resource, host, port,
            and content type/payload when the payload should be verified)
        credentials_lookup: Resolves the header id to credentials
        nonce_lookup: Returns True for nonces already seen
        timestamp_skew: Allowed clock drift in seconds (inclusive)
        now: Current unix time

    Returns:
        The resolved Credentials, or an AuthenticationFailure

    Raises:
        MissingOptionError: If the context lacks method, resource, host or port
    """
    require_options(context)
    parts = header.parse(authorization)
    now = int(time.time()) if now is None else now
    claimed_id = parts.get("id")

    credentials = resolve_credentials(credentials_lookup, claimed_id)
    if credentials is None:
        return authentication_failure(FailureField.ID, "Unidentified id", claimed_id)

    try:
        timestamp = int(parts["ts"])
    except (KeyError, ValueError):
        return authentication_failure(FailureField.TS, "Stale ts", claimed_id, credentials)
    if abs(now - timestamp) > timestamp_skew:
        return authentication_failure(FailureField.TS, "Stale ts", claimed_id, credentials)

    nonce = parts.get("nonce")
    if not nonce:
        return authentication_failure(FailureField.NONCE, "Missing nonce", claimed_id)
    if callable(nonce_lookup) and nonce_lookup(nonce):
        return authentication_failure(FailureField.NONCE, "Invalid nonce", claimed_id)

    signed = dataclasses.replace(
        context,
        timestamp=timestamp,
        nonce=nonce,
        ext=parts.get("ext"),
        app=parts.get("app"),
        dlg=parts.get("dlg"),
        message_type=MessageType.HEADER,
    )
    failure = _verify_signature(parts, signed, credentials)
    if failure is not None:
        return failure

    logger.debug("Hawk request authenticated", id=credentials.id)
    return credentials


def authenticate_response(
    server_authorization: str | None,
    context: SigningContext,
    credentials: Credentials | Mapping[str, Any],
) -> AuthenticationResult:
    """
    Verify a server's ``Server-Authorization`` header on the client side.

    ``context`` is the original request context, including the ``ts`` and
    ``nonce`` that were sent, plus the response content type and payload.
    Credential lookup, skew and nonce checks do not apply.
    """
    require_options(context, REQUIRED_OPTIONS + ("timestamp", "nonce"))
    creds = coerce_credentials(credentials)
    parts = header.parse(server_authorization)

    signed = dataclasses.replace(
        context,
        ext=parts.get("ext"),
        message_type=MessageType.RESPONSE,
    )
    failure = _verify_signature(parts, signed, creds)
    if failure is not None:
        return failure
    return creds
