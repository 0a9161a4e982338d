"""Bewits: URL-embeddable, time-limited Hawk tokens for a single GET request."""

from __future__ import annotations

import dataclasses
import time
from typing import Any, Mapping
from urllib.parse import urlsplit

from hawkauth.canonical import calculate_mac
from hawkauth.client import coerce_credentials, require_options
from hawkauth.common.logging import get_logger
from hawkauth.crypto import b64url_decode_nopad, b64url_encode_nopad, constant_time_equal
from hawkauth.models import (
    AuthenticationFailure,
    AuthenticationResult,
    Bewit,
    Credentials,
    CredentialsLookup,
    FailureField,
    MessageType,
    SigningContext,
)
from hawkauth.server import authentication_failure, resolve_credentials

logger = get_logger(__name__)

BEWIT_PARAM = "bewit"
SEPARATOR = "\\"


def _bewit_context(context: SigningContext, resource: str, expires: int, ext: str | None) -> SigningContext:
    return dataclasses.replace(
        context,
        resource=resource,
        timestamp=expires,
        nonce="",
        ext=ext,
        hash="",
        payload=None,
        app=None,
        dlg=None,
        message_type=MessageType.BEWIT,
    )


def build_bewit(
    context: SigningContext,
    credentials: Credentials | Mapping[str, Any] | None,
    ttl_seconds: int,
    *,
    now: int | None = None,
) -> str:
    """
    Build a bewit token valid for ``ttl_seconds``.

    Args:
        context: The request to pre-authorize; ``ext`` is carried in the token
        credentials: Signing credentials
        ttl_seconds: Seconds until the bewit expires
        now: Current unix time

    Returns:
        base64url token without padding, ready for a ``bewit=`` query parameter
    """
    require_options(context)
    creds = coerce_credentials(credentials)
    now = int(time.time()) if now is None else now
    expires = now + ttl_seconds

    mac = calculate_mac(creds, _bewit_context(context, context.resource, expires, context.ext))
    raw = SEPARATOR.join([creds.id, str(expires), mac, context.ext or ""])
    return b64url_encode_nopad(raw)


def decode_bewit(token: str) -> Bewit | AuthenticationFailure:
    """Decode a bewit token. Malformed input yields an ``id`` failure."""
    try:
        raw = b64url_decode_nopad(token).decode("utf-8")
    except (ValueError, UnicodeDecodeError):
        return AuthenticationFailure(FailureField.ID, "Invalid bewit encoding")

    values = raw.split(SEPARATOR)
    if len(values) != 4:
        return AuthenticationFailure(FailureField.ID, "Invalid bewit structure")

    bewit_id, ts, mac, ext = values
    if not bewit_id or not ts or not mac:
        return AuthenticationFailure(FailureField.ID, "Missing bewit attributes")
    try:
        expires = int(ts)
    except ValueError:
        return AuthenticationFailure(FailureField.ID, "Invalid bewit structure")

    return Bewit(id=bewit_id, ts=expires, mac=mac, ext=ext or None)


def extract_bewit(resource: str) -> tuple[str | None, str]:
    """
    Pull the bewit parameter out of a request target.

    Returns:
        Tuple of (token or None, resource without the bewit parameter).
        Other query parameters keep their order and any fragment is kept.
    """
    before_fragment, hash_sign, fragment = resource.partition("#")
    path, question, query = before_fragment.partition("?")
    if not question:
        return None, resource

    token = None
    kept: list[str] = []
    for param in query.split("&"):
        if token is None and param.startswith(f"{BEWIT_PARAM}="):
            token = param[len(BEWIT_PARAM) + 1 :]
            continue
        kept.append(param)

    if token is None:
        return None, resource

    stripped = path
    if kept:
        stripped += "?" + "&".join(kept)
    return token, stripped + hash_sign + fragment


def _path_and_query(resource: str) -> str | None:
    # Compatibility for callers that pass absolute URLs inconsistently.
    # Only scheme://netloc prefixes are stripped.
    parts = urlsplit(resource)
    if parts.scheme not in ("http", "https") or not parts.netloc:
        return None
    path = parts.path or "/"
    if parts.query:
        path += "?" + parts.query
    return path


def authenticate_bewit(
    token: str | None,
    context: SigningContext,
    credentials_lookup: CredentialsLookup | None,
    *,
    now: int | None = None,
) -> AuthenticationResult:
    """
    Verify a bewit against the request it arrived with.

    When ``token`` is None it is taken from ``context.resource``. The MAC is
    recomputed over the request resource with the bewit parameter removed.

    Returns:
        The resolved Credentials, or an AuthenticationFailure
    """
    require_options(context)
    found, resource = extract_bewit(context.resource)
    if token is None:
        token = found
    if not token:
        return authentication_failure(FailureField.ID, "Missing bewit")

    bewit = decode_bewit(token)
    if isinstance(bewit, AuthenticationFailure):
        return authentication_failure(bewit.field, bewit.message)

    credentials = resolve_credentials(credentials_lookup, bewit.id)
    if credentials is None:
        return authentication_failure(FailureField.ID, "Unidentified id", bewit.id)

    now = int(time.time()) if now is None else now
    if bewit.ts < now:
        return authentication_failure(FailureField.TS, "Stale timestamp", bewit.id)

    expected = calculate_mac(credentials, _bewit_context(context, resource, bewit.ts, bewit.ext))
    if constant_time_equal(expected, bewit.mac):
        return credentials

    relative = _path_and_query(resource)
    if relative is not None:
        logger.debug("Retrying bewit check with path and query only", id=bewit.id)
        expected = calculate_mac(credentials, _bewit_context(context, relative, bewit.ts, bewit.ext))
        if constant_time_equal(expected, bewit.mac):
            return credentials

    return authentication_failure(FailureField.BEWIT, "Invalid signature", bewit.id)
