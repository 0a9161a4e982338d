"""Client-side Hawk signing: build Authorization and Server-Authorization headers."""

from __future__ import annotations

import dataclasses
import secrets
import time
from typing import Any, Iterable, Mapping

from hawkauth import header
from hawkauth.canonical import calculate_mac, calculate_payload_hash
from hawkauth.common.errors import InvalidCredentialsError, MissingOptionError
from hawkauth.common.logging import get_logger
from hawkauth.models import Credentials, MessageType, SigningContext

logger = get_logger(__name__)

REQUIRED_OPTIONS = ("method", "resource", "host", "port")
DEFAULT_NONCE_BYTES = 6


def generate_nonce(nbytes: int = DEFAULT_NONCE_BYTES) -> str:
    """Random hex nonce from the OS CSPRNG."""
    return secrets.token_hex(nbytes)


def require_options(context: SigningContext, required: Iterable[str] = REQUIRED_OPTIONS) -> None:
    """Raise MissingOptionError for absent required context fields."""
    for name in required:
        value = getattr(context, name, None)
        if value is None or value == "":
            raise MissingOptionError(f":{name} is missing!")


def coerce_credentials(credentials: Credentials | Mapping[str, Any] | None) -> Credentials:
    """Accept a Credentials object or a plain id/key/algorithm mapping."""
    if credentials is None:
        raise InvalidCredentialsError("credentials are missing!")
    if isinstance(credentials, Credentials):
        return credentials
    return Credentials.from_mapping(dict(credentials))


def prepare_context(
    context: SigningContext,
    now: int | None = None,
    nonce_bytes: int = DEFAULT_NONCE_BYTES,
) -> SigningContext:
    """Fill in a default timestamp and a fresh nonce where they are absent."""
    changes: dict[str, Any] = {}
    if context.timestamp is None:
        changes["timestamp"] = int(time.time()) if now is None else now
    if context.nonce is None:
        changes["nonce"] = generate_nonce(nonce_bytes)
    if not changes:
        return context
    return dataclasses.replace(context, **changes)


def _signed_fields(context: SigningContext, credentials: Credentials) -> dict[str, Any]:
    payload_hash = context.hash
    if payload_hash is None and context.payload is not None:
        payload_hash = calculate_payload_hash(
            credentials.algorithm, context.payload, context.content_type
        )
    signed = dataclasses.replace(context, hash=payload_hash)

    fields: dict[str, Any] = {
        "id": credentials.id,
        "ts": signed.timestamp,
        "nonce": signed.nonce,
        "hash": payload_hash,
        "ext": signed.ext,
        "mac": calculate_mac(credentials, signed),
    }
    if signed.app:
        fields["app"] = signed.app
        fields["dlg"] = signed.dlg
    return fields


def build_authorization_header(
    context: SigningContext,
    credentials: Credentials | Mapping[str, Any] | None,
    only: Iterable[str] | None = None,
    *,
    now: int | None = None,
    nonce_bytes: int = DEFAULT_NONCE_BYTES,
) -> str:
    """
    Sign a request and render its ``Authorization`` header value.

    Args:
        context: Request attributes to sign
        credentials: Signing credentials
        only: Restrict the emitted fields to these names
        now: Current unix time, used when the context has no timestamp
        nonce_bytes: Random bytes in a generated nonce

    Returns:
        ``Hawk id="...", ts="...", nonce="...", ...``

    Raises:
        MissingOptionError: If method, resource, host or port is absent
        InvalidCredentialsError: If a credential member is absent
        UnsupportedAlgorithmError: If the algorithm is not sha1/sha256
    """
    require_options(context)
    creds = coerce_credentials(credentials)
    signed = prepare_context(context, now=now, nonce_bytes=nonce_bytes)

    fields = _signed_fields(signed, creds)
    logger.debug(
        "Built Hawk authorization header",
        id=creds.id,
        ts=signed.timestamp,
        message_type=signed.message_type.value,
    )
    return header.serialize(fields, only)


def build_response_header(
    context: SigningContext,
    credentials: Credentials | Mapping[str, Any] | None,
) -> str:
    """
    Sign a server response and render its ``Server-Authorization`` value.

    ``context`` describes the original request (including its ``ts`` and
    ``nonce``) together with the response payload and content type.
    """
    require_options(context, REQUIRED_OPTIONS + ("timestamp", "nonce"))
    creds = coerce_credentials(credentials)
    signed = dataclasses.replace(context, message_type=MessageType.RESPONSE)
    fields = _signed_fields(signed, creds)
    return header.serialize(fields, header.RESPONSE_PARTS)
