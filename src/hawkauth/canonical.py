"""Canonical (normalized) strings that get MAC'd or hashed.

Fields are joined with newlines and never escaped; a trailing newline is
always present. The HTTP method is the only value that is case-normalized.
"""

from __future__ import annotations

from hawkauth import crypto
from hawkauth.models import Algorithm, Credentials, MessageType, SigningContext

HAWK_VERSION = "1"


def _header_line(kind: str) -> str:
    return f"hawk.{HAWK_VERSION}.{kind}"


def normalized_string(context: SigningContext, hash: str | None = None) -> str:
    """Build the header/response/bewit string for ``context``.

    ``hash`` overrides ``context.hash``; an empty line is written when
    neither is set.
    """
    if context.message_type is MessageType.TS:
        raise ValueError("Timestamp MACs use timestamp_string()")

    payload_hash = hash if hash is not None else context.hash
    parts = [
        _header_line(context.message_type.value),
        str(context.timestamp),
        context.nonce or "",
        context.method.upper(),
        context.resource,
        context.host,
        str(context.port),
        payload_hash or "",
        context.ext or "",
    ]
    if context.app and context.message_type is not MessageType.BEWIT:
        parts.append(context.app)
        parts.append(context.dlg or "")
    parts.append("")  # trailing newline
    return "\n".join(parts)


def parse_content_type(content_type: str | None) -> str:
    """Media type without parameters, e.g. ``text/plain; charset=utf-8`` -> ``text/plain``."""
    if not content_type:
        return ""
    return content_type.split(";", 1)[0].strip()


def payload_string(content_type: str | None, payload: bytes | str) -> bytes:
    """Build the payload-hash string. The payload is kept as raw bytes."""
    if isinstance(payload, str):
        payload = payload.encode("utf-8")
    prefix = f"{_header_line('payload')}\n{parse_content_type(content_type)}\n"
    return prefix.encode("utf-8") + payload + b"\n"


def timestamp_string(timestamp: int) -> str:
    return f"{_header_line('ts')}\n{timestamp}\n"


def calculate_payload_hash(
    algorithm: Algorithm | str,
    payload: bytes | str,
    content_type: str | None = None,
) -> str:
    """Base64 digest of the payload-hash string."""
    raw = crypto.hash_digest(algorithm, payload_string(content_type, payload))
    return crypto.b64encode(raw)


def calculate_mac(credentials: Credentials, context: SigningContext) -> str:
    """Base64 HMAC over the normalized string of ``context``.

    When the context carries a payload but no pre-supplied hash, the payload
    hash is computed and injected into the string.
    """
    payload_hash = context.hash
    if payload_hash is None and context.payload is not None:
        payload_hash = calculate_payload_hash(
            credentials.algorithm, context.payload, context.content_type
        )
    normalized = normalized_string(context, hash=payload_hash)
    raw = crypto.mac_digest(credentials.algorithm, credentials.key, normalized)
    return crypto.b64encode(raw)


def calculate_ts_mac(credentials: Credentials, timestamp: int) -> str:
    """Base64 HMAC over the timestamp string."""
    raw = crypto.mac_digest(credentials.algorithm, credentials.key, timestamp_string(timestamp))
    return crypto.b64encode(raw)
