"""Digest primitives for Hawk: HMAC, plain hashes, base64 and safe comparison."""

from __future__ import annotations

import base64
import binascii
import hashlib
import hmac

from hawkauth.models import Algorithm

_DIGESTS = {
    Algorithm.SHA1: hashlib.sha1,
    Algorithm.SHA256: hashlib.sha256,
}


def _to_bytes(value: bytes | str) -> bytes:
    if isinstance(value, str):
        return value.encode("utf-8")
    return value


def mac_digest(algorithm: Algorithm | str, key: bytes | str, message: bytes | str) -> bytes:
    """Raw HMAC of ``message`` keyed by ``key``."""
    digestmod = _DIGESTS[Algorithm.parse(algorithm)]
    return hmac.new(_to_bytes(key), _to_bytes(message), digestmod).digest()


def hash_digest(algorithm: Algorithm | str, message: bytes | str) -> bytes:
    """Raw unkeyed digest of ``message``."""
    digestmod = _DIGESTS[Algorithm.parse(algorithm)]
    return digestmod(_to_bytes(message)).digest()


def b64encode(raw: bytes) -> str:
    """Standard base64 with padding, as used in header values."""
    return base64.b64encode(raw).decode("ascii")


def b64url_encode_nopad(raw: bytes | str) -> str:
    """
    Encode to Base64 URL-safe without padding.

    Args:
        raw: Bytes (or text, UTF-8 encoded) to encode

    Returns:
        Base64 URL-safe encoded string without padding
    """
    enc = base64.urlsafe_b64encode(_to_bytes(raw)).decode("ascii")
    return enc.rstrip("=")


def b64url_decode_nopad(text: str) -> bytes:
    """
    Decode a Base64 URL-safe string without padding.

    Raises:
        ValueError: If the input is not valid base64url
    """
    # Add padding back
    pad = "=" * ((4 - (len(text) % 4)) % 4)
    try:
        return base64.b64decode((text + pad).encode("ascii"), altchars=b"-_", validate=True)
    except (binascii.Error, UnicodeEncodeError) as exc:
        raise ValueError(f"Invalid base64url value: {exc}") from exc


def _decode_b64(value: str) -> bytes | None:
    try:
        return base64.b64decode(value.encode("ascii"), validate=True)
    except (binascii.Error, UnicodeEncodeError):
        return None


def constant_time_equal(expected: bytes | str, actual: bytes | str) -> bool:
    """Compare two digests without leaking where they differ.

    Either side may be raw digest bytes or base64 text. When one side is
    bytes and the other text, the text is base64-decoded first; a decode
    failure counts as a mismatch. Unequal lengths never match.
    """
    if isinstance(expected, str) and isinstance(actual, str):
        left, right = expected.encode("utf-8"), actual.encode("utf-8")
    elif isinstance(expected, str):
        left, right = _decode_b64(expected), actual
    elif isinstance(actual, str):
        left, right = expected, _decode_b64(actual)
    else:
        left, right = expected, actual

    if left is None or right is None:
        return False
    return hmac.compare_digest(left, right)
