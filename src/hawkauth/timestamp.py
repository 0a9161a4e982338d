"""Timestamp MACs: let clients correct their clock after a stale-timestamp rejection."""

from __future__ import annotations

import time
from typing import Any, Mapping

from hawkauth import header
from hawkauth.canonical import calculate_ts_mac
from hawkauth.client import coerce_credentials
from hawkauth.common.logging import get_logger
from hawkauth.crypto import constant_time_equal
from hawkauth.models import AuthenticationFailure, Credentials

logger = get_logger(__name__)

TIMESTAMP_PARTS = ("ts", "tsm", "error")


def build_timestamp_header(
    credentials: Credentials | Mapping[str, Any] | None,
    timestamp: int | None = None,
    error: str | None = None,
) -> str:
    """Render ``Hawk ts="...", tsm="..."[, error="..."]`` for ``timestamp`` (default: now)."""
    creds = coerce_credentials(credentials)
    ts = int(time.time()) if timestamp is None else timestamp
    fields = {
        "ts": ts,
        "tsm": calculate_ts_mac(creds, ts),
        "error": error,
    }
    return header.serialize(fields, TIMESTAMP_PARTS)


def build_failure_header(failure: AuthenticationFailure, now: int | None = None) -> str:
    """
    Render a ``WWW-Authenticate`` challenge for an authentication failure.

    Failures carrying credentials (stale timestamps) include a signed server
    timestamp so the client can compute its clock offset.
    """
    if failure.credentials is not None:
        return build_timestamp_header(failure.credentials, timestamp=now, error=failure.message)
    return header.serialize({"error": failure.message}, ("error",))


def compute_offset(
    www_authenticate: str | None,
    credentials: Credentials | Mapping[str, Any],
    *,
    now: int | None = None,
) -> int | None:
    """
    Seconds the client should add to its clock, from a signed server timestamp.

    Returns None when the header has no timestamp or its MAC does not match.
    """
    creds = coerce_credentials(credentials)
    parts = header.parse(www_authenticate)
    if "ts" not in parts or "tsm" not in parts:
        return None
    try:
        timestamp = int(parts["ts"])
    except ValueError:
        return None

    if not constant_time_equal(calculate_ts_mac(creds, timestamp), parts["tsm"]):
        logger.warning("Ignoring server timestamp with invalid tsm", id=creds.id)
        return None

    now = int(time.time()) if now is None else now
    return timestamp - now
