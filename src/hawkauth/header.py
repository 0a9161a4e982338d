"""Hawk header codec: ``Hawk k="v", ...`` <-> mapping."""

from __future__ import annotations

import re
from typing import Any, Iterable, Mapping

SCHEME = "Hawk"

HEADER_PARTS: tuple[str, ...] = ("id", "ts", "nonce", "hash", "ext", "app", "dlg", "mac")
RESPONSE_PARTS: tuple[str, ...] = ("hash", "ext", "mac")

_SCHEME_RE = re.compile(r"^\s*hawk(?:\s+|$)", re.IGNORECASE)
_SEPARATOR_RE = re.compile(r",\s*")
_PART_RE = re.compile(r"""^\s*([a-zA-Z]+)=(["'])(.*)\2\s*$""", re.DOTALL)


def serialize(fields: Mapping[str, Any], only: Iterable[str] | None = None) -> str:
    """
    Render header fields in canonical order.

    Args:
        fields: Field values by name; ``None`` values count as absent.
            Values must not contain commas: ``parse`` splits on them, so
            such a value does not survive the round trip and the receiver
            fails the request on ``mac``.
        only: Restrict output to these names, in this order

    Returns:
        Header value starting with ``Hawk ``
    """
    order = tuple(only) if only is not None else HEADER_PARTS
    rendered = [
        f'{name}="{fields[name]}"'
        for name in order
        if fields.get(name) is not None
    ]
    return f"{SCHEME} " + ", ".join(rendered)


def parse(header: str | None) -> dict[str, str]:
    """
    Parse a Hawk header value into a mapping.

    Malformed segments are dropped; an empty or unparseable header yields
    an empty mapping.
    """
    if not header:
        return {}

    body = _SCHEME_RE.sub("", header, count=1)
    parts: dict[str, str] = {}
    for segment in _SEPARATOR_RE.split(body):
        match = _PART_RE.match(segment)
        if not match:
            continue
        name, _, value = match.groups()
        parts[name] = value
    return parts
