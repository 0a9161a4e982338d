"""Hawk data model: credentials, signing context and authentication results."""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass, field
from enum import Enum
from typing import Protocol, Union

from hawkauth.common.errors import InvalidCredentialsError, UnsupportedAlgorithmError


class Algorithm(str, Enum):
    """Supported digest families."""

    SHA1 = "sha1"
    SHA256 = "sha256"

    @classmethod
    def parse(cls, value: Algorithm | str | None) -> Algorithm:
        """Resolve an algorithm name, raising UnsupportedAlgorithmError."""
        if isinstance(value, cls):
            return value
        try:
            return cls(value)
        except ValueError:
            supported = ", ".join(a.value for a in cls)
            raise UnsupportedAlgorithmError(
                f"{value!r} is not a supported algorithm! Use one of the following: {supported}"
            ) from None


class MessageType(str, Enum):
    """Canonical string flavours."""

    HEADER = "header"
    RESPONSE = "response"
    BEWIT = "bewit"
    TS = "ts"


class FailureField(str, Enum):
    """Which part of the request an authentication failure is about."""

    ID = "id"
    TS = "ts"
    NONCE = "nonce"
    HASH = "hash"
    MAC = "mac"
    BEWIT = "bewit"


@dataclass(frozen=True, eq=False)
class Credentials:
    """Shared-secret credentials.

    The key is excluded from repr so credentials never end up in logs.
    """

    id: str
    key: bytes = field(repr=False)
    algorithm: Algorithm = Algorithm.SHA256

    def __post_init__(self) -> None:
        if not self.id:
            raise InvalidCredentialsError(":id is missing!")
        if self.key is None or self.key in (b"", ""):
            raise InvalidCredentialsError(":key is missing!")
        if self.algorithm is None:
            raise InvalidCredentialsError(":algorithm is missing!")
        if isinstance(self.key, str):
            object.__setattr__(self, "key", self.key.encode("utf-8"))
        object.__setattr__(self, "algorithm", Algorithm.parse(self.algorithm))

    @classmethod
    def from_mapping(cls, data: dict[str, object]) -> Credentials:
        """Build credentials from a plain mapping with id/key/algorithm members."""
        for member in ("id", "key", "algorithm"):
            if data.get(member) is None:
                raise InvalidCredentialsError(f":{member} is missing!")
        return cls(
            id=str(data["id"]),
            key=data["key"],  # type: ignore[arg-type]
            algorithm=data["algorithm"],  # type: ignore[arg-type]
        )


@dataclass(frozen=True)
class SigningContext:
    """Everything that goes into a Hawk canonical string.

    ``resource`` is the request target including the query string, exactly
    as sent on the wire. ``hash`` may be pre-supplied; otherwise it is
    computed from ``payload`` when a payload is present.
    """

    method: str
    resource: str
    host: str
    port: int
    timestamp: int | None = None
    nonce: str | None = None
    ext: str | None = None
    content_type: str | None = None
    payload: bytes | str | None = None
    app: str | None = None
    dlg: str | None = None
    hash: str | None = None
    message_type: MessageType = MessageType.HEADER


@dataclass(frozen=True)
class AuthenticationFailure:
    """Expected authentication outcome other than success."""

    field: FailureField
    message: str
    credentials: Credentials | None = dataclasses.field(default=None, repr=False, compare=False)


AuthenticationResult = Union[Credentials, AuthenticationFailure]


@dataclass(frozen=True)
class Bewit:
    """Decoded bewit token."""

    id: str
    ts: int
    mac: str
    ext: str | None = None


class CredentialsLookup(Protocol):
    """Resolve credentials by id; return None when unknown."""

    def __call__(self, id: str) -> Credentials | None: ...


class NonceLookup(Protocol):
    """Return True when the nonce has already been seen (replay)."""

    def __call__(self, nonce: str) -> bool: ...