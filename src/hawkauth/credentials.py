"""Credential stores implementing ``CredentialsLookup``."""

from __future__ import annotations

from typing import Iterable, Mapping

from hawkauth.common.settings import Settings
from hawkauth.models import Credentials


class InMemoryCredentialsStore:
    """Dict-backed credentials lookup."""

    def __init__(self, credentials: Iterable[Credentials] = ()) -> None:
        self._credentials: dict[str, Credentials] = {}
        for creds in credentials:
            self.add(creds)

    def add(self, credentials: Credentials) -> None:
        self._credentials[credentials.id] = credentials

    def remove(self, id: str) -> None:
        self._credentials.pop(id, None)

    def __contains__(self, id: object) -> bool:
        return id in self._credentials

    def __len__(self) -> int:
        return len(self._credentials)

    def __call__(self, id: str) -> Credentials | None:
        return self._credentials.get(id)


def credentials_from_mapping(data: Mapping[str, Mapping[str, str]]) -> InMemoryCredentialsStore:
    """Build a store from ``{id: {"key": ..., "algorithm": ...}}``."""
    return InMemoryCredentialsStore(
        Credentials.from_mapping({"id": id, **dict(member)})
        for id, member in data.items()
    )


def credentials_from_settings(settings: Settings) -> InMemoryCredentialsStore:
    """Build a store from ``HAWK_CREDENTIALS``."""
    return credentials_from_mapping(settings.credentials)
