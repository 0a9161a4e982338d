"""Pytest configuration and fixtures."""

import pytest

from hawkauth.common.settings import Settings
from hawkauth.models import Credentials, SigningContext

NOW = 1353809207


@pytest.fixture(params=["sha256", "sha1"])
def algorithm(request) -> str:
    """Run credential-dependent tests for both digest families."""
    return request.param


@pytest.fixture
def credentials(algorithm: str) -> Credentials:
    """Test credentials."""
    return Credentials(id="123456", key=b"2983d45yun89q", algorithm=algorithm)


@pytest.fixture
def credentials_lookup(credentials: Credentials):
    """Lookup that only knows the test credentials."""

    def lookup(id: str) -> Credentials | None:
        if id == credentials.id:
            return credentials
        return None

    return lookup


@pytest.fixture
def now() -> int:
    """Fixed current time."""
    return NOW


@pytest.fixture
def request_context(now: int) -> SigningContext:
    """A signed POST with payload and ext."""
    return SigningContext(
        method="POST",
        resource="/somewhere/over/the/rainbow",
        host="example.net",
        port=80,
        timestamp=now,
        nonce="Ygvqdz",
        content_type="text/plain",
        payload=b"something to write about",
        ext="Bazinga!",
    )


@pytest.fixture
def settings() -> Settings:
    """Create test settings."""
    return Settings(
        timestamp_skew_seconds=60,
        auth_exempt_paths=("/health",),
        sign_responses=True,
    )
