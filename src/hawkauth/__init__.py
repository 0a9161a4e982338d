"""
hawkauth: Hawk HTTP request authentication.

Clients sign requests with a shared secret and send a compact
``Authorization: Hawk ...`` header; servers recompute the MAC and accept
or reject. Bewits pre-authorize single GET requests through the URL, and
timestamp MACs let clients correct clock drift.
"""

from hawkauth.bewit import authenticate_bewit, build_bewit, decode_bewit, extract_bewit
from hawkauth.client import build_authorization_header, build_response_header
from hawkauth.common.errors import (
    HawkError,
    InvalidCredentialsError,
    MissingOptionError,
    UnsupportedAlgorithmError,
)
from hawkauth.models import (
    Algorithm,
    AuthenticationFailure,
    AuthenticationResult,
    Bewit,
    Credentials,
    FailureField,
    MessageType,
    SigningContext,
)
from hawkauth.server import authenticate, authenticate_response
from hawkauth.timestamp import build_failure_header, build_timestamp_header, compute_offset

__version__ = "1.0.0"

__all__ = [
    "Algorithm",
    "AuthenticationFailure",
    "AuthenticationResult",
    "Bewit",
    "Credentials",
    "FailureField",
    "HawkError",
    "InvalidCredentialsError",
    "MessageType",
    "MissingOptionError",
    "SigningContext",
    "UnsupportedAlgorithmError",
    "authenticate",
    "authenticate_bewit",
    "authenticate_response",
    "build_authorization_header",
    "build_bewit",
    "build_failure_header",
    "build_response_header",
    "build_timestamp_header",
    "compute_offset",
    "decode_bewit",
    "extract_bewit",
]
