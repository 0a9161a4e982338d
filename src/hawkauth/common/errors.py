"""Shared error types and error responses."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from starlette.responses import JSONResponse

if TYPE_CHECKING:
    from hawkauth.models import AuthenticationFailure


class ErrorCode:
    UNAUTHORIZED = "unauthorized"
    MISSING_OPTION = "missing_option"
    INVALID_CREDENTIALS = "invalid_credentials"
    UNSUPPORTED_ALGORITHM = "unsupported_algorithm"


class HawkError(Exception):
    """Caller-contract violation.

    Raised before any cryptographic work for mistakes made by the
    integrating code. Authentication outcomes are never raised.
    """

    code = "hawk_error"


class MissingOptionError(HawkError):
    """A required signing context field is absent."""

    code = ErrorCode.MISSING_OPTION


class InvalidCredentialsError(HawkError):
    """A required credential member is absent."""

    code = ErrorCode.INVALID_CREDENTIALS


class UnsupportedAlgorithmError(HawkError, ValueError):
    """The digest algorithm is not one of sha1/sha256."""

    code = ErrorCode.UNSUPPORTED_ALGORITHM


def unauthorized_response(
    failure: AuthenticationFailure,
    challenge: str,
) -> JSONResponse:
    payload: dict[str, Any] = {
        "error": {
            "code": ErrorCode.UNAUTHORIZED,
            "field": failure.field.value,
            "message": failure.message,
        }
    }
    return JSONResponse(
        payload,
        status_code=401,
        headers={"WWW-Authenticate": challenge},
    )
