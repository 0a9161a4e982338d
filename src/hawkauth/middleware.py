"""Starlette middleware that authenticates requests with Hawk headers or bewits."""

from __future__ import annotations

import dataclasses
import time

import structlog
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response
from starlette.types import ASGIApp

from hawkauth import header
from hawkauth.bewit import BEWIT_PARAM, authenticate_bewit
from hawkauth.client import build_response_header
from hawkauth.common.errors import unauthorized_response
from hawkauth.common.logging import get_logger
from hawkauth.common.metrics import record_authentication
from hawkauth.common.settings import Settings, get_settings
from hawkauth.models import (
    AuthenticationFailure,
    Credentials,
    CredentialsLookup,
    FailureField,
    NonceLookup,
    SigningContext,
)
from hawkauth.server import authenticate
from hawkauth.timestamp import build_failure_header

logger = get_logger(__name__)

_DEFAULT_PORTS = {"http": 80, "https": 443, "ws": 80, "wss": 443}


def request_resource(request: Request) -> str:
    """Request target (path and query) as sent on the wire."""
    raw_path = request.scope.get("raw_path")
    path = raw_path.decode("latin-1").partition("?")[0] if raw_path else request.url.path
    query = request.scope.get("query_string", b"")
    if query:
        path = f"{path}?{query.decode('latin-1')}"
    return path


async def request_context(request: Request) -> SigningContext:
    """Build a signing context for an incoming request."""
    port = request.url.port or _DEFAULT_PORTS.get(request.url.scheme, 80)
    return SigningContext(
        method=request.method,
        resource=request_resource(request),
        host=request.url.hostname or "",
        port=port,
        content_type=request.headers.get("content-type"),
        payload=await request.body(),
    )


class HawkAuthMiddleware(BaseHTTPMiddleware):
    """Hawk auth middleware for service-to-service requests."""

    def __init__(
        self,
        app: ASGIApp,
        credentials_lookup: CredentialsLookup,
        nonce_lookup: NonceLookup | None = None,
        settings: Settings | None = None,
    ) -> None:
        super().__init__(app)
        self._settings = settings or get_settings()
        self._credentials_lookup = credentials_lookup
        self._nonce_lookup = nonce_lookup
        self._exempt_paths = set(self._settings.auth_exempt_paths)

    def _wants_bewit(self, request: Request) -> bool:
        if not self._settings.allow_bewit or request.method not in ("GET", "HEAD"):
            return False
        return BEWIT_PARAM in request.query_params

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        if request.url.path in self._exempt_paths:
            return await call_next(request)

        authorization = request.headers.get("authorization")
        context = await request_context(request)
        started = time.perf_counter()

        if authorization and authorization.lower().startswith("hawk"):
            scheme = "header"
            result = authenticate(
                authorization,
                context,
                self._credentials_lookup,
                self._nonce_lookup,
                timestamp_skew=self._settings.timestamp_skew_seconds,
            )
        elif self._wants_bewit(request):
            scheme = "bewit"
            # HEAD is answered with a GET bewit
            if request.method == "HEAD":
                bewit_context = dataclasses.replace(context, method="GET")
            else:
                bewit_context = context
            result = authenticate_bewit(None, bewit_context, self._credentials_lookup)
        else:
            scheme = "none"
            result = AuthenticationFailure(FailureField.ID, "Missing authentication")

        if isinstance(result, AuthenticationFailure):
            record_authentication(scheme, result.field.value, time.perf_counter() - started)
            logger.warning(
                "Rejected request",
                scheme=scheme,
                field=result.field.value,
                reason=result.message,
                path=request.url.path,
            )
            return unauthorized_response(result, build_failure_header(result))

        record_authentication(scheme, None, time.perf_counter() - started)
        request.state.hawk = result
        structlog.contextvars.bind_contextvars(hawk_id=result.id)
        try:
            response = await call_next(request)
            if scheme == "header" and self._settings.sign_responses:
                response = await self._sign_response(response, context, authorization, result)
            return response
        finally:
            structlog.contextvars.unbind_contextvars("hawk_id")

    async def _sign_response(
        self,
        response: Response,
        context: SigningContext,
        authorization: str,
        credentials: Credentials,
    ) -> Response:
        body = b"".join([chunk async for chunk in response.body_iterator])  # type: ignore[attr-defined]
        parts = header.parse(authorization)
        signed = dataclasses.replace(
            context,
            timestamp=int(parts["ts"]),
            nonce=parts["nonce"],
            app=parts.get("app"),
            dlg=parts.get("dlg"),
            ext=None,
            hash=None,
            content_type=response.headers.get("content-type"),
            payload=body,
        )
        signed_response = Response(content=body, status_code=response.status_code)
        signed_response.raw_headers = [
            (name, value) for name, value in response.raw_headers if name != b"content-length"
        ] + [(b"content-length", str(len(body)).encode("latin-1"))]
        signed_response.headers["Server-Authorization"] = build_response_header(signed, credentials)
        return signed_response
