"""Request-level authentication gate.

Every path under the API prefix needs a bearer token except the fixed public
paths (health, registration, login). Paths are compared exactly, so a
variant spelling of a public path is treated as protected.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass
from typing import Any

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import JSONResponse, Response

from invoicedesk.auth.jwt import INVALID_TOKEN_MESSAGE, TokenService
from invoicedesk.core.exceptions import AuthenticationError

logger = logging.getLogger(__name__)

AUTHENTICATION_REQUIRED_MESSAGE = "Please provide a valid bearer token in the Authorization header."
PUBLIC_PATHS = ("/health", "/auth/register", "/auth/login")


@dataclass(frozen=True)
class Identity:
    user_id: int
    email: str
    roles: tuple[str, ...] = ()


def extract_bearer_token(authorization: str | None) -> str:
    if authorization is None or not authorization.strip():
        raise AuthenticationError(AUTHENTICATION_REQUIRED_MESSAGE, reason="authentication_required")
    parts = authorization.strip().split(" ")
    if len(parts) != 2 or parts[0].lower() != "bearer" or not parts[1]:
        raise AuthenticationError(AUTHENTICATION_REQUIRED_MESSAGE, reason="authentication_required")
    return parts[1]


class AuthGate:
    """Decides per request whether a token is needed and verifies it."""

    def __init__(
        self,
        tokens: TokenService,
        api_prefix: str = "/api",
        public_paths: Iterable[str] = PUBLIC_PATHS,
    ) -> None:
        self.tokens = tokens
        self.api_prefix = api_prefix.rstrip("/")
        self.public_paths = frozenset(f"{self.api_prefix}{path}" for path in public_paths)

    def in_api(self, path: str) -> bool:
        return path == self.api_prefix or path.startswith(f"{self.api_prefix}/")

    def requires_auth(self, path: str) -> bool:
        # Unknown API paths stay protected.
        return self.in_api(path) and path not in self.public_paths

    def verify_header(self, authorization: str | None) -> Identity:
        token = extract_bearer_token(authorization)
        claims = self.tokens.verify(token)
        return Identity(user_id=claims.user_id, email=claims.email, roles=claims.roles)

    def verify_request(self, authorization: str | None, path: str) -> Identity | None:
        """Identity for protected requests, ``None`` when no token is needed."""
        if not self.requires_auth(path):
            return None
        return self.verify_header(authorization)


def rejection_response(exc: AuthenticationError) -> JSONResponse:
    detail = AUTHENTICATION_REQUIRED_MESSAGE if exc.reason == "authentication_required" else INVALID_TOKEN_MESSAGE
    return JSONResponse(
        status_code=401,
        content={"status": "error", "error_code": exc.reason, "detail": detail},
        headers={"WWW-Authenticate": "Bearer"},
    )


class AuthGateMiddleware(BaseHTTPMiddleware):
    """Attach ``request.state.identity`` or short-circuit with 401."""

    def __init__(self, app: Any, gate: AuthGate) -> None:
        super().__init__(app)
        self.gate = gate

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        try:
            identity = self.gate.verify_request(request.headers.get("Authorization"), request.url.path)
        except AuthenticationError as exc:
            logger.info(
                "auth.request.rejected",
                extra={"event": "auth.request.rejected", "reason": exc.reason, "path": request.url.path},
            )
            return rejection_response(exc)

        request.state.identity = identity
        return await call_next(request)
