"""JWT token utilities using HS256 signing.

Every verification failure raises the same ``AuthenticationError`` so callers
cannot tell a bad signature from an expired or malformed token. The concrete
cause is only logged at DEBUG level.
"""

from __future__ import annotations

import base64
import binascii
import hashlib
import hmac
import json
import logging
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any

from invoicedesk.core.clock import Clock, system_clock
from invoicedesk.core.exceptions import AuthenticationError, ConfigurationError

logger = logging.getLogger(__name__)

ALGORITHM = "HS256"
DEFAULT_TTL_SECONDS = 3600
INVALID_TOKEN_MESSAGE = "Invalid or expired token."


class _Rejected(Exception):
    """Internal marker carrying the concrete rejection cause."""


def _b64url_encode(data: bytes) -> str:
    return base64.urlsafe_b64encode(data).decode("ascii").rstrip("=")


def _b64url_decode(data: str) -> bytes:
    padding = "=" * (-len(data) % 4)
    return base64.urlsafe_b64decode(f"{data}{padding}".encode("ascii"))


def _sign(message: str, secret: str) -> str:
    digest = hmac.new(secret.encode("utf-8"), message.encode("utf-8"), hashlib.sha256).digest()
    return _b64url_encode(digest)


def _json_dumps(payload: dict[str, Any]) -> str:
    return json.dumps(payload, separators=(",", ":"), sort_keys=True)


def _decode_segment(segment: str) -> dict[str, Any]:
    try:
        decoded = json.loads(_b64url_decode(segment).decode("utf-8"))
    except (binascii.Error, UnicodeError, ValueError) as exc:
        raise _Rejected("undecodable segment") from exc
    if not isinstance(decoded, dict):
        raise _Rejected("segment is not an object")
    return decoded


def _int_claim(payload: dict[str, Any], name: str) -> int:
    value = payload.get(name)
    if isinstance(value, bool) or not isinstance(value, int):
        raise _Rejected(f"claim {name} missing or not an integer")
    return value


@dataclass(frozen=True)
class TokenClaims:
    user_id: int
    email: str
    roles: tuple[str, ...]
    issued_at: int
    expires_at: int


def encode_jwt(payload: dict[str, Any], secret: str, ttl: timedelta, now: datetime) -> str:
    """Encode a signed JWT using HS256."""
    if not secret:
        raise ConfigurationError("JWT secret must be configured.")

    issued_at = int(now.timestamp())
    body = dict(payload)
    body["iat"] = issued_at
    body["exp"] = issued_at + int(ttl.total_seconds())
    header = {"alg": ALGORITHM, "typ": "JWT"}

    header_segment = _b64url_encode(_json_dumps(header).encode("utf-8"))
    payload_segment = _b64url_encode(_json_dumps(body).encode("utf-8"))
    signing_input = f"{header_segment}.{payload_segment}"
    signature = _sign(signing_input, secret=secret)
    return f"{signing_input}.{signature}"


def _decode(token: str, secret: str, now: datetime) -> dict[str, Any]:
    if not isinstance(token, str):
        raise _Rejected("token is not a string")
    parts = token.split(".")
    if len(parts) != 3 or not all(parts):
        raise _Rejected("token does not have three segments")
    header_segment, payload_segment, signature_segment = parts

    header = _decode_segment(header_segment)
    if header.get("alg") != ALGORITHM:
        raise _Rejected("unexpected algorithm")

    signing_input = f"{header_segment}.{payload_segment}"
    expected_signature = _sign(signing_input, secret=secret)
    if not hmac.compare_digest(expected_signature.encode("ascii"), signature_segment.encode("utf-8")):
        raise _Rejected("signature mismatch")

    payload = _decode_segment(payload_segment)
    issued_at = _int_claim(payload, "iat")
    expires_at = _int_claim(payload, "exp")
    current = int(now.timestamp())
    if current < issued_at:
        raise _Rejected("token issued in the future")
    if current >= expires_at:
        raise _Rejected("token expired")
    return payload


def decode_jwt(token: str, secret: str, now: datetime) -> dict[str, Any]:
    """Decode and validate a signed JWT token."""
    if not secret:
        raise ConfigurationError("JWT secret must be configured.")
    try:
        return _decode(token, secret, now)
    except _Rejected as exc:
        logger.debug("auth.token.rejected", extra={"event": "auth.token.rejected", "cause": str(exc)})
        raise AuthenticationError(INVALID_TOKEN_MESSAGE) from None


def issue_token(
    user: Any,
    secret: str,
    ttl_seconds: int = DEFAULT_TTL_SECONDS,
    clock: Clock = system_clock,
) -> str:
    """Create an access token for ``user`` (anything with id, email and roles)."""
    payload = {
        "user_id": int(user.id),
        "email": str(user.email),
        "roles": list(user.roles or []),
    }
    return encode_jwt(payload=payload, secret=secret, ttl=timedelta(seconds=ttl_seconds), now=clock.now())


def verify_token(token: str, secret: str, clock: Clock = system_clock) -> TokenClaims:
    """Return the embedded claims of a valid token."""
    payload = decode_jwt(token, secret=secret, now=clock.now())
    try:
        user_id = _int_claim(payload, "user_id")
        email = payload["email"]
        roles = payload.get("roles", [])
        if not isinstance(email, str) or not isinstance(roles, list):
            raise _Rejected("subject claims malformed")
    except (KeyError, _Rejected):
        logger.debug("auth.token.rejected", extra={"event": "auth.token.rejected", "cause": "subject claims"})
        raise AuthenticationError(INVALID_TOKEN_MESSAGE) from None
    return TokenClaims(
        user_id=user_id,
        email=email,
        roles=tuple(str(role) for role in roles),
        issued_at=int(payload["iat"]),
        expires_at=int(payload["exp"]),
    )


@dataclass(frozen=True)
class TokenService:
    """Token issuing and verification bound to the process secret."""

    secret: str
    ttl_seconds: int = DEFAULT_TTL_SECONDS
    clock: Clock = system_clock

    def __post_init__(self) -> None:
        if not self.secret:
            raise ConfigurationError("JWT secret must be configured.")
        if self.ttl_seconds < 1:
            raise ConfigurationError("Token validity window must be positive.")

    def __repr__(self) -> str:
        return f"TokenService(ttl_seconds={self.ttl_seconds})"

    def issue(self, user: Any) -> str:
        return issue_token(user, secret=self.secret, ttl_seconds=self.ttl_seconds, clock=self.clock)

    def verify(self, token: str) -> TokenClaims:
        return verify_token(token, secret=self.secret, clock=self.clock)
