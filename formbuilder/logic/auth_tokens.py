"""Signed identity tokens.

Tokens are URL-safe HMAC-SHA256 signed JSON payloads:
token = base64url(payload) + "." + base64url(signature).
The payload carries the user id, email, role and an expiry (epoch seconds).
"""

from __future__ import annotations

import base64
import hashlib
import hmac
import json
import time
from dataclasses import dataclass
from typing import Optional

from formbuilder.models.records import UserRecord


class InvalidToken(ValueError):
    pass


@dataclass(frozen=True)
class Identity:
    user_id: str
    email: str
    role: str
    expires_at: int


def _b64(data: bytes) -> str:
    return base64.urlsafe_b64encode(data).rstrip(b"=").decode("ascii")


def _unb64(s: str) -> bytes:
    s_bytes = s.encode("ascii")
    padding = b"=" * (-len(s_bytes) % 4)
    return base64.urlsafe_b64decode(s_bytes + padding)


class TokenSigner:
    def __init__(self, secret_key: str, *, ttl_seconds: int = 7 * 24 * 3600, salt: str = "formbuilder.identity") -> None:
        self._key = (secret_key or "").encode("utf-8") + salt.encode("utf-8")
        self.ttl_seconds = int(ttl_seconds)

    def _sign(self, payload: bytes) -> bytes:
        return hmac.new(self._key, payload, hashlib.sha256).digest()

    def issue(self, user: UserRecord, *, now: Optional[float] = None) -> str:
        issued = int(now if now is not None else time.time())
        claims = {
            "sub": user.id,
            "email": user.email,
            "role": user.role,
            "exp": issued + self.ttl_seconds,
        }
        payload = json.dumps(claims, separators=(",", ":"), sort_keys=True).encode("utf-8")
        return f"{_b64(payload)}.{_b64(self._sign(payload))}"

    def verify(self, token: str, *, now: Optional[float] = None) -> Identity:
        """Return the identity in a token or raise InvalidToken."""
        try:
            payload_b64, sig_b64 = token.rsplit(".", 1)
            payload = _unb64(payload_b64)
            sig = _unb64(sig_b64)
        except (ValueError, UnicodeEncodeError) as exc:
            raise InvalidToken("Invalid token format") from exc
        if not hmac.compare_digest(sig, self._sign(payload)):
            raise InvalidToken("Invalid signature")
        try:
            claims = json.loads(payload.decode("utf-8"))
            identity = Identity(
                user_id=str(claims["sub"]),
                email=str(claims.get("email", "")),
                role=str(claims.get("role", "")),
                expires_at=int(claims["exp"]),
            )
        except (ValueError, KeyError, TypeError) as exc:
            raise InvalidToken("Invalid token payload") from exc
        current = now if now is not None else time.time()
        if current > identity.expires_at:
            raise InvalidToken("Token expired")
        return identity


def bearer_token_from_header(authorization: Optional[str]) -> Optional[str]:
    """Extract the token from an `Authorization: Bearer <token>` header value."""
    if not authorization:
        return None
    parts = authorization.strip().split(" ", 1)
    if len(parts) != 2 or parts[0].lower() != "bearer":
        return None
    token = parts[1].strip()
    return token or None


__all__ = ["Identity", "InvalidToken", "TokenSigner", "bearer_token_from_header"]
