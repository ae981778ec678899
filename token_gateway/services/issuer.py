"""Token issuer: turns a recognised opaque credential into a signed JWT.

This module is deliberately *framework‑free*: it contains no FastAPI imports so
it can be unit‑tested without an ASGI stack.  Calls are blocking (file lookup
plus HMAC signing); async callers should go through the thread pool.
"""
from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

from jose import jwt
from jose.exceptions import JOSEError

from token_gateway.config import Settings
from token_gateway.services.credentials import CredentialStore, CredentialStoreError

# ---------------------------------------------------------------------------
# Exceptions
# ---------------------------------------------------------------------------


class TokenIssueError(RuntimeError):
    """Base class for every reason a bearer token could not be minted."""


class InvalidCredential(TokenIssueError):
    """The opaque credential is unknown or has expired."""


class ConfigurationError(TokenIssueError):
    """Signing parameters or the credential file are unavailable."""


# ---------------------------------------------------------------------------
# Issuer
# ---------------------------------------------------------------------------


class TokenIssuer:
    """Mint bearer tokens for credentials found in a :class:`CredentialStore`."""

    def __init__(self, store: CredentialStore):
        self._store = store

    def issue(self, config: Settings, opaque_token: str) -> str:
        """Return a signed JWT for *opaque_token*.

        Raises :class:`InvalidCredential` when the token is not registered or
        has expired, :class:`ConfigurationError` when signing is impossible.
        """
        if not config.JWT_SECRET:
            raise ConfigurationError("JWT_SECRET is not configured")

        try:
            cred = self._store.lookup(opaque_token)
        except CredentialStoreError as exc:
            raise ConfigurationError(str(exc)) from exc

        if cred is None:
            raise InvalidCredential("Unknown opaque credential")

        now = datetime.now(tz=timezone.utc)
        if cred.expires_at is not None and cred.expires_at <= now:
            raise InvalidCredential(f"Opaque credential for {cred.username!r} has expired")

        payload: dict[str, Any] = {
            "sub": cred.username,
            "roles": cred.roles,
            "iat": int(now.timestamp()),
            "exp": int(now.timestamp() + config.JWT_TTL_SEC),
        }
        if config.JWT_ISSUER:
            payload["iss"] = config.JWT_ISSUER
        if config.JWT_AUDIENCE:
            payload["aud"] = config.JWT_AUDIENCE

        try:
            return jwt.encode(payload, config.JWT_SECRET, algorithm=config.JWT_ALGORITHM)
        except JOSEError as exc:
            raise ConfigurationError(f"Cannot sign token: {exc}") from exc

    __call__ = issue
