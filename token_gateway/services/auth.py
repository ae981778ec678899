"""Bearer authentication for protected routes.

Every protected request must carry a valid **Bearer** JWT in the
``Authorization`` header.  Legacy opaque tokens never reach this layer in
their raw form: :mod:`token_gateway.services.exchange` has already traded them
for a JWT, or recorded why it could not.
"""
from __future__ import annotations

from typing import Annotated, Any

from fastapi import Depends, HTTPException, status, Request
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from jose import jwt, JWTError
from loguru import logger

from token_gateway.config import Settings
from token_gateway.models.auth import User
from token_gateway.services.exchange import EXCHANGE_ERROR_STATE_KEY


# ---------------------------------------------------------------------------
# Security scheme for FastAPI docs
# ---------------------------------------------------------------------------

_bearer_scheme = HTTPBearer(
    auto_error=False,
    scheme_name="Bearer",
    description='Please insert JWT with Bearer schema. Example: "Authorization: Bearer {token}"',
)

_CHALLENGE = {"WWW-Authenticate": "Bearer"}


# ---------------------------------------------------------------------------
# Public helpers
# ---------------------------------------------------------------------------


def decode_token(config: Settings, token: str) -> dict[str, Any]:
    """Verify signature, expiry, issuer and audience; return the claims."""
    return jwt.decode(
        token,
        config.JWT_SECRET,
        algorithms=[config.JWT_ALGORITHM],
        audience=config.JWT_AUDIENCE,
        issuer=config.JWT_ISSUER,
    )


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers=_CHALLENGE,
    )


async def get_current_user(
    request: Request,
    creds: Annotated[HTTPAuthorizationCredentials | None, Depends(_bearer_scheme)],
) -> User:  # noqa: D401
    """FastAPI dependency that validates the bearer JWT and returns a :class:`User`."""

    if getattr(request.state, EXCHANGE_ERROR_STATE_KEY, None) is not None:
        raise _unauthorized("Invalid authentication token")

    if creds is None:
        logger.debug("No bearer token presented for {}", request.url.path)
        raise _unauthorized("Not authenticated")

    config: Settings = request.app.state.settings
    try:
        payload = decode_token(config, creds.credentials)
    except JWTError as exc:
        logger.debug("Bearer token rejected: {}", exc)
        raise _unauthorized("Invalid authentication token") from exc

    return User(
        username=payload.get("sub", "anon"),
        roles=payload.get("roles", []),
    )
