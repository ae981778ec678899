"""Token exchange gate.

Legacy clients send a bare 32‑character opaque token in ``Authorization``
(sometimes behind an arbitrary scheme word).  Before authentication runs, the
gate trades that token for a signed JWT and rewrites the header to
``Bearer <jwt>``.  Anything else is left exactly as received.

The rewrite is computed by :func:`exchange_header` in one step; the ASGI
middleware only copies the scope with the final value, so nothing downstream
ever observes an intermediate header.
"""
from __future__ import annotations

import re
from typing import Any, Callable, Iterable, NamedTuple, Optional

from fastapi.concurrency import run_in_threadpool
from loguru import logger
from starlette.types import ASGIApp, Receive, Scope, Send

from token_gateway.config import Settings
from token_gateway.models.auth import OPAQUE_TOKEN_LENGTH
from token_gateway.services.issuer import InvalidCredential, TokenIssueError

Issuer = Callable[[Settings, str], str]

EXCHANGE_ERROR_STATE_KEY = "token_exchange_error"

_AUTHORIZATION = b"authorization"

# RFC 9110 OWS: space and horizontal tab only
_HEADER_WHITESPACE = re.compile(r"[ \t]+")


class Exchange(NamedTuple):
    """Outcome of running the gate over one header value."""

    header: Optional[str]
    error: Optional[TokenIssueError] = None


# ---------------------------------------------------------------------------
# Pure helpers
# ---------------------------------------------------------------------------


def candidate_token(header: Optional[str]) -> Optional[str]:
    """Return the opaque token carried by *header*, or ``None`` if it has none.

    The candidate is the last segment delimited by spaces or tabs, so both
    ``"<scheme> <token>"`` and a bare ``"<token>"`` are accepted.  Other
    characters (e.g. a latin‑1 NBSP) are part of the token.
    """
    if header is None:
        return None
    segments = _HEADER_WHITESPACE.split(header.strip(" \t"))
    token = segments[-1]
    if not token or len(token) != OPAQUE_TOKEN_LENGTH:
        return None
    return token


def exchange_header(header: Optional[str], config: Settings, issuer: Issuer) -> Exchange:
    """Compute the final ``Authorization`` value for *header*.

    * no opaque token: header returned unchanged, issuer not called
    * issuer succeeds: ``"Bearer <signed>"``
    * issuer fails: the bare token plus the error, for authentication to reject
    """
    token = candidate_token(header)
    if token is None:
        return Exchange(header)

    try:
        signed = issuer(config, token)
    except InvalidCredential as exc:
        logger.warning("Opaque credential rejected: {}", exc)
        return Exchange(token, exc)
    except TokenIssueError as exc:
        logger.error("Token exchange unavailable: {}", exc)
        return Exchange(token, exc)

    logger.debug("Opaque credential exchanged for bearer token")
    return Exchange(f"Bearer {signed}")


# ---------------------------------------------------------------------------
# ASGI middleware
# ---------------------------------------------------------------------------


class TokenExchangeMiddleware:
    """Rewrite legacy ``Authorization`` headers before authentication.

    Never answers a request itself: control always passes to the wrapped app.
    A failed exchange is recorded in request state under
    :data:`EXCHANGE_ERROR_STATE_KEY`.  Requests under *skip_prefixes* (static
    files) are handed on untouched.
    """

    def __init__(
        self,
        app: ASGIApp,
        *,
        config: Settings,
        issuer: Issuer,
        skip_prefixes: Iterable[str] = (),
    ):
        self.app = app
        self.config = config
        self.issuer = issuer
        self.skip_prefixes = tuple(p.rstrip("/") for p in skip_prefixes)

    def should_skip(self, path: str) -> bool:
        """True when *path* is served ahead of the gate."""
        return any(path == p or path.startswith(p + "/") for p in self.skip_prefixes)

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http" or self.should_skip(scope.get("path", "")):
            await self.app(scope, receive, send)
            return

        header = _get_authorization(scope)
        if candidate_token(header) is None:
            await self.app(scope, receive, send)
            return

        result = await run_in_threadpool(exchange_header, header, self.config, self.issuer)
        await self.app(_with_exchange(scope, result), receive, send)


def _get_authorization(scope: Scope) -> Optional[str]:
    for name, value in scope.get("headers") or []:
        if name.lower() == _AUTHORIZATION:
            return value.decode("latin-1")
    return None


def _with_exchange(scope: Scope, result: Exchange) -> Scope:
    """Return a copy of *scope* carrying the exchanged header and error state."""
    headers = [(k, v) for k, v in scope.get("headers") or [] if k.lower() != _AUTHORIZATION]
    if result.header is not None:
        headers.append((_AUTHORIZATION, result.header.encode("latin-1")))

    new_scope: dict[str, Any] = dict(scope)
    new_scope["headers"] = headers
    if result.error is not None:
        state = dict(scope.get("state") or {})
        state[EXCHANGE_ERROR_STATE_KEY] = result.error
        new_scope["state"] = state
    return new_scope
