"""ASGI entry‑point for the token gateway.

Run in dev mode:
    uvicorn token_gateway.main:app --reload
"""
from __future__ import annotations

from contextlib import asynccontextmanager
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles
from loguru import logger

from token_gateway.routes import account_routes
from token_gateway.config import Settings, settings
from token_gateway.services.credentials import CredentialStore
from token_gateway.services.exchange import Issuer, TokenExchangeMiddleware
from token_gateway.services.issuer import TokenIssuer


# Outermost first.  Authentication is a route dependency, so anything listed
# here runs before it; the gate must stay inside CORS.  Static files are
# mounted under STATIC_PREFIX, which the gate passes through untouched.
MIDDLEWARE_ORDER = (CORSMiddleware, TokenExchangeMiddleware)

STATIC_PREFIX = "/static"


def _middleware_options(
    config: Settings, issuer: Issuer, static_prefixes: tuple[str, ...]
) -> dict[type, dict[str, Any]]:
    return {
        CORSMiddleware: dict(
            allow_origins=config.CORS_ORIGINS,
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        ),
        TokenExchangeMiddleware: dict(config=config, issuer=issuer, skip_prefixes=static_prefixes),
    }


def _lifespan(config: Settings):
    @asynccontextmanager
    async def lifespan(_app: FastAPI):
        logger.info("{} [{}] {}", config.SWAGGER_TITLE, config.SWAGGER_VERSION, config.SWAGGER_LICENSE)
        logger.info("{}", config.SWAGGER_DESCRIPTION)
        logger.info("{}, {}", config.SWAGGER_CONTACT, datetime.now(tz=timezone.utc).isoformat())
        yield

    return lifespan


def create_app(config: Optional[Settings] = None, *, issuer: Optional[Issuer] = None) -> FastAPI:
    """Build the web host around *config*.

    *issuer* defaults to a :class:`TokenIssuer` reading ``CREDENTIALS_FILE``.
    """
    config = config or settings
    if issuer is None:
        issuer = TokenIssuer(CredentialStore(config.CREDENTIALS_FILE))

    app = FastAPI(
        title=config.SWAGGER_TITLE,
        version=config.SWAGGER_VERSION,
        description=config.SWAGGER_DESCRIPTION,
        license_info={"name": config.SWAGGER_LICENSE},
        contact={"name": config.SWAGGER_CONTACT},
        docs_url=config.SWAGGER_DOCS_URL,
        debug=config.DEBUG,
        lifespan=_lifespan(config),
    )
    app.state.settings = config

    # -----------------------------------------------------------------------
    # Middleware (add_middleware wraps, so register innermost first)
    # -----------------------------------------------------------------------

    static_dir = Path(config.STATIC_DIR)
    serve_static = static_dir.is_dir()
    static_prefixes = (STATIC_PREFIX,) if serve_static else ()

    options = _middleware_options(config, issuer, static_prefixes)
    for middleware_cls in reversed(MIDDLEWARE_ORDER):
        app.add_middleware(middleware_cls, **options[middleware_cls])

    # -----------------------------------------------------------------------
    # Routes
    # -----------------------------------------------------------------------

    app.include_router(account_routes.router, prefix="/api/account")

    @app.get("/", include_in_schema=False)
    async def _root() -> dict[str, str]:
        return {"service": "token‑gateway", "status": "alive"}

    if serve_static:
        app.mount(STATIC_PREFIX, StaticFiles(directory=static_dir, html=True), name="static")
    else:
        logger.debug("Static directory {} not found, skipping", static_dir)

    return app


app = create_app(settings)
