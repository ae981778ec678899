"""Central configuration object (env‑driven).

Uses Pydantic *BaseSettings* so everything can be overridden via environment
variables or a local *.env* file.  The instance is built once at startup and
handed to :func:`token_gateway.main.create_app`; request‑time code receives
it explicitly and never mutates it.
"""
from __future__ import annotations

from pathlib import Path
from typing import Optional

from pydantic_settings import BaseSettings
from pydantic import Field

_PACKAGE_DIR = Path(__file__).resolve().parent


class Settings(BaseSettings):
    """Load settings from env vars or .env."""

    # ------------------------------------------------------------------
    # Token signing
    # ------------------------------------------------------------------

    JWT_SECRET: str = Field(
        default="dev-secret-change-me",
        description="HMAC secret used to sign exchanged bearer tokens (replace in prod!)",
    )
    JWT_ALGORITHM: str = Field(default="HS256", description="JOSE signing algorithm")
    JWT_ISSUER: Optional[str] = Field(default="token-gateway", description="'iss' claim")
    JWT_AUDIENCE: Optional[str] = Field(default="token-gateway", description="'aud' claim")
    JWT_TTL_SEC: int = Field(default=3600, gt=0, description="Lifetime of exchanged tokens")

    CREDENTIALS_FILE: str = Field(
        default=str(_PACKAGE_DIR / "credentials" / "credentials.yaml"),
        description="Path to YAML file listing the accepted opaque credentials",
    )

    # ------------------------------------------------------------------
    # Host
    # ------------------------------------------------------------------

    CORS_ORIGINS: list[str] = Field(
        default_factory=lambda: ["http://localhost:3110"],
        description="Origins allowed to call the API with credentials",
    )
    STATIC_DIR: str = Field(default="wwwroot", description="Static files root (optional)")
    DEBUG: bool = False

    # ------------------------------------------------------------------
    # OpenAPI / Swagger UI
    # ------------------------------------------------------------------

    SWAGGER_TITLE: str = "Token Gateway"
    SWAGGER_VERSION: str = "v1"
    SWAGGER_DESCRIPTION: str = "Web host exchanging legacy opaque credentials for bearer tokens."
    SWAGGER_LICENSE: str = "Apache-2.0"
    SWAGGER_CONTACT: str = "Platform team"
    SWAGGER_DOCS_URL: str = "/docs"

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"


# singleton instance ---------------------------------------------------------

settings = Settings()
