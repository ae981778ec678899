"""Models shared between the token issuer, the credential store and auth."""
from __future__ import annotations

from typing import Optional

from pydantic import AwareDatetime, BaseModel, Field

OPAQUE_TOKEN_LENGTH = 32


class User(BaseModel):
    """Authenticated caller context injected via Depends()."""

    username: str = Field(..., description="Caller username or service account ID")
    roles: list[str] = Field(default_factory=list, description="Global roles, e.g. 'admin'")

    model_config = {
        "extra": "forbid",
        "frozen": True,
    }


class OpaqueCredential(BaseModel):
    """One row of *credentials.yaml*: a legacy token and the account behind it."""

    token: str = Field(
        ...,
        min_length=OPAQUE_TOKEN_LENGTH,
        max_length=OPAQUE_TOKEN_LENGTH,
        repr=False,
        description="Fixed‑length opaque token presented by legacy clients",
    )
    username: str
    roles: list[str] = Field(default_factory=list)
    expires_at: Optional[AwareDatetime] = Field(
        default=None,
        description="Expiry (timezone required); the credential never expires when unset",
    )

    model_config = {
        "extra": "forbid",
        "frozen": True,
    }
