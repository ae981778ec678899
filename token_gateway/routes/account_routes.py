"""FastAPI routes for authenticated callers.

Exposes:
    * GET /api/account/me   – Return the caller resolved from the bearer token.
    * GET /api/account/ping – Liveness probe (no auth).
"""

from fastapi import APIRouter, Depends, status

from token_gateway.models.auth import User
from token_gateway.services.auth import get_current_user

router = APIRouter(prefix="", tags=["account"])


@router.get(
    "/me",
    response_model=User,
    status_code=status.HTTP_200_OK,
    summary="Return the authenticated caller",
)
async def me(user: User = Depends(get_current_user)) -> User:
    return user


@router.get("/ping", include_in_schema=False)
async def ping() -> dict[str, str]:
    """Simple liveness probe for load balancers and k8s probes."""
    return {"status": "ok"}
