"""Package root for *token_gateway*.

Re‑exports the FastAPI ``app`` so you can run::

    uvicorn token_gateway:app

from anywhere on PYTHONPATH.
"""
from __future__ import annotations

from importlib.metadata import version, PackageNotFoundError

try:
    __version__ = version("token-gateway")  # Works when installed via pip/poetry
except PackageNotFoundError:  # pragma: no cover
    __version__ = "0.1.0"

# Export app for Uvicorn convenience --------------------------------------------------
from token_gateway.main import app, create_app  # noqa: E402  pylint: disable=wrong-import-position

__all__ = ["app", "create_app", "__version__"]
