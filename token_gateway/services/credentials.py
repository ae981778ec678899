"""Opaque credential store backed by a YAML file.

Reads ``credentials/credentials.yaml`` on first access (with naïve mtime
caching) and answers lookups by token.  Lookups happen from the thread pool,
so the cache swap is done under a lock.

File layout::

    credentials:
      - token: 0123456789abcdef0123456789abcdef
        username: alice
        roles: [admin]
        expires_at: "2030-01-01T00:00:00+00:00"   # optional
"""
from __future__ import annotations

import threading
from pathlib import Path
from typing import Dict, Optional

import yaml
from loguru import logger
from pydantic import ValidationError

from token_gateway.models.auth import OpaqueCredential


# ---------------------------------------------------------------------------
# Exceptions
# ---------------------------------------------------------------------------


class CredentialStoreError(RuntimeError):
    """Raised when the YAML cannot be read, parsed or validated."""


# ---------------------------------------------------------------------------
# Store
# ---------------------------------------------------------------------------


class CredentialStore:
    """Mapping token → :class:`OpaqueCredential`, reloaded when the file changes."""

    def __init__(self, path: str | Path):
        self._path = Path(path).resolve()
        self._lock = threading.RLock()
        self._cache: Dict[str, OpaqueCredential] = {}
        self._mtime: float = -1.0  # not loaded yet

    @property
    def path(self) -> Path:
        return self._path

    def lookup(self, token: str) -> Optional[OpaqueCredential]:  # noqa: D401
        """Return the credential registered for *token* or ``None``."""
        return self._load().get(token)

    def _load(self) -> Dict[str, OpaqueCredential]:
        """(Re)load YAML file, return mapping token → credential."""
        try:
            mtime = self._path.stat().st_mtime
        except FileNotFoundError as exc:
            raise CredentialStoreError(f"Credential file missing: {self._path}") from exc

        with self._lock:
            if mtime <= self._mtime:
                return self._cache  # still fresh

            logger.debug("Reloading credentials from {}", self._path)
            try:
                raw = yaml.safe_load(self._path.read_text(encoding="utf-8")) or {}
            except yaml.YAMLError as exc:
                raise CredentialStoreError(f"YAML syntax error in {self._path}: {exc}") from exc

            if not isinstance(raw, dict):
                raise CredentialStoreError(f"Expected a mapping at the top of {self._path}")

            credentials: Dict[str, OpaqueCredential] = {}
            for entry in raw.get("credentials") or []:
                try:
                    cred = OpaqueCredential.model_validate(entry)
                except ValidationError as exc:
                    raise CredentialStoreError(f"Invalid credential entry: {exc}") from exc
                credentials[cred.token] = cred

            # swap rather than mutate so concurrent readers keep a whole view
            self._cache = credentials
            self._mtime = mtime
            return self._cache
