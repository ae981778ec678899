"""
Shared pytest fixtures for token gateway tests.

Provides:
- Opaque token constants (exactly 32 characters)
- A credential file writer backed by tmp_path
- Settings pointing at that file
"""

from pathlib import Path
from typing import Callable, Optional

import pytest
import yaml

from token_gateway.config import Settings

ALICE_TOKEN = "0123456789abcdef0123456789abcdef"
EXPIRED_TOKEN = "fedcba9876543210fedcba9876543210"
UNKNOWN_TOKEN = "f" * 32

TEST_SECRET = "test-secret"


@pytest.fixture
def write_credentials(tmp_path: Path) -> Callable[[Optional[list]], Path]:
    """Return a helper that (re)writes credentials.yaml and returns its path."""
    path = tmp_path / "credentials.yaml"

    def _write(entries: Optional[list] = None) -> Path:
        if entries is None:
            entries = [
                {"token": ALICE_TOKEN, "username": "alice", "roles": ["admin"]},
                {
                    "token": EXPIRED_TOKEN,
                    "username": "bob",
                    "roles": [],
                    "expires_at": "2000-01-01T00:00:00+00:00",
                },
            ]
        path.write_text(yaml.safe_dump({"credentials": entries}), encoding="utf-8")
        return path

    return _write


@pytest.fixture
def credentials_file(write_credentials) -> Path:
    return write_credentials()


@pytest.fixture
def config(credentials_file: Path, tmp_path: Path) -> Settings:
    return Settings(
        JWT_SECRET=TEST_SECRET,
        CREDENTIALS_FILE=str(credentials_file),
        STATIC_DIR=str(tmp_path / "no-static"),
    )
