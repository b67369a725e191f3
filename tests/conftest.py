"""Shared test fixtures — reduces boilerplate across test modules.

Provides:
- ``WEBHOOK_SECRET`` / ``GITHUB_TOKEN`` — deterministic credentials
- ``sign`` — helper producing an ``X-Hub-Signature`` header value
- ``test_settings`` — a complete Settings value rooted in ``tmp_path``
- ``test_client`` — TestClient against an app built from ``test_settings``
"""

from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from readmesync.config import Settings
from readmesync.main import create_app
from readmesync.webhooks import sign_payload

WEBHOOK_SECRET = "whsec_test"
GITHUB_TOKEN = "ghp_testtoken123"


def sign(body: bytes, secret: str = WEBHOOK_SECRET) -> str:
    """Return the ``X-Hub-Signature`` header value for *body*."""
    return f"sha1={sign_payload(body, secret)}"


def make_settings(root: Path, **overrides) -> Settings:
    """Settings for a throwaway hugo site under *root*."""
    values = {
        "WEBHOOK_SECRET": WEBHOOK_SECRET,
        "GITHUB_TOKEN": GITHUB_TOKEN,
        "HUGO_CMD": "/usr/local/bin/hugo",
        "HUGO_CONFIG": str(root / "site" / "config.toml"),
        "HUGO_SOURCE": str(root / "site"),
        "HUGO_OUTPUT": str(root / "public"),
        "OUTPUT_DIR": "/content/project",
        "GITHUB_ORG": "darlinggo",
        "GITHUB_API_BASE": "https://api.github.com",
        "RELEASE_BRANCH": "master",
    }
    values.update(overrides)
    return Settings(_env_file=None, **values)


@pytest.fixture
def test_settings(tmp_path: Path) -> Settings:
    """Complete settings with the content directory already created."""
    (tmp_path / "site" / "content" / "project").mkdir(parents=True)
    return make_settings(tmp_path)


@pytest.fixture
def test_client(test_settings: Settings) -> TestClient:
    """A fresh ``TestClient`` wrapping an app built from ``test_settings``."""
    return TestClient(create_app(test_settings))
