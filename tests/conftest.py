"""Pytest configuration for all tests."""

import pytest

RELAY_ENV_VARS = (
    "GITHUB_WEBHOOK_SECRET",
    "FEISHU_SECRET",
    "FEISHU_WEBHOOK_URL",
    "FEISHU_TIMEOUT_SECONDS",
    "HOST",
    "PORT",
    "LOG_LEVEL",
)


@pytest.fixture(autouse=True)
def clean_relay_env(monkeypatch, tmp_path):
    """Keep the developer's environment and .env file out of settings."""
    for name in RELAY_ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.chdir(tmp_path)
