"""Shared fixtures for relay tests."""

import pytest

from src.relay.config import RelaySettings

from .helpers import FEISHU_URL, FeishuRecorder


@pytest.fixture
def recorder() -> FeishuRecorder:
    return FeishuRecorder()


@pytest.fixture
def relay_settings() -> RelaySettings:
    """Settings with delivery configured and both secrets unset."""
    return RelaySettings(feishu_webhook_url=FEISHU_URL)
