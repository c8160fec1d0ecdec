"""Unit tests for Feishu request signing."""

import base64
import hashlib
import hmac
from unittest.mock import patch

from hypothesis import given, settings, strategies as st

from src.relay.feishu.card import build_job_card
from src.relay.feishu.signing import generate_feishu_signature, sign_message


def _message():
    return build_job_card(
        conclusion="success",
        workflow_name="CI",
        job_name="build",
        branch="main",
        log_url="https://github.com/octo/widgets/actions/runs/1/job/2",
        started_at="2024-01-01T00:00:00Z",
        completed_at="2024-01-01T00:02:05Z",
        repository="octo/widgets",
    )


class TestGenerateSignature:

    def test_known_vector(self) -> None:
        assert (
            generate_feishu_signature("abc", "1700000000")
            == "VIS10b0EBvzzSdFnuk4tznEmK5wHaruvf/WnViv2yR4="
        )

    def test_deterministic(self) -> None:
        first = generate_feishu_signature("abc", "1700000000")
        second = generate_feishu_signature("abc", "1700000000")

        assert first == second

    def test_timestamp_changes_signature(self) -> None:
        assert generate_feishu_signature("abc", "1700000000") != (
            generate_feishu_signature("abc", "1700000001")
        )

    @given(
        secret=st.text(min_size=1, max_size=40).filter(lambda s: "\x00" not in s),
        timestamp=st.integers(min_value=0, max_value=4_000_000_000).map(str),
    )
    @settings(max_examples=100)
    def test_matches_key_over_empty_message(self, secret: str, timestamp: str) -> None:
        key = f"{timestamp}\n{secret}".encode("utf-8")
        expected = base64.b64encode(
            hmac.new(key, b"", hashlib.sha256).digest()
        ).decode("utf-8")

        assert generate_feishu_signature(secret, timestamp) == expected


class TestSignMessage:

    def test_no_secret_leaves_message_unsigned(self) -> None:
        message = _message()

        for secret in (None, ""):
            signed = sign_message(message, secret)
            assert signed is message
            assert "sign" not in signed.to_payload()
            assert "timestamp" not in signed.to_payload()

    def test_attaches_timestamp_and_sign(self) -> None:
        signed = sign_message(_message(), "abc", timestamp=1700000000)
        payload = signed.to_payload()

        assert payload["timestamp"] == "1700000000"
        assert payload["sign"] == "VIS10b0EBvzzSdFnuk4tznEmK5wHaruvf/WnViv2yR4="
        assert signed.is_signed

    def test_defaults_to_current_time(self) -> None:
        with patch("src.relay.feishu.signing.time.time", return_value=1700000000.9):
            signed = sign_message(_message(), "abc")

        assert signed.timestamp == "1700000000"
        assert signed.sign == generate_feishu_signature("abc", "1700000000")

    def test_original_message_is_not_mutated(self) -> None:
        message = _message()

        sign_message(message, "abc", timestamp=1700000000)

        assert message.timestamp is None
        assert message.sign is None
        assert not message.is_signed

    def test_card_is_unchanged_by_signing(self) -> None:
        message = _message()

        signed = sign_message(message, "abc", timestamp=1700000000)

        assert signed.card == message.card
        assert signed.msg_type == "interactive"
