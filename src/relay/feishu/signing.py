"""Feishu custom-bot request signing.

Feishu's scheme uses ``"{timestamp}\\n{secret}"`` as the HMAC-SHA256 key over
an empty message, base64-encodes the digest, and expects both the timestamp
and the signature in the request body. Feishu rejects timestamps more than
an hour away from its own clock.

See https://open.feishu.cn/document/client-docs/bot-v3/add-custom-bot
"""

import base64
import hashlib
import hmac
import time
from typing import Optional

from src.relay.feishu.models import FeishuMessage


def generate_feishu_signature(secret: str, timestamp: str) -> str:
    """Compute the Feishu signature for a timestamp.

    Args:
        secret: The bot's signing secret.
        timestamp: Epoch seconds as a string.

    Returns:
        str: Base64-encoded HMAC-SHA256 digest.
    """
    string_to_sign = f"{timestamp}\n{secret}"
    hmac_code = hmac.new(
        string_to_sign.encode("utf-8"), b"", digestmod=hashlib.sha256
    ).digest()
    return base64.b64encode(hmac_code).decode("utf-8")


def sign_message(
    message: FeishuMessage,
    secret: Optional[str],
    timestamp: Optional[int] = None,
) -> FeishuMessage:
    """Return a copy of the message with timestamp and sign attached.

    When no secret is configured the message is returned unchanged.

    Args:
        message: The unsigned message.
        secret: The bot's signing secret, or None.
        timestamp: Epoch seconds to sign with; defaults to now.

    Returns:
        FeishuMessage: The signed (or untouched) message.
    """
    if not secret:
        return message

    if timestamp is None:
        timestamp = int(time.time())
    ts = str(timestamp)

    return message.model_copy(
        update={"timestamp": ts, "sign": generate_feishu_signature(secret, ts)}
    )
