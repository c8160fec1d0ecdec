"""Feishu custom-bot integration.

Card rendering, request signing, and webhook delivery.
"""

from src.relay.feishu.card import build_job_card, format_duration, parse_timestamp
from src.relay.feishu.client import FeishuClient
from src.relay.feishu.models import FeishuMessage
from src.relay.feishu.signing import generate_feishu_signature, sign_message

__all__ = [
    "FeishuClient",
    "FeishuMessage",
    "build_job_card",
    "format_duration",
    "generate_feishu_signature",
    "parse_timestamp",
    "sign_message",
]
