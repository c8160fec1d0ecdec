"""HMAC-SHA256 verification of GitHub webhook deliveries.

GitHub sends ``X-Hub-Signature-256: sha256=<hex digest>`` where the digest is
HMAC-SHA256 of the raw request body keyed with the webhook secret. The digest
must be computed over the bytes exactly as received; re-encoding parsed JSON
changes them whenever the sender's formatting is not canonical.
"""

import hashlib
import hmac
import logging
from typing import Optional

from src.relay.errors import InvalidSignatureError

logger = logging.getLogger(__name__)

SIGNATURE_PREFIX = "sha256="


def compute_github_signature(secret: str, body: bytes) -> str:
    """Compute the expected X-Hub-Signature-256 header value.

    Args:
        secret: The shared webhook secret.
        body: Raw request body bytes.

    Returns:
        str: ``"sha256="`` followed by the lowercase hex digest.
    """
    digest = hmac.new(
        key=secret.encode("utf-8"),
        msg=body,
        digestmod=hashlib.sha256,
    ).hexdigest()
    return SIGNATURE_PREFIX + digest


def verify_github_signature(
    secret: Optional[str],
    body: bytes,
    signature_header: Optional[str],
) -> None:
    """Verify a GitHub webhook signature against the raw body.

    When no secret is configured verification is skipped and every request
    is accepted.

    Args:
        secret: The shared webhook secret, or None for open relay mode.
        body: Raw request body bytes.
        signature_header: Value of the ``X-Hub-Signature-256`` header.

    Raises:
        InvalidSignatureError: If a secret is configured and the header is
            missing, malformed, or does not match.
    """
    if not secret:
        return

    if not signature_header:
        logger.warning("Webhook rejected: missing X-Hub-Signature-256 header")
        raise InvalidSignatureError("missing signature header")

    if not signature_header.startswith(SIGNATURE_PREFIX):
        logger.warning("Webhook rejected: malformed signature (no sha256= prefix)")
        raise InvalidSignatureError("malformed signature header")

    expected = compute_github_signature(secret, body)

    if not hmac.compare_digest(
        expected.encode("ascii"), signature_header.encode("utf-8")
    ):
        logger.warning("Webhook rejected: invalid HMAC signature")
        raise InvalidSignatureError("signature mismatch")
