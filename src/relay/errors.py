"""Exceptions raised while relaying a webhook.

Every error that terminates a request derives from RelayError, which carries
the HTTP status and JSON body returned to the caller. Nothing is retried.
"""

from typing import Any, Dict, Optional


class RelayError(Exception):
    """Base class for request-terminating relay failures.

    Attributes:
        status_code: HTTP status returned to the webhook sender.
        error: Short error label placed in the response body.
        details: Optional human-readable detail placed in the response body.
    """

    status_code: int = 500
    error: str = "Server error"

    def __init__(self, details: Optional[str] = None):
        self.details = details
        super().__init__(details or self.error)

    def to_response(self) -> Dict[str, Any]:
        """Build the JSON response body for this error."""
        body: Dict[str, Any] = {"error": self.error}
        if self.details:
            body["details"] = self.details
        return body


class InvalidSignatureError(RelayError):
    """The X-Hub-Signature-256 header is missing or does not match."""

    status_code = 401
    error = "Invalid signature"

    def to_response(self) -> Dict[str, Any]:
        # The reason is logged, not echoed back to the sender.
        return {"error": self.error}


class MalformedPayloadError(RelayError):
    """The request body is not JSON or lacks required workflow_job fields."""

    error = "Invalid payload"


class FeishuDeliveryError(RelayError):
    """Feishu rejected the message or could not be reached.

    Attributes:
        response_status: HTTP status from Feishu, None for network failures.
        response_body: Raw response text from Feishu, if any.
    """

    error = "Feishu delivery failed"

    def __init__(
        self,
        details: str,
        response_status: Optional[int] = None,
        response_body: Optional[str] = None,
    ):
        super().__init__(details)
        self.response_status = response_status
        self.response_body = response_body
