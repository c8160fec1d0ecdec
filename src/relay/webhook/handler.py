"""GitHub workflow_job webhook handler.

This module provides the WebhookHandler class, which turns one inbound
GitHub delivery into at most one Feishu message:

1. Verify X-Hub-Signature-256 against the raw body (when a secret is set)
2. Decode the JSON body
3. Ignore everything except ``workflow_job`` events with action ``completed``
4. Validate the payload and render the card
5. Sign the card (when a Feishu secret is set) and POST it

The handler holds no per-request state; one instance serves all requests.

GitHub Webhook Payload Structure (workflow_job event, abridged):
{
  "action": "completed",
  "workflow_job": {
    "conclusion": "success",
    "workflow_name": "CI",
    "name": "build",
    "head_branch": "main",
    "html_url": "https://github.com/octo/repo/actions/runs/1/job/2",
    "started_at": "2024-01-01T00:00:00Z",
    "completed_at": "2024-01-01T00:02:05Z"
  },
  "repository": {"full_name": "octo/repo"}
}
"""

import json
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

from pydantic import ValidationError

from src.relay.config import RelaySettings
from src.relay.errors import MalformedPayloadError
from src.relay.feishu.card import build_job_card
from src.relay.feishu.client import FeishuClient
from src.relay.feishu.models import FeishuMessage
from src.relay.feishu.signing import sign_message
from src.relay.webhook.models import (
    WORKFLOW_JOB_EVENT,
    WorkflowJobAction,
    WorkflowJobEvent,
)
from src.relay.webhook.signature import verify_github_signature

logger = logging.getLogger(__name__)


@dataclass
class RelayResult:
    """Outcome of handling one delivery.

    Attributes:
        status_code: HTTP status for the webhook sender.
        body: JSON body for the webhook sender.
        delivered: Whether a message was posted to Feishu.
    """

    status_code: int
    body: Dict[str, Any] = field(default_factory=dict)
    delivered: bool = False

    @classmethod
    def ignored(cls) -> "RelayResult":
        return cls(status_code=200, body={"message": "Event ignored"})

    @classmethod
    def success(cls) -> "RelayResult":
        return cls(status_code=200, body={"success": True}, delivered=True)


def is_completed_workflow_job(event_type: Optional[str], payload: Any) -> bool:
    """Check whether a delivery should be relayed.

    Args:
        event_type: Value of the X-GitHub-Event header.
        payload: The decoded JSON body.

    Returns:
        bool: True only for workflow_job events with action "completed".
    """
    if event_type != WORKFLOW_JOB_EVENT:
        return False
    if not isinstance(payload, dict):
        return False
    return payload.get("action") == WorkflowJobAction.COMPLETED.value


class WebhookHandler:
    """Relays completed workflow_job events to Feishu.

    Attributes:
        settings: Relay configuration (secrets and Feishu URL).
        feishu_client: Client used for delivery.
    """

    def __init__(
        self,
        settings: RelaySettings,
        feishu_client: Optional[FeishuClient] = None,
    ) -> None:
        """Initialize the webhook handler.

        Args:
            settings: Relay configuration.
            feishu_client: Delivery client. Built from settings if omitted.
        """
        self.settings = settings
        self.feishu_client = feishu_client or FeishuClient(
            webhook_url=settings.feishu_webhook_url,
            timeout=settings.feishu_timeout_seconds,
        )

    async def handle(
        self,
        event_type: Optional[str],
        signature: Optional[str],
        raw_body: bytes,
    ) -> RelayResult:
        """Handle one GitHub delivery.

        Args:
            event_type: Value of the X-GitHub-Event header.
            signature: Value of the X-Hub-Signature-256 header.
            raw_body: The request body exactly as received.

        Returns:
            RelayResult: Success or ignored result.

        Raises:
            InvalidSignatureError: Signature check failed.
            MalformedPayloadError: Body is not JSON or lacks required fields.
            FeishuDeliveryError: Feishu could not be reached or rejected
                the message.
        """
        verify_github_signature(
            self.settings.github_webhook_secret, raw_body, signature
        )

        payload = self._decode(raw_body)

        if not is_completed_workflow_job(event_type, payload):
            logger.debug(
                "Ignoring event: type=%s action=%s",
                event_type,
                payload.get("action") if isinstance(payload, dict) else None,
            )
            return RelayResult.ignored()

        event = self.parse_workflow_job_event(payload)

        message = self.build_message(event)
        message = sign_message(message, self.settings.feishu_secret)

        logger.info(
            "Relaying workflow_job: repo=%s job=%s conclusion=%s",
            event.repository_full_name,
            event.workflow_job.name,
            event.workflow_job.conclusion,
        )

        await self.feishu_client.send_message(message)

        return RelayResult.success()

    def parse_workflow_job_event(self, payload: Dict[str, Any]) -> WorkflowJobEvent:
        """Validate a decoded payload into a WorkflowJobEvent.

        Raises:
            MalformedPayloadError: If required fields are missing or invalid.
        """
        try:
            return WorkflowJobEvent.model_validate(payload)
        except ValidationError as e:
            fields = ", ".join(
                ".".join(str(part) for part in err["loc"]) for err in e.errors()
            )
            logger.warning("Invalid workflow_job payload: %s", fields)
            raise MalformedPayloadError(f"invalid or missing fields: {fields}") from e

    def build_message(self, event: WorkflowJobEvent) -> FeishuMessage:
        """Render the (unsigned) card message for a parsed event."""
        job = event.workflow_job
        return build_job_card(
            conclusion=job.conclusion,
            workflow_name=job.workflow_name,
            job_name=job.name,
            branch=job.head_branch,
            log_url=job.html_url,
            started_at=job.started_at,
            completed_at=job.completed_at,
            repository=event.repository_full_name,
        )

    def _decode(self, raw_body: bytes) -> Any:
        try:
            return json.loads(raw_body)
        except (UnicodeDecodeError, json.JSONDecodeError) as e:
            logger.warning("Request body is not valid JSON: %s", e)
            raise MalformedPayloadError(f"invalid JSON body: {e}") from e

    async def close(self) -> None:
        await self.feishu_client.close()


def create_webhook_handler(
    settings: RelaySettings,
    feishu_client: Optional[FeishuClient] = None,
) -> WebhookHandler:
    """Factory function to create a WebhookHandler instance.

    Args:
        settings: Relay configuration.
        feishu_client: Optional pre-built delivery client.

    Returns:
        A configured WebhookHandler instance.
    """
    return WebhookHandler(settings=settings, feishu_client=feishu_client)
