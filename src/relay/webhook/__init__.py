"""GitHub webhook handling for the relay.

This module verifies and parses GitHub ``workflow_job`` deliveries. Only
events with action ``completed`` are relayed; all others are acknowledged
and ignored.
"""

from .handler import (
    RelayResult,
    WebhookHandler,
    create_webhook_handler,
    is_completed_workflow_job,
)
from .models import WorkflowJob, WorkflowJobAction, WorkflowJobEvent
from .signature import compute_github_signature, verify_github_signature

__all__ = [
    "RelayResult",
    "WebhookHandler",
    "WorkflowJob",
    "WorkflowJobAction",
    "WorkflowJobEvent",
    "compute_github_signature",
    "create_webhook_handler",
    "is_completed_workflow_job",
    "verify_github_signature",
]
