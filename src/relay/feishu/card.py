"""Feishu interactive card rendering for completed workflow jobs.

The card layout:

    header:   "Job SUCCESS: owner/repo"  (green on success, red otherwise)
    body:     **Workflow**, **Job**, **Status**, **Branch**, **Duration**
    actions:  [View Logs] -> job html_url

Duration is computed from the job's start and end timestamps. GitHub sends
ISO-8601 strings, but numeric epochs in seconds or milliseconds are accepted
too. Formatting never fails the request: anything that cannot be parsed
renders as "N/A".
"""

import logging
import math
from datetime import datetime, timezone
from typing import Any, Dict, Optional, Union

from src.relay.feishu.models import FeishuMessage

logger = logging.getLogger(__name__)

DURATION_UNAVAILABLE = "N/A"

SUCCESS_CONCLUSION = "success"

# Epoch values at or above this are milliseconds. 1e11 seconds is year 5138,
# 1e11 milliseconds is March 1973.
MILLISECOND_EPOCH_THRESHOLD = 1e11


def parse_timestamp(value: Union[str, int, float, None]) -> float:
    """Normalise a timestamp to epoch seconds.

    Accepts ISO-8601 strings (a trailing ``Z`` is read as UTC, naive values
    are taken as UTC), numeric strings, and int/float epochs in seconds or
    milliseconds.

    Args:
        value: The raw timestamp from the payload.

    Returns:
        float: Seconds since the Unix epoch.

    Raises:
        ValueError: If the value is missing or cannot be interpreted.
    """
    if value is None:
        raise ValueError("timestamp is missing")

    # bool is an int subclass; true/false is never a timestamp
    if isinstance(value, bool):
        raise ValueError(f"invalid timestamp: {value!r}")

    if isinstance(value, (int, float)):
        return _epoch_to_seconds(float(value))

    if not isinstance(value, str):
        raise ValueError(f"unsupported timestamp type: {type(value).__name__}")

    text = value.strip()
    if not text:
        raise ValueError("timestamp is empty")

    try:
        return _epoch_to_seconds(float(text))
    except ValueError:
        pass

    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"
    parsed = datetime.fromisoformat(text)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.timestamp()


def _epoch_to_seconds(value: float) -> float:
    if not math.isfinite(value):
        raise ValueError(f"invalid epoch value: {value}")
    if abs(value) >= MILLISECOND_EPOCH_THRESHOLD:
        return value / 1000.0
    return value


def format_elapsed(seconds: float) -> str:
    """Render a non-negative number of seconds as ``"{m}m {s}s"``.

    Seconds are rounded half-up to a whole number first.
    """
    total = int(math.floor(seconds + 0.5))
    minutes, remainder = divmod(total, 60)
    return f"{minutes}m {remainder}s"


def format_duration(
    started_at: Union[str, int, float, None],
    completed_at: Union[str, int, float, None],
) -> str:
    """Format the time between two job timestamps.

    Args:
        started_at: Job start time in any format parse_timestamp accepts.
        completed_at: Job end time in any format parse_timestamp accepts.

    Returns:
        str: e.g. ``"2m 5s"``, or ``"N/A"`` when either timestamp cannot be
        parsed or the end precedes the start.
    """
    try:
        elapsed = parse_timestamp(completed_at) - parse_timestamp(started_at)
    except (ValueError, TypeError, OverflowError) as e:
        logger.warning(
            "Duration calculation error (started_at=%r, completed_at=%r): %s",
            started_at,
            completed_at,
            e,
        )
        return DURATION_UNAVAILABLE

    if not math.isfinite(elapsed) or elapsed < 0:
        logger.warning(
            "Job duration out of range (started_at=%r, completed_at=%r)",
            started_at,
            completed_at,
        )
        return DURATION_UNAVAILABLE

    return format_elapsed(elapsed)


def header_template(conclusion: str) -> str:
    """Card header colour: green for success, red for everything else."""
    return "green" if conclusion == SUCCESS_CONCLUSION else "red"


def build_job_card(
    conclusion: str,
    workflow_name: Optional[str],
    job_name: str,
    branch: Optional[str],
    log_url: str,
    started_at: Union[str, int, float, None],
    completed_at: Union[str, int, float, None],
    repository: str,
) -> FeishuMessage:
    """Build the interactive card message for a completed job.

    Args:
        conclusion: Job conclusion (success, failure, cancelled, ...).
        workflow_name: Name of the workflow.
        job_name: Name of the job.
        branch: Head branch of the run.
        log_url: URL of the job's log page, used by the button.
        started_at: Job start timestamp.
        completed_at: Job end timestamp.
        repository: Repository full name (owner/name).

    Returns:
        FeishuMessage: Unsigned message ready for delivery.
    """
    duration = format_duration(started_at, completed_at)

    content = (
        f"**Workflow**: {workflow_name}\n"
        f"**Job**: {job_name}\n"
        f"**Status**: {conclusion}\n"
        f"**Branch**: {branch}\n"
        f"**Duration**: {duration}"
    )

    card: Dict[str, Any] = {
        "header": {
            "title": {
                "tag": "plain_text",
                "content": f"Job {conclusion.upper()}: {repository}",
            },
            "template": header_template(conclusion),
        },
        "elements": [
            {
                "tag": "div",
                "text": {"tag": "lark_md", "content": content},
            },
            {
                "tag": "action",
                "actions": [
                    {
                        "tag": "button",
                        "text": {"tag": "plain_text", "content": "View Logs"},
                        "url": log_url,
                        "type": "primary",
                    }
                ],
            },
        ],
    }

    return FeishuMessage(card=card)
