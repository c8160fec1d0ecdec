"""GitHub workflow_job webhook models.

Only the fields the relay renders are modelled; everything else in GitHub's
payload is ignored. Timestamps are kept as received because their format
varies between senders (ISO-8601 strings from GitHub, numeric epochs from
some replay tools) and are normalised later when the duration is formatted.
"""

import logging
from enum import Enum
from typing import Any, Optional, Union

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    StrictFloat,
    StrictInt,
    StrictStr,
    field_validator,
)

logger = logging.getLogger(__name__)

# Strict members keep JSON booleans from passing as 0/1 epochs.
Timestamp = Union[StrictStr, StrictInt, StrictFloat, None]

WORKFLOW_JOB_EVENT = "workflow_job"


class WorkflowJobAction(str, Enum):
    """workflow_job event action types.

    Attributes:
        QUEUED: The job was created and is waiting for a runner.
        IN_PROGRESS: A runner picked the job up.
        COMPLETED: The job finished. The only action that is relayed.
        WAITING: The job is waiting on a deployment protection rule.
    """

    QUEUED = "queued"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    WAITING = "waiting"


class WorkflowJob(BaseModel):
    """The ``workflow_job`` object of the payload."""

    model_config = ConfigDict(extra="ignore")

    conclusion: str = Field(
        ...,
        description="Job result, e.g. success, failure, cancelled, skipped",
    )

    workflow_name: Optional[str] = Field(
        default=None,
        description="Name of the workflow the job belongs to",
    )

    name: str = Field(..., description="Job name")

    head_branch: Optional[str] = Field(
        default=None,
        description="Branch the workflow ran on",
    )

    html_url: str = Field(..., description="URL of the job's log page")

    started_at: Timestamp = Field(
        default=None,
        description="Start time: ISO-8601 string or epoch seconds/milliseconds",
    )

    completed_at: Timestamp = Field(
        default=None,
        description="End time: ISO-8601 string or epoch seconds/milliseconds",
    )

    @field_validator("started_at", "completed_at", mode="before")
    @classmethod
    def drop_unusable_timestamp(cls, v: Any) -> Any:
        """Treat values that cannot be a timestamp as missing.

        A bad timestamp only costs the duration line, so it must not fail
        validation of the whole event.
        """
        if v is None:
            return v
        if isinstance(v, bool) or not isinstance(v, (str, int, float)):
            logger.debug("Ignoring unusable timestamp value: %r", v)
            return None
        return v


class Repository(BaseModel):
    """The ``repository`` object of the payload."""

    model_config = ConfigDict(extra="ignore")

    full_name: str = Field(..., min_length=1, description="owner/name")


class WorkflowJobEvent(BaseModel):
    """Parsed completed workflow_job webhook event."""

    model_config = ConfigDict(extra="ignore")

    action: str

    workflow_job: WorkflowJob

    repository: Repository

    @property
    def repository_full_name(self) -> str:
        return self.repository.full_name
