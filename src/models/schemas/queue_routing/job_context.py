"""
Job Context Model

Immutable description of a job about to be dispatched. Queue rules read it to
decide which lane the job runs on.
"""

import re
from typing import Any, Dict, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

from src.core.config import settings

from .queue import Queue

Importance = Literal["critical", "high", "normal", "low"]

PAID_TIERS = frozenset({"paid", "pro", "team", "enterprise", "illuminate", "sanctum"})
ENTERPRISE_TIERS = frozenset({"enterprise", "sanctum"})


class JobContext(BaseModel):
    """All signals available to queue rules for one dispatch call."""

    model_config = ConfigDict(frozen=True)

    job_class: str = Field(..., description="Fully qualified job class or task name", min_length=1)
    tier: Optional[str] = Field(None, description="Workspace plan tier")
    workspace_id: Optional[int] = Field(None, description="Workspace scoping identifier")
    repository_id: Optional[int] = Field(None, description="Repository scoping identifier")
    is_system_job: bool = Field(False, description="Internal/system job flag")
    is_user_initiated: bool = Field(False, description="Triggered by a user action")
    importance: Importance = Field("normal", description="Job importance level")
    estimated_duration_seconds: Optional[int] = Field(
        None,
        description="Expected job duration in seconds",
        ge=0
    )
    metadata: Dict[str, Any] = Field(default_factory=dict)

    @classmethod
    def for_workspace(
        cls,
        job_class: str,
        workspace_id: int,
        tier: Optional[str] = None,
        is_user_initiated: bool = False,
        importance: Importance = "normal",
        estimated_duration_seconds: Optional[int] = None,
        metadata: Optional[Dict[str, Any]] = None,
        repository_id: Optional[int] = None,
    ) -> "JobContext":
        return cls(
            job_class=job_class,
            tier=tier,
            workspace_id=workspace_id,
            repository_id=repository_id,
            is_system_job=False,
            is_user_initiated=is_user_initiated,
            importance=importance,
            estimated_duration_seconds=estimated_duration_seconds,
            metadata=metadata or {},
        )

    @classmethod
    def for_system_job(
        cls,
        job_class: str,
        importance: Importance = "critical",
        estimated_duration_seconds: Optional[int] = None,
        metadata: Optional[Dict[str, Any]] = None,
    ) -> "JobContext":
        return cls(
            job_class=job_class,
            is_system_job=True,
            importance=importance,
            estimated_duration_seconds=estimated_duration_seconds,
            metadata=metadata or {},
        )

    @classmethod
    def for_webhook(
        cls,
        job_class: str,
        workspace_id: Optional[int] = None,
        metadata: Optional[Dict[str, Any]] = None,
    ) -> "JobContext":
        return cls(
            job_class=job_class,
            workspace_id=workspace_id,
            importance="high",
            estimated_duration_seconds=30,
            metadata={"source": "webhook", **(metadata or {})},
        )

    @property
    def job_name(self) -> str:
        """Short job name: last segment of a dotted or backslashed class path."""
        return re.split(r"[.\\:]", self.job_class)[-1]

    def is_paid_tier(self) -> bool:
        return self.tier in PAID_TIERS

    def is_enterprise_tier(self) -> bool:
        return self.tier in ENTERPRISE_TIERS

    def is_critical(self) -> bool:
        return self.importance == "critical"

    def is_long_running(self, threshold_seconds: Optional[int] = None) -> bool:
        if threshold_seconds is None:
            threshold_seconds = settings.queue.long_running_threshold_seconds
        return (
            self.estimated_duration_seconds is not None
            and self.estimated_duration_seconds > threshold_seconds
        )

    def get_default_queue(self) -> Queue:
        if self.is_system_job:
            return Queue.SYSTEM
        return Queue.DEFAULT

    def get_meta(self, key: str, default: Any = None) -> Any:
        value = self.metadata.get(key)
        return default if value is None else value

    def with_metadata(self, metadata: Dict[str, Any]) -> "JobContext":
        """Copy of this context with extra metadata merged in."""
        return self.model_copy(update={"metadata": {**self.metadata, **metadata}})

    def to_dict(self) -> Dict[str, Any]:
        return self.model_dump()
