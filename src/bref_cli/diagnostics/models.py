"""Data models for deployment diagnostics."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List, Optional

FAILURE_MARKER = "FAILED"


def _as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


@dataclass(frozen=True)
class DeploymentEvent:
    """One entry from a stack's event history."""

    timestamp: datetime
    resource_type: str
    resource_status: str
    status_reason: Optional[str] = None
    logical_resource_id: Optional[str] = None

    @property
    def is_failure(self) -> bool:
        return FAILURE_MARKER in self.resource_status

    @classmethod
    def from_api(cls, payload: Dict[str, Any]) -> "DeploymentEvent":
        return cls(
            timestamp=_as_utc(payload["Timestamp"]),
            resource_type=payload.get("ResourceType", ""),
            resource_status=payload.get("ResourceStatus", ""),
            status_reason=payload.get("ResourceStatusReason"),
            logical_resource_id=payload.get("LogicalResourceId"),
        )


@dataclass(frozen=True)
class StackOutput:
    key: str
    description: Optional[str] = None
    value: Optional[str] = None

    @classmethod
    def from_api(cls, payload: Dict[str, Any]) -> "StackOutput":
        return cls(
            key=payload.get("OutputKey", ""),
            description=payload.get("Description"),
            value=payload.get("OutputValue"),
        )


@dataclass
class IncidentReport:
    """Recent events of a stack, its failures, and its outputs.

    Built fresh for every request; ``events`` is chronological and limited to
    ``window`` before ``observed_at``.
    """

    stack_name: str
    observed_at: datetime
    window: timedelta
    events: List[DeploymentEvent] = field(default_factory=list)
    failures: List[DeploymentEvent] = field(default_factory=list)
    outputs: List[StackOutput] = field(default_factory=list)
    stack_status: Optional[str] = None
    stack_id: Optional[str] = None
    region: Optional[str] = None

    @property
    def is_empty(self) -> bool:
        """No activity in the window. Not an error."""
        return not self.events

    @property
    def has_failures(self) -> bool:
        return bool(self.failures)
