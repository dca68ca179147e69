"""Data models for the email-to-task pipeline."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import datetime
from enum import Enum
from typing import Any

from autotask_agent.exceptions import DuplicateSourceError


class Priority(str, Enum):
    """Task priority derived from urgency cues."""

    HIGH = "HIGH"
    MEDIUM = "MEDIUM"
    LOW = "LOW"


class TaskStatus(str, Enum):
    """Task status.

    Tasks are born ``auto_created``, ``pending_review`` or ``rejected``. The
    only later move is ``auto_created`` -> ``pending_review`` when the
    calendar event could not be created. ``rejected`` is terminal.
    """

    AUTO_CREATED = "auto_created"
    PENDING_REVIEW = "pending_review"
    REJECTED = "rejected"

    def can_transition_to(self, other: TaskStatus) -> bool:
        if self is other:
            return True
        return self is TaskStatus.AUTO_CREATED and other is TaskStatus.PENDING_REVIEW


class RejectionReason(str, Enum):
    EMPTY_TITLE = "EMPTY_TITLE"
    CONFIDENCE_OUT_OF_RANGE = "CONFIDENCE_OUT_OF_RANGE"
    DUPLICATE_SOURCE = "DUPLICATE_SOURCE"


@dataclass(frozen=True)
class TaskDraft:
    """A tentative task extracted from one email."""

    source_email_id: str
    title: str
    description: str
    confidence: float
    priority: Priority = Priority.MEDIUM
    due_date: datetime | None = None


@dataclass(frozen=True)
class ValidationOutcome:
    """Decision of the business rule validator for one draft."""

    accepted: bool
    reason: RejectionReason | None = None
    auto_create: bool = False

    def raise_for_rejection(self) -> None:
        """Raise ``DuplicateSourceError`` for duplicate rejections.

        Other rejections are plain outcomes and do not raise.
        """
        if self.reason is RejectionReason.DUPLICATE_SOURCE:
            raise DuplicateSourceError("Source email already produced a task in this run")


@dataclass(frozen=True)
class Task:
    """A composed task, possibly materialized as a calendar event."""

    task_id: str
    source_email_id: str
    status: TaskStatus
    created_at: datetime
    title: str = ""
    description: str = ""
    confidence: float = 0.0
    priority: Priority = Priority.MEDIUM
    due_date: datetime | None = None
    calendar_event_id: str | None = None
    calendar_link: str | None = None
    failure_reason: str | None = None

    def with_status(self, status: TaskStatus, **changes: Any) -> Task:
        """Return a copy moved to ``status``. Backward moves raise ``ValueError``."""
        if not self.status.can_transition_to(status):
            raise ValueError(
                f"Task {self.task_id} cannot move from {self.status.value} to {status.value}"
            )
        return replace(self, status=status, **changes)

    def with_calendar_event(self, event_id: str, link: str | None = None) -> Task:
        if self.status is not TaskStatus.AUTO_CREATED:
            raise ValueError(
                f"Task {self.task_id} is {self.status.value}; only auto-created "
                f"tasks carry a calendar event"
            )
        return replace(self, calendar_event_id=event_id, calendar_link=link)

    def to_dict(self) -> dict[str, Any]:
        """Response shape of one task at the HTTP boundary."""
        return {
            "task_id": self.task_id,
            "title": self.title,
            "source_email_id": self.source_email_id,
            "confidence": self.confidence,
            "priority": self.priority.value,
            "due_date": self.due_date.isoformat() if self.due_date else None,
            "calendar_event_id": self.calendar_event_id,
            "calendar_link": self.calendar_link,
            "status": self.status.value,
        }


@dataclass(frozen=True)
class SyncResult:
    """Outcome of one sync batch."""

    status: str
    tasks: tuple[Task, ...] = ()
    skipped: int = 0
    errors: tuple[str, ...] = field(default_factory=tuple)

    @property
    def tasks_created(self) -> int:
        return sum(1 for t in self.tasks if t.status is TaskStatus.AUTO_CREATED)

    def to_dict(self) -> dict[str, Any]:
        return {
            "status": self.status,
            "tasks_created": self.tasks_created,
            "tasks": [t.to_dict() for t in self.tasks],
            "skipped": self.skipped,
            "errors": list(self.errors),
        }
