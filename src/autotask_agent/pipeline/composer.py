"""Compose final ``Task`` entities from validated drafts."""

from __future__ import annotations

import uuid
from datetime import datetime, timezone

from autotask_agent.pipeline.models import Task, TaskDraft, TaskStatus, ValidationOutcome


def compose(draft: TaskDraft, outcome: ValidationOutcome) -> Task:
    """Build a task with a fresh id.

    Rejected drafts yield a ``rejected`` task carrying identifiers only;
    the orchestrator leaves those out of its results.
    """
    task_id = uuid.uuid4().hex
    created_at = datetime.now(timezone.utc)

    if not outcome.accepted:
        return Task(
            task_id=task_id,
            source_email_id=draft.source_email_id,
            status=TaskStatus.REJECTED,
            created_at=created_at,
            failure_reason=outcome.reason.value if outcome.reason else None,
        )

    return Task(
        task_id=task_id,
        source_email_id=draft.source_email_id,
        status=TaskStatus.AUTO_CREATED if outcome.auto_create else TaskStatus.PENDING_REVIEW,
        created_at=created_at,
        title=draft.title,
        description=draft.description,
        confidence=draft.confidence,
        priority=draft.priority,
        due_date=draft.due_date,
    )
