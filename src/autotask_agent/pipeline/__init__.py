"""Email-to-task pipeline: extract, validate, compose, orchestrate."""

from autotask_agent.pipeline.composer import compose
from autotask_agent.pipeline.extractor import TaskExtractor
from autotask_agent.pipeline.models import (
    Priority,
    RejectionReason,
    SyncResult,
    Task,
    TaskDraft,
    TaskStatus,
    ValidationOutcome,
)
from autotask_agent.pipeline.orchestrator import SyncOrchestrator
from autotask_agent.pipeline.validator import BusinessRuleValidator

__all__ = [
    "BusinessRuleValidator",
    "Priority",
    "RejectionReason",
    "SyncOrchestrator",
    "SyncResult",
    "Task",
    "TaskDraft",
    "TaskExtractor",
    "TaskStatus",
    "ValidationOutcome",
    "compose",
]
