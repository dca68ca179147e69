"""Business rules deciding whether a draft becomes a task, and how."""

from __future__ import annotations

from autotask_agent.config import DEFAULT_AUTO_CREATE_THRESHOLD
from autotask_agent.pipeline.models import RejectionReason, TaskDraft, ValidationOutcome


class BusinessRuleValidator:
    """Pure policy checks over drafts within one sync run.

    ``validate`` performs no I/O and does not change state. The caller
    records each composed task with ``mark_composed`` so later drafts from
    the same source email are rejected as duplicates. Out-of-range
    confidences are rejected, never clamped.

    Args:
        auto_create_threshold: Confidence strictly above which an accepted
            draft is auto-created.
    """

    def __init__(self, auto_create_threshold: float = DEFAULT_AUTO_CREATE_THRESHOLD):
        self.auto_create_threshold = auto_create_threshold
        self._seen_sources: set[str] = set()

    def validate(self, draft: TaskDraft) -> ValidationOutcome:
        if not draft.title or not draft.title.strip():
            return ValidationOutcome(accepted=False, reason=RejectionReason.EMPTY_TITLE)
        # NaN fails both comparisons
        if not (0.0 <= draft.confidence <= 1.0):
            return ValidationOutcome(
                accepted=False, reason=RejectionReason.CONFIDENCE_OUT_OF_RANGE
            )
        if draft.source_email_id in self._seen_sources:
            return ValidationOutcome(accepted=False, reason=RejectionReason.DUPLICATE_SOURCE)

        return ValidationOutcome(
            accepted=True,
            auto_create=draft.confidence > self.auto_create_threshold,
        )

    def mark_composed(self, source_email_id: str) -> None:
        self._seen_sources.add(source_email_id)

    def reset(self) -> None:
        """Forget all sources seen in the current run."""
        self._seen_sources.clear()
