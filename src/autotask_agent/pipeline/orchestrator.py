"""Sync orchestrator: unread mail in, tasks and calendar events out."""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor, TimeoutError as FutureTimeoutError
from dataclasses import dataclass
from datetime import datetime, timedelta
from functools import partial
from typing import Any, Callable

from autotask_agent.calendar.client import CalendarCollaborator
from autotask_agent.config import SyncConfig
from autotask_agent.exceptions import (
    AutoTaskError,
    CollaboratorTimeoutError,
    CollaboratorUnavailableError,
)
from autotask_agent.gmail.client import MailCollaborator
from autotask_agent.gmail.models import NormalizedEmail
from autotask_agent.gmail.normalizer import normalize
from autotask_agent.pipeline.composer import compose
from autotask_agent.pipeline.extractor import Extractor, TaskExtractor
from autotask_agent.pipeline.models import SyncResult, Task, TaskDraft, TaskStatus
from autotask_agent.pipeline.validator import BusinessRuleValidator

logger = logging.getLogger(__name__)

STATUS_SUCCESS = "success"
STATUS_PARTIAL = "partial"

EMAIL_REMINDER_MINUTES = 24 * 60
IO_WORKERS = 4


@dataclass(frozen=True)
class _Prepared:
    """Normalize/extract outcome for one raw message."""

    message_id: str
    email: NormalizedEmail | None = None
    draft: TaskDraft | None = None
    error: str | None = None


class SyncOrchestrator:
    """Runs one batch of unread mail through the task pipeline.

    Collaborators are injected so tests can pass doubles. Every
    collaborator call is bounded by ``config.collaborator_timeout``.

    Args:
        mail: Mail collaborator (``list_unread``, ``get``).
        calendar: Calendar collaborator (``create_event``).
        extractor: Task extractor, keyword scoring by default.
        config: Deployment tunables.
        clock: Returns the current time; used for event windows.
    """

    def __init__(
        self,
        mail: MailCollaborator,
        calendar: CalendarCollaborator,
        extractor: Extractor | None = None,
        config: SyncConfig | None = None,
        clock: Callable[[], datetime] | None = None,
    ):
        self.mail = mail
        self.calendar = calendar
        self.extractor = extractor or TaskExtractor()
        self.config = config or SyncConfig()
        self._now = clock or (lambda: datetime.now().astimezone())

    def run_sync(self, max_results: int | None = None) -> SyncResult:
        """Process up to ``max_results`` unread messages.

        Per-message failures are logged and skipped. Raises
        ``CollaboratorUnavailableError`` only when the unread list itself
        cannot be obtained.
        """
        limit = max_results if max_results is not None else self.config.max_results
        io = ThreadPoolExecutor(max_workers=IO_WORKERS, thread_name_prefix="autotask-io")
        try:
            return self._run(io, limit)
        finally:
            io.shutdown(wait=False, cancel_futures=True)

    def _run(self, io: ThreadPoolExecutor, limit: int) -> SyncResult:
        try:
            raw_messages = self._call(io, "list unread messages", self.mail.list_unread, limit)
        except CollaboratorUnavailableError as e:
            logger.error(f"Mail collaborator unavailable: {e}")
            raise
        except Exception as e:
            logger.error(f"Mail collaborator unavailable: {e}")
            raise CollaboratorUnavailableError(f"Failed to list unread messages: {e}") from e

        logger.info(f"Sync started for {len(raw_messages)} messages")

        prepared = self._prepare_all(io, raw_messages)

        validator = BusinessRuleValidator(self.config.auto_create_threshold)
        tasks: list[Task] = []
        errors: list[str] = []
        skipped = 0

        for item in prepared:
            if item.error is not None:
                skipped += 1
                errors.append(item.error)
                continue
            if item.draft is None:
                continue

            outcome = validator.validate(item.draft)
            task = compose(item.draft, outcome)
            if task.status is TaskStatus.REJECTED:
                logger.info(
                    f"Draft from message {item.message_id} rejected: {task.failure_reason}"
                )
                continue
            validator.mark_composed(task.source_email_id)

            if task.status is TaskStatus.AUTO_CREATED:
                task = self._materialize(io, task)
                if task.failure_reason:
                    errors.append(task.failure_reason)

            tasks.append(task)

        result = SyncResult(
            status=STATUS_PARTIAL if errors else STATUS_SUCCESS,
            tasks=tuple(tasks),
            skipped=skipped,
            errors=tuple(errors),
        )
        logger.info(
            f"Sync finished: status={result.status}, tasks={len(result.tasks)}, "
            f"auto_created={result.tasks_created}, skipped={skipped}"
        )
        return result

    def _prepare_all(self, io: ThreadPoolExecutor, raw_messages: list[dict]) -> list[_Prepared]:
        prepare = partial(self._prepare, io)
        if self.config.max_workers <= 1 or len(raw_messages) <= 1:
            return [prepare(raw) for raw in raw_messages]
        # map() yields in submission order
        with ThreadPoolExecutor(max_workers=self.config.max_workers) as pool:
            return list(pool.map(prepare, raw_messages))

    def _prepare(self, io: ThreadPoolExecutor, raw: dict) -> _Prepared:
        message_id = str(raw.get("id", "<unknown>"))
        try:
            if "payload" not in raw and raw.get("id"):
                raw = self._call(io, f"fetch message {message_id}", self.mail.get, raw["id"])
            email = normalize(raw)
            draft = self.extractor.extract(email)
        except Exception as e:
            logger.warning(f"Skipping message {message_id}: {e}")
            return _Prepared(message_id=message_id, error=f"message {message_id}: {e}")
        return _Prepared(message_id=message_id, email=email, draft=draft)

    def _materialize(self, io: ThreadPoolExecutor, task: Task) -> Task:
        """Create the calendar event, downgrading the task when that fails."""
        start, end = self._event_window(task.due_date)
        try:
            event = self._call(
                io,
                f"create event for task {task.task_id}",
                self.calendar.create_event,
                summary=task.title,
                description=task.description,
                start=start.isoformat(),
                end=end.isoformat(),
                reminders=[
                    {"method": "popup", "minutes": self.config.reminder_minutes},
                    {"method": "email", "minutes": EMAIL_REMINDER_MINUTES},
                ],
            )
            event_id = event["id"] if isinstance(event, dict) else event
            if not event_id:
                raise AutoTaskError("calendar returned no event id")
        except Exception as e:
            reason = f"calendar event for message {task.source_email_id} failed: {e}"
            logger.warning(f"Downgrading task {task.task_id} to pending_review: {reason}")
            return task.with_status(TaskStatus.PENDING_REVIEW, failure_reason=reason)

        link = event.get("html_link") if isinstance(event, dict) else None
        return task.with_calendar_event(str(event_id), link)

    def _event_window(self, due_date: datetime | None) -> tuple[datetime, datetime]:
        now = self._now()
        if due_date is not None and due_date.tzinfo is None and now.tzinfo is not None:
            due_date = due_date.astimezone()
        elif due_date is not None and due_date.tzinfo is not None and now.tzinfo is None:
            due_date = due_date.replace(tzinfo=None)
        if due_date is None or due_date <= now:
            start = now + timedelta(minutes=self.config.event_lead_minutes)
        else:
            start = due_date
        return start, start + timedelta(minutes=self.config.event_duration_minutes)

    def _call(self, io: ThreadPoolExecutor, what: str, fn: Callable[..., Any], *args, **kwargs) -> Any:
        timeout = self.config.collaborator_timeout
        future = io.submit(fn, *args, **kwargs)
        try:
            return future.result(timeout=timeout)
        except FutureTimeoutError as e:
            future.cancel()
            raise CollaboratorTimeoutError(f"{what} timed out after {timeout}s") from e
