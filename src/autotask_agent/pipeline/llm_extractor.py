"""Task extractor backed by Claude, falling back to keyword scoring."""

from __future__ import annotations

import json
import logging
import re
import threading
from collections import OrderedDict
from datetime import datetime

from autotask_agent.exceptions import LLMError
from autotask_agent.gmail.models import NO_SUBJECT, NormalizedEmail
from autotask_agent.pipeline.extractor import (
    MAX_DESCRIPTION_LENGTH,
    MAX_TITLE_LENGTH,
    TaskExtractor,
    clean_body,
    derive_title,
)
from autotask_agent.pipeline.models import Priority, TaskDraft

logger = logging.getLogger(__name__)

MAX_PROMPT_BODY = 4000
CACHE_SIZE = 1024

SYSTEM_PROMPT = """You decide whether an email asks the recipient to do something.

Reply with this JSON object only:
{"is_task": true/false, "confidence": 0.0-1.0, "title": "short actionable title or null", "description": "one or two sentence summary or null", "priority": "HIGH/MEDIUM/LOW or null", "due_date": "ISO 8601 datetime or null"}

Rules:
- Today is {today}. Resolve relative dates ("tomorrow", "Friday") against it.
- Confidence: ~0.9 for explicit requests with a deadline, ~0.5 for vague asks, ~0.1 for newsletters, receipts and notifications.
- Priority: HIGH if urgent or due within a day, LOW if explicitly optional, otherwise MEDIUM."""

JSON_OBJECT_RE = re.compile(r"\{.*\}", re.DOTALL)


class LLMTaskExtractor:
    """Asks Claude for a task verdict; same contract as ``TaskExtractor``.

    Replies are memoized per email id and text, up to ``cache_size``
    entries with least-recently-used eviction, so a repeated call returns
    the identical draft. Any LLM failure or unusable reply falls back to
    ``fallback``.

    Args:
        llm: An ``autotask_agent.llm.LLMClient``.
        fallback: Extractor used when the LLM cannot answer.
        min_confidence: Drafts below this confidence are not produced.
        cache_size: Number of memoized emails kept.
    """

    def __init__(
        self,
        llm,
        fallback: TaskExtractor | None = None,
        min_confidence: float = 0.3,
        cache_size: int = CACHE_SIZE,
    ):
        self._llm = llm
        self._fallback = fallback or TaskExtractor(min_confidence=min_confidence)
        self.min_confidence = min_confidence
        self._cache_size = cache_size
        self._cache: OrderedDict[tuple[str, str, str], TaskDraft | None] = OrderedDict()
        self._cache_lock = threading.Lock()

    def extract(self, email: NormalizedEmail) -> TaskDraft | None:
        key = (email.id, email.subject, email.body)
        with self._cache_lock:
            if key in self._cache:
                self._cache.move_to_end(key)
                return self._cache[key]

        body = clean_body(email.body)
        try:
            reply = self._llm.generate(
                SYSTEM_PROMPT.replace("{today}", datetime.now().astimezone().isoformat()),
                f"From: {email.sender}\nSubject: {email.subject}\n\n{body[:MAX_PROMPT_BODY]}",
            )
            draft = self._parse_reply(reply, email, body)
        except (LLMError, ValueError, TypeError) as e:
            logger.warning(f"LLM extraction failed for message {email.id}, using keywords: {e}")
            draft = self._fallback.extract(email)

        with self._cache_lock:
            self._cache[key] = draft
            if len(self._cache) > self._cache_size:
                self._cache.popitem(last=False)
        return draft

    def _parse_reply(self, reply: str, email: NormalizedEmail, body: str) -> TaskDraft | None:
        """Turn the JSON verdict into a draft. Raises ``ValueError`` when unusable."""
        match = JSON_OBJECT_RE.search(reply)
        if not match:
            raise ValueError(f"No JSON object in reply: {reply[:80]!r}")
        data = json.loads(match.group(0))

        if "is_task" not in data or "confidence" not in data:
            raise ValueError("Reply is missing is_task or confidence")

        confidence = round(min(1.0, max(0.0, float(data["confidence"]))), 4)
        if not data["is_task"] or confidence < self.min_confidence:
            return None

        subject = "" if email.subject == NO_SUBJECT else email.subject
        title = _optional_text(data, "title").strip()[:MAX_TITLE_LENGTH] or derive_title(subject, body)
        if not title:
            return None

        priority = Priority.MEDIUM
        if data.get("priority"):
            try:
                priority = Priority(str(data["priority"]).upper())
            except ValueError:
                logger.warning(f"Invalid priority '{data['priority']}', defaulting to MEDIUM")

        due_date = None
        if data.get("due_date"):
            try:
                due_date = datetime.fromisoformat(data["due_date"])
            except (ValueError, TypeError) as e:
                logger.warning(f"Invalid due date '{data['due_date']}': {e}")

        description = _optional_text(data, "description") or " ".join(body.split())
        return TaskDraft(
            source_email_id=email.id,
            title=title,
            description=description[:MAX_DESCRIPTION_LENGTH],
            confidence=confidence,
            priority=priority,
            due_date=due_date,
        )


def _optional_text(data: dict, field: str) -> str:
    value = data.get(field)
    if value is None:
        return ""
    if not isinstance(value, str):
        raise ValueError(f"Reply field {field!r} is not a string: {value!r}")
    return value
