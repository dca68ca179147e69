"""Keyword/intent scoring task extractor.

Scores subject and body text for request cues, resolves the first temporal
expression to a due date and squashes the score into a confidence. The
result depends only on the email and the reference time, so repeated calls
give identical drafts.
"""

from __future__ import annotations

import logging
import math
import re
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Callable, Protocol

from bs4 import BeautifulSoup
import dateutil.parser as parser
from dateutil.relativedelta import relativedelta

from autotask_agent.gmail.models import NO_SUBJECT, NormalizedEmail
from autotask_agent.pipeline.models import Priority, TaskDraft

logger = logging.getLogger(__name__)

DEFAULT_MIN_CONFIDENCE = 0.3
MAX_TITLE_LENGTH = 120
MAX_DESCRIPTION_LENGTH = 500

# Logistic squash: score == MIDPOINT maps to 0.5
MIDPOINT = 1.5
STEEPNESS = 1.5

REQUEST_WEIGHT = 1.0
IMPERATIVE_WEIGHT = 1.0
TASK_KEYWORD_WEIGHT = 0.75
DEADLINE_WEIGHT = 1.0
URGENCY_WEIGHT = 0.5
NOISE_WEIGHT = -2.0
FYI_WEIGHT = -1.0

DAY_START_HOUR = 9
END_OF_DAY_HOUR = 17
TONIGHT_HOUR = 20

REQUEST_RE = re.compile(
    r"\b(?:please|pls|kindly|could you|can you|would you|will you|"
    r"(?:i|we) need you to|need you to|would appreciate|"
    r"let me know|get back to me)\b",
    re.IGNORECASE,
)
TASK_KEYWORD_RE = re.compile(
    r"\b(?:action required|action items?|to-?do|deadline|due|reminder|"
    r"follow[- ]up|don'?t forget|remember to|make sure|rsvp|"
    r"awaiting your|waiting on you|sign-?off)\b",
    re.IGNORECASE,
)
URGENCY_RE = re.compile(
    r"\b(?:urgent(?:ly)?|asap|as soon as possible|immediately|critical|"
    r"high priority|time[- ]sensitive|right away)\b",
    re.IGNORECASE,
)
LOW_PRIORITY_RE = re.compile(
    r"\b(?:no rush|no hurry|when you get a chance|whenever you can|"
    r"at your convenience|low priority|optional|if you have time)\b",
    re.IGNORECASE,
)
NOISE_RE = re.compile(
    r"\b(?:unsubscribe|newsletter|view (?:this email )?in (?:your )?browser|"
    r"do not reply|this is an automated|order confirmation|your receipt|"
    r"manage (?:your )?preferences)\b",
    re.IGNORECASE,
)
NOREPLY_SENDER_RE = re.compile(r"\b(?:no-?reply|do-?not-?reply|mailer-daemon)\b", re.IGNORECASE)
FYI_RE = re.compile(r"\b(?:fyi|for your information|just sharing|no action (?:needed|required))\b", re.IGNORECASE)

IMPERATIVE_VERBS = frozenset({
    "approve", "attend", "book", "bring", "call", "check", "complete",
    "confirm", "email", "finish", "fix", "fill", "finalize", "join",
    "order", "pay", "prepare", "register", "remind", "renew", "reply",
    "respond", "review", "schedule", "send", "share", "sign", "submit",
    "update", "upload", "verify", "draft", "organize", "arrange",
})
POLITE_PREFIX_RE = re.compile(
    r"^(?:(?:please|pls|kindly|also|and|then|could you|can you|would you|will you)\s+)+",
    re.IGNORECASE,
)
REPLY_PREFIX_RE = re.compile(r"^(?:(?:re|fw|fwd|aw)\s*:\s*)+", re.IGNORECASE)
SENTENCE_SPLIT_RE = re.compile(r"(?<=[.!?])\s+|\n+")
HTML_RE = re.compile(r"<(?:html|body|div|p|br|table|span|td)\b", re.IGNORECASE)

DAY_NAMES = {
    "monday": 0, "tuesday": 1, "wednesday": 2, "thursday": 3,
    "friday": 4, "saturday": 5, "sunday": 6,
}
MONTH = (
    r"(?:jan(?:uary)?|feb(?:ruary)?|mar(?:ch)?|apr(?:il)?|may|june?|july?|"
    r"aug(?:ust)?|sep(?:t(?:ember)?)?|oct(?:ober)?|nov(?:ember)?|dec(?:ember)?)"
)

EOD_RE = re.compile(r"\b(?:eod|cob|end of (?:the )?day|close of business)\b", re.IGNORECASE)
TONIGHT_RE = re.compile(r"\btonight\b", re.IGNORECASE)
TODAY_RE = re.compile(r"\btoday\b", re.IGNORECASE)
TOMORROW_RE = re.compile(r"\btomorrow\b", re.IGNORECASE)
NEXT_WEEK_RE = re.compile(r"\bnext week\b", re.IGNORECASE)
IN_DAYS_RE = re.compile(r"\b(?:in|within) (\d{1,3}) days?\b", re.IGNORECASE)
WEEKDAY_RE = re.compile(
    r"\b(monday|tuesday|wednesday|thursday|friday|saturday|sunday)\b", re.IGNORECASE
)
ISO_DATE_RE = re.compile(r"\b\d{4}-\d{2}-\d{2}(?:[T ]\d{2}:\d{2}(?::\d{2})?)?\b")
MONTH_DAY_RE = re.compile(
    rf"\b{MONTH}\.? \d{{1,2}}(?:st|nd|rd|th)?(?:,? \d{{4}})?\b", re.IGNORECASE
)
DAY_MONTH_RE = re.compile(
    rf"\b\d{{1,2}}(?:st|nd|rd|th)? (?:of )?{MONTH}(?:,? \d{{4}})?\b", re.IGNORECASE
)
SLASH_DATE_RE = re.compile(r"\b\d{1,2}/\d{1,2}(?:/\d{2,4})?\b")
CLOCK_RE = re.compile(
    r"\bat (\d{1,2})(?::(\d{2}))?\s*(am|pm)\b|\bat (\d{1,2}):(\d{2})\b", re.IGNORECASE
)


class Extractor(Protocol):
    """Anything that turns a normalized email into at most one draft."""

    def extract(self, email: NormalizedEmail) -> TaskDraft | None: ...


@dataclass(frozen=True)
class ScoreBreakdown:
    """Per-cue contributions, kept for logging and tests."""

    request: float = 0.0
    imperative: float = 0.0
    task_keyword: float = 0.0
    deadline: float = 0.0
    urgency: float = 0.0
    noise: float = 0.0
    fyi: float = 0.0

    @property
    def has_intent(self) -> bool:
        return bool(self.request or self.imperative or self.task_keyword)

    @property
    def total(self) -> float:
        return (
            self.request + self.imperative + self.task_keyword + self.deadline
            + self.urgency + self.noise + self.fyi
        )


def confidence_from_score(score: float) -> float:
    """Squash a raw cue score into [0, 1]."""
    z = max(-50.0, min(50.0, STEEPNESS * (score - MIDPOINT)))
    value = 1.0 / (1.0 + math.exp(-z))
    return round(min(1.0, max(0.0, value)), 4)


class TaskExtractor:
    """Deterministic keyword/intent task extractor.

    Relative dates and the due-within-a-day priority rule are resolved
    against ``reference_time``. With the default wall clock the same email
    can get a different due date or priority on another day; inject a fixed
    ``reference_time`` for reproducible drafts.

    Args:
        min_confidence: Drafts below this confidence are not produced.
        reference_time: Callable returning "now" for resolving relative
            dates. Defaults to local time.
    """

    def __init__(
        self,
        min_confidence: float = DEFAULT_MIN_CONFIDENCE,
        reference_time: Callable[[], datetime] | None = None,
    ):
        self.min_confidence = min_confidence
        self._now = reference_time or (lambda: datetime.now().astimezone())

    def extract(self, email: NormalizedEmail) -> TaskDraft | None:
        """Return a draft when the email reads as an actionable request."""
        body = clean_body(email.body)
        subject = "" if email.subject == NO_SUBJECT else email.subject
        text = f"{subject}\n{body}"
        now = self._now()

        due_date = find_due_date(text, now)
        breakdown = score_text(text, email.sender, due_date is not None)
        confidence = confidence_from_score(breakdown.total)

        if not breakdown.has_intent or confidence < self.min_confidence:
            logger.debug(
                f"No actionable intent in message {email.id} "
                f"(score={breakdown.total:.2f}, confidence={confidence:.4f})"
            )
            return None

        title = derive_title(subject, body)
        if not title:
            return None

        return TaskDraft(
            source_email_id=email.id,
            title=title,
            description=derive_description(subject, body),
            confidence=confidence,
            priority=derive_priority(text, due_date, now),
            due_date=due_date,
        )


def clean_body(body: str) -> str:
    """Reduce HTML bodies to text and collapse runs of blank space."""
    if HTML_RE.search(body):
        soup = BeautifulSoup(body, "html.parser")
        for tag in soup(["script", "style", "head"]):
            tag.decompose()
        body = soup.get_text(separator="\n")
    lines = [re.sub(r"[ \t]+", " ", line).strip() for line in body.splitlines()]
    return "\n".join(line for line in lines if line)


def score_text(text: str, sender: str, has_deadline: bool) -> ScoreBreakdown:
    noisy = bool(NOISE_RE.search(text) or NOREPLY_SENDER_RE.search(sender))
    return ScoreBreakdown(
        request=REQUEST_WEIGHT if REQUEST_RE.search(text) else 0.0,
        imperative=IMPERATIVE_WEIGHT if _has_imperative(text) else 0.0,
        task_keyword=TASK_KEYWORD_WEIGHT if TASK_KEYWORD_RE.search(text) else 0.0,
        deadline=DEADLINE_WEIGHT if has_deadline else 0.0,
        urgency=URGENCY_WEIGHT if URGENCY_RE.search(text) else 0.0,
        noise=NOISE_WEIGHT if noisy else 0.0,
        fyi=FYI_WEIGHT if FYI_RE.search(text) else 0.0,
    )


def _sentences(text: str) -> list[str]:
    return [s.strip() for s in SENTENCE_SPLIT_RE.split(text) if s and s.strip()]


def _has_imperative(text: str) -> bool:
    for sentence in _sentences(text):
        stripped = POLITE_PREFIX_RE.sub("", REPLY_PREFIX_RE.sub("", sentence))
        words = re.findall(r"[a-z]+", stripped.lower())
        if words and words[0] in IMPERATIVE_VERBS:
            return True
    return False


def derive_title(subject: str, body: str) -> str:
    title = REPLY_PREFIX_RE.sub("", subject).strip()
    if not title or title == NO_SUBJECT:
        sentences = _sentences(body)
        title = sentences[0] if sentences else ""
    return _truncate(title, MAX_TITLE_LENGTH)


def derive_description(subject: str, body: str) -> str:
    text = " ".join(body.split()) or REPLY_PREFIX_RE.sub("", subject).strip()
    return _truncate(text, MAX_DESCRIPTION_LENGTH)


def _truncate(text: str, limit: int) -> str:
    if len(text) <= limit:
        return text
    return text[: limit - 3].rstrip() + "..."


def derive_priority(text: str, due_date: datetime | None, now: datetime) -> Priority:
    if URGENCY_RE.search(text):
        return Priority.HIGH
    if due_date is not None and due_date - now <= timedelta(days=1):
        return Priority.HIGH
    if LOW_PRIORITY_RE.search(text):
        return Priority.LOW
    return Priority.MEDIUM


def find_due_date(text: str, now: datetime) -> datetime | None:
    """Resolve the earliest-mentioned temporal expression in ``text``."""
    candidates: list[tuple[int, datetime]] = []
    day_start = now.replace(hour=DAY_START_HOUR, minute=0, second=0, microsecond=0)

    for regex, resolve in (
        (EOD_RE, lambda m: now.replace(hour=END_OF_DAY_HOUR, minute=0, second=0, microsecond=0)),
        (TONIGHT_RE, lambda m: now.replace(hour=TONIGHT_HOUR, minute=0, second=0, microsecond=0)),
        (TODAY_RE, lambda m: now.replace(hour=END_OF_DAY_HOUR, minute=0, second=0, microsecond=0)),
        (TOMORROW_RE, lambda m: day_start + timedelta(days=1)),
        (NEXT_WEEK_RE, lambda m: day_start + timedelta(days=7 - now.weekday())),
        (IN_DAYS_RE, lambda m: day_start + timedelta(days=int(m.group(1)))),
        (WEEKDAY_RE, lambda m: _next_weekday(day_start, m.group(1))),
    ):
        match = regex.search(text)
        if match:
            candidates.append((match.start(), resolve(match)))

    for regex in (ISO_DATE_RE, MONTH_DAY_RE, DAY_MONTH_RE, SLASH_DATE_RE):
        for match in regex.finditer(text):
            resolved = _parse_explicit(match.group(0), day_start, now)
            if resolved is not None:
                candidates.append((match.start(), resolved))
                break

    if not candidates:
        return None

    candidates.sort(key=lambda c: c[0])
    return _apply_clock(text, candidates[0][1])


def _next_weekday(day_start: datetime, name: str) -> datetime:
    days_ahead = (DAY_NAMES[name.lower()] - day_start.weekday()) % 7 or 7
    return day_start + timedelta(days=days_ahead)


def _parse_explicit(value: str, default: datetime, now: datetime) -> datetime | None:
    try:
        resolved = parser.parse(value, default=default, fuzzy=True)
    except (ValueError, OverflowError):
        return None
    # A yearless date already past this year refers to next year
    if not re.search(r"\d{4}", value) and resolved.date() < now.date():
        resolved += relativedelta(years=1)
    return resolved


def _apply_clock(text: str, due: datetime) -> datetime:
    match = CLOCK_RE.search(text)
    if not match:
        return due
    if match.group(1):
        hour = int(match.group(1)) % 12
        minute = int(match.group(2) or 0)
        if match.group(3).lower() == "pm":
            hour += 12
    else:
        hour = int(match.group(4))
        minute = int(match.group(5))
    if hour > 23 or minute > 59:
        return due
    return due.replace(hour=hour, minute=minute, second=0, microsecond=0)
