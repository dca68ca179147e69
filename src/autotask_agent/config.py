"""Runtime configuration, read from ``AUTOTASK_*`` environment variables."""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Callable, Mapping, TypeVar

from autotask_agent.exceptions import ConfigError

T = TypeVar("T")

DEFAULT_AUTO_CREATE_THRESHOLD = 0.8
DEFAULT_MAX_RESULTS = 10
DEFAULT_COLLABORATOR_TIMEOUT = 30.0  # seconds
DEFAULT_MAX_WORKERS = 1
DEFAULT_EVENT_DURATION_MINUTES = 30
DEFAULT_EVENT_LEAD_MINUTES = 60
DEFAULT_REMINDER_MINUTES = 10
DEFAULT_CALENDAR_ID = "primary"
DEFAULT_EXTRACTOR = "keyword"
DEFAULT_HOST = "127.0.0.1"
DEFAULT_PORT = 8000

GMAIL_SCOPES = ["https://www.googleapis.com/auth/gmail.readonly"]
CALENDAR_SCOPES = ["https://www.googleapis.com/auth/calendar.events"]

EXTRACTORS = ("keyword", "llm")


def _read(
    env: Mapping[str, str],
    name: str,
    cast: Callable[[str], T],
    default: T,
) -> T:
    raw = env.get(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return cast(raw.strip())
    except ValueError as e:
        raise ConfigError(f"Invalid value for {name}: {raw!r} ({e})") from e


@dataclass(frozen=True)
class SyncConfig:
    """Tunables for one deployment of the sync pipeline.

    Args:
        auto_create_threshold: Confidence strictly above which a task is
            created without review.
        max_results: Default number of unread messages pulled per batch.
        collaborator_timeout: Seconds allowed for one Gmail/Calendar call.
        max_workers: Threads used for normalize/extract. 1 runs sequentially.
        event_duration_minutes: Length of created calendar events.
        event_lead_minutes: Offset from now for events without a due date.
        reminder_minutes: Popup reminder before the event starts.
        calendar_id: Target calendar.
        extractor: ``"keyword"`` or ``"llm"``.
        token_file: Authorized-user token JSON for Google APIs.
        service_account_file: Service-account key JSON (used when no token file).
        host: Bind address for the HTTP boundary.
        port: Bind port for the HTTP boundary.
    """

    auto_create_threshold: float = DEFAULT_AUTO_CREATE_THRESHOLD
    max_results: int = DEFAULT_MAX_RESULTS
    collaborator_timeout: float = DEFAULT_COLLABORATOR_TIMEOUT
    max_workers: int = DEFAULT_MAX_WORKERS
    event_duration_minutes: int = DEFAULT_EVENT_DURATION_MINUTES
    event_lead_minutes: int = DEFAULT_EVENT_LEAD_MINUTES
    reminder_minutes: int = DEFAULT_REMINDER_MINUTES
    calendar_id: str = DEFAULT_CALENDAR_ID
    extractor: str = DEFAULT_EXTRACTOR
    token_file: str | None = None
    service_account_file: str | None = None
    host: str = DEFAULT_HOST
    port: int = DEFAULT_PORT

    def __post_init__(self) -> None:
        if not 0.0 <= self.auto_create_threshold <= 1.0:
            raise ConfigError(
                f"auto_create_threshold must be within [0, 1], "
                f"got {self.auto_create_threshold}"
            )
        if self.max_results < 1:
            raise ConfigError(f"max_results must be positive, got {self.max_results}")
        if self.collaborator_timeout <= 0:
            raise ConfigError(
                f"collaborator_timeout must be positive, got {self.collaborator_timeout}"
            )
        if self.max_workers < 1:
            raise ConfigError(f"max_workers must be positive, got {self.max_workers}")
        if self.event_duration_minutes < 1:
            raise ConfigError(
                f"event_duration_minutes must be positive, got {self.event_duration_minutes}"
            )
        if self.extractor not in EXTRACTORS:
            raise ConfigError(
                f"extractor must be one of {', '.join(EXTRACTORS)}, got {self.extractor!r}"
            )

    @classmethod
    def from_env(cls, env: Mapping[str, str] | None = None) -> SyncConfig:
        """Build a config from ``AUTOTASK_*`` variables, falling back to defaults."""
        env = os.environ if env is None else env
        return cls(
            auto_create_threshold=_read(
                env, "AUTOTASK_AUTO_CREATE_THRESHOLD", float, DEFAULT_AUTO_CREATE_THRESHOLD
            ),
            max_results=_read(env, "AUTOTASK_MAX_RESULTS", int, DEFAULT_MAX_RESULTS),
            collaborator_timeout=_read(
                env, "AUTOTASK_COLLABORATOR_TIMEOUT", float, DEFAULT_COLLABORATOR_TIMEOUT
            ),
            max_workers=_read(env, "AUTOTASK_MAX_WORKERS", int, DEFAULT_MAX_WORKERS),
            event_duration_minutes=_read(
                env, "AUTOTASK_EVENT_DURATION_MINUTES", int, DEFAULT_EVENT_DURATION_MINUTES
            ),
            event_lead_minutes=_read(
                env, "AUTOTASK_EVENT_LEAD_MINUTES", int, DEFAULT_EVENT_LEAD_MINUTES
            ),
            reminder_minutes=_read(
                env, "AUTOTASK_REMINDER_MINUTES", int, DEFAULT_REMINDER_MINUTES
            ),
            calendar_id=env.get("AUTOTASK_CALENDAR_ID") or DEFAULT_CALENDAR_ID,
            extractor=(env.get("AUTOTASK_EXTRACTOR") or DEFAULT_EXTRACTOR).lower(),
            token_file=env.get("AUTOTASK_TOKEN_FILE") or None,
            service_account_file=env.get("AUTOTASK_SERVICE_ACCOUNT_FILE") or None,
            host=env.get("AUTOTASK_HOST") or DEFAULT_HOST,
            port=_read(env, "AUTOTASK_PORT", int, DEFAULT_PORT),
        )
