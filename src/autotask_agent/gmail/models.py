"""Data models for the Gmail module."""

from __future__ import annotations

from dataclasses import dataclass, field

NO_SUBJECT = "No Subject"


@dataclass(frozen=True)
class NormalizedEmail:
    """Canonical, provider-independent view of one Gmail message."""

    id: str
    sender: str
    subject: str = NO_SUBJECT
    body: str = ""
    thread_id: str = ""
    date: str = ""
    label_ids: tuple[str, ...] = field(default_factory=tuple)
