"""Google Calendar API calendar collaborator."""

from __future__ import annotations

import logging
from typing import Any, Protocol

from autotask_agent.exceptions import CalendarError

logger = logging.getLogger(__name__)


class CalendarCollaborator(Protocol):
    """What the orchestrator needs from a calendar provider."""

    def create_event(
        self,
        summary: str,
        description: str,
        start: str,
        end: str,
        reminders: list[dict] | None = None,
    ) -> dict: ...


class CalendarClient:
    """Google Calendar API client for task events.

    Args:
        service: A ``calendar v3`` resource, e.g. from
            ``autotask_agent.gmail.auth.build_calendar_service``.
        calendar_id: Calendar that receives the events.
        time_zone: IANA zone sent along with naive timestamps.
    """

    def __init__(self, service, calendar_id: str = "primary", time_zone: str = "UTC"):
        self._service = service
        self.calendar_id = calendar_id
        self.time_zone = time_zone

    def create_event(
        self,
        summary: str,
        description: str,
        start: str,
        end: str,
        reminders: list[dict] | None = None,
    ) -> dict:
        """Create a calendar event and return its id and link.

        ``reminders`` is a list of ``{"method": "popup"|"email", "minutes": N}``
        overrides; ``None`` keeps the calendar's default reminders.
        """
        try:
            event_body: dict[str, Any] = {
                "summary": summary,
                "start": {"dateTime": start, "timeZone": self.time_zone},
                "end": {"dateTime": end, "timeZone": self.time_zone},
            }
            if description:
                event_body["description"] = description
            if reminders is None:
                event_body["reminders"] = {"useDefault": True}
            else:
                event_body["reminders"] = {"useDefault": False, "overrides": reminders}

            event = (
                self._service.events()
                .insert(calendarId=self.calendar_id, body=event_body)
                .execute()
            )
        except Exception as e:
            raise CalendarError(f"Failed to create event: {e}") from e

        if not event.get("id"):
            raise CalendarError("Calendar returned an event without an id")

        logger.info(f"Created calendar event {event['id']} for '{summary}'")
        return {
            "id": event["id"],
            "summary": event.get("summary"),
            "start": event.get("start", {}).get("dateTime"),
            "end": event.get("end", {}).get("dateTime"),
            "html_link": event.get("htmlLink"),
        }

