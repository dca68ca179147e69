"""Google Calendar collaborator."""

from autotask_agent.calendar.client import CalendarClient, CalendarCollaborator

__all__ = ["CalendarClient", "CalendarCollaborator"]
