"""Unified exception hierarchy for autotask-agent."""


class AutoTaskError(Exception):
    """Base exception for all autotask-agent errors."""


class ConfigError(AutoTaskError):
    """Invalid configuration value."""


# Messages
class MalformedMessageError(AutoTaskError):
    """A raw provider message is missing a mandatory header or its id."""


# Collaborators
class CollaboratorUnavailableError(AutoTaskError):
    """An external service (mail, calendar) is unreachable or refused auth."""


class CollaboratorTimeoutError(CollaboratorUnavailableError):
    """A collaborator call did not complete within its timeout."""


# Gmail
class GmailError(CollaboratorUnavailableError):
    """Base exception for Gmail operations."""


class GmailAuthError(GmailError):
    """Gmail authentication or authorization failure."""


class GmailFetchError(GmailError):
    """Failed to fetch Gmail messages or data."""


# Calendar
class CalendarError(CollaboratorUnavailableError):
    """Base exception for calendar operations."""


# LLM
class LLMError(AutoTaskError):
    """Base exception for LLM client operations."""


# Validation
class DuplicateSourceError(AutoTaskError):
    """The source email already produced a task in the current run."""
