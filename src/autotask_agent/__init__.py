"""autotask-agent: turn unread Gmail into scored tasks and calendar events."""

__version__ = "0.1.0"
