"""Tests for exception hierarchy."""

from autotask_agent.exceptions import (
    AutoTaskError,
    CalendarError,
    CollaboratorTimeoutError,
    CollaboratorUnavailableError,
    ConfigError,
    DuplicateSourceError,
    GmailAuthError,
    GmailError,
    GmailFetchError,
    LLMError,
    MalformedMessageError,
)


def test_all_inherit_from_base():
    for exc_class in [
        ConfigError,
        MalformedMessageError,
        CollaboratorUnavailableError, CollaboratorTimeoutError,
        GmailError, GmailAuthError, GmailFetchError,
        CalendarError,
        LLMError,
        DuplicateSourceError,
    ]:
        assert issubclass(exc_class, AutoTaskError)


def test_collaborator_hierarchy():
    for exc_class in [CollaboratorTimeoutError, GmailError, CalendarError]:
        assert issubclass(exc_class, CollaboratorUnavailableError)
    assert issubclass(GmailAuthError, GmailError)
    assert issubclass(GmailFetchError, GmailError)


def test_per_message_errors_are_not_collaborator_errors():
    assert not issubclass(MalformedMessageError, CollaboratorUnavailableError)
    assert not issubclass(LLMError, CollaboratorUnavailableError)


def test_exception_message():
    e = GmailAuthError("test error")
    assert str(e) == "test error"
