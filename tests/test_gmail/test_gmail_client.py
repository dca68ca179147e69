"""Tests for the Gmail mail collaborator."""

from unittest.mock import MagicMock

import pytest

from autotask_agent.exceptions import CollaboratorUnavailableError, GmailFetchError
from autotask_agent.gmail.client import GmailClient


@pytest.fixture
def gmail():
    service = MagicMock()
    return GmailClient(service), service


def test_list_unread_returns_stubs_without_fetching(gmail):
    client, service = gmail
    service.users().messages().list().execute.return_value = {
        "messages": [{"id": "a", "threadId": "t1"}, {"id": "b", "threadId": "t2"}],
    }

    stubs = client.list_unread(10)

    assert stubs == [{"id": "a", "threadId": "t1"}, {"id": "b", "threadId": "t2"}]
    service.users().messages().get.assert_not_called()
    _, kwargs = service.users().messages().list.call_args
    assert kwargs["q"] == "is:unread"
    assert kwargs["labelIds"] == ["UNREAD"]
    assert kwargs["maxResults"] == 10


def test_list_unread_respects_max_results_across_pages(gmail):
    client, service = gmail
    service.users().messages().list().execute.side_effect = [
        {"messages": [{"id": "a"}, {"id": "b"}], "nextPageToken": "p2"},
        {"messages": [{"id": "c"}, {"id": "d"}]},
    ]

    stubs = client.list_unread(3)

    assert [s["id"] for s in stubs] == ["a", "b", "c"]
    _, kwargs = service.users().messages().list.call_args
    assert kwargs["pageToken"] == "p2"


def test_list_unread_empty_mailbox(gmail):
    client, service = gmail
    service.users().messages().list().execute.return_value = {}
    assert client.list_unread(10) == []


def test_list_failure_raises_unavailable(gmail):
    client, service = gmail
    service.users().messages().list().execute.side_effect = Exception("401 invalid credentials")
    with pytest.raises(GmailFetchError, match="Failed to list unread messages"):
        client.list_unread(10)


def test_fetch_errors_are_collaborator_errors():
    assert issubclass(GmailFetchError, CollaboratorUnavailableError)


def test_get_fetches_full_format(gmail):
    client, service = gmail
    service.users().messages().get().execute.return_value = {"id": "a", "payload": {}}

    assert client.get("a") == {"id": "a", "payload": {}}
    _, kwargs = service.users().messages().get.call_args
    assert kwargs == {"userId": "me", "id": "a", "format": "full"}


def test_get_wraps_errors(gmail):
    client, service = gmail
    service.users().messages().get().execute.side_effect = Exception("404")
    with pytest.raises(GmailFetchError, match="Failed to fetch message zzz"):
        client.get("zzz")
