"""Gmail API mail collaborator: unread listing and single-message fetch."""

from __future__ import annotations

import logging
from typing import Protocol

from googleapiclient.discovery import Resource

from autotask_agent.exceptions import GmailFetchError

logger = logging.getLogger(__name__)

UNREAD_QUERY = "is:unread"
PAGE_SIZE = 100


class MailCollaborator(Protocol):
    """What the orchestrator needs from a mail provider.

    ``list_unread`` returns stubs holding at least ``id``; the orchestrator
    fetches each one through ``get`` so every fetch is bounded on its own.
    """

    def list_unread(self, max_results: int) -> list[dict]: ...

    def get(self, message_id: str) -> dict: ...


class GmailClient:
    """Reads unread messages through an authenticated Gmail ``Resource``.

    Args:
        service: A ``gmail v1`` resource, e.g. from
            ``autotask_agent.gmail.auth.build_gmail_service``.
        user_id: Mailbox owner, ``"me"`` for the authenticated account.
    """

    def __init__(self, service: Resource, user_id: str = "me"):
        self._service = service
        self.user_id = user_id

    def list_unread(self, max_results: int) -> list[dict]:
        """Return up to ``max_results`` unread message stubs.

        Each stub carries ``id`` (and ``threadId`` when Gmail sends it);
        callers fetch the full message with ``get``. Order is whatever
        Gmail returns, normally most recent first. Failing to list raises
        ``GmailFetchError``.
        """
        try:
            stubs = self._list_message_stubs(UNREAD_QUERY, max_results)
        except Exception as e:
            raise GmailFetchError(f"Failed to list unread messages: {e}") from e

        logger.info(f"Found {len(stubs)} unread messages")
        return stubs

    def get(self, message_id: str) -> dict:
        """Fetch one message in full format."""
        try:
            return (
                self._service.users()
                .messages()
                .get(userId=self.user_id, id=message_id, format="full")
                .execute()
            )
        except Exception as e:
            raise GmailFetchError(f"Failed to fetch message {message_id}: {e}") from e

    def _list_message_stubs(self, query: str, max_results: int) -> list[dict]:
        """List message stubs matching the query, handling pagination."""
        stubs: list[dict] = []
        page_token = None

        while len(stubs) < max_results:
            kwargs: dict = {
                "userId": self.user_id,
                "q": query,
                "labelIds": ["UNREAD"],
                "maxResults": min(max_results - len(stubs), PAGE_SIZE),
            }
            if page_token:
                kwargs["pageToken"] = page_token

            response = self._service.users().messages().list(**kwargs).execute()
            messages = response.get("messages", [])

            if not messages:
                break

            stubs.extend(
                {k: msg[k] for k in ("id", "threadId") if k in msg} for msg in messages
            )
            page_token = response.get("nextPageToken")

            if not page_token:
                break

        return stubs[:max_results]
