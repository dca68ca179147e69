"""Credential loading for the Google APIs.

Only pre-provisioned credentials are supported: an authorized-user token
JSON (written by any OAuth tool) or a service-account key file. No
interactive consent flow is run here.
"""

from __future__ import annotations

from pathlib import Path

from google.auth.transport.requests import Request
from google.oauth2 import service_account
from google.oauth2.credentials import Credentials
from googleapiclient.discovery import build, Resource

from autotask_agent.config import CALENDAR_SCOPES, GMAIL_SCOPES
from autotask_agent.exceptions import GmailAuthError

ALL_SCOPES = GMAIL_SCOPES + CALENDAR_SCOPES


def load_credentials(
    scopes: list[str],
    token_file: str | Path | None = None,
    service_account_file: str | Path | None = None,
    subject: str | None = None,
):
    """Load and auto-refresh credentials.

    The token file is preferred; the service-account file is used when no
    token file is given. ``subject`` enables domain-wide delegation for
    service accounts.
    """
    if token_file:
        return _load_user_token(Path(token_file), scopes)
    if service_account_file:
        return _load_service_account(Path(service_account_file), scopes, subject)
    raise GmailAuthError(
        "No credentials configured. Set AUTOTASK_TOKEN_FILE or "
        "AUTOTASK_SERVICE_ACCOUNT_FILE."
    )


def _load_user_token(token_path: Path, scopes: list[str]) -> Credentials:
    if not token_path.exists():
        raise GmailAuthError(f"No token found at {token_path}.")

    creds = Credentials.from_authorized_user_file(str(token_path), scopes)

    if creds.expired and creds.refresh_token:
        try:
            creds.refresh(Request())
        except Exception as e:
            raise GmailAuthError(f"Failed to refresh token {token_path}: {e}") from e
        token_path.write_text(creds.to_json())

    if not creds.valid:
        raise GmailAuthError(f"Token at {token_path} is invalid. Re-authorize.")

    return creds


def _load_service_account(
    key_path: Path, scopes: list[str], subject: str | None
) -> service_account.Credentials:
    if not key_path.exists():
        raise GmailAuthError(f"Service account key not found at {key_path}.")
    try:
        creds = service_account.Credentials.from_service_account_file(
            str(key_path), scopes=scopes,
        )
    except (ValueError, OSError) as e:
        raise GmailAuthError(f"Invalid service account key {key_path}: {e}") from e
    if subject:
        creds = creds.with_subject(subject)
    return creds


def build_gmail_service(credentials) -> Resource:
    """Return an authenticated Gmail API service."""
    return build("gmail", "v1", credentials=credentials, cache_discovery=False)


def build_calendar_service(credentials) -> Resource:
    """Return an authenticated Calendar API service."""
    return build("calendar", "v3", credentials=credentials, cache_discovery=False)

