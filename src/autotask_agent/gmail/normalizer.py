"""Normalize Gmail API message payloads into ``NormalizedEmail`` records."""

from __future__ import annotations

import base64
import binascii
import logging

from autotask_agent.exceptions import MalformedMessageError
from autotask_agent.gmail.models import NO_SUBJECT, NormalizedEmail

logger = logging.getLogger(__name__)


def normalize(raw_message: dict) -> NormalizedEmail:
    """Extract sender, subject and plain-text body from a raw message.

    This is a pure parsing function, no network calls. Works with raw
    message dicts from the Gmail API (format=full). Header names are
    matched case-sensitively. Raises ``MalformedMessageError`` only when
    the message id or the ``From`` header is missing; body decoding
    problems never raise.
    """
    msg_id = raw_message.get("id")
    if not msg_id:
        raise MalformedMessageError("Message has no id")

    payload = raw_message.get("payload") or {}
    headers = _extract_headers(payload)

    sender = headers.get("From")
    if not sender:
        raise MalformedMessageError(f"Message {msg_id} has no From header")

    return NormalizedEmail(
        id=msg_id,
        sender=sender,
        subject=headers.get("Subject") or NO_SUBJECT,
        body=_extract_body(payload, msg_id),
        thread_id=raw_message.get("threadId", ""),
        date=headers.get("Date", ""),
        label_ids=tuple(raw_message.get("labelIds", [])),
    )


def _extract_headers(payload: dict) -> dict[str, str]:
    # First occurrence wins for repeated headers
    headers: dict[str, str] = {}
    for h in payload.get("headers", []):
        name = h.get("name")
        if name and name not in headers:
            headers[name] = h.get("value", "")
    return headers


def _extract_body(payload: dict, msg_id: str) -> str:
    parts = payload.get("parts")
    if parts:
        text = _first_plain_part(parts, msg_id)
        return text if text is not None else ""

    try:
        return _decode_body_data(payload)
    except ValueError as e:
        logger.warning(f"Could not decode body of message {msg_id}: {e}")
        return ""


def _first_plain_part(parts: list[dict], msg_id: str) -> str | None:
    """Depth-first search for the first decodable ``text/plain`` part."""
    for part in parts:
        mime_type = part.get("mimeType", "")
        if mime_type == "text/plain":
            try:
                return _decode_body_data(part)
            except ValueError as e:
                logger.warning(
                    f"Skipping undecodable text/plain part of message {msg_id}: {e}"
                )
                continue
        if mime_type.startswith("multipart/") and part.get("parts"):
            text = _first_plain_part(part["parts"], msg_id)
            if text is not None:
                return text
    return None


def _decode_body_data(payload: dict) -> str:
    """Decode a base64url body. Raises ``ValueError`` on corrupt data."""
    data = (payload.get("body") or {}).get("data", "")
    if not data:
        return ""
    padded = data + "=" * (-len(data) % 4)
    try:
        raw = base64.urlsafe_b64decode(padded.encode("ascii"))
        return raw.decode("utf-8")
    except (binascii.Error, UnicodeError) as e:
        raise ValueError(str(e)) from e
