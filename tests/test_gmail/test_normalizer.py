"""Tests for Gmail message normalization."""

import base64

import pytest

from autotask_agent.exceptions import MalformedMessageError
from autotask_agent.gmail.models import NormalizedEmail
from autotask_agent.gmail.normalizer import normalize


def _b64(text: str) -> str:
    return base64.urlsafe_b64encode(text.encode()).decode()


def _headers(sender="Alice <alice@example.com>", subject="Quarterly report"):
    headers = [{"name": "To", "value": "bob@example.com"}]
    if sender is not None:
        headers.append({"name": "From", "value": sender})
    if subject is not None:
        headers.append({"name": "Subject", "value": subject})
    return headers


def _make_raw_message(body_text="Hello world", **header_kwargs):
    return {
        "id": "msg123",
        "threadId": "thread456",
        "labelIds": ["INBOX", "UNREAD"],
        "payload": {
            "mimeType": "text/plain",
            "headers": _headers(**header_kwargs),
            "body": {"data": _b64(body_text)},
        },
    }


def _make_multipart(parts, **header_kwargs):
    return {
        "id": "msg-mp",
        "payload": {
            "mimeType": "multipart/alternative",
            "headers": _headers(**header_kwargs),
            "body": {"size": 0},
            "parts": parts,
        },
    }


def test_normalize_plain_message():
    result = normalize(_make_raw_message("Hello world"))
    assert isinstance(result, NormalizedEmail)
    assert result.id == "msg123"
    assert result.sender == "Alice <alice@example.com>"
    assert result.subject == "Quarterly report"
    assert result.body == "Hello world"
    assert result.thread_id == "thread456"
    assert result.label_ids == ("INBOX", "UNREAD")


def test_missing_subject_defaults():
    result = normalize(_make_raw_message(subject=None))
    assert result.subject == "No Subject"


def test_empty_subject_defaults():
    result = normalize(_make_raw_message(subject=""))
    assert result.subject == "No Subject"


def test_missing_from_raises():
    with pytest.raises(MalformedMessageError, match="From"):
        normalize(_make_raw_message(sender=None))


def test_missing_id_raises():
    raw = _make_raw_message()
    del raw["id"]
    with pytest.raises(MalformedMessageError):
        normalize(raw)


def test_header_names_are_case_sensitive():
    raw = _make_raw_message()
    raw["payload"]["headers"] = [
        {"name": "from", "value": "lower@example.com"},
        {"name": "SUBJECT", "value": "Shouting"},
    ]
    with pytest.raises(MalformedMessageError):
        normalize(raw)


def test_multipart_selects_first_plain_part():
    raw = _make_multipart([
        {"mimeType": "text/html", "body": {"data": _b64("<p>html</p>")}},
        {"mimeType": "text/plain", "body": {"data": _b64("first plain")}},
        {"mimeType": "text/plain", "body": {"data": _b64("second plain")}},
    ])
    assert normalize(raw).body == "first plain"


def test_multipart_without_plain_part_is_empty():
    raw = _make_multipart([
        {"mimeType": "text/html", "body": {"data": _b64("<p>only html</p>")}},
    ])
    assert normalize(raw).body == ""


def test_multipart_skips_undecodable_plain_part():
    bad = base64.urlsafe_b64encode(b"\xff\xfe\xfa").decode()
    raw = _make_multipart([
        {"mimeType": "text/plain", "body": {"data": bad}},
        {"mimeType": "text/plain", "body": {"data": _b64("good part")}},
    ])
    assert normalize(raw).body == "good part"


def test_nested_multipart():
    raw = _make_multipart([
        {
            "mimeType": "multipart/alternative",
            "parts": [
                {"mimeType": "text/plain", "body": {"data": _b64("nested text")}},
            ],
        },
        {"mimeType": "application/pdf", "filename": "a.pdf", "body": {"attachmentId": "x"}},
    ])
    assert normalize(raw).body == "nested text"


def test_unpadded_base64_decodes():
    data = _b64("abcde").rstrip("=")
    raw = _make_raw_message()
    raw["payload"]["body"]["data"] = data
    assert normalize(raw).body == "abcde"


def test_absent_body_is_empty():
    raw = _make_raw_message()
    del raw["payload"]["body"]
    assert normalize(raw).body == ""


def test_undecodable_single_body_is_empty():
    raw = _make_raw_message()
    raw["payload"]["body"]["data"] = base64.urlsafe_b64encode(b"\xff\xfe").decode()
    assert normalize(raw).body == ""


def test_unicode_body():
    assert normalize(_make_raw_message("Grüße, café ☕")).body == "Grüße, café ☕"
