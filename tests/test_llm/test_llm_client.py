"""Tests for LLM client."""

from unittest.mock import MagicMock

import pytest

from autotask_agent.exceptions import LLMError
from autotask_agent.llm.client import LLMClient


def test_init_requires_api_key(monkeypatch):
    monkeypatch.delenv("ANTHROPIC_API_KEY", raising=False)
    with pytest.raises(LLMError, match="API key is required"):
        LLMClient(api_key="")


def test_init_accepts_none_api_key_with_env(monkeypatch):
    monkeypatch.setenv("ANTHROPIC_API_KEY", "test-key-123")
    client = LLMClient(api_key=None)
    assert client.model == "claude-haiku-4-5-20251001"
    assert client.max_retries == 3


def test_init_accepts_none_api_key_without_env_raises(monkeypatch):
    monkeypatch.delenv("ANTHROPIC_API_KEY", raising=False)
    with pytest.raises(LLMError, match="API key is required"):
        LLMClient(api_key=None)


def test_generate_returns_reply_text():
    client = LLMClient(api_key="test-key")
    client._client = MagicMock()
    client._client.messages.create.return_value.content = [MagicMock(text='{"is_task": true}')]

    assert client.generate("system", "hello") == '{"is_task": true}'
    kwargs = client._client.messages.create.call_args.kwargs
    assert kwargs["system"] == "system"
    assert kwargs["messages"] == [{"role": "user", "content": "hello"}]
    assert kwargs["temperature"] == 0.0


def test_generate_without_retries_raises():
    client = LLMClient(api_key="test-key", max_retries=0)
    client._client = MagicMock()
    with pytest.raises(LLMError, match="Failed after 0 retries"):
        client.generate("system", "hello")
    client._client.messages.create.assert_not_called()
