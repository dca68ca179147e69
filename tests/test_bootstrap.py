"""Tests for orchestrator wiring."""

from unittest.mock import MagicMock, patch

from autotask_agent import bootstrap
from autotask_agent.config import SyncConfig
from autotask_agent.gmail.auth import ALL_SCOPES
from autotask_agent.pipeline.extractor import TaskExtractor
from autotask_agent.pipeline.llm_extractor import LLMTaskExtractor


def test_keyword_extractor_by_default():
    assert isinstance(bootstrap.build_extractor(SyncConfig()), TaskExtractor)


def test_llm_extractor(monkeypatch):
    monkeypatch.setenv("ANTHROPIC_API_KEY", "test-key")
    extractor = bootstrap.build_extractor(SyncConfig(extractor="llm"))
    assert isinstance(extractor, LLMTaskExtractor)


@patch.object(bootstrap, "build_calendar_service")
@patch.object(bootstrap, "build_gmail_service")
@patch.object(bootstrap, "load_credentials")
def test_build_orchestrator(mock_creds, mock_gmail, mock_calendar):
    config = SyncConfig(token_file="/tmp/token.json", calendar_id="team")
    orchestrator = bootstrap.build_orchestrator(config)

    mock_creds.assert_called_once_with(
        ALL_SCOPES, token_file="/tmp/token.json", service_account_file=None,
    )
    mock_gmail.assert_called_once_with(mock_creds.return_value)
    assert orchestrator.mail._service is mock_gmail.return_value
    assert orchestrator.calendar._service is mock_calendar.return_value
    assert orchestrator.calendar.calendar_id == "team"
    assert orchestrator.config is config
