"""Construct the collaborators and orchestrator once at process start."""

from __future__ import annotations

import logging

from autotask_agent.calendar.client import CalendarClient
from autotask_agent.config import SyncConfig
from autotask_agent.gmail.auth import (
    ALL_SCOPES,
    build_calendar_service,
    build_gmail_service,
    load_credentials,
)
from autotask_agent.gmail.client import GmailClient
from autotask_agent.pipeline.extractor import Extractor, TaskExtractor
from autotask_agent.pipeline.orchestrator import SyncOrchestrator

logger = logging.getLogger(__name__)


def build_extractor(config: SyncConfig) -> Extractor:
    if config.extractor == "llm":
        from autotask_agent.llm.client import LLMClient
        from autotask_agent.pipeline.llm_extractor import LLMTaskExtractor

        return LLMTaskExtractor(LLMClient(timeout=config.collaborator_timeout))
    return TaskExtractor()


def build_orchestrator(config: SyncConfig | None = None) -> SyncOrchestrator:
    """Wire Gmail, Calendar and the extractor from configuration."""
    config = config or SyncConfig.from_env()
    creds = load_credentials(
        ALL_SCOPES,
        token_file=config.token_file,
        service_account_file=config.service_account_file,
    )
    logger.info(f"Building orchestrator with {config.extractor} extractor")
    return SyncOrchestrator(
        mail=GmailClient(build_gmail_service(creds)),
        calendar=CalendarClient(build_calendar_service(creds), calendar_id=config.calendar_id),
        extractor=build_extractor(config),
        config=config,
    )
