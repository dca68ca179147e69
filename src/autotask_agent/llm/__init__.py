"""LLM client wrapper (Anthropic Claude)."""

from autotask_agent.llm.client import DEFAULT_MODEL, LLMClient

__all__ = ["DEFAULT_MODEL", "LLMClient"]
