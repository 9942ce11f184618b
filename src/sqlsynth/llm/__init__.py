"""LLM provider configuration, adapters and dispatch."""

from sqlsynth.llm.base import (
    LLMError,
    LLMGenerator,
    MissingCredentialError,
    ProviderId,
    ProviderRequestError,
    UnsupportedProviderError,
    resolve_provider,
)
from sqlsynth.llm.claude_adapter import ClaudeAdapter
from sqlsynth.llm.config_store import (
    ConfigSnapshot,
    ConfigUpdateError,
    ProviderConfig,
    ProviderConfigStore,
)
from sqlsynth.llm.dispatcher import ProviderDispatcher, extract_sql_text
from sqlsynth.llm.openai_adapter import OpenAIAdapter

__all__ = [
    "ClaudeAdapter",
    "ConfigSnapshot",
    "ConfigUpdateError",
    "LLMError",
    "LLMGenerator",
    "MissingCredentialError",
    "OpenAIAdapter",
    "ProviderConfig",
    "ProviderConfigStore",
    "ProviderDispatcher",
    "ProviderId",
    "ProviderRequestError",
    "UnsupportedProviderError",
    "extract_sql_text",
    "resolve_provider",
]
