"""Provider-independent LLM interface for SQL generation."""

from __future__ import annotations

from abc import ABC, abstractmethod
from enum import Enum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from sqlsynth.llm.config_store import ProviderConfig

# Sampling settings shared by every provider.
TEMPERATURE = 0.1
MAX_OUTPUT_TOKENS = 1000


class ProviderId(str, Enum):
    OPENAI = "openai"
    CLAUDE = "claude"


class LLMError(RuntimeError):
    """Base class for provider dispatch failures."""

    def __init__(self, provider: str, message: str) -> None:
        super().__init__(message)
        self.provider = provider


class UnsupportedProviderError(LLMError):
    """Raised for a provider id outside the supported set."""

    def __init__(self, provider: str) -> None:
        supported = ", ".join(item.value for item in ProviderId)
        super().__init__(
            provider,
            f"Unsupported AI provider: {provider!r} (supported: {supported}).",
        )


class MissingCredentialError(LLMError):
    """Raised when the selected provider has no API key configured."""

    def __init__(self, provider: str) -> None:
        super().__init__(provider, f"API key for provider '{provider}' is not configured.")


class ProviderRequestError(LLMError):
    """Raised when the upstream call fails or returns an unusable response."""

    def __init__(self, provider: str, message: str) -> None:
        super().__init__(provider, f"{provider} request failed: {message}")
        self.upstream_message = message


class LLMGenerator(ABC):
    """One implementation per provider."""

    provider_id: ProviderId

    @abstractmethod
    def generate(self, prompt: str, config: ProviderConfig) -> str:
        """Send `prompt` and return the raw completion text."""


def resolve_provider(provider_id: str | ProviderId) -> ProviderId:
    """Map a provider id string onto the closed ProviderId set."""
    if isinstance(provider_id, ProviderId):
        return provider_id
    try:
        return ProviderId(provider_id)
    except ValueError as exc:
        raise UnsupportedProviderError(str(provider_id)) from exc
