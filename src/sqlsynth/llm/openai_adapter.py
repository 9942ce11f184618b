"""OpenAI implementation of the LLM generator interface."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from sqlsynth.llm.base import (
    MAX_OUTPUT_TOKENS,
    TEMPERATURE,
    LLMGenerator,
    MissingCredentialError,
    ProviderId,
    ProviderRequestError,
)
from sqlsynth.llm.config_store import ProviderConfig
from sqlsynth.llm.http import post_json


@dataclass(frozen=True)
class OpenAIAdapter(LLMGenerator):
    """Generate SQL text using the OpenAI Chat Completions API."""

    base_url: str = "https://api.openai.com/v1"
    timeout_seconds: float = 60

    provider_id = ProviderId.OPENAI

    def generate(self, prompt: str, config: ProviderConfig) -> str:
        api_key = config.secret()
        if not api_key:
            raise MissingCredentialError(self.provider_id.value)

        body = {
            "model": config.model_name,
            "messages": [{"role": "user", "content": prompt}],
            "temperature": TEMPERATURE,
            "max_tokens": MAX_OUTPUT_TOKENS,
        }
        payload = post_json(
            self.provider_id.value,
            self.base_url.rstrip("/") + "/chat/completions",
            body,
            {"Authorization": f"Bearer {api_key}"},
            self.timeout_seconds,
        )
        return self._extract_message_content(payload)

    @staticmethod
    def _extract_message_content(payload: dict[str, Any]) -> str:
        provider = ProviderId.OPENAI.value
        choices = payload.get("choices")
        if not isinstance(choices, list) or not choices:
            raise ProviderRequestError(provider, "response is missing choices.")

        first = choices[0]
        if not isinstance(first, dict):
            raise ProviderRequestError(provider, "response has invalid choice format.")

        message = first.get("message")
        if not isinstance(message, dict):
            raise ProviderRequestError(provider, "response is missing message content.")

        content = message.get("content")
        if not isinstance(content, str) or not content.strip():
            raise ProviderRequestError(provider, "message content is empty.")
        return content
