"""Anthropic Messages API implementation of the LLM generator interface."""

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

ANTHROPIC_VERSION = "2023-06-01"


@dataclass(frozen=True)
class ClaudeAdapter(LLMGenerator):
    base_url: str = "https://api.anthropic.com/v1"
    timeout_seconds: float = 60

    provider_id = ProviderId.CLAUDE

    def generate(self, prompt: str, config: ProviderConfig) -> str:
        api_key = config.secret()
        if not api_key:
            raise MissingCredentialError(self.provider_id.value)

        body = {
            "model": config.model_name,
            "max_tokens": MAX_OUTPUT_TOKENS,
            "temperature": TEMPERATURE,
            "messages": [{"role": "user", "content": prompt}],
        }
        payload = post_json(
            self.provider_id.value,
            self.base_url.rstrip("/") + "/messages",
            body,
            {"x-api-key": api_key, "anthropic-version": ANTHROPIC_VERSION},
            self.timeout_seconds,
        )
        return self._extract_text(payload)

    @staticmethod
    def _extract_text(payload: dict[str, Any]) -> str:
        provider = ProviderId.CLAUDE.value
        blocks = payload.get("content")
        if not isinstance(blocks, list) or not blocks:
            raise ProviderRequestError(provider, "response is missing content blocks.")

        for block in blocks:
            if isinstance(block, dict) and block.get("type", "text") == "text":
                text = block.get("text")
                if isinstance(text, str) and text.strip():
                    return text
        raise ProviderRequestError(provider, "response contains no text content.")
