"""Route a prompt to the selected provider and normalize the reply."""

from __future__ import annotations

import logging
import re
from typing import Mapping

from sqlsynth.llm.base import (
    LLMGenerator,
    MissingCredentialError,
    ProviderId,
    UnsupportedProviderError,
    resolve_provider,
)
from sqlsynth.llm.claude_adapter import ClaudeAdapter
from sqlsynth.llm.config_store import ConfigSnapshot
from sqlsynth.llm.openai_adapter import OpenAIAdapter

logger = logging.getLogger(__name__)

_CODE_FENCE_RE = re.compile(r"^```[A-Za-z]*\s*(.*?)\s*```$", re.DOTALL)


def extract_sql_text(raw: str) -> str:
    """Trim the completion and drop a surrounding markdown fence, if any."""
    text = raw.strip()
    match = _CODE_FENCE_RE.match(text)
    return match.group(1).strip() if match else text


def default_adapters(timeout_seconds: float = 60) -> dict[ProviderId, LLMGenerator]:
    return {
        ProviderId.OPENAI: OpenAIAdapter(timeout_seconds=timeout_seconds),
        ProviderId.CLAUDE: ClaudeAdapter(timeout_seconds=timeout_seconds),
    }


class ProviderDispatcher:
    """Send one prompt to one provider per call.

    Holds no mutable state; the caller passes the configuration snapshot to
    use, so concurrent config updates cannot affect a call in flight.
    """

    def __init__(
        self,
        adapters: Mapping[ProviderId, LLMGenerator] | None = None,
        *,
        timeout_seconds: float = 60,
    ) -> None:
        self._adapters = dict(adapters) if adapters is not None else default_adapters(timeout_seconds)

    @property
    def providers(self) -> list[ProviderId]:
        return list(self._adapters)

    def generate(
        self,
        provider_id: str | ProviderId,
        prompt: str,
        config_snapshot: ConfigSnapshot,
    ) -> str:
        provider = resolve_provider(provider_id)
        adapter = self._adapters.get(provider)
        if adapter is None:
            raise UnsupportedProviderError(provider.value)

        config = config_snapshot.get(provider)
        if config is None or not config.has_api_key:
            raise MissingCredentialError(provider.value)

        logger.info("Using %s (model=%s) to generate SQL", provider.value, config.model_name)
        logger.debug("Prompt for %s:\n%s", provider.value, prompt)
        raw = adapter.generate(prompt, config)
        return extract_sql_text(raw)
