"""Per-provider credentials and model selection."""

from __future__ import annotations

import logging
import threading
from types import MappingProxyType
from typing import TYPE_CHECKING, Any, Mapping

from pydantic import BaseModel, ConfigDict, Field, SecretStr, ValidationError, field_validator

from sqlsynth.llm.base import ProviderId, resolve_provider

if TYPE_CHECKING:
    from sqlsynth.config import Settings

logger = logging.getLogger(__name__)

DEFAULT_MODELS: dict[ProviderId, str] = {
    ProviderId.OPENAI: "gpt-3.5-turbo",
    ProviderId.CLAUDE: "claude-3-opus-20240229",
}

# Accepted spellings for partial updates.
_UPDATE_FIELDS = {
    "api_key": "api_key",
    "apiKey": "api_key",
    "model_name": "model_name",
    "modelName": "model_name",
    "model": "model_name",
}


class ConfigUpdateError(ValueError):
    """Raised when a provider configuration update is rejected."""


class ProviderConfig(BaseModel):
    """API key and model for one provider. The key never appears in repr()."""

    model_config = ConfigDict(frozen=True, protected_namespaces=())

    api_key: SecretStr | None = None
    model_name: str = Field(min_length=1)

    @field_validator("api_key", mode="before")
    @classmethod
    def blank_key_is_none(cls, value: Any) -> Any:
        if isinstance(value, SecretStr):
            value = value.get_secret_value()
        if value is None:
            return None
        normalized = str(value).strip()
        return normalized or None

    @field_validator("model_name")
    @classmethod
    def strip_model_name(cls, value: str) -> str:
        normalized = value.strip()
        if not normalized:
            raise ValueError("model name cannot be empty.")
        return normalized

    @property
    def has_api_key(self) -> bool:
        return self.api_key is not None

    def secret(self) -> str | None:
        return self.api_key.get_secret_value() if self.api_key else None


ConfigSnapshot = Mapping[ProviderId, ProviderConfig]


class ProviderConfigStore:
    """Holds one ProviderConfig per provider.

    Updates build a new mapping and swap it in under a lock; readers take the
    current mapping reference, which is never mutated afterwards.
    """

    def __init__(self, configs: Mapping[str | ProviderId, ProviderConfig] | None = None) -> None:
        merged: dict[ProviderId, ProviderConfig] = {
            provider: ProviderConfig(model_name=model)
            for provider, model in DEFAULT_MODELS.items()
        }
        for provider_id, config in (configs or {}).items():
            merged[resolve_provider(provider_id)] = config
        self._lock = threading.Lock()
        self._configs: ConfigSnapshot = MappingProxyType(merged)

    @classmethod
    def from_settings(cls, settings: Settings) -> ProviderConfigStore:
        return cls(
            {
                ProviderId.OPENAI: ProviderConfig(
                    api_key=settings.openai_api_key,
                    model_name=settings.openai_model,
                ),
                ProviderId.CLAUDE: ProviderConfig(
                    api_key=settings.claude_api_key,
                    model_name=settings.claude_model,
                ),
            }
        )

    def snapshot(self) -> ConfigSnapshot:
        """Return a consistent, read-only view of every provider's config."""
        return self._configs

    def get(self, provider_id: str | ProviderId) -> ProviderConfig:
        return self._configs[resolve_provider(provider_id)]

    def update_config(
        self,
        provider_id: str | ProviderId,
        partial: Mapping[str, Any],
    ) -> ProviderConfig:
        """Merge `partial` into the stored config for one provider."""
        provider = resolve_provider(provider_id)
        changes: dict[str, Any] = {}
        for key, value in partial.items():
            field_name = _UPDATE_FIELDS.get(key)
            if field_name is None:
                raise ConfigUpdateError(f"Unknown provider configuration field: {key!r}.")
            changes[field_name] = value

        with self._lock:
            current = self._configs[provider]
            try:
                updated = ProviderConfig.model_validate(
                    {"api_key": current.api_key, "model_name": current.model_name, **changes}
                )
            except ValidationError as exc:
                raise ConfigUpdateError(
                    f"Invalid configuration for provider '{provider.value}': "
                    + "; ".join(err["msg"] for err in exc.errors())
                ) from exc
            configs = dict(self._configs)
            configs[provider] = updated
            self._configs = MappingProxyType(configs)

        logger.info(
            "Updated %s configuration: model=%s, api_key=%s",
            provider.value,
            updated.model_name,
            "set" if updated.has_api_key else "not set",
        )
        return updated

    def summary(self) -> dict[str, dict[str, object]]:
        """Model name and key presence per provider; secrets are omitted."""
        return {
            provider.value: {
                "model_name": config.model_name,
                "has_api_key": config.has_api_key,
            }
            for provider, config in self._configs.items()
        }
