"""End-to-end synthesis: prompt, provider call, reference validation."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Mapping

from sqlsynth.llm.base import LLMError, ProviderId
from sqlsynth.llm.config_store import ConfigUpdateError, ProviderConfigStore
from sqlsynth.llm.dispatcher import ProviderDispatcher
from sqlsynth.prompts.sql_generation import DEFAULT_DIALECT, build_prompt
from sqlsynth.schema.model import SchemaModel
from sqlsynth.sql.validator import ValidationReport, validate_references

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SynthesisResult:
    sql: str
    validation_report: ValidationReport

    def to_dict(self) -> dict[str, object]:
        return {"sql": self.sql, "validation": self.validation_report.to_dict()}


class SynthesisPipeline:
    """Entry point used by the CLI and other front ends.

    Each `synthesize` call is independent; the only shared state is the
    provider configuration store, read once per call as a snapshot.
    """

    def __init__(
        self,
        config_store: ProviderConfigStore,
        dispatcher: ProviderDispatcher | None = None,
        *,
        dialect: str = DEFAULT_DIALECT,
    ) -> None:
        self.config_store = config_store
        self.dispatcher = dispatcher or ProviderDispatcher()
        self.dialect = dialect

    def synthesize(
        self,
        question: str,
        schema: SchemaModel,
        provider_id: str | ProviderId = ProviderId.OPENAI,
    ) -> SynthesisResult:
        """Generate SQL for `question`; raises EmptySchemaError or LLMError subclasses.

        The returned SQL is never altered by validation; issues are reported
        alongside it.
        """
        schema.require_tables()
        config_snapshot = self.config_store.snapshot()

        prompt = build_prompt(schema, question, dialect=self.dialect)
        sql = self.dispatcher.generate(provider_id, prompt, config_snapshot)
        report = validate_references(sql, schema)
        return SynthesisResult(sql=sql, validation_report=report)

    def update_provider_config(
        self,
        provider_id: str | ProviderId,
        partial: Mapping[str, Any],
    ) -> bool:
        try:
            self.config_store.update_config(provider_id, partial)
        except (LLMError, ConfigUpdateError) as exc:
            logger.error("Error updating %s configuration: %s", provider_id, exc)
            return False
        return True

    def get_provider_config_summary(self) -> dict[str, dict[str, object]]:
        return self.config_store.summary()
