"""Prompt builders for sqlsynth."""

from sqlsynth.prompts.sql_generation import (
    DEFAULT_DIALECT,
    build_prompt,
    describe_schema,
)

__all__ = [
    "DEFAULT_DIALECT",
    "build_prompt",
    "describe_schema",
]
