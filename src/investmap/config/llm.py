"""Anthropic (classification/extraction service) configuration values."""

from __future__ import annotations

from dataclasses import dataclass, field

from investmap.common.retry import BackoffPolicy

from .env import optional_env_var, require_env_vars

DEFAULT_MODEL = "claude-3-7-sonnet-20250219"
LLM_TIMEOUT_SECONDS = 300.0


@dataclass(frozen=True, slots=True)
class LlmConfig:
    """Credentials and limits for the classification/extraction service."""

    api_key: str
    model: str = DEFAULT_MODEL
    timeout_seconds: float = LLM_TIMEOUT_SECONDS
    classify_max_tokens: int = 1000
    extract_max_tokens: int = 8192
    arbitrate_max_tokens: int = 1000
    page_content_limit: int = 15000
    backoff: BackoffPolicy = field(default_factory=BackoffPolicy)


def get_llm_config() -> LlmConfig:
    values = require_env_vars(("ANTHROPIC_API_KEY",))
    return LlmConfig(
        api_key=values["ANTHROPIC_API_KEY"],
        model=optional_env_var("ANTHROPIC_MODEL") or DEFAULT_MODEL,
    )
