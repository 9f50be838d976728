"""Pydantic models for the LLM subsystem."""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel

from gddforge.errors import ProviderError

ProviderName = Literal["anthropic", "openai", "google", "xai", "groq"]


class LLMError(ProviderError):
    """Wraps provider-specific exceptions with context."""

    def __init__(
        self,
        provider: str,
        operation: str,
        cause: Exception,
        retryable: bool = False,
        model_id: str | None = None,
    ) -> None:
        self.operation = operation
        super().__init__(
            f"{provider} {operation} failed: {cause}",
            provider=provider,
            model_id=model_id,
            retryable=retryable,
        )
        self.__cause__ = cause


class LLMConfig(BaseModel):
    """Configuration for an LLM provider."""

    provider: ProviderName
    model: str
    max_tokens: int = 1000
    temperature: float = 0.7
    api_key: str | None = None
    base_url: str | None = None
    max_retries: int = 2
    timeout: float = 60.0
