"""LLM provider abstraction layer."""

from __future__ import annotations

from gddforge.config.models import LLMSettings
from gddforge.errors import ProviderError
from gddforge.llm.base import LLMProvider
from gddforge.llm.claude import ClaudeProvider
from gddforge.llm.gemini import GeminiProvider
from gddforge.llm.models import LLMConfig, LLMError, ProviderName
from gddforge.llm.openai_adapter import OpenAIProvider
from gddforge.llm.registry import (
    DEFAULT_MODEL_ID,
    MODEL_CATALOG,
    ModelOption,
    ModelRegistry,
    ResolvedModel,
)

_PROVIDER_MAP: dict[str, type[LLMProvider]] = {
    "anthropic": ClaudeProvider,
    "openai": OpenAIProvider,
    "google": GeminiProvider,
    "xai": OpenAIProvider,
    "groq": OpenAIProvider,
}


def create_llm_provider(
    resolved: ResolvedModel,
    registry: ModelRegistry,
    settings: LLMSettings | None = None,
) -> LLMProvider:
    """Instantiate the adapter for a resolved model.

    The API key comes from the registry's environment snapshot. A missing
    key is an auth failure and raises ProviderError.
    """
    settings = settings or LLMSettings()
    cls = _PROVIDER_MAP[resolved.provider]
    api_key = registry.api_key(resolved.provider)
    if not api_key:
        raise ProviderError(
            f"Missing API key: set environment variable {resolved.api_key_env!r}",
            provider=resolved.provider,
            model_id=resolved.model_id,
        )
    llm_config = LLMConfig(
        provider=resolved.provider,
        model=resolved.model,
        max_tokens=settings.max_tokens,
        temperature=settings.temperature,
        api_key=api_key,
        base_url=resolved.base_url,
        max_retries=settings.max_retries,
        timeout=settings.timeout,
    )
    return cls(llm_config)


__all__ = [
    "DEFAULT_MODEL_ID",
    "MODEL_CATALOG",
    "ClaudeProvider",
    "GeminiProvider",
    "LLMConfig",
    "LLMError",
    "LLMProvider",
    "ModelOption",
    "ModelRegistry",
    "OpenAIProvider",
    "ProviderName",
    "ResolvedModel",
    "create_llm_provider",
]
