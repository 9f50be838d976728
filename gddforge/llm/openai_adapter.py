"""OpenAI-compatible adapter: OpenAI itself, plus xAI and Groq via base_url."""

from __future__ import annotations

from collections.abc import AsyncIterator

from openai import APIError, AsyncOpenAI, InternalServerError, RateLimitError

from gddforge.llm.base import LLMProvider
from gddforge.llm.models import LLMConfig


class OpenAIProvider(LLMProvider):
    """Chat-completions streaming via the OpenAI async SDK.

    The same class serves every OpenAI-compatible endpoint; errors carry
    the configured provider name (``xai``, ``groq``), not ``openai``.
    """

    sdk_errors = (APIError,)

    def __init__(self, config: LLMConfig) -> None:
        super().__init__(config)
        self._client = AsyncOpenAI(
            api_key=config.api_key,
            base_url=config.base_url,  # None means api.openai.com
            max_retries=config.max_retries,
            timeout=config.timeout,
        )

    async def _stream(self, system: str, user: str, max_tokens: int) -> AsyncIterator[str]:
        stream = await self._client.chat.completions.create(
            model=self.config.model,
            max_tokens=max_tokens,
            temperature=self.config.temperature,
            messages=[
                {"role": "system", "content": system},
                {"role": "user", "content": user},
            ],
            stream=True,
        )
        async for chunk in stream:
            # Usage-only and keep-alive chunks have no choices.
            if chunk.choices:
                yield chunk.choices[0].delta.content or ""

    def is_retryable(self, error: Exception) -> bool:
        return isinstance(error, (RateLimitError, InternalServerError))
