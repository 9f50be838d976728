"""Anthropic Claude adapter."""

from __future__ import annotations

from collections.abc import AsyncIterator

from anthropic import APIError, AsyncAnthropic, InternalServerError, RateLimitError

from gddforge.llm.base import LLMProvider
from gddforge.llm.models import LLMConfig


class ClaudeProvider(LLMProvider):
    """Messages streaming via the Anthropic async SDK."""

    sdk_errors = (APIError,)

    def __init__(self, config: LLMConfig) -> None:
        super().__init__(config)
        self._client = AsyncAnthropic(
            api_key=config.api_key,
            max_retries=config.max_retries,
            timeout=config.timeout,
        )

    async def _stream(self, system: str, user: str, max_tokens: int) -> AsyncIterator[str]:
        async with self._client.messages.stream(
            model=self.config.model,
            max_tokens=max_tokens,
            temperature=self.config.temperature,
            system=system,
            messages=[{"role": "user", "content": user}],
        ) as stream:
            async for text in stream.text_stream:
                yield text

    def is_retryable(self, error: Exception) -> bool:
        # 529 overloaded arrives as an InternalServerError subclass.
        return isinstance(error, (RateLimitError, InternalServerError))
