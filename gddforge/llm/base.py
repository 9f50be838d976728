"""Streaming LLM interface shared by the provider adapters."""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import AsyncIterator

from gddforge.llm.models import LLMConfig, LLMError


class LLMProvider(ABC):
    """One vendor SDK behind a text-chunk stream.

    Adapters implement `_stream` against their SDK and list the SDK's
    exception types in `sdk_errors`; those are re-raised as LLMError
    tagged with the configured provider and model. Empty deltas are
    dropped here so callers only ever see text.
    """

    sdk_errors: tuple[type[Exception], ...] = ()

    def __init__(self, config: LLMConfig) -> None:
        self.config = config

    async def generate_stream(
        self,
        system: str,
        user: str,
        max_tokens: int = 1000,
    ) -> AsyncIterator[str]:
        """Yield response text chunks as they arrive."""
        try:
            async for chunk in self._stream(system, user, max_tokens):
                if chunk:
                    yield chunk
        except self.sdk_errors as e:
            raise LLMError(
                self.config.provider,
                "generate_stream",
                e,
                retryable=self.is_retryable(e),
                model_id=self.config.model,
            ) from e

    @abstractmethod
    def _stream(self, system: str, user: str, max_tokens: int) -> AsyncIterator[str]:
        ...

    def is_retryable(self, error: Exception) -> bool:
        """Rate limits and overloads; the caller decides whether to retry."""
        return False
