"""Google Gemini adapter."""

from __future__ import annotations

from collections.abc import AsyncIterator

import google.generativeai as genai
from google.api_core import exceptions as google_exceptions

from gddforge.llm.base import LLMProvider
from gddforge.llm.models import LLMConfig


class GeminiProvider(LLMProvider):
    """Streaming generate_content via the google-generativeai SDK.

    The system prompt changes per section, so a model handle is built per
    call with it as the system instruction.
    """

    sdk_errors = (google_exceptions.GoogleAPIError,)

    def __init__(self, config: LLMConfig) -> None:
        super().__init__(config)
        genai.configure(api_key=config.api_key)

    async def _stream(self, system: str, user: str, max_tokens: int) -> AsyncIterator[str]:
        model = genai.GenerativeModel(self.config.model, system_instruction=system)
        response = await model.generate_content_async(
            user,
            generation_config=genai.types.GenerationConfig(
                max_output_tokens=max_tokens,
                temperature=self.config.temperature,
            ),
            stream=True,
        )
        async for chunk in response:
            yield chunk.text

    def is_retryable(self, error: Exception) -> bool:
        return isinstance(
            error, (google_exceptions.ResourceExhausted, google_exceptions.ServiceUnavailable)
        )
