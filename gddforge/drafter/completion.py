"""Inline completion ("ghost text") for the field being typed in."""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator

from gddforge.config.models import GenerationPolicy, LLMSettings
from gddforge.drafter.models import CompletionRequest
from gddforge.drafter.prompts import build_completion_prompt, get_system_prompt
from gddforge.drafter.streaming import ProviderFactory, default_provider_factory, guard_stream
from gddforge.llm.registry import ModelRegistry

logger = logging.getLogger(__name__)


class CompletionService:
    def __init__(
        self,
        registry: ModelRegistry,
        settings: LLMSettings | None = None,
        policy: GenerationPolicy | None = None,
        provider_factory: ProviderFactory | None = None,
    ) -> None:
        self.registry = registry
        self.settings = settings or LLMSettings()
        self.policy = policy or GenerationPolicy()
        self._provider_factory = provider_factory or default_provider_factory(
            registry, self.settings
        )

    def should_complete(self, request: CompletionRequest) -> bool:
        return len(request.current_text.strip()) >= self.policy.min_completion_chars

    def complete(self, request: CompletionRequest) -> AsyncIterator[str] | None:
        """Return a short continuation stream, or None when the text is too short."""
        if not self.should_complete(request):
            return None

        resolved = self.registry.resolve_model(request.model_id)
        provider = self._provider_factory(resolved)
        logger.debug(
            "completing section=%s subsection=%s model=%s",
            request.section_type,
            request.sub_section_type,
            resolved.model_id,
        )
        return guard_stream(
            provider.generate_stream(
                get_system_prompt(request.section_type),
                build_completion_prompt(
                    request.section_type,
                    request.sub_section_type,
                    request.current_text,
                    request.game_context,
                ),
                max_tokens=self.settings.completion_max_tokens,
            ),
            resolved=resolved,
            operation="complete",
            section=request.section_type,
            subsection=request.sub_section_type,
        )
