"""Enhancement service: rewrites already-authored text with a fixed action."""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator

from gddforge.config.models import GenerationPolicy, LLMSettings
from gddforge.drafter.models import EnhancementRequest
from gddforge.drafter.prompts import build_enhancement_prompt, get_system_prompt
from gddforge.drafter.streaming import ProviderFactory, default_provider_factory, guard_stream
from gddforge.errors import ValidationError
from gddforge.llm.registry import ModelRegistry

logger = logging.getLogger(__name__)


class EnhancementService:
    """Streams a rewrite of a block of text for one of the four actions."""

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

    def enhance(self, request: EnhancementRequest) -> AsyncIterator[str]:
        if len(request.text.strip()) < self.policy.min_enhance_chars:
            raise ValidationError("Text is too short to enhance")

        system_prompt = get_system_prompt(request.section_type)
        user_prompt = build_enhancement_prompt(
            request.action, request.text, request.game_context
        )
        resolved = self.registry.resolve_model(request.model_id)
        provider = self._provider_factory(resolved)

        logger.info(
            "enhancing section=%s action=%s model=%s chars=%d",
            request.section_type,
            request.action,
            resolved.model_id,
            len(request.text),
        )
        return guard_stream(
            provider.generate_stream(
                system_prompt, user_prompt, max_tokens=self.settings.max_tokens
            ),
            resolved=resolved,
            operation=f"enhance:{request.action}",
            section=request.section_type,
        )
