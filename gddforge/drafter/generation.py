"""Generation service: drafts one subsection from the whole document's context."""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator

from gddforge.catalog import resolve_subsection
from gddforge.config.models import GenerationPolicy, LLMSettings
from gddforge.drafter.context import validate_generation_context
from gddforge.drafter.models import GenerationRequest
from gddforge.drafter.prompts import GENERATION_SYSTEM_PROMPT, build_generation_prompt
from gddforge.drafter.streaming import ProviderFactory, default_provider_factory, guard_stream
from gddforge.errors import InsufficientContextError
from gddforge.llm.registry import ModelRegistry

logger = logging.getLogger(__name__)


class GenerationService:
    """Produces a streamed completion for exactly one subsection.

    Pipeline:
        resolve subsection -> validate context -> build prompt -> resolve model -> stream

    Everything before the provider call runs eagerly, so bad input raises
    from generate() itself. Nothing is persisted here.
    """

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

    def generate(self, request: GenerationRequest) -> AsyncIterator[str]:
        sub = resolve_subsection(request.section_type, request.sub_section_type)

        validation = validate_generation_context(
            request.game_context, request.all_content, self.policy
        )
        if not validation.is_valid:
            raise InsufficientContextError(
                validation.error or "Not enough information to generate content.",
                filled_count=validation.filled_count,
                has_game_info=validation.has_game_info,
            )

        user_prompt = build_generation_prompt(
            sub_section_title=sub.title,
            instructions=sub.instructions,
            game_context=request.game_context,
            all_content=request.all_content,
            policy=self.policy,
        )
        resolved = self.registry.resolve_model(request.model_id)
        provider = self._provider_factory(resolved)

        logger.info(
            "generating section=%s subsection=%s model=%s filled=%d",
            request.section_type,
            request.sub_section_type,
            resolved.model_id,
            validation.filled_count,
        )
        return guard_stream(
            provider.generate_stream(
                GENERATION_SYSTEM_PROMPT, user_prompt, max_tokens=self.settings.max_tokens
            ),
            resolved=resolved,
            operation="generate",
            section=request.section_type,
            subsection=request.sub_section_type,
        )
