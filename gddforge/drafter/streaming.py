"""Stream plumbing shared by the drafting services."""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator, Callable
from contextlib import aclosing

from gddforge.config.models import LLMSettings
from gddforge.errors import ProviderError
from gddforge.llm import create_llm_provider
from gddforge.llm.base import LLMProvider
from gddforge.llm.registry import ModelRegistry, ResolvedModel

logger = logging.getLogger(__name__)

ProviderFactory = Callable[[ResolvedModel], LLMProvider]


def default_provider_factory(
    registry: ModelRegistry, settings: LLMSettings
) -> ProviderFactory:
    def factory(resolved: ResolvedModel) -> LLMProvider:
        return create_llm_provider(resolved, registry, settings)

    return factory


async def guard_stream(
    stream: AsyncIterator[str],
    *,
    resolved: ResolvedModel,
    operation: str,
    section: str,
    subsection: str | None = None,
) -> AsyncIterator[str]:
    """Pass chunks straight through, translating failures into ProviderError.

    Logs identify the section, subsection and model only. Closing this
    generator closes the provider stream.
    """
    chunks = 0
    async with aclosing(stream) as upstream:
        try:
            async for chunk in upstream:
                chunks += 1
                yield chunk
        except ProviderError as e:
            if e.model_id is None:
                e.model_id = resolved.model_id
            logger.error(
                "%s failed: section=%s subsection=%s model=%s provider=%s retryable=%s",
                operation,
                section,
                subsection,
                resolved.model_id,
                resolved.provider,
                e.retryable,
            )
            raise
        except Exception as e:
            logger.error(
                "%s failed with unexpected %s: section=%s subsection=%s model=%s",
                operation,
                type(e).__name__,
                section,
                subsection,
                resolved.model_id,
            )
            raise ProviderError(
                f"{resolved.provider} {operation} failed: {type(e).__name__}",
                provider=resolved.provider,
                model_id=resolved.model_id,
            ) from e
    logger.debug(
        "%s finished: section=%s subsection=%s model=%s chunks=%d",
        operation,
        section,
        subsection,
        resolved.model_id,
        chunks,
    )
