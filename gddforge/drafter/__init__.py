"""Drafting subsystem: prompts, context checks and the streaming AI services."""

from gddforge.drafter.completion import CompletionService
from gddforge.drafter.enhancement import EnhancementService
from gddforge.drafter.generation import GenerationService
from gddforge.drafter.models import (
    AllSectionsContent,
    CompletionRequest,
    EnhanceAction,
    EnhancementRequest,
    GameContext,
    GenerationRequest,
    SectionContent,
    ValidationResult,
)

__all__ = [
    "AllSectionsContent",
    "CompletionRequest",
    "CompletionService",
    "EnhanceAction",
    "EnhancementRequest",
    "EnhancementService",
    "GameContext",
    "GenerationRequest",
    "GenerationService",
    "SectionContent",
    "ValidationResult",
]
