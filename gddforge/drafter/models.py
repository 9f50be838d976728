"""Pydantic models for the drafting subsystem."""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

SectionContent = dict[str, str]
AllSectionsContent = dict[str, SectionContent]

EnhanceAction = Literal["enhance", "improve", "expand", "concise"]


class _CamelModel(BaseModel):
    """Accepts both snake_case and the camelCase keys used on the wire."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        protected_namespaces=(),
    )


class GameContext(_CamelModel):
    """Snapshot of the game metadata used to ground prompts."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
    )

    name: str = ""
    concept: str = ""
    platforms: tuple[str, ...] = ()
    timeline: str | None = None


class GenerationRequest(_CamelModel):
    section_type: str
    sub_section_type: str
    game_context: GameContext
    all_content: AllSectionsContent = Field(default_factory=dict)
    model_id: str | None = None


class EnhancementRequest(_CamelModel):
    action: EnhanceAction
    text: str
    section_type: str
    game_context: GameContext
    model_id: str | None = None


class CompletionRequest(_CamelModel):
    section_type: str
    sub_section_type: str
    current_text: str
    game_context: GameContext
    model_id: str | None = None


class ValidationResult(BaseModel):
    """Outcome of the pre-generation context check."""

    is_valid: bool
    error: str | None = None
    filled_count: int = 0
    has_game_info: bool = False


class FilledContent(BaseModel):
    total_filled: int = 0
    filled_sections: list[str] = Field(default_factory=list)
