"""Request and response bodies for the HTTP layer (camelCase on the wire)."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from gddforge.catalog import SectionDefinition
from gddforge.drafter.models import SectionContent
from gddforge.llm.registry import ModelOption


class ApiModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        protected_namespaces=(),
    )


class SectionSummary(ApiModel):
    number: int
    slug: str
    title: str

    @classmethod
    def of(cls, section: SectionDefinition | None) -> SectionSummary | None:
        if section is None:
            return None
        return cls(number=section.number, slug=section.slug, title=section.title)


class SectionDetail(ApiModel):
    section: SectionDefinition
    prev: SectionSummary | None = None
    next: SectionSummary | None = None


class SectionContentResponse(ApiModel):
    game_id: str
    section_slug: str
    content: SectionContent = Field(default_factory=dict)
    version: int = 0
    last_edited_by: str | None = None
    updated_at: datetime | None = None


class SaveSectionBody(ApiModel):
    content: SectionContent
    editor_user_id: str = Field(min_length=1)
    expected_version: int | None = Field(default=None, ge=0)


class SaveSectionResponse(ApiModel):
    updated_at: datetime
    version: int


class ModelsResponse(ApiModel):
    models: list[ModelOption]
    default_model: str


class PreferencesBody(ApiModel):
    preferred_model: str = Field(min_length=1)


class PreferencesResponse(ApiModel):
    user_id: str
    preferred_model: str


class CompletionResponse(ApiModel):
    completion: str
