"""Store interfaces and models."""

from __future__ import annotations

from datetime import datetime
from typing import Protocol, runtime_checkable

from pydantic import BaseModel, ConfigDict, Field

from gddforge.drafter.models import AllSectionsContent, SectionContent


class StoredSection(BaseModel):
    """One (game, section) row."""

    model_config = ConfigDict(frozen=True)

    game_id: str
    section_slug: str
    content: SectionContent = Field(default_factory=dict)
    version: int = 0
    last_edited_by: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None


class SaveResult(BaseModel):
    updated_at: datetime
    version: int


@runtime_checkable
class SectionContentStore(Protocol):
    """Durable (game, section) -> subsection content mapping.

    save() replaces the whole map; callers merge before saving.
    """

    def get(self, game_id: str, section_slug: str) -> SectionContent: ...

    def get_record(self, game_id: str, section_slug: str) -> StoredSection | None: ...

    def get_all(self, game_id: str) -> AllSectionsContent: ...

    def save(
        self,
        game_id: str,
        section_slug: str,
        content: SectionContent,
        editor_user_id: str,
        expected_version: int | None = None,
    ) -> SaveResult: ...


@runtime_checkable
class PreferencesStore(Protocol):
    def get_preferred_model(self, user_id: str) -> str | None: ...

    def set_preferred_model(self, user_id: str, model_id: str) -> None: ...
