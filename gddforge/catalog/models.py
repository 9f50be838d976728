"""Pydantic models for the static section catalog."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class SubSectionDefinition(BaseModel):
    """One editable field inside a section."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(min_length=1)
    title: str
    placeholder: str = ""
    description: str | None = None
    instructions: str = ""


class SectionDefinition(BaseModel):
    """A numbered GDD section with its ordered subsections."""

    model_config = ConfigDict(frozen=True)

    number: int = Field(gt=0)
    slug: str = Field(min_length=1)
    title: str
    description: str = ""
    subsections: tuple[SubSectionDefinition, ...] = ()

    @property
    def subsection_ids(self) -> list[str]:
        return [sub.id for sub in self.subsections]

    def get_subsection(self, subsection_id: str) -> SubSectionDefinition | None:
        for sub in self.subsections:
            if sub.id == subsection_id:
                return sub
        return None


class SectionNavigation(BaseModel):
    current: SectionDefinition
    prev: SectionDefinition | None = None
    next: SectionDefinition | None = None
