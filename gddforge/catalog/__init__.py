"""Static GDD section catalog loaded from the bundled sections.yaml."""

from __future__ import annotations

from functools import lru_cache
from importlib import resources

import yaml

from gddforge.catalog.models import SectionDefinition, SectionNavigation, SubSectionDefinition
from gddforge.errors import NotFoundError


@lru_cache(maxsize=1)
def load_sections() -> tuple[SectionDefinition, ...]:
    """Parse the bundled catalog once and return sections in document order."""
    raw = resources.files("gddforge.catalog").joinpath("sections.yaml").read_text(encoding="utf-8")
    data = yaml.safe_load(raw) or {}
    sections = tuple(
        SectionDefinition(**entry) for entry in data.get("sections", [])
    )
    slugs = [s.slug for s in sections]
    if len(slugs) != len(set(slugs)):
        raise ValueError("Duplicate section slug in catalog")
    for section in sections:
        ids = section.subsection_ids
        if len(ids) != len(set(ids)):
            raise ValueError(f"Duplicate subsection id in section {section.slug!r}")
    return tuple(sorted(sections, key=lambda s: s.number))


def get_section(slug: str) -> SectionDefinition | None:
    for section in load_sections():
        if section.slug == slug:
            return section
    return None


def require_section(slug: str) -> SectionDefinition:
    section = get_section(slug)
    if section is None:
        raise NotFoundError(f"Unknown section: {slug!r}")
    return section


def resolve_subsection(section_slug: str, subsection_id: str) -> SubSectionDefinition:
    """Return the subsection definition or raise NotFoundError."""
    section = require_section(section_slug)
    sub = section.get_subsection(subsection_id)
    if sub is None:
        raise NotFoundError(
            f"Unknown subsection {subsection_id!r} in section {section_slug!r}"
        )
    return sub


def get_section_navigation(slug: str) -> SectionNavigation:
    sections = load_sections()
    for i, section in enumerate(sections):
        if section.slug == slug:
            return SectionNavigation(
                current=section,
                prev=sections[i - 1] if i > 0 else None,
                next=sections[i + 1] if i < len(sections) - 1 else None,
            )
    raise NotFoundError(f"Unknown section: {slug!r}")


__all__ = [
    "SectionDefinition",
    "SectionNavigation",
    "SubSectionDefinition",
    "get_section",
    "get_section_navigation",
    "load_sections",
    "require_section",
    "resolve_subsection",
]
