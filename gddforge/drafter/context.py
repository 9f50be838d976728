"""Context builder: turns authored section content into prompt-ready text."""

from __future__ import annotations

import html
import re
from collections.abc import Iterator

from bs4 import BeautifulSoup

from gddforge.catalog import get_section, load_sections
from gddforge.config.models import GenerationPolicy
from gddforge.drafter.models import (
    AllSectionsContent,
    FilledContent,
    GameContext,
    SectionContent,
    ValidationResult,
)

_WS_RE = re.compile(r"\s+")

_DEFAULT_POLICY = GenerationPolicy()


def strip_html(content: str) -> str:
    """Drop tags, decode entities and collapse whitespace."""
    text = BeautifulSoup(content, "html.parser").get_text(" ")
    return _WS_RE.sub(" ", text.replace("\xa0", " ")).strip()


def has_content(content: str | None, min_chars: int = _DEFAULT_POLICY.min_content_chars) -> bool:
    """True when the stripped text is long enough to count as authored."""
    if not content:
        return False
    return len(strip_html(content)) > min_chars


def iter_ordered_content(
    all_content: AllSectionsContent,
) -> Iterator[tuple[str, str, str]]:
    """Yield (section_slug, subsection_id, value) in catalog order.

    Sections and subsections missing from the catalog follow, sorted by key,
    so the same mapping always produces the same sequence regardless of
    insertion order.
    """
    known = [s.slug for s in load_sections()]
    slugs = [s for s in known if s in all_content]
    slugs += sorted(s for s in all_content if s not in known)

    for slug in slugs:
        subsections = all_content.get(slug) or {}
        section = get_section(slug)
        declared = section.subsection_ids if section else []
        ids = [i for i in declared if i in subsections]
        ids += sorted(i for i in subsections if i not in declared)
        for sub_id in ids:
            yield slug, sub_id, subsections[sub_id]


def count_filled_content(
    all_content: AllSectionsContent,
    policy: GenerationPolicy = _DEFAULT_POLICY,
) -> FilledContent:
    filled = [
        f"{slug}/{sub_id}"
        for slug, sub_id, value in iter_ordered_content(all_content)
        if has_content(value, policy.min_content_chars)
    ]
    return FilledContent(total_filled=len(filled), filled_sections=filled)


def build_filled_content_context(
    all_content: AllSectionsContent,
    policy: GenerationPolicy = _DEFAULT_POLICY,
) -> str:
    """Render every authored subsection as markdown, grouped by section."""
    grouped: dict[str, list[str]] = {}
    for slug, sub_id, value in iter_ordered_content(all_content):
        if not has_content(value, policy.min_content_chars):
            continue
        section = get_section(slug)
        sub = section.get_subsection(sub_id) if section else None
        sub_title = sub.title if sub else sub_id
        grouped.setdefault(slug, []).append(f"### {sub_title}\n{strip_html(value)}")

    parts: list[str] = []
    for slug, blocks in grouped.items():
        section = get_section(slug)
        title = section.title if section else slug
        parts.append(f"## {title}\n" + "\n\n".join(blocks))
    return "\n\n---\n\n".join(parts)


def validate_generation_context(
    game_context: GameContext,
    all_content: AllSectionsContent,
    policy: GenerationPolicy = _DEFAULT_POLICY,
) -> ValidationResult:
    """Check that there is enough to write from.

    Valid when the game has a name and a concept, or when enough other
    subsections are already filled in. Adding content never makes a valid
    context invalid.
    """
    has_name = bool(game_context.name and game_context.name.strip())
    has_concept = bool(
        game_context.concept and len(game_context.concept.strip()) > policy.min_concept_chars
    )
    has_game_info = has_name and has_concept

    total_filled = count_filled_content(all_content, policy).total_filled

    if not has_game_info and total_filled < policy.min_filled_subsections:
        return ValidationResult(
            is_valid=False,
            error=(
                "Not enough information. Please fill in the game name, concept, "
                f"or at least {policy.min_filled_subsections} other subsections first."
            ),
            filled_count=total_filled,
            has_game_info=has_game_info,
        )

    return ValidationResult(
        is_valid=True,
        filled_count=total_filled,
        has_game_info=has_game_info,
    )


def section_plain_text(section_slug: str, content: SectionContent) -> str:
    """Join a section's subsections, in declared order, as plain paragraphs."""
    section = get_section(section_slug)
    ids = section.subsection_ids if section else sorted(content)
    paragraphs = [strip_html(content.get(sub_id) or "") for sub_id in ids]
    return "\n\n".join(p for p in paragraphs if p)


_PARAGRAPH_BREAK_RE = re.compile(r"\n\s*\n")


def split_paragraphs(text: str) -> list[str]:
    """Split plain text on blank lines, dropping empty paragraphs."""
    return [p.strip() for p in _PARAGRAPH_BREAK_RE.split(text.strip()) if p.strip()]


def paragraph_to_html(paragraph: str) -> str:
    escaped = html.escape(paragraph.strip(), quote=False)
    return "<p>" + escaped.replace("\n", "<br>") + "</p>"


def paragraphs_to_html(text: str) -> str:
    """Render generated plain text as editor HTML, one <p> per paragraph."""
    return "".join(paragraph_to_html(p) for p in split_paragraphs(text))
