"""Section catalog, section content and export endpoints."""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Query
from fastapi.responses import Response

from gddforge.api.deps import StoreDep
from gddforge.api.schemas import (
    SaveSectionBody,
    SaveSectionResponse,
    SectionContentResponse,
    SectionDetail,
    SectionSummary,
)
from gddforge.catalog import (
    SectionDefinition,
    get_section_navigation,
    load_sections,
    require_section,
)
from gddforge.drafter.models import AllSectionsContent
from gddforge.errors import ValidationError
from gddforge.output import MEDIA_TYPES, SectionExporter, sanitize_filename

router = APIRouter(tags=["sections"])


@router.get("/sections", response_model=list[SectionDefinition])
def list_sections() -> list[SectionDefinition]:
    return list(load_sections())


@router.get("/sections/{slug}", response_model=SectionDetail, response_model_by_alias=True)
def get_section(slug: str) -> SectionDetail:
    nav = get_section_navigation(slug)
    return SectionDetail(
        section=nav.current,
        prev=SectionSummary.of(nav.prev),
        next=SectionSummary.of(nav.next),
    )


@router.get("/games/{game_id}/sections")
def get_all_sections(game_id: str, store: StoreDep) -> AllSectionsContent:
    return store.get_all(game_id)


@router.get(
    "/games/{game_id}/sections/{slug}",
    response_model=SectionContentResponse,
    response_model_by_alias=True,
)
def get_section_content(game_id: str, slug: str, store: StoreDep) -> SectionContentResponse:
    section = require_section(slug)
    record = store.get_record(game_id, section.slug)
    if record is None:
        return SectionContentResponse(game_id=game_id, section_slug=section.slug)
    return SectionContentResponse(
        game_id=game_id,
        section_slug=section.slug,
        content=record.content,
        version=record.version,
        last_edited_by=record.last_edited_by,
        updated_at=record.updated_at,
    )


@router.put(
    "/games/{game_id}/sections/{slug}",
    response_model=SaveSectionResponse,
    response_model_by_alias=True,
)
def save_section_content(
    game_id: str, slug: str, body: SaveSectionBody, store: StoreDep
) -> SaveSectionResponse:
    section = require_section(slug)
    known = set(section.subsection_ids)
    if not known.issuperset(body.content):
        # Keys already stored under a retired subsection id stay writable.
        known.update(store.get(game_id, section.slug))
        unknown = sorted(key for key in body.content if key not in known)
        if unknown:
            raise ValidationError(
                f"Unknown subsections for section {section.slug!r}: {', '.join(unknown)}"
            )
    result = store.save(
        game_id,
        section.slug,
        body.content,
        body.editor_user_id,
        expected_version=body.expected_version,
    )
    return SaveSectionResponse(updated_at=result.updated_at, version=result.version)


@router.get("/games/{game_id}/export")
def export_sections(
    game_id: str,
    store: StoreDep,
    format: Annotated[str, Query()] = "md",
    section: Annotated[list[str] | None, Query()] = None,
) -> Response:
    exporter = SectionExporter(store.get_all(game_id))
    rendered = exporter.render(format, section)
    if section and len(section) == 1:
        stem = sanitize_filename(require_section(section[0]).title)
    else:
        stem = sanitize_filename(f"{game_id}-gdd")
    return Response(
        content=rendered,
        media_type=MEDIA_TYPES[format],
        headers={"Content-Disposition": f'attachment; filename="{stem}.{format}"'},
    )
