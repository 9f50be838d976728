"""SectionExporter: renders stored section content as txt, md, html or json files."""

from __future__ import annotations

import html
import json
import logging
import re
from pathlib import Path
from typing import Literal

from bs4 import BeautifulSoup
from bs4.element import Comment, NavigableString, PageElement

from gddforge.catalog import SectionDefinition, load_sections, require_section
from gddforge.drafter.context import strip_html
from gddforge.drafter.models import AllSectionsContent
from gddforge.errors import ValidationError

logger = logging.getLogger(__name__)

ExportFormat = Literal["txt", "md", "html", "json"]

EXPORT_FORMATS: tuple[str, ...] = ("txt", "md", "html", "json")

MEDIA_TYPES: dict[str, str] = {
    "txt": "text/plain",
    "md": "text/markdown",
    "html": "text/html",
    "json": "application/json",
}

_HTML_TEMPLATE = """\
<!DOCTYPE html>
<html lang="en">
<head>
  <meta charset="UTF-8">
  <meta name="viewport" content="width=device-width, initial-scale=1.0">
  <title>{title}</title>
  <style>
    body {{ font-family: system-ui, -apple-system, sans-serif; max-width: 800px; margin: 0 auto; padding: 2rem; line-height: 1.6; }}
    h2 {{ color: #333; border-bottom: 1px solid #eee; padding-bottom: 0.5rem; margin-top: 2rem; }}
    h3 {{ color: #555; margin-top: 1.5rem; }}
  </style>
</head>
<body>
{body}
</body>
</html>"""

_INLINE_MARKS = {"strong": "**", "b": "**", "em": "_", "i": "_"}


def _render_markdown(node: PageElement) -> str:
    if isinstance(node, Comment):
        return ""
    if isinstance(node, NavigableString):
        return str(node)

    inner = "".join(_render_markdown(child) for child in node.children)
    name = node.name
    if name == "br":
        return "\n"
    if name in _INLINE_MARKS:
        mark = _INLINE_MARKS[name]
        return f"{mark}{inner}{mark}" if inner.strip() else inner
    if name == "p":
        return f"{inner}\n\n"
    if name == "li":
        if node.parent is not None and node.parent.name == "ol":
            bullet = f"{len(node.find_previous_siblings('li')) + 1}."
        else:
            bullet = "-"
        return f"{bullet} {inner.strip()}\n"
    if name in ("ul", "ol"):
        return f"{inner}\n"
    return inner


def html_to_markdown(value: str) -> str:
    """Convert editor HTML to markdown. Unhandled tags keep only their text."""
    text = _render_markdown(BeautifulSoup(value, "html.parser"))
    return re.sub(r"\n{3,}", "\n\n", text).strip()


def sanitize_filename(name: str) -> str:
    """Lowercase, dash-separated file stem safe on common filesystems."""
    stem = re.sub(r"\s+", "-", name.strip().lower())
    stem = stem.replace("..", "")
    stem = re.sub(r"[^\w\-\.]", "", stem)
    if not stem or stem.strip(".") == "":
        stem = "gdd-export"
    return stem


class SectionExporter:
    """Formats sections in catalog order, with titles from the catalog.

    Empty subsections are skipped in the text formats; json keeps them.
    """

    def __init__(self, all_content: AllSectionsContent) -> None:
        self.all_content = all_content

    def select(self, slugs: list[str] | None = None) -> list[SectionDefinition]:
        if not slugs:
            return list(load_sections())
        wanted = {require_section(slug).slug for slug in slugs}
        return [s for s in load_sections() if s.slug in wanted]

    def render(self, fmt: str, slugs: list[str] | None = None) -> str:
        if fmt not in EXPORT_FORMATS:
            raise ValidationError(
                f"Unsupported export format {fmt!r}; expected one of {', '.join(EXPORT_FORMATS)}"
            )
        sections = self.select(slugs)
        if fmt == "json":
            return self._render_json(sections)

        blocks = [self._render_section(section, fmt) for section in sections]
        if fmt == "html":
            return _HTML_TEMPLATE.format(title="GDD Export", body="\n\n".join(blocks))
        return "\n\n---\n\n".join(blocks)

    def write(
        self,
        dest: Path,
        fmt: str,
        slugs: list[str] | None = None,
        *,
        dry_run: bool = False,
    ) -> Path:
        """Render and write to dest. Returns the path written (or that would be)."""
        rendered = self.render(fmt, slugs)
        if dry_run:
            logger.debug("dry-run: would write %s", dest)
            return dest
        dest.parent.mkdir(parents=True, exist_ok=True)
        dest.write_text(rendered, encoding="utf-8")
        logger.info("wrote %s (%d bytes)", dest, len(rendered))
        return dest

    # -- formatting ----------------------------------------------------------

    def _render_json(self, sections: list[SectionDefinition]) -> str:
        payload = [
            {
                "title": section.title,
                "sectionType": section.slug,
                "subSections": [
                    {
                        "title": sub.title,
                        "content": self.all_content.get(section.slug, {}).get(sub.id, ""),
                    }
                    for sub in section.subsections
                ],
            }
            for section in sections
        ]
        return json.dumps(payload, indent=2, ensure_ascii=False)

    def _render_section(self, section: SectionDefinition, fmt: str) -> str:
        content = self.all_content.get(section.slug, {})
        parts = []
        for sub in section.subsections:
            value = content.get(sub.id, "")
            if not value.strip():
                continue
            parts.append(self._render_subsection(sub.title, value, fmt))
        body = "\n\n".join(parts)

        if fmt == "md":
            return f"## {section.title}\n\n{body}"
        if fmt == "html":
            return f"<h2>{html.escape(section.title)}</h2>\n{body}"
        return f"{section.title}\n{'=' * len(section.title)}\n\n{body}"

    @staticmethod
    def _render_subsection(title: str, value: str, fmt: str) -> str:
        if fmt == "md":
            return f"### {title}\n\n{html_to_markdown(value)}"
        if fmt == "html":
            return f"<h3>{html.escape(title)}</h3>\n{value}"
        return f"{title}\n{'-' * len(title)}\n{strip_html(value)}"
