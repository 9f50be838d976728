"""Tests for the output subsystem: section exporter."""

import json
from pathlib import Path

import pytest

from gddforge.errors import NotFoundError, ValidationError
from gddforge.output import MEDIA_TYPES, SectionExporter, html_to_markdown, sanitize_filename


# ---------------------------------------------------------------------------
# html_to_markdown
# ---------------------------------------------------------------------------


class TestHtmlToMarkdown:
    def test_paragraphs(self):
        assert html_to_markdown("<p>One</p><p>Two</p>") == "One\n\nTwo"

    def test_inline_emphasis(self):
        assert html_to_markdown("<p><strong>bold</strong> and <em>it</em></p>") == "**bold** and _it_"

    def test_b_and_i_aliases(self):
        assert html_to_markdown("<b>x</b><i>y</i>") == "**x**_y_"

    def test_line_break(self):
        assert html_to_markdown("a<br>b<br/>c") == "a\nb\nc"

    def test_list_items(self):
        assert html_to_markdown("<ul><li>a</li><li>b</li></ul>") == "- a\n- b"

    def test_unknown_tags_dropped_and_entities_decoded(self):
        assert html_to_markdown('<span class="x">Tom &amp; Jerry</span>') == "Tom & Jerry"

    def test_collapses_blank_lines(self):
        assert "\n\n\n" not in html_to_markdown("<p>a</p><p></p><p></p><p>b</p>")

    def test_ordered_list_numbered(self):
        assert html_to_markdown("<ol><li>a</li><li>b</li></ol>") == "1. a\n2. b"

    def test_quoted_angle_bracket_in_attribute(self):
        assert html_to_markdown('<p title="a > b">Hello <b>world</b></p>') == "Hello **world**"

    def test_comments_dropped(self):
        assert html_to_markdown("<p>kept<!-- editor marker --></p>") == "kept"


# ---------------------------------------------------------------------------
# sanitize_filename
# ---------------------------------------------------------------------------


class TestSanitizeFilename:
    def test_lowercases_and_dashes(self):
        assert sanitize_filename("Game Concept") == "game-concept"

    def test_removes_unsafe_chars(self):
        assert sanitize_filename("Storyline & Background") == "storyline--background"

    def test_strips_dot_dot(self):
        result = sanitize_filename("../../etc/passwd")
        assert ".." not in result
        assert "/" not in result

    def test_empty_falls_back(self):
        assert sanitize_filename("   ") == "gdd-export"

    def test_dots_only_falls_back(self):
        assert sanitize_filename(".") == "gdd-export"


# ---------------------------------------------------------------------------
# SectionExporter
# ---------------------------------------------------------------------------


@pytest.fixture
def exporter(sample_all_content):
    return SectionExporter(sample_all_content)


class TestSelect:
    def test_all_sections_by_default(self, exporter):
        assert len(exporter.select()) == 12

    def test_catalog_order_regardless_of_request_order(self, exporter):
        slugs = [s.slug for s in exporter.select(["storyline", "overview"])]
        assert slugs == ["overview", "storyline"]

    def test_unknown_slug(self, exporter):
        with pytest.raises(NotFoundError):
            exporter.select(["nope"])


class TestRender:
    def test_markdown(self, exporter):
        out = exporter.render("md", ["overview"])
        assert out.startswith("## Overview\n\n### Brief Introduction\n\n")
        assert "Starfall Tactics is a tactical fleet game." in out
        assert "### Target Audience" in out

    def test_empty_subsections_skipped(self, exporter):
        out = exporter.render("md", ["overview"])
        assert "Market Analysis" not in out
        assert "Game Concept Summary" not in out

    def test_text_underlines_titles(self, exporter):
        out = exporter.render("txt", ["overview"])
        title = "Brief Introduction"
        assert out.startswith(f"Overview\n{'=' * 8}\n\n{title}\n{'-' * len(title)}\n")
        assert "<p>" not in out

    def test_text_separates_sections(self, exporter):
        out = exporter.render("txt", ["overview", "storyline"])
        assert "\n\n---\n\n" in out
        assert out.index("Overview") < out.index("Storyline & Background")

    def test_html_document(self, exporter):
        out = exporter.render("html", ["storyline"])
        assert out.startswith("<!DOCTYPE html>")
        assert "<h2>Storyline &amp; Background</h2>" in out
        assert "<h3>Background Story</h3>" in out
        assert "<p>The armada vanished at the edge of the nebula.</p>" in out

    def test_json_keeps_empty_subsections(self, exporter):
        data = json.loads(exporter.render("json", ["overview"]))
        assert len(data) == 1
        assert data[0]["title"] == "Overview"
        assert data[0]["sectionType"] == "overview"
        subs = {s["title"]: s["content"] for s in data[0]["subSections"]}
        assert subs["Market Analysis"] == ""
        assert subs["Brief Introduction"] == "<p>Starfall Tactics is a tactical fleet game.</p>"

    def test_section_without_content(self, exporter):
        assert exporter.render("md", ["legal"]).startswith("## ")

    def test_unsupported_format(self, exporter):
        with pytest.raises(ValidationError, match="Unsupported export format"):
            exporter.render("pdf")

    def test_every_format_has_media_type(self):
        assert set(MEDIA_TYPES) == {"txt", "md", "html", "json"}


class TestWrite:
    def test_writes_file(self, exporter, tmp_path):
        dest = tmp_path / "out" / "gdd.md"
        path = exporter.write(dest, "md")
        assert path == dest
        assert dest.read_text(encoding="utf-8") == exporter.render("md")

    def test_dry_run_no_file(self, exporter, tmp_path):
        dest = tmp_path / "gdd.txt"
        path = exporter.write(dest, "txt", dry_run=True)
        assert isinstance(path, Path)
        assert not dest.exists()

    def test_bad_format_writes_nothing(self, exporter, tmp_path):
        dest = tmp_path / "gdd.pdf"
        with pytest.raises(ValidationError):
            exporter.write(dest, "pdf")
        assert not dest.exists()
