"""Output layer: section export."""

from gddforge.output.exporter import (
    EXPORT_FORMATS,
    MEDIA_TYPES,
    ExportFormat,
    SectionExporter,
    html_to_markdown,
    sanitize_filename,
)

__all__ = [
    "EXPORT_FORMATS",
    "MEDIA_TYPES",
    "ExportFormat",
    "SectionExporter",
    "html_to_markdown",
    "sanitize_filename",
]
