"""Persistence for section content and user preferences."""

from gddforge.store.base import (
    PreferencesStore,
    SaveResult,
    SectionContentStore,
    StoredSection,
)
from gddforge.store.sqlite_store import SQLiteSectionStore

__all__ = [
    "PreferencesStore",
    "SQLiteSectionStore",
    "SaveResult",
    "SectionContentStore",
    "StoredSection",
]
