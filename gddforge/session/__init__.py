"""Editing session for one open section: local state, AI calls and autosave."""

from gddforge.session.editing import SectionEditingSession, SessionState

__all__ = ["SectionEditingSession", "SessionState"]
