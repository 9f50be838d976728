"""Tests for PreferencesService."""

import pytest

from gddforge.errors import UnknownModelError, ValidationError
from gddforge.preferences import PreferencesService


@pytest.fixture
def preferences(store, registry):
    return PreferencesService(store, registry)


class TestPreferencesService:
    def test_default_when_unset(self, preferences):
        assert preferences.get_preferred_model("user-a") == "claude-sonnet"

    def test_set_and_get(self, preferences):
        preferences.set_preferred_model("user-a", "gpt-4o")
        assert preferences.get_preferred_model("user-a") == "gpt-4o"

    def test_unknown_model_rejected(self, preferences, store):
        with pytest.raises(UnknownModelError):
            preferences.set_preferred_model("user-a", "gpt-99")
        assert store.get_preferred_model("user-a") is None

    def test_unavailable_model_rejected(self, preferences, store):
        with pytest.raises(ValidationError, match="Gemini 2.0 Flash is not available"):
            preferences.set_preferred_model("user-a", "gemini-2-flash")
        assert store.get_preferred_model("user-a") is None

    def test_retired_model_falls_back(self, preferences, store):
        store.set_preferred_model("user-a", "old-model")
        assert preferences.get_preferred_model("user-a") == "claude-sonnet"
