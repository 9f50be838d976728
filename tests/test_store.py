"""Tests for SQLiteSectionStore: section content, versions and preferences."""

from __future__ import annotations

import threading

import pytest

from gddforge.errors import ConflictError, PersistenceError, ValidationError
from gddforge.store import PreferencesStore, SectionContentStore, SQLiteSectionStore

CONTENT = {
    "brief_introduction": "<p>A tactical fleet game.</p>",
    "target_audience": "<p>Strategy fans.</p>",
}


class TestProtocol:
    def test_satisfies_protocols(self, store: SQLiteSectionStore):
        assert isinstance(store, SectionContentStore)
        assert isinstance(store, PreferencesStore)


class TestGetAndSave:
    def test_get_unsaved_is_empty(self, store: SQLiteSectionStore):
        assert store.get("game-1", "overview") == {}
        assert store.get_record("game-1", "overview") is None

    def test_round_trip(self, store: SQLiteSectionStore):
        store.save("game-1", "overview", CONTENT, "user-a")
        assert store.get("game-1", "overview") == CONTENT

    def test_full_replace_not_merge(self, store: SQLiteSectionStore):
        store.save("game-1", "overview", CONTENT, "user-a")
        store.save("game-1", "overview", {"market_analysis": "<p>New</p>"}, "user-a")
        assert store.get("game-1", "overview") == {"market_analysis": "<p>New</p>"}

    def test_idempotent_save(self, store: SQLiteSectionStore):
        store.save("game-1", "overview", CONTENT, "user-a")
        first = store.get_record("game-1", "overview")
        store.save("game-1", "overview", CONTENT, "user-a")
        second = store.get_record("game-1", "overview")
        assert first.content == second.content
        assert second.updated_at >= first.updated_at
        assert second.created_at == first.created_at

    def test_record_tracks_editor_and_version(self, store: SQLiteSectionStore):
        r1 = store.save("game-1", "overview", CONTENT, "user-a")
        r2 = store.save("game-1", "overview", CONTENT, "user-b")
        assert (r1.version, r2.version) == (1, 2)
        record = store.get_record("game-1", "overview")
        assert record.last_edited_by == "user-b"
        assert record.version == 2
        assert record.updated_at == r2.updated_at

    def test_stale_keys_tolerated(self, store: SQLiteSectionStore):
        content = {"removed_subsection": "<p>old</p>"}
        store.save("game-1", "overview", content, "user-a")
        assert store.get("game-1", "overview") == content

    def test_games_are_isolated(self, store: SQLiteSectionStore):
        store.save("game-1", "overview", CONTENT, "user-a")
        assert store.get("game-2", "overview") == {}

    def test_rejects_non_string_values(self, store: SQLiteSectionStore):
        with pytest.raises(ValidationError):
            store.save("game-1", "overview", {"brief_introduction": 3}, "user-a")

    def test_persists_across_instances(self, tmp_path):
        db = str(tmp_path / "persist.db")
        first = SQLiteSectionStore(db)
        first.save("game-1", "overview", CONTENT, "user-a")
        first.close()
        second = SQLiteSectionStore(db)
        assert second.get("game-1", "overview") == CONTENT
        second.close()


class TestGetAll:
    def test_only_sections_with_content(self, store: SQLiteSectionStore):
        store.save("game-1", "overview", CONTENT, "user-a")
        store.save("game-1", "storyline", {}, "user-a")
        store.save("game-2", "assets", {"concept_art": "<p>x</p>"}, "user-a")
        assert store.get_all("game-1") == {"overview": CONTENT}

    def test_empty_game(self, store: SQLiteSectionStore):
        assert store.get_all("nobody") == {}


class TestOptimisticConcurrency:
    def test_expected_zero_creates(self, store: SQLiteSectionStore):
        result = store.save("game-1", "overview", CONTENT, "user-a", expected_version=0)
        assert result.version == 1

    def test_expected_zero_conflicts_when_row_exists(self, store: SQLiteSectionStore):
        store.save("game-1", "overview", CONTENT, "user-a")
        with pytest.raises(ConflictError) as exc_info:
            store.save("game-1", "overview", {}, "user-b", expected_version=0)
        assert exc_info.value.current_version == 1
        assert exc_info.value.status_code == 409

    def test_stale_version_rejected_and_nothing_written(self, store: SQLiteSectionStore):
        store.save("game-1", "overview", CONTENT, "user-a")
        store.save("game-1", "overview", CONTENT, "user-b")
        with pytest.raises(ConflictError):
            store.save("game-1", "overview", {"x": "lost"}, "user-a", expected_version=1)
        record = store.get_record("game-1", "overview")
        assert record.content == CONTENT
        assert record.version == 2

    def test_conflict_is_persistence_error(self):
        assert issubclass(ConflictError, PersistenceError)

    def test_matching_version_succeeds(self, store: SQLiteSectionStore):
        store.save("game-1", "overview", CONTENT, "user-a")
        result = store.save("game-1", "overview", {}, "user-a", expected_version=1)
        assert result.version == 2

    def test_none_is_last_write_wins(self, store: SQLiteSectionStore):
        store.save("game-1", "overview", CONTENT, "user-a")
        store.save("game-1", "overview", {"a": "<p>b</p>"}, "user-b", expected_version=None)
        assert store.get("game-1", "overview") == {"a": "<p>b</p>"}

    def test_concurrent_savers_one_wins(self, store: SQLiteSectionStore):
        store.save("game-1", "overview", CONTENT, "user-a")
        outcomes: list[str] = []
        lock = threading.Lock()

        def attempt(user: str) -> None:
            try:
                store.save("game-1", "overview", {"by": user}, user, expected_version=1)
                result = "ok"
            except ConflictError:
                result = "conflict"
            with lock:
                outcomes.append(result)

        threads = [threading.Thread(target=attempt, args=(f"u{i}",)) for i in range(5)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()
        assert sorted(outcomes) == ["conflict"] * 4 + ["ok"]
        assert store.get_record("game-1", "overview").version == 2


class TestPreferences:
    def test_unset(self, store: SQLiteSectionStore):
        assert store.get_preferred_model("user-a") is None

    def test_upsert(self, store: SQLiteSectionStore):
        store.set_preferred_model("user-a", "gpt-4o")
        store.set_preferred_model("user-a", "claude-haiku")
        assert store.get_preferred_model("user-a") == "claude-haiku"
