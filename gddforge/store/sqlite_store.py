"""Section content and preferences stores backed by a local SQLite database."""

from __future__ import annotations

import json
import logging
import sqlite3
import threading
from datetime import UTC, datetime
from pathlib import Path

from gddforge.drafter.models import AllSectionsContent, SectionContent
from gddforge.errors import ConflictError, PersistenceError, ValidationError
from gddforge.store.base import SaveResult, StoredSection

logger = logging.getLogger(__name__)

_SCHEMA = """\
CREATE TABLE IF NOT EXISTS gdd_sections (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    game_id TEXT NOT NULL,
    section_slug TEXT NOT NULL,
    content_json TEXT NOT NULL DEFAULT '{}',
    version INTEGER NOT NULL DEFAULT 1,
    last_edited_by TEXT,
    created_at TEXT NOT NULL,
    updated_at TEXT NOT NULL,
    UNIQUE (game_id, section_slug)
);
CREATE INDEX IF NOT EXISTS idx_gdd_sections_game ON gdd_sections(game_id);
CREATE TABLE IF NOT EXISTS user_preferences (
    user_id TEXT PRIMARY KEY,
    preferred_ai_model TEXT NOT NULL,
    created_at TEXT NOT NULL,
    updated_at TEXT NOT NULL
);
"""

_SECTION_COLUMNS = (
    "game_id, section_slug, content_json, version, last_edited_by, created_at, updated_at"
)


def _check_content(content: SectionContent) -> None:
    if not isinstance(content, dict):
        raise ValidationError("Section content must be a mapping of subsection id to text")
    for key, value in content.items():
        if not isinstance(key, str) or not isinstance(value, str):
            raise ValidationError("Section content keys and values must be strings")


class SQLiteSectionStore:
    """SectionContentStore and PreferencesStore on one SQLite file (WAL mode).

    Safe to share across threads: every statement runs under one lock, and
    the version check plus write of save() run in a single IMMEDIATE
    transaction.
    """

    def __init__(self, db_path: str = ".gddforge/gdd.db") -> None:
        if db_path != ":memory:":
            Path(db_path).parent.mkdir(parents=True, exist_ok=True)

        self.db_path = db_path
        self._lock = threading.Lock()
        # isolation_level=None => autocommit; transactions are explicit.
        self._conn = sqlite3.connect(
            self.db_path, isolation_level=None, timeout=5, check_same_thread=False
        )
        self._conn.execute("PRAGMA journal_mode=WAL")
        self._conn.executescript(_SCHEMA)

    def close(self) -> None:
        with self._lock:
            self._conn.close()

    # -- helpers ---------------------------------------------------------------

    def _now(self) -> datetime:
        return datetime.now(UTC)

    def _row_to_section(self, row: tuple) -> StoredSection:
        game_id, slug, content_json, version, editor, created_at, updated_at = row
        return StoredSection(
            game_id=game_id,
            section_slug=slug,
            content=json.loads(content_json) or {},
            version=version,
            last_edited_by=editor,
            created_at=datetime.fromisoformat(created_at),
            updated_at=datetime.fromisoformat(updated_at),
        )

    # -- SectionContentStore ---------------------------------------------------

    def get_record(self, game_id: str, section_slug: str) -> StoredSection | None:
        try:
            with self._lock:
                row = self._conn.execute(
                    f"SELECT {_SECTION_COLUMNS} FROM gdd_sections "
                    "WHERE game_id = ? AND section_slug = ?",
                    (game_id, section_slug),
                ).fetchone()
        except sqlite3.Error as e:
            raise PersistenceError("Failed to fetch section content") from e
        return self._row_to_section(row) if row else None

    def get(self, game_id: str, section_slug: str) -> SectionContent:
        """Return the saved content, or an empty map if nothing was saved yet."""
        record = self.get_record(game_id, section_slug)
        return dict(record.content) if record else {}

    def get_all(self, game_id: str) -> AllSectionsContent:
        """Return every section of a game that has at least one saved field."""
        try:
            with self._lock:
                rows = self._conn.execute(
                    f"SELECT {_SECTION_COLUMNS} FROM gdd_sections WHERE game_id = ? "
                    "ORDER BY section_slug",
                    (game_id,),
                ).fetchall()
        except sqlite3.Error as e:
            raise PersistenceError("Failed to fetch GDD sections") from e
        sections: AllSectionsContent = {}
        for row in rows:
            record = self._row_to_section(row)
            if record.content:
                sections[record.section_slug] = dict(record.content)
        return sections

    def save(
        self,
        game_id: str,
        section_slug: str,
        content: SectionContent,
        editor_user_id: str,
        expected_version: int | None = None,
    ) -> SaveResult:
        """Upsert the full content map for (game, section).

        With expected_version=None the last write wins. Otherwise the stored
        version (0 when no row exists) must match or ConflictError is raised
        and nothing is written.
        """
        _check_content(content)
        now = self._now()
        payload = json.dumps(content, sort_keys=True)

        with self._lock:
            cursor = self._conn.cursor()
            try:
                cursor.execute("BEGIN IMMEDIATE")
                row = cursor.execute(
                    "SELECT version FROM gdd_sections WHERE game_id = ? AND section_slug = ?",
                    (game_id, section_slug),
                ).fetchone()
                current = row[0] if row else 0

                if expected_version is not None and expected_version != current:
                    cursor.execute("ROLLBACK")
                    raise ConflictError(
                        f"Section {section_slug!r} was saved by someone else "
                        f"(version {current}, expected {expected_version})",
                        current_version=current,
                    )

                if row is None:
                    cursor.execute(
                        "INSERT INTO gdd_sections "
                        "(game_id, section_slug, content_json, version, last_edited_by, "
                        "created_at, updated_at) VALUES (?, ?, ?, 1, ?, ?, ?)",
                        (game_id, section_slug, payload, editor_user_id,
                         now.isoformat(), now.isoformat()),
                    )
                else:
                    cursor.execute(
                        "UPDATE gdd_sections SET content_json = ?, version = version + 1, "
                        "last_edited_by = ?, updated_at = ? "
                        "WHERE game_id = ? AND section_slug = ?",
                        (payload, editor_user_id, now.isoformat(), game_id, section_slug),
                    )
                cursor.execute("COMMIT")
            except ConflictError:
                raise
            except sqlite3.Error as e:
                if self._conn.in_transaction:
                    self._conn.rollback()
                logger.error("save failed: game=%s section=%s: %s", game_id, section_slug, e)
                raise PersistenceError("Failed to save section content") from e

        version = current + 1
        logger.debug(
            "saved game=%s section=%s version=%d fields=%d",
            game_id, section_slug, version, len(content),
        )
        return SaveResult(updated_at=now, version=version)

    # -- PreferencesStore ------------------------------------------------------

    def get_preferred_model(self, user_id: str) -> str | None:
        try:
            with self._lock:
                row = self._conn.execute(
                    "SELECT preferred_ai_model FROM user_preferences WHERE user_id = ?",
                    (user_id,),
                ).fetchone()
        except sqlite3.Error as e:
            raise PersistenceError("Failed to fetch preferences") from e
        return row[0] if row else None

    def set_preferred_model(self, user_id: str, model_id: str) -> None:
        now = self._now().isoformat()
        try:
            with self._lock:
                self._conn.execute(
                    "INSERT INTO user_preferences (user_id, preferred_ai_model, created_at, updated_at) "
                    "VALUES (?, ?, ?, ?) "
                    "ON CONFLICT(user_id) DO UPDATE SET "
                    "preferred_ai_model = excluded.preferred_ai_model, "
                    "updated_at = excluded.updated_at",
                    (user_id, model_id, now, now),
                )
        except sqlite3.Error as e:
            raise PersistenceError("Failed to update preferences") from e
