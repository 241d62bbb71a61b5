"""SQLite storage backend for saved forms."""

import json
import logging
import sqlite3
from datetime import datetime
from pathlib import Path

from .models import StoredForm

logger = logging.getLogger(__name__)

# SQL Schema
SCHEMA_SQL = """
CREATE TABLE IF NOT EXISTS forms (
    id TEXT PRIMARY KEY,
    name TEXT NOT NULL,
    description TEXT,
    schema TEXT NOT NULL,  -- JSON
    ui_schema TEXT NOT NULL,  -- JSON
    created_at TEXT NOT NULL,
    updated_at TEXT NOT NULL
);

CREATE INDEX IF NOT EXISTS idx_forms_updated ON forms(updated_at);
"""


class SQLiteFormStore:
    """SQLite-based form store.

    Args:
        db_path: Path to SQLite database file (":memory:" for a throwaway store).
    """

    def __init__(self, db_path: Path | str):
        self.db_path = Path(db_path) if str(db_path) != ":memory:" else None
        self._conn: sqlite3.Connection | None = None

    def _get_conn(self) -> sqlite3.Connection:
        """Get database connection, creating if needed."""
        if self._conn is None:
            raise RuntimeError("Storage not initialized. Call initialize() first.")
        return self._conn

    def initialize(self) -> None:
        """Initialize storage (create database file and tables)."""
        if self.db_path is not None:
            self.db_path.parent.mkdir(parents=True, exist_ok=True)
            target = str(self.db_path)
        else:
            target = ":memory:"

        self._conn = sqlite3.connect(target, check_same_thread=False)
        self._conn.row_factory = sqlite3.Row
        self._conn.executescript(SCHEMA_SQL)
        self._conn.commit()

        logger.info(f"Initialized form store at {target}")

    def close(self) -> None:
        """Close database connection."""
        if self._conn:
            self._conn.close()
            self._conn = None

    def save(self, form: StoredForm) -> StoredForm:
        """Insert or replace a form, refreshing its updated_at.

        An existing form keeps its original created_at, and the returned
        form carries it.
        """
        conn = self._get_conn()
        form.touch()
        conn.execute(
            """
            INSERT INTO forms (id, name, description, schema, ui_schema, created_at, updated_at)
            VALUES (?, ?, ?, ?, ?, ?, ?)
            ON CONFLICT(id) DO UPDATE SET
                name = excluded.name,
                description = excluded.description,
                schema = excluded.schema,
                ui_schema = excluded.ui_schema,
                updated_at = excluded.updated_at
            """,
            (
                form.id,
                form.name,
                form.description,
                json.dumps(form.schema),
                json.dumps(form.ui_schema),
                form.created_at.isoformat(),
                form.updated_at.isoformat(),
            ),
        )
        conn.commit()
        row = conn.execute("SELECT created_at FROM forms WHERE id = ?", (form.id,)).fetchone()
        form.created_at = datetime.fromisoformat(row["created_at"])
        logger.debug(f"Saved form {form.id} ({form.name})")
        return form

    def get(self, form_id: str) -> StoredForm | None:
        """Get a form by ID."""
        conn = self._get_conn()
        row = conn.execute("SELECT * FROM forms WHERE id = ?", (form_id,)).fetchone()
        if row:
            return self._row_to_form(row)
        return None

    def list_forms(self, limit: int = 50, offset: int = 0) -> list[StoredForm]:
        """List forms, most recently saved first."""
        conn = self._get_conn()
        rows = conn.execute(
            "SELECT * FROM forms ORDER BY updated_at DESC LIMIT ? OFFSET ?",
            (limit, offset),
        ).fetchall()
        return [self._row_to_form(row) for row in rows]

    def delete(self, form_id: str) -> bool:
        """Delete a form."""
        conn = self._get_conn()
        cursor = conn.execute("DELETE FROM forms WHERE id = ?", (form_id,))
        conn.commit()
        return cursor.rowcount > 0

    def _row_to_form(self, row: sqlite3.Row) -> StoredForm:
        """Convert database row to StoredForm object."""
        return StoredForm(
            id=row["id"],
            name=row["name"],
            description=row["description"] or "",
            schema=json.loads(row["schema"]),
            ui_schema=json.loads(row["ui_schema"]),
            created_at=datetime.fromisoformat(row["created_at"]),
            updated_at=datetime.fromisoformat(row["updated_at"]),
        )
