import json
import sqlite3
from datetime import datetime
from typing import Any
from uuid import UUID

from src.components.filters import DEFAULT_MAX_DEPTH
from src.components.saved_views import FilterConfig, SavedView


# Helper to convert sqlite rows to dicts
def dict_factory(cursor: sqlite3.Cursor, row: Any) -> dict[str, Any]:
    d = {}
    for idx, col in enumerate(cursor.description):
        d[col[0]] = row[idx]
    return d


class SQLiteSavedViewRepo:
    def __init__(self, db_path: str, max_depth: int = DEFAULT_MAX_DEPTH):
        self.db_path = db_path
        self.max_depth = max_depth

    def _get_conn(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self.db_path)
        conn.row_factory = dict_factory
        conn.execute("PRAGMA foreign_keys = ON;")
        return conn

    def save(self, view: SavedView) -> SavedView:
        conn = self._get_conn()
        try:
            conn.execute(
                """
                INSERT INTO saved_views (
                    id, resource_key, view_name, filter_config, icon_name,
                    is_default, created_by, created_at, updated_at
                ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
                ON CONFLICT(id) DO UPDATE SET
                    view_name=excluded.view_name,
                    filter_config=excluded.filter_config,
                    icon_name=excluded.icon_name,
                    is_default=excluded.is_default,
                    updated_at=excluded.updated_at
            """,
                (
                    str(view.id),
                    view.resource_key,
                    view.view_name,
                    json.dumps(view.filter_config.to_dict(), ensure_ascii=False),
                    view.icon_name,
                    view.is_default,
                    str(view.created_by),
                    view.created_at.isoformat(),
                    view.updated_at.isoformat(),
                ),
            )
            conn.commit()
            return view
        finally:
            conn.close()

    def get_by_id(self, view_id: UUID) -> SavedView | None:
        conn = self._get_conn()
        try:
            row = conn.execute(
                "SELECT * FROM saved_views WHERE id = ?", (str(view_id),)
            ).fetchone()
            if not row:
                return None
            return self._map_row(row)
        finally:
            conn.close()

    def delete(self, view_id: UUID) -> None:
        conn = self._get_conn()
        try:
            conn.execute("DELETE FROM saved_views WHERE id = ?", (str(view_id),))
            conn.commit()
        finally:
            conn.close()

    def list_by_owner(self, resource_key: str, created_by: UUID) -> list[SavedView]:
        conn = self._get_conn()
        try:
            rows = conn.execute(
                """
                SELECT * FROM saved_views
                WHERE resource_key = ? AND created_by = ?
                ORDER BY is_default DESC, created_at DESC
            """,
                (resource_key, str(created_by)),
            ).fetchall()
            return [self._map_row(r) for r in rows]
        finally:
            conn.close()

    def _map_row(self, row: dict[str, Any]) -> SavedView:
        # Stored trees are re-validated; a corrupt row raises FilterTreeError
        config = FilterConfig.from_dict(
            json.loads(row["filter_config"] or "{}"),
            max_depth=self.max_depth,
        )
        return SavedView(
            id=UUID(row["id"]),
            resource_key=row["resource_key"],
            view_name=row["view_name"],
            filter_config=config,
            icon_name=row["icon_name"],
            is_default=bool(row["is_default"]),
            created_by=UUID(row["created_by"]),
            created_at=datetime.fromisoformat(row["created_at"]),
            updated_at=datetime.fromisoformat(row["updated_at"]),
        )
