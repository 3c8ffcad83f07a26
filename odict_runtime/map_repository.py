# file: odict_runtime/map_repository.py
"""
Map Repository -- sqlite3-backed ordered map snapshots.

One row per asset holding the canonical snapshot JSON produced by
odict_kernel.snapshot.encode_snapshot(), its SHA-256 and a revision
counter. The version counter of the in-memory map is never stored;
revision counts saves, not mutations.

Rows are written verbatim. Reconciliation of malformed data happens
on load in the session, never here.
"""

from __future__ import annotations

import sqlite3
from datetime import datetime, timezone
from pathlib import Path
from typing import List, Optional, Tuple

_SCHEMA_PATH = Path(__file__).parent / "schema.sql"


class MapRepository:
    """
    Snapshot store backed by sqlite3.

    All writes are transaction-wrapped. Single writer assumed.
    """

    def __init__(self, db_path: str | Path) -> None:
        self._db_path = str(db_path)
        self._conn = sqlite3.connect(self._db_path)
        self._conn.execute("PRAGMA journal_mode=WAL")
        self._ensure_schema()

    def _ensure_schema(self) -> None:
        schema_sql = _SCHEMA_PATH.read_text(encoding="utf-8")
        self._conn.executescript(schema_sql)

    # ------------------------------------------------------------------
    # Write
    # ------------------------------------------------------------------

    def save_snapshot(
        self,
        asset_id: str,
        snapshot_json: str,
        snapshot_hash: str,
    ) -> int:
        """
        Persist the snapshot for an asset, replacing the previous one.

        Returns the new revision (1 for the first save).
        """
        now = datetime.now(timezone.utc).isoformat()
        with self._conn:
            row = self._conn.execute(
                "SELECT revision FROM maps WHERE asset_id = ?",
                (asset_id,),
            ).fetchone()
            revision = 1 if row is None else row[0] + 1
            self._conn.execute(
                """
                INSERT OR REPLACE INTO maps
                    (asset_id, snapshot_json, snapshot_hash, revision, updated_at)
                VALUES (?, ?, ?, ?, ?)
                """,
                (asset_id, snapshot_json, snapshot_hash, revision, now),
            )
        return revision

    def delete(self, asset_id: str) -> bool:
        """Remove an asset. Returns False if it did not exist."""
        with self._conn:
            cursor = self._conn.execute(
                "DELETE FROM maps WHERE asset_id = ?", (asset_id,),
            )
        return cursor.rowcount > 0

    # ------------------------------------------------------------------
    # Read
    # ------------------------------------------------------------------

    def load_snapshot(self, asset_id: str) -> Optional[Tuple[int, str]]:
        """
        Load the stored snapshot for an asset.

        Returns (revision, snapshot_json) or None if the asset is unknown.
        """
        row = self._conn.execute(
            "SELECT revision, snapshot_json FROM maps WHERE asset_id = ?",
            (asset_id,),
        ).fetchone()
        if row is None:
            return None
        return (row[0], row[1])

    def load_hash(self, asset_id: str) -> Optional[str]:
        row = self._conn.execute(
            "SELECT snapshot_hash FROM maps WHERE asset_id = ?",
            (asset_id,),
        ).fetchone()
        return None if row is None else row[0]

    def list_assets(self) -> List[str]:
        cursor = self._conn.execute(
            "SELECT asset_id FROM maps ORDER BY asset_id"
        )
        return [row[0] for row in cursor.fetchall()]

    def close(self) -> None:
        self._conn.close()
