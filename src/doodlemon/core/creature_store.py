"""SQLite repository for creature records.

The store is the source of truth for the gallery. Each method opens its own
connection, so one ``CreatureStore`` can be shared across request threads.
``powers`` and ``action_images`` are stored as JSON text columns.
"""

from __future__ import annotations

import json
import logging
import sqlite3
from datetime import datetime
from pathlib import Path

from doodlemon.core.models import Creature

logger = logging.getLogger(__name__)

_COLUMNS = (
    "id, name, type, powers, characteristics, image_url, doodle_source, likes, action_images"
)


class CreatureStore:
    """Manage the creature table using SQLite.

    Supports insert, lookup, listing, like-increment, delete and attaching
    a named action image.
    """

    def __init__(self, db_path: Path):
        """Initialize the creature database.

        Args:
            db_path: Path to SQLite database file
        """
        self.db_path = Path(db_path)
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        self._initialize_db()
        logger.info(f"Initialized creature database at {self.db_path}")

    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self.db_path, timeout=10.0)
        conn.row_factory = sqlite3.Row
        return conn

    def _initialize_db(self) -> None:
        """Create database schema if it doesn't exist."""
        with self._connect() as conn:
            conn.execute("""
                CREATE TABLE IF NOT EXISTS creatures (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    name TEXT NOT NULL,
                    type TEXT NOT NULL,
                    powers TEXT NOT NULL,
                    characteristics TEXT NOT NULL DEFAULT '',
                    image_url TEXT NOT NULL,
                    doodle_source TEXT NOT NULL DEFAULT '',
                    likes INTEGER NOT NULL DEFAULT 0,
                    action_images TEXT NOT NULL DEFAULT '{}',
                    created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
                )
                """)
            conn.commit()

    @staticmethod
    def _row_to_creature(row: sqlite3.Row) -> Creature:
        return Creature(
            id=row["id"],
            name=row["name"],
            type=row["type"],
            powers=json.loads(row["powers"]),
            characteristics=row["characteristics"],
            image_url=row["image_url"],
            doodle_source=row["doodle_source"],
            likes=row["likes"],
            action_images=json.loads(row["action_images"] or "{}"),
        )

    def _fetch(self, conn: sqlite3.Connection, creature_id: int) -> Creature | None:
        row = conn.execute(
            f"SELECT {_COLUMNS} FROM creatures WHERE id = ?",
            (creature_id,),
        ).fetchone()
        return self._row_to_creature(row) if row else None

    def insert(self, creature: Creature) -> Creature:
        """Persist a new creature.

        The stored record always starts with ``likes=0`` and no action
        images, whatever the input carries.

        Returns:
            The stored creature with its assigned ``id``.
        """
        powers = json.dumps([p.model_dump() for p in creature.powers])
        with self._connect() as conn:
            cursor = conn.execute(
                """
                INSERT INTO creatures
                    (name, type, powers, characteristics, image_url, doodle_source, created_at)
                VALUES (?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    creature.name,
                    creature.type,
                    powers,
                    creature.characteristics,
                    creature.image_url,
                    creature.doodle_source,
                    datetime.now().isoformat(),
                ),
            )
            conn.commit()
            saved = self._fetch(conn, cursor.lastrowid)

        logger.info(f"Stored creature #{saved.id}: {saved.name}")
        return saved

    def get_by_id(self, creature_id: int) -> Creature | None:
        """Return the creature with ``creature_id`` or ``None``."""
        with self._connect() as conn:
            return self._fetch(conn, creature_id)

    def list(self) -> list[Creature]:
        """Return all creatures, newest first."""
        with self._connect() as conn:
            rows = conn.execute(f"SELECT {_COLUMNS} FROM creatures ORDER BY id DESC").fetchall()
        return [self._row_to_creature(row) for row in rows]

    def like(self, creature_id: int) -> Creature | None:
        """Increment the like counter.

        Returns:
            The updated creature, or ``None`` if it does not exist.
        """
        with self._connect() as conn:
            cursor = conn.execute(
                "UPDATE creatures SET likes = likes + 1 WHERE id = ?",
                (creature_id,),
            )
            conn.commit()
            if cursor.rowcount == 0:
                return None
            return self._fetch(conn, creature_id)

    def delete(self, creature_id: int) -> bool:
        """Delete a creature.

        Returns:
            True if a row was removed, False if it did not exist.
        """
        with self._connect() as conn:
            cursor = conn.execute("DELETE FROM creatures WHERE id = ?", (creature_id,))
            conn.commit()
            was_deleted = cursor.rowcount > 0

        if was_deleted:
            logger.info(f"Deleted creature #{creature_id}")
        return was_deleted

    def set_action_image(self, creature_id: int, power_name: str, url: str) -> Creature | None:
        """Attach (or replace) the action image of one power.

        Runs as a read-modify-write inside an immediate transaction, so a
        concurrent write to another power's key is never lost.

        Returns:
            The updated creature, or ``None`` if it does not exist.
        """
        conn = sqlite3.connect(self.db_path, timeout=10.0, isolation_level=None)
        conn.row_factory = sqlite3.Row
        try:
            conn.execute("BEGIN IMMEDIATE")
            row = conn.execute(
                "SELECT action_images FROM creatures WHERE id = ?",
                (creature_id,),
            ).fetchone()
            if row is None:
                conn.execute("ROLLBACK")
                return None

            action_images = json.loads(row["action_images"] or "{}")
            action_images[power_name] = url
            conn.execute(
                "UPDATE creatures SET action_images = ? WHERE id = ?",
                (json.dumps(action_images), creature_id),
            )
            conn.execute("COMMIT")
            return self._fetch(conn, creature_id)
        except sqlite3.Error:
            if conn.in_transaction:
                conn.execute("ROLLBACK")
            raise
        finally:
            conn.close()

    def count(self) -> int:
        """Get total count of stored creatures."""
        with self._connect() as conn:
            result = conn.execute("SELECT COUNT(*) FROM creatures").fetchone()
        return result[0] if result else 0

    def total_likes(self) -> int:
        """Sum of likes across all creatures."""
        with self._connect() as conn:
            result = conn.execute("SELECT COALESCE(SUM(likes), 0) FROM creatures").fetchone()
        return result[0] if result else 0
