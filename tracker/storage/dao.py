import json
import time
import uuid
from datetime import datetime, timezone
from sqlite3 import Connection
from typing import Any, Optional

from tracker.storage.db import init_db
from tracker.utils.log import get_logger
from tracker.utils.validate import ChecklistItem, Profile, ProfileIn

logger = get_logger(__name__)

DEFAULT_CHECKLIST = [
    ("shoes",  "Leave your shoes nice and clean"),
    ("water",  "Leave water for the camels"),
    ("sweets", "Leave something sweet (nougat or a cookie)"),
    ("note",   "Write a note to the Kings"),
]


class DAO:
    """
    Encapsulates all inserts/queries against the tracker DB.
    """

    def __init__(self, db_path: str):
        """
        Create/connect and apply schema if needed.
        """
        self.conn: Connection = init_db(db_path)

    def close(self) -> None:
        self.conn.close()

    # -- profiles -------------------------------------------------------------

    def list_profiles(self, device_id: str) -> list[Profile]:
        """
        Return every profile owned by a device, oldest first.
        """
        cursor = self.conn.execute(
            """
            SELECT id, device_id, name, avatar, city_label, lat, lon, created_at
            FROM profiles
            WHERE device_id = ?
            ORDER BY created_at, rowid
            """,
            (device_id,),
        )
        return [Profile(**dict(row)) for row in cursor.fetchall()]

    def get_profile(self, profile_id: str) -> Optional[Profile]:
        cursor = self.conn.execute(
            """
            SELECT id, device_id, name, avatar, city_label, lat, lon, created_at
            FROM profiles WHERE id = ?
            """,
            (profile_id,),
        )
        row = cursor.fetchone()
        return Profile(**dict(row)) if row else None

    def add_profile(self, profile: ProfileIn) -> Profile:
        """
        Insert a new profile and return the stored row.
        """
        stored = Profile(
            id=str(uuid.uuid4()),
            created_at=datetime.now(timezone.utc).isoformat(),
            **profile.model_dump(),
        )
        with self.conn:
            self.conn.execute(
                """
                INSERT INTO profiles
                  (id, device_id, name, avatar, city_label, lat, lon, created_at)
                VALUES (?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    stored.id,
                    stored.device_id,
                    stored.name,
                    stored.avatar,
                    stored.city_label,
                    stored.lat,
                    stored.lon,
                    stored.created_at,
                ),
            )
        logger.info("Created profile %s for device %s", stored.id, stored.device_id)
        return stored

    def update_profile(self, profile_id: str, profile: ProfileIn) -> Optional[Profile]:
        """
        Overwrite the editable fields of a profile.

        Returns None if no such profile exists.
        """
        with self.conn:
            cur = self.conn.execute(
                """
                UPDATE profiles SET
                  name       = ?,
                  avatar     = ?,
                  city_label = ?,
                  lat        = ?,
                  lon        = ?
                WHERE id = ?
                """,
                (profile.name, profile.avatar, profile.city_label, profile.lat, profile.lon, profile_id),
            )
        if cur.rowcount == 0:
            return None
        return self.get_profile(profile_id)

    def delete_profile(self, profile_id: str) -> bool:
        with self.conn:
            cur = self.conn.execute("DELETE FROM profiles WHERE id = ?", (profile_id,))
        return cur.rowcount > 0

    def delete_device_profiles(self, device_id: str) -> int:
        """
        Drop every profile of a device; returns how many went.
        """
        with self.conn:
            cur = self.conn.execute("DELETE FROM profiles WHERE device_id = ?", (device_id,))
        logger.info("Deleted %d profiles for device %s", cur.rowcount, device_id)
        return cur.rowcount

    # -- geocode cache --------------------------------------------------------

    def get_cached_geocode(self, query: str, max_age_s: int) -> Optional[list[dict[str, Any]]]:
        """
        Return cached results for a normalized query if younger than `max_age_s`.
        """
        cursor = self.conn.execute(
            "SELECT result_json FROM geocode_cache WHERE query = ? AND updated_at >= ?",
            (query, int(time.time()) - max_age_s),
        )
        row = cursor.fetchone()
        return json.loads(row["result_json"]) if row else None

    def put_cached_geocode(self, query: str, results: list[dict[str, Any]]) -> None:
        with self.conn:
            self.conn.execute(
                """
                INSERT INTO geocode_cache (query, result_json, updated_at)
                VALUES (?, ?, ?)
                ON CONFLICT(query) DO UPDATE SET
                  result_json = excluded.result_json,
                  updated_at  = excluded.updated_at
                """,
                (query, json.dumps(results, ensure_ascii=False), int(time.time())),
            )

    # -- checklist ------------------------------------------------------------

    def get_checklist(self, profile_id: str) -> list[ChecklistItem]:
        """
        Return the profile's checklist, the default one if never touched.
        """
        rows = self.conn.execute(
            "SELECT item_id, label, checked FROM checklist_items WHERE profile_id = ? ORDER BY rowid",
            (profile_id,),
        ).fetchall()
        if not rows:
            return [ChecklistItem(id=item_id, label=label) for item_id, label in DEFAULT_CHECKLIST]
        return [ChecklistItem(id=r["item_id"], label=r["label"], checked=bool(r["checked"])) for r in rows]

    def toggle_checklist_item(self, profile_id: str, item_id: str) -> Optional[list[ChecklistItem]]:
        """
        Flip one item. Returns None if the item id is unknown.
        """
        items = self.get_checklist(profile_id)
        if not any(i.id == item_id for i in items):
            return None
        items = [
            ChecklistItem(id=i.id, label=i.label, checked=(not i.checked) if i.id == item_id else i.checked)
            for i in items
        ]
        self._write_checklist(profile_id, items)
        return items

    def reset_checklist(self, profile_id: str) -> list[ChecklistItem]:
        with self.conn:
            self.conn.execute("DELETE FROM checklist_items WHERE profile_id = ?", (profile_id,))
        return self.get_checklist(profile_id)

    def _write_checklist(self, profile_id: str, items: list[ChecklistItem]) -> None:
        with self.conn:
            self.conn.execute("DELETE FROM checklist_items WHERE profile_id = ?", (profile_id,))
            self.conn.executemany(
                "INSERT INTO checklist_items (profile_id, item_id, label, checked) VALUES (?, ?, ?, ?)",
                ((profile_id, i.id, i.label, int(i.checked)) for i in items),
            )
