from __future__ import annotations

import json
from contextlib import closing
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from .database import get_connection


def _now_iso() -> str:
    return datetime.now(tz=timezone.utc).isoformat()


def get_record(key: str) -> Optional[Dict[str, Any]]:
    with closing(get_connection()) as conn:
        row = conn.execute("SELECT value_json FROM settings WHERE key = ?", (key,)).fetchone()
    if not row:
        return None
    value = json.loads(row["value_json"])
    return value if isinstance(value, dict) else None


def save_record(key: str, value: Dict[str, Any]) -> None:
    with closing(get_connection()) as conn:
        with conn:
            conn.execute(
                """
                INSERT INTO settings (key, value_json, updated_at)
                VALUES (?, ?, ?)
                ON CONFLICT(key) DO UPDATE SET
                    value_json = excluded.value_json,
                    updated_at = excluded.updated_at
                """,
                (key, json.dumps(value), _now_iso()),
            )


def delete_record(key: str) -> bool:
    with closing(get_connection()) as conn:
        with conn:
            cursor = conn.execute("DELETE FROM settings WHERE key = ?", (key,))
    return cursor.rowcount > 0
