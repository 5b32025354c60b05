# rs_platform/store.py
# SQLite-backed local cache of user records.
# Copyright (c) 2026 ReqresSync contributors
from __future__ import annotations

import sqlite3
from contextlib import contextmanager
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Iterator

from _logging import log as _log

from .errors import PersistenceError
from .models import USER_FIELDS, User

LOG = _log.child("STORE")

_SCHEMA = """
CREATE TABLE IF NOT EXISTS users (
    id INTEGER PRIMARY KEY,
    email TEXT NOT NULL DEFAULT '',
    first_name TEXT NOT NULL DEFAULT '',
    last_name TEXT NOT NULL DEFAULT '',
    avatar TEXT NOT NULL DEFAULT ''
);
"""

_COLUMNS = ", ".join(USER_FIELDS)


def _row_to_user(row: sqlite3.Row) -> User:
    return User(
        id=int(row["id"]),
        email=row["email"] or "",
        first_name=row["first_name"] or "",
        last_name=row["last_name"] or "",
        avatar=row["avatar"] or "",
    )


@dataclass
class LocalStore:
    """Single-table user store keyed by integer id.

    The connection is shared with whichever thread runs the store tasks
    (`check_same_thread=False`); callers must only touch the store through the
    serial task runner.
    """

    path: Path
    _conn: sqlite3.Connection | None = field(init=False, default=None, repr=False)

    def __post_init__(self) -> None:
        self.path = Path(self.path)
        try:
            if str(self.path) != ":memory:":
                self.path.parent.mkdir(parents=True, exist_ok=True)
            conn = sqlite3.connect(str(self.path), check_same_thread=False)
            conn.row_factory = sqlite3.Row
            conn.executescript(_SCHEMA)
            conn.commit()
        except (sqlite3.Error, OSError) as e:
            raise PersistenceError(f"Failed to open local DB at {self.path}: {e}") from e
        self._conn = conn
        LOG.debug(f"opened {self.path}")

    @contextmanager
    def _cursor(self, what: str) -> Iterator[sqlite3.Cursor]:
        if self._conn is None:
            raise PersistenceError(f"{what}: local DB is closed")
        try:
            cur = self._conn.cursor()
            try:
                yield cur
                self._conn.commit()
            finally:
                cur.close()
        except sqlite3.Error as e:
            try:
                self._conn.rollback()
            except sqlite3.Error:
                pass
            raise PersistenceError(f"{what}: {e}") from e

    # Reads
    def get(self, user_id: int) -> User | None:
        with self._cursor("get") as cur:
            cur.execute(f"SELECT {_COLUMNS} FROM users WHERE id = ? LIMIT 1", (int(user_id),))
            row = cur.fetchone()
        return _row_to_user(row) if row is not None else None

    def all(self) -> list[User]:
        with self._cursor("all") as cur:
            cur.execute(f"SELECT {_COLUMNS} FROM users")
            rows = cur.fetchall()
        return [_row_to_user(r) for r in rows]

    def all_ids(self) -> list[int]:
        with self._cursor("all_ids") as cur:
            cur.execute("SELECT id FROM users ORDER BY id ASC")
            return [int(r["id"]) for r in cur.fetchall()]

    def count(self) -> int:
        with self._cursor("count") as cur:
            cur.execute("SELECT COUNT(*) AS n FROM users")
            return int(cur.fetchone()["n"])

    # Writes
    def upsert(self, user: User) -> None:
        with self._cursor("upsert") as cur:
            cur.execute(
                f"INSERT OR REPLACE INTO users ({_COLUMNS}) VALUES (?, ?, ?, ?, ?)",
                (int(user.id), user.email, user.first_name, user.last_name, user.avatar),
            )

    def update(self, user_id: int, first_name: str, last_name: str, email: str, avatar: str) -> int:
        with self._cursor("update") as cur:
            cur.execute(
                "UPDATE users SET first_name = ?, last_name = ?, email = ?, avatar = ? WHERE id = ?",
                (first_name, last_name, email, avatar, int(user_id)),
            )
            return int(cur.rowcount or 0)

    def update_avatar(self, user_id: int, avatar: str) -> int:
        with self._cursor("update_avatar") as cur:
            cur.execute("UPDATE users SET avatar = ? WHERE id = ?", (avatar, int(user_id)))
            return int(cur.rowcount or 0)

    def delete(self, user_id: int) -> int:
        with self._cursor("delete") as cur:
            cur.execute("DELETE FROM users WHERE id = ?", (int(user_id),))
            return int(cur.rowcount or 0)

    def close(self) -> None:
        conn, self._conn = self._conn, None
        if conn is not None:
            try:
                conn.close()
            except sqlite3.Error as e:
                LOG.warn(f"close failed: {e}")

    def info(self) -> dict[str, Any]:
        return {"path": str(self.path), "open": self._conn is not None}


__all__ = ["LocalStore"]
