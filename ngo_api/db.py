"""SQLite persistence layer for the NGO API."""

from __future__ import annotations

import sqlite3
from collections.abc import Iterable
from contextlib import contextmanager
from datetime import date
from pathlib import Path
from typing import Iterator, List, Optional

from .errors import ConflictError, NotFoundError
from .envelope import ErrorMessage
from .models import AttendanceRecord, NewsItem, User

Connection = sqlite3.Connection
Row = sqlite3.Row


class Database:
    """Lightweight wrapper around SQLite operations."""

    def __init__(self, path: Path) -> None:
        self._path = path
        self._path.parent.mkdir(parents=True, exist_ok=True)
        self._initialize()

    @contextmanager
    def connect(self) -> Iterator[Connection]:
        # IMMEDIATE takes the write lock at BEGIN so concurrent writers wait on the busy timeout
        conn = sqlite3.connect(self._path, timeout=30, isolation_level="IMMEDIATE")
        conn.row_factory = sqlite3.Row
        conn.execute("PRAGMA foreign_keys = ON")
        try:
            yield conn
        finally:
            conn.close()

    def _initialize(self) -> None:
        with self.connect() as conn:
            cursor = conn.cursor()
            cursor.execute(
                """
                CREATE TABLE IF NOT EXISTS users (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    name TEXT NOT NULL,
                    email TEXT NOT NULL UNIQUE,
                    level TEXT
                )
                """
            )
            cursor.execute(
                """
                CREATE TABLE IF NOT EXISTS attendance (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    user_id INTEGER NOT NULL,
                    date TEXT NOT NULL,
                    UNIQUE(user_id, date),
                    FOREIGN KEY(user_id) REFERENCES users(id) ON DELETE CASCADE
                )
                """
            )
            cursor.execute(
                """
                CREATE TABLE IF NOT EXISTS today_news (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    title TEXT,
                    media TEXT,
                    editor TEXT,
                    thumbnail TEXT,
                    summary TEXT,
                    contents TEXT,
                    level TEXT NOT NULL
                )
                """
            )
            cursor.execute("CREATE INDEX IF NOT EXISTS idx_today_news_level ON today_news(level)")
            conn.commit()

    # region Users
    def insert_user(self, name: str, email: str, level: Optional[str] = None) -> User:
        with self.connect() as conn:
            try:
                cursor = conn.execute(
                    "INSERT INTO users (name, email, level) VALUES (?, ?, ?)",
                    (name, email, level),
                )
            except sqlite3.IntegrityError as exc:
                raise ConflictError(ErrorMessage.REGISTER_NOT_ALLOW) from exc
            conn.commit()
            return User(id=cursor.lastrowid, name=name, email=email, level=level)

    def find_user(self, user_id: int) -> Optional[User]:
        with self.connect() as conn:
            row = conn.execute("SELECT * FROM users WHERE id = ?", (user_id,)).fetchone()
        if row is None:
            return None
        return User(id=row["id"], name=row["name"], email=row["email"], level=row["level"])

    def update_user_level(self, user_id: int, level: str) -> bool:
        with self.connect() as conn:
            cursor = conn.execute("UPDATE users SET level = ? WHERE id = ?", (level, user_id))
            conn.commit()
            return cursor.rowcount > 0

    def delete_user(self, user_id: int) -> bool:
        with self.connect() as conn:
            cursor = conn.execute("DELETE FROM users WHERE id = ?", (user_id,))
            conn.commit()
            return cursor.rowcount > 0

    # endregion

    # region Attendance
    def attendance_exists(self, user_id: int, day: date) -> bool:
        with self.connect() as conn:
            row = conn.execute(
                "SELECT 1 FROM attendance WHERE user_id = ? AND date = ?",
                (user_id, day.isoformat()),
            ).fetchone()
        return row is not None

    def list_attendance(self, user_id: int) -> List[AttendanceRecord]:
        with self.connect() as conn:
            cursor = conn.execute(
                "SELECT * FROM attendance WHERE user_id = ? ORDER BY date",
                (user_id,),
            )
            return [_attendance_from_row(row) for row in cursor.fetchall()]

    def insert_attendance(self, user_id: int, day: date) -> AttendanceRecord:
        """Persist one attendance row; the (user_id, date) constraint rejects duplicates."""

        with self.connect() as conn:
            try:
                cursor = conn.execute(
                    "INSERT INTO attendance (user_id, date) VALUES (?, ?)",
                    (user_id, day.isoformat()),
                )
            except sqlite3.IntegrityError as exc:
                # the owner was withdrawn after the caller looked it up
                if "FOREIGN KEY" in str(exc):
                    raise NotFoundError(ErrorMessage.USER_NOT_FOUND) from exc
                raise ConflictError(ErrorMessage.ATTENDANCE_ALREADY_EXIST) from exc
            conn.commit()
            return AttendanceRecord(id=cursor.lastrowid, user_id=user_id, attended_on=day)

    # endregion

    # region News
    def insert_news(self, item: NewsItem) -> NewsItem:
        with self.connect() as conn:
            cursor = conn.execute(
                """
                INSERT INTO today_news (title, media, editor, thumbnail, summary, contents, level)
                VALUES (:title, :media, :editor, :thumbnail, :summary, :contents, :level)
                """,
                {
                    "title": item.title,
                    "media": item.media,
                    "editor": item.editor,
                    "thumbnail": item.thumbnail,
                    "summary": item.summary,
                    "contents": item.contents,
                    "level": item.level,
                },
            )
            conn.commit()
            item.id = cursor.lastrowid
            return item

    def get_news_by_level(self, level: str) -> List[NewsItem]:
        with self.connect() as conn:
            cursor = conn.execute(
                "SELECT * FROM today_news WHERE level = ? ORDER BY id",
                (level,),
            )
            return [_news_from_row(row) for row in cursor.fetchall()]

    # endregion


def _attendance_from_row(row: Row) -> AttendanceRecord:
    return AttendanceRecord(
        id=row["id"],
        user_id=row["user_id"],
        attended_on=date.fromisoformat(row["date"]),
    )


def _news_from_row(row: Row) -> NewsItem:
    return NewsItem(
        id=row["id"],
        title=row["title"],
        media=row["media"],
        editor=row["editor"],
        thumbnail=row["thumbnail"],
        summary=row["summary"],
        contents=row["contents"],
        level=row["level"],
    )


def rows_to_dicts(items: Iterable[AttendanceRecord | NewsItem]) -> List[dict]:
    return [item.to_dict() for item in items]


__all__ = ["Database", "rows_to_dicts"]
