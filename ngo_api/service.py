"""Core orchestration logic for the NGO API."""

from __future__ import annotations

import asyncio
import logging
from datetime import date, datetime, timedelta, tzinfo
from typing import Any, Callable, Dict, List, Optional

from .db import Database, rows_to_dicts
from .errors import ConflictError, NotFoundError
from .ingestion import NewsIngestionPipeline
from .models import AttendanceRecord, User
from .news_client import NewsFeedClient

logger = logging.getLogger(__name__)

Clock = Callable[[], date]

RECENT_WINDOW_DAYS = 7


def make_clock(tz: tzinfo) -> Clock:
    def today() -> date:
        return datetime.now(tz).date()

    return today


def recent_window(today: date, days: int = RECENT_WINDOW_DAYS) -> set[date]:
    return {today - timedelta(days=offset) for offset in range(days)}


class UserService:
    """User directory operations; attendance uses `require_user` for lookups."""

    def __init__(self, database: Database) -> None:
        self.database = database

    def require_user(self, user_id: int) -> User:
        user = self.database.find_user(user_id)
        if user is None:
            raise NotFoundError()
        return user

    def register_user(self, name: str, email: str, level: Optional[str] = None) -> User:
        user = self.database.insert_user(name, email, level)
        logger.info("registered user %s", user.id)
        return user

    def patch_user_level(self, user_id: int, level: str) -> Dict[str, Any]:
        if not self.database.update_user_level(user_id, level):
            raise NotFoundError()
        return {"user_id": user_id, "level": level}

    def withdraw_user(self, user_id: int) -> None:
        if not self.database.delete_user(user_id):
            raise NotFoundError()
        logger.info("withdrew user %s", user_id)


class AttendanceService:
    def __init__(self, database: Database, users: UserService, clock: Clock) -> None:
        self.database = database
        self.users = users
        self.clock = clock

    def post_attendance(self, user_id: int) -> AttendanceRecord:
        self.users.require_user(user_id)
        today = self.clock()

        if self.database.attendance_exists(user_id, today):
            raise ConflictError()
        try:
            return self.database.insert_attendance(user_id, today)
        except ConflictError:
            logger.warning("attendance for user %s on %s raced a concurrent insert", user_id, today)
            raise

    def get_all_attendance(self, user_id: int) -> Dict[str, Any]:
        self.users.require_user(user_id)
        records = self.database.list_attendance(user_id)
        return {"user_id": user_id, "attendance": rows_to_dicts(records)}

    def get_recent_attendance(self, user_id: int) -> Dict[str, Any]:
        self.users.require_user(user_id)
        window = recent_window(self.clock())
        records = [
            record
            for record in self.database.list_attendance(user_id)
            if record.attended_on in window
        ]
        return {"user_id": user_id, "attendance": rows_to_dicts(records)}


class NewsService:
    def __init__(
        self,
        database: Database,
        client: NewsFeedClient,
        pipeline: Optional[NewsIngestionPipeline] = None,
    ) -> None:
        self.database = database
        self.client = client
        self.pipeline = pipeline or NewsIngestionPipeline(database)

    def get_today_news(self, level: str) -> List[Dict[str, Any]]:
        return rows_to_dicts(self.database.get_news_by_level(level))

    async def trigger_news_ingestion(self) -> int:
        """Fetch the generator batch and store it; failures raise IngestionFailure.

        The inserts run on a worker thread so the event loop keeps serving
        requests while SQLite waits on other writers.
        """

        grouped = await self.client.fetch_generated_news()
        return await asyncio.to_thread(self.pipeline.ingest, grouped)


__all__ = [
    "AttendanceService",
    "NewsService",
    "UserService",
    "Clock",
    "make_clock",
    "recent_window",
]
