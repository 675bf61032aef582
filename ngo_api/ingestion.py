"""Flattening of level-grouped generator output into stored news rows."""

from __future__ import annotations

import logging
import sqlite3
from typing import Optional

from .db import Database
from .errors import IngestionFailure
from .models import NewsItem
from .news_client import GroupedNews

logger = logging.getLogger(__name__)


class NewsIngestionPipeline:
    def __init__(self, database: Database) -> None:
        self.database = database

    def ingest(self, grouped: Optional[GroupedNews]) -> int:
        """Persist one row per entry, tagged with its enclosing level.

        Rows are inserted independently; a failure stops the run but keeps
        whatever was already saved. Returns the number of rows written.
        """

        if not grouped:
            return 0

        saved = 0
        for level, entries in grouped.items():
            for entry in entries:
                item = NewsItem(
                    title=entry.get("title"),
                    media=entry.get("media"),
                    editor=entry.get("editor"),
                    thumbnail=entry.get("thumbnail"),
                    summary=entry.get("summary"),
                    contents=entry.get("contents"),
                    level=level,
                )
                try:
                    self.database.insert_news(item)
                except sqlite3.Error as exc:
                    logger.error(
                        "news persistence failed after %d saved rows (level=%s): %s",
                        saved,
                        level,
                        exc,
                    )
                    raise IngestionFailure() from exc
                saved += 1
        logger.info("ingested %d news items across %d levels", saved, len(grouped))
        return saved


__all__ = ["NewsIngestionPipeline"]
