"""Dataclasses representing NGO API domain models."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date

NEWS_FIELDS = ("title", "media", "editor", "thumbnail", "summary", "contents")


@dataclass(slots=True)
class User:
    id: int
    name: str
    email: str
    level: str | None = None


@dataclass(slots=True)
class AttendanceRecord:
    id: int
    user_id: int
    attended_on: date

    def to_dict(self) -> dict[str, object]:
        return {"attendance_id": self.id, "date": self.attended_on.isoformat()}


@dataclass(slots=True)
class NewsItem:
    title: str | None
    media: str | None
    editor: str | None
    thumbnail: str | None
    summary: str | None
    contents: str | None
    level: str
    id: int | None = None

    def to_dict(self) -> dict[str, object]:
        return {
            "news_id": self.id,
            "title": self.title,
            "media": self.media,
            "editor": self.editor,
            "thumbnail": self.thumbnail,
            "summary": self.summary,
            "contents": self.contents,
            "level": self.level,
        }


__all__ = ["User", "AttendanceRecord", "NewsItem", "NEWS_FIELDS"]
