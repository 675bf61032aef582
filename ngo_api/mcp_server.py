"""MCP server exposing NGO attendance and news tools."""

from __future__ import annotations

import asyncio
import os
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from functools import lru_cache

from mcp.server.fastmcp import FastMCP

from .config import load_settings
from .db import Database
from .news_client import NewsFeedClient
from .service import AttendanceService, NewsService, UserService, make_clock

_ingest_lock = asyncio.Lock()


@lru_cache(maxsize=1)
def _services() -> tuple[AttendanceService, NewsService]:
    settings = load_settings(os.getenv("NGO_API_ENV"))
    database = Database(settings.database_path)
    client = NewsFeedClient(
        settings.news_generator_url,
        timeout=settings.news_fetch_timeout,
        max_response_bytes=settings.news_max_response_bytes,
    )
    attendance = AttendanceService(database, UserService(database), make_clock(settings.tzinfo))
    return attendance, NewsService(database, client)


async def close_services() -> None:
    if _services.cache_info().currsize:
        _, news = _services()
        await news.client.close()
        _services.cache_clear()


@asynccontextmanager
async def _lifespan(server: FastMCP) -> AsyncIterator[None]:
    try:
        yield
    finally:
        await close_services()


mcp = FastMCP("ngo-api", lifespan=_lifespan)


@mcp.tool()
async def get_today_news(level: str) -> dict:
    """Return the stored news items for a difficulty level."""

    _, news = _services()
    return {"level": level, "news": news.get_today_news(level)}


@mcp.tool()
async def get_recent_attendance(user_id: int) -> dict:
    """Return a user's attendance over the last seven days, today included."""

    attendance, _ = _services()
    return attendance.get_recent_attendance(user_id)


@mcp.tool()
async def trigger_news_ingestion() -> dict:
    """Pull today's batch from the news generator and store it."""

    _, news = _services()
    async with _ingest_lock:
        saved = await news.trigger_news_ingestion()
    return {"saved": saved}


__all__ = [
    "mcp",
    "close_services",
    "get_today_news",
    "get_recent_attendance",
    "trigger_news_ingestion",
]


if __name__ == "__main__":  # pragma: no cover
    mcp.run()
