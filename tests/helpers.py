"""Builders shared across the test modules."""

from __future__ import annotations

import asyncio
import json
from datetime import date
from typing import Any, Callable

import httpx

from ngo_api.db import Database
from ngo_api.news_client import NewsFeedClient

FIXED_TODAY = date(2024, 5, 20)
GENERATOR_URL = "http://generator.test/selectNews"


def news_entry(title: str) -> dict[str, str]:
    return {
        "title": title,
        "media": f"{title} media",
        "editor": f"{title} editor",
        "thumbnail": f"https://img.test/{title}.png",
        "summary": f"{title} summary",
        "contents": f"{title} contents",
    }


GENERATED_NEWS = {"A": [news_entry("t1")], "B": [news_entry("t2")]}


def generator_client(
    handler: Callable[[httpx.Request], httpx.Response], **kwargs: Any
) -> NewsFeedClient:
    return NewsFeedClient(GENERATOR_URL, transport=httpx.MockTransport(handler), **kwargs)


def json_handler(payload: Any, status_code: int = 200) -> Callable[[httpx.Request], httpx.Response]:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(status_code, content=json.dumps(payload).encode())

    return handler


def timeout_handler(request: httpx.Request) -> httpx.Response:
    raise httpx.ReadTimeout("generator timed out", request=request)


def trickle_handler(chunks: int, delay: float) -> Callable[[httpx.Request], httpx.Response]:
    """Serve a body slowly, one small chunk per `delay` seconds."""

    async def body():
        yield b"{"
        for _ in range(chunks):
            await asyncio.sleep(delay)
            yield b" "
        yield b"}"

    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, content=body())

    return handler


def count_news(database: Database) -> int:
    with database.connect() as conn:
        return conn.execute("SELECT COUNT(*) FROM today_news").fetchone()[0]
