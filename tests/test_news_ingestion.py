from __future__ import annotations

import sqlite3
import threading

import httpx
import pytest

from helpers import (
    GENERATED_NEWS,
    count_news,
    generator_client,
    json_handler,
    news_entry,
    timeout_handler,
)
from ngo_api.db import Database
from ngo_api.errors import IngestionFailure
from ngo_api.ingestion import NewsIngestionPipeline
from ngo_api.service import NewsService


class FailingDatabase(Database):
    """Fails every insert after the first `allowed` ones."""

    def __init__(self, path, allowed: int) -> None:
        super().__init__(path)
        self.allowed = allowed

    def insert_news(self, item):
        if self.allowed == 0:
            raise sqlite3.OperationalError("disk I/O error")
        self.allowed -= 1
        return super().insert_news(item)


@pytest.mark.parametrize("grouped", [{}, None])
def test_ingest_nothing_is_a_noop(database, grouped):
    assert NewsIngestionPipeline(database).ingest(grouped) == 0
    assert count_news(database) == 0


def test_ingest_flattens_levels_and_keeps_fields(database):
    saved = NewsIngestionPipeline(database).ingest(GENERATED_NEWS)

    assert saved == 2
    [item_a] = database.get_news_by_level("A")
    [item_b] = database.get_news_by_level("B")
    assert item_a.level == "A"
    assert item_b.level == "B"
    assert item_a.title == "t1"
    assert item_a.to_dict() == {"news_id": item_a.id, "level": "A", **news_entry("t1")}
    assert item_b.to_dict() == {"news_id": item_b.id, "level": "B", **news_entry("t2")}


def test_persistence_failure_keeps_earlier_rows(tmp_path):
    database = FailingDatabase(tmp_path / "ngo.db", allowed=1)
    grouped = {"A": [news_entry("t1"), news_entry("t2"), news_entry("t3")]}

    with pytest.raises(IngestionFailure):
        NewsIngestionPipeline(database).ingest(grouped)

    assert [item.title for item in database.get_news_by_level("A")] == ["t1"]


def test_get_today_news_returns_only_requested_level(database):
    service = NewsService(database, generator_client(json_handler({})))
    NewsIngestionPipeline(database).ingest(GENERATED_NEWS)

    news = service.get_today_news("A")

    assert [item["title"] for item in news] == ["t1"]
    assert service.get_today_news("C") == []


@pytest.mark.asyncio
async def test_trigger_ingestion_persists_generator_batch(database):
    client = generator_client(json_handler(GENERATED_NEWS))
    service = NewsService(database, client)
    try:
        saved = await service.trigger_news_ingestion()
    finally:
        await client.close()

    assert saved == 2
    assert count_news(database) == 2


@pytest.mark.asyncio
async def test_trigger_ingestion_timeout_saves_nothing(database):
    client = generator_client(timeout_handler)
    service = NewsService(database, client)
    try:
        with pytest.raises(IngestionFailure):
            await service.trigger_news_ingestion()
    finally:
        await client.close()

    assert count_news(database) == 0


@pytest.mark.asyncio
async def test_repeated_runs_are_not_deduplicated(database):
    client = generator_client(json_handler(GENERATED_NEWS))
    service = NewsService(database, client)
    try:
        await service.trigger_news_ingestion()
        await service.trigger_news_ingestion()
    finally:
        await client.close()

    assert len(service.get_today_news("A")) == 2


@pytest.mark.asyncio
@pytest.mark.parametrize("body", [b"null", b"", b"  \n"])
async def test_trigger_ingestion_with_nothing_generated_saves_nothing(database, body):
    client = generator_client(lambda request: httpx.Response(200, content=body))
    service = NewsService(database, client)
    try:
        saved = await service.trigger_news_ingestion()
    finally:
        await client.close()

    assert saved == 0
    assert count_news(database) == 0


class ThreadRecordingPipeline(NewsIngestionPipeline):
    def __init__(self, database: Database) -> None:
        super().__init__(database)
        self.thread_ids: list[int] = []

    def ingest(self, grouped):
        self.thread_ids.append(threading.get_ident())
        return super().ingest(grouped)


@pytest.mark.asyncio
async def test_trigger_ingestion_writes_off_the_event_loop_thread(database):
    client = generator_client(json_handler(GENERATED_NEWS))
    pipeline = ThreadRecordingPipeline(database)
    service = NewsService(database, client, pipeline)
    try:
        assert await service.trigger_news_ingestion() == 2
    finally:
        await client.close()

    assert pipeline.thread_ids
    assert threading.get_ident() not in pipeline.thread_ids
